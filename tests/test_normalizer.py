import pytest

from osmgeom.attributes import AttributeTable
from osmgeom.errors import GeometryKindError, StructuralMismatchError
from osmgeom.geometry import PointGeometry, TracedGeometry, WayGeometry
from osmgeom.normalizer import GeometryCollectionNormalizer


@pytest.fixture
def normalizer():
    return GeometryCollectionNormalizer()


def _points():
    return [PointGeometry(1, 0.0, 0.0), PointGeometry(2, 1.0, 1.0)]


def test_bundle_passes_metadata_through(normalizer):
    table = AttributeTable(("name",), ("1", "2"), (("a",), (None,)))
    bbox = (0.0, 0.0, 1.0, 1.0)
    crs = {"epsg": 4326}

    bundle = normalizer.normalize("points", ["1", "2"], _points(), table, bbox=bbox, crs=crs)

    assert len(bundle) == 2
    assert bundle.bbox is bbox
    assert bundle.crs is crs
    assert list(bundle)[0][0] == "1"


def test_row_count_must_match(normalizer):
    table = AttributeTable(("name",), ("1",), (("a",),))

    with pytest.raises(StructuralMismatchError) as excinfo:
        normalizer.normalize("points", ["1", "2"], _points(), table)

    assert excinfo.value.expected == 2
    assert excinfo.value.actual == 1
    assert "points attribute rows" in str(excinfo.value)


def test_label_count_must_match(normalizer):
    table = AttributeTable(("name",), ("1", "2"), (("a",), ("b",)))

    with pytest.raises(StructuralMismatchError):
        normalizer.normalize("points", ["1"], _points(), table)


def test_row_labels_must_line_up(normalizer):
    table = AttributeTable(("name",), ("2", "1"), (("a",), ("b",)))

    with pytest.raises(StructuralMismatchError):
        normalizer.normalize("points", ["1", "2"], _points(), table)


def test_parallel_sequences_are_rechecked(normalizer):
    traced = TracedGeometry(((0.0, 0.0), (1.0, 0.0)), ("1", "2"), (12, 12))
    # Bypass the constructor check to simulate a corrupted record
    object.__setattr__(traced, "member_ids", (12,))
    table = AttributeTable((), ("12",), ((),))

    with pytest.raises(StructuralMismatchError):
        normalizer.normalize("lines", ["12"], [WayGeometry(12, traced)], table)


def test_unknown_kind(normalizer):
    with pytest.raises(GeometryKindError):
        normalizer.normalize("triangles", [], [], AttributeTable((), (), ()))
