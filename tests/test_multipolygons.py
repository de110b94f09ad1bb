import pytest

from osmgeom.config import AssemblyConfig
from osmgeom.errors import UnclosedRingError
from osmgeom.models import OSMRelation
from osmgeom.multipolygons import MultipolygonAssembler

from conftest import FOREST


OPEN_RING = OSMRelation(400, ((10, "outer"), (15, "outer")), {"type": "multipolygon"}, is_polygon=True)


def test_one_ring_per_member_in_order(graph, unique_vals):
    result = MultipolygonAssembler(AssemblyConfig()).assemble(
        FOREST, graph.ways, graph.nodes, unique_vals.relations
    )

    assert result.labels == ["100"]
    assert len(result.rows) == 1
    (multipolygon,) = result.geometries
    assert multipolygon.ring_labels == ("10", "11")
    assert [ring.role for ring in multipolygon.rings] == ["outer", "inner"]
    assert all(ring.closed for ring in multipolygon.rings)
    assert multipolygon.rings[1].traced.labels == ("4", "5", "6", "4")


def test_relation_row_uses_relation_keys(graph, unique_vals):
    result = MultipolygonAssembler(AssemblyConfig()).assemble(
        FOREST, graph.ways, graph.nodes, unique_vals.relations
    )

    row = dict(zip(unique_vals.relations.keys, result.rows[0]))
    assert row == {"landuse": "forest", "route": None, "type": "multipolygon"}


def test_unclosed_ring_is_flagged_not_repaired(graph, unique_vals):
    result = MultipolygonAssembler(AssemblyConfig(unclosed_ring_policy="flag")).assemble(
        OPEN_RING, graph.ways, graph.nodes, unique_vals.relations
    )

    ring = result.geometries[0].rings[1]
    assert not ring.closed
    assert ring.traced.labels == ("1", "2", "3")
    assert len(result.issues) == 1
    assert isinstance(result.issues[0].error, UnclosedRingError)
    assert result.issues[0].error.way_id == 15
    assert result.issues[0].action == "flagged ring"


def test_unclosed_ring_rejects_relation(graph, unique_vals):
    result = MultipolygonAssembler(AssemblyConfig(unclosed_ring_policy="reject")).assemble(
        OPEN_RING, graph.ways, graph.nodes, unique_vals.relations
    )

    assert result.geometries == []
    assert result.rows == []
    assert result.issues[0].action == "dropped relation"


def test_unclosed_ring_raises(graph, unique_vals):
    assembler = MultipolygonAssembler(AssemblyConfig(unclosed_ring_policy="raise"))

    with pytest.raises(UnclosedRingError) as excinfo:
        assembler.assemble(OPEN_RING, graph.ways, graph.nodes, unique_vals.relations)

    assert excinfo.value.way_id == 15
    assert excinfo.value.relation_id == 400


def test_missing_member_is_dropped(graph, unique_vals):
    relation = OSMRelation(401, ((404, "outer"), (10, "outer")), {"type": "multipolygon"}, is_polygon=True)

    result = MultipolygonAssembler(AssemblyConfig()).assemble(
        relation, graph.ways, graph.nodes, unique_vals.relations
    )

    assert result.geometries[0].ring_labels == ("10",)
    assert result.issues[0].action == "dropped member"


def test_relation_with_no_traceable_rings_is_dropped(graph, unique_vals):
    relation = OSMRelation(402, ((16, "outer"),), {"type": "multipolygon"}, is_polygon=True)

    result = MultipolygonAssembler(AssemblyConfig()).assemble(
        relation, graph.ways, graph.nodes, unique_vals.relations
    )

    assert result.geometries == []
    assert [issue.action for issue in result.issues] == ["dropped member", "dropped relation"]
    assert result.issues[-1].entity_id == 402
