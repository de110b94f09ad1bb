import pytest

from osmgeom.errors import MissingNodeError, MissingWayError, StructuralMismatchError
from osmgeom.geometry import TracedGeometry
from osmgeom.tracer import WayTracer


def test_trace_closed_way_keeps_closure(graph):
    traced = WayTracer.trace_way(10, graph.ways, graph.nodes)

    assert traced.coordinates == ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0))
    assert traced.labels == ("1", "2", "3", "1")
    assert traced.member_ids == (10, 10, 10, 10)
    assert traced.coordinates[0] == traced.coordinates[-1]
    assert traced.is_closed


@pytest.mark.parametrize("way_id", [10, 11, 12, 13, 14, 15])
def test_closure_survives_coordinate_resolution(graph, way_id):
    way = graph.ways[way_id]
    traced = WayTracer.trace_way(way_id, graph.ways, graph.nodes)

    assert len(traced) == len(way.node_ids)
    assert WayTracer.is_ring(way) == traced.is_closed
    if way.is_closed:
        assert traced.coordinates[0] == traced.coordinates[-1]


def test_open_way_is_not_a_ring(graph):
    assert not WayTracer.is_ring(graph.ways[15])
    assert not WayTracer.trace_way(15, graph.ways, graph.nodes).is_closed


def test_missing_node_names_node_and_way(graph):
    with pytest.raises(MissingNodeError) as excinfo:
        WayTracer.trace_way(16, graph.ways, graph.nodes)

    assert excinfo.value.node_id == 999
    assert excinfo.value.way_id == 16
    assert "999" in str(excinfo.value) and "16" in str(excinfo.value)


def test_missing_way(graph):
    with pytest.raises(MissingWayError) as excinfo:
        WayTracer.trace_way(404, graph.ways, graph.nodes, relation_id=100)

    assert excinfo.value.way_id == 404
    assert excinfo.value.relation_id == 100


def test_traced_geometry_rejects_misaligned_sequences():
    with pytest.raises(StructuralMismatchError):
        TracedGeometry(((0.0, 0.0), (1.0, 1.0)), ("1",), (5, 5))
    with pytest.raises(StructuralMismatchError):
        TracedGeometry(((0.0, 0.0),), ("1",), ())


def test_concat_is_literal(graph):
    a = WayTracer.trace_way(12, graph.ways, graph.nodes)
    b = WayTracer.trace_way(13, graph.ways, graph.nodes)
    joined = TracedGeometry.concat([a, b])

    assert joined.coordinates == a.coordinates + b.coordinates
    assert joined.labels == ("1", "2", "2", "3")
    assert joined.member_ids == (12, 12, 13, 13)
