"""
Shared fixtures: a small entity graph covering every geometry kind

    nodes  1-3   outer triangle            way 10 [1, 2, 3, 1]  closed
    nodes  4-6   hole inside the triangle  way 11 [4, 5, 6, 4]  closed
    node   7     lone tree                 ways 12-14 open segments
                                           way 15 [1, 2, 3]     open
                                           way 16 [1, 999]      missing node

    relation 100  multipolygon  (10 outer, 11 inner)
    relation 200  route         (12 "", 13 "", 14 "alt")
"""

import sys

import pytest
from loguru import logger

from osmgeom.config import AssemblyConfig, ConverterConfig
from osmgeom.models import EntityGraph, OSMNode, OSMRelation, OSMWay, UniqueVals


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "WARNING"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


setup_logging()


NODES = [
    OSMNode(1, 0.0, 0.0, {"name": "corner"}),
    OSMNode(2, 1.0, 0.0),
    OSMNode(3, 1.0, 1.0),
    OSMNode(4, 0.5, 0.1),
    OSMNode(5, 0.8, 0.1),
    OSMNode(6, 0.8, 0.4),
    OSMNode(7, 2.0, 2.0, {"natural": "tree"}),
]

WAYS = [
    OSMWay(10, (1, 2, 3, 1), {"building": "yes"}),
    OSMWay(11, (4, 5, 6, 4)),
    OSMWay(12, (1, 2), {"highway": "residential", "name": "Main Street"}),
    OSMWay(13, (2, 3), {"highway": "residential"}),
    OSMWay(14, (3, 7), {"highway": "footway"}),
    OSMWay(15, (1, 2, 3)),
    OSMWay(16, (1, 999), {"highway": "service"}),
]

FOREST = OSMRelation(
    100,
    ((10, "outer"), (11, "inner")),
    {"type": "multipolygon", "landuse": "forest"},
    is_polygon=True,
)

BUS_ROUTE = OSMRelation(
    200,
    ((12, ""), (13, ""), (14, "alt")),
    {"type": "route", "route": "bus"},
    is_polygon=False,
)


@pytest.fixture
def make_graph():
    """Factory for graphs sharing the base nodes and ways"""
    def _make(relations=(FOREST, BUS_ROUTE), extra_ways=()):
        return EntityGraph(nodes=NODES, ways=list(WAYS) + list(extra_ways), relations=relations)
    return _make


@pytest.fixture
def graph(make_graph):
    return make_graph()


@pytest.fixture
def unique_vals(graph):
    return UniqueVals.from_graph(graph)


@pytest.fixture
def make_config():
    def _make(**assembly):
        return ConverterConfig(assembly=AssemblyConfig(**assembly))
    return _make
