"""
OpenStreetMap entity graph to geometry conversion

Modular converter with separate components for:
- Models: Entity graph (OSMNode, OSMWay, OSMRelation, UniqueVals)
- Tracer: Way node ids to coordinates
- Attributes: Column-aligned tag tables
- Multilinestrings / Multipolygons: Relation assembly
- Normalizer: Alignment checks before output
- Converter: Main orchestrator class
- Parser / Presentation: Overpass JSON in, shapely / geopandas / GeoJSON out
"""

from .models import OSMNode, OSMWay, OSMRelation, EntityGraph, KeyIndex, UniqueVals
from .errors import (
    OSMGeometryError,
    MissingNodeError,
    MissingWayError,
    UnclosedRingError,
    UnknownKeyError,
    StructuralMismatchError,
    GeometryKindError,
    ConversionIssue,
)
from .converter import OSMGeometryConverter, ConversionResult
from .normalizer import GeometryBundle
from .parser import OSMResponseParser

__all__ = [
    "OSMNode",
    "OSMWay",
    "OSMRelation",
    "EntityGraph",
    "KeyIndex",
    "UniqueVals",
    "OSMGeometryError",
    "MissingNodeError",
    "MissingWayError",
    "UnclosedRingError",
    "UnknownKeyError",
    "StructuralMismatchError",
    "GeometryKindError",
    "ConversionIssue",
    "OSMGeometryConverter",
    "ConversionResult",
    "GeometryBundle",
    "OSMResponseParser",
]
