"""
Conversion errors

Exception hierarchy raised while turning an OSM entity graph into geometries
"""

from dataclasses import dataclass
from typing import Optional


class OSMGeometryError(Exception):
    """Base class for all conversion errors"""


class MissingNodeError(OSMGeometryError):
    """A way references a node id that is not in the node map"""

    def __init__(self, way_id: int, node_id: int):
        self.way_id = way_id
        self.node_id = node_id
        super().__init__(f"Way {way_id} references missing node {node_id}")


class MissingWayError(OSMGeometryError):
    """A way id (requested directly or as a relation member) is not in the way map"""

    def __init__(self, way_id: int, relation_id: Optional[int] = None):
        self.way_id = way_id
        self.relation_id = relation_id
        if relation_id is None:
            message = f"Way {way_id} not found"
        else:
            message = f"Relation {relation_id} references missing way {way_id}"
        super().__init__(message)


class UnclosedRingError(OSMGeometryError):
    """A multipolygon member way does not close on itself"""

    def __init__(self, relation_id: int, way_id: int):
        self.relation_id = relation_id
        self.way_id = way_id
        super().__init__(f"Relation {relation_id}: member way {way_id} does not form a closed ring")


class UnknownKeyError(OSMGeometryError):
    """A tag key is missing from the precomputed key set of its kind"""

    def __init__(self, kind: str, key: str, entity_id: Optional[int] = None):
        self.kind = kind
        self.key = key
        self.entity_id = entity_id
        where = f" on {kind} {entity_id}" if entity_id is not None else ""
        super().__init__(f"Tag key '{key}'{where} is not in the {kind} key set")


class StructuralMismatchError(OSMGeometryError):
    """Parallel collections that must stay aligned have diverged"""

    def __init__(self, collection: str, expected: int, actual: int, detail: str = ""):
        self.collection = collection
        self.expected = expected
        self.actual = actual
        message = f"{collection}: expected length {expected}, got {actual}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class GeometryKindError(OSMGeometryError, ValueError):
    """An unsupported geometry kind or malformed argument was passed in"""


@dataclass(frozen=True)
class ConversionIssue:
    """A recoverable problem met while converting one entity"""
    kind: str
    entity_id: int
    error: OSMGeometryError
    action: str

    @property
    def message(self) -> str:
        return f"{self.kind} {self.entity_id}: {self.error} ({self.action})"
