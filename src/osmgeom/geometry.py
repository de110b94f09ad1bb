"""
Geometry data models

Traced coordinate sequences and the geometry entries built from them.
Every traced geometry bundles coordinates, row labels and member ids in one
record so the three can never drift apart.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .errors import ConversionIssue, StructuralMismatchError


@dataclass(frozen=True)
class TracedGeometry:
    """
    Resolved coordinate sequence of one way or role group

    Attributes:
        coordinates: (lon, lat) pairs in path order
        labels: originating node id of each coordinate, as a string
        member_ids: id of the way each coordinate was traced from
    """
    coordinates: Tuple[Tuple[float, float], ...] = ()
    labels: Tuple[str, ...] = ()
    member_ids: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "coordinates", tuple(tuple(c) for c in self.coordinates))
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "member_ids", tuple(self.member_ids))
        n = len(self.coordinates)
        if len(self.labels) != n:
            raise StructuralMismatchError("traced geometry labels", n, len(self.labels))
        if len(self.member_ids) != n:
            raise StructuralMismatchError("traced geometry member ids", n, len(self.member_ids))

    def __len__(self) -> int:
        return len(self.coordinates)

    @property
    def is_closed(self) -> bool:
        """Head and tail come from the same node"""
        return len(self.labels) > 1 and self.labels[0] == self.labels[-1]

    @classmethod
    def concat(cls, parts: Iterable["TracedGeometry"]) -> "TracedGeometry":
        """Literal concatenation of several traces, in the given order"""
        coordinates: List[Tuple[float, float]] = []
        labels: List[str] = []
        member_ids: List[int] = []
        for part in parts:
            coordinates.extend(part.coordinates)
            labels.extend(part.labels)
            member_ids.extend(part.member_ids)
        return cls(tuple(coordinates), tuple(labels), tuple(member_ids))


@dataclass(frozen=True)
class PointGeometry:
    """A single node"""
    node_id: int
    lon: float
    lat: float

    @property
    def label(self) -> str:
        return str(self.node_id)

    def traced_parts(self) -> Tuple[TracedGeometry, ...]:
        return (TracedGeometry(((self.lon, self.lat),), (self.label,), (self.node_id,)),)


@dataclass(frozen=True)
class WayGeometry:
    """A traced way: a linestring when open, a single-ring polygon when closed"""
    way_id: int
    traced: TracedGeometry

    @property
    def label(self) -> str:
        return str(self.way_id)

    @property
    def closed(self) -> bool:
        return self.traced.is_closed

    def traced_parts(self) -> Tuple[TracedGeometry, ...]:
        return (self.traced,)


@dataclass(frozen=True)
class RoleLineGeometry:
    """All member ways of one role in a non-polygon relation, concatenated"""
    relation_id: int
    role: str
    label: str
    way_ids: Tuple[int, ...]
    traced: TracedGeometry

    def traced_parts(self) -> Tuple[TracedGeometry, ...]:
        return (self.traced,)


@dataclass(frozen=True)
class Ring:
    """One member way of a polygon relation"""
    way_id: int
    role: str
    traced: TracedGeometry
    closed: bool = True

    @property
    def label(self) -> str:
        return str(self.way_id)


@dataclass(frozen=True)
class MultipolygonGeometry:
    """Flat, ordered ring sequence of one polygon relation"""
    relation_id: int
    rings: Tuple[Ring, ...] = field(default_factory=tuple)

    @property
    def label(self) -> str:
        return str(self.relation_id)

    @property
    def ring_labels(self) -> Tuple[str, ...]:
        return tuple(ring.label for ring in self.rings)

    def rings_with_role(self, role: str) -> List[Ring]:
        return [ring for ring in self.rings if ring.role == role]

    def traced_parts(self) -> Tuple[TracedGeometry, ...]:
        return tuple(ring.traced for ring in self.rings)


@dataclass
class AssemblyResult:
    """Geometries, row labels and attribute rows produced for one entity"""
    geometries: List[object] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)
    rows: List[Tuple[Optional[str], ...]] = field(default_factory=list)
    issues: List[ConversionIssue] = field(default_factory=list)

    def add(self, geometry, label: str, row: Tuple[Optional[str], ...]):
        self.geometries.append(geometry)
        self.labels.append(label)
        self.rows.append(row)
