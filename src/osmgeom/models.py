"""
OSM data models

Data classes for the read-only OSM entity graph: nodes, ways, relations and
the per-kind tag key sets that fix attribute table columns
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import GeometryKindError, UnknownKeyError


ENTITY_KINDS = ("node", "way", "relation")


@dataclass(frozen=True)
class OSMNode:
    """Represents an OSM node (point)"""
    id: int
    lon: float
    lat: float
    tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def coordinate(self) -> Tuple[float, float]:
        return (self.lon, self.lat)


@dataclass(frozen=True)
class OSMWay:
    """Represents an OSM way (line or polygon) as an ordered list of node ids"""
    id: int
    node_ids: Tuple[int, ...]
    tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_closed(self) -> bool:
        """A way is closed when its first and last node ids match"""
        return len(self.node_ids) > 1 and self.node_ids[0] == self.node_ids[-1]


@dataclass(frozen=True)
class OSMRelation:
    """Represents an OSM relation: ordered (way id, role) members plus tags"""
    id: int
    members: Tuple[Tuple[int, str], ...]
    tags: Mapping[str, str] = field(default_factory=dict)
    is_polygon: bool = False

    @property
    def member_ids(self) -> List[int]:
        return [way_id for way_id, _ in self.members]


class KeyIndex:
    """
    Immutable, sorted tag key set for one entity kind

    Maps each key to its attribute column index. Column identity is
    positional, so the order is lexicographic and never changes once built.
    """

    def __init__(self, kind: str, keys: Iterable[str] = ()):
        if kind not in ENTITY_KINDS:
            raise GeometryKindError(f"Unknown entity kind '{kind}' (expected one of {', '.join(ENTITY_KINDS)})")
        self.kind = kind
        self._keys = tuple(sorted(set(keys)))
        self._index = MappingProxyType({key: i for i, key in enumerate(self._keys)})

    @property
    def keys(self) -> Tuple[str, ...]:
        return self._keys

    def column(self, key: str, entity_id: Optional[int] = None) -> int:
        """Column index of a key; raises UnknownKeyError if the key was never seen"""
        try:
            return self._index[key]
        except KeyError:
            raise UnknownKeyError(self.kind, key, entity_id) from None

    def __contains__(self, key: str) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self):
        return iter(self._keys)

    def __eq__(self, other) -> bool:
        if not isinstance(other, KeyIndex):
            return NotImplemented
        return self.kind == other.kind and self._keys == other._keys

    def __repr__(self) -> str:
        return f"KeyIndex(kind={self.kind!r}, keys={list(self._keys)!r})"


@dataclass(frozen=True)
class UniqueVals:
    """Per-kind key indexes for nodes, ways and relations"""
    nodes: KeyIndex
    ways: KeyIndex
    relations: KeyIndex

    def for_kind(self, kind: str) -> KeyIndex:
        if kind == "node":
            return self.nodes
        if kind == "way":
            return self.ways
        if kind == "relation":
            return self.relations
        raise GeometryKindError(f"Unknown entity kind '{kind}' (expected one of {', '.join(ENTITY_KINDS)})")

    @classmethod
    def from_keys(
        cls,
        node_keys: Iterable[str] = (),
        way_keys: Iterable[str] = (),
        relation_keys: Iterable[str] = ()
    ) -> "UniqueVals":
        return cls(
            nodes=KeyIndex("node", node_keys),
            ways=KeyIndex("way", way_keys),
            relations=KeyIndex("relation", relation_keys),
        )

    @classmethod
    def from_graph(cls, graph: "EntityGraph") -> "UniqueVals":
        """Collect every tag key seen on each kind of entity in the graph"""
        node_keys = set()
        for node in graph.nodes.values():
            node_keys.update(node.tags)
        way_keys = set()
        for way in graph.ways.values():
            way_keys.update(way.tags)
        relation_keys = set()
        for relation in graph.relations:
            relation_keys.update(relation.tags)
        return cls.from_keys(node_keys, way_keys, relation_keys)


class EntityGraph:
    """
    Read-only view over the nodes, ways and relations of one OSM extract

    Nodes and ways are looked up by id; relations keep their document order.
    """

    def __init__(
        self,
        nodes: Iterable[OSMNode] = (),
        ways: Iterable[OSMWay] = (),
        relations: Iterable[OSMRelation] = ()
    ):
        node_map: Dict[int, OSMNode] = {}
        for node in nodes:
            node_map[node.id] = node
        way_map: Dict[int, OSMWay] = {}
        for way in ways:
            way_map[way.id] = way
        self._nodes = MappingProxyType(node_map)
        self._ways = MappingProxyType(way_map)
        self._relations = tuple(relations)

    @property
    def nodes(self) -> Mapping[int, OSMNode]:
        return self._nodes

    @property
    def ways(self) -> Mapping[int, OSMWay]:
        return self._ways

    @property
    def relations(self) -> Tuple[OSMRelation, ...]:
        return self._relations

    def sorted_node_ids(self) -> List[int]:
        return sorted(self._nodes)

    def sorted_way_ids(self) -> List[int]:
        return sorted(self._ways)

    def __repr__(self) -> str:
        return (f"EntityGraph(nodes={len(self._nodes)}, ways={len(self._ways)}, "
                f"relations={len(self._relations)})")
