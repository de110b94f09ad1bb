"""
Main OSM geometry converter

Orchestrates tracing, relation assembly, attribute tables and normalization
for every requested geometry kind
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from loguru import logger

from .attributes import AttributeTableBuilder
from .config import ConverterConfig, GEOMETRY_KINDS, get_config, validate_config
from .errors import ConversionIssue, GeometryKindError, MissingNodeError, MissingWayError
from .geometry import AssemblyResult, PointGeometry, WayGeometry
from .models import EntityGraph, OSMRelation, UniqueVals
from .multilinestrings import MultilinestringAssembler
from .multipolygons import MultipolygonAssembler
from .normalizer import GeometryBundle, GeometryCollectionNormalizer
from .tracer import WayTracer


@dataclass
class ConversionResult:
    """Bundles per geometry kind plus every recoverable issue met on the way"""
    bundles: Dict[str, GeometryBundle] = field(default_factory=dict)
    issues: List[ConversionIssue] = field(default_factory=list)

    def __getitem__(self, kind: str) -> GeometryBundle:
        return self.bundles[kind]

    def __contains__(self, kind: str) -> bool:
        return kind in self.bundles

    @property
    def kinds(self) -> List[str]:
        return list(self.bundles)

    def summary(self) -> Dict[str, int]:
        return {kind: len(bundle) for kind, bundle in self.bundles.items()}


class OSMGeometryConverter:
    """
    Convert an OSM entity graph into points, lines, polygons,
    multipolygons and multilinestrings with aligned attribute tables

    The graph is only read. Per-entity work can be spread over a thread
    pool; results are always merged back in input order.
    """

    def __init__(self, config: Optional[ConverterConfig] = None):
        self.config = config or get_config()
        validate_config(self.config)
        self.tracer = WayTracer()
        self.table_builder = AttributeTableBuilder()
        self.multipolygon_assembler = MultipolygonAssembler(self.config.assembly)
        self.multilinestring_assembler = MultilinestringAssembler(self.config.assembly)
        self.normalizer = GeometryCollectionNormalizer()

    def convert(
        self,
        graph: EntityGraph,
        unique_vals: UniqueVals,
        bbox: Optional[Any] = None,
        crs: Optional[Dict[str, Any]] = None,
        kinds: Optional[Iterable[str]] = None
    ) -> ConversionResult:
        """
        Convert the graph for every requested geometry kind

        Args:
            graph: Read-only entity graph
            unique_vals: Per-kind key sets built from the same graph
            bbox: Bounding box, attached to every bundle unchanged
            crs: CRS metadata, attached unchanged (defaults to EPSG:4326)
            kinds: Subset of GEOMETRY_KINDS (defaults to config.kinds)

        Returns:
            ConversionResult with one GeometryBundle per requested kind

        Raises:
            GeometryKindError: unknown kind or wrong argument types, before any tracing
            UnknownKeyError: a tag key is missing from unique_vals
            StructuralMismatchError: collections ended up misaligned
        """
        requested = self._resolve_kinds(kinds)
        if not isinstance(graph, EntityGraph):
            raise GeometryKindError(f"graph must be an EntityGraph, got {type(graph).__name__}")
        if not isinstance(unique_vals, UniqueVals):
            raise GeometryKindError(f"unique_vals must be UniqueVals, got {type(unique_vals).__name__}")
        if crs is None:
            crs = dict(self.config.output.default_crs)

        logger.info(f"Converting {graph!r} into {', '.join(requested)}")

        result = ConversionResult()
        collected: Dict[str, AssemblyResult] = {}

        if "points" in requested:
            collected["points"] = self._convert_points(graph, unique_vals)
        if "lines" in requested or "polygons" in requested:
            lines, polygons = self._convert_ways(graph, unique_vals, requested)
            if "lines" in requested:
                collected["lines"] = lines
            if "polygons" in requested:
                collected["polygons"] = polygons
        if "multipolygons" in requested or "multilinestrings" in requested:
            multipolygons, multilinestrings = self._convert_relations(graph, unique_vals, requested)
            if "multipolygons" in requested:
                collected["multipolygons"] = multipolygons
            if "multilinestrings" in requested:
                collected["multilinestrings"] = multilinestrings

        for kind in GEOMETRY_KINDS:
            if kind not in collected:
                continue
            assembled = collected[kind]
            key_index = unique_vals.for_kind(self._entity_kind(kind))
            table = self.table_builder.from_rows(assembled.labels, assembled.rows, key_index)
            result.bundles[kind] = self.normalizer.normalize(
                kind, assembled.labels, assembled.geometries, table, bbox=bbox, crs=crs
            )
            result.issues.extend(assembled.issues)

        logger.info("Conversion results: " + ", ".join(f"{len(b)} {k}" for k, b in result.bundles.items()))
        if result.issues:
            logger.warning(f"{len(result.issues)} entities converted with issues")
        return result

    def _resolve_kinds(self, kinds: Optional[Iterable[str]]) -> List[str]:
        if kinds is None:
            kinds = self.config.kinds
        elif isinstance(kinds, str):
            kinds = [kinds]
        kinds = list(kinds)
        unknown = [k for k in kinds if k not in GEOMETRY_KINDS]
        if unknown:
            raise GeometryKindError(
                f"Unsupported geometry kind(s): {', '.join(map(str, unknown))} "
                f"(expected any of {', '.join(GEOMETRY_KINDS)})"
            )
        if not kinds:
            raise GeometryKindError("At least one geometry kind must be requested")
        return [k for k in GEOMETRY_KINDS if k in kinds]

    @staticmethod
    def _entity_kind(kind: str) -> str:
        if kind == "points":
            return "node"
        if kind in ("lines", "polygons"):
            return "way"
        return "relation"

    def _map(self, func: Callable, items: Sequence) -> List:
        """Apply func to each item, keeping input order whatever the worker count"""
        workers = self.config.assembly.max_workers
        if workers <= 1 or len(items) < 2:
            return [func(item) for item in items]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(func, items))

    def _convert_points(self, graph: EntityGraph, unique_vals: UniqueVals) -> AssemblyResult:
        """Every node becomes a point, in ascending id order"""
        result = AssemblyResult()
        key_index = unique_vals.nodes
        for node_id in graph.sorted_node_ids():
            node = graph.nodes[node_id]
            row = self.table_builder.build_row(node.tags, key_index, node_id)
            result.add(PointGeometry(node_id, node.lon, node.lat), str(node_id), row)
        logger.debug(f"Traced {len(result.geometries)} points")
        return result

    def _convert_ways(self, graph: EntityGraph, unique_vals: UniqueVals, requested: List[str]):
        """
        Trace ways in ascending id order

        Closed ways (head id == tail id) become polygons, all others lines.
        Ways that cannot be traced are skipped and reported as issues.
        """
        lines, polygons = AssemblyResult(), AssemblyResult()
        key_index = unique_vals.ways
        strict = self.config.assembly.strict

        way_ids = [
            way_id for way_id in graph.sorted_way_ids()
            if ("polygons" if self.tracer.is_ring(graph.ways[way_id]) else "lines") in requested
        ]

        def trace_one(way_id: int):
            way = graph.ways[way_id]
            kind = "polygons" if self.tracer.is_ring(way) else "lines"
            try:
                traced = self.tracer.trace_way(way_id, graph.ways, graph.nodes)
            except (MissingNodeError, MissingWayError) as e:
                if strict:
                    raise
                logger.warning(f"Skipping way {way_id}: {e}")
                return kind, None, None, ConversionIssue(kind, way_id, e, "skipped way")
            row = self.table_builder.build_row(way.tags, key_index, way_id)
            return kind, WayGeometry(way_id, traced), row, None

        for kind, geometry, row, issue in self._map(trace_one, way_ids):
            target = polygons if kind == "polygons" else lines
            if issue is not None:
                target.issues.append(issue)
                continue
            target.add(geometry, geometry.label, row)

        logger.debug(f"Traced {len(lines.geometries)} lines and {len(polygons.geometries)} polygons")
        return lines, polygons

    def _convert_relations(self, graph: EntityGraph, unique_vals: UniqueVals, requested: List[str]):
        """Assemble relations in document order, split by the polygon flag"""
        multipolygons, multilinestrings = AssemblyResult(), AssemblyResult()
        key_index = unique_vals.relations

        relations = [
            rel for rel in graph.relations
            if ("multipolygons" if rel.is_polygon else "multilinestrings") in requested
        ]

        def assemble_one(relation: OSMRelation) -> AssemblyResult:
            if relation.is_polygon:
                return self.multipolygon_assembler.assemble(relation, graph.ways, graph.nodes, key_index)
            return self.multilinestring_assembler.assemble(relation, graph.ways, graph.nodes, key_index)

        for relation, assembled in zip(relations, self._map(assemble_one, relations)):
            target = multipolygons if relation.is_polygon else multilinestrings
            for geometry, label, row in zip(assembled.geometries, assembled.labels, assembled.rows):
                target.add(geometry, label, row)
            target.issues.extend(assembled.issues)

        logger.debug(f"Assembled {len(multipolygons.geometries)} multipolygons and "
                     f"{len(multilinestrings.geometries)} multilinestrings")
        return multipolygons, multilinestrings
