"""
Multipolygon relations

Traces each member way of a polygon relation into a ring. Rings stay in
member order as a flat sequence annotated by role; pairing holes with
shells is left to the presentation layer.
"""

from typing import List, Mapping, Optional

from loguru import logger

from .config import AssemblyConfig, get_config
from .attributes import AttributeTableBuilder
from .errors import ConversionIssue, MissingNodeError, MissingWayError, UnclosedRingError
from .geometry import AssemblyResult, MultipolygonGeometry, Ring
from .models import KeyIndex, OSMNode, OSMRelation, OSMWay
from .tracer import WayTracer


class MultipolygonAssembler:
    """Assembles polygon relations ("multipolygon", "boundary") into ring collections"""

    kind = "multipolygons"

    def __init__(self, assembly_config: Optional[AssemblyConfig] = None):
        self.config = assembly_config or get_config().assembly

    def assemble(
        self,
        relation: OSMRelation,
        ways: Mapping[int, OSMWay],
        nodes: Mapping[int, OSMNode],
        key_index: KeyIndex
    ) -> AssemblyResult:
        """
        Trace a polygon relation into one MultipolygonGeometry

        Unclosed rings are never closed by repeating the first point. They
        are handled according to config.unclosed_ring_policy.

        Args:
            relation: A relation with is_polygon == True
            ways: Way map
            nodes: Node map
            key_index: Relation key set (shared with multilinestrings)

        Returns:
            AssemblyResult holding at most one geometry and one row

        Raises:
            UnclosedRingError: policy is "raise" (or strict mode) and a ring is open
        """
        result = AssemblyResult()
        if not relation.members:
            logger.debug(f"Relation {relation.id} has no members, nothing to emit")
            return result

        policy = self.config.unclosed_ring_policy
        rings: List[Ring] = []
        for way_id, role in relation.members:
            try:
                traced = WayTracer.trace_way(way_id, ways, nodes, relation.id)
            except (MissingWayError, MissingNodeError) as e:
                if self.config.strict:
                    raise
                logger.warning(f"Relation {relation.id}: skipping {role or 'unlabelled'} ring {way_id}: {e}")
                result.issues.append(ConversionIssue(self.kind, relation.id, e, "dropped member"))
                continue

            closed = traced.is_closed
            if not closed:
                error = UnclosedRingError(relation.id, way_id)
                if policy == "raise" or self.config.strict:
                    logger.error(str(error))
                    raise error
                if policy == "reject":
                    logger.warning(f"{error}; rejecting relation {relation.id}")
                    result.issues.append(ConversionIssue(self.kind, relation.id, error, "dropped relation"))
                    return result
                logger.warning(f"{error}; keeping it flagged as unclosed")
                result.issues.append(ConversionIssue(self.kind, relation.id, error, "flagged ring"))

            rings.append(Ring(way_id=way_id, role=role, traced=traced, closed=closed))

        if not rings:
            logger.warning(f"Relation {relation.id}: no member way could be traced, dropping relation")
            result.issues.append(ConversionIssue(self.kind, relation.id, result.issues[-1].error, "dropped relation"))
            return result

        row = AttributeTableBuilder.build_row(relation.tags, key_index, relation.id)
        result.add(MultipolygonGeometry(relation_id=relation.id, rings=tuple(rings)), str(relation.id), row)
        logger.debug(f"Relation {relation.id}: {len(rings)} rings "
                     f"({sum(1 for r in rings if r.role == 'outer')} outer, "
                     f"{sum(1 for r in rings if r.role == 'inner')} inner)")
        return result
