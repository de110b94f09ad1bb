"""
Multilinestring relations

Groups a non-polygon relation's member ways by role and emits one linestring
per role, each carrying a copy of the relation's attribute row
"""

from typing import Dict, List, Mapping, Optional

from loguru import logger

from .config import AssemblyConfig, get_config
from .attributes import AttributeTableBuilder
from .errors import ConversionIssue, MissingNodeError, MissingWayError
from .geometry import AssemblyResult, RoleLineGeometry, TracedGeometry
from .models import KeyIndex, OSMNode, OSMRelation, OSMWay
from .tracer import WayTracer


class MultilinestringAssembler:
    """Assembles non-polygon relations into per-role linestrings"""

    kind = "multilinestrings"

    def __init__(self, assembly_config: Optional[AssemblyConfig] = None):
        self.config = assembly_config or get_config().assembly

    @staticmethod
    def group_members_by_role(relation: OSMRelation) -> Dict[str, List[int]]:
        """
        Group member way ids by role

        Roles come out sorted ascending (the empty role first); way ids keep
        the relation's declared member order within each role.
        """
        groups: Dict[str, List[int]] = {}
        for way_id, role in relation.members:
            groups.setdefault(role, []).append(way_id)
        return {role: groups[role] for role in sorted(groups)}

    def role_label(self, relation_id: int, role: str) -> str:
        """Row label of one role group, e.g. '42-(no role)' or '42-forward'"""
        role_name = role if role else self.config.no_role_label
        return f"{relation_id}{self.config.role_separator}{role_name}"

    def assemble(
        self,
        relation: OSMRelation,
        ways: Mapping[int, OSMWay],
        nodes: Mapping[int, OSMNode],
        key_index: KeyIndex
    ) -> AssemblyResult:
        """
        Trace every role group of a relation

        Args:
            relation: A relation with is_polygon == False
            ways: Way map
            nodes: Node map
            key_index: Relation key set

        Returns:
            AssemblyResult with one RoleLineGeometry and one row per role
        """
        result = AssemblyResult()
        groups = self.group_members_by_role(relation)
        if not groups:
            logger.debug(f"Relation {relation.id} has no members, nothing to emit")
            return result

        relation_row = AttributeTableBuilder.build_row(relation.tags, key_index, relation.id)

        for role, way_ids in groups.items():
            label = self.role_label(relation.id, role)
            parts: List[TracedGeometry] = []
            traced_ids: List[int] = []
            for way_id in way_ids:
                try:
                    parts.append(WayTracer.trace_way(way_id, ways, nodes, relation.id))
                    traced_ids.append(way_id)
                except (MissingWayError, MissingNodeError) as e:
                    if self.config.strict:
                        raise
                    logger.warning(f"Relation {relation.id} role '{role}': skipping member way {way_id}: {e}")
                    result.issues.append(ConversionIssue(self.kind, relation.id, e, "dropped member"))

            if not parts:
                logger.warning(f"Relation {relation.id} role '{role}': no member way could be traced, dropping {label}")
                continue

            geometry = RoleLineGeometry(
                relation_id=relation.id,
                role=role,
                label=label,
                way_ids=tuple(traced_ids),
                traced=TracedGeometry.concat(parts)
            )
            result.add(geometry, label, AttributeTableBuilder.copy_row(relation_row))

        logger.debug(f"Relation {relation.id}: {len(result.geometries)} linestrings from {len(groups)} roles")
        return result
