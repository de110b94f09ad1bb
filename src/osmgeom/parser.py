"""
OSM response parser

Parses decoded Overpass API JSON into an EntityGraph and its UniqueVals
"""

from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from .config import AssemblyConfig, get_config
from .models import EntityGraph, OSMNode, OSMRelation, OSMWay, UniqueVals


class OSMResponseParser:
    """Parses Overpass API responses"""

    def __init__(self, assembly_config: Optional[AssemblyConfig] = None):
        self.config = assembly_config or get_config().assembly

    def parse_elements(self, data: Dict[str, Any]) -> EntityGraph:
        """
        Parse Overpass response into an entity graph

        Handles both 'out body' (node references) and 'out geom' (direct
        geometry) formats. With 'out geom', nodes that are not listed as
        elements are recovered from the way geometry, position by position.

        Args:
            data: JSON response from Overpass API

        Returns:
            EntityGraph of nodes, ways and relations
        """
        nodes: Dict[int, OSMNode] = {}
        ways: List[OSMWay] = []
        relations: List[OSMRelation] = []
        geom_nodes: Dict[int, OSMNode] = {}

        for element in data.get("elements", []):
            element_type = element.get("type")
            tags = dict(element.get("tags", {}))
            if element_type == "node":
                nodes[element["id"]] = OSMNode(
                    id=element["id"],
                    lon=element["lon"],
                    lat=element["lat"],
                    tags=tags
                )
            elif element_type == "way":
                node_ids = tuple(element.get("nodes", []))
                geometry = element.get("geometry")
                if geometry and len(geometry) == len(node_ids):
                    for node_id, point in zip(node_ids, geometry):
                        if isinstance(point, dict):
                            # Format: {"lat": ..., "lon": ...}
                            lon, lat = point.get("lon"), point.get("lat")
                        else:
                            # Format: [lon, lat]
                            lon, lat = point[0], point[1]
                        if lon is not None and lat is not None:
                            geom_nodes.setdefault(node_id, OSMNode(id=node_id, lon=lon, lat=lat))
                ways.append(OSMWay(id=element["id"], node_ids=node_ids, tags=tags))
            elif element_type == "relation":
                members = tuple(
                    (member["ref"], member.get("role", "") or "")
                    for member in element.get("members", [])
                    if member.get("type") == "way"
                )
                relations.append(OSMRelation(
                    id=element["id"],
                    members=members,
                    tags=tags,
                    is_polygon=self.is_polygon_relation(tags)
                ))

        for node_id, node in geom_nodes.items():
            nodes.setdefault(node_id, node)

        graph = EntityGraph(nodes=nodes.values(), ways=ways, relations=relations)
        logger.info(f"Parsed {len(graph.nodes)} nodes, {len(graph.ways)} ways, {len(graph.relations)} relations")
        return graph

    def build(self, data: Dict[str, Any]) -> Tuple[EntityGraph, UniqueVals]:
        """Parse a response and collect the per-kind key sets from it"""
        graph = self.parse_elements(data)
        return graph, UniqueVals.from_graph(graph)

    def is_polygon_relation(self, tags: Dict[str, str]) -> bool:
        return tags.get("type") in self.config.polygon_relation_types

    @staticmethod
    def compute_bbox(graph: EntityGraph) -> Optional[Tuple[float, float, float, float]]:
        """(xmin, ymin, xmax, ymax) over all node coordinates, None for an empty graph"""
        if not graph.nodes:
            return None
        lons = [node.lon for node in graph.nodes.values()]
        lats = [node.lat for node in graph.nodes.values()]
        return (min(lons), min(lats), max(lons), max(lats))
