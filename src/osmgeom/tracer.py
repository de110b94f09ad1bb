"""
Way tracing

Resolves a way's node id sequence into coordinates
"""

from typing import Mapping, Optional

from loguru import logger

from .errors import MissingNodeError, MissingWayError
from .geometry import TracedGeometry
from .models import OSMNode, OSMWay


class WayTracer:
    """Traces ways into coordinate sequences"""

    @staticmethod
    def trace_way(
        way_id: int,
        ways: Mapping[int, OSMWay],
        nodes: Mapping[int, OSMNode],
        relation_id: Optional[int] = None
    ) -> TracedGeometry:
        """
        Trace one way into an ordered coordinate sequence

        The whole trace is abandoned on the first unresolvable node; no
        coordinate is ever skipped or made up.

        Args:
            way_id: Id of the way to trace
            ways: Way map
            nodes: Node map
            relation_id: Parent relation, only used in error messages

        Returns:
            TracedGeometry with one coordinate, label and member id per node

        Raises:
            MissingWayError: the way itself is absent
            MissingNodeError: a referenced node is absent
        """
        way = ways.get(way_id)
        if way is None:
            raise MissingWayError(way_id, relation_id)

        coordinates = []
        labels = []
        for node_id in way.node_ids:
            node = nodes.get(node_id)
            if node is None:
                logger.debug(f"Way {way_id}: node {node_id} not in node map, abandoning trace")
                raise MissingNodeError(way_id, node_id)
            coordinates.append((node.lon, node.lat))
            labels.append(str(node_id))

        return TracedGeometry(
            coordinates=tuple(coordinates),
            labels=tuple(labels),
            member_ids=(way_id,) * len(coordinates)
        )

    @staticmethod
    def is_ring(way: OSMWay) -> bool:
        """Ring closure test on node ids (head == tail)"""
        return way.is_closed
