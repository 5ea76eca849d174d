import logging
import math
from typing import Mapping, Optional

from models.lot_graph import LotGraph
from models.parking_model import AllocationResult, ParkingSlot, SlotStatus
from utils.pathfinding import build_path, dijkstra

# Create Logger
logger = logging.getLogger(__name__)


def allocate_nearest(
    graph: LotGraph, slots: Mapping[str, ParkingSlot], start_node: str
) -> Optional[AllocationResult]:
    """
    Recommend the nearest FREE slot from ``start_node``.

    Nothing is reserved here: the caller books the slot afterwards and
    the booking re-checks that it is still FREE. Occupied and booked
    slots stay walkable, they just cannot be the destination. Ties go to
    the lowest slot id. Returns None when no free slot is reachable.
    """
    free_slots = [
        slot_id
        for slot_id in graph.slot_ids()
        if slot_id in slots and slots[slot_id].status == SlotStatus.FREE
    ]
    if not free_slots:
        logger.info("No free slots in the lot")
        return None

    distances, previous = dijkstra(graph, start_node)
    logger.info(f"Found {len(free_slots)} free slots: {free_slots}")

    nearest_slot_id = None
    min_distance = math.inf
    for slot_id in free_slots:
        if distances[slot_id] < min_distance:
            min_distance = distances[slot_id]
            nearest_slot_id = slot_id

    if nearest_slot_id is None:
        logger.warning(
            f"No reachable free slots from {start_node}. Check graph connectivity."
        )
        return None

    logger.info(f"Nearest slot: {nearest_slot_id}, Distance: {min_distance}")
    return AllocationResult(
        slot_id=nearest_slot_id,
        distance=min_distance,
        path=build_path(previous, start_node, nearest_slot_id),
    )
