import logging
from typing import Mapping

from models.lot_graph import LotGraph
from models.parking_model import GateDecision, VehicleCredential
from utils.allocator import allocate_nearest
from utils.errors import Unauthorized, Unreachable
from utils.pathfinding import shortest_route
from utils.slot_store import SlotStore

# Create Logger
logger = logging.getLogger(__name__)


OPEN_GATE = "OPEN_GATE"
DENY_FULL = "DENY_FULL"
DENY = "DENY"


def authorize(
    rfid: str,
    vehicles: Mapping[str, VehicleCredential],
    graph: LotGraph,
    store: SlotStore,
    start_node: str,
) -> GateDecision:
    """
    Gate decision for a presented RFID tag.

    A vehicle holding an active booking is routed to its own slot;
    anyone else gets the nearest free slot. Opening the barrier is up
    to the caller.
    """
    vehicle = vehicles.get(rfid)
    if vehicle is None:
        logger.warning(f"Access Denied: Unknown Tag {rfid}")
        raise Unauthorized("Access Denied: Unauthorized Vehicle")

    logger.info(f"Access Granted: {vehicle.owner} ({vehicle.plate})")

    booked_slot = store.find_booking(vehicle.plate)
    if booked_slot is not None:
        try:
            route = shortest_route(graph, start_node, booked_slot.id)
        except Unreachable:
            logger.error(f"Booked slot {booked_slot.id} is unreachable from {start_node}")
        else:
            return GateDecision(
                command=OPEN_GATE,
                message="Access Granted: proceed to your booked slot",
                prebooked=True,
                slot_id=booked_slot.id,
                distance=route.weight,
                path=route.path,
                vehicle=vehicle,
            )

    allocation = allocate_nearest(graph, store.get_slots(), start_node)
    if allocation is None:
        return GateDecision(
            command=DENY_FULL,
            message="Welcome, but Parking Full!",
            vehicle=vehicle,
        )

    return GateDecision(
        command=OPEN_GATE,
        message="Access Granted",
        slot_id=allocation.slot_id,
        distance=allocation.distance,
        path=allocation.path,
        vehicle=vehicle,
    )
