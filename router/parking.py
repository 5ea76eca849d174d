import asyncio
import datetime
from fastapi import APIRouter, Depends, HTTPException, Request, status, WebSocket, WebSocketDisconnect
from models.parking_model import (
    AllocationResult,
    ArchivedBooking,
    BookingRequest,
    CancelRequest,
    LayoutExport,
    ParkingSlot,
    PricingConfig,
    RouteOption,
    RoutesRequest,
    SlotStatusUpdate,
)
from models.lot_graph import LotGraph
from router.dependencies import get_config, get_graph, get_store, http_error
from utils.allocator import allocate_nearest
from utils.billing import calculate_billed_hours, calculate_cost, is_penalty_applied
from utils.errors import ParkingError
from utils.pathfinding import find_k_paths
from utils.slot_store import SlotStore
from utils.timing import ensure_utc
import logging
from typing import Dict, List, Optional

# Create Logger
logger = logging.getLogger(__name__)


# Global Vars
MODULE_NAME = "parking"
MODULE_PREFIX = "/parking"
MODULE_TAGS = [MODULE_NAME]

FORCE_ACTIONS = ("force", "reset")


# FastAPI Instance
router = APIRouter(prefix=MODULE_PREFIX, tags=MODULE_TAGS)


# Routes
@router.get("")
def index():
    return {
        "message": f"Hello to module: {MODULE_NAME}",
        "module": MODULE_NAME,
    }


@router.get("/layout", response_model=LayoutExport)
def get_layout(graph: LotGraph = Depends(get_graph)):
    return graph.export()


@router.get("/slots", response_model=Dict[str, ParkingSlot])
def get_slots(store: SlotStore = Depends(get_store)):
    return store.get_slots()


@router.post("/update-slot", response_model=ParkingSlot)
def update_slot_status(update: SlotStatusUpdate, store: SlotStore = Depends(get_store)):
    """
    Sensor / Admin status push. Any reading on a booked slot is
    ignored unless forced.
    """
    force = update.force or update.action in FORCE_ACTIONS
    try:
        return store.update_status(update.slot_id, update.status, force=force)
    except ParkingError as err:
        raise http_error(err)


@router.get("/path", response_model=AllocationResult)
def find_parking_path(
    start_node: Optional[str] = None,
    graph: LotGraph = Depends(get_graph),
    store: SlotStore = Depends(get_store),
    config=Depends(get_config),
):
    start_node = start_node or config.entrance_node
    try:
        allocation = allocate_nearest(graph, store.get_slots(), start_node)
    except ParkingError as err:
        raise http_error(err)

    if allocation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No available parking slots found.",
        )
    return allocation


@router.post("/routes", response_model=List[RouteOption])
def get_alternate_routes(
    routes: RoutesRequest,
    graph: LotGraph = Depends(get_graph),
    config=Depends(get_config),
):
    try:
        return find_k_paths(
            graph, routes.start_node, routes.end_node, routes.k or config.alt_routes_k
        )
    except ParkingError as err:
        raise http_error(err)


@router.post("/book", response_model=ParkingSlot, status_code=status.HTTP_201_CREATED)
def book_slot(
    booking: BookingRequest, request: Request, store: SlotStore = Depends(get_store)
):
    start_time = ensure_utc(booking.start_time) if booking.start_time else store.now()
    if booking.end_time is not None:
        end_time = ensure_utc(booking.end_time)
    elif booking.duration is not None:
        end_time = start_time + datetime.timedelta(hours=booking.duration)
    else:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Either end_time or duration is required",
        )

    # Pricing: any started hour is billed as a full hour
    pricing: PricingConfig = request.app.state.pricing
    billed_hours = calculate_billed_hours(start_time, end_time)

    try:
        return store.book(
            booking.slot_id,
            vehicle_type=booking.vehicle_type,
            vehicle_number=booking.vehicle_number,
            start_time=start_time,
            end_time=end_time,
            billed_hours=billed_hours,
            cost=calculate_cost(billed_hours, pricing.hourly_rate),
            penalty_applied=is_penalty_applied(start_time, end_time),
        )
    except ParkingError as err:
        raise http_error(err)


@router.post("/cancel", response_model=ParkingSlot)
def cancel_booking(cancel: CancelRequest, store: SlotStore = Depends(get_store)):
    try:
        return store.cancel(cancel.slot_id)
    except ParkingError as err:
        raise http_error(err)


@router.post("/reset", response_model=Dict[str, ParkingSlot])
def reset_slots(store: SlotStore = Depends(get_store)):
    """
    Admin: every slot back to FREE, bookings archived.
    """
    try:
        return store.reset_all()
    except ParkingError as err:
        raise http_error(err)


@router.get("/history", response_model=List[ArchivedBooking])
def get_booking_history(store: SlotStore = Depends(get_store)):
    return store.get_history()


@router.get("/config", response_model=PricingConfig)
def get_pricing_config(request: Request):
    return request.app.state.pricing


@router.post("/config", response_model=PricingConfig)
def update_pricing_config(pricing: PricingConfig, request: Request):
    request.app.state.pricing = pricing
    logger.info(f"Hourly rate set to {pricing.hourly_rate}")
    return pricing


# WebSocket
@router.websocket("/ws/slots")
async def websocket_slot_updates(websocket: WebSocket):
    await websocket.accept()
    store: SlotStore = websocket.app.state.store
    interval = websocket.app.state.config.ws_interval_seconds
    try:
        while True:
            data = {
                slot_id: slot.model_dump(mode="json")
                for slot_id, slot in store.get_slots().items()
            }

            # send data to client
            await websocket.send_json(data)

            # add some time before next update, waking up early on disconnect
            try:
                message = await asyncio.wait_for(websocket.receive(), timeout=interval)
            except asyncio.TimeoutError:
                continue

            # client payloads (text or binary) are ignored
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    logger.info("Slot feed client disconnected")
