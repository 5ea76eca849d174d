from enum import Enum
from pydantic import BaseModel, Field
import datetime
from typing import Dict, List, Optional


class NodeKind(str, Enum):
    ENTRANCE = "ENTRANCE"
    JUNCTION = "JUNCTION"
    SLOT = "SLOT"


class SlotStatus(str, Enum):
    FREE = "FREE"
    OCCUPIED = "OCCUPIED"
    BOOKED = "BOOKED"


class ArchiveReason(str, Enum):
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    FORCED = "forced"
    RELEASED = "released"  # car left a slot it had booked
    RESET = "reset"


# Lot Topology
class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class LotNode(BaseModel):
    id: str
    kind: NodeKind = NodeKind.JUNCTION
    name: str = ""
    position: Position = Field(default_factory=Position)


class Neighbor(BaseModel):
    node: str
    weight: float


class LayoutExport(BaseModel):
    nodes: Dict[str, LotNode]
    adjacency: Dict[str, List[Neighbor]]


# Slot State
class BookingDetails(BaseModel):
    booking_id: str
    vehicle_type: str
    vehicle_number: str
    start_time: datetime.datetime
    end_time: datetime.datetime
    billed_hours: int
    cost: float
    penalty_applied: bool = False
    booked_at: datetime.datetime
    expires_at: datetime.datetime


class ParkingSlot(BaseModel):
    id: str
    status: SlotStatus = SlotStatus.FREE
    last_updated: datetime.datetime
    booking: Optional[BookingDetails] = None


class ArchivedBooking(BaseModel):
    slot_id: str
    reason: ArchiveReason
    archived_at: datetime.datetime
    booking: BookingDetails


# Routing
class AllocationResult(BaseModel):
    slot_id: str
    distance: float
    path: List[str]


class RouteOption(BaseModel):
    path: List[str]
    weight: float


# Gate
class VehicleCredential(BaseModel):
    rfid: str
    owner: str
    plate: str
    type: str = "General"


class GateDecision(BaseModel):
    authorized: bool = True
    command: str  # 'OPEN_GATE', 'DENY_FULL'
    message: str = ""
    prebooked: bool = False
    slot_id: Optional[str] = None
    distance: Optional[float] = None
    path: List[str] = Field(default_factory=list)
    vehicle: Optional[VehicleCredential] = None


# Requests
class SlotStatusUpdate(BaseModel):
    slot_id: str
    status: SlotStatus
    force: bool = False
    action: Optional[str] = None  # 'force' or 'reset'


MAX_BOOKING_HOURS = 24 * 365


class BookingRequest(BaseModel):
    slot_id: str
    vehicle_type: str
    vehicle_number: str
    start_time: Optional[datetime.datetime] = None
    end_time: Optional[datetime.datetime] = None
    duration: Optional[float] = Field(default=None, gt=0, le=MAX_BOOKING_HOURS)  # hours


class CancelRequest(BaseModel):
    slot_id: str


class RoutesRequest(BaseModel):
    start_node: str
    end_node: str
    k: Optional[int] = Field(default=None, ge=1, le=10)


class RfidRequest(BaseModel):
    rfid: str


class PricingConfig(BaseModel):
    hourly_rate: float = Field(default=50.0, gt=0)
