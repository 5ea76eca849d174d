import datetime
import json
import logging
import os
import tempfile
import threading
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from models.parking_model import (
    ArchiveReason,
    ArchivedBooking,
    BookingDetails,
    ParkingSlot,
    SlotStatus,
)
from utils.billing import generate_booking_id
from utils.errors import (
    InvalidStatusUpdate,
    InvalidTimeWindow,
    NotFound,
    PersistenceFailure,
    SlotUnavailable,
)
from utils.timing import ensure_utc, utc_now

# Create Logger
logger = logging.getLogger(__name__)


DEFAULT_HISTORY_LIMIT = 200


def normalize_plate(plate: str) -> str:
    return "".join(plate.split()).upper()


class SlotStore:
    """
    Authoritative FREE / OCCUPIED / BOOKED state for every slot.

    Every mutation runs under one lock, is persisted, and only then
    becomes visible. Committed ``ParkingSlot`` objects are never mutated:
    a transition builds a new mapping and swaps it in, so readers simply
    take the current mapping without waiting on writers.

    Transitions:
        FREE     --book-->            BOOKED    (end time in the future)
        FREE     --sensor occupied--> OCCUPIED
        OCCUPIED --sensor free-->     FREE
        BOOKED   --sensor reading-->  BOOKED    (ignored unless forced)
        any      --force occupied-->  OCCUPIED  (booking kept until release)
        BOOKED   --cancel / force-->  FREE
        BOOKED   --expiry sweep-->    FREE
    Booking details are archived whenever a slot goes back to FREE.
    """

    def __init__(
        self,
        slot_ids: Iterable[str],
        state_filename: Optional[str] = None,
        clock: Callable[[], datetime.datetime] = utc_now,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self._lock = threading.RLock()
        self._clock = clock
        self._filename = state_filename
        self._history_limit = history_limit
        self._slots, self._history = self._load(list(slot_ids))

    # Reads
    def now(self) -> datetime.datetime:
        return self._clock()

    def get_slots(self) -> Dict[str, ParkingSlot]:
        return dict(self._slots)

    def get_slot(self, slot_id: str) -> ParkingSlot:
        slot = self._slots.get(slot_id)
        if slot is None:
            raise NotFound(f"Slot not found: {slot_id}")
        return slot

    def get_history(self) -> List[ArchivedBooking]:
        return list(self._history)

    def find_booking(self, vehicle_number: str) -> Optional[ParkingSlot]:
        wanted = normalize_plate(vehicle_number)
        for slot in self._slots.values():
            if (
                slot.status == SlotStatus.BOOKED
                and slot.booking is not None
                and normalize_plate(slot.booking.vehicle_number) == wanted
            ):
                return slot
        return None

    # Mutations
    def update_status(self, slot_id: str, status, force: bool = False) -> ParkingSlot:
        status = SlotStatus(status)
        if status == SlotStatus.BOOKED:
            raise InvalidStatusUpdate("Slots can only become BOOKED through a booking")

        with self._lock:
            current = self.get_slot(slot_id)

            # a stray sensor reading must not clobber a paid reservation
            if current.status == SlotStatus.BOOKED and not force:
                logger.info(f"Ignoring {status.value} update for booked slot {slot_id}")
                return current

            now = self._clock()
            if status == SlotStatus.FREE:
                reason = (
                    ArchiveReason.FORCED
                    if current.status == SlotStatus.BOOKED
                    else ArchiveReason.RELEASED
                )
                updated, archived = self._released(current, reason, now)
            else:
                updated = current.model_copy(update={"status": status, "last_updated": now})
                archived = []

            self._commit({slot_id: updated}, archived)
            logger.info(f"Slot {slot_id}: {current.status.value} -> {status.value}")
            return updated

    def book(
        self,
        slot_id: str,
        vehicle_type: str,
        vehicle_number: str,
        end_time: datetime.datetime,
        billed_hours: int,
        cost: float,
        start_time: Optional[datetime.datetime] = None,
        penalty_applied: bool = False,
    ) -> ParkingSlot:
        with self._lock:
            current = self.get_slot(slot_id)
            now = self._clock()
            start_time = ensure_utc(start_time) if start_time else now
            end_time = ensure_utc(end_time)

            if end_time <= now or end_time <= start_time:
                raise InvalidTimeWindow(
                    f"Booking must end after {max(now, start_time).isoformat()}"
                )
            if current.status != SlotStatus.FREE:
                raise SlotUnavailable(f"Slot {slot_id} is {current.status.value}")

            booking = BookingDetails(
                booking_id=generate_booking_id(),
                vehicle_type=vehicle_type,
                vehicle_number=vehicle_number,
                start_time=start_time,
                end_time=end_time,
                billed_hours=billed_hours,
                cost=cost,
                penalty_applied=penalty_applied,
                booked_at=now,
                expires_at=end_time,
            )
            updated = current.model_copy(
                update={"status": SlotStatus.BOOKED, "last_updated": now, "booking": booking}
            )
            self._commit({slot_id: updated}, [])
            logger.info(f"Slot {slot_id} booked by {vehicle_number} until {end_time}")
            return updated

    def cancel(self, slot_id: str) -> ParkingSlot:
        with self._lock:
            current = self.get_slot(slot_id)
            updated, archived = self._released(current, ArchiveReason.CANCELLED, self._clock())
            self._commit({slot_id: updated}, archived)
            logger.info(f"Slot {slot_id} cancelled, was {current.status.value}")
            return updated

    def sweep_expired(self, now: Optional[datetime.datetime] = None) -> List[str]:
        """
        Free every BOOKED slot whose expiry is at or before ``now``.
        """
        with self._lock:
            now = ensure_utc(now) if now else self._clock()
            updates = {}
            archived = []
            for slot in self._slots.values():
                if (
                    slot.status == SlotStatus.BOOKED
                    and slot.booking is not None
                    and slot.booking.expires_at <= now
                ):
                    updated, entries = self._released(slot, ArchiveReason.EXPIRED, now)
                    updates[slot.id] = updated
                    archived.extend(entries)

            if updates:
                self._commit(updates, archived)
                logger.info(f"Expired bookings released: {list(updates)}")
            return list(updates)

    def reset_all(self) -> Dict[str, ParkingSlot]:
        with self._lock:
            now = self._clock()
            updates = {}
            archived = []
            for slot in self._slots.values():
                updates[slot.id], entries = self._released(slot, ArchiveReason.RESET, now)
                archived.extend(entries)
            self._commit(updates, archived)
            logger.info("All slots reset to FREE")
            return self.get_slots()

    # Internals
    def _released(
        self, slot: ParkingSlot, reason: ArchiveReason, now: datetime.datetime
    ) -> Tuple[ParkingSlot, List[ArchivedBooking]]:
        archived = []
        if slot.booking is not None:
            archived.append(
                ArchivedBooking(
                    slot_id=slot.id, reason=reason, archived_at=now, booking=slot.booking
                )
            )
        updated = slot.model_copy(
            update={"status": SlotStatus.FREE, "last_updated": now, "booking": None}
        )
        return updated, archived

    def _commit(self, updates: Dict[str, ParkingSlot], archived: List[ArchivedBooking]):
        slots = {**self._slots, **updates}
        history = self._history + archived
        if self._history_limit and len(history) > self._history_limit:
            history = history[-self._history_limit:]

        self._persist(slots, history)
        self._slots = slots
        self._history = history

    def _persist(self, slots: Dict[str, ParkingSlot], history: List[ArchivedBooking]):
        if not self._filename:
            return

        document = {
            "slots": {slot_id: slot.model_dump(mode="json") for slot_id, slot in slots.items()},
            "history": [entry.model_dump(mode="json") for entry in history],
        }
        directory = os.path.dirname(os.path.abspath(self._filename))
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".slot_state", suffix=".tmp")
            with os.fdopen(fd, "w") as file:
                json.dump(document, file, indent=2)
                file.flush()
                os.fsync(file.fileno())
            os.replace(tmp_name, self._filename)
        except OSError as err:
            logger.error(f"Could not persist slot state to {self._filename}: {err}")
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceFailure(f"Slot state not saved: {err}") from err

    def _load(self, slot_ids: List[str]) -> Tuple[Dict[str, ParkingSlot], List[ArchivedBooking]]:
        now = self._clock()
        fresh = {slot_id: ParkingSlot(id=slot_id, last_updated=now) for slot_id in slot_ids}
        if not self._filename or not os.path.exists(self._filename):
            logger.info(f"Starting with {len(fresh)} free slots")
            return fresh, []

        try:
            with open(self._filename) as file:
                document = json.load(file)
            stored = {
                slot_id: ParkingSlot.model_validate(data)
                for slot_id, data in document.get("slots", {}).items()
            }
            history = [ArchivedBooking.model_validate(entry) for entry in document.get("history", [])]
        except (OSError, ValueError) as err:
            logger.error(f"Could not read slot state from {self._filename}: {err}")
            raise PersistenceFailure(f"Slot state unreadable: {err}") from err

        unknown = sorted(set(stored) - set(slot_ids))
        if unknown:
            logger.warning(f"Dropping persisted slots missing from the layout: {unknown}")

        slots = {slot_id: stored.get(slot_id, fresh[slot_id]) for slot_id in slot_ids}
        logger.info(f"Restored slot state from {self._filename}")
        return slots, history
