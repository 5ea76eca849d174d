"""Common test fixtures."""
from __future__ import annotations

import datetime

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models.lot_graph import LotGraph
from settings.layout import DEFAULT_LAYOUT
from settings.parameters import ParkingLotCFG
from utils.slot_store import SlotStore

UTC = datetime.timezone.utc


class FakeClock:
    """Deterministic replacement for the wall clock."""

    def __init__(self, start: datetime.datetime | None = None) -> None:
        self.current = start or datetime.datetime(2026, 1, 5, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime.datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += datetime.timedelta(**kwargs)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lot_graph() -> LotGraph:
    return LotGraph.from_layout(DEFAULT_LAYOUT)


@pytest.fixture
def state_file(tmp_path) -> str:
    return str(tmp_path / "slot_state.json")


@pytest.fixture
def store(lot_graph, fake_clock, state_file) -> SlotStore:
    return SlotStore(lot_graph.slot_ids(), state_filename=state_file, clock=fake_clock)


@pytest.fixture
def book(store, fake_clock):
    """Book a slot for ``hours`` from the fake clock's now."""

    def _book(slot_id: str, plate: str = "KA-01-1234", hours: float = 2):
        return store.book(
            slot_id,
            vehicle_type="car",
            vehicle_number=plate,
            end_time=fake_clock() + datetime.timedelta(hours=hours),
            billed_hours=2,
            cost=100.0,
        )

    return _book


@pytest.fixture
def client(state_file) -> TestClient:
    app = create_app(ParkingLotCFG(state_filename=state_file, hourly_rate=50.0))
    return TestClient(app)
