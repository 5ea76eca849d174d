from __future__ import annotations

import datetime
import time

from fastapi.testclient import TestClient

from main import create_app
from settings.parameters import ParkingLotCFG


def _book(client, slot_id="S5", **extra):
    payload = {
        "slot_id": slot_id,
        "vehicle_type": "car",
        "vehicle_number": "ABC-1234",
        "duration": 1.5,
    }
    payload.update(extra)
    return client.post("/parking/book", json=payload)


def test_health_and_index(client):
    assert client.get("/health").json()["status"] == "OK"
    index = client.get("/parking").json()
    assert index["module"] == "parking"
    assert index["message"] == "Hello to module: parking"


def test_layout(client):
    data = client.get("/parking/layout").json()
    assert "ENTRANCE" in data["nodes"]
    assert data["nodes"]["S1"]["kind"] == "SLOT"
    assert {"node": "MAIN_JUNCTION", "weight": 10.0} in data["adjacency"]["ENTRANCE"]


def test_slots(client):
    data = client.get("/parking/slots").json()
    assert list(data) == [f"S{i}" for i in range(1, 10)]
    assert data["S1"]["status"] == "FREE"


def test_nearest_path(client):
    data = client.get("/parking/path").json()
    assert data == {
        "slot_id": "S4",
        "distance": 18.0,
        "path": ["ENTRANCE", "MAIN_JUNCTION", "LANE2_START", "S4"],
    }
    assert client.get("/parking/path", params={"start_node": "NOWHERE"}).status_code == 404


def test_no_availability(client):
    for i in range(1, 10):
        client.post("/parking/update-slot", json={"slot_id": f"S{i}", "status": "OCCUPIED"})
    response = client.get("/parking/path")
    assert response.status_code == 404
    assert response.json()["detail"] == "No available parking slots found."


def test_alternate_routes(client):
    response = client.post(
        "/parking/routes", json={"start_node": "ENTRANCE", "end_node": "S9", "k": 3}
    )
    routes = response.json()
    assert [r["weight"] for r in routes] == [27.0, 28.0, 28.0]
    assert routes[0]["path"][-1] == "S9"

    default_k = client.post("/parking/routes", json={"start_node": "ENTRANCE", "end_node": "S1"})
    assert len(default_k.json()) == 3

    missing = client.post("/parking/routes", json={"start_node": "ENTRANCE", "end_node": "S99"})
    assert missing.status_code == 404


def test_book_bills_started_hours(client):
    response = _book(client)
    assert response.status_code == 201
    booking = response.json()["booking"]
    assert response.json()["status"] == "BOOKED"
    assert booking["billed_hours"] == 2
    assert booking["cost"] == 100.0
    assert booking["penalty_applied"] is True
    assert booking["expires_at"] == booking["end_time"]

    assert _book(client).status_code == 409


def test_book_with_end_time_and_pricing_update(client):
    assert client.post("/parking/config", json={"hourly_rate": 20}).json()["hourly_rate"] == 20
    assert client.get("/parking/config").json()["hourly_rate"] == 20

    start = datetime.datetime.now(datetime.timezone.utc)
    end = start + datetime.timedelta(hours=3)
    response = _book(
        client, "S2", duration=None, start_time=start.isoformat(), end_time=end.isoformat()
    )
    booking = response.json()["booking"]
    assert booking["billed_hours"] == 3
    assert booking["cost"] == 60.0
    assert booking["penalty_applied"] is False


def test_book_invalid_window(client):
    now = datetime.datetime.now(datetime.timezone.utc)
    response = _book(
        client,
        duration=None,
        start_time=now.isoformat(),
        end_time=(now - datetime.timedelta(minutes=5)).isoformat(),
    )
    assert response.status_code == 422
    assert client.get("/parking/slots").json()["S5"]["status"] == "FREE"

    assert _book(client, duration=None).status_code == 422
    assert _book(client, "S99").status_code == 404


def test_book_duration_out_of_range(client):
    assert _book(client, duration=1e12).status_code == 422
    assert _book(client, duration=24 * 365 + 1).status_code == 422
    assert client.get("/parking/slots").json()["S5"]["status"] == "FREE"
    assert _book(client, duration=24 * 365).status_code == 201


def test_sensor_cannot_free_booked_slot(client):
    _book(client)
    response = client.post("/parking/update-slot", json={"slot_id": "S5", "status": "FREE"})
    assert response.json()["status"] == "BOOKED"

    response = client.post(
        "/parking/update-slot", json={"slot_id": "S5", "status": "FREE", "action": "force"}
    )
    assert response.json()["status"] == "FREE"
    assert response.json()["booking"] is None


def test_update_slot_errors(client):
    unknown = client.post("/parking/update-slot", json={"slot_id": "S99", "status": "OCCUPIED"})
    assert unknown.status_code == 404
    booked = client.post("/parking/update-slot", json={"slot_id": "S1", "status": "BOOKED"})
    assert booked.status_code == 400


def test_cancel_reset_and_history(client):
    _book(client, "S1")
    _book(client, "S2")
    assert client.post("/parking/cancel", json={"slot_id": "S1"}).json()["status"] == "FREE"
    slots = client.post("/parking/reset").json()
    assert all(slot["status"] == "FREE" for slot in slots.values())

    history = client.get("/parking/history").json()
    assert [(h["slot_id"], h["reason"]) for h in history] == [
        ("S1", "cancelled"),
        ("S2", "reset"),
    ]


def test_rfid_authenticate(client):
    denied = client.post("/rfid/authenticate", json={"rfid": "TAG00000"})
    assert denied.status_code == 401
    assert denied.json()["command"] == "DENY"

    granted = client.post("/rfid/authenticate", json={"rfid": "TAG12345"}).json()
    assert granted["command"] == "OPEN_GATE"
    assert granted["slot_id"] == "S4"
    assert granted["prebooked"] is False


def test_rfid_prebooked(client):
    _book(client, "S9", vehicle_number="ABC-1234")
    granted = client.post("/rfid/authenticate", json={"rfid": "TAG12345"}).json()
    assert granted["prebooked"] is True
    assert granted["slot_id"] == "S9"


def test_state_survives_restart(state_file):
    first = TestClient(create_app(ParkingLotCFG(state_filename=state_file)))
    _book(first, "S7")
    first.post("/parking/update-slot", json={"slot_id": "S1", "status": "OCCUPIED"})
    before = first.get("/parking/slots").json()

    second = TestClient(create_app(ParkingLotCFG(state_filename=state_file)))
    assert second.get("/parking/slots").json() == before


def test_slot_feed_websocket(client):
    with client.websocket_connect("/parking/ws/slots") as websocket:
        data = websocket.receive_json()
        # binary frames from the client do not end the feed
        websocket.send_bytes(b"\x00\x01")
        again = websocket.receive_json()
    assert data["S1"]["status"] == "FREE"
    assert again == data


def test_expiry_sweep_runs_on_startup(state_file, fake_clock):
    config = ParkingLotCFG(state_filename=state_file, sweep_interval_seconds=3600)
    assert _book(TestClient(create_app(config, clock=fake_clock)), "S5", duration=1).status_code == 201
    fake_clock.advance(hours=2)

    with TestClient(create_app(config, clock=fake_clock)) as client:
        # the sweep is scheduled in the background at startup
        deadline = time.monotonic() + 5
        while client.get("/parking/slots").json()["S5"]["status"] != "FREE":
            assert time.monotonic() < deadline
            time.sleep(0.05)
        history = client.get("/parking/history").json()

    assert [(h["slot_id"], h["reason"]) for h in history] == [("S5", "expired")]
    assert history[0]["booking"]["vehicle_number"] == "ABC-1234"


def test_injected_clock_drives_booking_and_sweep(state_file, fake_clock):
    app = create_app(ParkingLotCFG(state_filename=state_file), clock=fake_clock)
    client = TestClient(app)
    booking = _book(client, "S5", duration=1).json()["booking"]
    assert booking["billed_hours"] == 1
    assert booking["penalty_applied"] is False

    fake_clock.advance(hours=1, minutes=1)
    assert app.state.store.sweep_expired() == ["S5"]
    assert client.get("/parking/slots").json()["S5"]["status"] == "FREE"
