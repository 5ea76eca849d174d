import os
from dotenv import load_dotenv
import logging

load_dotenv()

DESCRIPTION_DATA = """
Parking Slot Router API helps you find, book and reach the nearest free Parking Slot
"""


# Set Logger
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s:%(message)s")


def _env_number(name, default, cast=float):
    value = os.getenv(name)
    if value in (None, ""):
        return default
    try:
        return cast(value)
    except ValueError:
        logger.warning(f"Invalid value for {name}: {value!r}, using {default}")
        return default


class ParkingLotCFG:
    """
    Initials Parameters
    """

    def __init__(self, **overrides):
        self.title = "Parking Slot Router API Backend"
        self.description = DESCRIPTION_DATA
        self.version = os.getenv("API_VERSION", "1.0.0")
        self.root_path = os.getenv("API_ROOT_URI", "")

        # Lot
        self.state_filename = os.getenv("PARKING_STATE_FILE", "slot_state.json")
        self.layout_filename = os.getenv("PARKING_LAYOUT_FILE") or None
        self.vehicles_filename = os.getenv("PARKING_VEHICLES_FILE") or None
        self.entrance_node = os.getenv("PARKING_ENTRANCE_NODE", "ENTRANCE")

        # Timers
        self.sweep_interval_seconds = _env_number("PARKING_SWEEP_INTERVAL", 60)
        self.ws_interval_seconds = _env_number("PARKING_WS_INTERVAL", 10)

        # Routing & Pricing
        self.hourly_rate = _env_number("PARKING_HOURLY_RATE", 50.0)
        self.alt_routes_k = _env_number("PARKING_ALT_ROUTES", 3, int)
        self.history_limit = _env_number("PARKING_HISTORY_LIMIT", 200, int)

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"Unknown config parameter: {key}")
            setattr(self, key, value)

        # inform
        logger.info(
            f"Config in Use: state={self.state_filename} entrance={self.entrance_node} "
            f"sweep={self.sweep_interval_seconds}s rate={self.hourly_rate}"
        )
