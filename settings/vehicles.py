import json
import logging
from typing import Dict

from models.parking_model import VehicleCredential

logger = logging.getLogger(__name__)


AUTHORIZED_VEHICLES = {
    "TAG12345": {"owner": "John Doe", "plate": "ABC-1234", "type": "General"},
    "TAG67890": {"owner": "Jane Smith", "plate": "XYZ-5678", "type": "VIP"},
    "TAG11223": {"owner": "Admin", "plate": "ADM-0001", "type": "Staff"},
}


def load_vehicle_registry(filename=None) -> Dict[str, VehicleCredential]:
    vehicles = AUTHORIZED_VEHICLES
    if filename:
        with open(filename) as file:
            vehicles = json.load(file)
        logger.info(f"Loaded {len(vehicles)} RFID credentials from {filename}")

    return {
        rfid: VehicleCredential(rfid=rfid, **vehicle) for rfid, vehicle in vehicles.items()
    }
