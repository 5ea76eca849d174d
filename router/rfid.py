from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from models.parking_model import GateDecision, RfidRequest
from models.lot_graph import LotGraph
from router.dependencies import get_config, get_graph, get_store, http_error
from utils.errors import ParkingError, Unauthorized
from utils.gate import DENY, authorize
from utils.slot_store import SlotStore
import logging

# Create Logger
logger = logging.getLogger(__name__)


# Global Vars
MODULE_NAME = "rfid"
MODULE_PREFIX = "/rfid"
MODULE_TAGS = [MODULE_NAME]


router = APIRouter(prefix=MODULE_PREFIX, tags=MODULE_TAGS)


@router.post("/authenticate", response_model=GateDecision)
def authenticate_vehicle(
    credential: RfidRequest,
    request: Request,
    graph: LotGraph = Depends(get_graph),
    store: SlotStore = Depends(get_store),
    config=Depends(get_config),
):
    try:
        return authorize(
            credential.rfid,
            request.app.state.vehicles,
            graph,
            store,
            config.entrance_node,
        )
    except Unauthorized as err:
        # the gate controller reads the command, not just the status
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"authorized": False, "command": DENY, "message": err.message},
        )
    except ParkingError as err:
        raise http_error(err)
