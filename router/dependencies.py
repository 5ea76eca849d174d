from fastapi import HTTPException, Request

from models.lot_graph import LotGraph
from utils.errors import ParkingError
from utils.slot_store import SlotStore


def get_graph(request: Request) -> LotGraph:
    return request.app.state.graph


def get_store(request: Request) -> SlotStore:
    return request.app.state.store


def get_config(request: Request):
    return request.app.state.config


def http_error(err: ParkingError) -> HTTPException:
    return HTTPException(status_code=err.status_code, detail=err.message)
