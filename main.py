from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from fastapi_utils.tasks import repeat_every
from models.lot_graph import LotGraph
from models.parking_model import PricingConfig
from settings.parameters import ParkingLotCFG
from settings.layout import load_layout
from settings.vehicles import load_vehicle_registry
from router import parking, rfid
from utils.errors import PersistenceFailure
from utils.slot_store import SlotStore
import uvicorn
import logging


# Declare a Logger
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s:%(message)s")


# Middleware
# Allow these origins to access the API
ORIGINS = [
    # "http://localhost:3000",
    # "http://localhost:5173",
    "*"
]

# Allow these methods to be used
METHODS = ["*"]  # ["GET", "POST"]


def create_app(api_config: ParkingLotCFG = None, clock=None) -> FastAPI:
    api_config = api_config or ParkingLotCFG()

    app = FastAPI(
        title=api_config.title,
        version=api_config.version,
        description=api_config.description,
        root_path=api_config.root_path,
    )

    # Lot State
    graph = LotGraph.from_layout(load_layout(api_config.layout_filename))
    store_options = {"clock": clock} if clock else {}
    store = SlotStore(
        graph.slot_ids(),
        state_filename=api_config.state_filename,
        history_limit=api_config.history_limit,
        **store_options,
    )
    if not graph.has_node(api_config.entrance_node):
        logger.warning(f"Entrance node {api_config.entrance_node} is not in the layout")

    app.state.config = api_config
    app.state.graph = graph
    app.state.store = store
    app.state.vehicles = load_vehicle_registry(api_config.vehicles_filename)
    app.state.pricing = PricingConfig(hourly_rate=api_config.hourly_rate)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ORIGINS,
        allow_credentials=True,
        allow_methods=METHODS,
        allow_headers=["*"],
    )

    # Entry Point
    @app.get("/", response_class=RedirectResponse, include_in_schema=False)
    async def docs():
        return RedirectResponse(url="/docs")

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "OK", "message": "Parking Slot Router is running"}

    # Router
    app.include_router(parking.router)
    app.include_router(rfid.router)

    # Expiry Sweep
    @app.on_event("startup")
    @repeat_every(seconds=api_config.sweep_interval_seconds, logger=logger)
    def sweep_expired_bookings():
        try:
            released = store.sweep_expired()
        except PersistenceFailure as err:
            logger.error(f"Expiry sweep not committed: {err}")
            return
        if released:
            logger.info(f"Expiry sweep released slots: {released}")

    return app


app = create_app()


# Run the API Server
if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
