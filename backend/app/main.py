from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.routes.health import router as health_router
from app.api.v1.routes.trips import router as trips_router
from app.core.config import load_config
from app.core.log import configure_logging_if_needed

configure_logging_if_needed(load_config().log_level)

app = FastAPI(title="Railcar Trips API")

# Trips UI is served from another origin; it only needs to upload and read.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(health_router, prefix="/v1")
app.include_router(trips_router)
