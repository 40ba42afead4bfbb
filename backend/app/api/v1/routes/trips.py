from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.api.v1.schemas.trips import TripEvent, TripSummary, TripWithEvents, UploadResult
from app.core.config import load_config
from app.core.deps import get_db
from app.jobs.ingest.service import process_events_file
from app.models.equipment_events import EquipmentEvent
from app.models.event_codes import EventCode  # noqa: F401  (mapper registry)
from app.models.locations import Location  # noqa: F401
from app.models.trips import Trip

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/trips", tags=["trips"])


def _bad_upload(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=UploadResult(errors=[message], error_count=1).model_dump())


def _summary_fields(t: Trip) -> dict:
    return {
        "trip_id": t.id,
        "equipment_id": t.equipment_id,
        "origin": t.origin.name if t.origin is not None else "Unknown",
        "destination": t.destination.name if t.destination is not None else "In Transit",
        "start_time": t.start_event_time,
        "end_time": t.end_event_time,
        "total_trip_hours": t.total_time.total_seconds() / 3600.0 if t.total_time is not None else None,
        "is_complete": t.is_complete,
    }


@router.post("/upload", response_model=UploadResult)
def upload_events(file: UploadFile = File(...), db: Session = Depends(get_db)):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        return _bad_upload("File must be a CSV file")

    cfg = load_config()
    content = file.file.read(cfg.upload_max_bytes + 1)
    if not content:
        return _bad_upload("No file uploaded")
    if len(content) > cfg.upload_max_bytes:
        return _bad_upload(f"File exceeds {cfg.upload_max_bytes} bytes")

    logger.info("Processing uploaded file: %s (%d bytes)", file.filename, len(content))
    report = process_events_file(db, content, config=cfg)

    return UploadResult(
        events_processed=report.events_processed,
        trips_created=report.trips_created,
        success_count=report.success_count,
        error_count=report.error_count,
        warnings=list(report.warnings),
        errors=list(report.errors),
    )


@router.get("", response_model=list[TripSummary])
def list_trips(db: Session = Depends(get_db)):
    trips = db.execute(
        select(Trip)
        .options(selectinload(Trip.origin), selectinload(Trip.destination))
        .order_by(Trip.start_event_time.desc(), Trip.id.desc())
    ).scalars().all()

    return [TripSummary(**_summary_fields(t)) for t in trips]


@router.get("/{trip_id}", response_model=TripWithEvents)
def get_trip(trip_id: int, db: Session = Depends(get_db)):
    trip = db.execute(
        select(Trip)
        .where(Trip.id == trip_id)
        .options(
            selectinload(Trip.origin),
            selectinload(Trip.destination),
            selectinload(Trip.events).selectinload(EquipmentEvent.location),
            selectinload(Trip.events).selectinload(EquipmentEvent.event_code),
        )
    ).scalar_one_or_none()

    if trip is None:
        raise HTTPException(status_code=404, detail="Trip not found")

    events = [
        TripEvent(
            event_id=e.id,
            equipment_id=e.equipment_id,
            event_code=e.event_code.code,
            event_description=e.event_code.description,
            city_name=e.location.name,
            event_time_local=e.event_time_local,
            event_time_utc=e.event_time_utc,
        )
        for e in sorted(trip.events, key=lambda e: (e.event_time_utc, e.id))
    ]

    return TripWithEvents(**_summary_fields(trip), events=events)
