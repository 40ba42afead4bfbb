import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.jobs.ingest.reconstruct import Reconstruction
from app.models.equipment_events import EquipmentEvent
from app.models.event_codes import EventCode
from app.models.trips import Trip

logger = logging.getLogger(__name__)


def load_trips_and_events(
    db: Session,
    reconstruction: Reconstruction,
    source_run_id: Optional[uuid.UUID] = None,
) -> dict:
    """
    Insert one batch of trips and their events in a single transaction.
    Trips go first so events can carry trip ids; any failure rolls back
    the whole batch and re-raises.
    """
    try:
        code_ids = {code: code_id for code, code_id in db.execute(select(EventCode.code, EventCode.id))}

        trip_rows: dict[str, Trip] = {}
        for t in reconstruction.trips:
            row = Trip(
                equipment_id=t.equipment_id,
                origin_location_id=t.origin_location_id,
                destination_location_id=t.destination_location_id,
                start_event_time=t.start_time,
                end_event_time=t.end_time,
                total_time=t.duration,
                is_complete=t.is_complete,
                source_run_id=source_run_id,
            )
            db.add(row)
            trip_rows[t.key] = row

        db.flush()

        for ev in reconstruction.events:
            trip = trip_rows[ev.trip_key] if ev.trip_key is not None else None
            db.add(
                EquipmentEvent(
                    equipment_id=ev.equipment_id,
                    event_code_id=code_ids[ev.event_code],
                    location_id=ev.location_id,
                    event_time_local=ev.local_time,
                    event_time_utc=ev.universal_time,
                    trip_id=trip.id if trip is not None else None,
                    source_run_id=source_run_id,
                )
            )

        db.commit()

    except Exception:
        db.rollback()
        raise

    stats = {"trips_inserted": len(trip_rows), "events_inserted": len(reconstruction.events)}
    logger.info("Load complete: %s", stats)
    return stats
