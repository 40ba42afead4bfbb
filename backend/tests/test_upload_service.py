import uuid
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.core.config import AppConfig
from app.jobs.ingest.service import process_events_file
from app.models.equipment_events import EquipmentEvent
from app.models.trips import Trip

HEADER = "Equipment Id,Event Code,City Id,Event Time\n"

CFG = AppConfig(
    database_url="sqlite://",
    release_codes=("W",),
    placement_codes=("Z",),
    log_level="INFO",
    upload_max_bytes=1024 * 1024,
)


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_saves_trips_and_events(seeded_db):
    csv_text = HEADER + "EQ001,W,1,2024-01-01 08:00:00\nEQ001,A,2,2024-01-01 12:00:00\nEQ001,Z,3,2024-01-01 16:00:00\n"
    run_id = uuid.uuid4()
    report = process_events_file(seeded_db, csv_text, config=CFG, source_run_id=run_id)

    assert report.events_processed == 3
    assert report.trips_created == 1
    assert report.success_count == 3
    assert report.errors == ()

    trip = seeded_db.execute(select(Trip)).scalar_one()
    assert trip.is_complete
    assert trip.origin_location_id == 1
    assert trip.destination_location_id == 3
    assert trip.total_time == timedelta(hours=11)    # 13:00Z -> 00:00Z next day
    assert trip.source_run_id == run_id
    assert len(trip.events) == 3
    assert _count(seeded_db, EquipmentEvent) == 3


def test_stores_local_and_utc_times(seeded_db):
    process_events_file(seeded_db, HEADER + "EQ001,W,2,2024-01-01 08:00:00\nEQ001,Z,2,2024-01-01 16:00:00\n", config=CFG)

    first = seeded_db.execute(select(EquipmentEvent).order_by(EquipmentEvent.event_time_utc)).scalars().first()
    assert first.event_time_local.hour == 8
    assert first.event_time_utc.hour == 14


def test_unattached_events_are_still_stored(seeded_db):
    report = process_events_file(seeded_db, HEADER + "EQ001,Z,1,2024-01-01 08:00:00\n", config=CFG)

    assert report.trips_created == 0
    assert "Orphaned placement" in report.warnings[0]
    ev = seeded_db.execute(select(EquipmentEvent)).scalar_one()
    assert ev.trip_id is None
    assert _count(seeded_db, Trip) == 0


def test_incomplete_trip_has_no_destination(seeded_db):
    process_events_file(seeded_db, HEADER + "EQ001,W,1,2024-01-01 08:00:00\nEQ001,A,2,2024-01-01 12:00:00\n", config=CFG)

    trip = seeded_db.execute(select(Trip)).scalar_one()
    assert trip.is_complete is False
    assert trip.destination_location_id is None
    assert trip.end_event_time is None
    assert trip.total_time is None
    assert len(trip.events) == 2


def test_structural_errors_and_warnings_together(seeded_db):
    csv_text = HEADER + "EQ1,W,x,2024-01-01 08:00\nEQ1,W,99,2024-01-01 08:00\nEQ1,W,1,2024-01-01 09:00\n"
    report = process_events_file(seeded_db, csv_text, config=CFG)

    assert report.events_processed == 1
    assert report.errors == ("Row 1: invalid City Id 'x'",)
    assert report.error_count == 1
    assert report.warnings == ("Unknown location id: 99 for equipment EQ1",)
    assert report.trips_created == 1


def test_persistence_failure_rolls_back_batch(seeded_db, monkeypatch):
    def _boom():
        raise OperationalError("INSERT INTO equipment_events", {}, Exception("disk full"))

    monkeypatch.setattr(seeded_db, "commit", _boom)
    report = process_events_file(seeded_db, HEADER + "EQ001,W,1,2024-01-01 08:00\nEQ001,Z,2,2024-01-01 16:00\n", config=CFG)
    monkeypatch.undo()

    assert report.events_processed == 2
    assert report.trips_created == 0
    assert report.success_count == 0
    assert report.error_count == 1
    assert report.errors[0].startswith("Database error:")
    assert _count(seeded_db, Trip) == 0
    assert _count(seeded_db, EquipmentEvent) == 0


def test_no_usable_rows_still_returns_report(seeded_db):
    report = process_events_file(seeded_db, "City Id\n1\n", config=CFG)

    assert report.events_processed == 0
    assert report.trips_created == 0
    assert report.errors == ("Missing required column(s): Equipment Id, Event Code, Event Time",)


def test_undecodable_upload_is_a_processing_error(seeded_db):
    report = process_events_file(seeded_db, b"\xff\xfe\x00bad", config=CFG)

    assert report.events_processed == 0
    assert report.error_count == 1
    assert report.errors[0].startswith("Processing error:")


def test_time_out_of_range_does_not_abort_upload(seeded_db):
    report = process_events_file(seeded_db, HEADER + "EQ1,W,1,9999-12-31 23:00\nEQ1,W,1,2024-01-01 08:00\n", config=CFG)

    assert report.events_processed == 1
    assert report.trips_created == 1
    assert report.errors == ()
    assert report.warnings[0].startswith("Event time out of range")
    assert _count(seeded_db, EquipmentEvent) == 1


def test_oversized_field_still_returns_report(seeded_db):
    csv_text = HEADER + "EQ1,W,1,2024-01-01 08:00\n" + "X" * 200000 + ",W,1,2024-01-01 09:00\n"
    report = process_events_file(seeded_db, csv_text, config=CFG)

    assert report.events_processed == 1
    assert report.trips_created == 1
    assert report.error_count == 1
    assert "field larger than field limit" in report.errors[0]
