"""
Reference data seeding: CSV files -> locations, event_codes

Files (header row required):
  canadian_cities.csv           City Id, City Name, Time Zone
  event_code_definitions.csv    Event Code, Event Description, Long Description

Time zone names map to a fixed UTC offset (TIME_ZONE_OFFSETS). There is no
daylight saving handling; the offset stored on the location is what the trip
reconstruction uses.

A table that already has rows is left untouched.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.event_codes import EventCode
from app.models.locations import Location

logger = logging.getLogger(__name__)

CITIES_FILE = "canadian_cities.csv"
EVENT_CODES_FILE = "event_code_definitions.csv"

DEFAULT_OFFSET = "+00:00"

TIME_ZONE_OFFSETS = {
    "Pacific Standard Time": "-08:00",
    "Mountain Standard Time": "-07:00",
    "Canada Central Standard Time": "-06:00",
    "Central Standard Time": "-06:00",
    "Eastern Standard Time": "-05:00",
    "Atlantic Standard Time": "-04:00",
    "Newfoundland Standard Time": "-03:30",
}


def utc_offset_for(time_zone_name: str) -> str:
    return TIME_ZONE_OFFSETS.get(time_zone_name.strip(), DEFAULT_OFFSET)


def _read_rows(path: Path) -> list[dict]:
    with path.open(newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh, skipinitialspace=True)
        reader.fieldnames = [(h or "").strip() for h in (reader.fieldnames or [])]
        return [{k: (v or "").strip() for k, v in row.items() if k is not None} for row in reader]


def _is_empty(db: Session, model) -> bool:
    return db.execute(select(func.count()).select_from(model)).scalar_one() == 0


def seed_locations(db: Session, path: Path) -> int:
    if not _is_empty(db, Location):
        logger.info("locations already seeded; skipping")
        return 0
    if not path.exists():
        logger.warning("Seed file not found: %s", path)
        return 0

    logger.info("Seeding locations from %s", path)
    rows = _read_rows(path)
    for r in rows:
        db.add(
            Location(
                id=int(r["City Id"]),
                name=r["City Name"],
                time_zone_name=r["Time Zone"],
                utc_offset=utc_offset_for(r["Time Zone"]),
            )
        )
    db.commit()

    logger.info("Seeded %d locations across %d time zones", len(rows), len({r["Time Zone"] for r in rows}))
    return len(rows)


def seed_event_codes(db: Session, path: Path) -> int:
    if not _is_empty(db, EventCode):
        logger.info("event_codes already seeded; skipping")
        return 0
    if not path.exists():
        logger.warning("Seed file not found: %s", path)
        return 0

    logger.info("Seeding event codes from %s", path)
    rows = _read_rows(path)
    for r in rows:
        db.add(
            EventCode(
                code=r["Event Code"],
                description=r["Event Description"],
                long_description=r.get("Long Description", ""),
            )
        )
    db.commit()

    logger.info("Seeded %d event codes", len(rows))
    return len(rows)


def seed_reference(db: Session, data_dir: Path) -> dict:
    return {
        "locations": seed_locations(db, data_dir / CITIES_FILE),
        "event_codes": seed_event_codes(db, data_dir / EVENT_CODES_FILE),
    }
