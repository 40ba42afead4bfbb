"""
Shared fixtures.

- `engine` / `db_session`: fresh in-memory SQLite per test, tables from model metadata.
- `seeded_db`: db_session with three locations and the W/Z/A/D event codes.
- `resolver`: the same reference data as a pure ReferenceResolver (no DB).
- `client`: TestClient with get_db pointed at the seeded session.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import create_tables
from app.core.deps import get_db
from app.jobs.ingest.reference import ReferenceResolver
from app.jobs.ingest.types import EventTypeRef, LocationRef, RawEventRecord
from app.main import app
from app.models.event_codes import EventCode
from app.models.locations import Location

LOCATIONS = [
    LocationRef(id=1, name="New York", utc_offset="-05:00"),
    LocationRef(id=2, name="Chicago", utc_offset="-06:00"),
    LocationRef(id=3, name="Los Angeles", utc_offset="-08:00"),
]

EVENT_TYPES = [
    EventTypeRef(code="W", description="Released", long_description="Equipment released"),
    EventTypeRef(code="Z", description="Placed", long_description="Equipment placed"),
    EventTypeRef(code="A", description="Arrival", long_description="Arrived at location"),
    EventTypeRef(code="D", description="Departure", long_description="Departed location"),
]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def seeded_db(db_session):
    for loc in LOCATIONS:
        db_session.add(Location(id=loc.id, name=loc.name, utc_offset=loc.utc_offset))
    for et in EVENT_TYPES:
        db_session.add(EventCode(code=et.code, description=et.description, long_description=et.long_description))
    db_session.commit()
    return db_session


@pytest.fixture
def resolver():
    return ReferenceResolver.from_rows(LOCATIONS, EVENT_TYPES)


@pytest.fixture
def make_record():
    def _make(equipment_id, code, location_id, when, row_number=0):
        return RawEventRecord(
            equipment_id=equipment_id,
            event_code=code,
            location_id=location_id,
            local_time=datetime.fromisoformat(when),
            row_number=row_number,
        )

    return _make


@pytest.fixture
def client(seeded_db):
    def _get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides = {}
