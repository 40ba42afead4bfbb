from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import load_config

engine = create_engine(load_config().database_url, pool_pre_ping=True)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

Base = declarative_base()


def create_tables(bind=None) -> None:
    # No migrations: tables come straight from model metadata.
    from app.models import equipment_events, event_codes, ingest_runs, locations, trips  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
