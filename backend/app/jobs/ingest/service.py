import csv
import logging
import uuid
from typing import IO, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import AppConfig, load_config
from app.jobs.ingest.loader import load_trips_and_events
from app.jobs.ingest.reader import read_event_rows
from app.jobs.ingest.reconstruct import reconstruct
from app.jobs.ingest.reference import load_reference
from app.jobs.ingest.report import ProcessingReport, ReportAggregator

logger = logging.getLogger(__name__)


def process_events_file(
    db: Session,
    source: Union[str, bytes, IO],
    *,
    config: Optional[AppConfig] = None,
    source_run_id: Optional[uuid.UUID] = None,
) -> ProcessingReport:
    """
    CSV upload -> trips + events in the store.
    Always returns a report; failures are reported, not raised.
    """
    config = config or load_config()
    report = ReportAggregator()

    try:
        records = read_event_rows(source, report)
        resolver = load_reference(db, config)
        result = reconstruct(records, resolver, report)

        try:
            load_trips_and_events(db, result, source_run_id)
            logger.info(
                "Created %d trips from %d events (run_id=%s)",
                len(result.trips),
                report.events_processed,
                str(source_run_id) if source_run_id else "-",
            )
        except SQLAlchemyError as e:
            logger.exception("Failed to save trips and events")
            report.record_persistence_failure(e)

    except (SQLAlchemyError, csv.Error, ValueError) as e:
        logger.exception("Failed to process events file")
        report.record_processing_failure(e)

    return report.build()
