import argparse
import uuid
from datetime import datetime
from pathlib import Path

from sqlalchemy.orm import Session

from app.core.config import load_config
from app.core.db import SessionLocal, create_tables
from app.core.log import configure_logging_if_needed
from app.jobs.ingest.service import process_events_file
from app.models.ingest_runs import IngestRun


def main():
    p = argparse.ArgumentParser(description="Reconstruct railcar trips from an equipment events CSV")
    p.add_argument("--file", required=True, type=Path, help="CSV with Equipment Id, Event Code, City Id, Event Time")
    p.add_argument("--create-tables", action="store_true", help="Create missing tables before ingesting")
    args = p.parse_args()

    cfg = load_config()
    configure_logging_if_needed(cfg.log_level)

    if args.create_tables:
        create_tables()

    db: Session = SessionLocal()
    run_id = uuid.uuid4()

    job = IngestRun(
        run_id=run_id,
        job_name="ingest_events_csv",
        file_name=args.file.name,
        status="running",
        meta={"args": {"file": str(args.file)}},
    )
    db.add(job)
    db.commit()

    try:
        report = process_events_file(db, args.file.read_bytes(), config=cfg, source_run_id=run_id)
        result = report.as_dict()

        job = db.get(IngestRun, run_id)
        job.status = "success" if report.committed else "fail"
        job.ended_at = datetime.utcnow()
        job.meta = {**(job.meta or {}), **result}
        db.commit()

        print(result)

    except Exception as e:
        db.rollback()
        job = db.get(IngestRun, run_id)
        job.status = "fail"
        job.ended_at = datetime.utcnow()
        job.meta = {**(job.meta or {}), "error": repr(e)}
        db.commit()
        raise

    finally:
        db.close()

if __name__ == "__main__":
    main()
