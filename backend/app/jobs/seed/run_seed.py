import argparse
from pathlib import Path

from app.core.config import load_config
from app.core.db import SessionLocal, create_tables
from app.core.log import configure_logging_if_needed
from app.jobs.seed.seed_reference import seed_reference

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data" / "seed"


def main():
    p = argparse.ArgumentParser(description="Seed locations and event codes from CSV reference files")
    p.add_argument("--data-dir", type=Path, default=DEFAULT_DATA_DIR)
    args = p.parse_args()

    configure_logging_if_needed(load_config().log_level)
    create_tables()

    db = SessionLocal()
    try:
        print(seed_reference(db, args.data_dir))
    finally:
        db.close()

if __name__ == "__main__":
    main()
