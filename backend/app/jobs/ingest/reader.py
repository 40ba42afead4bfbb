from __future__ import annotations

import csv
import io
import logging
from typing import IO, Optional, Union

from app.jobs.ingest.report import ReportAggregator
from app.jobs.ingest.types import RawEventRecord
from app.jobs.ingest.utils.time import parse_event_time

logger = logging.getLogger(__name__)

COL_EQUIPMENT = "Equipment Id"
COL_EVENT_CODE = "Event Code"
COL_LOCATION = "City Id"
COL_EVENT_TIME = "Event Time"

REQUIRED_COLUMNS = (COL_EQUIPMENT, COL_EVENT_CODE, COL_LOCATION, COL_EVENT_TIME)


class RowParseError(ValueError):
    pass


def _text_stream(source: Union[str, bytes, IO]) -> IO[str]:
    if isinstance(source, bytes):
        return io.StringIO(source.decode("utf-8-sig"))
    if isinstance(source, str):
        return io.StringIO(source.lstrip("\ufeff"))
    sample = source.read()
    return _text_stream(sample)


def parse_row(row: dict, row_number: int) -> RawEventRecord:
    equipment_id = (row.get(COL_EQUIPMENT) or "").strip()
    if not equipment_id:
        raise RowParseError(f"missing {COL_EQUIPMENT}")

    event_code = (row.get(COL_EVENT_CODE) or "").strip()
    if not event_code:
        raise RowParseError(f"missing {COL_EVENT_CODE}")

    raw_location = (row.get(COL_LOCATION) or "").strip()
    try:
        location_id = int(raw_location)
    except ValueError:
        raise RowParseError(f"invalid {COL_LOCATION} {raw_location!r}") from None

    try:
        local_time = parse_event_time(row.get(COL_EVENT_TIME) or "")
    except ValueError as e:
        raise RowParseError(str(e)) from None

    return RawEventRecord(
        equipment_id=equipment_id,
        event_code=event_code,
        location_id=location_id,
        local_time=local_time,
        row_number=row_number,
    )


def read_event_rows(
    source: Union[str, bytes, IO],
    report: Optional[ReportAggregator] = None,
) -> list[RawEventRecord]:
    """
    Parse an events CSV (header row required). Structural problems are
    appended to report.errors and the offending row is dropped.
    """
    report = report if report is not None else ReportAggregator()
    reader = csv.DictReader(_text_stream(source), skipinitialspace=True)

    header = [(h or "").strip() for h in (reader.fieldnames or [])]
    missing = [c for c in REQUIRED_COLUMNS if c not in header]
    if missing:
        report.add_error(f"Missing required column(s): {', '.join(missing)}")
        return []
    reader.fieldnames = header

    records: list[RawEventRecord] = []
    bad_rows = 0
    rows = iter(reader)
    row_number = 0
    while True:
        row_number += 1
        try:
            row = next(rows)
        except StopIteration:
            break
        except csv.Error as e:
            # stop at the first record csv cannot parse; earlier rows are kept
            bad_rows += 1
            report.add_error(f"Row {row_number}: {e}")
            break

        if not any((v or "").strip() for k, v in row.items() if k is not None):
            continue
        try:
            records.append(parse_row(row, row_number))
        except RowParseError as e:
            bad_rows += 1
            report.add_error(f"Row {row_number}: {e}")

    logger.info("Parsed %d event records from CSV (bad_rows=%d)", len(records), bad_rows)
    return records
