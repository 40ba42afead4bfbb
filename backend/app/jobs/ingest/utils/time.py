import re
from datetime import datetime, timedelta

import pytz

UTC = pytz.UTC


class EventTimeOutOfRange(ValueError):
    pass


_OFFSET_RE = re.compile(r"^([+-]?)(\d{1,2})(?::(\d{2}))?$")

_EVENT_TIME_FORMATS = (
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%Y %I:%M %p",
)


def parse_utc_offset(utc_offset: str) -> timedelta:
    """
    Parse a fixed "±HH:MM" offset (e.g. "-05:00", "+08:00", "-03:30").
    Minutes may be omitted ("-05"). No timezone database is involved.
    """
    m = _OFFSET_RE.match((utc_offset or "").strip())
    if not m:
        raise ValueError(f"Bad UTC offset: {utc_offset!r}")

    sign = -1 if m.group(1) == "-" else 1
    hours = int(m.group(2))
    minutes = int(m.group(3) or 0)
    if hours > 14 or minutes > 59:
        raise ValueError(f"UTC offset out of range: {utc_offset!r}")

    return sign * timedelta(hours=hours, minutes=minutes)


def to_universal(local_time: datetime, utc_offset: str) -> datetime:
    """
    universal = local - offset, returned as a UTC-aware datetime.
    local_time must be naive (wall clock at the event location).
    """
    if local_time.tzinfo is not None:
        raise ValueError("local_time must be naive")
    offset = parse_utc_offset(utc_offset)
    try:
        return (local_time - offset).replace(tzinfo=UTC)
    except OverflowError:
        raise EventTimeOutOfRange(f"Event time out of range: {local_time.isoformat()} at {utc_offset}") from None


def parse_event_time(value: str) -> datetime:
    """
    Parse an "Event Time" cell into a naive datetime.
    Accepts ISO-8601 ("2024-01-01 08:00:00", "2024-01-01T08:00") and US style
    ("01/31/2024 08:00"). Values carrying their own offset are rejected.
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("Event Time is blank")

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = None
        for fmt in _EVENT_TIME_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            raise ValueError(f"Unparseable Event Time: {value!r}")

    if parsed.tzinfo is not None:
        raise ValueError(f"Event Time must be local without offset: {value!r}")
    return parsed
