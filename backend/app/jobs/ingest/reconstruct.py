from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.jobs.ingest.grouping import group_by_equipment
from app.jobs.ingest.reference import ReferenceResolver, UnresolvedEventType, UnresolvedLocation
from app.jobs.ingest.report import ReportAggregator
from app.jobs.ingest.trip_builder import reconstruct_equipment
from app.jobs.ingest.types import NormalizedEvent, RawEventRecord, ReconstructedTrip
from app.jobs.ingest.utils.time import EventTimeOutOfRange, to_universal

logger = logging.getLogger(__name__)


@dataclass
class Reconstruction:
    trips: list[ReconstructedTrip] = field(default_factory=list)
    events: list[NormalizedEvent] = field(default_factory=list)
    report: ReportAggregator = field(default_factory=ReportAggregator)

    def trips_by_key(self) -> dict[str, ReconstructedTrip]:
        return {t.key: t for t in self.trips}


def normalize(
    records: Iterable[RawEventRecord],
    resolver: ReferenceResolver,
    report: ReportAggregator,
) -> list[NormalizedEvent]:
    """Resolve + convert each record; unresolvable records become warnings and are dropped."""
    events: list[NormalizedEvent] = []

    for rec in records:
        try:
            location = resolver.resolve_location(rec.location_id)
            event_type = resolver.resolve_event_type(rec.event_code)
        except UnresolvedLocation as e:
            report.add_warning(f"Unknown location id: {e.location_id} for equipment {rec.equipment_id}")
            continue
        except UnresolvedEventType as e:
            report.add_warning(f"Unknown event code: {e.code} for equipment {rec.equipment_id}")
            continue

        try:
            universal_time = to_universal(rec.local_time, location.utc_offset)
        except EventTimeOutOfRange:
            report.add_warning(
                f"Event time out of range: {rec.local_time.isoformat()} at location id {location.id} "
                f"(equipment {rec.equipment_id})"
            )
            continue
        except ValueError:
            report.add_warning(
                f"Invalid UTC offset {location.utc_offset!r} for location id {location.id} "
                f"(equipment {rec.equipment_id})"
            )
            continue

        events.append(
            NormalizedEvent(
                equipment_id=rec.equipment_id,
                event_code=event_type.code,
                kind=resolver.kind_of(event_type.code),
                location_id=location.id,
                local_time=rec.local_time,
                universal_time=universal_time,
                sequence=len(events),
            )
        )
        report.count_processed()

    return events


def reconstruct(
    records: Iterable[RawEventRecord],
    resolver: ReferenceResolver,
    report: Optional[ReportAggregator] = None,
) -> Reconstruction:
    """
    raw records -> resolve -> universal time -> group/sort -> per-equipment
    state machine -> aggregate. No I/O; trips and events come back fully linked.
    """
    out = Reconstruction(report=report if report is not None else ReportAggregator())

    out.events = normalize(records, resolver, out.report)
    groups = group_by_equipment(out.events)

    for equipment_id, group in groups.items():
        outcome = reconstruct_equipment(equipment_id, group)
        out.trips.extend(outcome.trips)
        out.report.add_outcome(outcome)

    logger.info(
        "Reconstructed %d trips from %d events across %d equipment units (warnings=%d)",
        len(out.trips),
        len(out.events),
        len(groups),
        len(out.report.warnings),
    )
    return out
