from __future__ import annotations

from typing import Iterable

from app.jobs.ingest.types import NormalizedEvent


def sort_events(events: Iterable[NormalizedEvent]) -> list[NormalizedEvent]:
    # list.sort is stable: equal universal times keep their input order
    return sorted(events, key=lambda ev: ev.universal_time)


def group_by_equipment(events: Iterable[NormalizedEvent]) -> dict[str, list[NormalizedEvent]]:
    """
    Partition events by exact equipment id and sort each partition by
    universal time. Keys come back in ascending equipment id order so the
    merge downstream does not depend on input ordering.
    """
    groups: dict[str, list[NormalizedEvent]] = {}
    for ev in events:
        groups.setdefault(ev.equipment_id, []).append(ev)

    return {equipment_id: sort_events(groups[equipment_id]) for equipment_id in sorted(groups)}
