from __future__ import annotations

import logging
from typing import Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import AppConfig
from app.jobs.ingest.types import EventKind, EventTypeRef, LocationRef
from app.models.event_codes import EventCode
from app.models.locations import Location

logger = logging.getLogger(__name__)


class UnresolvedLocation(LookupError):
    def __init__(self, location_id: int):
        super().__init__(location_id)
        self.location_id = location_id


class UnresolvedEventType(LookupError):
    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


class ReferenceResolver:
    """
    Immutable snapshot of the location and event-code tables for one run.
    Lookups are exact-key; misses raise UnresolvedLocation/UnresolvedEventType.
    """

    def __init__(
        self,
        locations: Mapping[int, LocationRef],
        event_types: Mapping[str, EventTypeRef],
        *,
        release_codes: Iterable[str] = ("W",),
        placement_codes: Iterable[str] = ("Z",),
    ):
        self._locations = dict(locations)
        self._event_types = dict(event_types)
        self._release_codes = frozenset(release_codes)
        self._placement_codes = frozenset(placement_codes)

    @classmethod
    def from_rows(
        cls,
        locations: Iterable[LocationRef],
        event_types: Iterable[EventTypeRef],
        **kwargs,
    ) -> "ReferenceResolver":
        return cls(
            {loc.id: loc for loc in locations},
            {et.code: et for et in event_types},
            **kwargs,
        )

    @property
    def event_codes(self) -> tuple[str, ...]:
        return tuple(self._event_types)

    def resolve_location(self, location_id: int) -> LocationRef:
        try:
            return self._locations[location_id]
        except KeyError:
            raise UnresolvedLocation(location_id) from None

    def resolve_event_type(self, code: str) -> EventTypeRef:
        try:
            return self._event_types[code]
        except KeyError:
            raise UnresolvedEventType(code) from None

    def kind_of(self, code: str) -> EventKind:
        if code in self._release_codes:
            return EventKind.RELEASE
        if code in self._placement_codes:
            return EventKind.PLACEMENT
        return EventKind.INTERMEDIATE


def load_reference(db: Session, config: AppConfig) -> ReferenceResolver:
    locations = [
        LocationRef(id=row.id, name=row.name, utc_offset=row.utc_offset)
        for row in db.execute(select(Location)).scalars()
    ]
    event_types = [
        EventTypeRef(code=row.code, description=row.description, long_description=row.long_description or "")
        for row in db.execute(select(EventCode)).scalars()
    ]
    logger.info("Reference snapshot: locations=%d event_codes=%d", len(locations), len(event_types))

    return ReferenceResolver.from_rows(
        locations,
        event_types,
        release_codes=config.release_codes,
        placement_codes=config.placement_codes,
    )
