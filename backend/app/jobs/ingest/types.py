from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional


class EventKind(enum.Enum):
    RELEASE = "release"              # opens a trip (W)
    PLACEMENT = "placement"          # closes a trip (Z)
    INTERMEDIATE = "intermediate"    # arrivals/departures along the way


@dataclass(frozen=True)
class RawEventRecord:
    equipment_id: str
    event_code: str
    location_id: int
    local_time: datetime             # naive, location wall clock
    row_number: int = 0              # 1-based data row in the upload


@dataclass(frozen=True)
class LocationRef:
    id: int
    name: str
    utc_offset: str                  # "-05:00"


@dataclass(frozen=True)
class EventTypeRef:
    code: str
    description: str
    long_description: str = ""


@dataclass
class NormalizedEvent:
    equipment_id: str
    event_code: str
    kind: EventKind
    location_id: int
    local_time: datetime
    universal_time: datetime         # UTC aware
    sequence: int                    # position among resolved records
    trip_key: Optional[str] = None

    def attach(self, trip_key: str) -> None:
        if self.trip_key is not None:
            raise ValueError(f"event #{self.sequence} already belongs to trip {self.trip_key}")
        self.trip_key = trip_key


@dataclass
class ReconstructedTrip:
    key: str                         # "<equipment_id>#<ordinal>"
    equipment_id: str
    origin_location_id: Optional[int] = None
    destination_location_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[timedelta] = None
    is_complete: bool = False
    events: list[NormalizedEvent] = field(default_factory=list)

    def attach(self, event: NormalizedEvent) -> None:
        event.attach(self.key)
        self.events.append(event)

    def close(self, placement: NormalizedEvent) -> None:
        self.attach(placement)
        self.destination_location_id = placement.location_id
        self.end_time = placement.universal_time
        self.duration = self.end_time - self.start_time
        self.is_complete = True

    def abandon(self) -> None:
        """Close without a placement: destination, end and duration stay unset."""
        self.destination_location_id = None
        self.end_time = None
        self.duration = None
        self.is_complete = False
