from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class UploadResult(BaseModel):
    events_processed: int = 0
    trips_created: int = 0
    success_count: int = 0
    error_count: int = 0
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class TripSummary(BaseModel):
    trip_id: int
    equipment_id: str
    origin: str
    destination: str
    start_time: Optional[datetime] = Field(None, description="UTC")
    end_time: Optional[datetime] = Field(None, description="UTC")
    total_trip_hours: Optional[float] = None
    is_complete: bool


class TripEvent(BaseModel):
    event_id: int
    equipment_id: str
    event_code: str
    event_description: str
    city_name: str
    event_time_local: datetime
    event_time_utc: datetime


class TripWithEvents(TripSummary):
    events: list[TripEvent]
