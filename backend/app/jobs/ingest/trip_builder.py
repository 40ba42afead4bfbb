"""
Trip reconstruction for one equipment unit.

States:
  NoOpenTrip                 nothing in progress
  TripOpen(trip)             a release was seen, waiting for its placement

Transitions (by event kind):
  NoOpenTrip --release-->      TripOpen     new trip
  TripOpen   --release-->      TripOpen     old trip closed incomplete + warning, new trip
  TripOpen   --placement-->    NoOpenTrip   trip closed complete
  NoOpenTrip --placement-->    NoOpenTrip   orphan warning, event left unattached
  any        --intermediate--> same         event attached when a trip is open

At end of stream a still-open trip is closed incomplete (equipment in transit).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

from app.jobs.ingest.types import EventKind, NormalizedEvent, ReconstructedTrip


@dataclass(frozen=True)
class NoOpenTrip:
    ordinal: int = 0                 # trips opened so far for this equipment


@dataclass(frozen=True)
class TripOpen:
    trip: ReconstructedTrip
    ordinal: int


TripState = Union[NoOpenTrip, TripOpen]


@dataclass(frozen=True)
class StepResult:
    state: TripState
    closed: tuple[ReconstructedTrip, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass
class EquipmentOutcome:
    equipment_id: str
    trips: list[ReconstructedTrip] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _open_trip(event: NormalizedEvent, ordinal: int) -> TripOpen:
    trip = ReconstructedTrip(
        key=f"{event.equipment_id}#{ordinal}",
        equipment_id=event.equipment_id,
        origin_location_id=event.location_id,
        start_time=event.universal_time,
    )
    trip.attach(event)
    return TripOpen(trip=trip, ordinal=ordinal)


def step(state: TripState, event: NormalizedEvent) -> StepResult:
    if event.kind is EventKind.RELEASE:
        if isinstance(state, TripOpen):
            state.trip.abandon()
            return StepResult(
                state=_open_trip(event, state.ordinal + 1),
                closed=(state.trip,),
                warnings=(f"Incomplete trip for {event.equipment_id}: new release event before placement",),
            )
        return StepResult(state=_open_trip(event, state.ordinal + 1))

    if event.kind is EventKind.PLACEMENT:
        if isinstance(state, TripOpen):
            state.trip.close(event)
            return StepResult(state=NoOpenTrip(ordinal=state.ordinal), closed=(state.trip,))
        return StepResult(
            state=state,
            warnings=(
                f"Orphaned placement event for {event.equipment_id} at {event.universal_time.isoformat()}",
            ),
        )

    if isinstance(state, TripOpen):
        state.trip.attach(event)
    return StepResult(state=state)


def finish(state: TripState) -> list[ReconstructedTrip]:
    if isinstance(state, TripOpen):
        state.trip.abandon()
        return [state.trip]
    return []


def reconstruct_equipment(equipment_id: str, events: Iterable[NormalizedEvent]) -> EquipmentOutcome:
    """Fold step() over one equipment's time-ordered events."""
    outcome = EquipmentOutcome(equipment_id=equipment_id)
    state: TripState = NoOpenTrip()

    for ev in events:
        result = step(state, ev)
        outcome.trips.extend(result.closed)
        outcome.warnings.extend(result.warnings)
        state = result.state

    outcome.trips.extend(finish(state))
    return outcome
