from __future__ import annotations

from dataclasses import asdict, dataclass, field

from app.jobs.ingest.trip_builder import EquipmentOutcome


@dataclass(frozen=True)
class ProcessingReport:
    events_processed: int
    trips_created: int
    success_count: int
    error_count: int
    warnings: tuple[str, ...]
    errors: tuple[str, ...]
    committed: bool = True

    def as_dict(self) -> dict:
        out = asdict(self)
        out["warnings"] = list(self.warnings)
        out["errors"] = list(self.errors)
        return out


@dataclass
class ReportAggregator:
    """Pure accumulation of counts and messages across one run."""

    events_processed: int = 0
    trips_created: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    committed: bool = True

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def count_processed(self, n: int = 1) -> None:
        self.events_processed += n

    def add_outcome(self, outcome: EquipmentOutcome) -> None:
        self.trips_created += len(outcome.trips)
        self.warnings.extend(outcome.warnings)

    def record_persistence_failure(self, exc: Exception) -> None:
        self.committed = False
        self.add_error(f"Database error: {exc}")

    def record_processing_failure(self, exc: Exception) -> None:
        self.committed = False
        self.add_error(f"Processing error: {exc}")

    def build(self) -> ProcessingReport:
        return ProcessingReport(
            events_processed=self.events_processed,
            trips_created=self.trips_created if self.committed else 0,
            success_count=self.events_processed if self.committed else 0,
            error_count=len(self.errors),
            warnings=tuple(self.warnings),
            errors=tuple(self.errors),
            committed=self.committed,
        )
