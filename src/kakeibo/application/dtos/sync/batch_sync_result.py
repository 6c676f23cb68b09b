"""DTOs for the outcome of a batch sync."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from kakeibo.application.dtos.sync.sync_target import SyncTarget
from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.value_objects import SyncStatus


@dataclass(frozen=True)
class LegResult:
    """Outcome of syncing one institution."""

    institution_id: str
    institution_name: str
    status: SyncStatus
    run_id: Optional[UUID] = None
    total_fetched: int = 0
    new_records: int = 0
    duplicate_records: int = 0
    retry_count: int = 0
    error_message: Optional[str] = None
    duration_ms: Optional[int] = None

    @classmethod
    def from_run(cls, run: SyncRun, target: SyncTarget) -> "LegResult":
        duration = run.duration
        return cls(
            institution_id=target.institution_id,
            institution_name=target.institution_name,
            status=run.status,
            run_id=run.id,
            total_fetched=run.total_fetched,
            new_records=run.new_records,
            duplicate_records=run.duplicate_records,
            retry_count=run.retry_count,
            error_message=run.error_message,
            duration_ms=int(duration.total_seconds() * 1000) if duration else None,
        )

    @classmethod
    def failed(cls, target: SyncTarget, error_message: str) -> "LegResult":
        return cls(
            institution_id=target.institution_id,
            institution_name=target.institution_name,
            status=SyncStatus.FAILED,
            error_message=error_message,
        )

    @classmethod
    def skipped(cls, target: SyncTarget) -> "LegResult":
        """A leg never started because its batch was cancelled first."""
        return cls(
            institution_id=target.institution_id,
            institution_name=target.institution_name,
            status=SyncStatus.CANCELLED,
            error_message="Batch cancelled before this institution was synced",
        )

    @property
    def succeeded(self) -> bool:
        return self.status == SyncStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "institution_id": self.institution_id,
            "institution_name": self.institution_name,
            "status": self.status.value,
            "run_id": str(self.run_id) if self.run_id else None,
            "total_fetched": self.total_fetched,
            "new_records": self.new_records,
            "duplicate_records": self.duplicate_records,
            "retry_count": self.retry_count,
            "error_message": self.error_message,
            "duration_ms": self.duration_ms,
        }


@dataclass
class BatchSyncResult:
    """Summary of a batch sync across institutions."""

    started_at: datetime
    run_id: Optional[UUID] = None
    status: SyncStatus = SyncStatus.RUNNING
    completed_at: Optional[datetime] = None

    # Aggregate counts
    total_institutions: int = 0
    success_count: int = 0
    failure_count: int = 0
    cancelled_count: int = 0
    total_fetched: int = 0
    total_new: int = 0
    total_duplicate: int = 0

    # Per-institution breakdown, in submission order
    results: list[LegResult] = field(default_factory=list)

    @classmethod
    def empty(cls, started_at: datetime) -> "BatchSyncResult":
        return cls(
            started_at=started_at,
            status=SyncStatus.COMPLETED,
            completed_at=started_at,
        )

    @property
    def duration_ms(self) -> int:
        if self.completed_at is None:
            return 0
        return int((self.completed_at - self.started_at).total_seconds() * 1000)

    @property
    def errors(self) -> list[str]:
        return [
            f"{r.institution_name}: {r.error_message}"
            for r in self.results
            if r.error_message and not r.succeeded
        ]

    def add_result(self, result: LegResult) -> None:
        self.results.append(result)
        self.total_fetched += result.total_fetched
        self.total_new += result.new_records
        self.total_duplicate += result.duplicate_records

        if result.succeeded:
            self.success_count += 1
        else:
            self.failure_count += 1
        if result.status == SyncStatus.CANCELLED:
            self.cancelled_count += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": str(self.run_id) if self.run_id else None,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "total_institutions": self.total_institutions,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "cancelled_count": self.cancelled_count,
            "total_fetched": self.total_fetched,
            "total_new": self.total_new,
            "total_duplicate": self.total_duplicate,
            "results": [r.to_dict() for r in self.results],
            "errors": self.errors,
        }
