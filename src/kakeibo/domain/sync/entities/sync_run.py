"""SyncRun entity: one execution of a sync, for a batch or one institution."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.exceptions import InvalidSyncTransitionError
from kakeibo.domain.sync.value_objects import SyncStatus

BATCH_INSTITUTION_TYPE = "batch"
BATCH_NAME = "Sync all institutions"


@dataclass(frozen=True)
class SyncRun:
    """History entry for a sync.

    Transitions only move forward:

        PENDING -> RUNNING -> COMPLETED | FAILED | PARTIAL_SUCCESS | CANCELLED

    Each transition returns a new instance. ``completed_at`` is stamped once,
    on entry into a terminal state.
    """

    institution_name: str
    institution_type: str
    institution_id: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    status: SyncStatus = SyncStatus.PENDING
    started_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    total_fetched: int = 0
    new_records: int = 0
    duplicate_records: int = 0
    total_institutions: int = 0
    success_count: int = 0
    failure_count: int = 0
    error_message: Optional[str] = None
    retry_count: int = 0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def create_batch(cls, total_institutions: int) -> "SyncRun":
        return cls(
            institution_name=BATCH_NAME,
            institution_type=BATCH_INSTITUTION_TYPE,
            total_institutions=total_institutions,
        )

    @classmethod
    def create_leg(
        cls,
        institution_id: str,
        institution_name: str,
        institution_type: str,
    ) -> "SyncRun":
        return cls(
            institution_id=institution_id,
            institution_name=institution_name,
            institution_type=institution_type,
            total_institutions=1,
        )

    @property
    def is_batch(self) -> bool:
        return self.institution_id is None

    @property
    def is_running(self) -> bool:
        return self.status == SyncStatus.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    @property
    def duration(self) -> Optional[timedelta]:
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    # Transitions

    def start(self) -> "SyncRun":
        self._require(SyncStatus.PENDING, "start")
        now = utc_now()
        return replace(self, status=SyncStatus.RUNNING, started_at=now, updated_at=now)

    def complete(self, success_count: int, failure_count: int) -> "SyncRun":
        """Finish a run from its success and failure tallies."""
        self._require(SyncStatus.RUNNING, "complete")
        if failure_count == 0:
            status = SyncStatus.COMPLETED
        elif success_count == 0:
            status = SyncStatus.FAILED
        else:
            status = SyncStatus.PARTIAL_SUCCESS
        return self._finish(
            status,
            success_count=success_count,
            failure_count=failure_count,
        )

    def fail(self, error_message: str) -> "SyncRun":
        self._require(SyncStatus.RUNNING, "fail")
        return self._finish(SyncStatus.FAILED, error_message=error_message)

    def cancel(self) -> "SyncRun":
        self._require(SyncStatus.RUNNING, "cancel")
        return self._finish(SyncStatus.CANCELLED)

    # Counters (any non-terminal state)

    def add_new_transactions(self, count: int) -> "SyncRun":
        self._require_open("add transactions to")
        return replace(
            self, new_records=self.new_records + count, updated_at=utc_now()
        )

    def record_fetch(self, total: int, new: int, duplicate: int) -> "SyncRun":
        self._require_open("record fetch results on")
        return replace(
            self,
            total_fetched=self.total_fetched + total,
            new_records=self.new_records + new,
            duplicate_records=self.duplicate_records + duplicate,
            updated_at=utc_now(),
        )

    def increment_retry_count(self) -> "SyncRun":
        self._require_open("retry")
        return replace(self, retry_count=self.retry_count + 1, updated_at=utc_now())

    def _finish(self, status: SyncStatus, **changes) -> "SyncRun":
        now = utc_now()
        return replace(
            self,
            status=status,
            completed_at=self.completed_at or now,
            updated_at=now,
            **changes,
        )

    def _require(self, expected: SyncStatus, action: str) -> None:
        if self.status != expected:
            raise InvalidSyncTransitionError(self.id, self.status.value, action)

    def _require_open(self, action: str) -> None:
        if self.is_terminal:
            raise InvalidSyncTransitionError(self.id, self.status.value, action)
