"""Incremental sync strategy.

Decides which date window to request from an institution and separates
fetched records into new ones and ones already ingested. Re-fetching a small
overlap behind the last successful run is cheap because duplicates are
filtered here.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Generic, Optional, TypeVar

from kakeibo.domain.shared.time import ensure_tz_aware, utc_now
from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.value_objects import SyncStatus

FULL_SYNC_LOOKBACK = timedelta(days=90)
INCREMENTAL_OVERLAP = timedelta(days=1)
MAX_PERIOD = timedelta(days=365)
DEFAULT_MAX_PERIOD_DAYS = 90

RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class DuplicateFilterStats:
    total: int
    new: int
    duplicates: int


@dataclass(frozen=True)
class DuplicateFilterResult(Generic[RecordT]):
    new: list[RecordT] = field(default_factory=list)
    duplicates: list[RecordT] = field(default_factory=list)
    stats: DuplicateFilterStats = field(
        default_factory=lambda: DuplicateFilterStats(0, 0, 0)
    )


@dataclass(frozen=True)
class PeriodValidation:
    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class OptimizedPeriod:
    start: datetime
    end: datetime
    adjusted: bool = False


def record_identifier(record: Any) -> Optional[str]:
    """Identifier of a fetched record, from a mapping key or an attribute."""
    if isinstance(record, Mapping):
        value = record.get("id")
    else:
        value = getattr(record, "id", None)
    if value is None or value == "":
        return None
    return str(value)


class IncrementalSyncStrategy:
    """Window and duplicate handling for incremental syncs."""

    def determine_window_start(
        self,
        last_successful_run: Optional[SyncRun],
        force_full: bool = False,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Start of the fetch window.

        A full sync, or one without a completed predecessor, looks back 90
        days. Otherwise the window starts one day before the previous
        completion to pick up late-posted records.
        """
        current = ensure_tz_aware(now) if now else utc_now()

        if (
            force_full
            or last_successful_run is None
            or last_successful_run.status != SyncStatus.COMPLETED
            or last_successful_run.completed_at is None
        ):
            return current - FULL_SYNC_LOOKBACK

        completed_at = ensure_tz_aware(last_successful_run.completed_at)
        return completed_at - INCREMENTAL_OVERLAP

    def filter_duplicates(
        self,
        fetched: Iterable[RecordT],
        known_ids: Iterable[str],
    ) -> DuplicateFilterResult[RecordT]:
        """Split records into new and already-known, keeping input order.

        Records without an identifier cannot be matched and count as new.
        """
        known = {str(i) for i in known_ids}
        new: list[RecordT] = []
        duplicates: list[RecordT] = []

        for record in fetched:
            identifier = record_identifier(record)
            if identifier is not None and identifier in known:
                duplicates.append(record)
            else:
                new.append(record)

        return DuplicateFilterResult(
            new=new,
            duplicates=duplicates,
            stats=DuplicateFilterStats(
                total=len(new) + len(duplicates),
                new=len(new),
                duplicates=len(duplicates),
            ),
        )

    def validate_period(
        self,
        start: datetime,
        end: datetime,
        now: Optional[datetime] = None,
    ) -> PeriodValidation:
        current = ensure_tz_aware(now) if now else utc_now()
        start, end = ensure_tz_aware(start), ensure_tz_aware(end)

        if start > end:
            return PeriodValidation(valid=False, reason="start after end")
        if end > current:
            return PeriodValidation(valid=False, reason="end date in the future")
        if end - start > MAX_PERIOD:
            return PeriodValidation(valid=False, reason="period too long")
        return PeriodValidation(valid=True)

    def optimize_period(
        self,
        start: datetime,
        end: datetime,
        max_days: int = DEFAULT_MAX_PERIOD_DAYS,
    ) -> OptimizedPeriod:
        """Clamp the window so it spans at most ``max_days``, keeping the end."""
        limit = timedelta(days=max_days)
        if end - start <= limit:
            return OptimizedPeriod(start=start, end=end)
        return OptimizedPeriod(start=end - limit, end=end, adjusted=True)
