"""Fan a sync out across institutions with bounded concurrency.

The orchestrator runs legs (one per institution) in consecutive batches of
at most ``max_parallel`` legs. A batch starts only after every leg of the
previous one settled. A failing leg never affects its siblings: every error
is turned into a recorded FAILED result.

Cancellation is cooperative. Each running batch and leg owns a token in a
side table keyed by run id. A signalled token stops further batches from
starting and stops a leg before it deduplicates or ingests anything.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, Sequence
from uuid import UUID

from kakeibo.application.dtos.sync import (
    BatchSyncResult,
    LegResult,
    SyncProgress,
    SyncTarget,
)
from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.entities import (
    InstitutionSyncSettings,
    SyncRun,
    SyncSettings,
)
from kakeibo.domain.sync.exceptions import (
    SyncAlreadyRunningError,
    SyncError,
    SyncLegError,
    SyncLegTimeoutError,
    SyncRunAlreadyFinishedError,
)
from kakeibo.domain.sync.services import FULL_SYNC_LOOKBACK, IncrementalSyncStrategy
from kakeibo.domain.sync.value_objects import SyncStatus

if TYPE_CHECKING:
    from kakeibo.domain.sync.ports import (
        TransactionConnector,
        TransactionConnectorRegistry,
        TransactionIngestPort,
    )
    from kakeibo.domain.sync.repositories import (
        SyncHistoryRepository,
        SyncSettingsRepository,
    )

logger = logging.getLogger(__name__)

DEFAULT_MAX_PARALLEL = 5
DEFAULT_LEG_TIMEOUT_SECONDS = 120.0


class CancellationToken:
    """Signal that a run should stop; a leg token also follows its batch."""

    def __init__(self, parent: Optional[CancellationToken] = None):
        self._event = asyncio.Event()
        self._parent = parent

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled


class SyncOrchestrator:
    """Run sync batches and answer cancellation requests."""

    def __init__(  # NOQA: PLR0913
        self,
        history_repository: SyncHistoryRepository,
        connectors: TransactionConnectorRegistry,
        ingest: TransactionIngestPort,
        settings_repository: Optional[SyncSettingsRepository] = None,
        strategy: Optional[IncrementalSyncStrategy] = None,
        max_parallel: int = DEFAULT_MAX_PARALLEL,
        leg_timeout_seconds: float = DEFAULT_LEG_TIMEOUT_SECONDS,
        retry_delay_seconds: float = 0.0,
    ):
        if max_parallel < 1:
            msg = f"max_parallel must be at least 1, got {max_parallel}"
            raise ValueError(msg)

        self._history = history_repository
        self._connectors = connectors
        self._ingest = ingest
        self._settings_repo = settings_repository
        self._strategy = strategy or IncrementalSyncStrategy()
        self._max_parallel = max_parallel
        self._leg_timeout = leg_timeout_seconds
        self._retry_delay = retry_delay_seconds

        self._tokens: dict[UUID, CancellationToken] = {}
        self._progress: dict[UUID, SyncProgress] = {}
        self._lock = threading.Lock()
        self._start_lock = asyncio.Lock()

    @property
    def max_parallel(self) -> int:
        return self._max_parallel

    # Cancellation side table

    def cancel(self, run_id: UUID) -> bool:
        """Signal the live token of a batch or leg.

        Returns False when the run already settled or was never started here.
        """
        with self._lock:
            token = self._tokens.get(run_id)
        if token is None:
            logger.debug("No live sync run to cancel: %s", run_id)
            return False
        token.cancel()
        logger.info("Cancellation requested for sync run %s", run_id)
        return True

    def is_live(self, run_id: UUID) -> bool:
        with self._lock:
            return run_id in self._tokens

    def progress(self, run_id: UUID) -> Optional[SyncProgress]:
        with self._lock:
            progress = self._progress.get(run_id)
            return replace(progress) if progress else None

    def _register(
        self,
        run_id: UUID,
        parent: Optional[CancellationToken] = None,
    ) -> CancellationToken:
        token = CancellationToken(parent)
        with self._lock:
            self._tokens[run_id] = token
        return token

    def _unregister(self, run_id: UUID) -> None:
        with self._lock:
            self._tokens.pop(run_id, None)

    # Batch

    async def run(
        self,
        targets: Sequence[SyncTarget],
        force_full: bool = False,
    ) -> BatchSyncResult:
        targets = list(targets)
        started_at = utc_now()
        if not targets:
            logger.info("Sync requested with no institutions to sync")
            return BatchSyncResult.empty(started_at)

        settings = await self._load_settings()
        batch = await self._create_batch(len(targets))
        token = self._register(batch.id)
        progress = SyncProgress(total=len(targets))
        with self._lock:
            self._progress[batch.id] = progress

        result = BatchSyncResult(
            started_at=batch.started_at,
            run_id=batch.id,
            total_institutions=len(targets),
        )
        logger.info(
            "Starting sync run %s for %d institutions (width %d)",
            batch.id,
            len(targets),
            self._max_parallel,
        )

        try:
            for offset in range(0, len(targets), self._max_parallel):
                chunk = targets[offset : offset + self._max_parallel]
                if token.cancelled:
                    for target in chunk:
                        self._settle(result, progress, LegResult.skipped(target))
                    continue

                outcomes = await asyncio.gather(
                    *(
                        self._run_leg(target, force_full, settings, token)
                        for target in chunk
                    ),
                    return_exceptions=True,
                )
                for target, outcome in zip(chunk, outcomes):
                    self._settle(result, progress, self._to_leg_result(target, outcome))

            await self._finish_batch(batch, result, token)
        finally:
            self._unregister(batch.id)
            with self._lock:
                self._progress.pop(batch.id, None)

        logger.info(
            "Sync run %s finished: %s (%d ok, %d failed, %d new records)",
            batch.id,
            result.status.value,
            result.success_count,
            result.failure_count,
            result.total_new,
        )
        return result

    async def _create_batch(self, total: int) -> SyncRun:
        """Persist a RUNNING batch unless another batch is still running.

        The check and the insert happen under one lock, so two overlapping
        starts in this process cannot both pass the check.
        """
        async with self._start_lock:
            running = await self._history.find_running()
            if running is not None:
                raise SyncAlreadyRunningError(running.id)
            batch = SyncRun.create_batch(total).start()
            await self._history.create(batch)
        return batch

    def _to_leg_result(self, target: SyncTarget, outcome: Any) -> LegResult:
        if isinstance(outcome, LegResult):
            return outcome
        if isinstance(outcome, Exception):
            logger.error(
                "Unexpected error syncing %s: %s",
                target.institution_id,
                outcome,
                exc_info=outcome,
            )
            return LegResult.failed(target, str(outcome) or type(outcome).__name__)
        raise outcome

    def _settle(
        self,
        result: BatchSyncResult,
        progress: SyncProgress,
        leg: LegResult,
    ) -> None:
        result.add_result(leg)
        with self._lock:
            if leg.status == SyncStatus.COMPLETED:
                progress.completed += 1
            elif leg.status == SyncStatus.CANCELLED:
                progress.cancelled += 1
            else:
                progress.failed += 1

    async def _finish_batch(
        self,
        batch: SyncRun,
        result: BatchSyncResult,
        token: CancellationToken,
    ) -> None:
        if token.cancelled:
            final = batch.cancel()
        else:
            final = batch.complete(result.success_count, result.failure_count)
        final = replace(
            final,
            total_fetched=result.total_fetched,
            new_records=result.total_new,
            duplicate_records=result.total_duplicate,
        )

        final = await self._persist_final(final)
        result.status = final.status
        result.completed_at = final.completed_at

    # Leg

    async def _run_leg(
        self,
        target: SyncTarget,
        force_full: bool,
        settings: SyncSettings,
        batch_token: CancellationToken,
    ) -> LegResult:
        leg = SyncRun.create_leg(
            target.institution_id,
            target.institution_name,
            target.institution_type,
        )
        token = self._register(leg.id, parent=batch_token)
        try:
            await self._history.create(leg)
            leg = leg.start()
            await self._history.update(leg)

            try:
                await self._mark_institution_syncing(target.institution_id, settings)
                leg = await self._sync_leg(leg, target, force_full, settings, token)
            except Exception as e:  # NOQA: BLE001
                leg = self._failed_or_cancelled(leg, e, token)

            leg = await self._persist_final(leg)
            await self._record_institution_outcome(leg, target, settings)
            return LegResult.from_run(leg, target)
        finally:
            self._unregister(leg.id)

    async def _sync_leg(
        self,
        leg: SyncRun,
        target: SyncTarget,
        force_full: bool,
        settings: SyncSettings,
        token: CancellationToken,
    ) -> SyncRun:
        if token.cancelled:
            return leg.cancel()

        window_end = utc_now()
        last = await self._history.find_latest_successful(target.institution_id)
        window_start = self._strategy.determine_window_start(
            last, force_full=force_full, now=window_end
        )
        period = self._strategy.optimize_period(
            window_start, window_end, max_days=FULL_SYNC_LOOKBACK.days
        )
        validation = self._strategy.validate_period(
            period.start, period.end, now=window_end
        )
        if not validation.valid:
            msg = f"Invalid sync period: {validation.reason}"
            raise SyncLegError(target.institution_id, msg)

        connector = self._connectors.get(target.institution_type)
        leg, records, error = await self._fetch_with_retry(
            leg, target, connector, period.start, period.end, settings, token
        )
        if token.cancelled:
            return leg.cancel()
        if error is not None:
            return leg.fail(str(error))

        known_ids = await self._ingest.find_known_ids(target.institution_id)
        filtered = self._strategy.filter_duplicates(records, known_ids)
        if token.cancelled:
            return leg.cancel()

        if filtered.new:
            await self._ingest.ingest(target.institution_id, filtered.new)

        logger.info(
            "Synced %s: %d fetched, %d new, %d duplicate",
            target.institution_id,
            filtered.stats.total,
            filtered.stats.new,
            filtered.stats.duplicates,
        )
        leg = leg.record_fetch(
            total=filtered.stats.total,
            new=filtered.stats.new,
            duplicate=filtered.stats.duplicates,
        )
        return leg.complete(success_count=1, failure_count=0)

    async def _fetch_with_retry(  # NOQA: PLR0913
        self,
        leg: SyncRun,
        target: SyncTarget,
        connector: TransactionConnector,
        window_start: datetime,
        window_end: datetime,
        settings: SyncSettings,
        token: CancellationToken,
    ) -> tuple[SyncRun, list[Any], Optional[SyncError]]:
        """Fetch records, retrying per the global retry policy.

        Returns the leg (with its retry count advanced), the records, and the
        last error when every attempt failed.
        """
        retries = settings.max_retry_count if settings.auto_retry else 0
        error: Optional[SyncError] = None

        for attempt in range(retries + 1):
            if attempt:
                leg = leg.increment_retry_count()
                await self._history.update(leg)
                if self._retry_delay:
                    await asyncio.sleep(self._retry_delay)
                logger.info(
                    "Retrying fetch for %s (attempt %d of %d)",
                    target.institution_id,
                    attempt,
                    retries,
                )

            try:
                records = await asyncio.wait_for(
                    connector.fetch(target.institution_id, window_start, window_end),
                    timeout=self._leg_timeout,
                )
                return leg, list(records), None
            except asyncio.TimeoutError:
                error = SyncLegTimeoutError(target.institution_id, self._leg_timeout)
            except SyncError as e:
                error = e
            except Exception as e:  # NOQA: BLE001
                error = SyncLegError(target.institution_id, str(e) or type(e).__name__)

            logger.warning("Fetch failed for %s: %s", target.institution_id, error)
            if token.cancelled:
                break

        return leg, [], error

    def _failed_or_cancelled(
        self,
        leg: SyncRun,
        error: Exception,
        token: CancellationToken,
    ) -> SyncRun:
        if token.cancelled:
            return leg.cancel()
        if not isinstance(error, SyncError):
            logger.exception("Unexpected error syncing %s", leg.institution_id)
        return leg.fail(str(error) or type(error).__name__)

    async def _persist_final(self, run: SyncRun) -> SyncRun:
        """Store a terminal run; a run already finished elsewhere keeps that state."""
        try:
            await self._history.update(run)
        except SyncRunAlreadyFinishedError as e:
            logger.info("Sync run %s was finished concurrently: %s", run.id, e.status)
            stored = await self._history.find_by_id(run.id)
            if stored is not None:
                return stored
        return run

    # Institution settings bookkeeping

    async def _load_settings(self) -> SyncSettings:
        if self._settings_repo is None:
            return SyncSettings.create_default()
        return await self._settings_repo.get_or_create()

    async def _institution_settings(
        self, institution_id: str, settings: SyncSettings
    ) -> Optional[InstitutionSyncSettings]:
        if self._settings_repo is None:
            return None
        existing = await self._settings_repo.find_institution_settings(institution_id)
        if existing is not None:
            return existing
        return InstitutionSyncSettings.create(
            institution_id, default_interval=settings.default_interval
        )

    async def _mark_institution_syncing(
        self, institution_id: str, settings: SyncSettings
    ) -> None:
        current = await self._institution_settings(institution_id, settings)
        if current is None:
            return
        await self._settings_repo.save_institution_settings(current.mark_syncing())  # type: ignore[union-attr]

    async def _record_institution_outcome(
        self,
        leg: SyncRun,
        target: SyncTarget,
        settings: SyncSettings,
    ) -> None:
        current = await self._institution_settings(target.institution_id, settings)
        if current is None:
            return

        if leg.status == SyncStatus.COMPLETED:
            updated = current.record_successful_sync(
                leg.completed_at or utc_now(), settings.default_interval
            )
        elif leg.status == SyncStatus.FAILED:
            updated = current.increment_error_count(leg.error_message)
        else:
            updated = current.mark_idle()
        await self._settings_repo.save_institution_settings(updated)  # type: ignore[union-attr]
