"""Keep live cron triggers in line with the stored sync settings.

There is one trigger for the global schedule (key ``"global"``) and one per
institution that has its own interval. Institutions that follow the global
default are synced by the global trigger. Replacing a schedule always cancels
the old trigger before the new one is registered, under a lock, so a key
never has two live triggers.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import TYPE_CHECKING, Any, Optional
from zoneinfo import ZoneInfo

from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.exceptions import SyncAlreadyRunningError
from kakeibo.domain.sync.value_objects import SyncStatus

if TYPE_CHECKING:
    from kakeibo.application.commands.sync import BatchSyncCommand
    from kakeibo.domain.sync.entities import InstitutionSyncSettings, SyncSettings
    from kakeibo.domain.sync.ports import TriggerRegistry
    from kakeibo.domain.sync.repositories import (
        SyncHistoryRepository,
        SyncSettingsRepository,
    )
    from kakeibo.domain.sync.value_objects import SyncInterval

logger = logging.getLogger(__name__)

GLOBAL_SCHEDULE_KEY = "global"
DEFAULT_TIMEZONE = "Asia/Tokyo"


@dataclass
class SchedulerMetrics:
    """Counters over scheduled fires that actually started a sync."""

    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    average_duration_ms: float = 0.0
    last_execution_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None

    def record(self, at: datetime, duration_ms: float, success: bool) -> None:
        self.total_executions += 1
        self.average_duration_ms += (
            duration_ms - self.average_duration_ms
        ) / self.total_executions
        self.last_execution_at = at
        if success:
            self.successful_executions += 1
            self.last_success_at = at
        else:
            self.failed_executions += 1
            self.last_failure_at = at

    def to_dict(self) -> dict[str, Any]:
        def iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "total_executions": self.total_executions,
            "successful_executions": self.successful_executions,
            "failed_executions": self.failed_executions,
            "average_duration_ms": round(self.average_duration_ms, 1),
            "last_execution_at": iso(self.last_execution_at),
            "last_success_at": iso(self.last_success_at),
            "last_failure_at": iso(self.last_failure_at),
        }


class SyncScheduler:
    """Map schedule keys to live triggers and run syncs when they fire."""

    def __init__(
        self,
        registry: TriggerRegistry,
        sync_command: BatchSyncCommand,
        history_repository: SyncHistoryRepository,
        settings_repository: Optional[SyncSettingsRepository] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._registry = registry
        self._sync_command = sync_command
        self._history = history_repository
        self._settings_repo = settings_repository
        self._timezone = timezone
        self._tz = ZoneInfo(timezone)

        self._schedules: dict[str, str] = {}
        self._lock = threading.RLock()
        self._metrics = SchedulerMetrics()

    @property
    def timezone(self) -> str:
        return self._timezone

    @property
    def metrics(self) -> SchedulerMetrics:
        return self._metrics

    def reset_metrics(self) -> None:
        self._metrics = SchedulerMetrics()

    def current_schedules(self) -> dict[str, str]:
        """Live trigger expressions keyed by schedule key."""
        with self._lock:
            return dict(self._schedules)

    # Schedule maintenance

    def apply_global_schedule(self, settings: SyncSettings) -> Optional[str]:
        """Replace the global trigger; a MANUAL default leaves none."""
        expression = settings.default_interval.to_cron_expression()
        self._replace(GLOBAL_SCHEDULE_KEY, expression)
        return expression

    def apply_institution_schedule(
        self,
        institution_id: str,
        settings: InstitutionSyncSettings,
        default_interval: SyncInterval,
    ) -> Optional[str]:
        """Replace the trigger of one institution.

        Disabled institutions, MANUAL intervals and institutions following the
        global default end up without an own trigger.
        """
        expression = None
        if settings.enabled and not settings.inherits_default:
            expression = settings.effective_interval(
                default_interval
            ).to_cron_expression()
        self._replace(institution_id, expression)
        return expression

    def remove_institution_schedule(self, institution_id: str) -> bool:
        with self._lock:
            existed = self._schedules.pop(institution_id, None) is not None
            self._registry.cancel(institution_id)
        return existed

    async def bootstrap(self) -> None:
        """Register triggers for everything currently stored."""
        if self._settings_repo is None:
            return

        settings = await self._settings_repo.get_or_create()
        self.apply_global_schedule(settings)
        for institution in await self._settings_repo.find_all_institution_settings():
            self.apply_institution_schedule(
                institution.institution_id,
                institution,
                settings.default_interval,
            )
        logger.info("Sync scheduler bootstrapped with %d triggers", len(self._schedules))

    def shutdown(self) -> None:
        with self._lock:
            for key in list(self._schedules):
                self._registry.cancel(key)
            self._schedules.clear()

    def _replace(self, key: str, expression: Optional[str]) -> None:
        with self._lock:
            self._registry.cancel(key)
            self._schedules.pop(key, None)
            if expression is None:
                logger.info("Sync schedule removed: %s", key)
                return

            self._registry.register(
                key,
                expression,
                self._timezone,
                partial(self.fire, key),
            )
            self._schedules[key] = expression
        logger.info("Sync schedule %s set to '%s' (%s)", key, expression, self._timezone)

    # Firing

    async def fire(self, key: str) -> None:
        """Run the sync behind a trigger unless it should be skipped."""
        if await self._in_quiet_hours():
            logger.info("Skipping scheduled sync %s: quiet hours", key)
            return

        running = await self._history.find_running()
        if running is not None:
            logger.info("Skipping scheduled sync %s: run %s in progress", key, running.id)
            return

        at = utc_now()
        started = time.perf_counter()
        institution_ids = None if key == GLOBAL_SCHEDULE_KEY else [key]
        try:
            result = await self._sync_command.execute(
                institution_ids=institution_ids,
                respect_schedule=key == GLOBAL_SCHEDULE_KEY,
            )
        except SyncAlreadyRunningError as e:
            logger.info("Skipping scheduled sync %s: %s", key, e.message)
            return
        except Exception:
            self._metrics.record(at, _elapsed_ms(started), success=False)
            logger.exception("Scheduled sync %s failed", key)
            return

        success = result.status != SyncStatus.FAILED
        self._metrics.record(at, _elapsed_ms(started), success=success)
        logger.info(
            "Scheduled sync %s finished: %s in %dms",
            key,
            result.status.value,
            result.duration_ms,
        )

    async def _in_quiet_hours(self) -> bool:
        if self._settings_repo is None:
            return False
        settings = await self._settings_repo.get_or_create()
        return settings.quiet_hours.contains(datetime.now(self._tz))


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
