"""TriggerRegistry backed by APScheduler's asyncio scheduler."""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from kakeibo.domain.sync.ports import TriggerCallback, TriggerRegistry
from kakeibo.domain.sync.value_objects import CronExpression

logger = logging.getLogger(__name__)

MISFIRE_GRACE_SECONDS = 300


class APSchedulerTriggerRegistry(TriggerRegistry):
    """One APScheduler job per schedule key.

    Jobs coalesce missed fires and never overlap with themselves.
    """

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None):
        self._scheduler = scheduler or AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Trigger registry started")

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Trigger registry stopped")

    def register(
        self,
        key: str,
        expression: str,
        timezone: str,
        callback: TriggerCallback,
    ) -> None:
        trigger = CronExpression(expression).to_trigger(timezone)
        self._scheduler.add_job(
            callback,
            trigger=trigger,
            id=key,
            name=f"sync:{key}",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        logger.debug("Registered trigger %s: %s (%s)", key, expression, timezone)

    def cancel(self, key: str) -> bool:
        if self._scheduler.get_job(key) is None:
            return False
        self._scheduler.remove_job(key)
        logger.debug("Cancelled trigger %s", key)
        return True

    def next_fire_time(self, key: str):
        job = self._scheduler.get_job(key)
        return getattr(job, "next_run_time", None) if job else None
