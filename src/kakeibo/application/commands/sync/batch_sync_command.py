"""Start a sync across connected institutions (optionally filtered)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence

from kakeibo.application.dtos.sync import BatchSyncResult, SyncTarget
from kakeibo.domain.sync.exceptions import SyncAlreadyRunningError

if TYPE_CHECKING:
    from kakeibo.application.services import SyncOrchestrator
    from kakeibo.domain.sync.ports import Institution, InstitutionDirectory
    from kakeibo.domain.sync.repositories import (
        SyncHistoryRepository,
        SyncSettingsRepository,
    )

logger = logging.getLogger(__name__)


class BatchSyncCommand:
    """Resolve sync targets and hand them to the orchestrator."""

    def __init__(
        self,
        directory: InstitutionDirectory,
        orchestrator: SyncOrchestrator,
        history_repository: SyncHistoryRepository,
        settings_repository: Optional[SyncSettingsRepository] = None,
    ):
        self._directory = directory
        self._orchestrator = orchestrator
        self._history = history_repository
        self._settings_repo = settings_repository

    async def execute(
        self,
        institution_ids: Optional[Sequence[str]] = None,
        force_full: bool = False,
        respect_schedule: bool = False,
    ) -> BatchSyncResult:
        """
        Sync connected institutions.

        Parameters
        ----------
        institution_ids
            Restrict the run to these institutions; unknown or disconnected
            ones are skipped
        force_full
            Ignore previous runs and fetch the full lookback window
        respect_schedule
            Leave out institutions that are disabled or run on their own
            interval (used by the global trigger)
        """
        running = await self._history.find_running()
        if running is not None:
            raise SyncAlreadyRunningError(running.id)

        institutions = await self._resolve_institutions(institution_ids)
        if respect_schedule:
            institutions = await self._follow_global_schedule(institutions)

        targets = [SyncTarget.from_institution(i) for i in institutions]
        return await self._orchestrator.run(targets, force_full=force_full)

    async def _resolve_institutions(
        self,
        institution_ids: Optional[Sequence[str]],
    ) -> list[Institution]:
        connected = await self._directory.list_connected()
        if institution_ids is None:
            return connected

        wanted = set(institution_ids)
        selected = [i for i in connected if i.id in wanted]
        missing = wanted - {i.id for i in selected}
        if missing:
            logger.warning(
                "Skipping unknown or disconnected institutions: %s",
                ", ".join(sorted(missing)),
            )
        return selected

    async def _follow_global_schedule(
        self,
        institutions: list[Institution],
    ) -> list[Institution]:
        if self._settings_repo is None:
            return institutions

        own_schedule = {
            s.institution_id
            for s in await self._settings_repo.find_all_institution_settings()
            if not s.enabled or not s.inherits_default
        }
        return [i for i in institutions if i.id not in own_schedule]
