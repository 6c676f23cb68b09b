"""Wiring of the sync collaborators shared by API requests and triggers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from kakeibo.application.commands.sync import BatchSyncCommand
from kakeibo.application.services import SyncOrchestrator, SyncScheduler
from kakeibo.domain.sync.ports import (
    InstitutionDirectory,
    TransactionConnectorRegistry,
    TransactionIngestPort,
    TriggerRegistry,
)
from kakeibo.domain.sync.repositories import (
    SyncHistoryRepository,
    SyncSettingsRepository,
)
from kakeibo.infrastructure.integration import (
    InMemoryInstitutionDirectory,
    InMemoryTransactionStore,
)
from kakeibo.infrastructure.persistence.json import SyncSettingsRepositoryJSON
from kakeibo.infrastructure.persistence.sqlalchemy.database import (
    create_engine,
    create_session_maker,
    create_tables,
)
from kakeibo.infrastructure.persistence.sqlalchemy.repositories import (
    SyncHistoryRepositorySQLAlchemy,
    SyncSettingsRepositorySQLAlchemy,
)
from kakeibo.infrastructure.scheduling import APSchedulerTriggerRegistry
from kakeibo_config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class SyncContainer:
    """Long-lived collaborators for one running application."""

    history_repository: SyncHistoryRepository
    settings_repository: SyncSettingsRepository
    directory: InstitutionDirectory
    orchestrator: SyncOrchestrator
    scheduler: SyncScheduler
    registry: TriggerRegistry
    engine: Optional[AsyncEngine] = None

    @property
    def batch_sync_command(self) -> BatchSyncCommand:
        return BatchSyncCommand(
            directory=self.directory,
            orchestrator=self.orchestrator,
            history_repository=self.history_repository,
            settings_repository=self.settings_repository,
        )

    async def start(self) -> None:
        if self.engine is not None:
            await create_tables(self.engine)
        if isinstance(self.registry, APSchedulerTriggerRegistry):
            self.registry.start()
        await self.scheduler.bootstrap()

    async def stop(self) -> None:
        self.scheduler.shutdown()
        if isinstance(self.registry, APSchedulerTriggerRegistry):
            self.registry.shutdown()
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database connections closed")


def build_container(  # NOQA: PLR0913
    settings: Settings,
    directory: Optional[InstitutionDirectory] = None,
    connectors: Optional[TransactionConnectorRegistry] = None,
    ingest: Optional[TransactionIngestPort] = None,
    history_repository: Optional[SyncHistoryRepository] = None,
    settings_repository: Optional[SyncSettingsRepository] = None,
    registry: Optional[TriggerRegistry] = None,
) -> SyncContainer:
    """Assemble the container, filling gaps from settings."""
    engine = None
    if history_repository is None or (
        settings_repository is None and settings.sync_settings_backend == "database"
    ):
        engine = create_engine(settings.database_url, echo=settings.debug)
        session_maker = create_session_maker(engine)
        if history_repository is None:
            history_repository = SyncHistoryRepositorySQLAlchemy(session_maker)
        if settings_repository is None:
            settings_repository = SyncSettingsRepositorySQLAlchemy(session_maker)

    if settings_repository is None:
        settings_repository = SyncSettingsRepositoryJSON(settings.sync_data_path)

    directory = directory or InMemoryInstitutionDirectory()
    orchestrator = SyncOrchestrator(
        history_repository=history_repository,
        connectors=connectors or TransactionConnectorRegistry(),
        ingest=ingest or InMemoryTransactionStore(),
        settings_repository=settings_repository,
        max_parallel=settings.sync_max_parallel,
        leg_timeout_seconds=settings.sync_leg_timeout_seconds,
        retry_delay_seconds=settings.sync_retry_delay_seconds,
    )
    registry = registry or APSchedulerTriggerRegistry()
    batch_command = BatchSyncCommand(
        directory=directory,
        orchestrator=orchestrator,
        history_repository=history_repository,
        settings_repository=settings_repository,
    )
    scheduler = SyncScheduler(
        registry=registry,
        sync_command=batch_command,
        history_repository=history_repository,
        settings_repository=settings_repository,
        timezone=settings.sync_timezone,
    )
    return SyncContainer(
        history_repository=history_repository,
        settings_repository=settings_repository,
        directory=directory,
        orchestrator=orchestrator,
        scheduler=scheduler,
        registry=registry,
        engine=engine,
    )
