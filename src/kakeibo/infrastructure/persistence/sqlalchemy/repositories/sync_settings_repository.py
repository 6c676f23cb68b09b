"""SQLAlchemy implementation of SyncSettingsRepository."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kakeibo.domain.shared.time import ensure_tz_aware
from kakeibo.domain.sync.entities import InstitutionSyncSettings, SyncSettings
from kakeibo.domain.sync.repositories import SyncSettingsRepository
from kakeibo.domain.sync.value_objects import QuietHours, SyncInterval
from kakeibo.infrastructure.persistence.sqlalchemy.models import (
    InstitutionSyncSettingsModel,
    SyncSettingsModel,
)

logger = logging.getLogger(__name__)


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_tz_aware(value) if value else None


class SyncSettingsRepositorySQLAlchemy(SyncSettingsRepository):
    """Settings in the database, fronted by a write-through cache."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker
        self._settings: Optional[SyncSettings] = None
        self._institutions: dict[str, InstitutionSyncSettings] = {}
        self._institutions_loaded = False
        self._create_lock = asyncio.Lock()

    # Global settings

    async def find(self) -> Optional[SyncSettings]:
        if self._settings is not None:
            return self._settings

        async with self._session_maker() as session:
            stmt = select(SyncSettingsModel).order_by(SyncSettingsModel.created_at)
            model = (await session.execute(stmt.limit(1))).scalar_one_or_none()
        if model is None:
            return None

        self._settings = self._settings_to_domain(model)
        return self._settings

    async def get_or_create(self) -> SyncSettings:
        existing = await self.find()
        if existing is not None:
            return existing

        async with self._create_lock:
            existing = await self.find()
            if existing is not None:
                return existing
            settings = SyncSettings.create_default()
            await self.save(settings)
            logger.info("Created default sync settings")
            return settings

    async def save(self, settings: SyncSettings) -> None:
        async with self._session_maker() as session, session.begin():
            model = await session.get(SyncSettingsModel, settings.id)
            if model is None:
                model = SyncSettingsModel(id=settings.id, created_at=settings.created_at)
                session.add(model)
            model.default_interval = settings.default_interval.to_dict()
            model.wifi_only = settings.wifi_only
            model.battery_saving_mode = settings.battery_saving_mode
            model.auto_retry = settings.auto_retry
            model.max_retry_count = settings.max_retry_count
            model.quiet_hours_enabled = settings.quiet_hours.enabled
            model.quiet_hours_start = settings.quiet_hours.start
            model.quiet_hours_end = settings.quiet_hours.end
            model.updated_at = settings.updated_at
        self._settings = settings

    # Institution settings

    async def find_institution_settings(
        self, institution_id: str
    ) -> Optional[InstitutionSyncSettings]:
        cached = self._institutions.get(institution_id)
        if cached is not None:
            return cached

        async with self._session_maker() as session:
            stmt = select(InstitutionSyncSettingsModel).where(
                InstitutionSyncSettingsModel.institution_id == institution_id,
            )
            model = (await session.execute(stmt)).scalar_one_or_none()
        if model is None:
            return None

        settings = self._institution_to_domain(model)
        self._institutions[institution_id] = settings
        return settings

    async def find_all_institution_settings(self) -> list[InstitutionSyncSettings]:
        if not self._institutions_loaded:
            async with self._session_maker() as session:
                result = await session.execute(select(InstitutionSyncSettingsModel))
                models = result.scalars().all()
            for model in models:
                self._institutions[model.institution_id] = self._institution_to_domain(
                    model
                )
            self._institutions_loaded = True
        return sorted(self._institutions.values(), key=lambda s: s.institution_id)

    async def save_institution_settings(
        self, settings: InstitutionSyncSettings
    ) -> None:
        async with self._session_maker() as session, session.begin():
            stmt = select(InstitutionSyncSettingsModel).where(
                InstitutionSyncSettingsModel.institution_id == settings.institution_id,
            )
            model = (await session.execute(stmt)).scalar_one_or_none()
            if model is None:
                model = InstitutionSyncSettingsModel(
                    id=settings.id,
                    institution_id=settings.institution_id,
                    created_at=settings.created_at,
                )
                session.add(model)
            self._update_institution_model(model, settings)
        self._institutions[settings.institution_id] = settings

    async def delete_institution_settings(self, institution_id: str) -> bool:
        async with self._session_maker() as session, session.begin():
            stmt = delete(InstitutionSyncSettingsModel).where(
                InstitutionSyncSettingsModel.institution_id == institution_id,
            )
            result = await session.execute(stmt)
        self._institutions.pop(institution_id, None)
        return result.rowcount > 0

    # Mapping

    def _settings_to_domain(self, model: SyncSettingsModel) -> SyncSettings:
        return SyncSettings(
            id=model.id,
            default_interval=SyncInterval.from_dict(model.default_interval),
            wifi_only=model.wifi_only,
            battery_saving_mode=model.battery_saving_mode,
            auto_retry=model.auto_retry,
            max_retry_count=model.max_retry_count,
            quiet_hours=QuietHours(
                enabled=model.quiet_hours_enabled,
                start=model.quiet_hours_start,
                end=model.quiet_hours_end,
            ),
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    def _update_institution_model(
        self,
        model: InstitutionSyncSettingsModel,
        settings: InstitutionSyncSettings,
    ) -> None:
        model.interval = settings.interval.to_dict() if settings.interval else None
        model.enabled = settings.enabled
        model.last_synced_at = settings.last_synced_at
        model.next_sync_at = settings.next_sync_at
        model.sync_status = settings.sync_status
        model.error_count = settings.error_count
        model.last_error = settings.last_error
        model.updated_at = settings.updated_at

    def _institution_to_domain(
        self, model: InstitutionSyncSettingsModel
    ) -> InstitutionSyncSettings:
        return InstitutionSyncSettings(
            id=model.id,
            institution_id=model.institution_id,
            interval=SyncInterval.from_dict(model.interval) if model.interval else None,
            enabled=model.enabled,
            last_synced_at=_aware(model.last_synced_at),
            next_sync_at=_aware(model.next_sync_at),
            sync_status=model.sync_status,
            error_count=model.error_count,
            last_error=model.last_error,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
