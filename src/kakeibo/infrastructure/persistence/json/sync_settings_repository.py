"""JSON-file implementation of SyncSettingsRepository.

Used for local development and single-user installs. Global settings live in
``sync-settings.json`` and institution settings in
``institution-sync-settings.json`` under the data directory.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

from kakeibo.domain.sync.entities import InstitutionSyncSettings, SyncSettings
from kakeibo.domain.sync.repositories import SyncSettingsRepository
from kakeibo.domain.sync.value_objects import (
    InstitutionSyncStatus,
    QuietHours,
    SyncInterval,
)

logger = logging.getLogger(__name__)

SETTINGS_FILE = "sync-settings.json"
INSTITUTION_SETTINGS_FILE = "institution-sync-settings.json"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def settings_to_dict(settings: SyncSettings) -> dict[str, Any]:
    return {
        "id": str(settings.id),
        "default_interval": settings.default_interval.to_dict(),
        "wifi_only": settings.wifi_only,
        "battery_saving_mode": settings.battery_saving_mode,
        "auto_retry": settings.auto_retry,
        "max_retry_count": settings.max_retry_count,
        "quiet_hours": {
            "enabled": settings.quiet_hours.enabled,
            "start": settings.quiet_hours.start,
            "end": settings.quiet_hours.end,
        },
        "created_at": _iso(settings.created_at),
        "updated_at": _iso(settings.updated_at),
    }


def settings_from_dict(data: dict[str, Any]) -> SyncSettings:
    return SyncSettings(
        id=UUID(data["id"]),
        default_interval=SyncInterval.from_dict(data["default_interval"]),
        wifi_only=data["wifi_only"],
        battery_saving_mode=data["battery_saving_mode"],
        auto_retry=data["auto_retry"],
        max_retry_count=data["max_retry_count"],
        quiet_hours=QuietHours(**data["quiet_hours"]),
        created_at=_parse(data["created_at"]),
        updated_at=_parse(data["updated_at"]),
    )


def institution_to_dict(settings: InstitutionSyncSettings) -> dict[str, Any]:
    return {
        "id": str(settings.id),
        "institution_id": settings.institution_id,
        "interval": settings.interval.to_dict() if settings.interval else None,
        "enabled": settings.enabled,
        "last_synced_at": _iso(settings.last_synced_at),
        "next_sync_at": _iso(settings.next_sync_at),
        "sync_status": settings.sync_status.value,
        "error_count": settings.error_count,
        "last_error": settings.last_error,
        "created_at": _iso(settings.created_at),
        "updated_at": _iso(settings.updated_at),
    }


def institution_from_dict(data: dict[str, Any]) -> InstitutionSyncSettings:
    interval = data.get("interval")
    return InstitutionSyncSettings(
        id=UUID(data["id"]),
        institution_id=data["institution_id"],
        interval=SyncInterval.from_dict(interval) if interval else None,
        enabled=data["enabled"],
        last_synced_at=_parse(data.get("last_synced_at")),
        next_sync_at=_parse(data.get("next_sync_at")),
        sync_status=InstitutionSyncStatus(data["sync_status"]),
        error_count=data["error_count"],
        last_error=data.get("last_error"),
        created_at=_parse(data["created_at"]),
        updated_at=_parse(data["updated_at"]),
    )


class SyncSettingsRepositoryJSON(SyncSettingsRepository):
    """Settings in two JSON files, fronted by a write-through cache.

    A missing file is treated as empty. Writes go to a temporary file that
    replaces the target, so a crash never leaves half a document behind.
    """

    def __init__(self, data_dir: Path | str):
        self._data_dir = Path(data_dir)
        self._settings: Optional[SyncSettings] = None
        self._institutions: Optional[dict[str, InstitutionSyncSettings]] = None
        self._lock = asyncio.Lock()

    @property
    def settings_path(self) -> Path:
        return self._data_dir / SETTINGS_FILE

    @property
    def institution_settings_path(self) -> Path:
        return self._data_dir / INSTITUTION_SETTINGS_FILE

    async def find(self) -> Optional[SyncSettings]:
        if self._settings is None:
            data = self._read(self.settings_path)
            if data:
                self._settings = settings_from_dict(data)
        return self._settings

    async def get_or_create(self) -> SyncSettings:
        async with self._lock:
            existing = await self.find()
            if existing is not None:
                return existing
            settings = SyncSettings.create_default()
            self._write(self.settings_path, settings_to_dict(settings))
            self._settings = settings
            logger.info("Created default sync settings in %s", self.settings_path)
            return settings

    async def save(self, settings: SyncSettings) -> None:
        async with self._lock:
            self._write(self.settings_path, settings_to_dict(settings))
            self._settings = settings

    async def find_institution_settings(
        self, institution_id: str
    ) -> Optional[InstitutionSyncSettings]:
        return self._load_institutions().get(institution_id)

    async def find_all_institution_settings(self) -> list[InstitutionSyncSettings]:
        institutions = self._load_institutions()
        return sorted(institutions.values(), key=lambda s: s.institution_id)

    async def save_institution_settings(
        self, settings: InstitutionSyncSettings
    ) -> None:
        async with self._lock:
            institutions = dict(self._load_institutions())
            institutions[settings.institution_id] = settings
            self._store_institutions(institutions)

    async def delete_institution_settings(self, institution_id: str) -> bool:
        async with self._lock:
            institutions = dict(self._load_institutions())
            if institutions.pop(institution_id, None) is None:
                return False
            self._store_institutions(institutions)
            return True

    def _load_institutions(self) -> dict[str, InstitutionSyncSettings]:
        if self._institutions is None:
            data = self._read(self.institution_settings_path) or []
            self._institutions = {
                item["institution_id"]: institution_from_dict(item) for item in data
            }
        return self._institutions

    def _store_institutions(
        self, institutions: dict[str, InstitutionSyncSettings]
    ) -> None:
        payload = [
            institution_to_dict(s)
            for s in sorted(institutions.values(), key=lambda s: s.institution_id)
        ]
        self._write(self.institution_settings_path, payload)
        self._institutions = institutions

    def _read(self, path: Path) -> Any:
        if not path.exists():
            return None
        with path.open(encoding="utf-8") as f:
            return json.load(f)

    def _write(self, path: Path, payload: Any) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
