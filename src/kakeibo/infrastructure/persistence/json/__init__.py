"""JSON-file persistence for sync settings."""

from kakeibo.infrastructure.persistence.json.sync_settings_repository import (
    SyncSettingsRepositoryJSON,
)

__all__ = ["SyncSettingsRepositoryJSON"]
