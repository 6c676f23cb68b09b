"""SQLAlchemy repository implementations."""

from kakeibo.infrastructure.persistence.sqlalchemy.repositories.sync_history_repository import (  # NOQA: E501
    SyncHistoryRepositorySQLAlchemy,
)
from kakeibo.infrastructure.persistence.sqlalchemy.repositories.sync_settings_repository import (  # NOQA: E501
    SyncSettingsRepositorySQLAlchemy,
)

__all__ = [
    "SyncHistoryRepositorySQLAlchemy",
    "SyncSettingsRepositorySQLAlchemy",
]
