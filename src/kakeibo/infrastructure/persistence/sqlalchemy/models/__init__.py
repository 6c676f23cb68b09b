"""SQLAlchemy models; importing this package registers them on Base.metadata."""

from kakeibo.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)
from kakeibo.infrastructure.persistence.sqlalchemy.models.sync_run_model import (
    SyncRunModel,
)
from kakeibo.infrastructure.persistence.sqlalchemy.models.sync_settings_model import (
    InstitutionSyncSettingsModel,
    SyncSettingsModel,
)

__all__ = [
    "Base",
    "InstitutionSyncSettingsModel",
    "SyncRunModel",
    "SyncSettingsModel",
    "TimestampMixin",
]
