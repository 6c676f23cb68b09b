"""SQLAlchemy models for global and per-institution sync settings."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from kakeibo.domain.sync.value_objects import InstitutionSyncStatus
from kakeibo.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class SyncSettingsModel(Base, TimestampMixin):
    """Single-row table holding the global sync settings."""

    __tablename__ = "sync_settings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    default_interval: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    wifi_only: Mapped[bool] = mapped_column(default=False)
    battery_saving_mode: Mapped[bool] = mapped_column(default=False)
    auto_retry: Mapped[bool] = mapped_column(default=True)
    max_retry_count: Mapped[int] = mapped_column(default=3)
    quiet_hours_enabled: Mapped[bool] = mapped_column(default=False)
    quiet_hours_start: Mapped[str] = mapped_column(String(5), default="22:00")
    quiet_hours_end: Mapped[str] = mapped_column(String(5), default="06:00")


class InstitutionSyncSettingsModel(Base, TimestampMixin):
    """Sync schedule and health per institution."""

    __tablename__ = "institution_sync_settings"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    institution_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )
    # NULL means the institution follows the global default interval
    interval: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    enabled: Mapped[bool] = mapped_column(default=True)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    next_sync_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    sync_status: Mapped[InstitutionSyncStatus] = mapped_column(
        SQLEnum(
            InstitutionSyncStatus,
            values_callable=lambda x: [e.value for e in x],
            native_enum=False,
        ),
        default=InstitutionSyncStatus.IDLE,
    )
    error_count: Mapped[int] = mapped_column(default=0)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
