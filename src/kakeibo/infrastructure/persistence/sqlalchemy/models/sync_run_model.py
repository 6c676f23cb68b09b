"""SQLAlchemy model for SyncRun entities."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from kakeibo.domain.sync.value_objects import SyncStatus
from kakeibo.infrastructure.persistence.sqlalchemy.models.base import (
    Base,
    TimestampMixin,
)


class SyncRunModel(Base, TimestampMixin):
    """
    Sync history row, for a whole batch or a single institution.

    Batch rows have no institution_id.
    """

    __tablename__ = "sync_runs"

    __table_args__ = (
        Index("ix_sync_runs_status_started", "status", "started_at"),
        Index("ix_sync_runs_institution_started", "institution_id", "started_at"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    institution_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    institution_name: Mapped[str] = mapped_column(String(200), nullable=False)
    institution_type: Mapped[str] = mapped_column(String(50), nullable=False)

    status: Mapped[SyncStatus] = mapped_column(
        SQLEnum(
            SyncStatus,
            values_callable=lambda x: [e.value for e in x],
            native_enum=False,
        ),
        default=SyncStatus.PENDING,
        index=True,
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    total_fetched: Mapped[int] = mapped_column(default=0)
    new_records: Mapped[int] = mapped_column(default=0)
    duplicate_records: Mapped[int] = mapped_column(default=0)
    total_institutions: Mapped[int] = mapped_column(default=0)
    success_count: Mapped[int] = mapped_column(default=0)
    failure_count: Mapped[int] = mapped_column(default=0)
    retry_count: Mapped[int] = mapped_column(default=0)

    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SyncRunModel(id={self.id}, "
            f"institution={self.institution_id}, "
            f"status={self.status.value})>"
        )
