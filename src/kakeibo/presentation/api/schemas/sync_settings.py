"""Sync settings schemas for API request/response models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from kakeibo.domain.sync.entities import InstitutionSyncSettings, SyncSettings
from kakeibo.domain.sync.value_objects import (
    InstitutionSyncStatus,
    SyncInterval,
    SyncIntervalType,
    TimeUnit,
)


class IntervalSchema(BaseModel):
    """A sync interval preset, custom span or MANUAL."""

    type: SyncIntervalType
    value: Optional[int] = Field(None, description="Custom interval length")
    unit: Optional[TimeUnit] = Field(None, description="Custom interval unit")
    custom_schedule: Optional[str] = Field(
        None,
        description="Explicit cron expression (custom intervals only)",
    )

    def to_domain(self) -> SyncInterval:
        return SyncInterval(
            type=self.type,
            value=self.value,
            unit=self.unit,
            custom_schedule=self.custom_schedule,
        )


class IntervalResponse(IntervalSchema):
    minutes: int
    cron_expression: Optional[str] = None

    @classmethod
    def from_domain(cls, interval: SyncInterval) -> "IntervalResponse":
        return cls(
            type=interval.type,
            value=interval.value,
            unit=interval.unit,
            custom_schedule=interval.custom_schedule,
            minutes=interval.to_minutes(),
            cron_expression=interval.to_cron_expression(),
        )


class QuietHoursResponse(BaseModel):
    enabled: bool
    start: str
    end: str


class SyncSettingsResponse(BaseModel):
    """Global sync settings."""

    id: UUID
    default_interval: IntervalResponse
    wifi_only: bool
    battery_saving_mode: bool
    auto_retry: bool
    max_retry_count: int
    quiet_hours: QuietHoursResponse
    updated_at: datetime

    @classmethod
    def from_domain(cls, settings: SyncSettings) -> "SyncSettingsResponse":
        return cls(
            id=settings.id,
            default_interval=IntervalResponse.from_domain(settings.default_interval),
            wifi_only=settings.wifi_only,
            battery_saving_mode=settings.battery_saving_mode,
            auto_retry=settings.auto_retry,
            max_retry_count=settings.max_retry_count,
            quiet_hours=QuietHoursResponse(
                enabled=settings.quiet_hours.enabled,
                start=settings.quiet_hours.start,
                end=settings.quiet_hours.end,
            ),
            updated_at=settings.updated_at,
        )


class SyncSettingsUpdateRequest(BaseModel):
    """Partial update of global settings; omitted fields stay unchanged.

    Range and format checks happen in the domain so that API and CLI report
    the same errors.
    """

    default_interval: Optional[IntervalSchema] = None
    wifi_only: Optional[bool] = None
    battery_saving_mode: Optional[bool] = None
    auto_retry: Optional[bool] = None
    max_retry_count: Optional[int] = None
    quiet_hours_enabled: Optional[bool] = None
    quiet_hours_start: Optional[str] = Field(None, examples=["22:00"])
    quiet_hours_end: Optional[str] = Field(None, examples=["06:00"])


class InstitutionSyncSettingsResponse(BaseModel):
    institution_id: str
    interval: Optional[IntervalResponse] = Field(
        None,
        description="Explicit interval; null while following the global default",
    )
    enabled: bool
    last_synced_at: Optional[datetime] = None
    next_sync_at: Optional[datetime] = None
    sync_status: InstitutionSyncStatus
    error_count: int
    last_error: Optional[str] = None

    @classmethod
    def from_domain(
        cls, settings: InstitutionSyncSettings
    ) -> "InstitutionSyncSettingsResponse":
        return cls(
            institution_id=settings.institution_id,
            interval=(
                IntervalResponse.from_domain(settings.interval)
                if settings.interval
                else None
            ),
            enabled=settings.enabled,
            last_synced_at=settings.last_synced_at,
            next_sync_at=settings.next_sync_at,
            sync_status=settings.sync_status,
            error_count=settings.error_count,
            last_error=settings.last_error,
        )


class InstitutionSyncSettingsUpdateRequest(BaseModel):
    interval: Optional[IntervalSchema] = None
    enabled: Optional[bool] = None
    use_default_interval: bool = Field(
        default=False,
        description="Drop the explicit interval and follow the global default",
    )
