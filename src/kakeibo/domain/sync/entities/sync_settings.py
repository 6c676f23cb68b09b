"""Global sync settings entity."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.exceptions import InvalidSyncConfigError
from kakeibo.domain.sync.value_objects import QuietHours, SyncInterval

MIN_RETRY_COUNT = 1
MAX_RETRY_COUNT = 10


@dataclass(frozen=True)
class SyncSettings:
    """Account-book wide sync configuration.

    There is exactly one instance per deployment. It is created with defaults
    on first access; every change produces a new instance with a fresh
    ``updated_at``.
    """

    id: UUID = field(default_factory=uuid4)
    default_interval: SyncInterval = field(default_factory=SyncInterval.standard)
    wifi_only: bool = False
    battery_saving_mode: bool = False
    auto_retry: bool = True
    max_retry_count: int = 3
    quiet_hours: QuietHours = field(default_factory=QuietHours)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not MIN_RETRY_COUNT <= self.max_retry_count <= MAX_RETRY_COUNT:
            msg = (
                f"max_retry_count must be between {MIN_RETRY_COUNT} and "
                f"{MAX_RETRY_COUNT}, got {self.max_retry_count}"
            )
            raise InvalidSyncConfigError(
                msg, {"max_retry_count": self.max_retry_count}
            )

    @classmethod
    def create_default(cls) -> "SyncSettings":
        return cls()

    def update_default_interval(self, interval: SyncInterval) -> "SyncSettings":
        return replace(self, default_interval=interval, updated_at=utc_now())

    def update_options(
        self,
        wifi_only: Optional[bool] = None,
        battery_saving_mode: Optional[bool] = None,
        auto_retry: Optional[bool] = None,
        max_retry_count: Optional[int] = None,
        quiet_hours_enabled: Optional[bool] = None,
        quiet_hours_start: Optional[str] = None,
        quiet_hours_end: Optional[str] = None,
    ) -> "SyncSettings":
        """Return a copy with the given options changed; None leaves a field as is."""
        quiet_hours = QuietHours(
            enabled=(
                self.quiet_hours.enabled
                if quiet_hours_enabled is None
                else quiet_hours_enabled
            ),
            start=quiet_hours_start or self.quiet_hours.start,
            end=quiet_hours_end or self.quiet_hours.end,
        )
        return replace(
            self,
            wifi_only=self.wifi_only if wifi_only is None else wifi_only,
            battery_saving_mode=(
                self.battery_saving_mode
                if battery_saving_mode is None
                else battery_saving_mode
            ),
            auto_retry=self.auto_retry if auto_retry is None else auto_retry,
            max_retry_count=(
                self.max_retry_count if max_retry_count is None else max_retry_count
            ),
            quiet_hours=quiet_hours,
            updated_at=utc_now(),
        )
