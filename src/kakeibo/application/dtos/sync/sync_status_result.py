"""DTOs describing a batch that is currently running."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from uuid import UUID


@dataclass
class SyncProgress:
    """Coarse progress of a running batch."""

    total: int
    completed: int = 0
    failed: int = 0
    cancelled: int = 0

    @property
    def settled(self) -> int:
        return self.completed + self.failed + self.cancelled

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return round(self.settled * 100 / self.total, 1)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "completed": self.completed,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "percent": self.percent,
        }


@dataclass(frozen=True)
class SyncStatusResult:
    is_running: bool
    run_id: Optional[UUID] = None
    started_at: Optional[datetime] = None
    progress: Optional[SyncProgress] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_running": self.is_running,
            "run_id": str(self.run_id) if self.run_id else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "progress": self.progress.to_dict() if self.progress else None,
        }
