"""Paginated sync history listing."""

from dataclasses import dataclass, field

from kakeibo.domain.sync.entities import SyncRun


@dataclass(frozen=True)
class SyncHistoryPage:
    items: list[SyncRun] = field(default_factory=list)
    total: int = 0
    limit: int = 20
    offset: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total
