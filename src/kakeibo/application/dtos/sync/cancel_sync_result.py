"""Result of a cancellation request."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CancelSyncResult:
    success: bool
    message: str
