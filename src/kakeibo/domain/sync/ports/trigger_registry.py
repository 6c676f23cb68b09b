"""Port to a registry of live time-based triggers."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

TriggerCallback = Callable[[], Awaitable[None]]


class TriggerRegistry(ABC):
    """Registers cron triggers under a key; one trigger per key."""

    @abstractmethod
    def register(
        self,
        key: str,
        expression: str,
        timezone: str,
        callback: TriggerCallback,
    ) -> None:
        """Start firing ``callback`` on the cron ``expression``."""

    @abstractmethod
    def cancel(self, key: str) -> bool:
        """
        Stop the trigger registered under ``key``.

        Returns
        -------
        True if a trigger existed
        """
