"""Port to the directory of connected financial institutions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Institution:
    """A bank, card issuer or brokerage the account book is connected to."""

    id: str
    name: str
    type: str
    connected: bool = True


class InstitutionDirectory(ABC):
    """Lookup of institutions known to the account book."""

    @abstractmethod
    async def list_connected(self) -> list[Institution]:
        """Return every institution whose connection is active."""

    @abstractmethod
    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        """Return one institution, connected or not."""
