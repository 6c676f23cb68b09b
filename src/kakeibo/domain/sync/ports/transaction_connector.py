"""Ports to the external transaction sources and the ingest target."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from kakeibo.domain.sync.exceptions import ConnectorNotFoundError


class TransactionConnector(ABC):
    """Fetches raw transaction records from one kind of institution."""

    @abstractmethod
    async def fetch(
        self,
        institution_id: str,
        window_start: datetime,
        window_end: datetime,
    ) -> Sequence[Any]:
        """
        Fetch records booked in the given window.

        Records expose an identifier as ``record["id"]`` or ``record.id``;
        a missing identifier is allowed.
        """


class TransactionConnectorRegistry:
    """Resolves the connector responsible for an institution type."""

    def __init__(self, connectors: dict[str, TransactionConnector] | None = None):
        self._connectors: dict[str, TransactionConnector] = dict(connectors or {})

    def register(self, institution_type: str, connector: TransactionConnector) -> None:
        self._connectors[institution_type] = connector

    def get(self, institution_type: str) -> TransactionConnector:
        connector = self._connectors.get(institution_type)
        if connector is None:
            raise ConnectorNotFoundError(institution_type)
        return connector


class TransactionIngestPort(ABC):
    """Where new records end up, and which ones are already there."""

    @abstractmethod
    async def find_known_ids(self, institution_id: str) -> set[str]:
        """Identifiers of records already ingested for an institution."""

    @abstractmethod
    async def ingest(self, institution_id: str, records: Sequence[Any]) -> int:
        """
        Store new records.

        Returns
        -------
        Number of records stored
        """
