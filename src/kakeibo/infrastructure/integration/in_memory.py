"""In-process institution directory and transaction store.

Stand-ins for the account book's own institution and transaction tables,
used when the sync service runs on its own and in tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Optional

from kakeibo.domain.sync.ports import (
    Institution,
    InstitutionDirectory,
    TransactionIngestPort,
)
from kakeibo.domain.sync.services import record_identifier


class InMemoryInstitutionDirectory(InstitutionDirectory):
    def __init__(self, institutions: Iterable[Institution] = ()):
        self._institutions: dict[str, Institution] = {i.id: i for i in institutions}

    def add(self, institution: Institution) -> None:
        self._institutions[institution.id] = institution

    def remove(self, institution_id: str) -> None:
        self._institutions.pop(institution_id, None)

    async def list_connected(self) -> list[Institution]:
        return [i for i in self._institutions.values() if i.connected]

    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        return self._institutions.get(institution_id)


class InMemoryTransactionStore(TransactionIngestPort):
    """Keeps ingested records per institution, in arrival order."""

    def __init__(self) -> None:
        self._records: dict[str, list[Any]] = {}

    def records(self, institution_id: str) -> list[Any]:
        return list(self._records.get(institution_id, []))

    async def find_known_ids(self, institution_id: str) -> set[str]:
        return {
            identifier
            for record in self._records.get(institution_id, [])
            if (identifier := record_identifier(record)) is not None
        }

    async def ingest(self, institution_id: str, records: Sequence[Any]) -> int:
        self._records.setdefault(institution_id, []).extend(records)
        return len(records)
