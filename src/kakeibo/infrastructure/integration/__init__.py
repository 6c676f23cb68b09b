"""Adapters to the rest of the account book."""

from kakeibo.infrastructure.integration.in_memory import (
    InMemoryInstitutionDirectory,
    InMemoryTransactionStore,
)

__all__ = [
    "InMemoryInstitutionDirectory",
    "InMemoryTransactionStore",
]
