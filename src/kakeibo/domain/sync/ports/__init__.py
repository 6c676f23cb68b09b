"""Ports to collaborators outside the sync domain."""

from kakeibo.domain.sync.ports.institution_directory import (
    Institution,
    InstitutionDirectory,
)
from kakeibo.domain.sync.ports.transaction_connector import (
    TransactionConnector,
    TransactionConnectorRegistry,
    TransactionIngestPort,
)
from kakeibo.domain.sync.ports.trigger_registry import (
    TriggerCallback,
    TriggerRegistry,
)

__all__ = [
    "Institution",
    "InstitutionDirectory",
    "TransactionConnector",
    "TransactionConnectorRegistry",
    "TransactionIngestPort",
    "TriggerCallback",
    "TriggerRegistry",
]
