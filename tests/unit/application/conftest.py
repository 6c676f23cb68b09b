"""Fixtures for application layer tests."""

import pytest

from kakeibo.domain.sync.ports import TransactionConnectorRegistry
from kakeibo.infrastructure.integration import InMemoryTransactionStore
from tests.shared.fixtures import (
    InMemorySyncHistoryRepository,
    InMemorySyncSettingsRepository,
    StubConnector,
)


@pytest.fixture
def history():
    return InMemorySyncHistoryRepository()


@pytest.fixture
def settings_repo():
    return InMemorySyncSettingsRepository()


@pytest.fixture
def store():
    return InMemoryTransactionStore()


@pytest.fixture
def connector():
    return StubConnector()


@pytest.fixture
def connectors(connector):
    return TransactionConnectorRegistry({"bank": connector})
