"""Fixtures for API tests: the real app wired to in-memory collaborators."""

import pytest
from fastapi.testclient import TestClient

from kakeibo.domain.sync.ports import TransactionConnectorRegistry
from kakeibo.infrastructure.integration import (
    InMemoryInstitutionDirectory,
    InMemoryTransactionStore,
)
from kakeibo.presentation.api.app import create_app
from kakeibo.presentation.api.container import build_container
from kakeibo_config import Settings
from tests.shared.fixtures import (
    FakeTriggerRegistry,
    InMemorySyncHistoryRepository,
    InMemorySyncSettingsRepository,
    StubConnector,
    make_institution,
)


@pytest.fixture
def settings():
    return Settings(
        debug=True,
        sync_max_parallel=2,
        sync_leg_timeout_seconds=5,
        sync_timezone="Asia/Tokyo",
    )


@pytest.fixture
def connector():
    return StubConnector(
        records={
            "inst-1": [{"id": "t1"}, {"id": "t2"}],
            "inst-2": [{"id": "t3"}],
        }
    )


@pytest.fixture
def history():
    return InMemorySyncHistoryRepository()


@pytest.fixture
def settings_repo():
    return InMemorySyncSettingsRepository()


@pytest.fixture
def registry():
    return FakeTriggerRegistry()


@pytest.fixture
def container(settings, connector, history, settings_repo, registry):
    return build_container(
        settings,
        directory=InMemoryInstitutionDirectory(
            [make_institution(1), make_institution(2), make_institution(3, "broker")]
        ),
        connectors=TransactionConnectorRegistry({"bank": connector}),
        ingest=InMemoryTransactionStore(),
        history_repository=history,
        settings_repository=settings_repo,
        registry=registry,
    )


@pytest.fixture
def client(settings, container):
    app = create_app(settings=settings, container=container)
    with TestClient(app) as client:
        yield client
