"""Shared test fixtures and in-memory fakes."""

from tests.shared.fixtures.fakes import (
    FakeTriggerRegistry,
    InMemorySyncHistoryRepository,
    InMemorySyncSettingsRepository,
    StubConnector,
)
from tests.shared.fixtures.factories import make_institution, make_target

__all__ = [
    "FakeTriggerRegistry",
    "InMemorySyncHistoryRepository",
    "InMemorySyncSettingsRepository",
    "StubConnector",
    "make_institution",
    "make_target",
]
