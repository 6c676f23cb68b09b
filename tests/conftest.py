"""Root pytest configuration for test discovery and auto-skip behavior.

Test Structure:
    tests/
    ├── unit/              # Fast, isolated tests with in-memory fakes
    │   ├── domain/
    │   └── application/
    ├── integration/       # Repositories against SQLite and JSON files
    ├── api/               # FastAPI routes through TestClient
    └── shared/            # Shared fakes and factories

Environment Variables:
    RUN_SLOW=1           Run @pytest.mark.slow tests
    RUN_ALL_TESTS=1      Run all tests (overrides other settings)

Pytest Options:
    --run-slow           Run slow tests
    --run-all            Run all tests
"""

import os

import pytest
from dotenv import load_dotenv

from kakeibo_config import clear_settings_cache, get_config_dir

CONFIG_DIR = get_config_dir()
if (CONFIG_DIR / ".env.test").exists():
    load_dotenv(CONFIG_DIR / ".env.test")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.slow",
    )
    parser.addoption(
        "--run-all",
        action="store_true",
        default=False,
        help="Run all tests regardless of markers",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Tests that verify database/persistence behavior",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take more than 1 second (auto-skipped)",
    )


def _enabled(config, option: str, env_var: str) -> bool:
    return config.getoption(option) or os.environ.get(env_var, "").lower() in (
        "1",
        "true",
        "yes",
    )


def pytest_collection_modifyitems(config, items):
    """Auto-skip slow tests unless explicitly enabled."""
    if _enabled(config, "--run-all", "RUN_ALL_TESTS"):
        return

    if _enabled(config, "--run-slow", "RUN_SLOW"):
        return

    skip_slow = pytest.mark.skip(reason="Slow test - run with --run-slow or RUN_SLOW=1")
    for item in items:
        item_markers = {mark.name for mark in item.iter_markers()}
        if "slow" in item_markers:
            item.add_marker(skip_slow)


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Make every test read settings fresh from the environment."""
    clear_settings_cache()
    yield
    clear_settings_cache()
