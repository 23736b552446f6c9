"""
Pytest configuration and fixtures for linkcanon tests.
"""

import logging
from collections.abc import Iterator

import pytest
import structlog

from linkcanon.config import reset_config

CONFIG_ENV_VARS = (
    "LINKCANON_TRACKING_PRESET",
    "LINKCANON_EXTRA_PARAMETERS",
    "LINKCANON_PRESERVED_PARAMETERS",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """
    Isolate every test from the caller's environment.

    Clears linkcanon environment variables and the cached config before and
    after each test.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
    # configure_logging binds handlers to capsys streams that close with the test
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """
    Sort test items to run unit tests before integration tests.

    Tests marked with @pytest.mark.integration run last.
    """

    def sort_key(item: pytest.Item) -> tuple[int, str]:
        if item.get_closest_marker("integration"):
            return (1, item.nodeid)
        return (0, item.nodeid)

    items.sort(key=sort_key)
