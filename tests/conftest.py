# tests/conftest.py

"""Shared pytest fixtures for all tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from price_search.config.settings import Settings


@pytest.fixture(autouse=True)
def no_waits() -> Generator[None, None, None]:
    """Zero every configured wait so scrapes and sessions run instantly."""
    with patch.object(Settings, "SCRAPE_DELAY", 0.0), patch.object(
        Settings, "SESSION_POLL_INTERVAL", 0.0
    ), patch.object(Settings, "SESSION_GRACE_PERIOD", 0.0):
        yield
