"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest

from tests.sample_types import FixedClock
from typed_prefs.application.factory import SettingsFactory
from typed_prefs.infrastructure.in_memory_store import InMemorySettingsStore


@pytest.fixture
def store():
    """Create an empty in-memory settings store."""
    return InMemorySettingsStore()


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    mock = MagicMock()
    mock.debug = MagicMock()
    mock.info = MagicMock()
    mock.warning = MagicMock()
    mock.error = MagicMock()
    mock.exception = MagicMock()
    return mock


@pytest.fixture
def fixed_clock():
    """Create a clock frozen at a known instant."""
    return FixedClock()


@pytest.fixture
def factory(store, mock_logger, fixed_clock):
    """Create a settings factory over the in-memory store."""
    return SettingsFactory(store, logger=mock_logger, clock=fixed_clock)


@pytest.fixture
def settings_file(tmp_path):
    """Path for a file-backed store inside the test's temp directory."""
    return tmp_path / "prefs" / "settings.msgpack"
