"""Shared fixtures for monitoring tests."""

import asyncio
import time
from collections.abc import Callable
from unittest.mock import Mock, patch

import pytest
from workspace_monitor.config import MonitorConfig


@pytest.fixture
def config():
    """Create a case-sensitive monitor configuration."""
    return MonitorConfig(case_sensitive_paths=True)


@pytest.fixture
def mock_observer():
    """Patch the watchdog observer used by change sessions."""
    with patch('workspace_monitor.monitoring.change_session.Observer') as mock_observer_class:
        observer = Mock()
        observer.is_alive.return_value = True
        observer.emitters = set()
        mock_observer_class.return_value = observer
        yield observer


@pytest.fixture
def wait_until():
    """Poll a condition until it holds, for events delivered by a real watcher thread."""

    async def _wait_until(condition: Callable[[], bool], timeout: float = 5.0, interval: float = 0.05) -> None:
        deadline = time.monotonic() + timeout
        while not condition():
            if time.monotonic() > deadline:
                raise AssertionError(f"Condition not met within {timeout}s")
            await asyncio.sleep(interval)

    return _wait_until
