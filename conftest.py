"""Test configuration and fixtures for calmtrack."""

import os
import threading
import time

import pytest


@pytest.fixture(autouse=True)
def test_mode():
    """Enable test mode for all tests."""
    previous = os.environ.get("CALMTRACK_TEST_MODE")
    os.environ["CALMTRACK_TEST_MODE"] = "1"
    yield
    if previous is None:
        os.environ.pop("CALMTRACK_TEST_MODE", None)
    else:
        os.environ["CALMTRACK_TEST_MODE"] = previous


@pytest.fixture
def no_thread_leaks():
    """Fixture to detect thread leaks during tests."""
    initial_non_daemon_threads = {t for t in threading.enumerate() if not t.daemon}

    yield

    # Wait briefly for threads to cleanup
    time.sleep(0.1)

    final_non_daemon_threads = {t for t in threading.enumerate() if not t.daemon}
    leaked_threads = final_non_daemon_threads - initial_non_daemon_threads
    if leaked_threads:
        thread_names = [t.name for t in leaked_threads]
        pytest.fail(f"Test leaked non-daemon threads: {thread_names}")


@pytest.fixture
def manual_scheduler():
    """Fixture providing a manual scheduler for deterministic tests."""
    from calmtrack.utils.scheduler import ManualScheduler

    return ManualScheduler(start_time=1000.0)


@pytest.fixture
def fake_source():
    """Fixture providing an inline fake interaction source."""
    from calmtrack.sources.fake import FakeInteractionSource

    return FakeInteractionSource(mode="inline")
