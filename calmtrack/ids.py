"""ID generation utilities for calmtrack."""

import threading

import ulid

_lock = threading.Lock()


def new_id() -> str:
    """Generate a new monotonic, time-sortable ULID string."""
    with _lock:
        return str(ulid.monotonic.new())


def generate_session_id() -> str:
    """Generate an engine session ID."""
    return new_id()


def generate_subscription_id() -> str:
    """Generate a subscription ID."""
    return new_id()
