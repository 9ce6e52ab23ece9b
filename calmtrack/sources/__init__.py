"""Interaction event sources for calmtrack."""

import os
from typing import Optional

from ..config import Config
from .base import InteractionEventSource
from .fake import FakeInteractionSource
from .pynput_source import PynputInteractionSource


def is_test_mode() -> bool:
    return os.getenv("CALMTRACK_TEST_MODE", "0") == "1"


def get_event_source(
    config: Config, test_mode: Optional[bool] = None
) -> InteractionEventSource:
    """Pick the fake source in test mode, pynput otherwise."""
    if test_mode is None:
        test_mode = is_test_mode()
    if test_mode:
        return FakeInteractionSource()
    return PynputInteractionSource(
        salt=config.hashing.salt, scroll_step_px=config.pynput.scroll_step_px
    )


__all__ = [
    "InteractionEventSource",
    "FakeInteractionSource",
    "PynputInteractionSource",
    "get_event_source",
    "is_test_mode",
]
