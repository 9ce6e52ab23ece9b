"""OS-level keyboard and mouse capture through pynput."""

import threading
from typing import Callable, Optional

from ..hashutil import key_token
from ..logging_setup import get_logger

logger = get_logger("pynput")

# pynput Key names that carry correction semantics
_CORRECTION_KEY_NAMES = {"backspace": "Backspace", "delete": "Delete"}


class PynputInteractionSource:
    """Real pynput event source.

    Keyboard and mouse listeners run on pynput's own threads. Key identities
    other than the correction keys are replaced with salted hash tokens so
    no plaintext keys reach the engine. Scroll notches are integrated into a
    virtual absolute position. pynput exposes no window focus events; hosts
    that know about focus call ``notify_focus``.
    """

    def __init__(self, salt: str, scroll_step_px: int = 120):
        self._salt = salt
        self._scroll_step_px = scroll_step_px
        self._scroll_position = 0.0
        self._keyboard_listener = None
        self._mouse_listener = None
        self._on_focus: Optional[Callable[[], None]] = None
        self._on_blur: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()
        self._keyboard = None
        self._mouse = None
        try:
            import pynput.keyboard as keyboard
            import pynput.mouse as mouse

            self._keyboard = keyboard
            self._mouse = mouse
            logger.info("pynput modules loaded successfully")
        except ImportError as e:
            logger.warning(f"pynput not available: {e}")

    def key_name(self, key) -> str:
        """Map a pynput key to the name the engine records.

        Character keys are identified by virtual key code where pynput
        reports one, so a press and its release match regardless of the
        modifiers held at either moment.
        """
        name = getattr(key, "name", None)
        if name in _CORRECTION_KEY_NAMES:
            return _CORRECTION_KEY_NAMES[name]

        vk = getattr(key, "vk", None)
        if name:
            identity = name
        elif vk is not None:
            identity = f"vk:{vk}"
        else:
            identity = getattr(key, "char", None) or str(key)
        return key_token(identity, self._salt)

    def scroll_position_after(self, dy: int) -> float:
        """Integrate one scroll event; pynput dy > 0 means scrolling up."""
        with self._lock:
            self._scroll_position = max(0.0, self._scroll_position - dy * self._scroll_step_px)
            return self._scroll_position

    def start(
        self,
        on_key_down,
        on_key_up,
        on_pointer_move,
        on_click,
        on_scroll,
        on_focus,
        on_blur,
    ) -> None:
        """Start keyboard and mouse listeners."""
        if not self._keyboard or not self._mouse:
            raise RuntimeError("pynput not available")

        def on_press(key):
            on_key_down(self.key_name(key))

        def on_release(key):
            on_key_up(self.key_name(key))

        def on_mouse_click(x, y, button, pressed):
            # Count presses only, releases would double the click rate
            if pressed:
                on_click()

        def on_mouse_scroll(x, y, dx, dy):
            if dy:
                on_scroll(self.scroll_position_after(dy))

        self._on_focus = on_focus
        self._on_blur = on_blur

        self._keyboard_listener = self._keyboard.Listener(
            on_press=on_press, on_release=on_release
        )
        self._mouse_listener = self._mouse.Listener(
            on_move=on_pointer_move, on_click=on_mouse_click, on_scroll=on_mouse_scroll
        )
        self._keyboard_listener.start()
        self._mouse_listener.start()

    def notify_focus(self, focused: bool) -> None:
        """Report a window focus transition observed by the host."""
        handler = self._on_focus if focused else self._on_blur
        if handler is not None:
            handler()

    def stop(self) -> None:
        """Stop listeners."""
        for listener in (self._keyboard_listener, self._mouse_listener):
            if listener:
                listener.stop()
        self._keyboard_listener = None
        self._mouse_listener = None
        self._on_focus = None
        self._on_blur = None

    def join(self, timeout: float = 2.0) -> bool:
        return True
