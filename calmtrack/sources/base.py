"""Event source protocol consumed by the engine."""

from typing import Callable, Protocol

KeyHandler = Callable[[str], None]
PointerMoveHandler = Callable[[float, float], None]
ScrollHandler = Callable[[float], None]
SignalHandler = Callable[[], None]


class InteractionEventSource(Protocol):
    """Protocol for raw interaction event sources.

    ``start`` registers the engine's handlers for the seven event kinds;
    ``stop`` detaches them. Payloads: key name for key events, client
    coordinates for pointer moves, absolute position for scroll, nothing
    for click, focus and blur.
    """

    def start(
        self,
        on_key_down: KeyHandler,
        on_key_up: KeyHandler,
        on_pointer_move: PointerMoveHandler,
        on_click: SignalHandler,
        on_scroll: ScrollHandler,
        on_focus: SignalHandler,
        on_blur: SignalHandler,
    ) -> None:
        """Start delivering events to the handlers."""
        ...

    def stop(self) -> None:
        """Stop delivering events."""
        ...
