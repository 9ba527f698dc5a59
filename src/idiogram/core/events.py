"""Pointer event dispatch and deferred command replay."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..constants import EVENT_CHANNELS
from ..errors import InvalidArguments
from .position import Position

if TYPE_CHECKING:
    from ..engine import Idiogram

logger = logging.getLogger(__name__)

Handler = Callable[[Position, "Idiogram", "PointerEvent"], Any]


@dataclass(frozen=True)
class PointerEvent:
    """A low-level pointer event in plot-area pixel coordinates.

    scale is only meaningful for zoom events, where it carries the gesture's
    new zoom factor.
    """

    channel: str
    x: float
    y: float = 0.0
    scale: float | None = None
    source: Any = None


def validate_channel(channel: str) -> str:
    if channel not in EVENT_CHANNELS:
        raise InvalidArguments(
            f"Unknown event channel {channel!r}. Must be one of: {', '.join(EVENT_CHANNELS)}"
        )
    return channel


class DeferredQueue:
    """Commands issued before first render, replayed once in FIFO order."""

    def __init__(self) -> None:
        self._commands: list[tuple[str, Callable[[], Any]]] = []

    def __len__(self) -> int:
        return len(self._commands)

    def push(self, label: str, command: Callable[[], Any]) -> None:
        self._commands.append((label, command))

    def flush(self) -> int:
        """Run and drop every queued command.

        A failing command propagates its error; commands queued after it stay
        queued for the next flush.

        Returns:
            Number of commands run.
        """
        ran = 0
        while self._commands:
            label, command = self._commands.pop(0)
            logger.debug("Replaying deferred %s", label)
            command()
            ran += 1
        return ran


class EventDispatcher:
    """Turns pointer events into Positions, view changes, and handler calls.

    Drag events pan the view so the base pair grabbed at dragstart stays under
    the pointer. Zoom events zoom about the base pair under the pointer, and
    are skipped when the pointer is off the genome.
    """

    def __init__(self, engine: Idiogram):
        self._engine = engine
        self._handlers: dict[str, Handler] = {}
        self._drag_bp: int | None = None

    def set_handler(self, channel: str, handler: Handler | None) -> None:
        validate_channel(channel)
        if handler is None:
            self._handlers.pop(channel, None)
        else:
            self._handlers[channel] = handler

    def handler(self, channel: str) -> Handler | None:
        return self._handlers.get(validate_channel(channel))

    @property
    def dragging(self) -> bool:
        return self._drag_bp is not None

    def dispatch(self, event: PointerEvent) -> Any:
        """Apply an event's gesture semantics, then call its handler if any.

        Returns:
            The handler's return value, or None when no handler is registered.
        """
        validate_channel(event.channel)
        engine = self._engine
        position = engine.position_at_pixel(event.x)

        if event.channel == "dragstart":
            self._drag_bp = position.absolute_bp
        elif event.channel == "drag":
            if self._drag_bp is None:
                self._drag_bp = position.absolute_bp
            delta = position.absolute_bp - self._drag_bp
            if delta:
                engine.pan(delta)
                position = engine.position_at_pixel(event.x)
            self._drag_bp = position.absolute_bp
        elif event.channel == "dragend":
            self._drag_bp = None
        elif event.channel == "zoom" and event.scale is not None:
            if position.chromosome is None:
                logger.debug("Pointer outside genome at x=%s; zoom ignored", event.x)
            else:
                engine.zoom_to(event.scale, pivot=position.absolute_bp)

        handler = self._handlers.get(event.channel)
        if handler is None:
            return None
        return handler(position, engine, event)
