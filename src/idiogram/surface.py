"""Rendering surface contract and an in-memory recording implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from .core.highlights import HighlightUpdate
from .core.layout import HighlightRect, IdiogramLayout


@runtime_checkable
class RenderingSurface(Protocol):
    """Draws geometry produced by the engine.

    draw_idiogram is called after every geometry-affecting change (render,
    zoom, pan, resize). draw_highlights receives only the keyed changes to
    the highlight layer.
    """

    def draw_idiogram(self, layout: IdiogramLayout) -> None: ...

    def draw_highlights(self, update: HighlightUpdate[HighlightRect]) -> None: ...


@dataclass
class RecordingSurface:
    """Keeps every draw call; also tracks the live highlight visuals by key."""

    layouts: list[IdiogramLayout] = field(default_factory=list)
    updates: list[HighlightUpdate[HighlightRect]] = field(default_factory=list)
    visuals: dict[str, HighlightRect] = field(default_factory=dict)
    created: int = 0

    @property
    def last_layout(self) -> IdiogramLayout | None:
        return self.layouts[-1] if self.layouts else None

    def draw_idiogram(self, layout: IdiogramLayout) -> None:
        self.layouts.append(layout)

    def draw_highlights(self, update: HighlightUpdate[HighlightRect]) -> None:
        self.updates.append(update)
        for rect in update.entered:
            self.visuals[rect.key] = rect
            self.created += 1
        for rect in update.updated:
            self.visuals[rect.key] = rect
        for key in update.exited:
            del self.visuals[key]
