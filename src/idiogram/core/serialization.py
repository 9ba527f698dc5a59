"""Layout serialization for surfaces that ship geometry elsewhere.

Converts layout and highlight updates into JSON-compatible dicts, optionally
rounding pixel values to keep payloads small.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from .highlights import HighlightUpdate
from .layout import HighlightRect, IdiogramLayout
from .position import Position

# Pixel values are sent with this many decimals unless precision is overridden
DEFAULT_PRECISION = 2


def _round(value: Any, precision: int | None) -> Any:
    """Round floats recursively through dicts and lists."""
    if precision is None:
        return value
    if isinstance(value, float):
        return round(value, precision)
    if isinstance(value, dict):
        return {k: _round(v, precision) for k, v in value.items()}
    if isinstance(value, list):
        return [_round(v, precision) for v in value]
    return value


def serialize_layout(layout: IdiogramLayout, precision: int | None = DEFAULT_PRECISION) -> dict:
    """Serialize an IdiogramLayout to a JSON-compatible dict.

    Args:
        layout: Geometry to serialize.
        precision: Decimal places for pixel values, None to keep full floats.
    """
    data = asdict(layout)
    # Tuples are not JSON arrays in every encoder
    data["domain"] = list(layout.domain)
    return _round(data, precision)


def _serialize_rect(rect: HighlightRect, precision: int | None) -> dict:
    return _round(asdict(rect), precision)


def serialize_highlight_update(
    update: HighlightUpdate[HighlightRect], precision: int | None = DEFAULT_PRECISION
) -> dict:
    return {
        "entered": [_serialize_rect(r, precision) for r in update.entered],
        "updated": [_serialize_rect(r, precision) for r in update.updated],
        "exited": list(update.exited),
    }


def serialize_position(position: Position) -> dict:
    """Serialize a Position, omitting chromosome fields when it is off the genome."""
    d: dict[str, Any] = {"absolute_bp": position.absolute_bp}
    if position.chromosome is not None:
        d["chromosome"] = position.chromosome.name
        d["relative_bp"] = position.relative_bp
    return d
