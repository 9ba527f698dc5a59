"""Linear viewport mapping between pixels and absolute base pairs."""

from __future__ import annotations

import logging
import math

from ..constants import DEFAULT_MAX_SCALE, DEFAULT_MIN_SCALE

logger = logging.getLogger(__name__)


def _finite(*values: float) -> bool:
    try:
        return all(math.isfinite(v) for v in values)
    except TypeError:
        return False


class ViewportScale:
    """Mutable linear scale from a base-pair domain to a pixel range.

    Zooming keeps a pivot base pair at the same pixel; panning translates the
    domain. Neither clamps the domain to the genome, callers that want the
    view kept in bounds must check it themselves.
    """

    def __init__(self, min_scale: float = DEFAULT_MIN_SCALE, max_scale: float = DEFAULT_MAX_SCALE):
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.domain: tuple[float, float] = (0.0, 1.0)
        self.range: tuple[float, float] = (0.0, 1.0)
        self.current_scale: float | None = None
        self.total: float | None = None
        self.version = 0

    def __repr__(self) -> str:
        return (
            f"ViewportScale(domain={self.domain}, range={self.range}, "
            f"scale={self.current_scale})"
        )

    def _touch(self) -> None:
        self.version += 1

    def clamp_scale(self, scale: float) -> float:
        return min(max(scale, self.min_scale), self.max_scale)

    def set_domain(self, total: float, width: float) -> None:
        """Show the whole genome [0, total] across [0, width] pixels at scale 1."""
        self.total = total
        self.domain = (0.0, float(total))
        self.range = (0.0, float(width))
        self.current_scale = 1.0
        self._touch()

    def set_range(self, width: float) -> None:
        """Change the pixel width, keeping the visible base-pair window."""
        self.range = (0.0, float(width))
        self._touch()

    def zoom_to(self, scale: float, pivot_bp: float) -> None:
        """Zoom to an absolute scale factor, holding pivot_bp on the same pixel.

        The first call on a scale that has never been zoomed only records the
        factor. Non-finite arguments are ignored.
        """
        if not _finite(scale, pivot_bp) or scale <= 0:
            logger.debug("Ignoring zoom to %r about %r", scale, pivot_bp)
            return

        scale = self.clamp_scale(scale)
        previous = self.current_scale
        self.current_scale = scale
        if previous is None:
            self._touch()
            return

        ratio = scale / previous
        if ratio == 1:
            return

        lo, hi = self.domain
        self.domain = (pivot_bp - (pivot_bp - lo) / ratio, pivot_bp + (hi - pivot_bp) / ratio)
        self._touch()

    def zoom_to_domain(self, start: float, end: float) -> None:
        """Show [start, end] across the pixel range.

        A window narrower (or wider) than the scale bounds allow is widened
        (or narrowed) about its center, so the domain always matches
        current_scale.
        """
        if not _finite(start, end) or end <= start:
            logger.debug("Ignoring zoom to empty window [%r, %r]", start, end)
            return
        if self.total:
            requested = self.total / (end - start)
            scale = self.clamp_scale(requested)
            if scale != requested:
                center = (start + end) / 2
                half = self.total / scale / 2
                start, end = center - half, center + half
            self.current_scale = scale
        self.domain = (float(start), float(end))
        self._touch()

    def pan_by(self, shift_bp: float) -> None:
        """Move the visible window by -shift_bp (dragging right reveals the left)."""
        if not _finite(shift_bp):
            logger.debug("Ignoring pan by %r", shift_bp)
            return
        if shift_bp == 0:
            return
        lo, hi = self.domain
        self.domain = (lo - shift_bp, hi - shift_bp)
        self._touch()

    @property
    def bp_per_pixel(self) -> float:
        return (self.domain[1] - self.domain[0]) / (self.range[1] - self.range[0])

    def to_pixel(self, bp: float) -> float:
        lo, hi = self.domain
        r0, r1 = self.range
        return r0 + (bp - lo) * (r1 - r0) / (hi - lo)

    def to_bp(self, pixel: float) -> int:
        """Invert a pixel to the nearest whole base pair (halves round up)."""
        lo, hi = self.domain
        r0, r1 = self.range
        return math.floor(lo + (pixel - r0) * (hi - lo) / (r1 - r0) + 0.5)

    def span_to_pixels(self, length: float) -> float:
        """Pixel width of a base-pair length at the current zoom."""
        return length * (self.range[1] - self.range[0]) / (self.domain[1] - self.domain[0])
