"""Configuration for the idiogram engine, loadable from environment variables."""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .constants import (
    BAND_COLORS,
    DEFAULT_CLIP_RADIUS,
    DEFAULT_GENOME_CACHE_SIZE,
    DEFAULT_HEIGHT,
    DEFAULT_HIGHLIGHT_COLOR,
    DEFAULT_HIGHLIGHT_HEIGHT,
    DEFAULT_HIGHLIGHT_OPACITY,
    DEFAULT_IDIOGRAM_HEIGHT,
    DEFAULT_MARGIN_BOTTOM,
    DEFAULT_MARGIN_LEFT,
    DEFAULT_MARGIN_RIGHT,
    DEFAULT_MARGIN_TOP,
    DEFAULT_MAX_SCALE,
    DEFAULT_MIN_SCALE,
    DEFAULT_WIDTH,
)


def default_band_fill(band: Any) -> str | None:
    """Fill color for a band based on its stain category (None leaves it unfilled)."""
    return BAND_COLORS.get(band.stain_category, BAND_COLORS["other"])


@dataclass
class Margin:
    """Space around the plot area, in pixels."""

    top: int = DEFAULT_MARGIN_TOP
    bottom: int = DEFAULT_MARGIN_BOTTOM
    left: int = DEFAULT_MARGIN_LEFT
    right: int = DEFAULT_MARGIN_RIGHT

    def __post_init__(self) -> None:
        for side in ("top", "bottom", "left", "right"):
            if getattr(self, side) < 0:
                raise ValueError(f"margin.{side} must be non-negative, got {getattr(self, side)}")


@dataclass
class IdiogramConfig:
    """Layout and behavior settings for one idiogram."""

    # Canvas
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    margin: Margin = field(default_factory=Margin)

    # Aesthetics
    idiogram_height: int = DEFAULT_IDIOGRAM_HEIGHT
    clip_radius: int = DEFAULT_CLIP_RADIUS
    highlight_height: int = DEFAULT_HIGHLIGHT_HEIGHT
    highlight_color: str = DEFAULT_HIGHLIGHT_COLOR
    highlight_opacity: float = DEFAULT_HIGHLIGHT_OPACITY
    band_stainer: Callable[[Any], str | None] = default_band_fill

    # Zoom
    min_scale: float = DEFAULT_MIN_SCALE
    max_scale: float = DEFAULT_MAX_SCALE

    # Cache
    genome_cache_size: int = DEFAULT_GENOME_CACHE_SIZE

    def __post_init__(self) -> None:
        """Validate config values."""
        if isinstance(self.margin, dict):
            self.margin = Margin(**self.margin)

        if self.width < 1:
            raise ValueError(f"width must be at least 1, got {self.width}")

        if self.height < 1:
            raise ValueError(f"height must be at least 1, got {self.height}")

        if self.plot_width < 1:
            raise ValueError(
                f"margins leave no room to draw: width {self.width}, "
                f"left {self.margin.left}, right {self.margin.right}"
            )

        if self.idiogram_height < 1:
            raise ValueError(f"idiogram_height must be at least 1, got {self.idiogram_height}")

        if self.clip_radius < 0:
            raise ValueError(f"clip_radius must be non-negative, got {self.clip_radius}")

        if self.highlight_height < 0:
            raise ValueError(f"highlight_height must be non-negative, got {self.highlight_height}")

        if not 0 <= self.highlight_opacity <= 1:
            raise ValueError(
                f"highlight_opacity must be between 0 and 1, got {self.highlight_opacity}"
            )

        if self.min_scale <= 0:
            raise ValueError(f"min_scale must be positive, got {self.min_scale}")

        if self.max_scale < self.min_scale:
            raise ValueError(
                f"max_scale ({self.max_scale}) must be at least min_scale ({self.min_scale})"
            )

        if self.genome_cache_size < 0:
            raise ValueError(
                f"genome_cache_size must be non-negative, got {self.genome_cache_size}"
            )

    @property
    def plot_width(self) -> int:
        """Pixel width available to the idiogram inside the margins."""
        return self.width - self.margin.left - self.margin.right

    @property
    def highlight_y(self) -> float:
        """Top of a highlight rectangle, centered on the idiogram bar."""
        return -(self.highlight_height / 2) + (self.idiogram_height / 2)

    @classmethod
    def from_env(cls) -> "IdiogramConfig":
        """Create config from environment variables."""
        env = os.environ

        return cls(
            width=int(env.get("IDIOGRAM_WIDTH", str(DEFAULT_WIDTH))),
            height=int(env.get("IDIOGRAM_HEIGHT", str(DEFAULT_HEIGHT))),
            margin=Margin(
                top=int(env.get("IDIOGRAM_MARGIN_TOP", str(DEFAULT_MARGIN_TOP))),
                bottom=int(env.get("IDIOGRAM_MARGIN_BOTTOM", str(DEFAULT_MARGIN_BOTTOM))),
                left=int(env.get("IDIOGRAM_MARGIN_LEFT", str(DEFAULT_MARGIN_LEFT))),
                right=int(env.get("IDIOGRAM_MARGIN_RIGHT", str(DEFAULT_MARGIN_RIGHT))),
            ),
            idiogram_height=int(
                env.get("IDIOGRAM_BAND_HEIGHT", str(DEFAULT_IDIOGRAM_HEIGHT))
            ),
            clip_radius=int(env.get("IDIOGRAM_CLIP_RADIUS", str(DEFAULT_CLIP_RADIUS))),
            highlight_height=int(
                env.get("IDIOGRAM_HIGHLIGHT_HEIGHT", str(DEFAULT_HIGHLIGHT_HEIGHT))
            ),
            highlight_color=env.get("IDIOGRAM_HIGHLIGHT_COLOR", DEFAULT_HIGHLIGHT_COLOR),
            highlight_opacity=float(
                env.get("IDIOGRAM_HIGHLIGHT_OPACITY", str(DEFAULT_HIGHLIGHT_OPACITY))
            ),
            min_scale=float(env.get("IDIOGRAM_MIN_SCALE", str(DEFAULT_MIN_SCALE))),
            max_scale=float(env.get("IDIOGRAM_MAX_SCALE", str(DEFAULT_MAX_SCALE))),
            genome_cache_size=int(
                env.get("IDIOGRAM_GENOME_CACHE_SIZE", str(DEFAULT_GENOME_CACHE_SIZE))
            ),
        )
