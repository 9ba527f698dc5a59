"""Shared constants for idiogram layout defaults and genome conventions.

This module is the single source of truth for default values that are consumed
across configuration loading, model building, and rendering geometry.
"""

from __future__ import annotations

# Canvas defaults (pixels)
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 100
DEFAULT_MARGIN_TOP = 50
DEFAULT_MARGIN_BOTTOM = 20
DEFAULT_MARGIN_LEFT = 20
DEFAULT_MARGIN_RIGHT = 20

# Idiogram aesthetics
DEFAULT_IDIOGRAM_HEIGHT = 7
DEFAULT_CLIP_RADIUS = 7
DEFAULT_HIGHLIGHT_HEIGHT = 21
DEFAULT_HIGHLIGHT_COLOR = "yellow"
DEFAULT_HIGHLIGHT_OPACITY = 0.2

# Zoom behavior
DEFAULT_MIN_SCALE = 1.0
DEFAULT_MAX_SCALE = 1000.0

# Genome cache
DEFAULT_GENOME_CACHE_SIZE = 16

# Chromosome naming
CHROMOSOME_PREFIX = "chr"
AUTOSOMES = tuple(str(n) for n in range(1, 23))
SEX_CHROMOSOMES = ("X", "Y")
CANONICAL_CHROMOSOMES = frozenset(AUTOSOMES + SEX_CHROMOSOMES)

# Band stains
STAIN_CATEGORIES = ("gneg", "gpos", "acen", "gvar", "stalk", "other")
CENTROMERE_STAIN = "acen"
P_ARM = "p"
Q_ARM = "q"

# Default fill per stain category; acen bands are left unfilled
BAND_COLORS: dict[str, str | None] = {
    "gneg": "#dfdfdf",
    "gpos": "#525252",
    "acen": None,
    "gvar": "#cfcfcf",
    "stalk": "#cfcfcf",
    "other": "white",
}

# Pointer event channels, in gesture order
EVENT_CHANNELS = (
    "mousemove",
    "mousedown",
    "mouseup",
    "click",
    "dragstart",
    "drag",
    "dragend",
    "zoomstart",
    "zoom",
    "zoomend",
)
