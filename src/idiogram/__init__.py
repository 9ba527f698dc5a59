"""Idiogram: genomic coordinate and viewport engine for interactive chromosome maps."""

from .config import IdiogramConfig, Margin
from .core import (
    ALL_CHROMOSOMES,
    BandRow,
    Genome,
    Highlight,
    PointerEvent,
    Position,
    build_genome,
)
from .engine import Idiogram, initialize
from .errors import (
    IdiogramError,
    InvalidArguments,
    MalformedInput,
    NotRendered,
    UnknownBand,
    UnknownChromosome,
)
from .surface import RecordingSurface, RenderingSurface

__version__ = "0.1.0"

__all__ = [
    "ALL_CHROMOSOMES",
    "BandRow",
    "Genome",
    "Highlight",
    "Idiogram",
    "IdiogramConfig",
    "IdiogramError",
    "InvalidArguments",
    "Margin",
    "MalformedInput",
    "NotRendered",
    "PointerEvent",
    "Position",
    "RecordingSurface",
    "RenderingSurface",
    "UnknownBand",
    "UnknownChromosome",
    "build_genome",
    "initialize",
]
