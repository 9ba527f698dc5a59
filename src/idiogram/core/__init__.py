"""Genome coordinate model, viewport math, highlights, and event dispatch."""

from .cache import GenomeCache, get_genome_cache
from .events import DeferredQueue, EventDispatcher, PointerEvent
from .highlights import (
    ALL_CHROMOSOMES,
    AbsoluteRange,
    BandRange,
    ChromosomeRange,
    Highlight,
    HighlightCollection,
    HighlightLayer,
    HighlightManager,
    HighlightUpdate,
    PositionRange,
    RangeSpec,
    ResolvedRange,
    WholeChromosome,
    WholeGenome,
    parse_range_args,
)
from .layout import IdiogramLayout, compute_layout, highlight_rects
from .model import Band, BandRow, Chromosome, Genome, build_genome, chromosome_sort_key
from .position import Position, resolve, resolve_pixel, resolve_relative
from .scale import ViewportScale
from .serialization import serialize_highlight_update, serialize_layout, serialize_position

__all__ = [
    "ALL_CHROMOSOMES",
    "AbsoluteRange",
    "Band",
    "BandRange",
    "BandRow",
    "Chromosome",
    "ChromosomeRange",
    "DeferredQueue",
    "EventDispatcher",
    "Genome",
    "GenomeCache",
    "Highlight",
    "HighlightCollection",
    "HighlightLayer",
    "HighlightManager",
    "HighlightUpdate",
    "IdiogramLayout",
    "PointerEvent",
    "Position",
    "PositionRange",
    "RangeSpec",
    "ResolvedRange",
    "ViewportScale",
    "WholeChromosome",
    "WholeGenome",
    "build_genome",
    "chromosome_sort_key",
    "compute_layout",
    "get_genome_cache",
    "highlight_rects",
    "parse_range_args",
    "resolve",
    "resolve_pixel",
    "resolve_relative",
    "serialize_highlight_update",
    "serialize_layout",
    "serialize_position",
]
