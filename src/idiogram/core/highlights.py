"""Highlight ranges: range specifications, resolution, and lifecycle.

A highlight can be requested in several shapes (chromosome-relative
coordinates, absolute coordinates, a pair of positions, a whole chromosome or
a single band). Each shape is its own spec type with a ``resolve`` method that
turns it into a normalized ResolvedRange against a Genome.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from numbers import Real
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..constants import DEFAULT_HIGHLIGHT_COLOR, DEFAULT_HIGHLIGHT_OPACITY
from ..errors import InvalidArguments
from .model import Chromosome, Genome
from .position import Position

if TYPE_CHECKING:
    from .layout import HighlightRect

logger = logging.getLogger(__name__)

OPTION_KEYS = frozenset({"color", "opacity"})

# Keys accepted for position-shaped mappings
_CHROMOSOME_KEYS = ("chromosome", "chrom")
_BASE_PAIR_KEYS = ("basePair", "base_pair", "bp")


@dataclass(frozen=True)
class ResolvedRange:
    """A genomic interval in absolute coordinates with its endpoint chromosomes."""

    chromosome_start: Chromosome
    absolute_start: int
    chromosome_end: Chromosome
    absolute_end: int


def _clamp(value: float, low: int, high: int) -> int:
    return int(min(max(value, low), high))


def _ordered(
    start_chromosome: Chromosome, start: int, end_chromosome: Chromosome, end: int
) -> ResolvedRange:
    if start > end:
        start_chromosome, start, end_chromosome, end = end_chromosome, end, start_chromosome, start
    return ResolvedRange(start_chromosome, start, end_chromosome, end)


def _owner(genome: Genome, bp: int, closing: bool) -> Chromosome:
    """Chromosome owning a clamped absolute endpoint.

    A closing endpoint is exclusive, so it belongs to the chromosome holding
    the base pair just before it.
    """
    lookup = bp - 1 if closing and bp > 0 else bp
    chromosome = genome.chromosome_at(lookup)
    if chromosome is None:
        return genome.chromosomes[-1] if lookup >= genome.total_bases else genome.chromosomes[0]
    return chromosome


def _relative_endpoint(genome: Genome, name: Any, bp: float | None) -> tuple[Chromosome, int]:
    chromosome = name if isinstance(name, Chromosome) else genome.chromosome(name)
    if bp is None:
        return chromosome, chromosome.absolute_end
    return chromosome, chromosome.absolute_start + _clamp(bp, 0, chromosome.total_bases)


def _absolute_range(genome: Genome, start: float, end: float) -> ResolvedRange:
    if start > end:
        start, end = end, start
    start = _clamp(start, 0, genome.total_bases)
    end = _clamp(end, 0, genome.total_bases)
    return ResolvedRange(
        _owner(genome, start, closing=False),
        start,
        _owner(genome, end, closing=end > start),
        end,
    )


class RangeSpec:
    """Base class for the accepted range shapes."""

    def resolve(self, genome: Genome) -> ResolvedRange:
        raise NotImplementedError


@dataclass(frozen=True)
class ChromosomeRange(RangeSpec):
    """From a bp on one chromosome to a bp on another (or the same) chromosome."""

    start_chromosome: str
    start_bp: float
    end_chromosome: str
    end_bp: float

    def resolve(self, genome: Genome) -> ResolvedRange:
        c0, start = _relative_endpoint(genome, self.start_chromosome, self.start_bp)
        c1, end = _relative_endpoint(genome, self.end_chromosome, self.end_bp)
        return _ordered(c0, start, c1, end)


@dataclass(frozen=True)
class AbsoluteRange(RangeSpec):
    """Between two genome-wide base pairs."""

    start: float
    end: float

    def resolve(self, genome: Genome) -> ResolvedRange:
        return _absolute_range(genome, self.start, self.end)


@dataclass(frozen=True)
class PositionRange(RangeSpec):
    """Between two Position objects or {chromosome, basePair} mappings."""

    start: Any
    end: Any

    @staticmethod
    def _endpoint(genome: Genome, point: Any) -> tuple[Chromosome | None, int]:
        if isinstance(point, Position):
            if point.chromosome is None:
                return None, point.absolute_bp
            return _relative_endpoint(genome, point.chromosome.name, point.relative_bp)

        chromosome = next((point[k] for k in _CHROMOSOME_KEYS if k in point), None)
        bp = next((point[k] for k in _BASE_PAIR_KEYS if k in point), None)
        if bp is not None and not is_bp(bp):
            raise InvalidArguments(f"Position base pair must be a finite number: {point!r}")
        if chromosome is None:
            if bp is None:
                raise InvalidArguments(f"Position needs a chromosome or base pair: {point!r}")
            return None, bp
        return _relative_endpoint(genome, chromosome, bp)

    def resolve(self, genome: Genome) -> ResolvedRange:
        c0, start = self._endpoint(genome, self.start)
        c1, end = self._endpoint(genome, self.end)
        if c0 is None or c1 is None:
            # At least one endpoint lies off the genome; fall back to clamping.
            return _absolute_range(genome, start, end)
        return _ordered(c0, start, c1, end)


@dataclass(frozen=True)
class WholeChromosome(RangeSpec):
    name: str

    def resolve(self, genome: Genome) -> ResolvedRange:
        chromosome = genome.chromosome(self.name)
        return ResolvedRange(
            chromosome, chromosome.absolute_start, chromosome, chromosome.absolute_end
        )


@dataclass(frozen=True)
class BandRange(RangeSpec):
    """A single named band."""

    chromosome: str
    band: str

    def resolve(self, genome: Genome) -> ResolvedRange:
        band = genome.band(self.chromosome, self.band)
        chromosome = genome.chromosome(self.chromosome)
        return ResolvedRange(chromosome, band.absolute_start, chromosome, band.absolute_end)


@dataclass(frozen=True)
class WholeGenome(RangeSpec):
    """Every chromosome, first base to last."""

    def resolve(self, genome: Genome) -> ResolvedRange:
        return ResolvedRange(genome.chromosomes[0], 0, genome.chromosomes[-1], genome.total_bases)


ALL_CHROMOSOMES = WholeGenome()


def is_bp(value: Any) -> bool:
    """True for a finite real number of base pairs (bools excluded)."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _is_point(value: Any) -> bool:
    return isinstance(value, (Position, Mapping))


def parse_range_args(*args: Any) -> RangeSpec:
    """Turn positional call patterns into a RangeSpec.

    Accepted shapes::

        (spec,)                               a RangeSpec as is
        (None,) or (ALL_CHROMOSOMES,)         the whole genome
        ("chr2",)                             a whole chromosome
        ("chr2", "p13")                       one band
        (1000, 2000)                          absolute base pairs
        (position, position)                  Position objects or mappings
        ("chr2", 100, 2000)                   within one chromosome
        ("chr1", 100, "chr2", 2000)           across chromosomes

    Raises:
        InvalidArguments: For any other shape.
    """
    if len(args) == 1:
        (arg,) = args
        if isinstance(arg, RangeSpec):
            return arg
        if arg is None:
            return ALL_CHROMOSOMES
        if isinstance(arg, str):
            return WholeChromosome(arg)
    elif len(args) == 2:
        a, b = args
        if isinstance(a, str) and isinstance(b, str):
            return BandRange(a, b)
        if is_bp(a) and is_bp(b):
            return AbsoluteRange(a, b)
        if _is_point(a) and _is_point(b):
            return PositionRange(a, b)
    elif len(args) == 3:
        name, start, end = args
        if isinstance(name, str) and is_bp(start) and is_bp(end):
            return ChromosomeRange(name, start, name, end)
    elif len(args) == 4:
        c0, start, c1, end = args
        if isinstance(c0, str) and isinstance(c1, str) and is_bp(start) and is_bp(end):
            return ChromosomeRange(c0, start, c1, end)

    raise InvalidArguments(f"Unrecognized arguments for a genomic range: {args!r}")


def split_options(args: Sequence[Any]) -> tuple[tuple[Any, ...], dict[str, Any]]:
    """Separate a trailing {color, opacity} mapping from range arguments."""
    if args and isinstance(args[-1], Mapping) and set(args[-1]) <= OPTION_KEYS:
        return tuple(args[:-1]), dict(args[-1])
    return tuple(args), {}


class Highlight:
    """A colored genomic interval drawn over the idiogram."""

    def __init__(
        self,
        extent: ResolvedRange,
        color: str,
        opacity: float,
        on_remove: Callable[[Highlight], None] | None = None,
    ):
        self.chromosome_start = extent.chromosome_start
        self.chromosome_end = extent.chromosome_end
        self.absolute_start = extent.absolute_start
        self.absolute_end = extent.absolute_end
        self.color = color
        self.opacity = opacity
        self._on_remove = on_remove

    def __repr__(self) -> str:
        return (
            f"Highlight({self.key}, color={self.color!r}, opacity={self.opacity}"
            f"{', removed' if self.removed else ''})"
        )

    @property
    def key(self) -> str:
        """Identity used to match this highlight's visual across redraws."""
        return (
            f"{self.chromosome_start.name}:{self.absolute_start}-"
            f"{self.chromosome_end.name}:{self.absolute_end}"
        )

    @property
    def start(self) -> int:
        """Start relative to chromosome_start."""
        return self.absolute_start - self.chromosome_start.absolute_start

    @property
    def end(self) -> int:
        """End relative to chromosome_end."""
        return self.absolute_end - self.chromosome_end.absolute_start

    @property
    def length(self) -> int:
        return self.absolute_end - self.absolute_start

    @property
    def removed(self) -> bool:
        return self._on_remove is None

    def remove(self) -> bool:
        """Remove from the owning collection. Only the first call has an effect.

        Returns:
            True if this call removed the highlight.
        """
        on_remove, self._on_remove = self._on_remove, None
        if on_remove is None:
            return False
        on_remove(self)
        return True


class HighlightCollection(Sequence):
    """Ordered highlights owned by one idiogram."""

    def __init__(self, on_change: Callable[[], None] | None = None):
        self._items: list[Highlight] = []
        self._on_change = on_change
        self._batch = False

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):  # noqa: ANN001, ANN204
        return self._items[index]

    def __iter__(self) -> Iterator[Highlight]:
        return iter(list(self._items))

    def __contains__(self, item: object) -> bool:
        return any(h is item for h in self._items)

    def __repr__(self) -> str:
        return f"HighlightCollection({self._items!r})"

    def _changed(self) -> None:
        if not self._batch and self._on_change is not None:
            self._on_change()

    def _discard(self, highlight: Highlight) -> None:
        for i, item in enumerate(self._items):
            if item is highlight:
                del self._items[i]
                break
        self._changed()

    def add(self, extent: ResolvedRange, color: str, opacity: float) -> Highlight:
        highlight = Highlight(extent, color, opacity, on_remove=self._discard)
        self._items.append(highlight)
        return highlight

    def remove_all(self) -> int:
        """Remove every outstanding highlight through its own remove().

        Returns:
            Number of highlights removed.
        """
        self._batch = True
        try:
            removed = sum(1 for highlight in list(self._items) if highlight.remove())
        finally:
            self._batch = False
        if removed:
            self._changed()
        return removed


class HighlightManager:
    """Resolves range specs into highlights and keeps them in order."""

    def __init__(
        self,
        default_color: str = DEFAULT_HIGHLIGHT_COLOR,
        default_opacity: float = DEFAULT_HIGHLIGHT_OPACITY,
        on_change: Callable[[], None] | None = None,
    ):
        self.default_color = default_color
        self.default_opacity = default_opacity
        self.collection = HighlightCollection(on_change)

    def create(
        self,
        spec: RangeSpec,
        genome: Genome,
        color: str | None = None,
        opacity: float | None = None,
    ) -> Highlight:
        """Resolve spec and add the resulting highlight.

        Resolution happens before the collection is touched, so a lookup
        failure leaves it unchanged.

        Raises:
            UnknownChromosome: If spec names a chromosome not in genome.
            UnknownBand: If spec names a band not on its chromosome.
        """
        extent = spec.resolve(genome)
        highlight = self.collection.add(
            extent,
            color=self.default_color if color is None else color,
            opacity=self.default_opacity if opacity is None else opacity,
        )
        logger.debug("Added highlight %s", highlight.key)
        return highlight


K = TypeVar("K")


@dataclass
class HighlightUpdate(Generic[K]):
    """Changes to the highlight layer since the previous pass."""

    entered: list[K] = field(default_factory=list)
    updated: list[K] = field(default_factory=list)
    exited: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.entered or self.updated or self.exited)


class HighlightLayer:
    """Matches highlight visuals between render passes by key.

    Visuals present in both passes are updated in place; new ones enter and
    missing ones exit. Highlights over the same range each keep their own
    visual, matched by occurrence order.
    """

    def __init__(self) -> None:
        self._keys: list[str] = []

    @property
    def keys(self) -> list[str]:
        return list(self._keys)

    def reconcile(self, rects: list[HighlightRect]) -> HighlightUpdate[HighlightRect]:
        current: dict[str, HighlightRect] = {}
        seen: dict[str, int] = {}
        for rect in rects:
            occurrence = seen.get(rect.key, 0)
            seen[rect.key] = occurrence + 1
            if occurrence:
                # Repeated ranges get their own visual: "key#1", "key#2", ...
                rect = replace(rect, key=f"{rect.key}#{occurrence}")
            current[rect.key] = rect

        previous = set(self._keys)
        update: HighlightUpdate[HighlightRect] = HighlightUpdate()
        for key, rect in current.items():
            (update.updated if key in previous else update.entered).append(rect)
        update.exited = [key for key in self._keys if key not in current]

        self._keys = list(current)
        return update

    def reset(self) -> None:
        self._keys = []
