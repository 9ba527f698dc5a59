"""Genome coordinate model: bands, chromosomes, and absolute offsets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ..constants import (
    CANONICAL_CHROMOSOMES,
    CENTROMERE_STAIN,
    CHROMOSOME_PREFIX,
    P_ARM,
    Q_ARM,
    STAIN_CATEGORIES,
)
from ..errors import MalformedInput, UnknownBand, UnknownChromosome

logger = logging.getLogger(__name__)

# Column aliases accepted for mapping rows (UCSC cytoBand naming on the right)
_ROW_KEYS: dict[str, tuple[str, ...]] = {
    "chromosome": ("chromosome", "chrom"),
    "start": ("start", "chromStart"),
    "end": ("end", "chromEnd"),
    "name": ("name", "band"),
    "stain": ("stain", "gieStain"),
}


@dataclass(frozen=True)
class BandRow:
    """One raw band record, coordinates relative to its chromosome."""

    chromosome: str
    start: int
    end: int
    name: str
    stain: str


@dataclass
class Band:
    """A stained region of a chromosome."""

    name: str
    stain: str
    start: int  # Relative to the owning chromosome
    end: int
    chromosome: Chromosome | None = field(default=None, repr=False, compare=False)

    @property
    def length(self) -> int:
        return self.end - self.start

    @property
    def stain_category(self) -> str:
        """Stain folded to one of STAIN_CATEGORIES (gpos25, gpos50, ... become gpos)."""
        if self.stain.startswith("gpos"):
            return "gpos"
        if self.stain in STAIN_CATEGORIES:
            return self.stain
        return "other"

    @property
    def arm(self) -> str | None:
        """'p' or 'q' from the band name prefix, None if neither."""
        if self.name.startswith(P_ARM):
            return P_ARM
        if self.name.startswith(Q_ARM):
            return Q_ARM
        return None

    def _placed(self) -> Chromosome:
        if self.chromosome is None:
            raise ValueError(f"Band {self.name!r} is not attached to a chromosome")
        return self.chromosome

    @property
    def absolute_start(self) -> int:
        return self._placed().absolute_start + self.start

    @property
    def absolute_end(self) -> int:
        return self._placed().absolute_start + self.end


@dataclass
class Chromosome:
    """A chromosome placed on the genome-wide coordinate axis."""

    name: str
    bands: list[Band]
    absolute_start: int
    total_bases: int
    centromere_offset: int | None = None  # None for acentromeric chromosomes

    @property
    def absolute_end(self) -> int:
        return self.absolute_start + self.total_bases

    @property
    def is_acentromeric(self) -> bool:
        return self.centromere_offset is None

    @property
    def arms(self) -> list[tuple[int, int]]:
        """Relative [start, end] intervals of the p and q arms.

        Degrades to a single whole-chromosome interval when no centromere
        was found.
        """
        if self.centromere_offset is None:
            return [(0, self.total_bases)]
        return [(0, self.centromere_offset), (self.centromere_offset, self.total_bases)]

    def band(self, name: str) -> Band:
        """Look up a band by name."""
        for band in self.bands:
            if band.name == name:
                return band
        raise UnknownBand(self.name, name)

    def contains(self, absolute_bp: float) -> bool:
        return self.absolute_start <= absolute_bp < self.absolute_end


@dataclass
class Genome:
    """Ordered chromosomes tiling [0, total_bases) without gaps."""

    chromosomes: list[Chromosome]
    total_bases: int
    offsets: np.ndarray = field(init=False, repr=False, compare=False)
    _by_name: dict[str, Chromosome] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.offsets = np.array([c.absolute_start for c in self.chromosomes], dtype=np.int64)
        self._by_name = {c.name: c for c in self.chromosomes}

    def __iter__(self) -> Iterator[Chromosome]:
        return iter(self.chromosomes)

    def __len__(self) -> int:
        return len(self.chromosomes)

    @property
    def names(self) -> list[str]:
        return [c.name for c in self.chromosomes]

    def chromosome(self, name: str) -> Chromosome:
        """Look up a chromosome by name, raising UnknownChromosome if absent."""
        try:
            return self._by_name[name]
        except (KeyError, TypeError):
            raise UnknownChromosome(name) from None

    def band(self, chromosome: str, band: str) -> Band:
        return self.chromosome(chromosome).band(band)

    def chromosome_at(self, absolute_bp: float) -> Chromosome | None:
        """Chromosome whose half-open range contains absolute_bp, if any."""
        if not self.chromosomes or not 0 <= absolute_bp < self.total_bases:
            return None
        idx = int(np.searchsorted(self.offsets, absolute_bp, side="right")) - 1
        return self.chromosomes[idx]


def strip_prefix(name: str) -> str:
    """Chromosome name without the 'chr' prefix."""
    if name.lower().startswith(CHROMOSOME_PREFIX):
        return name[len(CHROMOSOME_PREFIX) :]
    return name


def is_canonical(name: str) -> bool:
    """True for chromosomes 1-22, X and Y, with or without the 'chr' prefix."""
    return strip_prefix(name).upper() in CANONICAL_CHROMOSOMES


def chromosome_sort_key(name: str) -> tuple[int, int]:
    """Sort key placing numeric chromosomes ascending, then X, then Y."""
    bare = strip_prefix(name).upper()
    if bare.isdigit():
        return (0, int(bare))
    return (1, 0 if bare == "X" else 1)


def _field(row: Mapping[str, Any], key: str) -> Any:
    for alias in _ROW_KEYS[key]:
        if alias in row:
            return row[alias]
    raise MalformedInput(f"Band row is missing '{key}': {dict(row)!r}")


def coerce_row(row: Any) -> BandRow:
    """Normalize a BandRow, mapping, or 5-item sequence into a BandRow.

    Raises:
        MalformedInput: If fields are missing or coordinates are invalid.
    """
    if isinstance(row, BandRow):
        chromosome, start, end, name, stain = (
            row.chromosome,
            row.start,
            row.end,
            row.name,
            row.stain,
        )
    elif isinstance(row, Mapping):
        chromosome, start, end, name, stain = (
            _field(row, key) for key in ("chromosome", "start", "end", "name", "stain")
        )
    elif isinstance(row, Sequence) and not isinstance(row, str) and len(row) >= 5:
        chromosome, start, end, name, stain = row[:5]
    else:
        raise MalformedInput(f"Unrecognized band row: {row!r}")

    try:
        start = int(start)
        end = int(end)
    except (TypeError, ValueError) as e:
        raise MalformedInput(f"Non-integer coordinates in band row: {row!r}") from e

    if start < 0:
        raise MalformedInput(f"Band start must be non-negative, got {start} in {row!r}")
    if start > end:
        raise MalformedInput(f"Band start ({start}) is after its end ({end}) in {row!r}")

    return BandRow(str(chromosome), start, end, str(name), str(stain))


def _find_centromere(bands: list[Band]) -> int | None:
    """Boundary between the p and q arms, from the first acen band of each arm."""
    p_acen = next((b for b in bands if b.arm == P_ARM and b.stain == CENTROMERE_STAIN), None)
    if p_acen is not None:
        return p_acen.end
    q_acen = next((b for b in bands if b.arm == Q_ARM and b.stain == CENTROMERE_STAIN), None)
    if q_acen is not None:
        return q_acen.start
    return None


def _check_disjoint(name: str, bands: list[Band]) -> None:
    ordered = sorted(bands, key=lambda b: (b.start, b.end))
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.start < prev.end:
            raise MalformedInput(
                f"Bands {prev.name!r} and {cur.name!r} overlap on chromosome {name!r}"
            )


def build_genome(raw: Iterable[Any] | Genome) -> Genome:
    """Build a Genome from raw band rows.

    Rows outside the canonical chromosome set are dropped. Chromosomes are
    ordered 1..22, X, Y and laid end to end to assign absolute coordinates.

    Args:
        raw: Band rows (BandRow, mappings, or 5-item sequences), or an
            already-built Genome which is returned as is.

    Returns:
        The assembled Genome.

    Raises:
        MalformedInput: If a row is invalid, bands overlap, or no canonical
            chromosome remains.
    """
    if isinstance(raw, Genome):
        return raw

    grouped: dict[str, list[BandRow]] = {}
    dropped: set[str] = set()
    for row in raw:
        band_row = coerce_row(row)
        if not is_canonical(band_row.chromosome):
            dropped.add(band_row.chromosome)
            continue
        grouped.setdefault(band_row.chromosome, []).append(band_row)

    if dropped:
        logger.debug("Dropped %d non-canonical contigs: %s", len(dropped), sorted(dropped))

    names = sorted(grouped, key=chromosome_sort_key)
    lengths = []
    kept: list[tuple[str, list[Band]]] = []
    for name in names:
        bands = [Band(r.name, r.stain, r.start, r.end) for r in grouped[name]]
        total = max(b.end for b in bands)
        if total == 0:
            logger.warning("Excluding chromosome %s: its bands have zero length", name)
            continue
        _check_disjoint(name, bands)
        kept.append((name, bands))
        lengths.append(total)

    if not kept:
        raise MalformedInput("No canonical chromosomes (1-22, X, Y) in band data")

    ends = np.cumsum(np.array(lengths, dtype=np.int64))
    chromosomes = []
    for (name, bands), length, end in zip(kept, lengths, ends):
        chromosome = Chromosome(
            name=name,
            bands=bands,
            absolute_start=int(end) - length,
            total_bases=length,
            centromere_offset=_find_centromere(bands),
        )
        if chromosome.is_acentromeric:
            logger.debug("Chromosome %s has no acen band; clipping whole chromosome", name)
        for band in bands:
            band.chromosome = chromosome
        chromosomes.append(chromosome)

    genome = Genome(chromosomes=chromosomes, total_bases=int(ends[-1]))
    logger.info("Built genome: %d chromosomes, %d bp", len(chromosomes), genome.total_bases)
    return genome
