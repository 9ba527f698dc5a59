"""Bounded LRU cache of built genomes, keyed by band data content."""

from __future__ import annotations

import hashlib
import logging
from collections import OrderedDict
from collections.abc import Iterable
from typing import Any

from ..constants import DEFAULT_GENOME_CACHE_SIZE
from .model import BandRow, Genome, build_genome, coerce_row

logger = logging.getLogger(__name__)


def fingerprint(rows: Iterable[BandRow]) -> str:
    """Content hash of band rows (not used for security)."""
    digest = hashlib.md5()  # noqa: S324
    for row in rows:
        line = f"{row.chromosome}\t{row.start}\t{row.end}\t{row.name}\t{row.stain}\n"
        digest.update(line.encode())
    return digest.hexdigest()


class GenomeCache:
    """LRU of Genomes so repeated renders of the same data skip the rebuild.

    Genomes are read-only once built, so one instance can be shared by any
    number of idiograms.
    """

    def __init__(self, maxsize: int = DEFAULT_GENOME_CACHE_SIZE):
        self._cache: OrderedDict[str, Genome] = OrderedDict()
        self._maxsize = maxsize
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def get_or_build(self, raw: Iterable[Any] | Genome) -> Genome:
        """Return the cached Genome for raw, building it on a miss.

        Raises:
            MalformedInput: If raw cannot be built into a Genome.
        """
        if isinstance(raw, Genome):
            return raw

        rows = [coerce_row(r) for r in raw]
        key = fingerprint(rows)
        if key in self._cache:
            self.hits += 1
            self._cache.move_to_end(key)
            logger.debug("Genome cache hit: %s", key)
            return self._cache[key]

        self.misses += 1
        genome = build_genome(rows)
        if self._maxsize > 0:
            if len(self._cache) >= self._maxsize:
                # Evict oldest (first) item
                self._cache.popitem(last=False)
            self._cache[key] = genome
        return genome

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
        self.misses = 0


_genome_cache: GenomeCache | None = None


def get_genome_cache(maxsize: int = DEFAULT_GENOME_CACHE_SIZE) -> GenomeCache:
    """Get or create the process-wide genome cache."""
    global _genome_cache
    if _genome_cache is None:
        _genome_cache = GenomeCache(maxsize)
    return _genome_cache
