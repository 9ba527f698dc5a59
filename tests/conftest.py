"""Shared test fixtures for idiogram tests."""

import pytest

from idiogram import Idiogram, RecordingSurface, build_genome
from idiogram.core import cache as _cache_module
from idiogram.core.cache import GenomeCache

# chr1 is 1000 bp with a centromere at 500; chr2 is 800 bp with no acen band.
# Rows are deliberately out of order and include a contig that gets dropped.
TWO_CHROMOSOME_ROWS = [
    ("chr2", 0, 300, "p21", "gpos"),
    ("chr2", 300, 800, "q21", "gneg"),
    ("chr1", 0, 400, "p12", "gneg"),
    ("chr1", 400, 500, "p11", "acen"),
    ("chr1", 500, 600, "q11", "acen"),
    ("chr1", 600, 1000, "q12", "gpos50"),
    ("chrUn_gl000220", 0, 50, "", "gneg"),
]


@pytest.fixture(autouse=True)
def _reset_genome_cache():
    """Reset the process-wide genome cache between tests."""
    yield
    _cache_module._genome_cache = None


@pytest.fixture
def rows():
    return list(TWO_CHROMOSOME_ROWS)


@pytest.fixture
def genome(rows):
    return build_genome(rows)


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def idiogram(surface):
    """An unrendered idiogram with its own cache and a recording surface."""
    return Idiogram(surface=surface, genome_cache=GenomeCache())


@pytest.fixture
def rendered(idiogram, rows):
    """A rendered idiogram: 1800 bp across the default 760 px plot width."""
    return idiogram.render(rows)
