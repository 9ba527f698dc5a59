"""Resolve absolute base pairs and pixels to genomic positions."""

from __future__ import annotations

from dataclasses import dataclass

from .model import Chromosome, Genome
from .scale import ViewportScale


@dataclass(frozen=True)
class Position:
    """A point on the genome.

    chromosome and relative_bp are None when absolute_bp falls outside every
    chromosome, e.g. when the pointer is dragged past either end of the genome.
    """

    absolute_bp: int
    chromosome: Chromosome | None = None
    relative_bp: int | None = None

    @property
    def chromosome_name(self) -> str | None:
        return self.chromosome.name if self.chromosome is not None else None

    def __str__(self) -> str:
        if self.chromosome is None:
            return f"<outside genome>:{self.absolute_bp}"
        return f"{self.chromosome.name}:{self.relative_bp}"


def resolve(absolute_bp: int, genome: Genome) -> Position:
    """Position of an absolute base pair; a bp on a chromosome's end belongs to the next."""
    chromosome = genome.chromosome_at(absolute_bp)
    if chromosome is None:
        return Position(absolute_bp=absolute_bp)
    return Position(
        absolute_bp=absolute_bp,
        chromosome=chromosome,
        relative_bp=absolute_bp - chromosome.absolute_start,
    )


def resolve_relative(genome: Genome, name: str, relative_bp: int | None = None) -> Position:
    """Position of a base pair given relative to a named chromosome.

    A None relative_bp stands for the chromosome's end.

    Raises:
        UnknownChromosome: If name is not in the genome.
    """
    chromosome = genome.chromosome(name)
    if relative_bp is None:
        # The end itself lies in the next chromosome's half-open range
        return Position(
            absolute_bp=chromosome.absolute_end,
            chromosome=chromosome,
            relative_bp=chromosome.total_bases,
        )
    return resolve(chromosome.absolute_start + relative_bp, genome)


def resolve_pixel(pixel: float, scale: ViewportScale, genome: Genome) -> Position:
    return resolve(scale.to_bp(pixel), genome)
