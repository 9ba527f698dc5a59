"""Pixel geometry of the idiogram at the current viewport.

Pure functions of Genome, ViewportScale and IdiogramConfig, so layout can be
computed and tested without a rendering surface.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .highlights import Highlight
from .model import Chromosome, Genome
from .scale import ViewportScale

if TYPE_CHECKING:
    from ..config import IdiogramConfig


@dataclass
class BandRect:
    """A band rectangle; x is relative to its chromosome's offset."""

    name: str
    stain: str
    x: float
    width: float
    fill: str | None


@dataclass
class ArmClip:
    """Rounded clip rectangle for one chromosome arm, relative to the chromosome."""

    arm: str  # 'p', 'q', or 'whole' for acentromeric chromosomes
    x: float
    width: float
    radius: float


@dataclass
class CentromereMarker:
    x: float
    radius: float


@dataclass
class ChromosomeGeometry:
    name: str
    offset: float  # Pixel x of absolute_start
    width: float
    bands: list[BandRect] = field(default_factory=list)
    clips: list[ArmClip] = field(default_factory=list)
    centromere: CentromereMarker | None = None


@dataclass
class IdiogramLayout:
    """Everything a surface needs to draw chromosomes and bands."""

    width: int
    height: int
    margin_left: int
    margin_top: int
    band_height: int
    domain: tuple[float, float]
    chromosomes: list[ChromosomeGeometry] = field(default_factory=list)


@dataclass
class HighlightRect:
    key: str
    x: float
    y: float
    width: float
    height: float
    color: str
    opacity: float


def chromosome_geometry(
    chromosome: Chromosome, scale: ViewportScale, config: IdiogramConfig
) -> ChromosomeGeometry:
    geometry = ChromosomeGeometry(
        name=chromosome.name,
        offset=scale.to_pixel(chromosome.absolute_start),
        width=scale.span_to_pixels(chromosome.total_bases),
    )
    for band in chromosome.bands:
        geometry.bands.append(
            BandRect(
                name=band.name,
                stain=band.stain,
                x=scale.span_to_pixels(band.start),
                width=scale.span_to_pixels(band.length),
                fill=config.band_stainer(band),
            )
        )

    arms = chromosome.arms
    labels = ["whole"] if len(arms) == 1 else ["p", "q"]
    for label, (start, end) in zip(labels, arms):
        geometry.clips.append(
            ArmClip(
                arm=label,
                x=scale.span_to_pixels(start),
                width=scale.span_to_pixels(end - start),
                radius=config.clip_radius,
            )
        )

    if chromosome.centromere_offset is not None:
        geometry.centromere = CentromereMarker(
            x=scale.span_to_pixels(chromosome.centromere_offset),
            radius=config.clip_radius,
        )
    return geometry


def compute_layout(genome: Genome, scale: ViewportScale, config: IdiogramConfig) -> IdiogramLayout:
    return IdiogramLayout(
        width=config.width,
        height=config.height,
        margin_left=config.margin.left,
        margin_top=config.margin.top,
        band_height=config.idiogram_height,
        domain=scale.domain,
        chromosomes=[chromosome_geometry(c, scale, config) for c in genome],
    )


def highlight_rects(
    highlights: Iterable[Highlight], scale: ViewportScale, config: IdiogramConfig
) -> list[HighlightRect]:
    return [
        HighlightRect(
            key=h.key,
            x=scale.to_pixel(h.absolute_start),
            y=config.highlight_y,
            width=scale.span_to_pixels(h.length),
            height=config.highlight_height,
            color=h.color,
            opacity=h.opacity,
        )
        for h in highlights
    ]
