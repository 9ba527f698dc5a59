"""The idiogram engine: one Genome, viewport, highlight set, and handler table."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from typing import Any

from .config import IdiogramConfig
from .core.cache import GenomeCache, get_genome_cache
from .core.events import DeferredQueue, EventDispatcher, Handler, PointerEvent, validate_channel
from .core.highlights import (
    Highlight,
    HighlightCollection,
    HighlightLayer,
    HighlightManager,
    is_bp,
    parse_range_args,
    split_options,
)
from .core.layout import IdiogramLayout, compute_layout, highlight_rects
from .core.model import Band, Chromosome, Genome
from .core.position import Position, resolve, resolve_pixel, resolve_relative
from .core.scale import ViewportScale
from .errors import InvalidArguments, NotRendered
from .surface import RenderingSurface

logger = logging.getLogger(__name__)

RedrawHook = Callable[["Idiogram", ViewportScale], Any]


class Idiogram:
    """An interactive idiogram bound to an optional rendering surface.

    Highlights and event handlers registered before the first render are
    queued and applied, in registration order, when render() runs.
    """

    def __init__(
        self,
        config: IdiogramConfig | None = None,
        surface: RenderingSurface | None = None,
        genome_cache: GenomeCache | None = None,
    ):
        self.config = config or IdiogramConfig()
        self.surface = surface
        self.scale = ViewportScale(self.config.min_scale, self.config.max_scale)
        self._genome_cache = genome_cache if genome_cache is not None else self._default_cache()
        self._manager = HighlightManager(
            self.config.highlight_color,
            self.config.highlight_opacity,
            on_change=self._highlights_changed,
        )
        self._layer = HighlightLayer()
        self._events = EventDispatcher(self)
        self._deferred = DeferredQueue()
        self._redraw_hook: RedrawHook | None = None
        self._genome: Genome | None = None
        self._drawn = False

    def __repr__(self) -> str:
        chromosomes = len(self._genome) if self._genome is not None else 0
        return (
            f"Idiogram(chromosomes={chromosomes}, drawn={self._drawn}, "
            f"highlights={len(self._manager.collection)})"
        )

    # State

    @property
    def drawn(self) -> bool:
        return self._drawn

    @property
    def genome(self) -> Genome:
        if self._genome is None:
            raise NotRendered("The idiogram has no genome until render() is called")
        return self._genome

    @property
    def pending(self) -> int:
        """Number of queued pre-render commands."""
        return len(self._deferred)

    def _default_cache(self) -> GenomeCache:
        """The shared cache, or a private one when the configured size differs."""
        size = self.config.genome_cache_size
        shared = get_genome_cache(size)
        if shared.maxsize == size:
            return shared
        logger.debug("Using a private genome cache of size %d", size)
        return GenomeCache(size)

    def _require_drawn(self, operation: str) -> None:
        if not self._drawn:
            raise NotRendered(f"{operation} requires a rendered idiogram")

    # Rendering

    def render(self, raw_data: Iterable[Any] | Genome) -> Idiogram:
        """Build the genome, show all of it, replay queued commands, and draw.

        Rendering again with different data starts from a fresh highlight set.

        Raises:
            MalformedInput: If raw_data cannot be built into a Genome.
        """
        genome = self._genome_cache.get_or_build(raw_data)
        if self._genome is not None and genome is not self._genome:
            logger.info("Re-rendering with new genome data; clearing highlights")
            self._manager.collection.remove_all()
            self._layer.reset()
        self._genome = genome

        self.scale.set_domain(genome.total_bases, self.config.plot_width)

        replayed = self._deferred.flush()
        if replayed:
            logger.debug("Replayed %d deferred commands", replayed)

        self._drawn = True
        return self.redraw()

    def redraw(self) -> Idiogram:
        """Recompute geometry for the current viewport and send it to the surface."""
        self._require_drawn("redraw")
        if self.surface is not None:
            self.surface.draw_idiogram(self.layout())
        self._render_highlights()
        if self._redraw_hook is not None:
            self._redraw_hook(self, self.scale)
        return self

    def on_redraw(self, hook: RedrawHook | None) -> Idiogram:
        """Call hook(idiogram, scale) after every full redraw."""
        self._redraw_hook = hook
        return self

    def layout(self) -> IdiogramLayout:
        return compute_layout(self.genome, self.scale, self.config)

    def _render_highlights(self) -> None:
        rects = highlight_rects(self._manager.collection, self.scale, self.config)
        update = self._layer.reconcile(rects)
        if self.surface is not None:
            self.surface.draw_highlights(update)

    def _highlights_changed(self) -> None:
        if self._drawn:
            self._render_highlights()

    # Viewport

    def zoom_to(self, *args: Any, pivot: float | None = None) -> Idiogram:
        """Zoom to a scale factor or to a genomic range.

        ``zoom_to(4)`` zooms to scale 4 about pivot (default: the middle of
        the visible window). Any other arguments are read as a range, with the
        same shapes highlight() accepts, e.g. ``zoom_to("chr2")``,
        ``zoom_to("chr2", 0, 10_000)`` or ``zoom_to(ALL_CHROMOSOMES)``.

        Raises:
            InvalidArguments: For unsupported argument shapes.
            UnknownChromosome, UnknownBand: For ranges naming missing entries.
            NotRendered: Before the first render.
        """
        if len(args) == 1 and is_bp(args[0]):
            self._require_drawn("zoom_to")
            if pivot is None:
                lo, hi = self.scale.domain
                pivot = (lo + hi) / 2
            self.scale.zoom_to(args[0], pivot)
        else:
            if pivot is not None:
                raise InvalidArguments("pivot only applies when zooming to a scale factor")
            spec = parse_range_args(*args)
            self._require_drawn("zoom_to")
            extent = spec.resolve(self.genome)
            self.scale.zoom_to_domain(extent.absolute_start, extent.absolute_end)
        return self.redraw()

    def pan(self, shift_bp: float) -> Idiogram:
        """Shift the view by shift_bp; positive values reveal lower coordinates."""
        if not is_bp(shift_bp):
            raise InvalidArguments(f"pan expects a number of base pairs, got {shift_bp!r}")
        self._require_drawn("pan")
        self.scale.pan_by(shift_bp)
        return self.redraw()

    def resize(self, width: int | None = None, height: int | None = None) -> Idiogram:
        """Change the canvas size, keeping the visible base-pair window."""
        changes = {k: v for k, v in (("width", width), ("height", height)) if v is not None}
        if not changes:
            return self
        self.config = dataclasses.replace(self.config, **changes)
        self.scale.set_range(self.config.plot_width)
        if self._drawn:
            self.redraw()
        return self

    # Highlights

    def highlight(
        self,
        *args: Any,
        color: str | None = None,
        opacity: float | None = None,
        redraw: bool = False,
    ) -> Highlight | None:
        """Highlight a genomic range.

        Arguments take any shape parse_range_args accepts, optionally followed
        by a {"color", "opacity"} mapping. Keyword options win over the
        mapping; anything left unset falls back to the configured defaults.

        Before the first render the highlight is queued and None is returned.
        Afterwards it is created at once and only the highlight layer is
        redrawn, unless redraw is True.

        Raises:
            InvalidArguments: For unsupported argument shapes.
            UnknownChromosome, UnknownBand: For ranges naming missing entries.
        """
        args, options = split_options(args)
        if not args:
            raise InvalidArguments("highlight requires a genomic range")
        spec = parse_range_args(*args)
        color = options.get("color") if color is None else color
        opacity = options.get("opacity") if opacity is None else opacity

        if not self._drawn:
            self._deferred.push(
                f"highlight {spec!r}",
                lambda: self._manager.create(spec, self.genome, color, opacity),
            )
            return None

        created = self._manager.create(spec, self.genome, color, opacity)
        if redraw:
            self.redraw()
        else:
            self._render_highlights()
        return created

    def highlights(self) -> HighlightCollection:
        return self._manager.collection

    def clear_highlights(self) -> int:
        return self._manager.collection.remove_all()

    # Events

    def on(self, channel: str, handler: Handler | None) -> Idiogram:
        """Register handler(position, idiogram, event) for an event channel.

        Raises:
            InvalidArguments: If channel is not a known event channel.
        """
        validate_channel(channel)
        if self._drawn:
            self._events.set_handler(channel, handler)
        else:
            self._deferred.push(
                f"{channel} handler", lambda: self._events.set_handler(channel, handler)
            )
        return self

    def dispatch(self, event: PointerEvent) -> Any:
        """Feed a pointer event through gesture handling and its handler."""
        self._require_drawn("dispatch")
        return self._events.dispatch(event)

    def pointer(self, channel: str, x: float, scale: float | None = None) -> Any:
        return self.dispatch(PointerEvent(channel=channel, x=x, scale=scale))

    # Lookups

    def position_at(self, target: str | float, relative_bp: int | None = None) -> Position:
        """Position at an absolute bp, or at a bp relative to a named chromosome.

        ``position_at(1200)`` resolves a genome-wide coordinate;
        ``position_at("chr2", 200)`` a chromosome-relative one, where a
        missing relative_bp means the chromosome's end.

        Raises:
            InvalidArguments: For unsupported argument shapes.
            UnknownChromosome: For an unknown chromosome name.
            NotRendered: Before the first render.
        """
        if isinstance(target, str):
            if relative_bp is not None and not is_bp(relative_bp):
                raise InvalidArguments(f"relative_bp must be a number, got {relative_bp!r}")
            return resolve_relative(self.genome, target, relative_bp)
        if is_bp(target):
            if relative_bp is not None:
                raise InvalidArguments("relative_bp is only valid with a chromosome name")
            return resolve(target, self.genome)
        raise InvalidArguments(f"position_at expects a base pair or chromosome name, got {target!r}")

    def position_at_pixel(self, x: float) -> Position:
        return resolve_pixel(x, self.scale, self.genome)

    def get(self, chromosome: str, band: str | None = None) -> Chromosome | Band:
        """Look up a chromosome, or one of its bands by name."""
        if band is None:
            return self.genome.chromosome(chromosome)
        return self.genome.band(chromosome, band)


def initialize(
    raw_data: Iterable[Any] | Genome,
    config: IdiogramConfig | None = None,
    surface: RenderingSurface | None = None,
) -> Idiogram:
    """Create an idiogram and render it immediately."""
    return Idiogram(config=config, surface=surface).render(raw_data)
