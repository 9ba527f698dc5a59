"""Unit tests for the Idiogram engine."""

import json
import math

import pytest

from idiogram import ALL_CHROMOSOMES, Idiogram, IdiogramConfig, initialize
from idiogram.core.cache import GenomeCache, get_genome_cache
from idiogram.core.serialization import serialize_highlight_update, serialize_layout
from idiogram.errors import (
    InvalidArguments,
    MalformedInput,
    NotRendered,
    UnknownBand,
    UnknownChromosome,
)
from idiogram.surface import RecordingSurface, RenderingSurface


class TestRender:
    """Tests for rendering and initialization."""

    @pytest.mark.unit
    def test_initialize_renders(self, rows):
        """initialize should build, draw, and show the whole genome."""
        surface = RecordingSurface()
        idiogram = initialize(rows, surface=surface)
        assert idiogram.drawn
        assert len(surface.layouts) == 1
        assert len(surface.updates) == 1
        assert idiogram.scale.domain == (0.0, 1800.0)
        assert idiogram.scale.range == (0.0, 760.0)

    @pytest.mark.unit
    def test_recording_surface_satisfies_protocol(self, surface):
        assert isinstance(surface, RenderingSurface)

    @pytest.mark.unit
    def test_render_without_surface(self, rows):
        """An idiogram with no surface still tracks highlights."""
        idiogram = Idiogram(genome_cache=GenomeCache()).render(rows)
        assert idiogram.highlight("chr1") is not None

    @pytest.mark.unit
    def test_malformed_data_fails_render(self, idiogram):
        """Malformed band data should raise and leave the idiogram undrawn."""
        with pytest.raises(MalformedInput):
            idiogram.render([("chr1", 10, 5, "p1", "gneg")])
        assert not idiogram.drawn

    @pytest.mark.unit
    def test_genome_before_render(self, idiogram):
        """Accessing the genome before render should raise NotRendered."""
        with pytest.raises(NotRendered):
            idiogram.genome  # noqa: B018

    @pytest.mark.unit
    def test_repeated_render_uses_cache(self, rows):
        """Two idiograms sharing a cache should build the genome once."""
        cache = GenomeCache()
        first = Idiogram(genome_cache=cache).render(rows)
        second = Idiogram(genome_cache=cache).render(list(rows))
        assert first.genome is second.genome
        assert cache.hits == 1
        assert cache.misses == 1

    @pytest.mark.unit
    def test_rerender_with_new_data_clears_highlights(self, rendered, surface):
        """Rendering different data should drop existing highlights."""
        rendered.highlight("chr1")
        rendered.render([("chr3", 0, 500, "p1", "gneg")])
        assert len(rendered.highlights()) == 0
        assert surface.visuals == {}
        assert rendered.genome.names == ["chr3"]

    @pytest.mark.unit
    def test_rerender_same_data_keeps_highlights(self, rendered, rows):
        """Rendering the same data should keep highlights and reset the view."""
        rendered.highlight("chr1")
        rendered.zoom_to(3)
        rendered.render(rows)
        assert len(rendered.highlights()) == 1
        assert rendered.scale.domain == (0.0, 1800.0)

    @pytest.mark.unit
    def test_redraw_hook(self, rendered):
        """The redraw hook should run after each full redraw."""
        calls = []
        rendered.on_redraw(lambda engine, scale: calls.append(scale.domain))
        rendered.pan(100)
        assert calls == [(-100.0, 1700.0)]


class TestGenomeCacheSelection:
    """Tests for which genome cache an idiogram uses."""

    @pytest.mark.unit
    def test_injected_empty_cache_is_kept(self):
        """An injected cache should be used even while it is empty."""
        cache = GenomeCache()
        assert len(cache) == 0
        assert Idiogram(genome_cache=cache)._genome_cache is cache

    @pytest.mark.unit
    def test_default_uses_process_wide_cache(self):
        """Without an injected cache the shared cache should be used."""
        assert Idiogram()._genome_cache is get_genome_cache()

    @pytest.mark.unit
    def test_configured_size_differs_from_shared(self, rows):
        """A different configured cache size should get a private cache."""
        initialize(rows)
        idiogram = Idiogram(config=IdiogramConfig(genome_cache_size=0))
        assert idiogram._genome_cache is not get_genome_cache()
        assert idiogram._genome_cache.maxsize == 0

    @pytest.mark.unit
    def test_zero_size_disables_caching(self, rows):
        """With genome_cache_size=0 each render builds a fresh genome."""
        config = IdiogramConfig(genome_cache_size=0)
        idiogram = Idiogram(config=config).render(rows)
        first = idiogram.genome
        other = Idiogram(config=config).render(rows)
        assert other.genome is not first
        assert other.genome == first


class TestDeferredHighlights:
    """Tests for highlights requested before the first render."""

    @pytest.mark.unit
    def test_deferred_until_render(self, idiogram, rows):
        """Highlights requested early should be created, in order, at render."""
        assert idiogram.highlight("chr2") is None
        assert idiogram.highlight("chr1", 100, 200, color="red") is None
        assert len(idiogram.highlights()) == 0

        idiogram.render(rows)

        keys = [h.key for h in idiogram.highlights()]
        assert keys == ["chr2:1000-chr2:1800", "chr1:100-chr1:200"]
        assert idiogram.highlights()[1].color == "red"

    @pytest.mark.unit
    def test_deferred_highlights_and_handlers_share_order(self, idiogram, rows):
        """Queued highlights exist before the first redraw hook runs."""
        order = []
        idiogram.on("click", lambda *a: None)
        idiogram.highlight("chr1")
        idiogram.on_redraw(lambda engine, scale: order.append(len(engine.highlights())))
        idiogram.render(rows)
        assert order == [1]

    @pytest.mark.unit
    def test_replayed_exactly_once(self, idiogram, rows):
        """A queued highlight should not be replayed by a second render."""
        idiogram.highlight("chr1")
        idiogram.render(rows)
        idiogram.render(rows)
        assert len(idiogram.highlights()) == 1

    @pytest.mark.unit
    def test_invalid_arguments_raised_before_deferral(self, idiogram):
        """Bad argument shapes should fail at once, not at render."""
        with pytest.raises(InvalidArguments):
            idiogram.highlight(1, 2, 3)
        assert idiogram.pending == 0

    @pytest.mark.unit
    def test_lookup_errors_surface_at_render(self, idiogram, rows):
        """Unknown chromosomes in queued highlights should raise from render."""
        idiogram.highlight("chr9")
        with pytest.raises(UnknownChromosome):
            idiogram.render(rows)
        assert len(idiogram.highlights()) == 0


class TestHighlights:
    """Tests for highlights on a rendered idiogram."""

    @pytest.mark.unit
    def test_scenario_defaults(self, rendered):
        """A cross-form chromosome range should use the default style."""
        highlight = rendered.highlight("chr1", 100, "chr1", 200)
        assert (highlight.absolute_start, highlight.absolute_end) == (100, 200)
        assert highlight.color == "yellow"
        assert highlight.opacity == 0.2

    @pytest.mark.unit
    def test_options_mapping(self, rendered):
        """A trailing options mapping should override only what it names."""
        highlight = rendered.highlight(100, 300, {"opacity": 0.9})
        assert highlight.color == "yellow"
        assert highlight.opacity == 0.9

    @pytest.mark.unit
    def test_keyword_beats_mapping(self, rendered):
        highlight = rendered.highlight("chr2", {"color": "blue"}, color="green")
        assert highlight.color == "green"

    @pytest.mark.unit
    def test_configured_defaults(self, rows):
        """Highlight defaults should come from the config."""
        config = IdiogramConfig(highlight_color="#ff0000", highlight_opacity=0.5)
        idiogram = Idiogram(config=config, genome_cache=GenomeCache()).render(rows)
        highlight = idiogram.highlight("chr1")
        assert (highlight.color, highlight.opacity) == ("#ff0000", 0.5)

    @pytest.mark.unit
    def test_band_highlight(self, rendered):
        """A (chromosome, band) pair should cover the band."""
        highlight = rendered.highlight("chr1", "q12")
        assert (highlight.absolute_start, highlight.absolute_end) == (600, 1000)

    @pytest.mark.unit
    def test_position_highlight(self, rendered):
        """Two Positions should span across chromosomes."""
        start = rendered.position_at("chr1", 950)
        end = rendered.position_at(1100)
        highlight = rendered.highlight(start, end)
        assert highlight.key == "chr1:950-chr2:1100"

    @pytest.mark.unit
    def test_failed_highlight_not_added(self, rendered, surface):
        """A failed lookup should leave highlights and the surface untouched."""
        updates = len(surface.updates)
        with pytest.raises(UnknownBand):
            rendered.highlight("chr1", "p99")
        assert len(rendered.highlights()) == 0
        assert len(surface.updates) == updates

    @pytest.mark.unit
    def test_no_arguments(self, rendered):
        with pytest.raises(InvalidArguments):
            rendered.highlight()

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "args",
        [
            (math.nan, 5),
            (5, math.inf),
            ("chr1", math.nan, 10),
            ({"chromosome": "chr1", "basePair": math.nan}, {"chromosome": "chr2"}),
        ],
    )
    def test_non_finite_endpoints_rejected(self, rendered, args):
        """NaN or infinite endpoints should raise InvalidArguments."""
        with pytest.raises(InvalidArguments):
            rendered.highlight(*args)
        assert len(rendered.highlights()) == 0

    @pytest.mark.unit
    def test_adding_redraws_highlight_layer_only(self, rendered, surface):
        """Adding a highlight should not redraw the idiogram."""
        layouts = len(surface.layouts)
        rendered.highlight("chr1")
        assert len(surface.layouts) == layouts
        assert [r.key for r in surface.updates[-1].entered] == ["chr1:0-chr1:1000"]

    @pytest.mark.unit
    def test_full_redraw_flag(self, rendered, surface):
        """redraw=True should also redraw the idiogram."""
        layouts = len(surface.layouts)
        rendered.highlight("chr1", redraw=True)
        assert len(surface.layouts) == layouts + 1

    @pytest.mark.unit
    def test_remove_retires_visual(self, rendered, surface):
        """Removing a highlight should retire its visual."""
        highlight = rendered.highlight("chr2")
        highlight.remove()
        assert surface.updates[-1].exited == ["chr2:1000-chr2:1800"]
        assert surface.visuals == {}

    @pytest.mark.unit
    def test_same_range_highlights_each_drawn(self, rendered, surface):
        """Two highlights over one range should both reach the surface."""
        first = rendered.highlight("chr1", 100, 200, color="red")
        rendered.highlight("chr1", 100, 200, color="blue")

        assert sorted(r.color for r in surface.visuals.values()) == ["blue", "red"]
        assert surface.created == 2

        first.remove()
        assert [r.color for r in surface.visuals.values()] == ["blue"]

    @pytest.mark.unit
    def test_zoom_updates_without_recreating(self, rendered, surface):
        """Zoom and pan should update visuals rather than recreate them."""
        rendered.highlight("chr2")
        rendered.zoom_to(2, pivot=1400)
        rendered.pan(50)
        assert surface.created == 1
        rect = surface.visuals["chr2:1000-chr2:1800"]
        assert rect.x == pytest.approx(rendered.scale.to_pixel(1000))
        assert rect.width == pytest.approx(rendered.scale.span_to_pixels(800))

    @pytest.mark.unit
    def test_clear_highlights(self, rendered, surface):
        """clear_highlights should count only highlights still present."""
        for name in ("chr1", "chr2"):
            rendered.highlight(name)
        rendered.highlights()[0].remove()
        assert rendered.clear_highlights() == 1
        assert len(rendered.highlights()) == 0
        assert surface.visuals == {}

    @pytest.mark.unit
    def test_highlight_rect_geometry(self, rendered, surface):
        """Highlight rectangles should be centered on the idiogram bar."""
        rendered.highlight("chr1", 0, 500)
        rect = surface.visuals["chr1:0-chr1:500"]
        assert rect.x == 0
        assert rect.width == pytest.approx(500 * 760 / 1800)
        assert rect.y == pytest.approx(-7)
        assert rect.height == 21


class TestViewport:
    """Tests for zoom_to, pan, and resize."""

    @pytest.mark.unit
    def test_inverse_zoom(self, rendered):
        """Zooming in then back to 1 about one pivot should restore the view."""
        rendered.zoom_to(2, pivot=500)
        rendered.zoom_to(1, pivot=500)
        assert rendered.scale.domain == (0.0, 1800.0)

    @pytest.mark.unit
    def test_zoom_defaults_to_center(self, rendered):
        """Without a pivot, zoom should hold the view center."""
        rendered.zoom_to(2)
        assert rendered.scale.domain == (450.0, 1350.0)

    @pytest.mark.unit
    def test_zoom_to_chromosome(self, rendered, surface):
        """Zooming to a chromosome name should fit that chromosome."""
        rendered.zoom_to("chr2")
        assert rendered.scale.domain == (1000.0, 1800.0)
        assert surface.last_layout.domain == (1000.0, 1800.0)

    @pytest.mark.unit
    def test_zoom_to_range_then_reset(self, rendered):
        """ALL_CHROMOSOMES should restore the full view at scale 1."""
        rendered.zoom_to("chr1", 100, 200)
        assert rendered.scale.domain == (100.0, 200.0)
        rendered.zoom_to(ALL_CHROMOSOMES)
        assert rendered.scale.domain == (0.0, 1800.0)
        assert rendered.scale.current_scale == 1

    @pytest.mark.unit
    def test_zoom_to_tiny_range_then_back(self, rendered):
        """A window past max_scale should still zoom back to the full view."""
        rendered.zoom_to("chr1", 0, 1)
        assert rendered.scale.current_scale == 1000
        assert rendered.scale.span_to_pixels(1.8) == pytest.approx(760)

        rendered.zoom_to(1, pivot=0.5)
        lo, hi = rendered.scale.domain
        assert hi - lo == pytest.approx(1800)

    @pytest.mark.unit
    def test_zoom_pivot_with_range(self, rendered):
        """pivot only applies to scale-factor zooms."""
        with pytest.raises(InvalidArguments):
            rendered.zoom_to("chr2", pivot=10)

    @pytest.mark.unit
    def test_zoom_unknown_chromosome(self, rendered):
        """An unknown chromosome should raise and leave the view alone."""
        with pytest.raises(UnknownChromosome):
            rendered.zoom_to("chr12")
        assert rendered.scale.domain == (0.0, 1800.0)

    @pytest.mark.unit
    def test_zoom_before_render(self, idiogram):
        with pytest.raises(NotRendered):
            idiogram.zoom_to(2)

    @pytest.mark.unit
    def test_pan(self, rendered, surface):
        """Opposite pans should cancel, each with a redraw."""
        layouts = len(surface.layouts)
        rendered.pan(300)
        rendered.pan(-300)
        assert rendered.scale.domain == (0.0, 1800.0)
        assert len(surface.layouts) == layouts + 2

    @pytest.mark.unit
    @pytest.mark.parametrize("shift", ["left", math.nan, math.inf])
    def test_pan_invalid(self, rendered, shift):
        """pan should reject anything that is not a finite number."""
        with pytest.raises(InvalidArguments):
            rendered.pan(shift)
        assert rendered.scale.domain == (0.0, 1800.0)

    @pytest.mark.unit
    def test_resize(self, rendered, surface):
        """Resizing should keep the visible window and redraw."""
        rendered.zoom_to("chr2")
        rendered.resize(width=420)
        assert rendered.scale.domain == (1000.0, 1800.0)
        assert rendered.scale.range == (0.0, 380.0)
        assert surface.last_layout.width == 420

    @pytest.mark.unit
    def test_resize_validates(self, rendered):
        """A width smaller than the margins should be rejected."""
        with pytest.raises(ValueError):
            rendered.resize(width=30)


class TestLookups:
    """Tests for position_at and get."""

    @pytest.mark.unit
    def test_absolute(self, rendered):
        """Absolute lookups should resolve to the owning chromosome."""
        assert rendered.position_at(500).chromosome.name == "chr1"
        assert rendered.position_at(1200).relative_bp == 200
        assert rendered.position_at(1800).chromosome is None

    @pytest.mark.unit
    def test_relative(self, rendered):
        """Relative lookups should offset by the chromosome start."""
        assert rendered.position_at("chr2", 200).absolute_bp == 1200
        assert rendered.position_at("chr2").absolute_bp == 1800

    @pytest.mark.unit
    def test_relative_unknown(self, rendered):
        with pytest.raises(UnknownChromosome):
            rendered.position_at("chrX", 1)

    @pytest.mark.unit
    @pytest.mark.parametrize("args", [(1200, 5), (None,), ([1],), ("chr1", "5"), (math.nan,)])
    def test_invalid_arguments(self, rendered, args):
        """Unsupported argument shapes should raise InvalidArguments."""
        with pytest.raises(InvalidArguments):
            rendered.position_at(*args)

    @pytest.mark.unit
    def test_position_before_render(self, idiogram):
        with pytest.raises(NotRendered):
            idiogram.position_at(10)

    @pytest.mark.unit
    def test_get(self, rendered):
        """get should return chromosomes and bands by name."""
        assert rendered.get("chr1").total_bases == 1000
        assert rendered.get("chr1", "p11").stain == "acen"
        with pytest.raises(UnknownBand):
            rendered.get("chr1", "q99")


class TestIsolation:
    """Tests that separate idiograms share no mutable state."""

    @pytest.mark.unit
    def test_independent_instances(self, rows):
        """Idiograms share the genome but not viewport, highlights or handlers."""
        a = initialize(rows)
        b = initialize(rows)
        assert a.genome is b.genome

        a.zoom_to(4)
        a.highlight("chr1")
        a.on("click", lambda *args: "a")

        assert b.scale.domain == (0.0, 1800.0)
        assert len(b.highlights()) == 0
        assert b.pointer("click", 10) is None


class TestSerialization:
    """Tests for JSON serialization of surface updates."""

    @pytest.mark.unit
    def test_layout_is_json_compatible(self, rendered):
        """Serialized layouts should survive a JSON round trip."""
        data = serialize_layout(rendered.layout())
        encoded = json.loads(json.dumps(data))
        assert encoded["domain"] == [0.0, 1800.0]
        assert [c["name"] for c in encoded["chromosomes"]] == ["chr1", "chr2"]

    @pytest.mark.unit
    def test_layout_rounding(self, rendered):
        """Floats should be rounded to the requested precision."""
        data = serialize_layout(rendered.layout(), precision=1)
        chr2 = data["chromosomes"][1]
        assert chr2["offset"] == 422.2

    @pytest.mark.unit
    def test_highlight_update(self, rendered, surface):
        """Highlight updates should serialize entered rectangles."""
        rendered.highlight("chr1", 0, 500)
        data = serialize_highlight_update(surface.updates[-1])
        assert data["entered"][0]["key"] == "chr1:0-chr1:500"
        assert data["entered"][0]["width"] == 211.11
        assert data["exited"] == []
