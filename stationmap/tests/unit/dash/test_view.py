"""
Unit tests for the station map view.

Tests cover:
- Linear radius scale
- Marker entry, resizing and filtering
- Tooltip markup and visibility
- Figure construction
- Zoom clamping
"""

import math

import geopandas as gpd
import pytest

from stationmap.dash.view import (
    MARKER_TRACE,
    OUTLINE_TRACE,
    LinearScale,
    format_count,
    logo_filename,
    strip_band_suffix,
)
from stationmap.models.stations import Metric


class TestLinearScale:
    """Tests for LinearScale."""

    def test_maps_domain_bounds_to_range_bounds(self):
        """Should send the domain endpoints to the range endpoints."""
        scale = LinearScale((50, 90), (2, 36))

        assert scale(50) == 2
        assert scale(90) == 36
        assert scale(70) == pytest.approx(19)

    def test_degenerate_domain(self):
        """Should map every value to the range start when min equals max."""
        scale = LinearScale((5, 5), (2, 36))

        assert scale(5) == 2
        assert scale(100) == 2

    def test_non_numeric(self):
        """Should return NaN for values that are not numbers."""
        scale = LinearScale((0, 1), (2, 36))

        assert math.isnan(scale(None))
        assert math.isnan(scale("abc"))


class TestTooltipHelpers:
    """Tests for the tooltip string helpers."""

    def test_strip_band_suffix(self):
        """Should remove the first band suffix only."""
        assert strip_band_suffix("WAMU-FM") == "WAMU"
        assert strip_band_suffix("KQED-AM") == "KQED"
        assert strip_band_suffix("KUOW") == "KUOW"
        assert strip_band_suffix("WXXI-AM-FM") == "WXXI-FM"

    def test_logo_filename(self):
        """Should lowercase and replace only the first dash."""
        assert logo_filename("WAMU-FM") == "wamu_fm.gif"
        assert logo_filename("WXXI-AM-FM") == "wxxi_am-fm.gif"

    def test_format_count(self):
        """Should print integral counts without a decimal part."""
        assert format_count(7.0) == "7"
        assert format_count(math.nan) == ""


class TestRender:
    """Tests for View.render."""

    def test_markers_entered_at_projected_positions(self, controller):
        """Should place one marker per station at the projection output."""
        view = controller.view
        data = controller.get_data()

        assert len(view.markers) == len(data) == 3
        for marker, station in zip(view.markers, data):
            expected = controller.get_projection()((station.longitude, station.latitude))
            assert (marker.cx, marker.cy) == pytest.approx(expected)

    def test_initial_radius_by_tsr(self, controller):
        """Should size by TSR with the smallest at 2 and the largest at 36."""
        radii = [m.r for m in controller.view.markers]

        assert radii == pytest.approx([2, 36, 19])
        assert controller.view.metric is Metric.TSR

    def test_switch_to_products_and_back(self, controller):
        """Should resize by products, then restore the TSR radii."""
        view = controller.view
        tsr_radii = [m.r for m in view.markers]

        scale = controller.update_bubble_sizes("products")
        assert scale.domain == (3.0, 7.0)
        assert [m.r for m in view.markers] == pytest.approx([2, 36, 27.5])

        controller.update_bubble_sizes("TSR")
        assert [m.r for m in view.markers] == pytest.approx(tsr_radii)

    def test_unrecognized_metric_uses_tsr(self, controller):
        """Should treat an empty metric value as TSR."""
        scale = controller.update_bubble_sizes("")

        assert scale.domain == (50.0, 90.0)

    def test_update_uses_short_transition(self, controller):
        """Should switch to the short bounce transition after the entry."""
        view = controller.view
        controller.update_bubble_sizes("products")

        assert view.transition.duration == 200
        assert view.transition.easing == "bounce-in"

    def test_render_without_data(self, controller):
        """Should skip rendering while no data is loaded."""
        controller.data = None

        assert controller.view.render(Metric.TSR) is None


class TestFilter:
    """Tests for View.filter and View.reset_filter."""

    def test_filter_hides_non_members(self, controller):
        """Should hide stations whose category flag is zero."""
        hidden = controller.view.filter("Core Publisher")

        assert hidden == 1
        assert [m.hidden for m in controller.view.markers] == [True, False, False]

    def test_reset_filter(self, controller):
        """Should show every marker again."""
        controller.view.filter("Composer Pro")
        controller.view.reset_filter()

        assert not any(m.hidden for m in controller.view.markers)

    def test_hidden_markers_are_transparent(self, controller):
        """Should draw hidden markers with zero opacity."""
        controller.view.filter("Springboard Donation Forms")

        assert controller.view.marker_style()["opacity"] == [0.0, 1.0, 0.0]


class TestTooltip:
    """Tests for the tooltip state."""

    def test_markup(self, controller):
        """Should fill the template with name, product count and logo."""
        markup = controller.view.get_tooltip_markup(controller.get_data()[1])

        assert markup == (
            "<h3>KQED</h3><h5>Uses 7 DS products</h5>"
            "<img src='http://media.npr.org/images/stations/logos/kqed_fm.gif'>"
        )

    def test_show_tooltip_marks_marker_active(self, controller):
        """Should show the tooltip above the pointer and highlight the marker."""
        tooltip = controller.view.show_tooltip(1, 100.0, 200.0)

        assert tooltip.visible
        assert tooltip.opacity == 0.9
        assert (tooltip.left, tooltip.top) == (100.0, 172.0)
        assert [m.active for m in controller.view.markers] == [False, True, False]

    def test_hidden_marker_has_no_tooltip(self, controller):
        """Should not show a tooltip for a filtered-out station."""
        controller.view.filter("Core Publisher")

        assert controller.view.show_tooltip(0, 10.0, 10.0) is None

    def test_hide_tooltip(self, controller):
        """Should fade the tooltip out and clear the active marker."""
        controller.view.show_tooltip(2, 10.0, 10.0)

        tooltip = controller.view.hide_tooltip()

        assert not tooltip.visible
        assert not any(m.active for m in controller.view.markers)


class TestFigure:
    """Tests for View.figure."""

    def test_enter_frame_then_sized_frame(self, controller):
        """Should draw zero radii once after entry, then the real diameters."""
        view = controller.view
        assert view.has_pending_frames

        first = view.figure()
        assert list(first.data[MARKER_TRACE].marker.size) == [0, 0, 0]
        assert not view.has_pending_frames

        second = view.figure()
        assert list(second.data[MARKER_TRACE].marker.size) == pytest.approx([4, 72, 38])

    def test_mark_entered_skips_zero_frame(self, controller):
        """Should draw the real diameters once the entry is marked done."""
        view = controller.view
        view.mark_entered()

        fig = view.figure()

        assert not view.has_pending_frames
        assert list(fig.data[MARKER_TRACE].marker.size) == pytest.approx([4, 72, 38])

    def test_outline_and_layout(self, controller):
        """Should draw the outline trace and lay the figure out in pixels."""
        fig = controller.view.figure()

        assert fig.data[OUTLINE_TRACE].mode == "lines"
        assert None in fig.data[OUTLINE_TRACE].x
        assert fig.layout.width == 1200
        assert list(fig.layout.yaxis.range) == [900, 0]
        assert fig.layout.transition.duration == 1250

    def test_outline_rendered_once(self, controller):
        """Should ignore a second outline render."""
        outline = controller.view.outline

        controller.view.render_map(gpd.GeoDataFrame(geometry=[]), None)

        assert controller.view.outline is outline


class TestClampViewport:
    """Tests for View.clamp_viewport."""

    def test_ignores_unrelated_events(self, controller):
        """Should do nothing for events without axis ranges."""
        assert controller.view.clamp_viewport(None) is None
        assert controller.view.clamp_viewport({"dragmode": "zoom"}) is None

    def test_accepts_zoom_within_extent(self, controller):
        """Should record a viewport with a scale between 1 and 10."""
        relayout = {
            "xaxis.range[0]": 300,
            "xaxis.range[1]": 900,
            "yaxis.range[0]": 675,
            "yaxis.range[1]": 225,
        }

        assert controller.view.clamp_viewport(relayout) is None
        assert controller.view.viewport.x == [300.0, 900.0]

    def test_clamps_zoom_in(self, controller):
        """Should widen a viewport zoomed in beyond the maximum scale."""
        relayout = {
            "xaxis.range[0]": 590,
            "xaxis.range[1]": 610,
            "yaxis.range[0]": 460,
            "yaxis.range[1]": 440,
        }

        viewport = controller.view.clamp_viewport(relayout)

        assert viewport.x == pytest.approx([540, 660])
        assert viewport.y == pytest.approx([495, 405])

    def test_clamps_zoom_out(self, controller):
        """Should shrink a viewport zoomed out beyond the full canvas."""
        relayout = {"xaxis.range": [-600, 1800], "yaxis.range": [1350, -450]}

        viewport = controller.view.clamp_viewport(relayout)

        assert viewport.x == pytest.approx([0, 1200])
        assert viewport.y == pytest.approx([900, 0])

    def test_autorange_resets(self, controller):
        """Should restore the full canvas on a reset."""
        viewport = controller.view.clamp_viewport({"xaxis.autorange": True})

        assert viewport.x == [0.0, 1200.0]
        assert viewport.y == [900.0, 0.0]
