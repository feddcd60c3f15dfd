"""
Station map view.

Owns the canvas state: the state outline layer, one marker per station bound
by array position, the tooltip, the hidden/active marker flags and the zoom
viewport. ``figure()`` turns that state into a Plotly figure laid out in pixel
space, so a marker centre is exactly the projection output.
"""

import math
import re
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import geopandas as gpd
import plotly.graph_objects as go

from stationmap.configs.logging_init import logger
from stationmap.configs.settings_models import CanvasConfig
from stationmap.dash.projection import AlbersUsaProjection, GeoPath
from stationmap.models.stations import Metric, Station

if TYPE_CHECKING:
    from stationmap.dash.controller import Controller

OUTLINE_TRACE = 0
MARKER_TRACE = 1

TOOLTIP_TEMPLATE = "<h3>title</h3><h5>Uses numProducts DS products</h5><img src='imgsrc'>"
TOOLTIP_PLACEHOLDERS = re.compile(r"title|numProducts|imgsrc")
TOOLTIP_TOP_OFFSET = 28

ENTER_EASING = "cubic-in-out"
UPDATE_EASING = "bounce-in"


class LinearScale:
    """Linear map from a numeric domain to a numeric range.

    A degenerate domain maps every value to the start of the range; values
    that are not numbers map to NaN.
    """

    def __init__(self, domain: tuple[float, float], range_: tuple[float, float]):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    def __call__(self, value: Any) -> float:
        try:
            x = float(value)
        except (TypeError, ValueError):
            return math.nan
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        t = (x - d0) / span if span else 0.0
        return r0 + t * (r1 - r0)

    def __repr__(self) -> str:
        return f"LinearScale(domain={self.domain}, range={self.range})"


@dataclass
class Marker:
    index: int
    cx: float | None
    cy: float | None
    r: float = 0.0
    hidden: bool = False
    active: bool = False

    @property
    def diameter(self) -> float:
        return 0.0 if math.isnan(self.r) else 2 * self.r


@dataclass(frozen=True)
class Transition:
    duration: int
    easing: str


@dataclass
class Tooltip:
    opacity: float = 0.0
    markup: str = ""
    left: float = 0.0
    top: float = 0.0
    duration: int = 0

    @property
    def visible(self) -> bool:
        return self.opacity > 0


@dataclass
class Viewport:
    x: list[float] = field(default_factory=list)
    y: list[float] = field(default_factory=list)


def strip_band_suffix(name: str) -> str:
    """Drop the first "-FM" or "-AM" from a call sign."""
    positions = [p for p in (name.find("-FM"), name.find("-AM")) if p >= 0]
    if not positions:
        return name
    position = min(positions)
    return name[:position] + name[position + 3 :]


def logo_filename(name: str) -> str:
    return name.lower().replace("-", "_", 1) + ".gif"


def format_count(value: float) -> str:
    if math.isnan(value):
        return ""
    return f"{value:g}"


class View:
    """Marker and outline rendering for the station map."""

    def __init__(
        self,
        controller: "Controller",
        canvas: CanvasConfig | None = None,
        logo_base_url: str = "http://media.npr.org/images/stations/logos/",
    ):
        self.controller = controller
        self.canvas = canvas or CanvasConfig()
        self.logo_base_url = logo_base_url

        self.tooltip: Tooltip | None = None
        self.projection: AlbersUsaProjection | None = None
        self.viewport: Viewport | None = None
        self.outline: tuple[list[float | None], list[float | None]] | None = None
        self.markers: list[Marker] = []
        self.scale: LinearScale | None = None
        self.metric: Metric | None = None
        self.transition: Transition | None = None
        self._pending_enter = False
        self._lock = threading.RLock()

    def init(self) -> None:
        """Create the tooltip and the zoomable canvas, cache the projection."""
        self.tooltip = Tooltip()
        self.viewport = self.full_viewport()
        self.projection = self.controller.get_projection()
        logger.debug(f"View initialized with a {self.canvas.width}x{self.canvas.height} canvas")

    def full_viewport(self) -> Viewport:
        return Viewport(x=[0.0, float(self.canvas.width)], y=[float(self.canvas.height), 0.0])

    def get_tooltip_markup(self, station: Station) -> str:
        replacements = {
            "title": strip_band_suffix(station.name),
            "imgsrc": self.logo_base_url + logo_filename(station.name),
            "numProducts": format_count(station.total_products),
        }
        return TOOLTIP_PLACEHOLDERS.sub(lambda m: replacements[m.group(0)], TOOLTIP_TEMPLATE)

    def render_map(self, states: gpd.GeoDataFrame, path: GeoPath) -> None:
        """Draw the state outlines; only the first call has an effect."""
        with self._lock:
            if self.outline is not None:
                return
            self.outline = path.to_xy(states.geometry)
        logger.info(f"Rendered {len(states)} state outlines")

    def render(self, metric: Metric | str | None = None) -> LinearScale | None:
        """Size the markers by a metric, entering them on the first call."""
        data = self.controller.get_data()
        if data is None:
            logger.warning("No station data loaded yet, skipping render")
            return None

        metric = Metric.resolve(metric)
        column = metric.column
        scale = LinearScale(data.extent(column), self.canvas.radius_range)

        with self._lock:
            entering = len(self.markers) == 0
            for index, station in enumerate(data):
                radius = scale(station.value(column))
                if index < len(self.markers):
                    marker = self.markers[index]
                    marker.r = radius
                else:
                    point = self.projection((station.longitude, station.latitude))
                    cx, cy = point if point is not None else (None, None)
                    self.markers.append(Marker(index=index, cx=cx, cy=cy, r=radius))

            if entering:
                self._pending_enter = True
                self.transition = Transition(self.canvas.enter_duration, ENTER_EASING)
            else:
                self.transition = Transition(self.canvas.update_duration, UPDATE_EASING)
            self.scale = scale
            self.metric = metric

        logger.debug(f"Rendered {len(self.markers)} markers by {column}: {scale}")
        return scale

    def filter(self, category_label: str) -> int:
        """Hide the markers whose station is not a member of the category."""
        data = self.controller.get_data()
        if data is None:
            return 0
        hidden = 0
        with self._lock:
            for marker, station in zip(self.markers, data):
                if station.value(category_label) == 0:
                    marker.hidden = True
                    hidden += 1
        logger.debug(f"Filter '{category_label}' hid {hidden} markers")
        return hidden

    def reset_filter(self) -> None:
        with self._lock:
            for marker in self.markers:
                marker.hidden = False

    def show_tooltip(self, index: int, left: float, top: float) -> Tooltip | None:
        data = self.controller.get_data()
        if data is None or not 0 <= index < len(self.markers):
            return None
        with self._lock:
            marker = self.markers[index]
            if marker.hidden:
                return None
            for other in self.markers:
                other.active = False
            marker.active = True
            self.tooltip = Tooltip(
                opacity=self.canvas.tooltip_opacity,
                markup=self.get_tooltip_markup(data[index]),
                left=left,
                top=top - TOOLTIP_TOP_OFFSET,
                duration=self.canvas.tooltip_duration,
            )
            return self.tooltip

    def hide_tooltip(self) -> Tooltip:
        with self._lock:
            for marker in self.markers:
                marker.active = False
            self.tooltip = Tooltip(
                opacity=0.0,
                markup=self.tooltip.markup if self.tooltip else "",
                duration=self.canvas.tooltip_duration,
            )
            return self.tooltip

    @property
    def has_pending_frames(self) -> bool:
        return self._pending_enter

    def mark_entered(self) -> None:
        """Skip the zero-radius entering frame; markers are already on screen."""
        with self._lock:
            self._pending_enter = False

    def marker_style(self) -> dict[str, list]:
        """Per-marker Plotly styling arrays (size, opacity, outline width)."""
        with self._lock:
            return {
                "size": [m.diameter for m in self.markers],
                "opacity": [0.0 if m.hidden else 1.0 for m in self.markers],
                "line_width": [2 if m.active else 0 for m in self.markers],
            }

    def figure(self) -> go.Figure:
        """Build the Plotly figure for the current canvas state.

        Right after the markers entered, the first figure draws them with a
        zero radius so that the next one animates them to their size.
        """
        with self._lock:
            entering_frame = self._pending_enter
            self._pending_enter = False
            style = self.marker_style()
            if entering_frame:
                style["size"] = [0.0] * len(self.markers)
            transition = self.transition or Transition(0, ENTER_EASING)
            viewport = self.viewport or self.full_viewport()
            outline_x, outline_y = self.outline or ([], [])

            fig = go.Figure()
            fig.add_trace(
                go.Scatter(
                    x=outline_x,
                    y=outline_y,
                    mode="lines",
                    line={"color": "#9aa5b1", "width": 1},
                    hoverinfo="skip",
                    name="states",
                )
            )
            fig.add_trace(
                go.Scatter(
                    x=[m.cx for m in self.markers],
                    y=[m.cy for m in self.markers],
                    mode="markers",
                    customdata=[m.index for m in self.markers],
                    marker={
                        "size": style["size"],
                        "sizemode": "diameter",
                        "color": self.canvas.marker_color,
                        "opacity": style["opacity"],
                        "line": {"width": style["line_width"], "color": "#1f2d3d"},
                    },
                    hoverinfo="none",
                    name="stations",
                )
            )

        fig.update_layout(
            width=self.canvas.width,
            height=self.canvas.height,
            margin={"l": 0, "r": 0, "t": 0, "b": 0},
            paper_bgcolor="rgba(0,0,0,0)",
            plot_bgcolor="rgba(0,0,0,0)",
            showlegend=False,
            dragmode="pan",
            hovermode="closest",
            uirevision="preserve",
            transition={"duration": transition.duration, "easing": transition.easing},
        )
        fig.update_xaxes(range=list(viewport.x), visible=False)
        fig.update_yaxes(range=list(viewport.y), visible=False, scaleanchor="x", scaleratio=1)
        return fig

    def clamp_viewport(self, relayout: dict | None) -> Viewport | None:
        """Keep the zoom scale within the configured extent.

        Records the viewport reported by a relayout event and returns the
        corrected viewport when the zoom went out of bounds, None otherwise.
        """
        if not relayout:
            return None
        full = self.full_viewport()
        if relayout.get("xaxis.autorange") or relayout.get("yaxis.autorange"):
            self.viewport = full
            return full

        x = _axis_range(relayout, "xaxis")
        if x is None:
            return None
        y = _axis_range(relayout, "yaxis")
        current = self.viewport or full
        if y is None:
            y_center = (current.y[0] + current.y[1]) / 2
            y_half = abs(x[1] - x[0]) * self.canvas.height / self.canvas.width / 2
            y = [y_center + y_half, y_center - y_half]

        min_scale, max_scale = self.canvas.zoom_extent
        x_span = abs(x[1] - x[0])
        scale = self.canvas.width / x_span if x_span else max_scale + 1

        if scale < min_scale:
            corrected = _rescale(x, y, self.canvas.width / min_scale, self.canvas.height / min_scale)
        elif scale > max_scale:
            corrected = _rescale(x, y, self.canvas.width / max_scale, self.canvas.height / max_scale)
        else:
            self.viewport = Viewport(x=x, y=y)
            return None

        self.viewport = corrected
        return corrected


def _axis_range(relayout: dict, axis: str) -> list[float] | None:
    if f"{axis}.range" in relayout:
        low, high = relayout[f"{axis}.range"]
        return [float(low), float(high)]
    if f"{axis}.range[0]" in relayout and f"{axis}.range[1]" in relayout:
        return [float(relayout[f"{axis}.range[0]"]), float(relayout[f"{axis}.range[1]"])]
    return None


def _rescale(x: list[float], y: list[float], x_span: float, y_span: float) -> Viewport:
    """Resize both ranges around their centres, keeping their direction."""

    def resize(bounds: list[float], span: float) -> list[float]:
        center = (bounds[0] + bounds[1]) / 2
        direction = 1 if bounds[1] >= bounds[0] else -1
        return [center - direction * span / 2, center + direction * span / 2]

    return Viewport(x=resize(x, x_span), y=resize(y, y_span))
