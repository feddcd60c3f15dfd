"""
Callback registration for the station map.

Every UI signal is forwarded to a per-session Controller (metric switch,
filter switch) or its View (hover, zoom). The session selections live in a
dcc.Store; the loaded dataset, projection and outline are shared.
"""

from typing import Any

import bleach
import dash
import plotly.graph_objects as go
from dash import ALL, Input, Output, Patch, State, ctx, dcc

from stationmap.configs.logging_init import logger
from stationmap.dash.controller import Controller
from stationmap.dash.layouts.app_layout import (
    FILTER_BUTTON_TYPE,
    GRAPH_ID,
    METRIC_SELECTOR_ID,
    POLL_INTERVAL_ID,
    STATE_STORE_ID,
    TOOLTIP_ID,
)
from stationmap.dash.model import MapState
from stationmap.dash.view import MARKER_TRACE

TOOLTIP_TAGS = {"h3", "h5", "img"}
TOOLTIP_ATTRIBUTES = {"img": ["src"]}


def sanitize_markup(markup: str) -> str:
    """Keep only the tags the tooltip template produces."""
    return bleach.clean(markup, tags=TOOLTIP_TAGS, attributes=TOOLTIP_ATTRIBUTES, strip=True)


def _hovered_marker_index(hover_data: dict[str, Any] | None) -> int | None:
    if not hover_data or not hover_data.get("points"):
        return None
    point = hover_data["points"][0]
    if point.get("curveNumber") != MARKER_TRACE:
        return None
    customdata = point.get("customdata")
    if isinstance(customdata, list):
        customdata = customdata[0] if customdata else None
    if customdata is None:
        return None
    return int(customdata)


def tooltip_from_hover(controller: Controller, hover_data: dict[str, Any] | None) -> dict[str, Any]:
    """Show the tooltip for a hovered marker, hide it for anything else.

    Returns the dcc.Tooltip properties plus the per-marker outline widths
    reflecting the active marker.
    """
    view = controller.view
    index = _hovered_marker_index(hover_data)
    tooltip = None
    if index is not None:
        bbox = hover_data["points"][0].get("bbox") or {}
        left = bbox.get("x0", 0.0)
        top = bbox.get("y0", 0.0)
        tooltip = view.show_tooltip(index, left, top)

    if tooltip is None:
        tooltip = view.hide_tooltip()
        return {
            "show": False,
            "bbox": dash.no_update,
            "children": dash.no_update,
            "line_width": view.marker_style()["line_width"],
        }

    return {
        "show": True,
        "bbox": {"x0": tooltip.left, "x1": tooltip.left, "y0": tooltip.top, "y1": tooltip.top},
        "children": dcc.Markdown(
            sanitize_markup(tooltip.markup),
            dangerously_allow_html=True,
            style={
                "opacity": tooltip.opacity,
                "transition": f"opacity {tooltip.duration}ms",
            },
        ),
        "line_width": view.marker_style()["line_width"],
    }


def register_load_callbacks(app, controller: Controller):
    @app.callback(
        Output(GRAPH_ID, "figure"),
        Output(POLL_INTERVAL_ID, "disabled"),
        Output(STATE_STORE_ID, "data"),
        Input(POLL_INTERVAL_ID, "n_intervals"),
        State(STATE_STORE_ID, "data"),
        prevent_initial_call=False,
    )
    def refresh_while_loading(n_intervals, store):
        """Pick up the outline and the markers as their loads complete.

        The markers first arrive at zero radius; polling continues for one
        more frame so they grow to their size.
        """
        session = controller.session(MapState.from_store(store))
        entering = session.view.has_pending_frames
        figure = session.view.figure()
        finished = controller.is_loaded and not entering
        if finished:
            logger.debug(f"Loads finished after {n_intervals} poll(s)")
        return figure, finished, session.state().to_store()


def register_metric_callback(app, controller: Controller):
    @app.callback(
        Output(GRAPH_ID, "figure", allow_duplicate=True),
        Output(STATE_STORE_ID, "data", allow_duplicate=True),
        Input(METRIC_SELECTOR_ID, "value"),
        State(STATE_STORE_ID, "data"),
        prevent_initial_call=True,
    )
    def update_bubble_sizes(metric, store):
        session = controller.session(MapState.from_store(store))
        if session.get_data() is None:
            raise dash.exceptions.PreventUpdate
        session.view.mark_entered()
        session.update_bubble_sizes(metric)
        return session.view.figure(), session.state().to_store()


def switch_filter_controls(
    controller: Controller, store: dict[str, Any] | None, identifier: str | None
) -> tuple[go.Figure, list[str], dict[str, Any]]:
    """Apply a filter control click to a session.

    Raises:
        PreventUpdate: when the clicked control is already active
    """
    session = controller.session(MapState.from_store(store))
    # Clicking the active control is a no-op
    if not session.navigation.click(identifier):
        raise dash.exceptions.PreventUpdate
    session.view.mark_entered()
    return (
        session.view.figure(),
        session.navigation.button_variants(),
        session.state().to_store(),
    )


def register_filter_callback(app, controller: Controller):
    @app.callback(
        Output(GRAPH_ID, "figure", allow_duplicate=True),
        Output({"type": FILTER_BUTTON_TYPE, "filter": ALL}, "variant"),
        Output(STATE_STORE_ID, "data", allow_duplicate=True),
        Input({"type": FILTER_BUTTON_TYPE, "filter": ALL}, "n_clicks"),
        State(STATE_STORE_ID, "data"),
        prevent_initial_call=True,
    )
    def switch_filters(n_clicks_list, store):
        triggered_id = ctx.triggered_id
        if not isinstance(triggered_id, dict) or not any(n_clicks_list or []):
            raise dash.exceptions.PreventUpdate
        return switch_filter_controls(controller, store, triggered_id.get("filter"))


def register_hover_callback(app, controller: Controller):
    @app.callback(
        Output(TOOLTIP_ID, "show"),
        Output(TOOLTIP_ID, "bbox"),
        Output(TOOLTIP_ID, "children"),
        Output(GRAPH_ID, "figure", allow_duplicate=True),
        Input(GRAPH_ID, "hoverData"),
        State(STATE_STORE_ID, "data"),
        prevent_initial_call=True,
    )
    def toggle_tooltip(hover_data, store):
        session = controller.session(MapState.from_store(store))
        result = tooltip_from_hover(session, hover_data)
        patch = Patch()
        patch["data"][MARKER_TRACE]["marker"]["line"]["width"] = result["line_width"]
        return result["show"], result["bbox"], result["children"], patch


def register_zoom_callback(app, controller: Controller):
    @app.callback(
        Output(GRAPH_ID, "figure", allow_duplicate=True),
        Input(GRAPH_ID, "relayoutData"),
        prevent_initial_call=True,
    )
    def clamp_zoom(relayout_data):
        """Keep the zoom scale inside the configured extent."""
        viewport = controller.session(MapState()).view.clamp_viewport(relayout_data)
        if viewport is None:
            raise dash.exceptions.PreventUpdate
        patch = Patch()
        patch["layout"]["xaxis"]["range"] = viewport.x
        patch["layout"]["yaxis"]["range"] = viewport.y
        return patch


def register_all_callbacks(app, controller: Controller):
    """
    Register every station map callback.

    Args:
        app (dash.Dash): The Dash application instance
        controller: Initialized controller shared by all callbacks
    """
    logger.info("Registering station map callbacks")
    register_load_callbacks(app, controller)
    register_metric_callback(app, controller)
    register_filter_callback(app, controller)
    register_hover_callback(app, controller)
    register_zoom_callback(app, controller)
