import dash_mantine_components as dmc
from dash import dcc, html
from dash_iconify import DashIconify

from stationmap.configs.logging_init import logger
from stationmap.dash.controller import Controller
from stationmap.dash.model import MapState
from stationmap.models.stations import Metric, StationFilter

GRAPH_ID = "station-map-graph"
TOOLTIP_ID = "station-tooltip"
METRIC_SELECTOR_ID = "metric-selector"
POLL_INTERVAL_ID = "load-poll-interval"
STATE_STORE_ID = "map-state-store"
FILTER_BUTTON_TYPE = "filter-button"

METRIC_LABELS = {
    Metric.TSR: "Total subscription reach",
    Metric.PRODUCTS: "Number of products",
}

FILTER_ICONS = {
    StationFilter.ALL: "mdi:radio-tower",
    StationFilter.COREPUB: "mdi:newspaper-variant-outline",
    StationFilter.COMPOSER: "mdi:music-note",
    StationFilter.SPRINGBOARD: "mdi:hand-heart-outline",
}


def create_metric_selector(value: Metric = Metric.TSR) -> dmc.RadioGroup:
    return dmc.RadioGroup(
        id=METRIC_SELECTOR_ID,
        label="Size stations by",
        value=value.value,
        children=dmc.Group(
            [dmc.Radio(label=METRIC_LABELS[metric], value=metric.value) for metric in Metric],
            gap="md",
        ),
    )


def create_filter_buttons(variants: list[str]) -> dmc.Group:
    """One button per filter control, carrying its identifier in the id."""
    return dmc.Group(
        [
            dmc.Button(
                station_filter.title,
                id={"type": FILTER_BUTTON_TYPE, "filter": station_filter.value},
                variant=variant,
                size="sm",
                n_clicks=0,
                leftSection=DashIconify(icon=FILTER_ICONS[station_filter], width=16),
            )
            for station_filter, variant in zip(StationFilter, variants)
        ],
        gap="xs",
    )


def create_app_layout(controller: Controller, poll_interval_ms: int = 500) -> dmc.MantineProvider:
    """
    Page layout: header, metric selector, filter buttons, the map canvas and
    its tooltip.

    Args:
        controller: Initialized controller. Each page load starts a fresh
            session state; the figure itself is filled in by the load poll
            callback.
        poll_interval_ms: Refresh period while the asynchronous loads run.

    Returns:
        dmc.MantineProvider: Complete layout
    """
    logger.debug("Creating station map layout")
    canvas = controller.settings.canvas
    state = MapState()
    session = controller.session(state)

    return dmc.MantineProvider(
        [
            dcc.Store(id=STATE_STORE_ID, storage_type="memory", data=state.to_store()),
            dcc.Interval(id=POLL_INTERVAL_ID, interval=poll_interval_ms, n_intervals=0),
            dmc.Stack(
                [
                    dmc.Title("Public radio stations", order=2),
                    create_metric_selector(state.metric),
                    create_filter_buttons(session.navigation.button_variants()),
                    html.Div(
                        [
                            dcc.Graph(
                                id=GRAPH_ID,
                                clear_on_unhover=True,
                                config={
                                    "scrollZoom": True,
                                    "displayModeBar": False,
                                    "doubleClick": "reset",
                                },
                                style={"width": f"{canvas.width}px", "height": f"{canvas.height}px"},
                            ),
                            dcc.Tooltip(
                                id=TOOLTIP_ID,
                                className="station-tooltip",
                                direction="top",
                            ),
                        ],
                        style={"position": "relative"},
                    ),
                ],
                gap="md",
                p="md",
            ),
        ],
        id="mantine-provider",
        forceColorScheme="light",
    )
