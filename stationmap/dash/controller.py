"""
Station map controller.

Builds the projection, owns the station dataset and dispatches UI intents
(metric switch, filter switch) to the view. The dataset and the topology are
loaded concurrently on a thread pool; the two layers appear in whichever
order the loads finish.
"""

import concurrent.futures
import copy
from concurrent.futures import Executor, Future

import geopandas as gpd

from stationmap.configs.logging_init import logger
from stationmap.configs.settings_models import Settings
from stationmap.dash.model import MapState, Model
from stationmap.dash.navigation import NavigationView
from stationmap.dash.projection import AlbersUsaProjection, GeoPath
from stationmap.dash.view import LinearScale, View
from stationmap.models.stations import Metric, StationDataset, StationFilter

# TopoJSON object holding the state outlines
STATES_LAYER = "states"


class Controller:
    def __init__(
        self,
        model: Model,
        settings: Settings | None = None,
        executor: Executor | None = None,
    ):
        self.model = model
        self.settings = settings or Settings()
        self.data: StationDataset | None = None
        self.projection: AlbersUsaProjection | None = None

        self.view = View(self, self.settings.canvas, self.settings.data.logo_base_url)
        self.navigation = NavigationView(self)

        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="stationmap-load"
        )
        self._loads: list[Future] = []

    def init(self) -> None:
        """Projection first: the view caches it during its own init."""
        logger.debug(self.model)
        self.make_map()
        self.view.init()
        self.navigation.init()
        self.load_data()

    def load_data(self) -> Future:
        future = self._executor.submit(self._load_data)
        self._loads.append(future)
        return future

    def _load_data(self) -> StationDataset | None:
        src = self.model.data_src
        try:
            data = StationDataset.from_csv(src)
        except Exception as e:
            logger.error(f"Station data load failed ({src}): {e}", exc_info=True)
            return None
        self.data = data
        self.view.render(Metric.TSR)
        return data

    def make_map(self) -> Future:
        canvas = self.settings.canvas
        self.projection = AlbersUsaProjection(scale=canvas.scale, translate=canvas.translate)
        path = GeoPath(self.projection)
        future = self._executor.submit(self._load_map, path)
        self._loads.append(future)
        return future

    def _load_map(self, path: GeoPath) -> gpd.GeoDataFrame | None:
        src = self.model.topology_src
        try:
            states = gpd.read_file(src, layer=STATES_LAYER)
        except Exception as e:
            logger.error(f"Topology load failed ({src}): {e}", exc_info=True)
            return None
        logger.info(f"Loaded {len(states)} states from {src}")
        self.view.render_map(states, path)
        return states

    def switch_filters(self, name: str | None) -> StationFilter:
        """Show every marker again, then hide the ones outside the category."""
        station_filter = StationFilter.resolve(name)
        self.view.reset_filter()
        if station_filter.category_label is not None:
            self.view.filter(station_filter.category_label)
        return station_filter

    def update_bubble_sizes(self, metric: str | None) -> LinearScale | None:
        return self.view.render(metric)

    def session(self, state: MapState) -> "Controller":
        """Controller for one browser session.

        Shares the loaded dataset, projection and outline; the markers, the
        active filter control and the tooltip are rebuilt from ``state``.
        """
        session = copy.copy(self)
        session.view = View(session, self.settings.canvas, self.settings.data.logo_base_url)
        session.navigation = NavigationView(session)
        session.view.init()
        session.view.outline = self.view.outline
        session.navigation.init()
        if session.data is None:
            return session

        session.view.render(state.metric)
        if state.entered:
            session.view.mark_entered()
        session.navigation.active = state.station_filter
        session.switch_filters(state.station_filter)
        return session

    def state(self) -> MapState:
        """Selections of this controller, as kept in the session store."""
        return MapState(
            metric=self.view.metric or Metric.TSR,
            station_filter=self.navigation.active or StationFilter.ALL,
            entered=bool(self.view.markers) and not self.view.has_pending_frames,
        )

    def get_data(self) -> StationDataset | None:
        return self.data

    def get_projection(self) -> AlbersUsaProjection | None:
        return self.projection

    @property
    def is_loaded(self) -> bool:
        """Both loads finished, successfully or not."""
        return bool(self._loads) and all(f.done() for f in self._loads)

    def wait_until_loaded(self, timeout: float | None = None) -> bool:
        done, not_done = concurrent.futures.wait(self._loads, timeout=timeout)
        return not not_done

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)
