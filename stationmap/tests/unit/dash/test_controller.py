"""
Unit tests for the station map controller and the filter navigation.
"""

import logging

import pytest

from stationmap.configs.settings_models import DataConfig, Settings
from stationmap.dash.controller import Controller
from stationmap.dash.model import MapState, Model
from stationmap.dash.navigation import ACTIVE_VARIANT, INACTIVE_VARIANT
from stationmap.models.stations import Metric, StationFilter


def start(settings):
    controller = Controller(Model.from_settings(settings.data), settings)
    controller.init()
    assert controller.wait_until_loaded(timeout=30)
    return controller


class TestControllerLoading:
    """Tests for the asynchronous loads."""

    def test_loads_data_and_map(self, controller):
        """Should hold the dataset, the projection and the outline once loaded."""
        assert controller.is_loaded
        assert len(controller.get_data()) == 3
        assert controller.get_projection() is controller.view.projection
        assert controller.view.outline is not None

    def test_projection_uses_enlarged_scale(self, controller):
        """Should scale the nominal projection by the canvas factor."""
        projection = controller.get_projection()

        assert projection.scale == 1500
        assert projection.translate == (600, 375)

    def test_missing_station_data_is_logged(self, tmp_path, topology_json, caplog):
        """Should log the failure and keep the map without markers."""
        settings = Settings(
            data=DataConfig(data_src=tmp_path / "missing.csv", topology_src=topology_json)
        )

        with caplog.at_level(logging.ERROR, logger="stationmap"):
            controller = start(settings)

        try:
            assert controller.get_data() is None
            assert controller.view.markers == []
            assert controller.view.outline is not None
            assert "missing.csv" in caplog.text
        finally:
            controller.shutdown()

    def test_missing_topology_is_logged(self, tmp_path, stations_csv, caplog):
        """Should log the failure and still render the markers."""
        settings = Settings(
            data=DataConfig(data_src=stations_csv, topology_src=tmp_path / "missing.json")
        )

        with caplog.at_level(logging.ERROR, logger="stationmap"):
            controller = start(settings)

        try:
            assert controller.view.outline is None
            assert len(controller.view.markers) == 3
            assert "missing.json" in caplog.text
        finally:
            controller.shutdown()


class TestSwitchFilters:
    """Tests for Controller.switch_filters."""

    def test_category_filter(self, controller):
        """Should hide the stations outside the category."""
        result = controller.switch_filters("corepub")

        assert result is StationFilter.COREPUB
        assert [m.hidden for m in controller.view.markers] == [True, False, False]

    def test_switch_resets_previous_filter(self, controller):
        """Should start from all markers visible before applying a filter."""
        controller.switch_filters("corepub")
        controller.switch_filters("composer")

        assert [m.hidden for m in controller.view.markers] == [False, True, True]

    @pytest.mark.parametrize("name", ["all", "unknown", None])
    def test_all_stations(self, controller, name):
        """Should show every station for the all control and unknown ids."""
        controller.switch_filters("springboard")
        controller.switch_filters(name)

        assert not any(m.hidden for m in controller.view.markers)


class TestNavigationView:
    """Tests for NavigationView."""

    def test_all_active_after_init(self, controller):
        """Should start with the all-stations control active."""
        navigation = controller.navigation

        assert navigation.active is StationFilter.ALL
        assert navigation.button_variants() == [
            ACTIVE_VARIANT,
            INACTIVE_VARIANT,
            INACTIVE_VARIANT,
            INACTIVE_VARIANT,
        ]

    def test_click_switches_filter(self, controller):
        """Should activate the clicked control and filter the markers."""
        assert controller.navigation.click("springboard")

        assert controller.navigation.active is StationFilter.SPRINGBOARD
        assert controller.navigation.button_variants()[3] == ACTIVE_VARIANT
        assert [m.hidden for m in controller.view.markers] == [True, False, True]

    def test_click_active_control_is_noop(self, controller):
        """Should ignore a click on the already active control."""
        controller.navigation.click("corepub")
        controller.view.reset_filter()

        assert not controller.navigation.click("corepub")
        assert not any(m.hidden for m in controller.view.markers)


class TestSession:
    """Tests for Controller.session and Controller.state."""

    def test_fresh_session_enters_markers(self, controller):
        """Should rebuild the markers and wait for the zero-radius frame."""
        session = controller.session(MapState())

        assert session.get_data() is controller.get_data()
        assert session.view is not controller.view
        assert session.view.outline is controller.view.outline
        assert len(session.view.markers) == 3
        assert session.view.has_pending_frames
        assert session.state() == MapState()

    def test_restores_selections(self, controller):
        """Should apply the stored metric and filter."""
        state = MapState(
            metric=Metric.PRODUCTS, station_filter=StationFilter.COREPUB, entered=True
        )

        session = controller.session(state)

        assert session.view.metric is Metric.PRODUCTS
        assert session.navigation.active is StationFilter.COREPUB
        assert [m.hidden for m in session.view.markers] == [True, False, False]
        assert not session.view.has_pending_frames
        assert session.state() == state

    def test_sessions_are_independent(self, controller):
        """Should let every session click a control another session activated."""
        first = controller.session(MapState(entered=True))
        assert first.navigation.click("corepub")

        second = controller.session(MapState(entered=True))

        assert second.navigation.click("corepub")
        assert [m.hidden for m in second.view.markers] == [True, False, False]
        assert not any(m.hidden for m in controller.view.markers)

    def test_session_before_data(self, settings):
        """Should give an empty session while the station data is loading."""
        controller = Controller(Model.from_settings(settings.data), settings)

        session = controller.session(MapState())

        assert session.view.markers == []
        assert not session.view.has_pending_frames
        assert session.state() == MapState()
        controller.shutdown()
