import json

import pytest

from stationmap.configs.settings_models import DataConfig, Settings
from stationmap.dash.controller import Controller
from stationmap.dash.model import Model

STATIONS_CSV = """name,longitude,latitude,TSR,total products,product names,Core Publisher,Composer Pro,Springboard Donation Forms
WAMU-FM,-77.05,38.94,50,3,Core;Composer;Station,0,1,
KQED-FM,-122.42,37.77,90,7,Core;Composer;Springboard,1,0,1
KHPR-FM,-157.86,21.31,70,6,Core;Springboard,1,,0
"""

# One square state between 110W-100W and 35N-40N, quantized
TOPOLOGY = {
    "type": "Topology",
    "transform": {"scale": [0.01, 0.01], "translate": [-110, 35]},
    "objects": {
        "states": {
            "type": "GeometryCollection",
            "geometries": [{"type": "Polygon", "id": 8, "arcs": [[0]]}],
        }
    },
    "arcs": [[[0, 0], [1000, 0], [0, 500], [-1000, 0], [0, -500]]],
}


@pytest.fixture
def stations_csv(tmp_path):
    path = tmp_path / "stations.csv"
    path.write_text(STATIONS_CSV)
    return path


@pytest.fixture
def topology_json(tmp_path):
    path = tmp_path / "us.json"
    path.write_text(json.dumps(TOPOLOGY))
    return path


@pytest.fixture
def settings(stations_csv, topology_json):
    return Settings(data=DataConfig(data_src=stations_csv, topology_src=topology_json))


@pytest.fixture
def controller(settings):
    """Initialized controller with both loads finished."""
    controller = Controller(Model.from_settings(settings.data), settings)
    controller.init()
    assert controller.wait_until_loaded(timeout=30)
    yield controller
    controller.shutdown()
