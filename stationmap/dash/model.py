from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from stationmap.configs.settings_models import DataConfig
from stationmap.models.stations import Metric, StationFilter


class Model(BaseModel):
    """Where the station table and the US topology are read from."""

    data_src: Path
    topology_src: Path

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, data: DataConfig) -> "Model":
        return cls(data_src=data.data_src, topology_src=data.topology_src)


class MapState(BaseModel):
    """What one browser session has selected, kept in a dcc.Store.

    ``entered`` becomes true once the session was sent the zero-radius frame
    the markers grow from.
    """

    metric: Metric = Metric.TSR
    station_filter: StationFilter = StationFilter.ALL
    entered: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_store(cls, data: dict[str, Any] | None) -> "MapState":
        return cls.model_validate(data or {})

    def to_store(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
