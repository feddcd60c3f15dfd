from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DataConfig(BaseSettings):
    """Locations of the station table, the US topology and the logo images."""

    data_src: Path = Field(default=Path("data/stations4.csv"))
    topology_src: Path = Field(default=Path("data/us.json"))
    logo_base_url: str = Field(
        default="http://media.npr.org/images/stations/logos/",
        description="Prefix of the station logo images shown in the tooltip",
    )

    model_config = SettingsConfigDict(env_prefix="STATIONMAP_DATA_")


class CanvasConfig(BaseSettings):
    width: int = Field(default=1200)
    height: int = Field(default=900)

    # Projection: the nominal Albers USA scale/translate, enlarged by scale_factor
    scale_factor: float = Field(default=1.5, description="Map enlargement factor")
    base_scale: float = Field(default=1000.0)
    base_translate: tuple[float, float] = Field(default=(400.0, 250.0))

    zoom_extent: tuple[float, float] = Field(default=(1.0, 10.0))
    radius_range: tuple[float, float] = Field(default=(2.0, 36.0))
    marker_color: str = Field(default="hsla(205,75%,60%,1)")

    # Transition timings in milliseconds
    enter_duration: int = Field(default=1250)
    update_duration: int = Field(default=200)
    tooltip_duration: int = Field(default=200)
    tooltip_opacity: float = Field(default=0.9)

    model_config = SettingsConfigDict(env_prefix="STATIONMAP_CANVAS_")

    @field_validator("zoom_extent", "radius_range")
    @classmethod
    def validate_ordered_pair(cls, v: tuple[float, float]) -> tuple[float, float]:
        if v[0] > v[1]:
            raise ValueError(f"Lower bound {v[0]} is greater than upper bound {v[1]}")
        return v

    @property
    def scale(self) -> float:
        return self.base_scale * self.scale_factor

    @property
    def translate(self) -> tuple[float, float]:
        return (
            self.base_translate[0] * self.scale_factor,
            self.base_translate[1] * self.scale_factor,
        )


class DashConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5080)
    debug: bool = Field(default=False)
    poll_interval_ms: int = Field(
        default=500, description="Interval used to pick up the asynchronous loads"
    )

    model_config = SettingsConfigDict(env_prefix="STATIONMAP_DASH_")


class LoggingConfig(BaseSettings):
    verbosity_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_prefix="STATIONMAP_LOGGING_")


class Settings(BaseSettings):
    data: DataConfig = Field(default_factory=DataConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    dash: DashConfig = Field(default_factory=DashConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_prefix="STATIONMAP_")
