"""
Models for the station dataset.

A station is one row of the station CSV. Every value is read as a string and
coerced explicitly: coordinates must parse, metric and category values that do
not parse become NaN so that a single bad cell never aborts a render.

Key concepts:
- Metric: which numeric column drives the marker radius
- StationFilter: which category column drives marker visibility
- StationDataset: the immutable, ordered collection bound to the markers
"""

import math
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from stationmap.configs.logging_init import logger

NAME_COLUMN = "name"
LONGITUDE_COLUMN = "longitude"
LATITUDE_COLUMN = "latitude"
TSR_COLUMN = "TSR"
PRODUCTS_COLUMN = "total products"
PRODUCT_NAMES_COLUMN = "product names"

KNOWN_COLUMNS = (
    NAME_COLUMN,
    LONGITUDE_COLUMN,
    LATITUDE_COLUMN,
    TSR_COLUMN,
    PRODUCTS_COLUMN,
    PRODUCT_NAMES_COLUMN,
)


def to_number(value: Any) -> float:
    """Coerce a raw cell to float, NaN when it is empty or not numeric."""
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        return float(value)
    text = str(value).strip()
    if not text:
        return math.nan
    try:
        return float(text)
    except ValueError:
        return math.nan


class Metric(str, Enum):
    """Marker size metric selectable from the UI."""

    TSR = "TSR"
    PRODUCTS = "products"

    @property
    def column(self) -> str:
        return _METRIC_COLUMNS[self]

    @classmethod
    def resolve(cls, value: str | None) -> "Metric":
        """Resolve a UI value, falling back to TSR for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.TSR


_METRIC_COLUMNS = {
    Metric.TSR: TSR_COLUMN,
    Metric.PRODUCTS: PRODUCTS_COLUMN,
}


class StationFilter(str, Enum):
    """Filter controls; each category filter maps to a membership column."""

    ALL = "all"
    COREPUB = "corepub"
    COMPOSER = "composer"
    SPRINGBOARD = "springboard"

    @property
    def category_label(self) -> str | None:
        return _FILTER_CATEGORIES[self]

    @property
    def title(self) -> str:
        return self.category_label or "All stations"

    @classmethod
    def resolve(cls, identifier: str | None) -> "StationFilter":
        """Resolve a filter identifier, anything unknown shows all stations."""
        if isinstance(identifier, cls):
            return identifier
        try:
            return cls(identifier)
        except ValueError:
            return cls.ALL


_FILTER_CATEGORIES: dict[StationFilter, str | None] = {
    StationFilter.ALL: None,
    StationFilter.COREPUB: "Core Publisher",
    StationFilter.COMPOSER: "Composer Pro",
    StationFilter.SPRINGBOARD: "Springboard Donation Forms",
}


class Station(BaseModel):
    """One radio station row with typed fields.

    Category membership flags are every column that is not one of the known
    columns; a value of zero means the station is not a member.
    """

    name: str
    longitude: float
    latitude: float
    tsr: float = Field(default=math.nan, alias=TSR_COLUMN)
    total_products: float = Field(default=math.nan, alias=PRODUCTS_COLUMN)
    product_names: str = Field(default="", alias=PRODUCT_NAMES_COLUMN)
    categories: dict[str, float] = Field(default_factory=dict)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Station name must not be empty")
        return v

    @field_validator("longitude", "latitude", mode="before")
    @classmethod
    def validate_coordinate(cls, v: Any) -> float:
        number = to_number(v)
        if math.isnan(number) or math.isinf(number):
            raise ValueError(f"Coordinate {v!r} is not numeric")
        return number

    @field_validator("tsr", "total_products", mode="before")
    @classmethod
    def coerce_metric(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("product_names", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("categories", mode="before")
    @classmethod
    def coerce_categories(cls, v: Any) -> dict[str, float]:
        # A blank membership cell means "not a member"
        return {
            str(k): 0.0 if str(value).strip() == "" else to_number(value)
            for k, value in (v or {}).items()
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Station":
        """Build a station from a raw CSV row (column name -> string)."""
        known = {key: row[key] for key in KNOWN_COLUMNS if key in row}
        categories = {key: value for key, value in row.items() if key not in KNOWN_COLUMNS}
        return cls.model_validate({**known, "categories": categories})

    def value(self, column: str) -> float:
        """Numeric value of a named column, NaN when the station lacks it."""
        if column == TSR_COLUMN:
            return self.tsr
        if column == PRODUCTS_COLUMN:
            return self.total_products
        if column == LONGITUDE_COLUMN:
            return self.longitude
        if column == LATITUDE_COLUMN:
            return self.latitude
        return self.categories.get(column, math.nan)

    def is_member(self, category_label: str) -> bool:
        """A station belongs to a category unless its flag equals zero."""
        return self.value(category_label) != 0


class StationDataset:
    """Ordered, read-only sequence of stations loaded once per session."""

    def __init__(self, stations: list[Station] | tuple[Station, ...]):
        self._stations = tuple(stations)

    def __len__(self) -> int:
        return len(self._stations)

    def __iter__(self) -> Iterator[Station]:
        return iter(self._stations)

    def __getitem__(self, index: int) -> Station:
        return self._stations[index]

    def __repr__(self) -> str:
        return f"StationDataset({len(self)} stations)"

    @property
    def stations(self) -> tuple[Station, ...]:
        return self._stations

    @property
    def category_labels(self) -> list[str]:
        labels: dict[str, None] = {}
        for station in self._stations:
            labels.update(dict.fromkeys(station.categories))
        return list(labels)

    def extent(self, column: str) -> tuple[float, float]:
        """Min and max of a numeric column, ignoring NaN values."""
        values = [v for v in (s.value(column) for s in self._stations) if not math.isnan(v)]
        if not values:
            return math.nan, math.nan
        return min(values), max(values)

    def member_count(self, category_label: str) -> int:
        return sum(1 for station in self._stations if station.is_member(category_label))

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> "StationDataset":
        """Validate raw rows, skipping the ones that cannot be placed on the map."""
        stations = []
        for position, row in enumerate(records):
            try:
                stations.append(Station.from_row(row))
            except ValidationError as e:
                logger.warning(
                    f"Skipping station row {position} ({row.get(NAME_COLUMN, '?')}): "
                    f"{e.error_count()} invalid field(s)"
                )
        return cls(stations)

    @classmethod
    def from_csv(cls, path: str | Path) -> "StationDataset":
        """Read the station CSV; every cell is loaded as a string."""
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        missing = {NAME_COLUMN, LONGITUDE_COLUMN, LATITUDE_COLUMN} - set(df.columns)
        if missing:
            raise ValueError(f"Station CSV missing columns: {sorted(missing)}")
        dataset = cls.from_records(df.to_dict(orient="records"))
        logger.info(f"Loaded {len(dataset)} stations from {path}")
        return dataset
