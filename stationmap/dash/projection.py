"""
Albers USA composite projection.

The lower 48 states, Alaska and Hawaii are each projected with a conic
equal-area projection (computed by pyproj on the unit sphere), then scaled,
translated and clipped into three non-overlapping pixel rectangles. The inset
layout constants are the classic Albers USA composite ones, expressed as
fractions of the scale.

Screen convention: x grows to the right, y grows downward.
"""

import math
from dataclasses import dataclass

import numpy as np
import shapely
from pyproj import Proj
from shapely.geometry import LineString
from shapely.geometry.base import BaseGeometry

Point = tuple[float, float]
Extent = tuple[Point, Point]

# Keeps the inset clip rectangles strictly apart
EPSILON = 1e-6


@dataclass(frozen=True)
class ConicInset:
    """One conic equal-area piece of the composite, in pixel space."""

    proj: Proj
    center: Point  # projected (unit sphere) coordinates of the geographic center
    scale: float
    translate: Point
    extent: Extent

    @classmethod
    def build(
        cls,
        lon_0: float,
        parallels: tuple[float, float],
        center: Point,
        scale: float,
        translate: Point,
        extent: Extent,
    ) -> "ConicInset":
        proj = Proj(
            proj="aea",
            lat_1=parallels[0],
            lat_2=parallels[1],
            lat_0=0,
            lon_0=lon_0,
            R=1,
        )
        cx, cy = proj(center[0], center[1])
        return cls(proj=proj, center=(cx, cy), scale=scale, translate=translate, extent=extent)

    def project_many(self, lons, lats) -> tuple[np.ndarray, np.ndarray]:
        """Project coordinate arrays without clipping."""
        xs, ys = self.proj(np.asarray(lons, dtype=float), np.asarray(lats, dtype=float))
        xs = self.translate[0] + self.scale * (np.asarray(xs) - self.center[0])
        ys = self.translate[1] - self.scale * (np.asarray(ys) - self.center[1])
        return xs, ys

    def inside(self, xs, ys) -> np.ndarray:
        (x0, y0), (x1, y1) = self.extent
        xs = np.asarray(xs)
        ys = np.asarray(ys)
        finite = np.isfinite(xs) & np.isfinite(ys)
        with np.errstate(invalid="ignore"):
            return finite & (xs >= x0) & (xs <= x1) & (ys >= y0) & (ys <= y1)


class AlbersUsaProjection:
    """Maps (longitude, latitude) to (x, y) pixels; None outside every inset."""

    def __init__(self, scale: float = 1070.0, translate: Point = (480.0, 250.0)):
        self.scale = float(scale)
        self.translate = (float(translate[0]), float(translate[1]))
        k = self.scale
        x, y = self.translate

        self.lower48 = ConicInset.build(
            lon_0=-96,
            parallels=(29.5, 45.5),
            center=(-96.6, 38.7),
            scale=k,
            translate=(x, y),
            extent=((x - 0.455 * k, y - 0.238 * k), (x + 0.455 * k, y + 0.238 * k)),
        )
        self.alaska = ConicInset.build(
            lon_0=-154,
            parallels=(55, 65),
            center=(-156, 58.5),
            scale=0.35 * k,
            translate=(x - 0.307 * k, y + 0.201 * k),
            extent=(
                (x - 0.425 * k + EPSILON, y + 0.120 * k + EPSILON),
                (x - 0.214 * k - EPSILON, y + 0.234 * k - EPSILON),
            ),
        )
        self.hawaii = ConicInset.build(
            lon_0=-157,
            parallels=(8, 18),
            center=(-160, 19.9),
            scale=k,
            translate=(x - 0.205 * k, y + 0.212 * k),
            extent=(
                (x - 0.214 * k + EPSILON, y + 0.166 * k + EPSILON),
                (x - 0.115 * k - EPSILON, y + 0.234 * k - EPSILON),
            ),
        )

    @property
    def insets(self) -> tuple[ConicInset, ConicInset, ConicInset]:
        return self.lower48, self.alaska, self.hawaii

    def __call__(self, coordinates) -> Point | None:
        lon, lat = float(coordinates[0]), float(coordinates[1])
        if not (math.isfinite(lon) and math.isfinite(lat)):
            return None
        for inset in self.insets:
            xs, ys = inset.project_many([lon], [lat])
            if inset.inside(xs, ys)[0]:
                return float(xs[0]), float(ys[0])
        return None

    def __repr__(self) -> str:
        return f"AlbersUsaProjection(scale={self.scale}, translate={self.translate})"


class GeoPath:
    """Turns shapely geometries into pixel polylines through a projection.

    Every ring or line is projected by each inset and clipped to that inset's
    rectangle, so a state outline only appears in the inset that owns it.
    """

    def __init__(self, projection: AlbersUsaProjection):
        self.projection = projection

    def rings(self, geometry: BaseGeometry | None) -> list[list[Point]]:
        """Projected polylines for one geometry."""
        polylines = []
        for line in _lines(geometry):
            coords = np.asarray(line.coords)
            if len(coords) < 2:
                continue
            for inset in self.projection.insets:
                xs, ys = inset.project_many(coords[:, 0], coords[:, 1])
                (x0, y0), (x1, y1) = inset.extent
                for run in _finite_runs(xs, ys):
                    clipped = shapely.clip_by_rect(LineString(run), x0, y0, x1, y1)
                    polylines.extend(
                        [(float(x), float(y)) for x, y in part.coords]
                        for part in shapely.get_parts(clipped)
                        if part.geom_type == "LineString" and len(part.coords) > 1
                    )
        return polylines

    def to_xy(self, geometries) -> tuple[list[float | None], list[float | None]]:
        """Flatten geometries into Plotly line coordinates separated by None."""
        xs: list[float | None] = []
        ys: list[float | None] = []
        for geometry in geometries:
            for polyline in self.rings(geometry):
                xs.extend(p[0] for p in polyline)
                ys.extend(p[1] for p in polyline)
                xs.append(None)
                ys.append(None)
        return xs, ys


def _lines(geometry: BaseGeometry | None) -> list[LineString]:
    """Polygon rings and line strings of a geometry, collections flattened."""
    if geometry is None or geometry.is_empty:
        return []
    if geometry.geom_type == "Polygon":
        return list(shapely.get_rings(geometry))
    if geometry.geom_type in ("LineString", "LinearRing"):
        return [geometry]
    if geometry.geom_type in ("MultiPolygon", "MultiLineString", "GeometryCollection"):
        return [line for part in shapely.get_parts(geometry) for line in _lines(part)]
    return []


def _finite_runs(xs: np.ndarray, ys: np.ndarray) -> list[np.ndarray]:
    """Split projected vertices where the projection is undefined."""
    finite = np.isfinite(xs) & np.isfinite(ys)
    runs = []
    start = None
    for i, keep in enumerate(finite):
        if keep and start is None:
            start = i
        elif not keep and start is not None:
            if i - start > 1:
                runs.append(np.column_stack([xs[start:i], ys[start:i]]))
            start = None
    if start is not None and len(finite) - start > 1:
        runs.append(np.column_stack([xs[start:], ys[start:]]))
    return runs
