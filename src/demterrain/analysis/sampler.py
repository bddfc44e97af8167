"""Coordinate-to-grid mapping and bilinear elevation sampling."""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from demterrain.data.grid import DemGrid
from demterrain.data.metadata import DemMetadata
from demterrain.utils import METERS_PER_DEGREE_LAT, meters_per_degree_lng

ElevationFn = Callable[[float, float], Optional[float]]


@dataclass(frozen=True)
class GridResolution:
    """Resolution parameters derived once from DEM metadata."""

    lat_deg_per_px: float
    lng_deg_per_px: float
    meters_per_deg_lat: float
    meters_per_deg_lng: float

    @property
    def cell_height_m(self) -> float:
        return self.lat_deg_per_px * self.meters_per_deg_lat

    @property
    def cell_width_m(self) -> float:
        return self.lng_deg_per_px * self.meters_per_deg_lng

    @property
    def cell_size_m(self) -> float:
        """Return the coarser of the two cell dimensions in meters."""
        return max(self.cell_height_m, self.cell_width_m)


def derive_resolution(metadata: DemMetadata) -> GridResolution:
    """
    Compute degrees-per-pixel and meters-per-degree for ``metadata``.

    Grid corners sit on the bounds, so spacing is ``span / (n - 1)``. A single-row or
    single-column grid falls back to the full span. Longitude meters are scaled by the cosine
    of the DEM's centre latitude.
    """
    bounds = metadata.bounds
    center_lat, _ = bounds.center
    return GridResolution(
        lat_deg_per_px=(bounds.max_lat - bounds.min_lat) / max(metadata.height - 1, 1),
        lng_deg_per_px=(bounds.max_lng - bounds.min_lng) / max(metadata.width - 1, 1),
        meters_per_deg_lat=METERS_PER_DEGREE_LAT,
        meters_per_deg_lng=meters_per_degree_lng(center_lat),
    )


class ElevationSampler:
    """Bilinear elevation lookups over a :class:`DemGrid`."""

    def __init__(self, grid: DemGrid) -> None:
        self.grid = grid
        self._bounds = grid.metadata.bounds

    def grid_position(self, lat: float, lng: float) -> tuple[float, float]:
        """
        Return continuous ``(row, col)`` for a coordinate, clamped to the grid edges.

        Row 0 is north, so the row axis runs against latitude.
        """
        bounds = self._bounds
        col = (lng - bounds.min_lng) / (bounds.max_lng - bounds.min_lng) * (self.grid.width - 1)
        row = (bounds.max_lat - lat) / (bounds.max_lat - bounds.min_lat) * (self.grid.height - 1)
        col = min(max(col, 0.0), float(self.grid.width - 1))
        row = min(max(row, 0.0), float(self.grid.height - 1))
        return row, col

    def get_elevation(self, lat: float, lng: float) -> Optional[float]:
        """
        Return interpolated elevation in meters, or ``None`` when data is missing.

        Any nodata cell among the four neighbours voids the sample: blending across the edge
        of coverage would invent terrain.
        """
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return None

        row, col = self.grid_position(lat, lng)
        row0 = int(math.floor(row))
        col0 = int(math.floor(col))
        row1 = min(row0 + 1, self.grid.height - 1)
        col1 = min(col0 + 1, self.grid.width - 1)

        v00 = self.grid.cell(row0, col0)
        v10 = self.grid.cell(row0, col1)
        v01 = self.grid.cell(row1, col0)
        v11 = self.grid.cell(row1, col1)
        if v00 is None or v10 is None or v01 is None or v11 is None:
            return None

        fx = col - col0
        fy = row - row0
        return (
            v00 * (1 - fx) * (1 - fy)
            + v10 * fx * (1 - fy)
            + v01 * (1 - fx) * fy
            + v11 * fx * fy
        )
