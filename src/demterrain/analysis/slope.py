"""Slope estimation by central finite differences."""

from __future__ import annotations

import math
from typing import Optional

from demterrain.analysis.sampler import ElevationFn, GridResolution
from demterrain.utils import meters_to_lat_degrees, meters_to_lng_degrees

MIN_SAMPLE_DISTANCE_M = 30.0
MAX_SAMPLE_DISTANCE_M = 200.0


def derive_sample_distance(
    resolution: GridResolution,
    min_distance_m: float = MIN_SAMPLE_DISTANCE_M,
    max_distance_m: float = MAX_SAMPLE_DISTANCE_M,
) -> float:
    """
    Return the probe offset for slope estimation, clamped to ``[min_distance_m, max_distance_m]``.

    The native cell size sets the offset. Below 30 m interpolation noise dominates the
    gradient; above 200 m the slope is smoothed away.
    """
    return max(min_distance_m, min(max_distance_m, resolution.cell_size_m))


def compute_slope_percent(
    get_elevation: ElevationFn,
    lat: float,
    lng: float,
    sample_distance_m: float,
) -> Optional[float]:
    """
    Compute slope at a point as percent grade (10 means a 10% grade).

    Elevation is probed ``sample_distance_m`` north, south, east and west of the point. If any
    probe has no data the slope is unknown and ``None`` is returned.
    """
    d_lat = meters_to_lat_degrees(sample_distance_m)
    d_lng = meters_to_lng_degrees(sample_distance_m, lat)

    north = get_elevation(lat + d_lat, lng)
    south = get_elevation(lat - d_lat, lng)
    east = get_elevation(lat, lng + d_lng)
    west = get_elevation(lat, lng - d_lng)
    if north is None or south is None or east is None or west is None:
        return None

    dzdy = (north - south) / (2 * sample_distance_m)
    dzdx = (east - west) / (2 * sample_distance_m)
    return math.sqrt(dzdx * dzdx + dzdy * dzdy) * 100.0
