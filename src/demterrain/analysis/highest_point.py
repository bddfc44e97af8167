"""Bounded highest-point search over an elevation function."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from demterrain.analysis.sampler import ElevationFn
from demterrain.data.metadata import DemBounds
from demterrain.utils import meters_to_lat_degrees, meters_to_lng_degrees, planar_distance_m

LOG = logging.getLogger(__name__)

DEFAULT_STEP_M = 60.0
DEFAULT_MAX_SAMPLES = 5000

_INDEX_EPS = 1e-9


@dataclass(frozen=True)
class TerrainPoint:
    """A terrain location with its elevation."""

    lat: float
    lng: float
    elevation_m: float


@dataclass(frozen=True)
class HighestPointOptions:
    """
    Search parameters.

    ``step_m`` is the lattice pitch; missing or non-positive values fall back to
    ``DEFAULT_STEP_M``. ``max_samples`` caps the number of elevation probes.
    """

    radius_m: float
    step_m: Optional[float] = None
    max_samples: Optional[int] = None


def find_highest_point_in_radius(
    get_elevation: ElevationFn,
    center_lat: float,
    center_lng: float,
    options: HighestPointOptions,
    bounds: DemBounds | None = None,
) -> Optional[TerrainPoint]:
    """
    Find the highest sample within ``options.radius_m`` of the centre.

    A regular lattice anchored on the centre covers the bounding square of the search circle
    (clipped to ``bounds``) and is scanned row by row from the south-west corner, so the centre
    itself, or the in-bounds point nearest to it, is always a candidate. Points outside the
    circle or the bounds are dropped before ``get_elevation`` is called. When the lattice would
    need more than ``max_samples`` probes, every ``stride``-th line around the centre is kept,
    with the smallest stride that respects the cap. Ties keep the first point found. Returns
    ``None`` for a non-positive radius or when no probe returned data.
    """
    radius_m = options.radius_m
    if radius_m is None or not math.isfinite(radius_m) or radius_m <= 0:
        return None
    if not (math.isfinite(center_lat) and math.isfinite(center_lng)):
        return None

    step_m = options.step_m
    if step_m is None or not math.isfinite(step_m) or step_m <= 0:
        step_m = DEFAULT_STEP_M
    max_samples = options.max_samples
    if max_samples is None or max_samples < 1:
        max_samples = DEFAULT_MAX_SAMPLES

    radius_lat = meters_to_lat_degrees(radius_m)
    radius_lng = meters_to_lng_degrees(radius_m, center_lat)
    min_lat, max_lat = center_lat - radius_lat, center_lat + radius_lat
    min_lng, max_lng = center_lng - radius_lng, center_lng + radius_lng
    if bounds is not None:
        min_lat = max(min_lat, bounds.min_lat)
        max_lat = min(max_lat, bounds.max_lat)
        min_lng = max(min_lng, bounds.min_lng)
        max_lng = min(max_lng, bounds.max_lng)
    if min_lat > max_lat or min_lng > max_lng:
        LOG.debug("Search circle around (%f, %f) misses the DEM bounds", center_lat, center_lng)
        return None

    lat_step = meters_to_lat_degrees(step_m)
    lng_step = meters_to_lng_degrees(step_m, center_lat)
    lat_range = _index_range(center_lat, min_lat, max_lat, lat_step)
    lng_range = _index_range(center_lng, min_lng, max_lng, lng_step)
    stride = _cap_stride(lat_range, lng_range, max_samples)

    best: Optional[TerrainPoint] = None
    center = (center_lat, center_lng)
    for lat in _axis(center_lat, min_lat, max_lat, lat_step, lat_range, stride):
        for lng in _axis(center_lng, min_lng, max_lng, lng_step, lng_range, stride):
            if planar_distance_m(center, (lat, lng)) > radius_m:
                continue
            if bounds is not None and not bounds.contains(lat, lng):
                continue
            elevation = get_elevation(lat, lng)
            if elevation is None:
                continue
            if best is None or elevation > best.elevation_m:
                best = TerrainPoint(lat=lat, lng=lng, elevation_m=elevation)
    return best


def _index_range(center: float, start: float, stop: float, step_deg: float) -> tuple[int, int]:
    """Return the first and last step index, counted from ``center``, inside ``[start, stop]``."""
    first = math.ceil((start - center) / step_deg - _INDEX_EPS)
    last = math.floor((stop - center) / step_deg + _INDEX_EPS)
    return first, last


def _axis_indices(index_range: tuple[int, int], stride: int) -> np.ndarray:
    first, last = index_range
    return np.arange(-(-first // stride), last // stride + 1) * stride


def _axis_count(index_range: tuple[int, int], stride: int) -> int:
    first, last = index_range
    return max(last // stride + first // -stride + 1, 1)


def _cap_stride(lat_range: tuple[int, int], lng_range: tuple[int, int], max_samples: int) -> int:
    """Return the smallest stride whose lattice keeps ``rows * cols <= max_samples``."""
    rows = _axis_count(lat_range, 1)
    cols = _axis_count(lng_range, 1)
    if rows * cols <= max_samples:
        return 1
    stride = max(2, int(math.ceil(math.sqrt(rows * cols / max_samples))))
    while _axis_count(lat_range, stride) * _axis_count(lng_range, stride) > max_samples:
        stride += 1
    LOG.debug(
        "Coarsened search lattice from %dx%d to %dx%d (stride %d, cap %d samples)",
        rows,
        cols,
        _axis_count(lat_range, stride),
        _axis_count(lng_range, stride),
        stride,
        max_samples,
    )
    return stride


def _axis(
    center: float,
    start: float,
    stop: float,
    step_deg: float,
    index_range: tuple[int, int],
    stride: int,
) -> list[float]:
    indices = _axis_indices(index_range, stride)
    if indices.size == 0:
        # No lattice line crosses the clipped span: probe the point nearest the centre.
        return [min(max(center, start), stop)]
    return (center + indices * step_deg).tolist()
