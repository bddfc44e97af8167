"""Utility helpers for local planar geographic computations."""

from __future__ import annotations

import math

# Empirical scale used for every degree <-> meter conversion in the engine.
METERS_PER_DEGREE_LAT = 111_320.0
MILES_TO_METERS = 1609.344


def meters_to_miles(meters: float) -> float:
    return meters / MILES_TO_METERS


def meters_per_degree_lng(lat: float) -> float:
    """Return meters spanned by one degree of longitude at ``lat`` (cosine corrected)."""
    return METERS_PER_DEGREE_LAT * math.cos(math.radians(lat))


def meters_to_lat_degrees(meters: float) -> float:
    return meters / METERS_PER_DEGREE_LAT


def meters_to_lng_degrees(meters: float, lat: float) -> float:
    """
    Convert a distance in meters to degrees of longitude at ``lat``.

    The cosine is floored so queries at the poles stay finite instead of dividing by zero.
    """
    scale = max(meters_per_degree_lng(lat), 1e-9)
    return meters / scale


def planar_distance_m(origin: tuple[float, float], dest: tuple[float, float]) -> float:
    """
    Return the local planar distance in meters between two lat/lng points.

    Longitude is scaled at the mean latitude of the pair. Accurate to well under one percent
    at city or region scale, which is all the terrain engine needs.
    """
    mean_lat = (origin[0] + dest[0]) / 2.0
    dy = (dest[0] - origin[0]) * METERS_PER_DEGREE_LAT
    dx = (dest[1] - origin[1]) * meters_per_degree_lng(mean_lat)
    return math.hypot(dx, dy)
