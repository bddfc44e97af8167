"""Tests for the bounded highest-point search."""

from __future__ import annotations

from typing import Optional

import pytest

from demterrain.analysis.highest_point import (
    DEFAULT_STEP_M,
    HighestPointOptions,
    TerrainPoint,
    find_highest_point_in_radius,
)
from demterrain.data.metadata import DemBounds
from demterrain.utils import planar_distance_m

CENTER = (47.0, -122.0)


class _Recorder:
    """Elevation function wrapper that counts and records probes."""

    def __init__(self, surface) -> None:
        self.surface = surface
        self.calls: list[tuple[float, float]] = []

    def __call__(self, lat: float, lng: float) -> Optional[float]:
        self.calls.append((lat, lng))
        return self.surface(lat, lng)


def _paraboloid(peak: tuple[float, float], top_m: float, curvature: float = 0.001):
    def surface(lat: float, lng: float) -> float:
        distance = planar_distance_m(peak, (lat, lng))
        return top_m - curvature * distance**2

    return surface


def _never_called(lat: float, lng: float) -> Optional[float]:
    raise AssertionError("elevation function must not be called")


def test_finds_paraboloid_peak_within_one_step() -> None:
    peak = (47.003, -121.998)
    step_m = 50.0

    result = find_highest_point_in_radius(
        _paraboloid(peak, 500.0),
        *CENTER,
        HighestPointOptions(radius_m=1000.0, step_m=step_m),
    )

    assert result is not None
    assert planar_distance_m(peak, (result.lat, result.lng)) <= step_m
    assert 500.0 - 0.001 * step_m**2 <= result.elevation_m <= 500.0


def test_all_nodata_region_returns_none() -> None:
    recorder = _Recorder(lambda lat, lng: None)

    result = find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=500.0, step_m=50.0))

    assert result is None
    assert recorder.calls


@pytest.mark.parametrize("radius", [0.0, -10.0, float("nan")])
def test_non_positive_radius_returns_none_without_probing(radius: float) -> None:
    result = find_highest_point_in_radius(_never_called, *CENTER, HighestPointOptions(radius_m=radius))

    assert result is None


@pytest.mark.parametrize(
    "radius_m,step_m,max_samples",
    [
        (50_000.0, 1.0, 2000),
        (20_000.0, 0.5, 500),
        (5_000.0, 10.0, 1),
        (100_000.0, 1.0, 9),
    ],
)
def test_probe_count_never_exceeds_cap(radius_m: float, step_m: float, max_samples: int) -> None:
    recorder = _Recorder(lambda lat, lng: 10.0)

    result = find_highest_point_in_radius(
        recorder,
        *CENTER,
        HighestPointOptions(radius_m=radius_m, step_m=step_m, max_samples=max_samples),
    )

    assert 0 < len(recorder.calls) <= max_samples
    assert result is not None


def test_probes_stay_inside_circle() -> None:
    recorder = _Recorder(lambda lat, lng: 1.0)
    radius_m = 800.0

    find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=radius_m, step_m=40.0))

    assert all(planar_distance_m(CENTER, call) <= radius_m for call in recorder.calls)


def test_probes_outside_bounds_are_skipped() -> None:
    bounds = DemBounds(min_lat=47.0, min_lng=-122.1, max_lat=47.1, max_lng=-121.9)
    recorder = _Recorder(lambda lat, lng: 1.0)

    find_highest_point_in_radius(
        recorder,
        *CENTER,
        HighestPointOptions(radius_m=1000.0, step_m=50.0),
        bounds,
    )

    assert recorder.calls
    assert all(bounds.contains(lat, lng) for lat, lng in recorder.calls)


def test_center_far_from_bounds_returns_none() -> None:
    bounds = DemBounds(min_lat=10.0, min_lng=10.0, max_lat=11.0, max_lng=11.0)

    result = find_highest_point_in_radius(
        _never_called,
        *CENTER,
        HighestPointOptions(radius_m=1000.0),
        bounds,
    )

    assert result is None


@pytest.mark.parametrize("step", [None, 0.0, -25.0])
def test_missing_or_invalid_step_uses_default(step: Optional[float]) -> None:
    expected = _Recorder(lambda lat, lng: 1.0)
    find_highest_point_in_radius(expected, *CENTER, HighestPointOptions(radius_m=600.0, step_m=DEFAULT_STEP_M))

    recorder = _Recorder(lambda lat, lng: 1.0)
    find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=600.0, step_m=step))

    assert recorder.calls == expected.calls


def test_ties_keep_first_point_scanned() -> None:
    recorder = _Recorder(lambda lat, lng: 42.0)

    result = find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=300.0, step_m=30.0))

    assert result == TerrainPoint(lat=recorder.calls[0][0], lng=recorder.calls[0][1], elevation_m=42.0)


def test_scan_runs_south_to_north_then_west_to_east() -> None:
    recorder = _Recorder(lambda lat, lng: 0.0)

    find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=300.0, step_m=30.0))

    assert recorder.calls == sorted(recorder.calls)


def test_skips_nodata_holes_and_keeps_best_valid_sample() -> None:
    peak = (47.002, -122.0)
    surface = _paraboloid(peak, 300.0)

    def holey(lat: float, lng: float) -> Optional[float]:
        if planar_distance_m(peak, (lat, lng)) < 100.0:
            return None
        return surface(lat, lng)

    result = find_highest_point_in_radius(holey, *CENTER, HighestPointOptions(radius_m=1000.0, step_m=25.0))

    assert result is not None
    assert 100.0 <= planar_distance_m(peak, (result.lat, result.lng)) <= 100.0 + 2 * 25.0


def test_radius_below_half_step_still_probes_centre() -> None:
    recorder = _Recorder(lambda lat, lng: 10.0)

    result = find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=25.0, step_m=60.0))

    assert recorder.calls == [CENTER]
    assert result == TerrainPoint(lat=CENTER[0], lng=CENTER[1], elevation_m=10.0)


@pytest.mark.parametrize("max_samples", range(2, 9))
def test_tiny_cap_over_large_radius_keeps_centre(max_samples: int) -> None:
    recorder = _Recorder(lambda lat, lng: 10.0)

    result = find_highest_point_in_radius(
        recorder,
        *CENTER,
        HighestPointOptions(radius_m=5000.0, step_m=10.0, max_samples=max_samples),
    )

    assert 0 < len(recorder.calls) <= max_samples
    assert CENTER in recorder.calls
    assert result is not None
    assert result.elevation_m == 10.0


def test_lattice_is_anchored_on_centre() -> None:
    recorder = _Recorder(lambda lat, lng: 1.0)

    find_highest_point_in_radius(recorder, *CENTER, HighestPointOptions(radius_m=500.0, step_m=70.0))

    assert CENTER in recorder.calls


def test_narrow_bounds_between_lattice_lines_probe_nearest_point() -> None:
    bounds = DemBounds(min_lat=47.0001, min_lng=-122.1, max_lat=47.0002, max_lng=-121.9)
    recorder = _Recorder(lambda lat, lng: 3.0)

    result = find_highest_point_in_radius(
        recorder,
        *CENTER,
        HighestPointOptions(radius_m=500.0, step_m=60.0),
        bounds,
    )

    assert result is not None
    assert result.lat == pytest.approx(47.0001)
    assert all(bounds.contains(lat, lng) for lat, lng in recorder.calls)
