"""Terrain service: elevation, slope and highest-point queries over one DEM."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Optional, Union

from demterrain.analysis.highest_point import (
    HighestPointOptions,
    TerrainPoint,
    find_highest_point_in_radius,
)
from demterrain.analysis.sampler import ElevationSampler, GridResolution, derive_resolution
from demterrain.analysis.slope import compute_slope_percent, derive_sample_distance
from demterrain.config import TerrainSettings
from demterrain.data.grid import Buffer, DemGrid
from demterrain.data.metadata import DemBounds, DemMetadata

if TYPE_CHECKING:
    from demterrain.data.pack import DemPack

LOG = logging.getLogger(__name__)


class TerrainService:
    """
    Answer terrain queries against a single decoded DEM.

    The grid is decoded and the resolution-dependent parameters are derived once, here.
    Every query afterwards is a pure read: missing data comes back as ``None`` and no query
    raises for coordinates outside the DEM.
    """

    def __init__(
        self,
        metadata: Union[DemMetadata, Mapping[str, Any]],
        buffer: Buffer,
        settings: Optional[TerrainSettings] = None,
    ) -> None:
        if not isinstance(metadata, DemMetadata):
            metadata = DemMetadata.model_validate(metadata)
        self.metadata = metadata
        self.settings = settings or TerrainSettings()
        self.grid = DemGrid.decode(metadata, buffer)
        self.resolution: GridResolution = derive_resolution(metadata)
        self.slope_sample_distance_m = derive_sample_distance(
            self.resolution,
            self.settings.slope_min_sample_m,
            self.settings.slope_max_sample_m,
        )
        self.default_step_m = max(self.resolution.cell_size_m, self.settings.default_step_m)
        self._sampler = ElevationSampler(self.grid)

        LOG.info(
            "Decoded %dx%d %s DEM at %.1fm resolution (%.1f%% nodata)",
            metadata.width,
            metadata.height,
            metadata.encoding,
            self.resolution.cell_size_m,
            self.grid.nodata_fraction * 100.0,
        )
        LOG.debug(
            "Slope sample distance %.1fm, default search step %.1fm",
            self.slope_sample_distance_m,
            self.default_step_m,
        )

    @classmethod
    def from_pack(cls, pack: "DemPack", settings: Optional[TerrainSettings] = None) -> "TerrainService":
        return cls(pack.metadata, pack.data, settings=settings)

    @property
    def bounds(self) -> DemBounds:
        return self.metadata.bounds

    def get_elevation(self, lat: float, lng: float) -> Optional[float]:
        """Return elevation in meters at a point, or ``None`` without data."""
        return self._sampler.get_elevation(lat, lng)

    def get_slope(self, lat: float, lng: float) -> Optional[float]:
        """Return slope at a point as percent grade, or ``None`` without data."""
        return compute_slope_percent(
            self._sampler.get_elevation,
            lat,
            lng,
            self.slope_sample_distance_m,
        )

    def find_highest_point_within(
        self,
        lat: float,
        lng: float,
        options: HighestPointOptions,
    ) -> Optional[TerrainPoint]:
        """
        Find the highest point within ``options.radius_m`` of ``(lat, lng)`` on this DEM.

        A missing step is replaced by the DEM cell size (never finer than the configured
        default) and a missing cap by the configured ``max_samples``.
        """
        step_m = options.step_m
        if step_m is None or not math.isfinite(step_m) or step_m <= 0:
            step_m = self.default_step_m
        max_samples = options.max_samples
        if max_samples is None or max_samples < 1:
            max_samples = self.settings.max_samples
        return find_highest_point_in_radius(
            self._sampler.get_elevation,
            lat,
            lng,
            replace(options, step_m=step_m, max_samples=max_samples),
            self.bounds,
        )
