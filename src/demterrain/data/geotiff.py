"""Import geographic GeoTIFF rasters as DEM packs."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import rasterio
from rasterio.transform import xy

from demterrain.data.grid import encode_grid
from demterrain.data.metadata import DEFAULT_NODATA, DemBounds, DemMetadata
from demterrain.data.pack import DemPack
from demterrain.errors import DemFormatError

LOG = logging.getLogger(__name__)

FLOAT32_NODATA = -9999.0


def read_geotiff_pack(path: Path, encoding: str = "int16") -> DemPack:
    """
    Read band 1 of a north-up EPSG:4326 GeoTIFF into a :class:`DemPack`.

    DEM packs place grid corners on the bounds, so the pack bounds span pixel centres rather
    than pixel edges. Raster nodata and NaN cells become the pack's nodata value; int16 packs
    round to whole meters.
    """
    if encoding not in ("int16", "float32"):
        raise DemFormatError(f"Unsupported DEM encoding '{encoding}'")

    with rasterio.open(path) as dataset:
        if dataset.crs is None or not dataset.crs.is_geographic:
            raise DemFormatError(
                f"{path} uses CRS {dataset.crs}; reproject to EPSG:4326 before importing.",
            )
        transform = dataset.transform
        if transform.b != 0 or transform.d != 0 or transform.a <= 0 or transform.e >= 0:
            raise DemFormatError(f"{path} is not a north-up raster (transform {tuple(transform)[:6]})")

        band = dataset.read(1, masked=True)
        height, width = band.shape
        xs, ys = xy(transform, [0, height - 1], [0, width - 1], offset="center")

    values = np.ma.filled(band.astype(np.float64), np.nan)
    missing = ~np.isfinite(values)
    nodata = DEFAULT_NODATA if encoding == "int16" else FLOAT32_NODATA
    values = np.where(missing, nodata, values)

    try:
        bounds = DemBounds(
            min_lat=float(ys[1]),
            min_lng=float(xs[0]),
            max_lat=float(ys[0]),
            max_lng=float(xs[1]),
        )
    except ValueError as exc:
        raise DemFormatError(f"{path} is too small to form a DEM grid: {exc}") from exc

    metadata = DemMetadata(
        encoding=encoding,
        width=width,
        height=height,
        nodata=nodata,
        bounds=bounds,
    )
    LOG.info(
        "Imported %s: %dx%d cells, %.1f%% nodata",
        path,
        width,
        height,
        float(missing.mean()) * 100.0,
    )
    return DemPack(metadata=metadata, data=encode_grid(values, encoding))
