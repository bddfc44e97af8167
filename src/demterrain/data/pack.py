"""DEM pack loading, saving and synthetic generation."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import numpy as np
from pydantic import ValidationError

from demterrain.data.grid import encode_grid
from demterrain.data.metadata import DEFAULT_NODATA, DemBounds, DemMetadata
from demterrain.errors import DemFormatError, DemPackNotFoundError

LOG = logging.getLogger(__name__)

METADATA_FILENAME = "region.json"
DEM_FILENAME = "elevation.dem"


@dataclass(frozen=True)
class DemPack:
    """DEM metadata together with its raw little-endian cells."""

    metadata: DemMetadata
    data: bytes


def load_dem_pack(path: Path) -> DemPack:
    """
    Read a DEM pack directory.

    ``region.json`` may hold the DEM record under a ``"dem"`` key (a full region document)
    or be the DEM record itself.
    """
    path = Path(path)
    meta_path = path / METADATA_FILENAME
    dem_path = path / DEM_FILENAME
    for required in (meta_path, dem_path):
        if not required.exists():
            raise DemPackNotFoundError(
                required,
                f"DEM pack file {required} does not exist. Generate one with "
                "scripts/make_synthetic_dem.py or scripts/import_geotiff.py.",
            )

    try:
        raw = json.loads(meta_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DemFormatError(f"{meta_path} is not valid JSON: {exc}") from exc
    record = raw.get("dem", raw) if isinstance(raw, dict) else raw
    try:
        metadata = DemMetadata.model_validate(record)
    except ValidationError as exc:
        raise DemFormatError(f"Invalid DEM metadata in {meta_path}: {exc}") from exc

    data = dem_path.read_bytes()
    LOG.debug("Read %d bytes of %s DEM cells from %s", len(data), metadata.encoding, dem_path)
    return DemPack(metadata=metadata, data=data)


def save_dem_pack(pack: DemPack, path: Path) -> None:
    """Persist a pack; each file is written to a temporary sibling and renamed into place."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    document = json.dumps({"dem": pack.metadata.to_json_dict()}, indent=2)
    _write_atomic(path / METADATA_FILENAME, document.encode("utf-8"))
    _write_atomic(path / DEM_FILENAME, pack.data)


def _write_atomic(target: Path, payload: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def generate_synthetic_dem(
    bounds: Tuple[float, float, float, float] = (46.90, -123.05, 47.00, -122.95),
    size: Tuple[int, int] = (101, 101),
    base_height: float = 50.0,
    peak_height: float = 400.0,
) -> DemPack:
    """
    Create a synthetic int16 DEM with a gentle north-south slope and a single peak.

    ``bounds`` is ``(min_lat, min_lng, max_lat, max_lng)`` and ``size`` is ``(rows, cols)``.
    The peak sits at 40% of the way from the northern edge, centred east-west.
    """
    rows, cols = size
    y = np.linspace(0, 1, rows)
    x = np.linspace(0, 1, cols)
    xx, yy = np.meshgrid(x, y)
    slope = base_height + 20 * yy
    center = np.exp(-((xx - 0.5) ** 2 + (yy - 0.4) ** 2) * 12.0)
    elevations = slope + center * (peak_height - base_height)

    min_lat, min_lng, max_lat, max_lng = bounds
    metadata = DemMetadata(
        encoding="int16",
        width=cols,
        height=rows,
        nodata=DEFAULT_NODATA,
        bounds=DemBounds(min_lat=min_lat, min_lng=min_lng, max_lat=max_lat, max_lng=max_lng),
    )
    return DemPack(metadata=metadata, data=encode_grid(elevations, "int16"))
