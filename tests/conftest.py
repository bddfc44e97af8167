from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parent.parent
ROOT_STR = str(ROOT)
if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)

SRC = ROOT / "src"
SRC_STR = str(SRC)
if SRC_STR not in sys.path:
    sys.path.insert(0, SRC_STR)

from demterrain.data.grid import encode_grid  # noqa: E402
from demterrain.data.metadata import DemBounds, DemMetadata  # noqa: E402

DemFactory = Callable[..., tuple[DemMetadata, bytes]]


@pytest.fixture
def make_dem() -> DemFactory:
    """Return a factory building ``(metadata, buffer)`` from a row-major list of rows."""

    def _make(
        rows: Sequence[Sequence[float]],
        bounds: tuple[float, float, float, float] = (40.0, -74.0, 41.0, -73.0),
        encoding: str = "int16",
        nodata: float = -32768,
    ) -> tuple[DemMetadata, bytes]:
        values = np.asarray(rows, dtype=np.float64)
        min_lat, min_lng, max_lat, max_lng = bounds
        metadata = DemMetadata(
            encoding=encoding,
            width=values.shape[1],
            height=values.shape[0],
            nodata=nodata,
            bounds=DemBounds(min_lat=min_lat, min_lng=min_lng, max_lat=max_lat, max_lng=max_lng),
        )
        return metadata, encode_grid(values, encoding)

    return _make
