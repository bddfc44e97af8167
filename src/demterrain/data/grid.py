"""Decoded, immutable DEM grid with raw cell lookups."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from demterrain.data.metadata import DemMetadata
from demterrain.errors import DemFormatError

Buffer = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class DemGrid:
    """
    Row-major elevation cells decoded once from a little-endian buffer.

    Row 0 is the northern edge (``maxLat``) and column 0 the western edge (``minLng``). The
    nodata sentinel never leaves this class: :meth:`cell` reports it as ``None``.
    """

    metadata: DemMetadata
    values: NDArray[np.generic]
    valid: NDArray[np.bool_]

    @classmethod
    def decode(cls, metadata: DemMetadata, buffer: Buffer) -> "DemGrid":
        """Validate ``buffer`` against ``metadata`` and decode every cell."""
        size = memoryview(buffer).nbytes
        if size != metadata.expected_buffer_size:
            raise DemFormatError(
                f"DEM buffer holds {size} bytes but a {metadata.width}x{metadata.height} "
                f"{metadata.encoding} grid needs {metadata.expected_buffer_size}",
            )

        values = np.frombuffer(buffer, dtype=metadata.dtype).reshape(
            metadata.height,
            metadata.width,
        ).copy()
        values.setflags(write=False)

        valid = values != metadata.nodata
        if metadata.encoding == "float32":
            valid &= np.isfinite(values)
        valid.setflags(write=False)
        return cls(metadata=metadata, values=values, valid=valid)

    @property
    def width(self) -> int:
        return self.metadata.width

    @property
    def height(self) -> int:
        return self.metadata.height

    @property
    def nodata_fraction(self) -> float:
        return 1.0 - float(self.valid.mean())

    def cell(self, row: int, col: int) -> Optional[float]:
        """
        Return the elevation stored at ``(row, col)`` or ``None`` for a nodata cell.

        Indices must already be clamped by the caller; anything outside the grid raises
        ``IndexError`` rather than wrapping around like numpy negative indexing would.
        """
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(
                f"Cell ({row}, {col}) outside {self.height}x{self.width} DEM grid",
            )
        if not self.valid[row, col]:
            return None
        return float(self.values[row, col])


def encode_grid(values: ArrayLike, encoding: str = "int16") -> bytes:
    """Serialise a 2-D elevation array to the little-endian byte layout :class:`DemGrid` reads."""
    dtype = "<i2" if encoding == "int16" else "<f4"
    array = np.asarray(values)
    if array.ndim != 2:
        raise DemFormatError(f"Expected a 2-D elevation array, got shape {array.shape}")
    if encoding == "int16":
        array = np.clip(np.rint(array), -32768, 32767)
    return np.ascontiguousarray(array, dtype=dtype).tobytes()
