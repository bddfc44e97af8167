"""DEM metadata records as stored alongside raw grid buffers."""

from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

DEFAULT_NODATA = -32768
INT16_MIN = -32768
INT16_MAX = 32767

_DTYPES = {"int16": "<i2", "float32": "<f4"}


class DemBounds(BaseModel):
    """Geographic rectangle covered by a DEM grid, in decimal degrees."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    min_lat: float = Field(..., alias="minLat", ge=-90.0, le=90.0)
    min_lng: float = Field(..., alias="minLng", ge=-180.0, le=180.0)
    max_lat: float = Field(..., alias="maxLat", ge=-90.0, le=90.0)
    max_lng: float = Field(..., alias="maxLng", ge=-180.0, le=180.0)

    @model_validator(mode="after")
    def check_ordering(self) -> "DemBounds":
        if not self.min_lat < self.max_lat:
            raise ValueError(f"minLat ({self.min_lat}) must be below maxLat ({self.max_lat})")
        if not self.min_lng < self.max_lng:
            raise ValueError(f"minLng ({self.min_lng}) must be below maxLng ({self.max_lng})")
        return self

    @property
    def center(self) -> tuple[float, float]:
        return (self.min_lat + self.max_lat) / 2.0, (self.min_lng + self.max_lng) / 2.0

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng


class DemMetadata(BaseModel):
    """
    Version 1 grid metadata.

    Mirrors the JSON record written next to the raw cells: camelCase keys are accepted on input
    and produced by :meth:`to_json_dict`.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    format: Literal["grid"] = "grid"
    units: Literal["meters"] = "meters"
    encoding: Literal["int16", "float32"] = "int16"
    width: int = Field(..., gt=0, description="Grid columns, west to east.")
    height: int = Field(..., gt=0, description="Grid rows, north to south.")
    nodata: float = Field(default=DEFAULT_NODATA, description="Sentinel cell value for missing data.")
    bounds: DemBounds

    @model_validator(mode="after")
    def check_nodata_fits_encoding(self) -> "DemMetadata":
        if self.encoding == "int16":
            if not float(self.nodata).is_integer() or not INT16_MIN <= self.nodata <= INT16_MAX:
                raise ValueError(f"nodata {self.nodata} is not an int16 value")
        return self

    @field_serializer("nodata")
    def serialize_nodata(self, value: float) -> float | int:
        if self.encoding == "int16":
            return int(value)
        return value

    @property
    def dtype(self) -> str:
        """Return the little-endian numpy dtype string for the cell encoding."""
        return _DTYPES[self.encoding]

    @property
    def bytes_per_cell(self) -> int:
        return 2 if self.encoding == "int16" else 4

    @property
    def expected_buffer_size(self) -> int:
        return self.width * self.height * self.bytes_per_cell

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
