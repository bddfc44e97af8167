"""Error hierarchy for terrain operations.

Only construction and loading raise. Queries report missing data as ``None``.
"""

from __future__ import annotations

from pathlib import Path


class TerrainError(Exception):
    """Base error for terrain operations."""


class DemFormatError(TerrainError, ValueError):
    """DEM metadata and raw buffer disagree, or the buffer cannot be decoded."""


class DemPackNotFoundError(TerrainError):
    """Raised when a DEM pack directory or one of its files cannot be located."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)
