"""
demterrain package initialisation.

Exposes an offline terrain engine: DEM decoding, elevation interpolation,
slope estimation and bounded highest-point search.
"""

from importlib import metadata

from demterrain.service import TerrainService


def get_version() -> str:
    """Return the installed package version, falling back to source version during development."""
    try:
        return metadata.version("demterrain")
    except metadata.PackageNotFoundError:  # pragma: no cover - only occurs during dev
        return "0.1.0"


__all__ = ["TerrainService", "get_version"]
