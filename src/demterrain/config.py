"""Configuration models and helpers for demterrain."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, cast

from omegaconf import OmegaConf
from pydantic import BaseModel, Field, field_validator, model_validator


def data_root() -> Path:
    """Return the directory relative DEM pack paths are resolved against."""
    return Path(os.environ.get("DATA_ROOT", "data"))


class TerrainSettings(BaseModel):
    """Tuning constants of the terrain engine."""

    slope_min_sample_m: float = Field(
        default=30.0, gt=0.0, description="Lower clamp of the slope probe distance."
    )
    slope_max_sample_m: float = Field(
        default=200.0, gt=0.0, description="Upper clamp of the slope probe distance."
    )
    default_step_m: float = Field(
        default=60.0, gt=0.0, description="Search lattice pitch when the caller gives none."
    )
    max_samples: int = Field(
        default=5000, ge=1, description="Hard cap on elevation probes per highest-point search."
    )

    @model_validator(mode="after")
    def check_slope_clamp(self) -> "TerrainSettings":
        if self.slope_min_sample_m > self.slope_max_sample_m:
            raise ValueError("slope_min_sample_m must not exceed slope_max_sample_m")
        return self


class DemConfig(BaseModel):
    """Location of the DEM pack to load."""

    path: Optional[Path] = Field(default=None, description="Directory holding region.json and elevation.dem.")


class SearchConfig(BaseModel):
    """
    Defaults for highest-point queries issued from the command line.

    Values are passed through unchecked: a non-positive step or cap falls back to the
    service defaults and a non-positive radius yields an empty result.
    """

    radius_m: float = Field(default=1000.0)
    step_m: Optional[float] = Field(default=None)
    max_samples: Optional[int] = Field(default=None)


class OutputConfig(BaseModel):
    """Presentation preferences."""

    rich_table: bool = Field(default=True)
    export_json: Optional[Path] = Field(default=None)

    @field_validator("export_json")
    @classmethod
    def ensure_export_dir(cls, value: Optional[Path]) -> Optional[Path]:
        """Ensure the export directory exists."""
        if value is not None:
            value.parent.mkdir(parents=True, exist_ok=True)
        return value


class AppConfig(BaseModel):
    """Top-level configuration for the demterrain CLI."""

    dem: DemConfig = Field(default_factory=DemConfig)
    terrain: TerrainSettings = Field(default_factory=TerrainSettings)
    search: SearchConfig = Field(default_factory=SearchConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AppConfig:
    """
    Build AppConfig from an optional YAML file and keyword overrides.

    Override keys use dotted notation matching the nested configuration
    (e.g. ``search.radius_m=500``). ``None`` values are ignored.
    """
    merged: Dict[str, Any] = AppConfig().model_dump()

    if config_path:
        file_conf = cast(Dict[str, Any], OmegaConf.to_container(OmegaConf.load(config_path), resolve=True))
        merged = _deep_merge(merged, file_conf or {})

    if overrides:
        for dotted_key, value in overrides.items():
            if value is None:
                continue
            _apply_override(merged, dotted_key, value)

    config = AppConfig.model_validate(merged)
    return _resolve_relative_paths(config)


def _deep_merge(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in extra.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = _deep_merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _apply_override(target: Dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = dotted_key.split(".")
    current = target
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value


def _resolve_relative_paths(config: AppConfig) -> AppConfig:
    dem_path = config.dem.path
    if dem_path is not None and not dem_path.is_absolute():
        dem_update = config.dem.model_copy(update={"path": data_root() / dem_path})
        return config.model_copy(update={"dem": dem_update})
    return config
