"""Command-line entry point for demterrain."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from demterrain.analysis.highest_point import HighestPointOptions
from demterrain.config import AppConfig, load_config
from demterrain.data.pack import load_dem_pack
from demterrain.errors import TerrainError
from demterrain.reporting.report import emit_highest, emit_info, emit_sample
from demterrain.service import TerrainService

app = typer.Typer(help="demterrain: offline elevation, slope and highest-point queries on a DEM pack.")

LOG = logging.getLogger(__name__)


@dataclass
class _State:
    dem: Optional[Path]
    config_file: Optional[Path]
    plain: bool
    export_json: Optional[Path]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
    )


@app.callback()
def main(
    ctx: typer.Context,
    dem: Optional[Path] = typer.Option(
        None,
        "--dem",
        "-D",
        help="DEM pack directory holding region.json and elevation.dem.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Optional OmegaConf YAML configuration to load before applying CLI overrides.",
    ),
    plain: bool = typer.Option(False, "--plain", help="Print plain text instead of rich panels."),
    export_json: Optional[Path] = typer.Option(
        None,
        "--export-json",
        help="Optional JSON export path for the query result.",
    ),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, ...)."),
) -> None:
    """Query terrain from an offline DEM pack."""
    _configure_logging(log_level)
    ctx.obj = _State(dem=dem, config_file=config_file, plain=plain, export_json=export_json)


def _load(
    ctx: typer.Context,
    overrides: Optional[dict[str, object]] = None,
) -> tuple[AppConfig, TerrainService]:
    state: _State = ctx.obj
    overrides_raw = {
        "dem.path": state.dem,
        "output.export_json": state.export_json,
        "output.rich_table": False if state.plain else None,
        **(overrides or {}),
    }
    try:
        config = load_config(
            config_path=state.config_file,
            overrides={
                key: (str(value) if isinstance(value, Path) else value)
                for key, value in overrides_raw.items()
                if value is not None
            },
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if config.dem.path is None:
        raise typer.BadParameter("A DEM pack must be supplied via --dem or dem.path in the config file")

    try:
        pack = load_dem_pack(config.dem.path)
        service = TerrainService.from_pack(pack, settings=config.terrain)
    except TerrainError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    return config, service


@app.command()
def elevation(
    ctx: typer.Context,
    latitude: float = typer.Argument(..., help="Latitude in decimal degrees."),
    longitude: float = typer.Argument(..., help="Longitude in decimal degrees."),
) -> None:
    """Print interpolated elevation at a point."""
    config, service = _load(ctx)
    emit_sample("elevation", latitude, longitude, service.get_elevation(latitude, longitude), config)


@app.command()
def slope(
    ctx: typer.Context,
    latitude: float = typer.Argument(..., help="Latitude in decimal degrees."),
    longitude: float = typer.Argument(..., help="Longitude in decimal degrees."),
) -> None:
    """Print slope (percent grade) at a point."""
    config, service = _load(ctx)
    emit_sample("slope", latitude, longitude, service.get_slope(latitude, longitude), config)


@app.command()
def highest(
    ctx: typer.Context,
    latitude: float = typer.Argument(..., help="Search centre latitude in decimal degrees."),
    longitude: float = typer.Argument(..., help="Search centre longitude in decimal degrees."),
    radius: Optional[float] = typer.Option(None, "--radius", "-r", help="Search radius in meters."),
    step: Optional[float] = typer.Option(None, "--step", "-s", help="Sampling pitch in meters."),
    max_samples: Optional[int] = typer.Option(
        None,
        "--max-samples",
        help="Hard cap on elevation probes.",
    ),
) -> None:
    """Find the highest point within a radius."""
    config, service = _load(
        ctx,
        {
            "search.radius_m": radius,
            "search.step_m": step,
            "search.max_samples": max_samples,
        },
    )
    options = HighestPointOptions(
        radius_m=config.search.radius_m,
        step_m=config.search.step_m,
        max_samples=config.search.max_samples,
    )
    LOG.info("Searching %.0fm around %.5f, %.5f", options.radius_m, latitude, longitude)
    result = service.find_highest_point_within(latitude, longitude, options)
    emit_highest(latitude, longitude, options.radius_m, result, config)


@app.command()
def info(ctx: typer.Context) -> None:
    """Describe the DEM pack and its derived resolution parameters."""
    config, service = _load(ctx)
    emit_info(service, config)


if __name__ == "__main__":  # pragma: no cover
    app()
