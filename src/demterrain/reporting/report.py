"""Result presentation utilities."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from demterrain.analysis.highest_point import TerrainPoint
from demterrain.config import AppConfig
from demterrain.service import TerrainService
from demterrain.utils import meters_to_miles, planar_distance_m

LOG = logging.getLogger(__name__)

_UNITS = {"elevation": "m", "slope": "%"}


def emit_sample(
    kind: str,
    lat: float,
    lng: float,
    value: Optional[float],
    config: AppConfig,
) -> None:
    """Report a single elevation or slope query."""
    unit = _UNITS[kind]
    rendered = f"{value:.1f} {unit}" if value is not None else "no data"
    lines = [f"Coords: {_format_location(lat, lng)}", f"{kind.capitalize()}: {rendered}"]
    _emit(lines, title=kind.capitalize(), config=config, found=value is not None)
    _maybe_export(
        {"query": {"lat": lat, "lng": lng}, kind: value},
        config,
    )


def emit_highest(
    lat: float,
    lng: float,
    radius_m: float,
    result: Optional[TerrainPoint],
    config: AppConfig,
) -> None:
    """Report the outcome of a highest-point search."""
    lines = [
        f"Centre: {_format_location(lat, lng)}",
        f"Radius: {radius_m:.0f} m ({meters_to_miles(radius_m):.2f} mi)",
    ]
    payload: Dict[str, Any] = {"query": {"lat": lat, "lng": lng, "radius_m": radius_m}, "highest": None}
    if result is not None:
        distance = planar_distance_m((lat, lng), (result.lat, result.lng))
        lines.extend(
            [
                f"Peak: {_format_location(result.lat, result.lng)} ({result.elevation_m:.1f} m)",
                f"Distance: {distance:.0f} m ({meters_to_miles(distance):.2f} mi)",
            ],
        )
        payload["highest"] = {
            "lat": result.lat,
            "lng": result.lng,
            "elevationM": result.elevation_m,
            "distanceM": distance,
        }
    else:
        lines.append("Peak: no data within radius")
    _emit(lines, title="Highest point", config=config, found=result is not None)
    _maybe_export(payload, config)


def emit_info(service: TerrainService, config: AppConfig) -> None:
    """Report DEM metadata and the parameters derived from it."""
    meta = service.metadata
    bounds = meta.bounds
    rows = [
        ("Grid", f"{meta.width} x {meta.height} {meta.encoding}"),
        ("Nodata", f"{meta.nodata:g} ({service.grid.nodata_fraction * 100.0:.1f}% of cells)"),
        ("Bounds", f"{bounds.min_lat:.5f}..{bounds.max_lat:.5f}, {bounds.min_lng:.5f}..{bounds.max_lng:.5f}"),
        ("Cell size", f"{service.resolution.cell_height_m:.1f} m x {service.resolution.cell_width_m:.1f} m"),
        ("Slope sample", f"{service.slope_sample_distance_m:.1f} m"),
        ("Default step", f"{service.default_step_m:.1f} m"),
    ]
    if config.output.rich_table:
        table = Table(title="DEM", show_header=False, border_style="cyan")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for field, value in rows:
            table.add_row(field, value)
        Console().print(table)
    else:
        for field, value in rows:
            typer.echo(f"{field}: {value}")
    _maybe_export({"dem": meta.to_json_dict(), "slopeSampleDistanceM": service.slope_sample_distance_m}, config)


def _emit(lines: list[str], title: str, config: AppConfig, found: bool) -> None:
    if not config.output.rich_table:
        for line in lines:
            typer.echo(line)
        return
    console = Console()
    console.print(
        Panel(
            Text("\n".join(lines)),
            title=title,
            border_style="cyan" if found else "yellow",
            expand=False,
        ),
    )


def _maybe_export(payload: Dict[str, Any], config: AppConfig) -> None:
    path = config.output.export_json
    if path is None:
        return
    _export_json(payload, path)


def _export_json(payload: Dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    LOG.info("Exported JSON result to %s", path)


def _format_location(lat: float, lng: float) -> str:
    return f"{lat:.5f}, {lng:.5f}"
