"""Generate a synthetic DEM pack for testing without external downloads."""

from __future__ import annotations

from pathlib import Path

import typer

from demterrain.data.pack import generate_synthetic_dem, save_dem_pack

PROJECT_ROOT = Path(__file__).resolve().parent.parent

app = typer.Typer(help="Create synthetic DEM packs for tests or demos.")


@app.command()
def main(
    output: Path = typer.Argument(
        PROJECT_ROOT / "data" / "toy",
        help="Output pack directory.",
    ),
    rows: int = typer.Option(101, "--rows", min=2, help="Grid rows."),
    cols: int = typer.Option(101, "--cols", min=2, help="Grid columns."),
) -> None:
    pack = generate_synthetic_dem(size=(rows, cols))
    save_dem_pack(pack, output)
    typer.echo(f"Synthetic DEM pack written to {output}")


if __name__ == "__main__":
    app()
