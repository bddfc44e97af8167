"""Convert a geographic GeoTIFF into a DEM pack."""

from __future__ import annotations

from pathlib import Path

import typer

from demterrain.data.geotiff import read_geotiff_pack
from demterrain.data.pack import save_dem_pack
from demterrain.errors import DemFormatError

app = typer.Typer(help="Import an EPSG:4326 GeoTIFF as a DEM pack.")


@app.command()
def main(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="Input GeoTIFF."),
    output: Path = typer.Argument(..., help="Output pack directory."),
    encoding: str = typer.Option("int16", "--encoding", help="Cell encoding: int16 or float32."),
) -> None:
    try:
        pack = read_geotiff_pack(source, encoding=encoding)
    except DemFormatError as exc:
        typer.secho(str(exc), fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    save_dem_pack(pack, output)
    meta = pack.metadata
    typer.echo(f"Wrote {meta.width}x{meta.height} {meta.encoding} DEM pack to {output}")


if __name__ == "__main__":
    app()
