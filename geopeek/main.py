#!/usr/bin/env python3

import logging
import sys
from contextlib import contextmanager
from typing import Optional

import click
import yaml
from rich.console import Console

from . import __version__
from .config import (
    DEFAULT_CONFIG_PATH,
    RenderConfig,
    load_config,
    parse_dimension,
    parse_simplify,
    terminal_size,
)
from .errors import GeoPeekError
from .grid_renderer import ASCII_GLYPHS, GlyphSet, write_rows
from .pipeline import render_text
from .readers import DEFAULT_POLYLINE_PRECISION, FORMATS, infer_format, read_geometries

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@contextmanager
def spinner(message: str):
    """Spinner on stderr while the pipeline runs; silent when stderr is not a terminal."""
    console = Console(stderr=True)
    if not console.is_terminal:
        yield lambda status: logger.debug(status)
        return
    with console.status(message) as status:
        yield lambda text: status.update(text)


def parse_center(lat: Optional[str], lon: Optional[str]):
    """Numeric --lat/--lon pair as a (lon, lat) center, or None when neither is given."""
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise click.BadParameter("--lat and --lon must be given together to set a center",
                                 param_hint="--lat/--lon")
    try:
        return (float(lon), float(lat))
    except ValueError:
        raise click.BadParameter(f"Center must be numeric, got lat={lat!r} lon={lon!r}",
                                 param_hint="--lat/--lon")


@click.command()
@click.argument('input_path', metavar='INPUT', default='-')
@click.option('--format', '-f', 'fmt', type=click.Choice(FORMATS, case_sensitive=False),
              help='Input format (inferred from the file extension if omitted)')
@click.option('--lat', help='Latitude column name for csv, or center latitude for other formats')
@click.option('--lon', help='Longitude column name for csv, or center longitude for other formats')
@click.option('--precision', type=int, default=DEFAULT_POLYLINE_PRECISION, show_default=True,
              help='Decimal precision of encoded polylines')
@click.option('--rows', '-r', help='Output rows (e.g., 40) or percentage of terminal height (e.g., "50%")')
@click.option('--columns', '-c', help='Output columns (e.g., 80) or percentage of terminal width (e.g., "80%")')
@click.option('--simplify', '-s', help='Proportion of points to remove, 0-1 or percentage (e.g., "5%")')
@click.option('--area', '-a', is_flag=True, help='Fill polygon areas instead of drawing outlines')
@click.option('--radius', type=float, help='Half-width of the extent around --lat/--lon center')
@click.option('--braille', '-b', is_flag=True, help='Draw with Braille dots (2x4 per character)')
@click.option('--ascii', 'ascii_only', is_flag=True, help='Use plain ASCII glyphs')
@click.option('--color', help='Map color (e.g., "green", "#FF5733")')
@click.option('--config', default=DEFAULT_CONFIG_PATH, show_default=True, help='Config file path')
@click.option('--verbose', '-v', is_flag=True, help='Log pipeline details to stderr')
@click.version_option(__version__, prog_name='geopeek')
def main(input_path: str, fmt: Optional[str], lat: Optional[str], lon: Optional[str],
         precision: int, rows: Optional[str], columns: Optional[str], simplify: Optional[str],
         area: bool, radius: Optional[float], braille: bool, ascii_only: bool,
         color: Optional[str], config: str, verbose: bool):
    """Preview geographic vector data in the terminal.

    INPUT: path to a file, or '-' to read standard input (default)

    Formats: geojson, topojson, csv, shp, wkt, polyline, kml

    \b
    Examples:
      geopeek countries.geojson
      geopeek parcels.wkt --area --simplify 5%
      geopeek stops.csv --lat stop_lat --lon stop_lon
      cat roads.geojson | geopeek - --lat 41.88 --lon -87.63 --radius 0.1
    """
    configure_logging(verbose)

    try:
        config_data = load_config(config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        click.echo(f"Error: Could not load config {config}: {e}", err=True)
        sys.exit(1)
    defaults = config_data["render_defaults"]

    try:
        fmt = (fmt or infer_format(input_path)).lower()
    except GeoPeekError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    # --lat/--lon name columns for csv and set an explicit center everywhere else
    if fmt == "csv":
        center = None
        lat_column, lon_column = lat or "lat", lon or "lon"
    else:
        center = parse_center(lat, lon)
        lat_column, lon_column = "lat", "lon"

    try:
        proportion = parse_simplify(simplify if simplify is not None else defaults["simplify"])
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--simplify")

    term_rows, term_cols = terminal_size(int(defaults.get("margin") or 0))
    try:
        render_config = RenderConfig(
            rows=parse_dimension(rows, term_rows) or term_rows,
            cols=parse_dimension(columns, term_cols) or term_cols,
            area=area,
            simplify=proportion,
            aspect_ratio=float(defaults["aspect_ratio"]),
            center=center,
            radius=radius if radius is not None else float(defaults["radius"]),
            braille=braille or bool(defaults["braille"]),
            color=color or defaults.get("color"),
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    glyphs = ASCII_GLYPHS if ascii_only else GlyphSet()
    logger.debug("Render config: %s", render_config)

    try:
        with spinner("Reading file") as progress:
            geometries = read_geometries(input_path, fmt, lat=lat_column, lon=lon_column,
                                         precision=precision)
            output = render_text(geometries, render_config, glyphs=glyphs, progress=progress)
    except GeoPeekError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    write_rows(output, color=render_config.color)


if __name__ == '__main__':
    main()
