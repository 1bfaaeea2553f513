"""
Format readers.

Each reader turns one input (a path, or "-" for standard input) into a lazy
sequence of model geometries. Reader-specific failures are reported as
ParseError; structural problems in otherwise well-formed input surface as
InvalidGeometry from the model constructors.
"""

import csv
import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from shapely import wkt
from shapely.errors import ShapelyError

from .errors import ParseError
from .geometry import (
    Geometry,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    from_shapely,
)

logger = logging.getLogger(__name__)

FORMATS = ("geojson", "topojson", "csv", "shp", "wkt", "polyline", "kml")

EXTENSIONS = {
    ".geojson": "geojson",
    ".json": "geojson",
    ".topojson": "topojson",
    ".csv": "csv",
    ".shp": "shp",
    ".wkt": "wkt",
    ".txt": "wkt",
    ".polyline": "polyline",
    ".kml": "kml",
}

DEFAULT_POLYLINE_PRECISION = 5


def infer_format(path: str) -> str:
    """Guess the input format from the file extension; standard input defaults to GeoJSON."""
    if path == "-":
        return "geojson"
    suffix = Path(path).suffix.lower()
    if suffix not in EXTENSIONS:
        raise ParseError(f"Cannot infer format from '{path}', pass --format explicitly")
    return EXTENSIONS[suffix]


@contextmanager
def open_text(path: str):
    if path == "-":
        try:
            yield sys.stdin
        except UnicodeDecodeError as e:
            raise ParseError(f"Standard input is not UTF-8 text: {e.reason} at byte {e.start}")
        return
    try:
        f = open(path, "r", encoding="utf-8")
    except OSError as e:
        raise ParseError(f"Cannot open {path}: {e.strerror}")
    with f:
        try:
            yield f
        except UnicodeDecodeError as e:
            raise ParseError(f"{path} is not UTF-8 text: {e.reason} at byte {e.start}")


# GeoJSON

def geojson_geometry(obj: Dict[str, Any]) -> Iterator[Geometry]:
    """Convert one GeoJSON geometry object; collections are flattened."""
    if not isinstance(obj, dict):
        raise ParseError(f"Geometry must be an object, got {type(obj).__name__}", "geojson")
    kind = obj.get("type")
    if kind == "GeometryCollection":
        children = obj.get("geometries") or []
        if not isinstance(children, list):
            raise ParseError("GeometryCollection geometries must be an array", "geojson")
        for child in children:
            yield from geojson_geometry(child)
        return

    coords = obj.get("coordinates")
    if coords is None:
        raise ParseError(f"{kind} geometry has no coordinates", "geojson")
    if not isinstance(coords, list):
        raise ParseError(f"{kind} coordinates must be an array, got {type(coords).__name__}", "geojson")
    if kind == "Point":
        if coords:
            yield Point(coords)
    elif kind == "LineString":
        yield LineString(coords)
    elif kind == "Polygon":
        if coords:
            yield Polygon(coords[0], tuple(coords[1:]))
    elif kind == "MultiPoint":
        if coords:
            yield MultiPoint(coords)
    elif kind == "MultiLineString":
        if coords:
            yield MultiLineString(coords)
    elif kind == "MultiPolygon":
        if coords:
            yield MultiPolygon(coords)
    else:
        raise ParseError(f"Unknown geometry type: {kind!r}", "geojson")


def _feature_geometry(feature: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(feature, dict):
        raise ParseError(f"Feature must be an object, got {type(feature).__name__}", "geojson")
    return feature.get("geometry")


def read_geojson(path: str) -> Iterator[Geometry]:
    with open_text(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON: {e}", "geojson")

    if not isinstance(data, dict):
        raise ParseError("Top-level value must be an object", "geojson")

    kind = data.get("type")
    if kind == "FeatureCollection":
        features = data.get("features") or []
        if not isinstance(features, list):
            raise ParseError("FeatureCollection features must be an array", "geojson")
        geometries = (_feature_geometry(feature) for feature in features)
    elif kind == "Feature":
        geometries = iter([_feature_geometry(data)])
    else:
        geometries = iter([data])

    for geometry in geometries:
        # Features without geometry carry nothing to draw
        if geometry is None:
            continue
        yield from geojson_geometry(geometry)


# WKT

def read_wkt(path: str) -> Iterator[Geometry]:
    """Read one geometry per line, or a single geometry spread over several lines."""
    with open_text(path) as f:
        text = f.read()

    lines = [(lineno, line) for lineno, line in enumerate(text.splitlines(), 1) if line.strip()]
    if not lines:
        return

    # A file whose first line is not a complete geometry holds one multi-line geometry
    try:
        first = wkt.loads(lines[0][1])
    except ShapelyError:
        try:
            shapes = [wkt.loads(text)]
        except ShapelyError as e:
            raise ParseError(str(e), "wkt")
    else:
        shapes = [first]
        for lineno, line in lines[1:]:
            try:
                shapes.append(wkt.loads(line))
            except ShapelyError as e:
                raise ParseError(f"line {lineno}: {e}", "wkt")

    for shape in shapes:
        yield from from_shapely(shape)


# CSV

def read_csv(path: str, lat: str = "lat", lon: str = "lon") -> Iterator[Geometry]:
    with open_text(path) as f:
        reader = csv.DictReader(f)
        fields = reader.fieldnames or []
        missing = [name for name in (lat, lon) if name not in fields]
        if missing:
            raise ParseError(f"Missing column(s): {', '.join(missing)}", "csv")

        for lineno, row in enumerate(reader, 2):
            lat_value, lon_value = (row.get(lat) or "").strip(), (row.get(lon) or "").strip()
            if not lat_value or not lon_value:
                logger.debug("Skipping CSV line %d with blank coordinates", lineno)
                continue
            try:
                yield Point((float(lon_value), float(lat_value)))
            except ValueError:
                raise ParseError(f"line {lineno}: non-numeric coordinates {lon_value!r}, {lat_value!r}", "csv")


# Encoded polylines

def read_polyline(path: str, precision: int = DEFAULT_POLYLINE_PRECISION) -> Iterator[Geometry]:
    try:
        import polyline
    except ImportError:
        raise ParseError("reading encoded polylines requires the 'polyline' package "
                         "(pip install geopeek[formats])", "polyline")

    with open_text(path) as f:
        lines = f.read().splitlines()

    for lineno, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            decoded = polyline.decode(line, precision)
        except (ValueError, IndexError, TypeError) as e:
            raise ParseError(f"line {lineno}: {e}", "polyline")
        coords = [(lng, lat) for lat, lng in decoded]
        if len(coords) == 1:
            yield Point(coords[0])
        elif coords:
            yield LineString(coords)


# Shapefile, KML, TopoJSON

def read_with_geopandas(path: str, fmt: str) -> Iterator[Geometry]:
    if path == "-":
        raise ParseError("cannot be read from standard input, pass a file path", fmt)
    try:
        import geopandas as gpd
    except ImportError:
        raise ParseError(f"reading {fmt} requires geopandas (pip install geopeek[formats])", fmt)

    try:
        if fmt == "kml":
            gdf = gpd.read_file(path, driver="KML")
        else:
            gdf = gpd.read_file(path)
    except Exception as e:
        raise ParseError(str(e), fmt)

    for shape in gdf.geometry:
        yield from from_shapely(shape)


def read_geometries(path: str, fmt: Optional[str] = None, lat: str = "lat", lon: str = "lon",
                    precision: int = DEFAULT_POLYLINE_PRECISION) -> Iterator[Geometry]:
    """Read geometries from ``path`` ("-" for stdin) in the given or inferred format."""
    fmt = (fmt or infer_format(path)).lower()
    logger.debug("Reading %s as %s", path, fmt)

    if fmt == "geojson":
        return read_geojson(path)
    if fmt == "wkt":
        return read_wkt(path)
    if fmt == "csv":
        return read_csv(path, lat=lat, lon=lon)
    if fmt == "polyline":
        return read_polyline(path, precision=precision)
    if fmt in ("shp", "kml", "topojson"):
        return read_with_geopandas(path, fmt)
    raise ParseError(f"Unknown format '{fmt}', expected one of: {', '.join(FORMATS)}")
