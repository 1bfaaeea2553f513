"""
Uniform in-memory geometry model.

Every format reader normalizes its input into the six variants defined here.
Downstream stages (simplifier, spatial index, rasterizer) never branch on the
variant themselves; they go through ``members``/``iter_parts``/``iter_polygons``
so that a new variant only has to be taught to ``members``.
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from .errors import InvalidGeometry

Coordinate = Tuple[float, float]
Coords = Tuple[Coordinate, ...]

# Minimum number of coordinates for each kind of part
MIN_LINE_COORDS = 2
MIN_RING_COORDS = 4
MIN_RING_DISTINCT = 3


def _coerce_coordinate(value) -> Coordinate:
    try:
        x, y = float(value[0]), float(value[1])
    except (TypeError, ValueError, IndexError):
        raise InvalidGeometry(f"Invalid coordinate: {value!r}")
    if not (math.isfinite(x) and math.isfinite(y)):
        raise InvalidGeometry(f"Non-finite coordinate: {value!r}")
    return (x, y)


def _coerce_coords(values: Iterable) -> Coords:
    try:
        items = list(values)
    except TypeError:
        raise InvalidGeometry(f"Expected a sequence of coordinates, got {values!r}")
    return tuple(_coerce_coordinate(v) for v in items)


def validate_ring(ring: Coords) -> Coords:
    """Check the closure and vertex count of a polygon ring."""
    if len(ring) < MIN_RING_COORDS:
        raise InvalidGeometry(
            f"Ring needs at least {MIN_RING_COORDS} coordinates, got {len(ring)}"
        )
    if ring[0] != ring[-1]:
        raise InvalidGeometry(f"Ring is not closed: {ring[0]} != {ring[-1]}")
    if len(set(ring)) < MIN_RING_DISTINCT:
        raise InvalidGeometry(
            f"Ring needs at least {MIN_RING_DISTINCT} distinct coordinates"
        )
    return ring


@dataclass(frozen=True)
class Point:
    coord: Coordinate

    def __post_init__(self):
        object.__setattr__(self, "coord", _coerce_coordinate(self.coord))


@dataclass(frozen=True)
class LineString:
    coords: Coords

    def __post_init__(self):
        coords = _coerce_coords(self.coords)
        if len(coords) < MIN_LINE_COORDS:
            raise InvalidGeometry(
                f"LineString needs at least {MIN_LINE_COORDS} coordinates, got {len(coords)}"
            )
        object.__setattr__(self, "coords", coords)


@dataclass(frozen=True)
class Polygon:
    exterior: Coords
    holes: Tuple[Coords, ...] = field(default=())

    def __post_init__(self):
        object.__setattr__(self, "exterior", validate_ring(_coerce_coords(self.exterior)))
        object.__setattr__(
            self, "holes", tuple(validate_ring(_coerce_coords(h)) for h in self.holes)
        )

    @property
    def rings(self) -> Tuple[Coords, ...]:
        return (self.exterior,) + self.holes


def _coerce_members(values: Iterable, kind, build) -> tuple:
    try:
        items = list(values)
    except TypeError:
        raise InvalidGeometry(f"Expected a sequence of {kind.__name__} members, got {values!r}")
    members = tuple(v if isinstance(v, kind) else build(v) for v in items)
    if not members:
        raise InvalidGeometry(f"Multi{kind.__name__} needs at least one member")
    return members


def _polygon_from_rings(rings) -> "Polygon":
    if not isinstance(rings, (list, tuple)) or not rings:
        raise InvalidGeometry(f"Polygon member needs an outer ring, got {rings!r}")
    return Polygon(rings[0], tuple(rings[1:]))


@dataclass(frozen=True)
class MultiPoint:
    points: Tuple[Point, ...]

    def __post_init__(self):
        object.__setattr__(self, "points", _coerce_members(self.points, Point, Point))


@dataclass(frozen=True)
class MultiLineString:
    lines: Tuple[LineString, ...]

    def __post_init__(self):
        object.__setattr__(
            self, "lines", _coerce_members(self.lines, LineString, LineString)
        )


@dataclass(frozen=True)
class MultiPolygon:
    polygons: Tuple[Polygon, ...]

    def __post_init__(self):
        # Bare members are GeoJSON-style ring lists: [outer, *holes]
        object.__setattr__(
            self,
            "polygons",
            _coerce_members(self.polygons, Polygon, _polygon_from_rings),
        )


Geometry = Union[Point, LineString, Polygon, MultiPoint, MultiLineString, MultiPolygon]


class Part(NamedTuple):
    """One constituent of a geometry: a single point, an open line or a closed ring."""
    kind: str
    coords: Coords


def members(geometry: Geometry) -> Tuple[Union[Point, LineString, Polygon], ...]:
    """Expand a geometry into its singular members."""
    if isinstance(geometry, (Point, LineString, Polygon)):
        return (geometry,)
    if isinstance(geometry, MultiPoint):
        return geometry.points
    if isinstance(geometry, MultiLineString):
        return geometry.lines
    if isinstance(geometry, MultiPolygon):
        return geometry.polygons
    raise TypeError(f"Not a geometry: {type(geometry).__name__}")


def iter_parts(geometry: Geometry) -> Iterator[Part]:
    """Yield the flat sequence of points, lines and rings making up a geometry."""
    for member in members(geometry):
        if isinstance(member, Point):
            yield Part("point", (member.coord,))
        elif isinstance(member, LineString):
            yield Part("line", member.coords)
        else:
            for ring in member.rings:
                yield Part("ring", ring)


def iter_polygons(geometry: Geometry) -> Iterator[Tuple[Coords, ...]]:
    """Yield the rings (outer ring first, then holes) of every polygon member."""
    for member in members(geometry):
        if isinstance(member, Polygon):
            yield member.rings


def rebuild(geometry: Geometry, parts: Sequence[Coords]) -> Geometry:
    """Build a geometry of the same variant from replacement part coordinates.

    ``parts`` must be in the order ``iter_parts`` yields them.
    """
    remaining = iter(parts)
    rebuilt = []
    for member in members(geometry):
        if isinstance(member, Point):
            rebuilt.append(Point(next(remaining)[0]))
        elif isinstance(member, LineString):
            rebuilt.append(LineString(next(remaining)))
        else:
            exterior = next(remaining)
            holes = tuple(next(remaining) for _ in member.holes)
            rebuilt.append(Polygon(exterior, holes))

    if isinstance(geometry, MultiPoint):
        return MultiPoint(tuple(rebuilt))
    if isinstance(geometry, MultiLineString):
        return MultiLineString(tuple(rebuilt))
    if isinstance(geometry, MultiPolygon):
        return MultiPolygon(tuple(rebuilt))
    return rebuilt[0]


def vertex_count(geometries: Iterable[Geometry]) -> int:
    return sum(len(part.coords) for g in geometries for part in iter_parts(g))


@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Coordinate:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def padded(self, dx: float, dy: float) -> "BoundingBox":
        return BoundingBox(self.min_x - dx, self.min_y - dy, self.max_x + dx, self.max_y + dy)

    @classmethod
    def from_coords(cls, coords: Iterable[Coordinate]) -> Optional["BoundingBox"]:
        xs: List[float] = []
        ys: List[float] = []
        for x, y in coords:
            xs.append(x)
            ys.append(y)
        if not xs:
            return None
        return cls(min(xs), min(ys), max(xs), max(ys))


def bounds_of(geometry: Geometry) -> BoundingBox:
    """Bounding box of a single geometry."""
    return BoundingBox.from_coords(c for part in iter_parts(geometry) for c in part.coords)


def collection_bounds(geometries: Iterable[Geometry]) -> Optional[BoundingBox]:
    """Union of the bounding boxes of a collection, or None when it is empty."""
    result = None
    for geometry in geometries:
        bbox = bounds_of(geometry)
        result = bbox if result is None else result.union(bbox)
    return result


def from_shapely(shape) -> Iterator[Geometry]:
    """Convert a shapely geometry into model geometries.

    Geometry collections are flattened and empty geometries are dropped.
    """
    if shape is None or shape.is_empty:
        return
    kind = shape.geom_type
    if kind == "Point":
        yield Point(shape.coords[0])
    elif kind in ("LineString", "LinearRing"):
        yield LineString(shape.coords)
    elif kind == "Polygon":
        yield Polygon(shape.exterior.coords, tuple(h.coords for h in shape.interiors))
    elif kind == "MultiPoint":
        yield MultiPoint(tuple(p.coords[0] for p in shape.geoms if not p.is_empty))
    elif kind == "MultiLineString":
        yield MultiLineString(tuple(ls.coords for ls in shape.geoms if not ls.is_empty))
    elif kind == "MultiPolygon":
        yield MultiPolygon(tuple(
            Polygon(p.exterior.coords, tuple(h.coords for h in p.interiors))
            for p in shape.geoms if not p.is_empty
        ))
    elif kind == "GeometryCollection":
        for child in shape.geoms:
            yield from from_shapely(child)
    else:
        raise InvalidGeometry(f"Unsupported geometry type: {kind}")
