"""
Turns projected geometry into grid cell states.

Boundary mode draws every point, line and ring onto the grid with Bresenham
steps. Area mode fills polygon interiors: each grid row asks the spatial
index for the polygons overlapping its band, then cell centres are tested
with the even-odd rule, so holes subtract and self-intersections alternate.
Polygons too small to cover any cell centre are outlined instead so they
still show up.
"""

import logging
from bisect import bisect_left
from enum import Enum
from typing import Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple

from .geometry import BoundingBox, Coords, Geometry, iter_parts, iter_polygons
from .spatial_index import SpatialIndex
from .viewport import Viewport

logger = logging.getLogger(__name__)


class CellState(Enum):
    EMPTY = 0
    BOUNDARY = 1
    FILLED = 2


class Grid:
    """rows x cols cell states plus an integer intensity per cell."""

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self.states = [[CellState.EMPTY] * cols for _ in range(rows)]
        self.intensity = [[0] * cols for _ in range(rows)]

    def mark(self, row: int, col: int, state: CellState, weight: int = 1):
        """Set a cell. Boundary cells are never downgraded to filled."""
        current = self.states[row][col]
        if current is state:
            self.intensity[row][col] += weight
        elif current is CellState.EMPTY or state is CellState.BOUNDARY:
            self.states[row][col] = state
            self.intensity[row][col] = weight

    def state(self, row: int, col: int) -> CellState:
        return self.states[row][col]

    def count(self, state: CellState) -> int:
        return sum(row.count(state) for row in self.states)

    def iter_rows(self) -> Iterator[List[Tuple[CellState, int]]]:
        for states, weights in zip(self.states, self.intensity):
            yield list(zip(states, weights))


class PolygonEntry(NamedTuple):
    rings: Tuple[Coords, ...]
    bbox: BoundingBox


def build_polygon_index(geometries: Iterable[Geometry]) -> SpatialIndex:
    """Index every polygon member of the collection by its outer ring bounds."""
    entries = [
        PolygonEntry(rings, BoundingBox.from_coords(rings[0]))
        for geometry in geometries
        for rings in iter_polygons(geometry)
    ]
    return SpatialIndex(entries, key=lambda entry: entry.bbox)


def clip_segment(r0: float, c0: float, r1: float, c1: float,
                 rows: int, cols: int) -> Optional[Tuple[float, float, float, float]]:
    """Liang-Barsky clip of a segment against the [0, rows] x [0, cols] rectangle."""
    t0, t1 = 0.0, 1.0
    dr, dc = r1 - r0, c1 - c0
    for p, q in ((-dc, c0), (dc, cols - c0), (-dr, r0), (dr, rows - r0)):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return r0 + t0 * dr, c0 + t0 * dc, r0 + t1 * dr, c0 + t1 * dc


def bresenham(r0: int, c0: int, r1: int, c1: int) -> Iterator[Tuple[int, int]]:
    """Cells visited by a discrete line from (r0, c0) to (r1, c1), inclusive."""
    dr = abs(r1 - r0)
    dc = abs(c1 - c0)
    sr = 1 if r0 < r1 else -1
    sc = 1 if c0 < c1 else -1
    err = dc - dr

    while True:
        yield r0, c0
        if r0 == r1 and c0 == c1:
            break
        e2 = 2 * err
        if e2 > -dr:
            err -= dr
            c0 += sc
        if e2 < dc:
            err += dc
            r0 += sr


def _draw_point(grid: Grid, viewport: Viewport, coord) -> None:
    row, col = viewport.geo_to_cell(coord)
    if 0 <= row <= grid.rows and 0 <= col <= grid.cols:
        grid.mark(*viewport.cell_index(row, col), CellState.BOUNDARY)


def _draw_path(grid: Grid, viewport: Viewport, coords: Coords) -> None:
    projected = [viewport.geo_to_cell(c) for c in coords]
    for (r0, c0), (r1, c1) in zip(projected, projected[1:]):
        clipped = clip_segment(r0, c0, r1, c1, grid.rows, grid.cols)
        if clipped is None:
            continue
        start = viewport.cell_index(clipped[0], clipped[1])
        end = viewport.cell_index(clipped[2], clipped[3])
        for row, col in bresenham(*start, *end):
            grid.mark(row, col, CellState.BOUNDARY)


def ring_crossings(ring: Coords, y: float) -> Iterator[float]:
    """x positions where the horizontal line at ``y`` crosses the ring's edges.

    Edges are half-open in y so a vertex on the line is counted once.
    """
    for (x1, y1), (x2, y2) in zip(ring, ring[1:]):
        if (y1 <= y < y2) or (y2 <= y < y1):
            yield x1 + (y - y1) * (x2 - x1) / (y2 - y1)


def _fill_polygons(grid: Grid, viewport: Viewport, index: SpatialIndex) -> Set[PolygonEntry]:
    """Fill cells whose centre is inside a polygon; return the entries that filled any."""
    filled: Set[PolygonEntry] = set()
    if not len(index):
        return filled

    centres = [viewport.cell_to_geo(0, col + 0.5)[0] for col in range(grid.cols)]
    for row in range(grid.rows):
        candidates: Sequence[PolygonEntry] = index.query(viewport.row_band(row))
        if not candidates:
            continue

        y = viewport.cell_to_geo(row + 0.5, 0)[1]
        for entry in candidates:
            crossings = sorted(x for ring in entry.rings for x in ring_crossings(ring, y))
            if not crossings:
                continue
            for col, x in enumerate(centres):
                # Odd number of crossings to the left means the centre is inside
                if bisect_left(crossings, x) % 2 == 1:
                    grid.mark(row, col, CellState.FILLED)
                    filled.add(entry)
    return filled


def _outline_unfilled(grid: Grid, viewport: Viewport, index: SpatialIndex,
                      filled: Set[PolygonEntry]) -> None:
    """Outline visible polygons too thin or small to cover any cell centre."""
    for entry in index.query(viewport.bbox):
        if entry not in filled:
            _draw_path(grid, viewport, entry.rings[0])


def rasterize(geometries: Sequence[Geometry], viewport: Viewport, area: bool = False,
              index: Optional[SpatialIndex] = None) -> Grid:
    """Populate a grid sized to the viewport from a collection of geometries."""
    grid = Grid(viewport.rows, viewport.cols)

    if area:
        if index is None:
            index = build_polygon_index(geometries)
        # Nothing to fill when every polygon lies outside the viewport
        if index.intersects_any(viewport.bbox):
            filled = _fill_polygons(grid, viewport, index)
            _outline_unfilled(grid, viewport, index, filled)

    for geometry in geometries:
        for part in iter_parts(geometry):
            if part.kind == "point":
                _draw_point(grid, viewport, part.coords[0])
            elif part.kind == "line" or not area:
                _draw_path(grid, viewport, part.coords)

    logger.debug(
        "Rasterized %d geometries: %d boundary, %d filled cells",
        len(geometries), grid.count(CellState.BOUNDARY), grid.count(CellState.FILLED),
    )
    return grid
