"""
Linear mapping from geographic coordinates to character grid cells.

Terminal cells are taller than they are wide, so one geographic unit spans
fewer rows than columns. ``aspect_ratio`` is the cell width divided by its
height (about 0.5 on most terminals). A single scale is shared by both axes
after that correction; whichever axis is more constrained decides it and the
content is centered along the other one.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Tuple

from .errors import EmptyExtent
from .geometry import BoundingBox, Coordinate, Geometry, collection_bounds

logger = logging.getLogger(__name__)

DEFAULT_ASPECT_RATIO = 0.5
DEFAULT_RADIUS = 0.5
# Smallest half-width added to a zero-width or zero-height extent
EXTENT_EPSILON = 1e-6
# Relative half-width; an absolute epsilon rounds away at large magnitudes
EXTENT_RELATIVE_PAD = 1e-9


def extent_pad(value: float) -> float:
    return max(EXTENT_EPSILON, abs(value) * EXTENT_RELATIVE_PAD)


@dataclass(frozen=True)
class Viewport:
    bbox: BoundingBox
    rows: int
    cols: int
    scale: float
    aspect_ratio: float
    row_offset: float
    col_offset: float

    @property
    def x_scale(self) -> float:
        """Columns per geographic unit."""
        return self.scale

    @property
    def y_scale(self) -> float:
        """Rows per geographic unit."""
        return self.scale * self.aspect_ratio

    @classmethod
    def fit(cls, bbox: BoundingBox, rows: int, cols: int,
            aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> "Viewport":
        """Fit ``bbox`` into a ``rows`` x ``cols`` grid, preserving proportions."""
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid size must be positive, got {rows}x{cols}")
        if aspect_ratio <= 0:
            raise ValueError(f"Aspect ratio must be positive, got {aspect_ratio}")

        center_x, center_y = bbox.center
        pad_x = extent_pad(center_x) if bbox.width <= 0 else 0.0
        pad_y = extent_pad(center_y) if bbox.height <= 0 else 0.0
        if pad_x or pad_y:
            bbox = bbox.padded(pad_x, pad_y)

        scale = min(cols / bbox.width, rows / (bbox.height * aspect_ratio))
        row_offset = (rows - bbox.height * scale * aspect_ratio) / 2
        col_offset = (cols - bbox.width * scale) / 2

        viewport = cls(bbox, rows, cols, scale, aspect_ratio, row_offset, col_offset)
        logger.debug("Viewport %s -> %dx%d cells, scale %.6g", bbox.as_tuple(), rows, cols, scale)
        return viewport

    @classmethod
    def from_geometries(cls, geometries: Iterable[Geometry], rows: int, cols: int,
                        aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> "Viewport":
        """Auto-extent: fit the union of all geometry bounds."""
        bbox = collection_bounds(geometries)
        if bbox is None:
            raise EmptyExtent("No geometries to render and no center given")
        return cls.fit(bbox, rows, cols, aspect_ratio)

    @classmethod
    def around(cls, center: Coordinate, rows: int, cols: int,
               radius: float = DEFAULT_RADIUS,
               aspect_ratio: float = DEFAULT_ASPECT_RATIO) -> "Viewport":
        """Explicit center: a square extent of half-width ``radius`` around ``center``."""
        if radius <= 0:
            raise ValueError(f"Radius must be positive, got {radius}")
        x, y = center
        return cls.fit(BoundingBox(x - radius, y - radius, x + radius, y + radius),
                       rows, cols, aspect_ratio)

    def geo_to_cell(self, coord: Coordinate) -> Tuple[float, float]:
        """Fractional (row, col) of a geographic coordinate. Rows grow downward."""
        x, y = coord
        row = self.row_offset + (self.bbox.max_y - y) * self.y_scale
        col = self.col_offset + (x - self.bbox.min_x) * self.x_scale
        return row, col

    def cell_to_geo(self, row: float, col: float) -> Coordinate:
        """Inverse of ``geo_to_cell``."""
        x = self.bbox.min_x + (col - self.col_offset) / self.x_scale
        y = self.bbox.max_y - (row - self.row_offset) / self.y_scale
        return x, y

    def cell_index(self, row: float, col: float) -> Tuple[int, int]:
        """Integer cell for a fractional position, clamped onto the grid.

        The far edges fold into the last cell; clipping round-off just below
        zero folds into the first.
        """
        return (
            max(0, min(int(math.floor(row)), self.rows - 1)),
            max(0, min(int(math.floor(col)), self.cols - 1)),
        )

    def row_band(self, row: int) -> BoundingBox:
        """Geographic extent covered by one grid row across the whole grid width."""
        min_x, max_y = self.cell_to_geo(row, 0)
        max_x, min_y = self.cell_to_geo(row + 1, self.cols)
        return BoundingBox(min_x, min_y, max_x, max_y)
