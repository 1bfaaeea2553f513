"""
Point-removal simplification for lines and polygon rings.

Each line or ring is simplified on its own. Interior points are ranked by the
distance they sit from the segment joining their current neighbours and the
cheapest ones are removed first, until the requested proportion of removable
points is gone. Removing a point only changes the cost of its two neighbours,
so costs are refreshed lazily through a version counter on each heap entry.
"""

import heapq
import logging
import math
from collections import Counter
from typing import Iterable, List

from .geometry import (
    MIN_LINE_COORDS,
    MIN_RING_COORDS,
    MIN_RING_DISTINCT,
    Coordinate,
    Coords,
    Geometry,
    iter_parts,
    rebuild,
    vertex_count,
)

logger = logging.getLogger(__name__)

DEFAULT_PROPORTION = 0.01


def point_segment_distance(point: Coordinate, start: Coordinate, end: Coordinate) -> float:
    """Distance from point to the segment start-end."""
    if start == end:
        return math.hypot(point[0] - start[0], point[1] - start[1])

    dx = end[0] - start[0]
    dy = end[1] - start[1]
    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))
    return math.hypot(point[0] - (start[0] + t * dx), point[1] - (start[1] + t * dy))


def check_proportion(proportion: float) -> float:
    if not 0 <= proportion <= 1:
        raise ValueError(f"Simplification proportion must be between 0 and 1, got {proportion}")
    return proportion


def simplify_coords(coords: Coords, proportion: float, closed: bool = False) -> Coords:
    """Remove ``floor(proportion * removable)`` of the cheapest interior points.

    The first and last coordinates are never removed. Lines keep at least two
    coordinates and rings at least three distinct points plus the closing one.
    Inputs with fewer than four coordinates are returned untouched.
    """
    check_proportion(proportion)
    n = len(coords)
    if proportion == 0 or n < 4:
        return coords

    minimum = MIN_RING_COORDS if closed else MIN_LINE_COORDS
    target = min(int(math.floor(proportion * (n - 2))), n - minimum)
    if target <= 0:
        return coords

    prev = list(range(-1, n - 1))
    nxt = list(range(1, n + 1))
    removed = [False] * n
    version = [0] * n

    def cost(i: int) -> float:
        return point_segment_distance(coords[i], coords[prev[i]], coords[nxt[i]])

    # (cost, index, version): equal costs pop lowest index first
    heap = [(cost(i), i, 0) for i in range(1, n - 1)]
    heapq.heapify(heap)

    # Closing coordinate duplicates the first, so it is left out of the count
    distinct = Counter(coords[:-1]) if closed else None

    removed_count = 0
    while heap and removed_count < target:
        _, i, entry_version = heapq.heappop(heap)
        if removed[i] or entry_version != version[i]:
            continue

        if distinct is not None:
            coord = coords[i]
            if distinct[coord] == 1:
                if len(distinct) <= MIN_RING_DISTINCT:
                    continue
                del distinct[coord]
            else:
                distinct[coord] -= 1

        removed[i] = True
        removed_count += 1

        before, after = prev[i], nxt[i]
        nxt[before] = after
        prev[after] = before
        for j in (before, after):
            if 0 < j < n - 1:
                version[j] += 1
                heapq.heappush(heap, (cost(j), j, version[j]))

    return tuple(c for i, c in enumerate(coords) if not removed[i])


def simplify(geometry: Geometry, proportion: float) -> Geometry:
    """Simplify every line and ring of a geometry, keeping its variant."""
    check_proportion(proportion)
    if proportion == 0:
        return geometry

    parts = list(iter_parts(geometry))
    simplified = [
        simplify_coords(part.coords, proportion, closed=part.kind == "ring")
        for part in parts
    ]
    if all(new is part.coords for new, part in zip(simplified, parts)):
        return geometry
    return rebuild(geometry, simplified)


def simplify_collection(geometries: Iterable[Geometry], proportion: float) -> List[Geometry]:
    check_proportion(proportion)
    geometries = list(geometries)
    if proportion == 0:
        return geometries

    result = [simplify(g, proportion) for g in geometries]
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Simplified %d geometries: %d -> %d vertices (proportion %.4f)",
            len(result), vertex_count(geometries), vertex_count(result), proportion,
        )
    return result
