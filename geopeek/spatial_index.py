"""Bulk-loaded bounding-box index over rasterizable items."""

from typing import Callable, Generic, List, Sequence, TypeVar

from shapely.geometry import LineString, Point, box
from shapely.strtree import STRtree

from .geometry import BoundingBox

T = TypeVar("T")


def envelope_shape(bbox: BoundingBox):
    """Shapely geometry whose envelope is ``bbox``; flat boxes become lines or points."""
    if bbox.width == 0 and bbox.height == 0:
        return Point(bbox.min_x, bbox.min_y)
    if bbox.width == 0 or bbox.height == 0:
        return LineString([(bbox.min_x, bbox.min_y), (bbox.max_x, bbox.max_y)])
    return box(*bbox.as_tuple())


class SpatialIndex(Generic[T]):
    """Read-only STR-tree over the envelopes of a fixed set of items.

    Items are never added after construction. Queries return items in the
    order they were loaded so rendering stays deterministic.
    """

    def __init__(self, items: Sequence[T], key: Callable[[T], BoundingBox]):
        self._items = list(items)
        self._envelopes = [key(item) for item in self._items]
        self._tree = None
        if self._items:
            self._tree = STRtree([envelope_shape(env) for env in self._envelopes])

    def __len__(self) -> int:
        return len(self._items)

    def query(self, bbox: BoundingBox) -> List[T]:
        """Items whose envelope intersects ``bbox``."""
        if self._tree is None:
            return []
        hits = sorted(int(i) for i in self._tree.query(envelope_shape(bbox)))
        return [self._items[i] for i in hits]

    def intersects_any(self, bbox: BoundingBox) -> bool:
        """True when at least one item's envelope intersects ``bbox``."""
        if self._tree is None:
            return False
        return len(self._tree.query(envelope_shape(bbox))) > 0
