"""
Rendering pipeline: geometries in, printable rows out.

    readers -> simplify -> viewport + spatial index -> rasterize -> grid renderer
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from .config import RenderConfig
from .geometry import Geometry
from .grid_renderer import BRAILLE_COLS, BRAILLE_ROWS, GlyphSet, render_braille, render_rows
from .rasterizer import Grid, build_polygon_index, rasterize
from .simplify import simplify_collection
from .viewport import Viewport

logger = logging.getLogger(__name__)

Progress = Callable[[str], None]


def _noop(message: str) -> None:
    pass


def build_viewport(geometries: List[Geometry], config: RenderConfig) -> Viewport:
    """Viewport in grid cells; Braille output rasterizes at dot resolution."""
    rows, cols, aspect_ratio = config.rows, config.cols, config.aspect_ratio
    if config.braille:
        rows *= BRAILLE_ROWS
        cols *= BRAILLE_COLS
        aspect_ratio *= BRAILLE_ROWS / BRAILLE_COLS

    if config.center is not None:
        return Viewport.around(config.center, rows, cols, config.radius, aspect_ratio)
    return Viewport.from_geometries(geometries, rows, cols, aspect_ratio)


def render_grid(geometries: Iterable[Geometry], config: RenderConfig,
                progress: Optional[Progress] = None) -> Grid:
    progress = progress or _noop
    started = time.perf_counter()

    progress("Parsing geography")
    collection = list(geometries)
    logger.debug("Loaded %d geometries in %.3fs", len(collection), time.perf_counter() - started)

    if config.simplify > 0:
        progress("Simplifying geography")
        collection = simplify_collection(collection, config.simplify)

    viewport = build_viewport(collection, config)

    index = None
    if config.area:
        progress("Indexing geography")
        index = build_polygon_index(collection)

    progress("Drawing map")
    grid = rasterize(collection, viewport, area=config.area, index=index)
    logger.debug("Rendered %dx%d grid in %.3fs", grid.rows, grid.cols, time.perf_counter() - started)
    return grid


def render_text(geometries: Iterable[Geometry], config: RenderConfig,
                glyphs: GlyphSet = GlyphSet(),
                progress: Optional[Progress] = None) -> List[str]:
    """Run the whole pipeline and return the printable rows."""
    grid = render_grid(geometries, config, progress)
    if config.braille:
        return render_braille(grid)
    return render_rows(grid, glyphs)
