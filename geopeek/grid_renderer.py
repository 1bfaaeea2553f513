#!/usr/bin/env python3
"""
Grid to text conversion.

Pure formatting: takes a finished Grid and produces printable rows, either one
glyph per cell or Braille characters packing 2x4 cells each.
"""

from dataclasses import dataclass
from typing import IO, Iterable, List, Optional, Tuple

from rich.console import Console
from rich.text import Text

from .rasterizer import CellState, Grid

# Braille dot patterns for sub-character resolution
# Each character packs 2 columns x 4 rows of cells
BRAILLE_BASE = 0x2800
BRAILLE_DOTS = [
    [0x01, 0x08],  # Row 0 dots (left, right)
    [0x02, 0x10],  # Row 1 dots
    [0x04, 0x20],  # Row 2 dots
    [0x40, 0x80],  # Row 3 dots
]
BRAILLE_ROWS = len(BRAILLE_DOTS)
BRAILLE_COLS = len(BRAILLE_DOTS[0])

# Block characters for fill density
BLOCK_CHARS = ('░', '▒', '▓', '█')

# Dots for boundary density
BOUNDARY_CHARS = ('·', '•', '●')


@dataclass(frozen=True)
class GlyphSet:
    empty: str = ' '
    boundary: Tuple[str, ...] = BOUNDARY_CHARS
    fill: Tuple[str, ...] = BLOCK_CHARS

    def glyph(self, state: CellState, intensity: int) -> str:
        if state is CellState.EMPTY:
            return self.empty
        ramp = self.boundary if state is CellState.BOUNDARY else self.fill
        return ramp[max(0, min(intensity, len(ramp)) - 1)]


ASCII_GLYPHS = GlyphSet(empty=' ', boundary=('.', 'o', '#'), fill=('-', '=', '%', '@'))


def render_rows(grid: Grid, glyphs: GlyphSet = GlyphSet()) -> List[str]:
    """One glyph per cell, rows top to bottom."""
    return [
        "".join(glyphs.glyph(state, weight) for state, weight in row)
        for row in grid.iter_rows()
    ]


def braille_char(value: int) -> str:
    return chr(BRAILLE_BASE + value)


def render_braille(grid: Grid) -> List[str]:
    """Pack each 2x4 block of non-empty cells into one Braille character."""
    out_rows = -(-grid.rows // BRAILLE_ROWS)
    out_cols = -(-grid.cols // BRAILLE_COLS)
    values = [[0] * out_cols for _ in range(out_rows)]

    for r, states in enumerate(grid.states):
        dots = BRAILLE_DOTS[r % BRAILLE_ROWS]
        line = values[r // BRAILLE_ROWS]
        for c, state in enumerate(states):
            if state is not CellState.EMPTY:
                line[c // BRAILLE_COLS] |= dots[c % BRAILLE_COLS]

    return ["".join(braille_char(v) for v in line) for line in values]


def write_rows(rows: Iterable[str], stream: Optional[IO[str]] = None,
               color: Optional[str] = None) -> None:
    """Write rows top to bottom, optionally styled with a rich color name."""
    console = Console(
        file=stream,
        highlight=False,
        color_system="auto" if color else None,
    )
    for row in rows:
        console.print(Text(row, style=color or ""), soft_wrap=True)
