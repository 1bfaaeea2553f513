"""Render configuration: YAML defaults, dimension parsing and the immutable RenderConfig."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .simplify import DEFAULT_PROPORTION
from .viewport import DEFAULT_ASPECT_RATIO, DEFAULT_RADIUS

DEFAULT_CONFIG_PATH = "geopeek.yaml"

DEFAULT_RENDER = {
    "aspect_ratio": DEFAULT_ASPECT_RATIO,
    "simplify": DEFAULT_PROPORTION,
    "radius": DEFAULT_RADIUS,
    "margin": 1,
    "braille": False,
    "color": None,
}


@dataclass(frozen=True)
class RenderConfig:
    """Everything the pipeline needs, built once at startup."""
    rows: int
    cols: int
    area: bool = False
    simplify: float = DEFAULT_PROPORTION
    aspect_ratio: float = DEFAULT_ASPECT_RATIO
    center: Optional[Tuple[float, float]] = None
    radius: float = DEFAULT_RADIUS
    braille: bool = False
    color: Optional[str] = None

    def __post_init__(self):
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"Grid size must be positive, got {self.rows}x{self.cols}")
        if not 0 <= self.simplify <= 1:
            raise ValueError(f"Simplification must be between 0 and 1, got {self.simplify}")
        if self.aspect_ratio <= 0:
            raise ValueError(f"Aspect ratio must be positive, got {self.aspect_ratio}")
        if self.radius <= 0:
            raise ValueError(f"Radius must be positive, got {self.radius}")


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load render defaults from a YAML file, falling back to built-in values."""
    config = {"render_defaults": dict(DEFAULT_RENDER)}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, 'r') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping")
        config["render_defaults"].update(loaded.get("render_defaults") or {})
    return config


def terminal_size(margin: int = 1) -> Tuple[int, int]:
    """(rows, columns) available for output, minus a margin for the prompt."""
    try:
        size = os.get_terminal_size()
        columns, lines = size.columns, size.lines
    except OSError:
        columns, lines = 80, 24
    return max(1, lines - margin), max(1, columns)


def parse_dimension(value: Optional[str], terminal_size: int) -> Optional[int]:
    """Parse a dimension value that can be a number or percentage.

    Args:
        value: String value like "100", "80%", or None
        terminal_size: The terminal dimension to use for percentage calculation

    Returns:
        Parsed integer value or None
    """
    if not value:
        return None

    value = value.strip()

    # Check if it's a percentage
    if value.endswith('%'):
        try:
            percentage = float(value[:-1])
        except ValueError:
            print(f"Warning: Invalid percentage value: {value}", file=sys.stderr)
            return None
        if 0 < percentage <= 100:
            return max(1, int(terminal_size * percentage / 100))
        print(f"Warning: Percentage must be between 0 and 100, got {percentage}%", file=sys.stderr)
        return None

    try:
        size = int(value)
    except ValueError:
        print(f"Warning: Invalid size value: {value}", file=sys.stderr)
        return None
    if size > 0:
        return size
    print(f"Warning: Size must be positive, got {size}", file=sys.stderr)
    return None


def parse_simplify(value) -> float:
    """Parse a simplification proportion given as "0.05" or "5%"."""
    if isinstance(value, (int, float)):
        proportion = float(value)
    else:
        text = str(value).strip()
        try:
            if text.endswith('%'):
                proportion = float(text[:-1]) / 100
            else:
                proportion = float(text)
        except ValueError:
            raise ValueError(f"Invalid simplification value: {value}")
    if not 0 <= proportion <= 1:
        raise ValueError(f"Simplification must be between 0 and 1 (or 0% and 100%), got {value}")
    return proportion
