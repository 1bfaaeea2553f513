"""Pytest configuration and shared fixtures for GeoPeek tests."""

import pytest
import tempfile
import json
import csv
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

SQUARE = [[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]]


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def square_geojson_file(temp_dir):
    """A FeatureCollection holding the 10x10 square and one feature without geometry."""
    geojson_path = temp_dir / "square.geojson"
    data = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"name": "square"},
             "geometry": {"type": "Polygon", "coordinates": [SQUARE]}},
            {"type": "Feature", "properties": {"name": "nowhere"}, "geometry": None},
        ],
    }
    with open(geojson_path, 'w') as f:
        json.dump(data, f)
    return str(geojson_path)


@pytest.fixture
def empty_geojson_file(temp_dir):
    geojson_path = temp_dir / "empty.geojson"
    with open(geojson_path, 'w') as f:
        json.dump({"type": "FeatureCollection", "features": []}, f)
    return str(geojson_path)


@pytest.fixture
def sample_wkt_file(temp_dir):
    """One geometry per line, including a polygon with a hole."""
    wkt_path = temp_dir / "shapes.wkt"
    lines = [
        "POINT (5 5)",
        "LINESTRING (0 0, 10 10)",
        "",
        "POLYGON ((0 0, 0 10, 10 10, 10 0, 0 0), (3 3, 3 7, 7 7, 7 3, 3 3))",
    ]
    wkt_path.write_text("\n".join(lines))
    return str(wkt_path)


@pytest.fixture
def sample_csv_file(temp_dir):
    """Stops with custom coordinate column names and one blank row."""
    csv_path = temp_dir / "stops.csv"
    data = [
        ["name", "stop_lat", "stop_lon"],
        ["Union", "41.8786", "-87.6403"],
        ["Ogilvie", "41.8827", "-87.6409"],
        ["Unknown", "", ""],
        ["Millennium", "41.8846", "-87.6242"],
    ]
    with open(csv_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerows(data)
    return str(csv_path)


@pytest.fixture
def mock_config_file(temp_dir):
    """Config with square character cells and no prompt margin."""
    config_path = temp_dir / "geopeek.yaml"
    config = {
        "render_defaults": {
            "aspect_ratio": 1.0,
            "simplify": 0,
            "margin": 0,
        }
    }

    import yaml
    with open(config_path, 'w') as f:
        yaml.dump(config, f)

    return str(config_path)


def strip_ansi_codes(text):
    """Remove ANSI escape codes from text for testing."""
    import re
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
    return ansi_escape.sub('', text)
