"""Tests for CLI argument parsing and end-to-end command execution."""

import json

import pytest
from click.testing import CliRunner

from geopeek import __version__
from geopeek.main import main
from tests.conftest import SQUARE, strip_ansi_codes

BRAILLE_RANGE = range(0x2800, 0x2900)


@pytest.fixture
def runner():
    return CliRunner()


def output_lines(result):
    return strip_ansi_codes(result.output).splitlines()


def glyph_count(result):
    return sum(1 for line in output_lines(result) for ch in line if not ch.isspace())


def render(runner, *args, **kwargs):
    return runner.invoke(main, list(args), catch_exceptions=False, **kwargs)


def test_help_command(runner):
    result = render(runner, "--help")
    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "--simplify" in result.output


def test_version_command(runner):
    result = render(runner, "--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_square_outline(runner, square_geojson_file, mock_config_file):
    result = render(runner, square_geojson_file, "--rows", "10", "--columns", "10",
                    "--config", mock_config_file)
    assert result.exit_code == 0
    lines = output_lines(result)
    assert len(lines) == 10
    assert glyph_count(result) == 36
    assert lines[0].strip() and lines[-1].strip()


def test_square_area(runner, square_geojson_file, mock_config_file):
    result = render(runner, square_geojson_file, "--area", "--rows", "10", "--columns", "10",
                    "--config", mock_config_file)
    assert result.exit_code == 0
    assert output_lines(result) == ['░' * 10] * 10


def test_ascii_glyphs(runner, square_geojson_file, mock_config_file):
    result = render(runner, square_geojson_file, "--ascii", "-a", "-r", "4", "-c", "4",
                    "--config", mock_config_file)
    assert result.exit_code == 0
    assert output_lines(result) == ['----'] * 4


def test_reads_standard_input(runner, mock_config_file):
    data = json.dumps({"type": "Polygon", "coordinates": [SQUARE]})
    result = render(runner, "-r", "10", "-c", "10", "--config", mock_config_file, input=data)
    assert result.exit_code == 0
    assert glyph_count(result) == 36


def test_explicit_format_overrides_extension(runner, temp_dir, mock_config_file):
    path = temp_dir / "shapes.txt"
    path.write_text("LINESTRING (0 0, 10 0)\n")
    result = render(runner, str(path), "--format", "wkt", "-r", "5", "-c", "20",
                    "--config", mock_config_file)
    assert result.exit_code == 0
    assert glyph_count(result) == 20


def test_csv_columns(runner, sample_csv_file, mock_config_file):
    result = render(runner, sample_csv_file, "--lat", "stop_lat", "--lon", "stop_lon",
                    "-r", "20", "-c", "40", "--config", mock_config_file)
    assert result.exit_code == 0
    assert glyph_count(result) == 3


def test_braille_output(runner, square_geojson_file, mock_config_file):
    result = render(runner, square_geojson_file, "--braille", "-r", "3", "-c", "5",
                    "--config", mock_config_file)
    assert result.exit_code == 0
    lines = output_lines(result)
    assert len(lines) == 3
    assert all(len(line) == 5 for line in lines)
    assert all(ord(ch) in BRAILLE_RANGE for line in lines for ch in line)


def test_simplify_option_still_renders(runner, square_geojson_file, mock_config_file):
    result = render(runner, square_geojson_file, "--simplify", "50%", "-r", "10", "-c", "10",
                    "--config", mock_config_file)
    assert result.exit_code == 0
    assert 0 < glyph_count(result) < 100


def test_explicit_center_with_empty_input(runner, empty_geojson_file, mock_config_file):
    result = render(runner, empty_geojson_file, "--lat", "41.88", "--lon", "-87.63",
                    "-r", "5", "-c", "10", "--config", mock_config_file)
    assert result.exit_code == 0
    assert "Error" not in result.output
    assert glyph_count(result) == 0


def test_explicit_center_away_from_data(runner, square_geojson_file, mock_config_file):
    result = render(runner, square_geojson_file, "--lat", "50", "--lon", "50", "--radius", "1",
                    "-r", "5", "-c", "10", "--config", mock_config_file)
    assert result.exit_code == 0
    assert glyph_count(result) == 0


def test_empty_input_without_center_fails(runner, empty_geojson_file, mock_config_file):
    result = runner.invoke(main, [empty_geojson_file, "--config", mock_config_file])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_missing_file(runner, temp_dir, mock_config_file):
    result = runner.invoke(main, [str(temp_dir / "nowhere.geojson"), "--config", mock_config_file])
    assert result.exit_code == 1
    assert "Cannot open" in result.output


def test_unknown_extension(runner, temp_dir, mock_config_file):
    path = temp_dir / "data.xyz"
    path.write_text("")
    result = runner.invoke(main, [str(path), "--config", mock_config_file])
    assert result.exit_code == 1
    assert "--format" in result.output


def test_unclosed_ring(runner, temp_dir, mock_config_file):
    path = temp_dir / "open.geojson"
    path.write_text(json.dumps({"type": "Polygon", "coordinates": [[[0, 0], [0, 1], [1, 1], [1, 0]]]}))
    result = runner.invoke(main, [str(path), "--config", mock_config_file])
    assert result.exit_code == 1
    assert "not closed" in result.output


@pytest.mark.parametrize("args", [
    ["--simplify", "150%"],
    ["--simplify", "lots"],
    ["--lat", "41.88"],
    ["--lat", "north", "--lon", "west"],
    ["--radius", "0", "--lat", "0", "--lon", "0"],
    ["--format", "gpx"],
])
def test_bad_options_are_usage_errors(runner, square_geojson_file, mock_config_file, args):
    result = runner.invoke(main, [square_geojson_file, "--config", mock_config_file, *args])
    assert result.exit_code == 2


def test_bad_config_file(runner, temp_dir, square_geojson_file):
    path = temp_dir / "bad.yaml"
    path.write_text("render_defaults: [unclosed\n")
    result = runner.invoke(main, [square_geojson_file, "--config", str(path)])
    assert result.exit_code == 1
    assert "Could not load config" in result.output


@pytest.mark.parametrize("name,content", [
    ("latin1.geojson", b'{"type": "Point", "coordinates": [1, 2], "name": "\xe9"}'),
    ("features.geojson", b'{"type": "FeatureCollection", "features": ["oops"]}'),
    ("multi.geojson", b'{"type": "MultiPolygon", "coordinates": [[[[0, 0], [0, 1], [1, 1], [0, 0]]], []]}'),
    ("ring.geojson", b'{"type": "Polygon", "coordinates": [5]}'),
])
def test_malformed_input_reports_an_error(runner, temp_dir, mock_config_file, name, content):
    path = temp_dir / name
    path.write_bytes(content)
    result = runner.invoke(main, [str(path), "-r", "5", "-c", "5", "--config", mock_config_file])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
