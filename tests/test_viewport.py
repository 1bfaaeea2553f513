"""Tests for the geographic-to-grid projection."""

import math

import pytest

from geopeek.errors import EmptyExtent
from geopeek.geometry import BoundingBox, LineString, Point
from geopeek.viewport import DEFAULT_ASPECT_RATIO, EXTENT_EPSILON, Viewport


def test_square_extent_on_square_cells():
    viewport = Viewport.fit(BoundingBox(0, 0, 10, 10), rows=10, cols=10, aspect_ratio=1.0)
    assert viewport.scale == pytest.approx(1.0)
    assert viewport.geo_to_cell((0, 10)) == pytest.approx((0, 0))
    assert viewport.geo_to_cell((10, 0)) == pytest.approx((10, 10))
    assert viewport.geo_to_cell((5, 5)) == pytest.approx((5, 5))


def test_aspect_ratio_shrinks_rows_and_centers_columns():
    # A square needs half as many rows as columns on 1:2 cells; the width slack is split evenly
    viewport = Viewport.fit(BoundingBox(0, 0, 10, 10), rows=10, cols=40, aspect_ratio=0.5)
    assert viewport.x_scale == pytest.approx(2.0)
    assert viewport.y_scale == pytest.approx(1.0)
    assert viewport.col_offset == pytest.approx(10.0)
    assert viewport.row_offset == pytest.approx(0.0)
    assert viewport.geo_to_cell((0, 10)) == pytest.approx((0, 10))
    assert viewport.geo_to_cell((10, 0)) == pytest.approx((10, 30))


def test_wide_extent_is_limited_by_columns_and_centered_vertically():
    viewport = Viewport.fit(BoundingBox(0, 0, 100, 10), rows=20, cols=20, aspect_ratio=0.5)
    assert viewport.scale == pytest.approx(0.2)
    # 10 units tall * 0.2 * 0.5 = 1 row of content, centered in 20
    assert viewport.row_offset == pytest.approx(9.5)
    assert viewport.col_offset == pytest.approx(0.0)


@pytest.mark.parametrize("row,col", [(0, 0), (3.5, 7.25), (9.99, 0.01), (-2, 45)])
def test_forward_and_inverse_are_mutual_inverses(row, col):
    viewport = Viewport.fit(BoundingBox(-87.9, 41.6, -87.5, 42.1), rows=24, cols=80)
    assert viewport.geo_to_cell(viewport.cell_to_geo(row, col)) == pytest.approx((row, col), abs=1e-6)

    coord = (-87.7, 41.9)
    assert viewport.cell_to_geo(*viewport.geo_to_cell(coord)) == pytest.approx(coord, abs=1e-9)


def test_single_point_extent_is_padded():
    viewport = Viewport.from_geometries([Point((3, 4))], rows=11, cols=21)
    assert viewport.bbox.width == pytest.approx(2 * EXTENT_EPSILON)
    assert viewport.bbox.height == pytest.approx(2 * EXTENT_EPSILON)
    row, col = viewport.geo_to_cell((3, 4))
    assert row == pytest.approx(5.5)
    assert col == pytest.approx(10.5)


def test_single_point_far_from_origin_is_padded_relative_to_its_size():
    viewport = Viewport.from_geometries([Point((3e10, -2e10))], rows=11, cols=21)
    assert viewport.bbox.width > 0
    assert viewport.bbox.height > 0
    assert math.isfinite(viewport.scale)
    assert viewport.geo_to_cell((3e10, -2e10)) == pytest.approx((5.5, 10.5), abs=1e-3)


def test_zero_height_extent_keeps_scale_finite():
    viewport = Viewport.from_geometries([LineString([(0, 0), (10, 0)])], rows=5, cols=20)
    assert viewport.scale == pytest.approx(2.0)
    assert viewport.geo_to_cell((0, 0)) == pytest.approx((2.5, 0), abs=1e-6)


def test_empty_collection_without_center_fails():
    with pytest.raises(EmptyExtent):
        Viewport.from_geometries([], rows=10, cols=10)


def test_explicit_center_ignores_the_data():
    viewport = Viewport.around((-87.63, 41.88), rows=10, cols=20, radius=0.5, aspect_ratio=0.5)
    assert viewport.bbox.as_tuple() == pytest.approx((-88.13, 41.38, -87.13, 42.38))
    assert viewport.geo_to_cell((-87.63, 41.88)) == pytest.approx((5, 10))


def test_cell_index_folds_far_edge_into_last_cell():
    viewport = Viewport.fit(BoundingBox(0, 0, 10, 10), rows=10, cols=10, aspect_ratio=1.0)
    assert viewport.cell_index(10, 10) == (9, 9)
    assert viewport.cell_index(0.0, 9.999) == (0, 9)
    # Clipping round-off just below zero folds into the first cell
    assert viewport.cell_index(-2.2e-16, -1e-12) == (0, 0)


def test_row_band_spans_the_row_and_full_width():
    viewport = Viewport.fit(BoundingBox(0, 0, 10, 10), rows=10, cols=40, aspect_ratio=0.5)
    band = viewport.row_band(3)
    assert band.max_y == pytest.approx(7)
    assert band.min_y == pytest.approx(6)
    assert band.min_x == pytest.approx(-5)
    assert band.max_x == pytest.approx(15)


def test_invalid_sizes_are_rejected():
    with pytest.raises(ValueError):
        Viewport.fit(BoundingBox(0, 0, 1, 1), rows=0, cols=10)
    with pytest.raises(ValueError):
        Viewport.fit(BoundingBox(0, 0, 1, 1), rows=10, cols=10, aspect_ratio=0)
    with pytest.raises(ValueError):
        Viewport.around((0, 0), rows=10, cols=10, radius=0)


def test_default_aspect_ratio():
    assert DEFAULT_ASPECT_RATIO == 0.5
