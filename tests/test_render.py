"""Tests for colour/size mapping and snapshot rendering."""

import numpy as np
import pytest

from starfield.constants import STAR_POINT_MAX_SIZE, STAR_POINT_MIN_SIZE
from starfield.geometry import Point3D
from starfield.render import SnapshotRenderer, bp_rp_to_rgb, point_sizes, render_visible_stars


def test_bp_rp_nan_is_white():
    assert bp_rp_to_rgb(float("nan")) == pytest.approx((1.0, 1.0, 1.0, 1.0))


def test_bp_rp_blue_to_red():
    blue, red = bp_rp_to_rgb([-0.4, 2.0])
    assert blue[2] > blue[0]
    assert red[0] > red[2]


def test_bp_rp_array_shape_and_alpha():
    colors = bp_rp_to_rgb(np.array([0.0, 1.0, np.nan]), alpha=0.5)
    assert colors.shape == (3, 4)
    assert np.all(colors[:, 3] == 0.5)
    assert np.all((colors >= 0.0) & (colors <= 1.0))


def test_point_sizes():
    sizes = point_sizes([1.0, 2.0, 1000.0, np.nan, -1.0])
    assert sizes[0] == STAR_POINT_MIN_SIZE
    assert sizes[1] == 2 * STAR_POINT_MIN_SIZE
    assert sizes[2] == STAR_POINT_MAX_SIZE
    assert sizes[3] == sizes[4] == STAR_POINT_MIN_SIZE
    assert np.all(point_sizes([5.0, 0.1], radius_enabled=False) == STAR_POINT_MIN_SIZE)


def test_snapshot_renderer_replaces_frame():
    renderer = SnapshotRenderer()
    first = [Point3D(0.0, 0.0, 0.0)]
    renderer(first)
    renderer([])
    assert renderer.frame == []
    assert renderer.updates == 2


def test_render_empty_and_plain_points(tmp_path):
    camera = Point3D(0.0, 0.0, 0.0)
    empty = render_visible_stars([], camera, tmp_path / "empty.png", max_distance=10.0)
    assert empty.exists()

    points = [Point3D(1.0, 2.0, 3.0, payload=None), Point3D(-1.0, 0.0, 4.0, payload="x")]
    out = render_visible_stars(points, camera, tmp_path / "plain.png", show_axes=False)
    assert out.exists()
