"""Tests for Point3D and BoundingVolume."""

import math

import pytest

from starfield.geometry import BoundingVolume, Point3D


def test_contains_is_inclusive_on_both_ends():
    box = BoundingVolume(0.0, 0.0, 0.0, 1.0, 2.0, 3.0)
    assert box.contains(Point3D(1.0, 2.0, 3.0))
    assert box.contains(Point3D(-1.0, -2.0, -3.0))
    assert box.contains(Point3D(0.0, 0.0, 0.0))
    assert not box.contains(Point3D(1.0000001, 0.0, 0.0))
    assert not box.contains(Point3D(0.0, -2.5, 0.0))
    assert not box.contains(Point3D(0.0, 0.0, 3.5))


def test_contains_rejects_non_finite_points():
    box = BoundingVolume(0.0, 0.0, 0.0, 10.0, 10.0, 10.0)
    assert not box.contains(Point3D(math.nan, 0.0, 0.0))
    assert not box.contains(Point3D(0.0, math.inf, 0.0))


def test_intersects_overlap_touching_and_separated():
    a = BoundingVolume(0.0, 0.0, 0.0, 1.0, 1.0, 1.0)
    assert a.intersects(BoundingVolume(1.5, 0.0, 0.0, 1.0, 1.0, 1.0))
    # Touching faces count as intersecting
    assert a.intersects(BoundingVolume(2.0, 0.0, 0.0, 1.0, 1.0, 1.0))
    assert not a.intersects(BoundingVolume(2.1, 0.0, 0.0, 1.0, 1.0, 1.0))
    assert not a.intersects(BoundingVolume(0.0, 0.0, -5.0, 1.0, 1.0, 1.0))
    # Containment either way
    assert a.intersects(BoundingVolume(0.0, 0.0, 0.0, 0.1, 0.1, 0.1))
    assert BoundingVolume(0.0, 0.0, 0.0, 0.1, 0.1, 0.1).intersects(a)


def test_negative_half_extent_is_rejected():
    with pytest.raises(ValueError):
        BoundingVolume(0.0, 0.0, 0.0, -1.0, 1.0, 1.0)


def test_zero_extent_box_contains_only_its_center():
    box = BoundingVolume(1.0, 2.0, 3.0, 0.0, 0.0, 0.0)
    assert box.contains(Point3D(1.0, 2.0, 3.0))
    assert not box.contains(Point3D(1.0, 2.0, 3.1))


def test_cube_accepts_point_or_tuple():
    c1 = BoundingVolume.cube(Point3D(1.0, 2.0, 3.0), 5.0)
    c2 = BoundingVolume.cube((1.0, 2.0, 3.0), 5.0)
    assert c1 == c2
    assert (c1.hw, c1.hh, c1.hd) == (5.0, 5.0, 5.0)


def test_octants_halve_extents_and_offset_centers():
    box = BoundingVolume(10.0, 20.0, 30.0, 8.0, 4.0, 2.0)
    centers = set()
    for i in range(8):
        child = box.octant(i)
        assert (child.hw, child.hh, child.hd) == (4.0, 2.0, 1.0)
        assert child.cx == (14.0 if i & 1 else 6.0)
        assert child.cy == (22.0 if i & 2 else 18.0)
        assert child.cz == (31.0 if i & 4 else 29.0)
        centers.add(child.center)
    assert len(centers) == 8
    with pytest.raises(IndexError):
        box.octant(8)


def test_points_compare_by_identity():
    a = Point3D(1.0, 1.0, 1.0, payload="a")
    b = Point3D(1.0, 1.0, 1.0, payload="a")
    assert a != b
    assert a == a
    assert len({a, b}) == 2
