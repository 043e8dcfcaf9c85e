"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from starfield.geometry import BoundingVolume, Point3D  # noqa: E402
from starfield.octree import SpatialIndex  # noqa: E402


@pytest.fixture
def rng():
    """Seeded generator for reproducible point clouds."""
    return np.random.default_rng(42)


@pytest.fixture
def root_boundary():
    """Root box centred at the origin with half-extent 100 on every axis."""
    return BoundingVolume(0.0, 0.0, 0.0, 100.0, 100.0, 100.0)


@pytest.fixture
def random_points(rng):
    """2,000 points spread uniformly over the root box."""
    xyz = rng.uniform(-100.0, 100.0, size=(2000, 3))
    return [Point3D(float(x), float(y), float(z), payload=i) for i, (x, y, z) in enumerate(xyz)]


@pytest.fixture
def populated_index(root_boundary, random_points):
    index = SpatialIndex(root_boundary, capacity=4, max_level=4)
    for p in random_points:
        index.insert(p)
    return index


@pytest.fixture
def tsv_path(tmp_path):
    """A small tab-separated export in the VizieR column layout."""
    lines = [
        "Source\tRA_ICRS\tDE_ICRS\tPlx\tGmag\tRad solRad\tBP-RP\tLum-Flame Lsun",
        "1001\t0.0\t0.0\t0.02\t5.1\t2.0\t0.8\t3.5",
        "1002\t6.0\t0.0\t0.04\t7.3\t1.0\t1.2\t0.9",
        "1003\t12.0\t45.0\t\t9.0\t\t\t",
        "1004\t18.0\t-30.0\t0.01\t10.4\t0.5\t-0.2\t0.1",
    ]
    path = tmp_path / "stars.tsv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
