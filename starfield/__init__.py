"""Octree-indexed 3D star field with camera-driven visibility and incremental loading."""

from .config import InvalidConfigError, StarfieldConfig
from .data_source import DataSource, StarRecord
from .geometry import BoundingVolume, Point3D
from .octree import OctreeNode, SpatialIndex
from .session import StarfieldSession
from .visibility import LoadState, VisibilityManager

__all__ = [
    "BoundingVolume",
    "DataSource",
    "InvalidConfigError",
    "LoadState",
    "OctreeNode",
    "Point3D",
    "SpatialIndex",
    "StarRecord",
    "StarfieldConfig",
    "StarfieldSession",
    "VisibilityManager",
]
