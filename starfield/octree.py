"""
Octree spatial index over Point3D values.

Nodes live in a flat arena (a list) and refer to their children by index:
a subdivided node stores the arena index of the first of its eight children,
which are always allocated consecutively. Insertion and queries walk the
arena with an explicit stack, so tree depth never touches Python's
recursion limit.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .config import validate_index_settings
from .constants import OCTREE_CAPACITY, OCTREE_MAX_LEVEL
from .geometry import BoundingVolume, Point3D

logger = logging.getLogger(__name__)

LEAF = -1
ROOT = 0


@dataclass
class OctreeNode:
    boundary: BoundingVolume
    level: int
    points: list = field(default_factory=list)
    first_child: int = LEAF

    @property
    def is_leaf(self) -> bool:
        return self.first_child == LEAF

    def child_ids(self) -> range:
        if self.is_leaf:
            return range(0)
        return range(self.first_child, self.first_child + 8)


class SpatialIndex:
    """Point octree with a fixed root box, node capacity and depth cap.

    Nodes below `max_level` hold at most `capacity` points; once a node is
    full it is split into eight octants (once, never merged) and further
    points are pushed down. Nodes at `max_level` accept any number of
    points, which bounds depth for densely clustered data.
    """

    def __init__(
        self,
        boundary: BoundingVolume,
        capacity: int = OCTREE_CAPACITY,
        max_level: int = OCTREE_MAX_LEVEL,
    ):
        validate_index_settings(capacity, max_level)
        self.boundary = boundary
        self.capacity = capacity
        self.max_level = max_level
        self._nodes: list[OctreeNode] = [OctreeNode(boundary, level=0)]
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (
            f"SpatialIndex(points={self._size}, nodes={len(self._nodes)}, "
            f"capacity={self.capacity}, max_level={self.max_level})"
        )

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def depth(self) -> int:
        """Level of the deepest node (0 for an undivided root)."""
        return max(node.level for node in self._nodes)

    def nodes(self) -> Iterator[OctreeNode]:
        return iter(self._nodes)

    def node(self, node_id: int) -> OctreeNode:
        return self._nodes[node_id]

    def _subdivide(self, node_id: int) -> None:
        parent = self._nodes[node_id]
        first = len(self._nodes)
        for octant in range(8):
            self._nodes.append(
                OctreeNode(parent.boundary.octant(octant), level=parent.level + 1)
            )
        parent.first_child = first

    def insert(self, point: Point3D) -> bool:
        """Insert `point`; return False (and change nothing) if it lies outside."""
        node_id = ROOT
        if not self._nodes[node_id].boundary.contains(point):
            return False

        while True:
            node = self._nodes[node_id]
            if len(node.points) < self.capacity or node.level >= self.max_level:
                node.points.append(point)
                self._size += 1
                return True

            if node.is_leaf:
                self._subdivide(node_id)

            for child_id in node.child_ids():
                if self._nodes[child_id].boundary.contains(point):
                    node_id = child_id
                    break
            else:
                # Octant boundaries are computed in floating point and can
                # miss a point sitting exactly on the parent's edge.
                logger.debug("No octant of node %d claims %r", node_id, point.as_tuple())
                return False

    def insert_many(self, points: Iterable[Point3D]) -> int:
        """Insert each point in order and return how many were accepted."""
        inserted = 0
        for point in points:
            if self.insert(point):
                inserted += 1
        return inserted

    def query(self, range_: BoundingVolume) -> list[Point3D]:
        """Return every stored point that `range_` contains.

        Points come out in insertion order within a node and depth-first,
        child-index order across nodes. Callers must not rely on that order
        meaning anything spatially.
        """
        found: list[Point3D] = []
        stack = [ROOT]
        while stack:
            node = self._nodes[stack.pop()]
            if not node.boundary.intersects(range_):
                continue
            for point in node.points:
                if range_.contains(point):
                    found.append(point)
            if not node.is_leaf:
                # Reversed so child 0 is visited first.
                stack.extend(reversed(node.child_ids()))
        return found
