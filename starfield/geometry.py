"""
Points and axis-aligned boxes in the viewer's Cartesian space.
"""

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, eq=False)
class Point3D:
    """A position in space plus an opaque payload.

    Equality is identity: two stars at the same coordinates are distinct
    points and are both indexed.
    """

    x: float
    y: float
    z: float
    payload: Any = None

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class BoundingVolume:
    """Axis-aligned box given by its centre and half-extents."""

    cx: float
    cy: float
    cz: float
    hw: float
    hh: float
    hd: float

    def __post_init__(self):
        values = (self.cx, self.cy, self.cz, self.hw, self.hh, self.hd)
        if not all(math.isfinite(v) for v in values):
            raise ValueError(f"BoundingVolume fields must be finite, got {values}")
        if self.hw < 0 or self.hh < 0 or self.hd < 0:
            raise ValueError(
                f"Half-extents must be >= 0, got ({self.hw}, {self.hh}, {self.hd})"
            )

    @classmethod
    def cube(cls, center, half_extent: float) -> "BoundingVolume":
        """Cube centred on `center` (a Point3D or an (x, y, z) sequence)."""
        if isinstance(center, Point3D):
            x, y, z = center.as_tuple()
        else:
            x, y, z = center
        return cls(float(x), float(y), float(z), half_extent, half_extent, half_extent)

    @property
    def center(self) -> tuple[float, float, float]:
        return (self.cx, self.cy, self.cz)

    def contains(self, point: Point3D) -> bool:
        # Comparisons with NaN are False, so non-finite points are never contained.
        return (
            self.cx - self.hw <= point.x <= self.cx + self.hw
            and self.cy - self.hh <= point.y <= self.cy + self.hh
            and self.cz - self.hd <= point.z <= self.cz + self.hd
        )

    def intersects(self, other: "BoundingVolume") -> bool:
        return not (
            other.cx - other.hw > self.cx + self.hw
            or other.cx + other.hw < self.cx - self.hw
            or other.cy - other.hh > self.cy + self.hh
            or other.cy + other.hh < self.cy - self.hh
            or other.cz - other.hd > self.cz + self.hd
            or other.cz + other.hd < self.cz - self.hd
        )

    def octant(self, index: int) -> "BoundingVolume":
        """Return child box `index` in 0..7.

        Bit 0 selects +x, bit 1 selects +y, bit 2 selects +z, which matches
        the order children are created in.
        """
        if not 0 <= index < 8:
            raise IndexError(f"octant index must be in 0..7, got {index}")
        qw, qh, qd = self.hw / 2, self.hh / 2, self.hd / 2
        return BoundingVolume(
            self.cx + (qw if index & 1 else -qw),
            self.cy + (qh if index & 2 else -qh),
            self.cz + (qd if index & 4 else -qd),
            qw,
            qh,
            qd,
        )
