"""Convert catalogue records into indexable points."""

import logging
from typing import Sequence

import numpy as np

from .config import StarfieldConfig
from .data_source import StarRecord
from .geometry import Point3D
from .math3d import celestial_to_cartesian_array

logger = logging.getLogger(__name__)


def records_to_points(records: Sequence[StarRecord], config: StarfieldConfig) -> list[Point3D]:
    """Project `records` to Cartesian points, keeping source order.

    Each point's payload is its StarRecord. Records whose coordinates come
    out non-finite (missing RA/Dec) are dropped.
    """
    if not records:
        return []

    xyz = celestial_to_cartesian_array(
        [r.ra_hours for r in records],
        [r.dec_deg for r in records],
        [r.parallax for r in records],
        scale=config.distance_scaling_factor,
        fallback=config.fallback_distance,
    )
    finite = np.all(np.isfinite(xyz), axis=1)

    points = [
        Point3D(float(x), float(y), float(z), payload=record)
        for record, (x, y, z), ok in zip(records, xyz, finite)
        if ok
    ]
    dropped = len(records) - len(points)
    if dropped:
        logger.warning("Dropped %d of %d stars with non-finite coordinates", dropped, len(records))
    return points
