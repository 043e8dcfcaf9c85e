"""
Camera-driven visibility and incremental loading on top of the octree.

The manager answers "which indexed stars are within `max_distance` of the
camera" with a coarse cube query followed by an exact sphere test, and grows
the index from an ordered list of available points when too few stars are
visible. All counters that drive loading live on the manager instance.
"""

import enum
import logging
from typing import Callable, Optional, Sequence

import numpy as np
from tqdm import tqdm

from .config import StarfieldConfig, validate_max_distance
from .constants import (
    DEFAULT_MAX_STARS,
    INSERT_BATCH_SIZE,
    MAX_DISTANCE,
    MAX_LOAD_ROUNDS,
    MIN_VISIBLE_THRESHOLD,
)
from .geometry import BoundingVolume, Point3D
from .math3d import distances_from
from .octree import SpatialIndex

logger = logging.getLogger(__name__)


class LoadState(enum.Enum):
    EMPTY = "empty"
    PARTIALLY_LOADED = "partially-loaded"
    FULLY_LOADED = "fully-loaded"


def _as_point(camera) -> Point3D:
    if isinstance(camera, Point3D):
        return camera
    x, y, z = camera
    return Point3D(float(x), float(y), float(z))


def filter_within_sphere(candidates: Sequence[Point3D], center: Point3D, radius: float) -> list[Point3D]:
    """Keep the candidates strictly closer than `radius` to `center`, in order."""
    if not candidates:
        return []
    xyz = np.array([(p.x, p.y, p.z) for p in candidates], dtype=float)
    keep = distances_from(center.as_tuple(), xyz) < radius
    return [p for p, k in zip(candidates, keep) if k]


class VisibilityManager:
    """Visibility state for one session.

    Args:
        available: Points that may be loaded, in source order. The first
            `loaded_count` of them are already in the index.
        max_distance: Radius of the visibility sphere.
        target_count: Cumulative cap on loaded points.
        min_visible_threshold: Fewer visible points than this triggers loading.
        max_load_rounds: How many load rounds one visibility update may start.
            Guards against repeated loading when the camera sits in a sparse
            region with a small `max_distance`.
        on_update: Called with the full visible list after every update.
        show_progress: Show a progress bar while loading large batches.
    """

    def __init__(
        self,
        available: Optional[Sequence[Point3D]] = None,
        max_distance: float = MAX_DISTANCE,
        target_count: int = DEFAULT_MAX_STARS,
        min_visible_threshold: int = MIN_VISIBLE_THRESHOLD,
        max_load_rounds: int = MAX_LOAD_ROUNDS,
        on_update: Optional[Callable[[list], None]] = None,
        camera_position=(0.0, 0.0, 0.0),
        show_progress: bool = False,
    ):
        validate_max_distance(max_distance)
        self.available = available if available is not None else []
        self.max_distance = max_distance
        self.target_count = target_count
        self.min_visible_threshold = min_visible_threshold
        self.max_load_rounds = max_load_rounds
        self.on_update = on_update
        self.show_progress = show_progress
        self.camera_position = _as_point(camera_position)
        self.loaded_count = 0
        self.rejected_count = 0
        self.visible: list[Point3D] = []
        self._load_depth = 0

    @classmethod
    def from_config(
        cls,
        config: StarfieldConfig,
        available: Optional[Sequence[Point3D]] = None,
        on_update: Optional[Callable[[list], None]] = None,
    ) -> "VisibilityManager":
        return cls(
            available=available,
            max_distance=config.max_distance,
            target_count=config.target_count,
            min_visible_threshold=config.min_visible_threshold,
            max_load_rounds=config.max_load_rounds,
            on_update=on_update,
        )

    @property
    def total_available(self) -> int:
        return len(self.available)

    @property
    def is_fully_loaded(self) -> bool:
        return self.loaded_count >= self.total_available or self.loaded_count >= self.target_count

    @property
    def load_state(self) -> LoadState:
        if self.is_fully_loaded:
            return LoadState.FULLY_LOADED
        if self.loaded_count == 0:
            return LoadState.EMPTY
        return LoadState.PARTIALLY_LOADED

    def update_visible_stars(
        self,
        index: SpatialIndex,
        camera=None,
        max_distance: Optional[float] = None,
    ) -> list[Point3D]:
        """Recompute the visible set for `camera` and return it.

        Queries the index with the cube circumscribing the visibility sphere,
        then keeps the candidates whose distance to the camera is strictly
        below `max_distance`. A sparse result starts the incremental-load
        step, which refreshes the visible set again after loading.
        """
        if camera is not None:
            self.camera_position = _as_point(camera)
        if max_distance is not None:
            validate_max_distance(max_distance)
            self.max_distance = max_distance

        camera = self.camera_position
        candidates = index.query(BoundingVolume.cube(camera, self.max_distance))
        visible = filter_within_sphere(candidates, camera, self.max_distance)
        self.visible = visible
        logger.debug(
            "Visible stars: %d (of %d candidates, %d indexed)",
            len(visible),
            len(candidates),
            len(index),
        )
        if self.on_update is not None:
            self.on_update(visible)

        if len(visible) < self.min_visible_threshold:
            if self._load_depth < self.max_load_rounds:
                self._load_depth += 1
                try:
                    self.check_and_load_more_stars(index)
                finally:
                    self._load_depth -= 1
            else:
                logger.debug("Load round limit (%d) reached; not loading more", self.max_load_rounds)

        # A nested update after loading may have replaced the visible set.
        return self.visible

    def check_and_load_more_stars(
        self,
        index: SpatialIndex,
        available: Optional[Sequence[Point3D]] = None,
        loaded_count: Optional[int] = None,
        target_count: Optional[int] = None,
    ) -> int:
        """Load up to `target_count - loaded_count` more points; return the new count.

        Points are taken from `available` in order, starting at
        `loaded_count`. Loading is clamped to what `available` still holds
        and never goes backwards. When anything was loaded, the visible set
        is refreshed.
        """
        if available is not None:
            self.available = available
        if target_count is not None:
            self.target_count = target_count
        if loaded_count is not None:
            loaded_count = min(loaded_count, len(self.available))
        if loaded_count is None or loaded_count < self.loaded_count:
            loaded_count = self.loaded_count

        to_load = min(self.target_count - loaded_count, len(self.available) - loaded_count)
        if to_load <= 0:
            self.loaded_count = loaded_count
            return loaded_count

        batch = self.available[loaded_count : loaded_count + to_load]
        accepted = 0
        for start in tqdm(
            range(0, len(batch), INSERT_BATCH_SIZE),
            desc="Loading stars",
            unit="batch",
            disable=not self.show_progress,
        ):
            accepted += index.insert_many(batch[start : start + INSERT_BATCH_SIZE])
        rejected = len(batch) - accepted
        self.rejected_count += rejected
        self.loaded_count = loaded_count + len(batch)
        logger.info(
            "Loaded %d stars (%d rejected); %d/%d loaded",
            accepted,
            rejected,
            self.loaded_count,
            self.total_available,
        )

        self.update_visible_stars(index)
        return self.loaded_count
