"""
A viewing session: one data source, one octree, one visibility manager.

The host application calls these methods from its own event handlers
(camera moved, slider changed, checkbox toggled). Every call runs to
completion and returns the new visible list, which is also handed to the
renderer hook as a full replacement.
"""

import logging
import math
from pathlib import Path
from typing import Callable, Optional

from .config import StarfieldConfig
from .constants import DEFAULT_CAMERA_Z
from .data_source import DataSource
from .geometry import BoundingVolume, Point3D
from .ingest import records_to_points
from .math3d import celestial_to_cartesian
from .octree import SpatialIndex
from .visibility import VisibilityManager

logger = logging.getLogger(__name__)


class StarfieldSession:
    def __init__(
        self,
        source: DataSource,
        config: Optional[StarfieldConfig] = None,
        renderer: Optional[Callable[[list], None]] = None,
        show_progress: bool = False,
    ):
        self.source = source
        self.show_progress = show_progress
        self.config = config if config is not None else StarfieldConfig()
        self.renderer = renderer
        if hasattr(renderer, "color_enabled"):
            renderer.color_enabled = self.config.color_enabled
        if hasattr(renderer, "radius_enabled"):
            renderer.radius_enabled = self.config.radius_enabled
        self._build(camera=Point3D(0.0, 0.0, DEFAULT_CAMERA_Z))

    def _build(self, camera: Point3D) -> None:
        cfg = self.config
        self.points = records_to_points(list(self.source), cfg)
        self.index = SpatialIndex(
            BoundingVolume.cube((0.0, 0.0, 0.0), cfg.root_half_extent),
            capacity=cfg.capacity,
            max_level=cfg.max_level,
        )
        self.manager = VisibilityManager.from_config(cfg, available=self.points, on_update=self.renderer)
        self.manager.show_progress = self.show_progress
        self.manager.camera_position = camera

    @property
    def camera(self) -> Point3D:
        return self.manager.camera_position

    @property
    def visible(self) -> list[Point3D]:
        return self.manager.visible

    @property
    def loaded_count(self) -> int:
        return self.manager.loaded_count

    def refresh(self) -> list[Point3D]:
        return self.manager.update_visible_stars(self.index)

    def _load_then_refresh(self, target_count: Optional[int] = None) -> list[Point3D]:
        before = self.manager.loaded_count
        self.manager.check_and_load_more_stars(self.index, target_count=target_count)
        if self.manager.loaded_count == before:
            # Loading refreshes on its own; only refresh when nothing was loaded.
            return self.refresh()
        return self.manager.visible

    def start(self, camera=None) -> list[Point3D]:
        """Load the first batch of stars and compute the initial view."""
        if camera is not None:
            self.manager.camera_position = Point3D(*map(float, _xyz(camera)))
        logger.info("Initializing session with %d available stars", len(self.points))
        return self._load_then_refresh()

    def move_camera(self, camera) -> list[Point3D]:
        return self.manager.update_visible_stars(self.index, Point3D(*map(float, _xyz(camera))))

    def set_max_distance(self, max_distance: float) -> list[Point3D]:
        self.config = self.config.with_changes(max_distance=max_distance)
        return self.manager.update_visible_stars(self.index, max_distance=max_distance)

    def set_target_count(self, target_count: int) -> list[Point3D]:
        """Change the load cap; raising it may load more stars."""
        self.config = self.config.with_changes(target_count=target_count)
        logger.info("Max stars load limit changed: %d", target_count)
        return self._load_then_refresh(target_count=target_count)

    def set_color_enabled(self, enabled: bool) -> list[Point3D]:
        self.config = self.config.with_changes(color_enabled=enabled)
        if hasattr(self.renderer, "color_enabled"):
            self.renderer.color_enabled = enabled
        return self.refresh()

    def set_radius_enabled(self, enabled: bool) -> list[Point3D]:
        self.config = self.config.with_changes(radius_enabled=enabled)
        if hasattr(self.renderer, "radius_enabled"):
            self.renderer.radius_enabled = enabled
        return self.refresh()

    def set_distance_scaling_factor(self, factor: float) -> list[Point3D]:
        """Rescale every star and rebuild the index.

        The scale defines the space the octree partitions, so the old tree
        is discarded. The same number of stars is reloaded, then the view is
        recomputed from the current camera.
        """
        self.config = self.config.with_changes(distance_scaling_factor=factor)
        camera = self.camera
        loaded = self.manager.loaded_count
        self._build(camera=camera)

        # Reload the same prefix without letting the sparse-view policy pull
        # in more, then restore the real cap.
        self.manager.target_count = loaded
        self.manager.max_load_rounds = 0
        self.manager.check_and_load_more_stars(self.index)
        self.manager.target_count = self.config.target_count
        self.manager.max_load_rounds = self.config.max_load_rounds
        logger.info("Distance scaling factor changed: %s (rebuilt %d stars)", factor, len(self.index))
        return self.refresh()

    def find_star(self, source_id) -> Optional[Point3D]:
        """Move the camera onto the star with `source_id`; None if unknown."""
        record = self.source.find(source_id)
        if record is None:
            logger.info("Star not found: %s", source_id)
            return None
        point = next((p for p in self.points if p.payload is record), None)
        if point is None:
            logger.info("Star %s has no valid position", source_id)
            return None
        self.move_camera(point.as_tuple())
        return point

    def goto(self, ra_hours: float, dec_deg: float, parallax: float) -> list[Point3D]:
        """Move the camera to a sky position, using the same transform as the stars."""
        if not all(math.isfinite(v) for v in (ra_hours, dec_deg, parallax)):
            raise ValueError(f"Invalid RA, DEC, or PLX value: {(ra_hours, dec_deg, parallax)}")
        camera = celestial_to_cartesian(
            ra_hours,
            dec_deg,
            parallax,
            self.config.distance_scaling_factor,
            self.config.fallback_distance,
        )
        return self.move_camera(camera)

    def save_snapshot(self, output_path: Path) -> Path:
        if not hasattr(self.renderer, "save"):
            raise RuntimeError("Session renderer cannot save snapshots")
        return self.renderer.save(output_path, self.camera, self.manager.max_distance)


def _xyz(camera):
    if isinstance(camera, Point3D):
        return camera.as_tuple()
    return tuple(camera)
