"""
Session configuration.

Every tunable recognised by the index, the visibility manager and the
ingestion layer lives on one dataclass so a session can be built, compared
and rebuilt from a single value. Defaults come from `constants`.
"""

import dataclasses
import math
from dataclasses import dataclass

from .constants import (
    DEFAULT_MAX_STARS,
    DISTANCE_SCALING_FACTOR,
    FALLBACK_DISTANCE,
    MAX_DISTANCE,
    MAX_LOAD_ROUNDS,
    MIN_VISIBLE_THRESHOLD,
    OCTREE_CAPACITY,
    OCTREE_MAX_LEVEL,
    ROOT_HALF_EXTENT,
)


class InvalidConfigError(ValueError):
    """Raised when a structure would be built from invalid settings."""


def validate_index_settings(capacity: int, max_level: int) -> None:
    if capacity < 1:
        raise InvalidConfigError(f"capacity must be >= 1, got {capacity}")
    if max_level < 0:
        raise InvalidConfigError(f"max_level must be >= 0, got {max_level}")


def validate_max_distance(max_distance: float) -> None:
    if not (math.isfinite(max_distance) and max_distance > 0):
        raise InvalidConfigError(f"max_distance must be finite and > 0, got {max_distance}")


@dataclass(frozen=True)
class StarfieldConfig:
    """Options for one viewing session.

    Attributes:
        capacity: Max points per octree node before it subdivides.
        max_level: Hard depth cap of the octree.
        max_distance: Radius of the visibility sphere around the camera.
        target_count: Cumulative cap on stars loaded into the index
            (`max_stars` is accepted as an alias by `from_options`).
        distance_scaling_factor: Global scale applied to coordinates on ingestion.
        min_visible_threshold: Fewer visible stars than this triggers loading.
        fallback_distance: Distance used for stars without a positive parallax.
        root_half_extent: Half the side of the root box, centred at the origin.
        max_load_rounds: Load rounds allowed from a single visibility update.
        color_enabled: Renderer colours stars by BP-RP.
        radius_enabled: Renderer sizes stars by radius.
    """

    capacity: int = OCTREE_CAPACITY
    max_level: int = OCTREE_MAX_LEVEL
    max_distance: float = MAX_DISTANCE
    target_count: int = DEFAULT_MAX_STARS
    distance_scaling_factor: float = DISTANCE_SCALING_FACTOR
    min_visible_threshold: int = MIN_VISIBLE_THRESHOLD
    fallback_distance: float = FALLBACK_DISTANCE
    root_half_extent: float = ROOT_HALF_EXTENT
    max_load_rounds: int = MAX_LOAD_ROUNDS
    color_enabled: bool = True
    radius_enabled: bool = True

    def __post_init__(self):
        validate_index_settings(self.capacity, self.max_level)
        validate_max_distance(self.max_distance)
        if self.target_count < 0:
            raise InvalidConfigError(f"target_count must be >= 0, got {self.target_count}")
        if not self.distance_scaling_factor > 0:
            raise InvalidConfigError(
                f"distance_scaling_factor must be > 0, got {self.distance_scaling_factor}"
            )
        if self.min_visible_threshold < 0:
            raise InvalidConfigError(
                f"min_visible_threshold must be >= 0, got {self.min_visible_threshold}"
            )
        if not self.fallback_distance > 0:
            raise InvalidConfigError(
                f"fallback_distance must be > 0, got {self.fallback_distance}"
            )
        if not self.root_half_extent > 0:
            raise InvalidConfigError(
                f"root_half_extent must be > 0, got {self.root_half_extent}"
            )
        if self.max_load_rounds < 0:
            raise InvalidConfigError(
                f"max_load_rounds must be >= 0, got {self.max_load_rounds}"
            )

    @property
    def max_stars(self) -> int:
        return self.target_count

    @classmethod
    def from_options(cls, **options) -> "StarfieldConfig":
        """Build a config from loose options, ignoring unset (None) values."""
        if "max_stars" in options:
            max_stars = options.pop("max_stars")
            if max_stars is not None:
                options.setdefault("target_count", max_stars)
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise InvalidConfigError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in options.items() if v is not None})

    def with_changes(self, **changes) -> "StarfieldConfig":
        """Return a validated copy with `changes` applied."""
        return dataclasses.replace(self, **changes)
