from pathlib import Path

"""
Shared constants for the star field viewer.

Centralising these here makes it easier to tweak behaviour without
digging through the session and script code.
"""

# Cache and output locations
CACHE_DB: Path = Path("star_cache/star_cache.db")
IMAGES_DIR: Path = Path("images")

# Octree defaults
OCTREE_CAPACITY: int = 4  # Points per node before it subdivides
OCTREE_MAX_LEVEL: int = 4  # Deepest level; leaves at this level may overflow
ROOT_HALF_EXTENT: float = 100_000.0  # Root box is 200,000 units on a side

# Visibility / incremental loading
MAX_DISTANCE: float = 10_000.0  # Radius of the visibility sphere
DEFAULT_MAX_STARS: int = 10_000  # Cumulative load cap
MIN_VISIBLE_THRESHOLD: int = 1_000  # Below this, more stars are loaded
MAX_LOAD_ROUNDS: int = 3  # Load rounds allowed per visibility update

# Coordinate transform
DISTANCE_SCALING_FACTOR: float = 1_000.0
FALLBACK_DISTANCE: float = 1_000.0  # Used when parallax <= 0 or missing

# Ingestion batches
INSERT_BATCH_SIZE: int = 50_000
DEFAULT_CATALOG_LIMIT: int = 50_000  # Default number of rows to download

# Rendering
DEFAULT_CAMERA_Z: float = 4_000.0
STAR_POINT_MIN_SIZE: float = 1.0
STAR_POINT_MAX_SIZE: float = 40.0
BP_RP_DOMAIN: tuple[float, float] = (-0.4, 2.0)
FIGURE_SIZE_INCHES: float = 12.0
FIGURE_DPI: int = 150
