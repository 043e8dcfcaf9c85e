#!/usr/bin/env python3
"""
Load a star catalog into an octree and compute the stars visible from a camera.

Reads either a tab-separated export (VizieR/Gaia columns such as RA_ICRS,
DE_ICRS, Plx, "Rad solRad", BP-RP) or the local SQLite cache, starts a
viewing session and prints visibility statistics. Optionally writes a PNG
snapshot of the visible stars.

Usage:
  poetry run python starfield-view.py --tsv stars.tsv
  poetry run python starfield-view.py --cache --camera 0 0 4000 --max-distance 5000
  poetry run python starfield-view.py --tsv stars.tsv --find 4295806720 --snapshot
  poetry run python starfield-view.py --tsv stars.tsv --goto 6.75 -16.7 0.379
"""

import argparse
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from starfield.config import InvalidConfigError, StarfieldConfig
from starfield.constants import (
    CACHE_DB,
    DEFAULT_CAMERA_Z,
    DEFAULT_MAX_STARS,
    DISTANCE_SCALING_FACTOR,
    IMAGES_DIR,
    MAX_DISTANCE,
    MIN_VISIBLE_THRESHOLD,
    OCTREE_CAPACITY,
    OCTREE_MAX_LEVEL,
)
from starfield.data_source import DataSource
from starfield.logging_config import setup_logging
from starfield.render import SnapshotRenderer
from starfield.session import StarfieldSession


def print_star(point):
    """Print the display parameters carried by a star's payload."""
    params = getattr(point.payload, "params", {}) or {}
    for key, value in params.items():
        print(f"  {key.replace('_', ' ')}: {value}")


def main():
    parser = argparse.ArgumentParser(
        description="Compute the stars visible from a camera position using an octree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  {sys.argv[0]} --tsv stars.tsv                     # Camera at (0, 0, {DEFAULT_CAMERA_Z:,.0f})
  {sys.argv[0]} --cache --max-stars 50000           # Load up to 50,000 cached stars
  {sys.argv[0]} --tsv stars.tsv --snapshot          # Also write images/starfield.png
        """,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--tsv", type=Path, help="Tab-separated catalog export")
    source.add_argument("--cache", action="store_true", help=f"Read stars from {CACHE_DB}")
    parser.add_argument("--cache-db", type=Path, default=CACHE_DB, help="Cache database path")
    parser.add_argument(
        "--ra-unit",
        choices=["hourangle", "deg"],
        default="hourangle",
        help="Unit of the TSV RA column (default: hourangle)",
    )
    parser.add_argument(
        "--camera",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=(0.0, 0.0, DEFAULT_CAMERA_Z),
        help=f"Camera position (default: 0 0 {DEFAULT_CAMERA_Z:.0f})",
    )
    parser.add_argument(
        "--max-distance",
        type=float,
        default=MAX_DISTANCE,
        help=f"Visibility radius (default: {MAX_DISTANCE:,.0f})",
    )
    parser.add_argument(
        "--max-stars",
        type=int,
        default=DEFAULT_MAX_STARS,
        help=f"Max stars to load into the index (default: {DEFAULT_MAX_STARS:,})",
    )
    parser.add_argument(
        "--available",
        type=int,
        default=None,
        help="Hard cap on rows read from the source (default: all)",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=DISTANCE_SCALING_FACTOR,
        help=f"Distance scaling factor (default: {DISTANCE_SCALING_FACTOR:,.0f})",
    )
    parser.add_argument("--capacity", type=int, default=OCTREE_CAPACITY, help="Points per octree node")
    parser.add_argument("--max-level", type=int, default=OCTREE_MAX_LEVEL, help="Octree depth cap")
    parser.add_argument(
        "--min-visible",
        type=int,
        default=MIN_VISIBLE_THRESHOLD,
        help=f"Load more stars when fewer are visible (default: {MIN_VISIBLE_THRESHOLD:,})",
    )
    parser.add_argument("--find", metavar="SOURCE_ID", help="Move the camera onto this star")
    parser.add_argument(
        "--goto",
        type=float,
        nargs=3,
        metavar=("RA_H", "DEC_DEG", "PLX"),
        help="Move the camera to a sky position",
    )
    parser.add_argument("--no-color", action="store_true", help="Render all stars white")
    parser.add_argument("--no-radius", action="store_true", help="Render all stars the same size")
    parser.add_argument("--no-axes", action="store_true", help="Hide the axes in the snapshot")
    parser.add_argument(
        "--snapshot",
        nargs="?",
        type=Path,
        const=IMAGES_DIR / "starfield.png",
        default=None,
        help="Write a PNG of the visible stars (default path: images/starfield.png)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args()

    setup_logging(args.verbose)

    try:
        config = StarfieldConfig.from_options(
            capacity=args.capacity,
            max_level=args.max_level,
            max_distance=args.max_distance,
            max_stars=args.max_stars,
            distance_scaling_factor=args.scale,
            min_visible_threshold=args.min_visible,
            color_enabled=not args.no_color,
            radius_enabled=not args.no_radius,
        )
    except InvalidConfigError as e:
        parser.error(str(e))

    if args.tsv:
        data = DataSource.from_tsv(args.tsv, ra_unit=args.ra_unit, max_records=args.available)
    else:
        data = DataSource.from_cache(args.cache_db, limit=args.available)
    print(f"Read {len(data):,} stars")

    renderer = SnapshotRenderer(show_axes=not args.no_axes)
    session = StarfieldSession(data, config, renderer=renderer, show_progress=True)

    t0 = time.perf_counter()
    visible = session.start(args.camera)
    elapsed = time.perf_counter() - t0

    if args.find:
        point = session.find_star(args.find)
        if point is None:
            print(f"Star not found: {args.find}")
        else:
            print(f"Star found at ({point.x:,.1f}, {point.y:,.1f}, {point.z:,.1f}):")
            print_star(point)
            visible = session.visible

    if args.goto:
        visible = session.goto(*args.goto)

    camera = session.camera
    print(f"Camera:         ({camera.x:,.1f}, {camera.y:,.1f}, {camera.z:,.1f})")
    print(f"Loaded:         {session.loaded_count:,} / {len(session.points):,} ({session.manager.load_state.value})")
    print(f"Rejected:       {session.manager.rejected_count:,} (outside root boundary)")
    print(f"Octree:         {session.index.node_count:,} nodes, depth {session.index.depth}")
    print(f"Visible stars:  {len(visible):,} within {session.manager.max_distance:,.0f}")
    print(f"Initial load:   {elapsed:.2f}s")

    if args.snapshot is not None:
        path = session.save_snapshot(args.snapshot)
        print(f"Saved snapshot to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
