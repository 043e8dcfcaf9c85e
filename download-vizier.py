#!/usr/bin/env python3
"""
Fill the star cache from a VizieR catalog.

The viewer can read its stars from a local SQLite cache instead of a
tab-separated export. This script populates that cache: each downloaded row
with a source id, position and parallax becomes one entry in the `stars`
table. Radius, Teff and luminosity come along when the catalog carries them,
so the viewer can size stars by radius.

Usage:
  poetry run python download-vizier.py                     # 50,000 Gaia DR3 stars
  poetry run python download-vizier.py -n 200000
  poetry run python download-vizier.py --catalog I/355/gaiadr3 --everything
  poetry run python download-vizier.py --dry-run           # query only, cache untouched
  poetry run python starfield-view.py --cache               # then view them
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from starfield.constants import CACHE_DB, DEFAULT_CATALOG_LIMIT
from starfield.logging_config import setup_logging
from starfield.sqlite_helper import get_star_count
from starfield.vizier_client import GAIA_VIZIER_CATALOG, download_vizier_catalog


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Populate the starfield viewer's SQLite star cache from VizieR."
    )
    parser.add_argument(
        "--catalog",
        "-c",
        default=GAIA_VIZIER_CATALOG,
        help=f"VizieR catalog to download stars from (default: {GAIA_VIZIER_CATALOG})",
    )
    rows = parser.add_mutually_exclusive_group()
    rows.add_argument(
        "--rows",
        "-n",
        type=int,
        default=DEFAULT_CATALOG_LIMIT,
        help=f"Number of catalog rows to request (default: {DEFAULT_CATALOG_LIMIT:,})",
    )
    rows.add_argument(
        "--everything",
        action="store_true",
        help="Request the whole catalog; Gaia DR3 alone is ~1.8 billion rows",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the query and report the row count without touching the star cache",
    )
    parser.add_argument(
        "--cache-db",
        type=Path,
        default=CACHE_DB,
        help=f"Star cache read by starfield-view.py --cache (default: {CACHE_DB})",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)
    if not args.everything and args.rows <= 0:
        parser.error("--rows must be positive; use --everything for the full catalog")
    return args


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose)

    catalog_id = args.catalog.strip()
    row_limit = -1 if args.everything else args.rows
    before = get_star_count(args.cache_db)

    target = "(dry run)" if args.dry_run else f"into {args.cache_db}"
    print(f"Fetching stars from {catalog_id}, row limit {row_limit}, {target}")
    added = download_vizier_catalog(
        catalog_id,
        args.cache_db,
        row_limit=row_limit,
        merge_into_cache=not args.dry_run,
    )
    if args.dry_run:
        return 0

    total = get_star_count(args.cache_db)
    print(f"New stars cached: {added:,} (already cached before: {before:,}, now: {total:,})")
    if total:
        print(f"View them with: starfield-view.py --cache --cache-db {args.cache_db}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
