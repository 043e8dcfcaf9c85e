"""
Bulk download from VizieR into the local star cache.

VizieR hosts many published catalogues (including Gaia DR3 as I/355/gaiadr3).
Rows are mapped through the same column aliases the viewer uses for
tab-separated exports, so cached stars load like exported ones.
"""

import logging
from pathlib import Path

import numpy as np
from astropy.table import Table

from .data_source import column_values, find_column
from .sqlite_helper import insert_stars_batch

logger = logging.getLogger(__name__)

GAIA_VIZIER_CATALOG = "I/355/gaiadr3"


def extract_catalog_rows(table: Table) -> list[tuple]:
    """Convert a VizieR table (Gaia DR3 or similar) to rows for the cache.

    Returns list of (source_id, ra, dec, parallax, phot_g_mean_mag, bp_rp,
    radius, teff, lum) with RA/Dec in degrees. Rows without a source id,
    position or parallax are skipped; the other fields may be None.
    """
    col_src = find_column(table, "source_id")
    col_ra = find_column(table, "ra")
    col_dec = find_column(table, "dec")
    col_plx = find_column(table, "parallax")
    if not all([col_src, col_ra, col_dec, col_plx]):
        return []

    # Gaia source ids exceed float precision, so they are parsed as ints.
    src = table[col_src]
    src_mask = np.ma.getmaskarray(src)
    ra = column_values(table, col_ra)
    dec = column_values(table, col_dec)
    plx = column_values(table, col_plx)
    optional = [
        column_values(table, find_column(table, name))
        for name in ("phot_g_mean_mag", "bp_rp", "radius", "teff", "lum")
    ]

    def _opt(v):
        return float(v) if np.isfinite(v) else None

    rows = []
    for i in range(len(table)):
        if not (np.isfinite(ra[i]) and np.isfinite(dec[i]) and np.isfinite(plx[i])):
            continue
        try:
            sid = 0 if src_mask[i] else int(src[i])
        except (TypeError, ValueError):
            continue
        if not (sid and abs(ra[i]) <= 360 and abs(dec[i]) <= 90):
            continue
        rows.append(
            (sid, float(ra[i]), float(dec[i]), float(plx[i]))
            + tuple(_opt(values[i]) for values in optional)
        )
    return rows


def _first_table(tables):
    # TableList / dict: use first table
    if hasattr(tables, "keys"):
        first_key = next(iter(tables.keys()), None)
        return tables[first_key] if first_key is not None else None
    if hasattr(tables, "__getitem__"):
        return tables[0]
    return tables


def download_vizier_catalog(
    catalog_id: str,
    cache_db: Path,
    *,
    row_limit: int | None = 50_000,
    merge_into_cache: bool = True,
) -> int:
    """
    Download a VizieR catalog and merge its rows into the star cache.

    Args:
        catalog_id: VizieR catalog identifier (e.g. "I/355/gaiadr3").
        cache_db: Path to the cache database.
        row_limit: Max rows to download (None = Vizier default; -1 = unlimited).
        merge_into_cache: If False, only fetch (useful to check a catalog id).

    Returns:
        Number of rows inserted into the cache (0 if not merged or no rows).
    """
    from astroquery.vizier import Vizier

    # Every column, so the alias lookup can find radius/Teff/luminosity.
    vizier = Vizier(columns=["**"], row_limit=row_limit if row_limit is not None else 50)

    logger.info("Querying VizieR for %s (row_limit=%s)", catalog_id, row_limit)
    tables = vizier.get_catalogs(catalog_id)
    if not tables:
        return 0

    table = _first_table(tables)
    if not isinstance(table, Table) or len(table) == 0:
        return 0
    logger.info("VizieR returned %d rows", len(table))

    if not merge_into_cache:
        return 0
    rows = extract_catalog_rows(table)
    if not rows:
        logger.warning("No usable rows in %s (columns: %s)", catalog_id, table.colnames)
        return 0
    return insert_stars_batch(cache_db, rows)
