import sqlite3
from pathlib import Path

import numpy as np
from astropy import units as u
from astropy.table import Table

STAR_COLUMNS = (
    "source_id",
    "ra",
    "dec",
    "parallax",
    "phot_g_mean_mag",
    "bp_rp",
    "radius",
    "teff",
    "lum",
)


def init_database(db_path: Path):
    """Initialize SQLite database with the stars table."""
    # Ensure the directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    cursor = conn.cursor()

    # RA/Dec in degrees, parallax in mas, radius in solar radii
    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS stars (
            source_id INTEGER PRIMARY KEY,
            ra REAL NOT NULL,
            dec REAL NOT NULL,
            parallax REAL NOT NULL,
            phot_g_mean_mag REAL,
            bp_rp REAL
        )
        """
    )

    # Add columns that older caches were created without
    for column in ("radius", "teff", "lum"):
        cursor.execute(
            "SELECT COUNT(*) FROM pragma_table_info('stars') WHERE name=?",
            (column,),
        )
        if cursor.fetchone()[0] == 0:
            cursor.execute(f"ALTER TABLE stars ADD COLUMN {column} REAL")

    conn.commit()
    return conn


def get_star_count(db_path: Path) -> int:
    """Get the number of stars in the database."""
    if not db_path.exists():
        return 0
    conn = sqlite3.connect(str(db_path))
    cursor = conn.cursor()
    cursor.execute("SELECT COUNT(*) FROM stars")
    count = cursor.fetchone()[0]
    conn.close()
    return count


def insert_stars_batch(db_path: Path, rows) -> int:
    """Insert rows of (source_id, ra, dec, parallax, gmag, bp_rp, radius, teff, lum).

    Rows whose source_id is already cached are ignored. Returns the number
    of rows actually inserted.
    """
    if not rows:
        return 0
    conn = init_database(db_path)
    cursor = conn.cursor()
    before = conn.total_changes
    cursor.executemany(
        f"""
        INSERT OR IGNORE INTO stars ({", ".join(STAR_COLUMNS)})
        VALUES ({", ".join("?" for _ in STAR_COLUMNS)})
        """,
        rows,
    )
    conn.commit()
    inserted = conn.total_changes - before
    conn.close()
    return inserted


def load_stars_from_cache(db_path: Path, limit=None, offset: int = 0):
    """Load stars from the SQLite cache, ordered by source_id.

    Returns an astropy Table, or None when the requested slice is empty.
    """
    if not db_path.exists():
        raise RuntimeError(
            f"Cache database {db_path} does not exist. Run download-vizier.py first."
        )

    conn = sqlite3.connect(str(db_path))
    cursor = conn.cursor()
    cursor.execute(
        f"""
        SELECT {", ".join(STAR_COLUMNS)}
        FROM stars
        ORDER BY source_id
        LIMIT ? OFFSET ?
        """,
        (-1 if limit is None else limit, offset),
    )
    rows = cursor.fetchall()
    conn.close()

    if not rows:
        return None

    def column(i):
        return [np.nan if row[i] is None else row[i] for row in rows]

    return Table(
        {
            "source_id": [row[0] for row in rows],
            "ra": column(1) * u.deg,
            "dec": column(2) * u.deg,
            "parallax": column(3) * u.mas,
            "phot_g_mean_mag": column(4),
            "bp_rp": column(5),
            "radius": column(6),
            "teff": column(7),
            "lum": column(8),
        }
    )
