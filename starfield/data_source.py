"""
Ordered, capped star records consumed by a viewing session.

Records come from an astropy Table: a tab-separated export read from disk,
rows from the local SQLite cache, or anything else with Gaia/VizieR-style
columns. Column names are matched through an alias table so exports with
unit-suffixed headers (e.g. "Rad solRad") load the same way as cache rows.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

import numpy as np
from astropy import units as u
from astropy.table import Table

from .sqlite_helper import load_stars_from_cache

logger = logging.getLogger(__name__)

# Accepted column names for each field, first match wins.
COLUMN_ALIASES = {
    "source_id": ["Source", "source_id", "SOURCE"],
    "ra": ["RA_ICRS", "ra", "RA"],
    "dec": ["DE_ICRS", "dec", "DEC"],
    "parallax": ["Plx", "parallax", "PLX"],
    "phot_g_mean_mag": ["Gmag", "phot_g_mean_mag", "Gmag_"],
    "phot_bp_mean_mag": ["BPmag", "phot_bp_mean_mag"],
    "phot_rp_mean_mag": ["RPmag", "phot_rp_mean_mag"],
    "bp_rp": ["BP-RP", "BP-RP_", "bp_rp", "BP_RP"],
    "radius": ["Rad solRad", "Rad", "radius", "Rad-Flame"],
    "teff": ["Tefftemp", "Teff", "teff"],
    "lum": ["Lum-Flame Lsun", "Lum-Flame", "Lum", "lum"],
}

RA_UNITS = {"hourangle": 1.0, "deg": 1.0 / 15.0}

NOT_AVAILABLE = "N/A"


def find_column(table: Table, field_name: str):
    """Return the first column of `table` matching the aliases for `field_name`."""
    for name in COLUMN_ALIASES[field_name]:
        if name in table.colnames:
            return name
    return None


def column_values(table: Table, column, default: float = np.nan) -> np.ndarray:
    """Float values of `column`; masked, missing or unparsable cells become `default`."""
    n = len(table)
    if column is None:
        return np.full(n, default, dtype=float)

    data = table[column]
    if isinstance(data, u.Quantity):
        data = data.value
    mask = np.ma.getmaskarray(data)
    raw = np.ma.getdata(data)

    try:
        values = np.asarray(raw, dtype=float).copy()
    except (TypeError, ValueError):
        values = np.full(n, np.nan, dtype=float)
        for i, v in enumerate(raw):
            try:
                values[i] = float(v)
            except (TypeError, ValueError):
                continue

    values[mask | ~np.isfinite(values)] = default
    return values


def _text(table: Table, column, i: int) -> str:
    if column is None:
        return NOT_AVAILABLE
    value = table[column][i]
    if value is np.ma.masked:
        return NOT_AVAILABLE
    text = str(value).strip()
    return text if text else NOT_AVAILABLE


@dataclass(frozen=True)
class StarRecord:
    """One catalogue row, already in the units the coordinate transform expects."""

    source_id: str
    ra_hours: float
    dec_deg: float
    parallax: float
    radius: float = 1.0
    bp_rp: float = float("nan")
    params: dict = field(default_factory=dict, compare=False, hash=False)


class DataSource:
    """An ordered, finite sequence of StarRecords with a hard cap.

    Records beyond `max_records` are discarded when the source is built,
    the same way a streaming parse stops once the cap is reached.
    """

    def __init__(self, records: Sequence[StarRecord], max_records: Optional[int] = None):
        records = list(records)
        if max_records is not None:
            if max_records < 0:
                raise ValueError(f"max_records must be >= 0, got {max_records}")
            if len(records) > max_records:
                logger.info("Reached max stars: %d", max_records)
                records = records[:max_records]
        self._records = records
        self.max_records = max_records
        self._by_id = None

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, item):
        return self._records[item]

    def __iter__(self):
        return iter(self._records)

    def find(self, source_id) -> Optional[StarRecord]:
        if self._by_id is None:
            self._by_id = {}
            for record in self._records:
                self._by_id.setdefault(record.source_id, record)
        return self._by_id.get(str(source_id).strip())

    @classmethod
    def from_table(
        cls,
        table: Table,
        ra_unit: str = "hourangle",
        max_records: Optional[int] = None,
    ) -> "DataSource":
        """Build a source from a Gaia/VizieR-style table.

        Args:
            table: Table with at least RA and Dec columns (see COLUMN_ALIASES).
            ra_unit: "hourangle" if the RA column is in hours, "deg" if in degrees.
            max_records: Hard cap on the number of records kept.

        Missing parallax is read as 0 (the transform then uses its fallback
        distance), missing radius as 1 and missing colour as NaN.
        """
        if ra_unit not in RA_UNITS:
            raise ValueError(f"ra_unit must be one of {sorted(RA_UNITS)}, got {ra_unit!r}")
        if max_records is not None and len(table) > max_records:
            logger.info("Reached max stars: %d", max_records)
            table = table[:max_records]

        cols = {name: find_column(table, name) for name in COLUMN_ALIASES}
        if cols["ra"] is None or cols["dec"] is None:
            raise ValueError(f"Table has no RA/Dec columns (columns: {table.colnames})")

        ra_hours = column_values(table, cols["ra"]) * RA_UNITS[ra_unit]
        dec = column_values(table, cols["dec"])
        parallax = column_values(table, cols["parallax"], default=0.0)
        radius = column_values(table, cols["radius"], default=1.0)
        bp_rp = column_values(table, cols["bp_rp"])
        lum = column_values(table, cols["lum"], default=1.0)

        records = []
        for i in range(len(table)):
            source_id = _text(table, cols["source_id"], i)
            if source_id == NOT_AVAILABLE:
                source_id = str(i)
            params = {
                "RA_ICRS": _text(table, cols["ra"], i),
                "DE_ICRS": _text(table, cols["dec"], i),
                "Source": source_id,
                "Plx": _text(table, cols["parallax"], i),
                "Gmag": _text(table, cols["phot_g_mean_mag"], i),
                "BPmag": _text(table, cols["phot_bp_mean_mag"], i),
                "RPmag": _text(table, cols["phot_rp_mean_mag"], i),
                "Tefftemp": _text(table, cols["teff"], i),
                "Lum": float(lum[i]),
                "Rad": float(radius[i]),
                "BP-RP": float(bp_rp[i]),
            }
            records.append(
                StarRecord(
                    source_id=source_id,
                    ra_hours=float(ra_hours[i]),
                    dec_deg=float(dec[i]),
                    parallax=float(parallax[i]),
                    radius=float(radius[i]),
                    bp_rp=float(bp_rp[i]),
                    params=params,
                )
            )
        return cls(records, max_records=max_records)

    @classmethod
    def from_tsv(
        cls,
        path: Path,
        ra_unit: str = "hourangle",
        max_records: Optional[int] = None,
    ) -> "DataSource":
        """Read a tab-separated export with a header row."""
        logger.info("Starting to parse star data from %s", path)
        table = Table.read(str(path), format="ascii.tab", guess=False)
        source = cls.from_table(table, ra_unit=ra_unit, max_records=max_records)
        logger.info("Total stars parsed: %d", len(source))
        return source

    @classmethod
    def from_cache(cls, db_path: Path, limit=None, offset: int = 0) -> "DataSource":
        """Read stars from the SQLite cache (RA stored in degrees)."""
        table = load_stars_from_cache(db_path, limit=limit, offset=offset)
        if table is None:
            return cls([])
        return cls.from_table(table, ra_unit="deg")
