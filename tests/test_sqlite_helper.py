"""Tests for the local star cache and VizieR row extraction."""

import pytest
from astropy.table import MaskedColumn, Table

from starfield.data_source import DataSource
from starfield.sqlite_helper import get_star_count, insert_stars_batch, load_stars_from_cache
from starfield.vizier_client import extract_catalog_rows


@pytest.fixture
def cache_db(tmp_path):
    return tmp_path / "cache" / "stars.db"


ROWS = [
    (3, 45.0, 10.0, 2.0, 8.1, 0.6, 1.1, 5800.0, 1.2),
    (1, 90.0, -20.0, 0.5, 6.0, None, None, None, None),
    (2, 180.0, 0.0, 1.0, 9.3, 1.4, 0.7, 4100.0, 0.3),
]


def test_missing_cache_counts_zero_and_load_raises(cache_db):
    assert get_star_count(cache_db) == 0
    with pytest.raises(RuntimeError):
        load_stars_from_cache(cache_db)


def test_insert_ignores_duplicates(cache_db):
    assert insert_stars_batch(cache_db, ROWS) == 3
    assert insert_stars_batch(cache_db, ROWS[:1]) == 0
    assert insert_stars_batch(cache_db, []) == 0
    assert get_star_count(cache_db) == 3


def test_load_orders_by_source_id_with_limit_and_offset(cache_db):
    insert_stars_batch(cache_db, ROWS)
    table = load_stars_from_cache(cache_db)
    assert list(table["source_id"]) == [1, 2, 3]

    page = load_stars_from_cache(cache_db, limit=1, offset=1)
    assert list(page["source_id"]) == [2]
    assert load_stars_from_cache(cache_db, limit=5, offset=10) is None


def test_data_source_from_cache(cache_db):
    insert_stars_batch(cache_db, ROWS)
    source = DataSource.from_cache(cache_db)
    assert [r.source_id for r in source] == ["1", "2", "3"]
    first = source[0]
    assert first.ra_hours == pytest.approx(6.0)
    assert first.dec_deg == pytest.approx(-20.0)
    assert first.radius == 1.0  # NULL radius
    assert source.find(2).radius == pytest.approx(0.7)


def test_extract_catalog_rows_skips_incomplete_rows():
    table = Table(
        {
            "Source": [4295806720, 38655544960, 1],
            "RA_ICRS": [44.99, 45.0, 400.0],
            "DE_ICRS": [0.1, 0.2, 0.0],
            "Plx": MaskedColumn([3.5, 0.0, 1.0], mask=[False, True, False]),
            "Gmag": [12.0, 13.0, 14.0],
            "BP-RP": MaskedColumn([0.9, 1.0, 1.1], mask=[True, False, False]),
        }
    )
    rows = extract_catalog_rows(table)
    # Masked parallax and out-of-range RA are dropped
    assert len(rows) == 1
    sid, ra, dec, plx, gmag, bp_rp, radius, teff, lum = rows[0]
    assert sid == 4295806720
    assert (ra, dec, plx, gmag) == pytest.approx((44.99, 0.1, 3.5, 12.0))
    assert bp_rp is None and radius is None and teff is None and lum is None


def test_extract_catalog_rows_requires_core_columns():
    assert extract_catalog_rows(Table({"RA_ICRS": [1.0], "DE_ICRS": [1.0]})) == []
