"""End-to-end tests for a viewing session."""

import pytest

from starfield.config import InvalidConfigError, StarfieldConfig
from starfield.data_source import DataSource, StarRecord
from starfield.render import SnapshotRenderer
from starfield.session import StarfieldSession
from starfield.visibility import LoadState


@pytest.fixture
def source():
    # Parallax 0.02 puts a star 50 units out at scale 1.
    return DataSource(
        [
            StarRecord("a", 0.0, 0.0, 0.02, radius=2.0, bp_rp=0.5),
            StarRecord("b", 6.0, 0.0, 0.02),
            StarRecord("c", 12.0, 0.0, 0.01),
            StarRecord("d", 0.0, 90.0, 0.1),
            StarRecord("far", 0.0, 0.0, 0.0),  # fallback distance 1000, outside the root
        ]
    )


@pytest.fixture
def config():
    return StarfieldConfig(
        distance_scaling_factor=1.0,
        root_half_extent=500.0,
        max_distance=200.0,
        target_count=2,
        min_visible_threshold=1000,
    )


def _ids(points):
    return sorted(p.payload.source_id for p in points)


def test_start_loads_up_to_target_and_reports_visible(source, config):
    renderer = SnapshotRenderer()
    session = StarfieldSession(source, config, renderer=renderer)
    visible = session.start((0.0, 0.0, 0.0))

    assert session.loaded_count == 2
    assert _ids(visible) == ["a", "b"]
    assert renderer.frame == visible
    # The load cap binds before the source runs out
    assert session.manager.load_state is LoadState.FULLY_LOADED


def test_raising_target_count_loads_more(source, config):
    session = StarfieldSession(source, config)
    session.start((0.0, 0.0, 0.0))

    visible = session.set_target_count(10)
    assert session.loaded_count == 5
    assert session.manager.rejected_count == 1
    assert _ids(visible) == ["a", "b", "c", "d"]
    assert session.manager.load_state is LoadState.FULLY_LOADED

    # Lowering the cap never unloads
    session.set_target_count(1)
    assert session.loaded_count == 5
    assert len(session.index) == 4


def test_max_distance_and_camera_moves_refilter(source, config):
    session = StarfieldSession(source, config.with_changes(target_count=10))
    session.start((0.0, 0.0, 0.0))

    assert _ids(session.set_max_distance(60.0)) == ["a", "b", "d"]
    assert _ids(session.move_camera((50.0, 0.0, 0.0))) == ["a", "d"]
    assert _ids(session.set_max_distance(10.0)) == ["a"]
    with pytest.raises(InvalidConfigError):
        session.set_max_distance(0.0)
    with pytest.raises(InvalidConfigError):
        session.set_max_distance(float("inf"))


def test_find_star_moves_camera(source, config):
    session = StarfieldSession(source, config.with_changes(target_count=10, max_distance=5.0))
    session.start((0.0, 0.0, 0.0))

    point = session.find_star("b")
    assert point is not None
    assert session.camera.as_tuple() == pytest.approx((0.0, 50.0, 0.0), abs=1e-9)
    assert _ids(session.visible) == ["b"]
    assert session.find_star("missing") is None


def test_goto_uses_the_star_transform(source, config):
    session = StarfieldSession(source, config.with_changes(target_count=10, max_distance=5.0))
    session.start((0.0, 0.0, 0.0))

    visible = session.goto(12.0, 0.0, 0.01)
    assert session.camera.as_tuple() == pytest.approx((-100.0, 0.0, 0.0), abs=1e-9)
    assert _ids(visible) == ["c"]
    with pytest.raises(ValueError):
        session.goto(float("nan"), 0.0, 1.0)


def test_rescaling_rebuilds_index_with_same_load(source, config):
    session = StarfieldSession(source, config.with_changes(target_count=4))
    session.start((0.0, 0.0, 0.0))
    old_index = session.index

    visible = session.set_distance_scaling_factor(2.0)

    assert session.index is not old_index
    assert session.loaded_count == 4
    star_a = next(p for p in session.points if p.payload.source_id == "a")
    assert star_a.as_tuple() == pytest.approx((100.0, 0.0, 0.0))
    # c is now 200 away, exactly at the cutoff
    assert _ids(visible) == ["a", "b", "d"]


def test_display_toggles_recompute_same_set(source, config):
    renderer = SnapshotRenderer()
    session = StarfieldSession(source, config.with_changes(target_count=10), renderer=renderer)
    before = _ids(session.start((0.0, 0.0, 0.0)))
    updates = renderer.updates

    assert _ids(session.set_color_enabled(False)) == before
    assert _ids(session.set_radius_enabled(False)) == before
    assert renderer.color_enabled is False
    assert renderer.radius_enabled is False
    assert renderer.updates > updates


def test_empty_source_has_no_visible_stars(config):
    session = StarfieldSession(DataSource([]), config)
    assert session.start() == []
    assert session.loaded_count == 0


def test_save_snapshot_writes_png(source, config, tmp_path):
    session = StarfieldSession(source, config.with_changes(target_count=10), renderer=SnapshotRenderer())
    session.start((0.0, 0.0, 0.0))
    path = session.save_snapshot(tmp_path / "out" / "frame.png")
    assert path.exists()
    assert path.stat().st_size > 0


def test_save_snapshot_needs_a_renderer(source, config):
    session = StarfieldSession(source, config)
    with pytest.raises(RuntimeError):
        session.save_snapshot("frame.png")
