"""Tests for engine initialization order, frame loop and teardown."""

from __future__ import annotations

import pytest

from fakes import FakeAssetFetch, FakeScheduler, FakeSurface
from sunglobe.models import GlobeOptions, Marker, ViewState
from sunglobe.services.engine import GlobeEngine, InitStage
from sunglobe.ui.constants import DEFAULT_ROTATION_RATE_DEG_PER_MS


@pytest.fixture
def rig():
    scheduler = FakeScheduler(start=10_000.0)
    surface = FakeSurface(size=(840, 420, 2.0))
    fetch = FakeAssetFetch()
    engine = GlobeEngine(
        surface,
        scheduler,
        GlobeOptions(),
        declination_source=lambda now: 23.0,
        asset_fetch_factory=lambda executor: fetch,
    )
    controller = engine.start()
    yield scheduler, surface, fetch, engine, controller
    engine.teardown()


def _tick(scheduler: FakeScheduler, ms: float = 16.0) -> None:
    scheduler.advance(ms)
    scheduler.run_frame()


def test_waits_for_both_textures_before_building(rig):
    scheduler, surface, fetch, engine, controller = rig
    _tick(scheduler)
    _tick(scheduler)
    assert engine.stage is InitStage.LOADING_ASSETS
    assert surface.shading_calls == 0
    assert surface.camera() is None
    assert not controller.ready


def test_initialization_runs_in_order_once_assets_arrive(rig):
    scheduler, surface, fetch, engine, controller = rig
    fetch.finished = True
    _tick(scheduler)
    assert engine.stage is InitStage.RUNNING
    assert controller.ready
    camera = surface.camera()
    assert camera is not None
    assert camera.up[0] < 0.0
    d = 420 / 2.1
    assert (camera.left, camera.right, camera.top, camera.bottom) == pytest.approx(
        (-2 * d, 2 * d, d, -d)
    )
    assert surface.output_size == (1680, 840)
    # Baseline was reset when the camera came up, so nothing rotated yet.
    assert surface.view.longitude_deg == 0.0


def test_shading_retried_until_context_exists(rig):
    scheduler, surface, fetch, engine, _ = rig
    surface.context_ready = False
    fetch.finished = True
    _tick(scheduler)
    assert engine.stage is InitStage.BUILDING_SHADING
    surface.context_ready = True
    _tick(scheduler)
    assert engine.stage is InitStage.RUNNING
    assert surface.shading_calls == 2


def test_idle_frames_rotate(rig):
    scheduler, surface, fetch, engine, _ = rig
    fetch.finished = True
    _tick(scheduler)
    _tick(scheduler, 1000.0)
    assert surface.view.longitude_deg == pytest.approx(-1000.0 * DEFAULT_ROTATION_RATE_DEG_PER_MS)


def test_interaction_pauses_and_release_resets_baseline(rig):
    scheduler, surface, fetch, engine, _ = rig
    fetch.finished = True
    _tick(scheduler)
    controls = surface.controls()
    controls.started.emit()
    controls.ended.emit()
    _tick(scheduler, 1000.0)
    assert surface.view.longitude_deg == 0.0
    scheduler.advance(1500.0)
    assert not engine.gate.is_active()
    assert engine.rotation.last_frame_time == scheduler.now()
    _tick(scheduler, 16.0)
    assert surface.view.longitude_deg == pytest.approx(-16.0 * DEFAULT_ROTATION_RATE_DEG_PER_MS)


def test_resize_before_camera_is_deferred_then_applied(rig):
    scheduler, surface, fetch, engine, _ = rig
    surface.resized.emit(500, 500, 1.0)
    assert surface.output_size is None
    fetch.finished = True
    _tick(scheduler)
    surface.resized.emit(600, 300, 1.0)
    assert surface.output_size == (600, 300)
    assert surface.camera().top == pytest.approx(300 / 2.1)


def test_show_location_pins_marker_and_animates(rig):
    _, surface, _, _, controller = rig
    marker = Marker(48.85, 2.35, "Paris")
    assert controller.show_location(marker)
    assert surface.marker == marker
    assert controller.marker == marker
    view, transition_ms = surface.view_requests[-1]
    assert view == ViewState(48.85, 2.35, 2.0)
    assert transition_ms == 1000.0
    controller.clear_marker()
    assert surface.marker is None


def test_teardown_stops_everything(rig):
    scheduler, surface, fetch, engine, controller = rig
    controls = surface.controls()
    controls.started.emit()
    controls.ended.emit()
    controller.teardown()
    assert engine.stage is InitStage.TORN_DOWN
    assert fetch.cancelled
    assert controls.started.slots == []
    assert surface.resized.slots == []
    assert scheduler.run_frame() == 0
    scheduler.advance(5000.0)
    assert engine.gate.is_active()
    assert not controller.show_location(Marker(0.0, 0.0))
    assert surface.marker is None
    controller.teardown()


def test_start_twice_is_rejected(rig):
    _, _, _, engine, _ = rig
    with pytest.raises(RuntimeError):
        engine.start()


def test_start_sets_initial_view_and_controls():
    scheduler = FakeScheduler()
    surface = FakeSurface()
    options = GlobeOptions(
        show_meridians=False,
        enable_interaction=False,
        initial_view=ViewState(10.0, 20.0, 3.0),
    )
    engine = GlobeEngine(
        surface, scheduler, options, asset_fetch_factory=lambda executor: FakeAssetFetch()
    )
    engine.start()
    try:
        assert surface.view == ViewState(10.0, 20.0, 3.0)
        assert surface.meridians_visible is False
        controls = surface.controls()
        assert not controls.enable_rotate
        assert not controls.enable_zoom
        assert not controls.enable_pan
        assert controls.started.slots == []
    finally:
        engine.teardown()


def test_options_validation():
    with pytest.raises(ValueError):
        GlobeOptions(terminator_edges=(0.2, 0.1))
    with pytest.raises(ValueError):
        GlobeOptions(margin_factor=0.0)
    with pytest.raises(ValueError):
        GlobeOptions(projection="fisheye")
