"""Tests for the per-frame rotation scheduler."""

from __future__ import annotations

import numpy as np
import pytest

from fakes import FakeScheduler, FakeSurface
from sunglobe.models import ViewState
from sunglobe.services.camera_sync import CameraSynchronizer
from sunglobe.services.interaction import InteractionGate
from sunglobe.services.rotation import RotationScheduler
from sunglobe.services.scheduling import Lifecycle
from sunglobe.ui.constants import DEFAULT_ROTATION_RATE_DEG_PER_MS
from sunglobe.ui.globe_math import globe_rotation, lat_lng_to_vector
from sunglobe.ui.opengl.camera import GlobeCamera


def _ready_surface() -> FakeSurface:
    surface = FakeSurface()
    surface.install_camera(GlobeCamera())
    surface.install_shading(None, None)
    return surface


def _build(surface: FakeSurface, scheduler: FakeScheduler, rate=DEFAULT_ROTATION_RATE_DEG_PER_MS):
    gate = InteractionGate(scheduler, Lifecycle(), debounce_ms=2000.0)
    sync = CameraSynchronizer()
    rotation = RotationScheduler(
        surface,
        gate,
        sync,
        lambda now: 20.0,
        rate_deg_per_ms=rate,
        start_time=scheduler.now(),
    )
    return rotation, gate, sync


def test_one_second_of_idle_rotation():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    rotation, _, _ = _build(surface, scheduler)
    assert rotation.tick(1000.0)
    assert surface.view.longitude_deg == pytest.approx(-0.0041667, abs=1e-6)
    assert surface.view_requests[-1][1] == 0.0


def test_longitude_wraps_across_antimeridian():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    surface.view = ViewState(longitude_deg=-179.999)
    rotation, _, _ = _build(surface, scheduler, rate=0.001)
    rotation.tick(10.0)
    assert surface.view.longitude_deg == pytest.approx(179.991)


def test_negative_rate_reverses_direction():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    rotation, _, _ = _build(surface, scheduler, rate=-0.001)
    rotation.tick(10.0)
    assert surface.view.longitude_deg == pytest.approx(0.01)


def test_idle_spin_moves_eastern_features_to_the_right():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    rotation, _, _ = _build(surface, scheduler)
    point = np.array([*lat_lng_to_vector(0.0, 10.0), 1.0])

    def screen_x() -> float:
        view = surface.view
        return float((globe_rotation(view.latitude_deg, view.longitude_deg) @ point)[0])

    before = screen_x()
    rotation.tick(3_600_000.0)
    assert surface.view.longitude_deg == pytest.approx(-15.0)
    assert screen_x() > before


def test_no_rotation_while_interacting_but_camera_still_tilts():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    rotation, gate, sync = _build(surface, scheduler)
    gate.start()
    assert not rotation.tick(1000.0)
    assert surface.view.longitude_deg == 0.0
    assert sync.pose is not None
    assert surface.renders == 1
    assert rotation.last_frame_time == 1000.0


def test_no_rotation_during_transition():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    surface.transitioning = True
    rotation, _, _ = _build(surface, scheduler)
    assert not rotation.tick(500.0)
    assert surface.view_requests == []


def test_skips_frame_work_until_surface_ready():
    scheduler = FakeScheduler()
    surface = FakeSurface()
    rotation, _, sync = _build(surface, scheduler)
    assert not rotation.tick(16.0)
    assert sync.pose is None
    assert surface.renders == 0
    assert rotation.last_frame_time == 16.0


def test_reset_baseline_avoids_jump():
    scheduler = FakeScheduler()
    surface = _ready_surface()
    rotation, _, _ = _build(surface, scheduler)
    rotation.reset_baseline(60_000.0)
    rotation.tick(60_016.0)
    assert surface.view.longitude_deg == pytest.approx(-16 * DEFAULT_ROTATION_RATE_DEG_PER_MS)


def test_clock_going_backwards_does_not_rotate():
    scheduler = FakeScheduler(start=1000.0)
    surface = _ready_surface()
    rotation, _, _ = _build(surface, scheduler)
    assert not rotation.tick(900.0)
    assert surface.view.longitude_deg == 0.0
