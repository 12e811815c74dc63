"""Tests for the declination-driven camera tilt."""

from __future__ import annotations

import math

import numpy as np
import pytest

from fakes import RecordingCamera
from sunglobe.services.camera_sync import CameraSynchronizer, pose_for_declination
from sunglobe.ui.opengl.camera import GlobeCamera


def test_zero_declination_keeps_world_up():
    pose = pose_for_declination(0.0)
    assert pose.up == pytest.approx((0.0, 1.0, 0.0))
    assert pose.tilt_rad == 0.0


def test_up_vector_is_unit_and_in_xy_plane():
    for declination in (-23.44, -10.0, 5.5, 23.44):
        pose = pose_for_declination(declination)
        assert math.hypot(pose.up[0], pose.up[1]) == pytest.approx(1.0)
        assert pose.up[2] == 0.0


def test_apply_sets_up_then_reframes_on_origin():
    camera = RecordingCamera()
    pose = CameraSynchronizer().apply(camera, 23.0)
    assert [call[0] for call in camera.calls] == ["set_up", "look_at"]
    assert camera.calls[0][1:] == pytest.approx(pose.up)
    assert camera.calls[1][1] == (0.0, 0.0, 0.0)


def test_apply_is_idempotent():
    camera = GlobeCamera()
    sync = CameraSynchronizer()
    sync.apply(camera, 12.0)
    first = camera.view_matrix().copy()
    sync.apply(camera, 12.0)
    assert np.allclose(camera.view_matrix(), first)


def test_positive_declination_leans_north_pole_right():
    camera = GlobeCamera()
    CameraSynchronizer().apply(camera, 23.44)
    north = camera.view_matrix() @ np.array([0.0, 100.0, 0.0, 1.0])
    assert north[0] > 0.0
    assert north[1] > 0.0
