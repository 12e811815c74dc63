"""Unit tests for the shared globe math helpers."""

from __future__ import annotations

import math

import numpy as np
import pytest

from sunglobe.ui import globe_math


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.0, 0.0),
        (180.0, 180.0),
        (-180.0, 180.0),
        (190.0, -170.0),
        (-190.0, 170.0),
        (720.0, 0.0),
        (-540.0, 180.0),
    ],
)
def test_normalize_longitude(value, expected):
    assert globe_math.normalize_longitude(value) == pytest.approx(expected)


def test_normalize_longitude_range_for_many_inputs():
    for value in np.linspace(-2000.0, 2000.0, 401):
        wrapped = globe_math.normalize_longitude(float(value))
        assert -180.0 < wrapped <= 180.0
        assert math.isclose(math.cos(math.radians(wrapped)), math.cos(math.radians(value)), abs_tol=1e-9)


def test_lat_lng_to_vector_axes():
    assert globe_math.lat_lng_to_vector(0.0, 0.0) == pytest.approx((0.0, 0.0, 1.0))
    assert globe_math.lat_lng_to_vector(90.0, 0.0) == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)
    assert globe_math.lat_lng_to_vector(0.0, 90.0, radius=2.0) == pytest.approx(
        (2.0, 0.0, 0.0), abs=1e-12
    )


def test_globe_rotation_brings_location_to_front():
    lat, lng = 35.0, 139.0
    point = np.array([*globe_math.lat_lng_to_vector(lat, lng), 1.0])
    rotated = globe_math.globe_rotation(lat, lng) @ point
    assert rotated[:3] == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)


def test_look_at_moves_target_onto_negative_z():
    eye = np.array([0.0, 0.0, 400.0], dtype=np.float32)
    view = globe_math.look_at(eye, np.zeros(3, dtype=np.float32), np.array([0.0, 1.0, 0.0]))
    origin = view @ np.array([0.0, 0.0, 0.0, 1.0])
    assert origin[:3] == pytest.approx([0.0, 0.0, -400.0])


def test_orthographic_maps_extents_to_clip_edges():
    proj = globe_math.orthographic(-200.0, 200.0, -100.0, 100.0, 0.1, 2000.0)
    corner = proj @ np.array([200.0, 100.0, -10.0, 1.0])
    assert corner[:2] == pytest.approx([1.0, 1.0])


def test_timezone_meridians_cover_every_fifteen_degrees():
    lines = globe_math.timezone_meridians(100.0)
    assert len(lines) == 24
    for line in lines:
        assert line.shape[1] == 3
        radii = np.linalg.norm(line, axis=1)
        assert radii == pytest.approx(np.full(len(line), radii[0]), rel=1e-5)
