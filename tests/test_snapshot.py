"""Tests for the headless snapshot renderer."""

from __future__ import annotations

from datetime import datetime, timezone

import numpy as np

from sunglobe.models import GlobeOptions
from sunglobe.services.assets import TextureAssets, solid_image
from sunglobe.services.snapshot import render_snapshot, save_snapshot

_NOON = datetime(2024, 3, 20, 12, tzinfo=timezone.utc).timestamp() * 1000.0
_ASSETS = TextureAssets(day=solid_image((255, 255, 255)), night=solid_image((0, 0, 80)))


def test_frame_shape_and_background():
    image = render_snapshot(_NOON, 420, 420, _ASSETS)
    assert image.shape == (420, 420, 3)
    assert image.dtype == np.uint8
    assert image[0, 0].tolist() == [0, 0, 0]


def test_lit_side_faces_the_light():
    image = render_snapshot(_NOON, 420, 420, _ASSETS)
    assert image[210, 262].tolist() == [255, 255, 255]
    assert image[210, 158].tolist() == [0, 0, 80]


def test_light_direction_is_configurable():
    options = GlobeOptions(light_direction=(-1.0, 0.0, 0.0))
    image = render_snapshot(_NOON, 420, 420, _ASSETS, options)
    assert image[210, 158].tolist() == [255, 255, 255]


def test_save_snapshot_writes_png(tmp_path):
    image = render_snapshot(_NOON, 64, 64, _ASSETS)
    path = save_snapshot(tmp_path / "out" / "globe.png", image)
    assert path.exists()
