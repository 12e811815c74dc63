"""Tests for texture loading and the joined background fetch."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from matplotlib import image as mpl_image

from sunglobe.services import assets


@pytest.fixture(autouse=True)
def _clear_cache():
    assets._PRELOADED_IMAGES.clear()
    yield
    assets._PRELOADED_IMAGES.clear()


def test_missing_texture_falls_back_to_solid_color(tmp_path):
    texture = assets.load_texture(tmp_path / "missing.png", (1, 2, 3))
    assert texture.shape == (1, 1, 3)
    assert texture.dtype == np.uint8
    assert texture[0, 0].tolist() == [1, 2, 3]


def test_png_texture_is_rgb_uint8(tmp_path):
    path = tmp_path / "map.png"
    rgba = np.zeros((4, 8, 4), dtype=np.float32)
    rgba[..., 0] = 1.0
    rgba[..., 3] = 1.0
    mpl_image.imsave(path, rgba)
    image = assets.load_image(path)
    assert image.shape == (4, 8, 3)
    assert image.dtype == np.uint8
    assert image[0, 0].tolist() == [255, 0, 0]
    assert assets.load_image(path) is image


def test_undecodable_texture_is_reported_as_missing(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")
    assert assets.load_image(path) is None


def test_preload_reports_progress(tmp_path, monkeypatch):
    monkeypatch.setattr(
        assets,
        "_TEXTURE_LOAD_ORDER",
        [("day", tmp_path / "a.png"), ("night", tmp_path / "b.png")],
    )
    updates: list[tuple[str, float]] = []
    assets.preload_globe_textures(lambda message, value: updates.append((message, value)))
    assert updates[-1] == ("Textures ready", 1.0)
    assert [value for _, value in updates[:-1]] == [0.0, 0.5, 0.5, 1.0]


def test_asset_fetch_joins_both_loads(tmp_path):
    loaded: list = []

    def loader(path, fallback):
        loaded.append(path.name)
        return assets.solid_image(fallback)

    with ThreadPoolExecutor(max_workers=2) as executor:
        fetch = assets.AssetFetch(
            executor,
            day_path=tmp_path / "day.jpg",
            night_path=tmp_path / "night.jpg",
            loader=loader,
        )
    assert fetch.done()
    result = fetch.result()
    assert sorted(loaded) == ["day.jpg", "night.jpg"]
    assert result.day.shape == (1, 1, 3)
    assert result.night.shape == (1, 1, 3)
