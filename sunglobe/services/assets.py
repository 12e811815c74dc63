"""Texture loading for the day and night Earth maps."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import numpy as np
from matplotlib import image as mpl_image

from sunglobe.ui.constants import (
    DAYMAP_FALLBACK_COLOR,
    EARTH_DAYMAP_FILE,
    EARTH_NIGHTMAP_FILE,
    NIGHTMAP_FALLBACK_COLOR,
)

logger = logging.getLogger(__name__)

_PRELOADED_IMAGES: dict[Path, np.ndarray | None] = {}
_TEXTURE_LOAD_ORDER: list[tuple[str, Path]] = [
    ("Earth day map", EARTH_DAYMAP_FILE),
    ("Earth night map", EARTH_NIGHTMAP_FILE),
]


@dataclass(frozen=True)
class TextureAssets:
    """Both surface maps as uint8 RGB arrays, north-up."""

    day: np.ndarray
    night: np.ndarray


def load_image(path: Path, *, cache_result: bool = True) -> np.ndarray | None:
    if cache_result and path in _PRELOADED_IMAGES:
        return _PRELOADED_IMAGES[path]
    if not path.exists():
        logger.warning("Texture not found: %s", path)
        if cache_result:
            _PRELOADED_IMAGES[path] = None
        return None
    try:
        data = mpl_image.imread(path)
    except (OSError, ValueError, SyntaxError) as exc:
        logger.warning("Could not decode texture %s: %s", path, exc)
        if cache_result:
            _PRELOADED_IMAGES[path] = None
        return None
    array = np.asarray(data)
    if array.dtype != np.uint8:
        array = np.clip(array, 0.0, 1.0)
        array = (array * 255).astype(np.uint8)
    if array.ndim == 2:
        array = np.stack([array, array, array], axis=-1)
    if array.shape[-1] == 1:
        array = np.repeat(array, 3, axis=-1)
    if array.shape[-1] == 4:
        array = np.ascontiguousarray(array[..., :3])
    if cache_result:
        _PRELOADED_IMAGES[path] = array
    return array


def solid_image(color: tuple[int, int, int]) -> np.ndarray:
    return np.array(color, dtype=np.uint8).reshape(1, 1, 3)


def load_texture(path: Path, fallback_color: tuple[int, int, int]) -> np.ndarray:
    image = load_image(path)
    return image if image is not None else solid_image(fallback_color)


def preload_globe_textures(
    progress_callback: Callable[[str, float], None] | None = None
) -> None:
    """Eagerly load globe textures so later widget init is instant."""

    total = len(_TEXTURE_LOAD_ORDER)
    for index, (label, path) in enumerate(_TEXTURE_LOAD_ORDER, start=1):
        if progress_callback:
            progress_callback(f"Loading textures: {label}", (index - 1) / total)
        load_image(path)  # caches internally
        if progress_callback:
            progress_callback(f"Loading textures: {label}", index / total)
    if progress_callback:
        progress_callback("Textures ready", 1.0)


class AssetFetch:
    """Two independent background loads joined into one ready flag.

    Partial completion is reported as not done; there is no state in which
    one map is available without the other.
    """

    def __init__(
        self,
        executor: ThreadPoolExecutor,
        *,
        day_path: Path = EARTH_DAYMAP_FILE,
        night_path: Path = EARTH_NIGHTMAP_FILE,
        loader: Callable[[Path, tuple[int, int, int]], np.ndarray] = load_texture,
    ) -> None:
        self._day: Future = executor.submit(loader, day_path, DAYMAP_FALLBACK_COLOR)
        self._night: Future = executor.submit(loader, night_path, NIGHTMAP_FALLBACK_COLOR)

    def done(self) -> bool:
        return self._day.done() and self._night.done()

    def result(self) -> TextureAssets:
        return TextureAssets(day=self._day.result(), night=self._night.result())

    def cancel(self) -> None:
        self._day.cancel()
        self._night.cancel()
