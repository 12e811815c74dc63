"""Headless CPU rendering of the globe scene to an image.

Uses the same camera tilt, viewport extents and day/night blend as the
OpenGL path, ray-casting the orthographic view one pixel at a time with
numpy. Handy for tests, documentation images and machines without a GPU.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from matplotlib import image as mpl_image

from sunglobe.models import GlobeOptions, ViewState
from sunglobe.services.assets import TextureAssets
from sunglobe.services.camera_sync import CameraSynchronizer
from sunglobe.services.solar_position import declination_at
from sunglobe.services.viewport import ViewportAdapter
from sunglobe.ui.constants import CLEAR_COLOR, DEFAULT_ALTITUDE_FACTOR, GLOBE_RADIUS
from sunglobe.ui.globe_math import globe_rotation
from sunglobe.ui.opengl.camera import GlobeCamera
from sunglobe.ui.opengl.shading import ShadingParameters, blend_day_night

logger = logging.getLogger(__name__)


def _sample(texture: np.ndarray, lat_deg: np.ndarray, lng_deg: np.ndarray) -> np.ndarray:
    rows = np.clip(
        np.rint((90.0 - lat_deg) / 180.0 * (texture.shape[0] - 1)).astype(int),
        0,
        texture.shape[0] - 1,
    )
    cols = np.clip(
        np.rint((lng_deg + 180.0) / 360.0 * (texture.shape[1] - 1)).astype(int),
        0,
        texture.shape[1] - 1,
    )
    return texture[rows, cols, :3].astype(np.float64)


def render_snapshot(
    instant_ms: float,
    width: int,
    height: int,
    assets: TextureAssets,
    options: GlobeOptions | None = None,
    view: ViewState | None = None,
) -> np.ndarray:
    """Render an orthographic frame as a (height, width, 3) uint8 array."""
    options = options or GlobeOptions()
    view = view or options.initial_view
    camera = GlobeCamera(orthographic_projection=True)
    CameraSynchronizer().apply(camera, declination_at(instant_ms))
    ViewportAdapter(
        margin_factor=options.margin_factor,
        set_output_size=lambda w, h: None,
    ).resize(camera, width, height)
    zoom = DEFAULT_ALTITUDE_FACTOR / max(view.altitude_factor, 1e-3)

    # Pixel centres in view space.
    xs = (np.arange(width) + 0.5) / width
    ys = (np.arange(height) + 0.5) / height
    x_view = (camera.left + (camera.right - camera.left) * xs) / zoom
    y_view = (camera.top + (camera.bottom - camera.top) * ys) / zoom
    xv, yv = np.meshgrid(x_view, y_view)
    r2 = xv * xv + yv * yv
    hit = r2 <= GLOBE_RADIUS * GLOBE_RADIUS

    clear = np.array(CLEAR_COLOR[:3], dtype=np.float64) * 255.0
    out = np.empty((height, width, 3), dtype=np.float64)
    out[...] = clear
    if not np.any(hit):
        return out.astype(np.uint8)

    zv = np.sqrt(np.maximum(GLOBE_RADIUS * GLOBE_RADIUS - r2[hit], 0.0))
    normals_view = np.stack([xv[hit], yv[hit], zv], axis=-1) / GLOBE_RADIUS

    # View-space normal back to globe space; both transforms are rotations.
    model_view = camera.view_matrix()[:3, :3] @ globe_rotation(
        view.latitude_deg, view.longitude_deg
    )[:3, :3]
    normals_globe = normals_view @ model_view.astype(np.float64)
    lat = np.degrees(np.arcsin(np.clip(normals_globe[:, 1], -1.0, 1.0)))
    lng = np.degrees(np.arctan2(normals_globe[:, 0], normals_globe[:, 2]))

    params = ShadingParameters(
        light_direction=options.light_direction,
        terminator_edges=options.terminator_edges,
    )
    out[hit] = blend_day_night(
        normals_view,
        _sample(assets.day, lat, lng),
        _sample(assets.night, lat, lng),
        params,
    )
    return np.clip(np.rint(out), 0, 255).astype(np.uint8)


def save_snapshot(path: Path, image: np.ndarray) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mpl_image.imsave(path, image)
    logger.info("Snapshot written to %s", path)
    return path
