"""Globe camera with an explicit up-vector and look-at framing."""

from __future__ import annotations

import numpy as np

from sunglobe.ui.constants import (
    CAMERA_DISTANCE,
    CAMERA_FAR,
    CAMERA_NEAR,
    PERSPECTIVE_FOV_DEG,
)
from sunglobe.ui.globe_math import look_at, orthographic, perspective


class GlobeCamera:
    """Camera parked on +Z looking at the globe centre.

    Changing ``up`` does not reorient the camera by itself; ``look_at`` must
    be called again to rebuild the view matrix.
    """

    def __init__(
        self,
        *,
        orthographic_projection: bool = True,
        distance: float = CAMERA_DISTANCE,
        near: float = CAMERA_NEAR,
        far: float = CAMERA_FAR,
        fov_deg: float = PERSPECTIVE_FOV_DEG,
    ) -> None:
        self.is_orthographic = orthographic_projection
        self.position = np.array([0.0, 0.0, distance], dtype=np.float32)
        self.up = np.array([0.0, 1.0, 0.0], dtype=np.float32)
        self.target = np.zeros(3, dtype=np.float32)
        self.near = near
        self.far = far
        self.fov_deg = fov_deg
        self.aspect = 1.0
        self.zoom = 1.0
        d = 250.0
        self.left, self.right, self.top, self.bottom = -d, d, d, -d
        self._view = np.identity(4, dtype=np.float32)
        self._projection = np.identity(4, dtype=np.float32)
        self.look_at(self.target)
        self.update_projection_matrix()

    def set_up(self, x: float, y: float, z: float) -> None:
        self.up = np.array([x, y, z], dtype=np.float32)

    def look_at(self, target) -> None:
        self.target = np.asarray(target, dtype=np.float32)
        self._view = look_at(self.position, self.target, self.up)

    def set_frustum(self, left: float, right: float, top: float, bottom: float) -> None:
        self.left, self.right, self.top, self.bottom = left, right, top, bottom

    def update_projection_matrix(self) -> None:
        if self.is_orthographic:
            zoom = max(self.zoom, 1e-6)
            self._projection = orthographic(
                self.left / zoom,
                self.right / zoom,
                self.bottom / zoom,
                self.top / zoom,
                self.near,
                self.far,
            )
        else:
            self._projection = perspective(
                self.fov_deg / max(self.zoom, 1e-6),
                self.aspect,
                self.near,
                self.far,
            )

    def view_matrix(self) -> np.ndarray:
        return self._view

    def projection_matrix(self) -> np.ndarray:
        return self._projection
