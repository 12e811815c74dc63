"""Tilt the camera so the globe's axis follows the solar declination."""

from __future__ import annotations

import math
from typing import Protocol

from sunglobe.models import CameraPose

_ORIGIN = (0.0, 0.0, 0.0)


class TiltableCamera(Protocol):
    def set_up(self, x: float, y: float, z: float) -> None: ...

    def look_at(self, target) -> None: ...


def pose_for_declination(declination_deg: float) -> CameraPose:
    tilt = math.radians(declination_deg)
    return CameraPose(up=(math.sin(-tilt), math.cos(-tilt), 0.0), tilt_rad=tilt)


class CameraSynchronizer:
    """Applies the declination tilt to a camera once per frame."""

    def __init__(self) -> None:
        self.pose: CameraPose | None = None

    def apply(self, camera: TiltableCamera, declination_deg: float) -> CameraPose:
        pose = pose_for_declination(declination_deg)
        camera.set_up(*pose.up)
        # A new up-vector only takes effect once the framing is rebuilt.
        camera.look_at(_ORIGIN)
        self.pose = pose
        return pose
