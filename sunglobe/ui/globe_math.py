"""Small shared helpers for globe math transforms.

Globe space is Y-up: the north pole sits on +Y and the point at latitude 0,
longitude 0 faces +Z, which is where the camera looks from.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple

import numpy as np


def normalize_longitude(longitude_deg: float) -> float:
    """Wrap a longitude into the half-open interval (-180, 180]."""
    wrapped = math.fmod(longitude_deg + 180.0, 360.0)
    if wrapped <= 0.0:
        wrapped += 360.0
    result = wrapped - 180.0
    if result <= -180.0:
        result = 180.0
    return result


def lat_lng_to_vector(
    latitude_deg: float,
    longitude_deg: float,
    radius: float = 1.0,
) -> tuple[float, float, float]:
    """Return the globe-space position of a geographic coordinate."""
    lat = math.radians(latitude_deg)
    lng = math.radians(longitude_deg)
    return (
        radius * math.cos(lat) * math.sin(lng),
        radius * math.sin(lat),
        radius * math.cos(lat) * math.cos(lng),
    )


def perspective(fov_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    f = 1.0 / math.tan(math.radians(fov_deg) / 2.0)
    proj = np.zeros((4, 4), dtype=np.float32)
    proj[0, 0] = f / max(aspect, 1e-6)
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = (2 * far * near) / (near - far)
    proj[3, 2] = -1.0
    return proj


def orthographic(
    left: float,
    right: float,
    bottom: float,
    top: float,
    near: float,
    far: float,
) -> np.ndarray:
    proj = np.identity(4, dtype=np.float32)
    proj[0, 0] = 2.0 / (right - left)
    proj[1, 1] = 2.0 / (top - bottom)
    proj[2, 2] = -2.0 / (far - near)
    proj[0, 3] = -(right + left) / (right - left)
    proj[1, 3] = -(top + bottom) / (top - bottom)
    proj[2, 3] = -(far + near) / (far - near)
    return proj


def look_at(eye: np.ndarray, target: np.ndarray, up: np.ndarray) -> np.ndarray:
    forward = np.asarray(target, dtype=np.float32) - np.asarray(eye, dtype=np.float32)
    forward /= np.linalg.norm(forward)
    right = np.cross(forward, up)
    right /= np.linalg.norm(right)
    real_up = np.cross(right, forward)
    view = np.identity(4, dtype=np.float32)
    view[0, :3] = right
    view[1, :3] = real_up
    view[2, :3] = -forward
    view[:3, 3] = -view[:3, :3] @ eye
    return view


def rotation_x(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    rot = np.identity(4, dtype=np.float32)
    rot[1, 1] = c
    rot[1, 2] = -s
    rot[2, 1] = s
    rot[2, 2] = c
    return rot


def rotation_y(angle_rad: float) -> np.ndarray:
    c = math.cos(angle_rad)
    s = math.sin(angle_rad)
    rot = np.identity(4, dtype=np.float32)
    rot[0, 0] = c
    rot[0, 2] = s
    rot[2, 0] = -s
    rot[2, 2] = c
    return rot


def translation(vec: Iterable[float]) -> np.ndarray:
    mat = np.identity(4, dtype=np.float32)
    mat[:3, 3] = np.array(tuple(vec)[:3], dtype=np.float32)
    return mat


def scale(value: float) -> np.ndarray:
    mat = np.identity(4, dtype=np.float32)
    mat[0, 0] = value
    mat[1, 1] = value
    mat[2, 2] = value
    return mat


def globe_rotation(latitude_deg: float, longitude_deg: float) -> np.ndarray:
    """Model matrix that brings (latitude, longitude) to face the +Z viewer."""
    return rotation_x(math.radians(latitude_deg)) @ rotation_y(
        math.radians(-longitude_deg)
    )


def gl_bytes(mat: np.ndarray) -> bytes:
    return np.asarray(mat, dtype=np.float32).T.tobytes()


def timezone_meridians(
    radius: float,
    step_deg: int = 15,
    segment_deg: int = 2,
) -> list[np.ndarray]:
    """Polylines tracing one meridian per time zone boundary."""
    lines: list[np.ndarray] = []
    latitudes = list(range(90, -90, -segment_deg)) + [-90]
    for lng in range(-180, 180, step_deg):
        points = [lat_lng_to_vector(lat, lng, radius) for lat in latitudes]
        lines.append(np.array(points, dtype=np.float32))
    return lines


__all__: Tuple[str, ...] = (
    "gl_bytes",
    "globe_rotation",
    "lat_lng_to_vector",
    "look_at",
    "normalize_longitude",
    "orthographic",
    "perspective",
    "rotation_x",
    "rotation_y",
    "scale",
    "timezone_meridians",
    "translation",
)
