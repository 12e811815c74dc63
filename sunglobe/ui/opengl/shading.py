"""Day/night surface shading with a fixed view-space light direction.

The light is expressed in camera space, so the terminator never depends on
the globe's rotation; only the camera tilt changes from frame to frame.
The numpy functions mirror the GLSL exactly and are used for CPU snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from sunglobe.ui.constants import DEFAULT_LIGHT_DIRECTION, DEFAULT_TERMINATOR_EDGES

DAY_NIGHT_VERTEX_SHADER = """
    #version 330
    uniform mat4 mvp;
    uniform mat4 model_view;
    in vec3 in_pos;
    in vec3 in_normal;
    in vec2 in_uv;
    out vec3 v_normal;
    out vec2 v_uv;
    void main() {
        v_uv = in_uv;
        v_normal = normalize(mat3(model_view) * in_normal);
        gl_Position = mvp * vec4(in_pos, 1.0);
    }
"""

DAY_NIGHT_FRAGMENT_SHADER = """
    #version 330
    uniform sampler2D day_texture;
    uniform sampler2D night_texture;
    uniform vec3 light_direction;
    uniform vec2 terminator_edges;
    in vec3 v_normal;
    in vec2 v_uv;
    out vec4 fragColor;
    void main() {
        float intensity = max(0.0, dot(normalize(v_normal), normalize(light_direction)));
        float blend = smoothstep(terminator_edges.x, terminator_edges.y, intensity);
        vec4 day_color = texture(day_texture, v_uv);
        vec4 night_color = texture(night_texture, v_uv);
        fragColor = mix(night_color, day_color, blend);
    }
"""

COLOR_VERTEX_SHADER = """
    #version 330
    uniform mat4 mvp;
    in vec3 in_pos;
    void main() {
        gl_Position = mvp * vec4(in_pos, 1.0);
    }
"""

COLOR_FRAGMENT_SHADER = """
    #version 330
    uniform vec4 color;
    out vec4 fragColor;
    void main() {
        fragColor = color;
    }
"""


@dataclass(frozen=True)
class ShadingParameters:
    """Uniform values for the day/night program."""

    light_direction: tuple[float, float, float] = DEFAULT_LIGHT_DIRECTION
    terminator_edges: tuple[float, float] = DEFAULT_TERMINATOR_EDGES

    def normalized_light(self) -> np.ndarray:
        light = np.asarray(self.light_direction, dtype=np.float64)
        norm = np.linalg.norm(light)
        if norm < 1e-12:
            raise ValueError("Light direction must be non-zero")
        return light / norm


def smoothstep(edge0: float, edge1: float, x):
    """GLSL ``smoothstep`` for scalars or arrays."""
    t = np.clip((np.asarray(x, dtype=np.float64) - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def illumination(normals: np.ndarray, params: ShadingParameters) -> np.ndarray:
    """Lambert intensity clamped at zero, for (..., 3) view-space normals."""
    normals = np.asarray(normals, dtype=np.float64)
    lengths = np.linalg.norm(normals, axis=-1, keepdims=True)
    unit = normals / np.maximum(lengths, 1e-12)
    return np.maximum(0.0, unit @ params.normalized_light())


def blend_day_night(
    normals: np.ndarray,
    day: np.ndarray,
    night: np.ndarray,
    params: ShadingParameters = ShadingParameters(),
) -> np.ndarray:
    """Blend day and night samples per surface point."""
    lo, hi = params.terminator_edges
    factor = smoothstep(lo, hi, illumination(normals, params))[..., np.newaxis]
    day = np.asarray(day, dtype=np.float64)
    night = np.asarray(night, dtype=np.float64)
    return night * (1.0 - factor) + day * factor


def bind_day_night_uniforms(
    program,
    params: ShadingParameters,
    *,
    day_unit: int = 0,
    night_unit: int = 1,
) -> None:
    """Write the named uniform slots on a compiled program."""
    light = params.normalized_light()
    program["day_texture"].value = day_unit
    program["night_texture"].value = night_unit
    program["light_direction"].value = (
        float(light[0]),
        float(light[1]),
        float(light[2]),
    )
    program["terminator_edges"].value = tuple(float(e) for e in params.terminator_edges)
