from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

import moderngl
import numpy as np
from PySide6.QtCore import QObject, QPoint, QSize, Qt, Signal
from PySide6.QtGui import QMouseEvent, QSurfaceFormat, QWheelEvent
from PySide6.QtOpenGLWidgets import QOpenGLWidget

from sunglobe.models import Marker, ViewState
from sunglobe.services.assets import TextureAssets
from sunglobe.services.scheduling import wall_clock_ms
from sunglobe.ui.constants import (
    CLEAR_COLOR,
    DEFAULT_ALTITUDE_FACTOR,
    GLOBE_RADIUS,
    LATITUDE_LIMIT_DEG,
    MARKER_ALTITUDE,
    MARKER_COLOR,
    MARKER_RADIUS,
    MAX_ALTITUDE_FACTOR,
    MERIDIAN_COLOR,
    MERIDIAN_SEGMENT_DEG,
    MERIDIAN_STEP_DEG,
    MIN_ALTITUDE_FACTOR,
)
from sunglobe.ui.globe_math import (
    gl_bytes,
    globe_rotation,
    lat_lng_to_vector,
    normalize_longitude,
    scale,
    timezone_meridians,
    translation,
)
from sunglobe.ui.opengl.camera import GlobeCamera
from sunglobe.ui.opengl.shading import (
    COLOR_FRAGMENT_SHADER,
    COLOR_VERTEX_SHADER,
    DAY_NIGHT_FRAGMENT_SHADER,
    DAY_NIGHT_VERTEX_SHADER,
    ShadingParameters,
    bind_day_night_uniforms,
)
from sunglobe.ui.opengl.transition import PointOfViewTransition

logger = logging.getLogger(__name__)

_DRAG_DEG_PER_PIXEL = 0.25


@dataclass(frozen=True)
class MeshBuffers:
    """Container for shared vertex/index buffers."""

    vbo: moderngl.Buffer
    ibo: moderngl.Buffer
    vertex_count: int
    index_element_size: int


def generate_sphere(
    radius: float,
    lng_segments: int,
    lat_segments: int,
) -> tuple[np.ndarray, np.ndarray]:
    """UV sphere in globe space with interleaved position, normal and uv."""
    vertices: list[list[float]] = []
    indices: list[int] = []
    for j in range(lat_segments + 1):
        lat = 90.0 - 180.0 * j / lat_segments
        for i in range(lng_segments + 1):
            lng = -180.0 + 360.0 * i / lng_segments
            nx, ny, nz = lat_lng_to_vector(lat, lng)
            tex_u = (lng + 180.0) / 360.0
            tex_v = (90.0 - lat) / 180.0
            vertices.append(
                [radius * nx, radius * ny, radius * nz, nx, ny, nz, tex_u, tex_v]
            )
    for j in range(lat_segments):
        for i in range(lng_segments):
            a = j * (lng_segments + 1) + i
            b = a + lng_segments + 1
            indices.extend([a, b, b + 1, a, b + 1, a + 1])
    return np.array(vertices, dtype=np.float32), np.array(indices, dtype=np.uint32)


class OrbitControls(QObject):
    """Interaction source: emits ``started``/``ended`` around each gesture."""

    started = Signal()
    ended = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self.enable_zoom = True
        self.enable_pan = False
        self.enable_rotate = True


class GlobeWidget(QOpenGLWidget):
    """ModernGL globe with day/night shading, a marker and meridian lines."""

    resized = Signal(int, int, float)

    def __init__(
        self,
        parent=None,
        *,
        clock: Callable[[], float] = wall_clock_ms,
    ) -> None:
        super().__init__(parent)
        fmt = QSurfaceFormat()
        fmt.setVersion(3, 3)
        fmt.setProfile(QSurfaceFormat.OpenGLContextProfile.CoreProfile)
        fmt.setDepthBufferSize(24)
        self.setFormat(fmt)
        self._clock = clock
        self._ctx: moderngl.Context | None = None
        self._camera: GlobeCamera | None = None
        self._controls = OrbitControls(self)
        self._view = ViewState()
        self._transition: PointOfViewTransition | None = None
        self._marker: Marker | None = None
        self._meridians_visible = True
        self._output_size: tuple[int, int] | None = None
        self._pending_assets: TextureAssets | None = None
        self._shading: ShadingParameters | None = None
        self._day_texture: moderngl.Texture | None = None
        self._night_texture: moderngl.Texture | None = None
        self._mesh_buffers: dict[str, MeshBuffers] = {}
        self._meridian_vbo: moderngl.Buffer | None = None
        self._meridian_ranges: list[tuple[int, int]] = []
        self._programs = {}
        self._vaos = {}
        self._mouse_last_pos = QPoint()
        self._dragging = False

    def sizeHint(self) -> QSize:  # pragma: no cover - Qt hook
        return QSize(640, 640)

    # ------------------------------------------------------------------
    # Qt / ModernGL lifecycle hooks
    # ------------------------------------------------------------------
    def initializeGL(self) -> None:  # pragma: no cover - GPU init
        self._ctx = moderngl.create_context(require=330)
        self._ctx.enable(moderngl.DEPTH_TEST)
        self._ctx.enable(moderngl.CULL_FACE)
        self._ctx.enable(moderngl.BLEND)
        self._ctx.blend_func = (moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA)
        self._compile_programs()
        self._build_meshes()
        self._build_vaos()
        if self._pending_assets is not None:
            self._upload_textures(self._pending_assets)
            self._pending_assets = None

    def resizeGL(self, width: int, height: int) -> None:  # pragma: no cover - Qt hook
        self.resized.emit(width, height, self._device_pixel_ratio())

    def paintGL(self) -> None:  # pragma: no cover - Qt hook
        if self._ctx is None:
            return
        self._bind_default_framebuffer()
        self._ctx.clear(*CLEAR_COLOR)
        if not self.renderer_ready():
            return
        view_state = self.point_of_view()
        self._camera.zoom = DEFAULT_ALTITUDE_FACTOR / max(
            view_state.altitude_factor, 1e-3
        )
        self._camera.update_projection_matrix()
        model = globe_rotation(view_state.latitude_deg, view_state.longitude_deg)
        view = self._camera.view_matrix()
        projection = self._camera.projection_matrix()
        self._draw_earth(projection, view, model)
        self._draw_meridians(projection, view, model)
        self._draw_marker(projection, view, model)

    def _device_pixel_ratio(self) -> float:
        return self.devicePixelRatioF() if hasattr(self, "devicePixelRatioF") else 1.0

    def _bind_default_framebuffer(self) -> None:
        if self._ctx is None:
            return
        framebuffer = self._ctx.detect_framebuffer()
        framebuffer.use()
        if self._output_size is not None:
            width_px, height_px = self._output_size
        else:
            dpr = self._device_pixel_ratio()
            width_px = max(int(self.width() * dpr), 1)
            height_px = max(int(self.height() * dpr), 1)
        self._ctx.viewport = (0, 0, width_px, height_px)

    # ------------------------------------------------------------------
    # Rendering toolkit surface used by the engine
    # ------------------------------------------------------------------
    def camera(self) -> GlobeCamera | None:
        return self._camera

    def install_camera(self, camera: GlobeCamera) -> None:
        self._camera = camera
        self.update()

    def controls(self) -> OrbitControls:
        return self._controls

    def renderer_ready(self) -> bool:
        return (
            self._ctx is not None
            and self._camera is not None
            and self._day_texture is not None
            and self._night_texture is not None
        )

    def install_shading(self, assets: TextureAssets, params: ShadingParameters) -> bool:
        """Attach the day/night material. False until the GL context exists."""
        self._shading = params
        if self._ctx is None:
            self._pending_assets = assets
            return False
        self._upload_textures(assets)
        return True

    def surface_size(self) -> tuple[int, int, float]:
        return self.width(), self.height(), self._device_pixel_ratio()

    def set_output_size(self, width_px: int, height_px: int) -> None:
        self._output_size = (width_px, height_px)

    def request_render(self) -> None:
        self.update()

    def point_of_view(self) -> ViewState:
        if self._transition is not None:
            now = self._clock()
            self._view = self._transition.view_at(now)
            if self._transition.finished(now):
                self._transition = None
        return self._view.copy()

    def set_point_of_view(self, view: ViewState, transition_ms: float = 0.0) -> None:
        target = view.copy(
            latitude_deg=float(
                np.clip(view.latitude_deg, -LATITUDE_LIMIT_DEG, LATITUDE_LIMIT_DEG)
            ),
            longitude_deg=normalize_longitude(view.longitude_deg),
        )
        if transition_ms > 0.0:
            self._transition = PointOfViewTransition(
                start=self.point_of_view(),
                end=target,
                start_time=self._clock(),
                duration_ms=transition_ms,
            )
        else:
            self._transition = None
            self._view = target
        self.update()

    def is_transitioning(self) -> bool:
        if self._transition is None:
            return False
        if self._transition.finished(self._clock()):
            self.point_of_view()
            return False
        return True

    def set_marker(self, marker: Marker | None) -> None:
        self._marker = marker
        logger.debug("Marker set to %s", marker)
        self.update()

    def set_meridians_visible(self, visible: bool) -> None:
        self._meridians_visible = bool(visible)
        self.update()

    # ------------------------------------------------------------------
    # Mouse interaction (orbit controls)
    # ------------------------------------------------------------------
    def mousePressEvent(self, event: QMouseEvent) -> None:  # pragma: no cover - Qt hook
        if event.button() == Qt.MouseButton.LeftButton and self._controls.enable_rotate:
            self._mouse_last_pos = event.pos()
            self._dragging = True
            self._transition = None
            self._controls.started.emit()
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # pragma: no cover - Qt hook
        if self._dragging and event.buttons() & Qt.MouseButton.LeftButton:
            delta = event.pos() - self._mouse_last_pos
            self._mouse_last_pos = event.pos()
            self.drag_by(delta.x(), delta.y())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # pragma: no cover - Qt hook
        if event.button() == Qt.MouseButton.LeftButton and self._dragging:
            self._dragging = False
            self._controls.ended.emit()
        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:  # pragma: no cover - Qt hook
        if not self._controls.enable_zoom:
            super().wheelEvent(event)
            return
        delta = event.angleDelta().y()
        if delta == 0:
            delta = event.pixelDelta().y()
        if delta != 0:
            self._controls.started.emit()
            self.zoom_by(math.exp(-0.12 * delta / 120.0))
            self._controls.ended.emit()
        super().wheelEvent(event)

    def drag_by(self, dx: float, dy: float) -> None:
        """Rotate the globe so the surface follows the pointer."""
        view = self.point_of_view()
        step = _DRAG_DEG_PER_PIXEL * view.altitude_factor / DEFAULT_ALTITUDE_FACTOR
        self.set_point_of_view(
            view.copy(
                longitude_deg=view.longitude_deg - dx * step,
                latitude_deg=view.latitude_deg + dy * step,
            )
        )

    def zoom_by(self, factor: float) -> None:
        view = self.point_of_view()
        altitude = float(
            np.clip(view.altitude_factor * factor, MIN_ALTITUDE_FACTOR, MAX_ALTITUDE_FACTOR)
        )
        self.set_point_of_view(view.copy(altitude_factor=altitude))

    # ------------------------------------------------------------------
    # Internal rendering helpers
    # ------------------------------------------------------------------
    def _compile_programs(self) -> None:
        assert self._ctx is not None
        self._programs["day_night"] = self._ctx.program(
            vertex_shader=DAY_NIGHT_VERTEX_SHADER,
            fragment_shader=DAY_NIGHT_FRAGMENT_SHADER,
        )
        self._programs["color"] = self._ctx.program(
            vertex_shader=COLOR_VERTEX_SHADER,
            fragment_shader=COLOR_FRAGMENT_SHADER,
        )

    def _build_meshes(self) -> None:
        assert self._ctx is not None
        self._mesh_buffers["earth"] = self._create_mesh_buffers(
            *generate_sphere(GLOBE_RADIUS, lng_segments=180, lat_segments=90)
        )
        self._mesh_buffers["marker"] = self._create_mesh_buffers(
            *generate_sphere(1.0, lng_segments=24, lat_segments=12)
        )
        lines = timezone_meridians(
            GLOBE_RADIUS * 1.001, MERIDIAN_STEP_DEG, MERIDIAN_SEGMENT_DEG
        )
        offset = 0
        self._meridian_ranges = []
        for line in lines:
            self._meridian_ranges.append((offset, len(line)))
            offset += len(line)
        data = np.concatenate(lines).astype(np.float32).ravel()
        self._meridian_vbo = self._ctx.buffer(data.tobytes())
        logger.debug("Meridian buffer built (%d lines)", len(lines))

    def _create_mesh_buffers(
        self,
        vertices: np.ndarray,
        indices: np.ndarray,
    ) -> MeshBuffers:
        assert self._ctx is not None
        vbo = self._ctx.buffer(vertices.tobytes())
        ibo = self._ctx.buffer(indices.tobytes())
        return MeshBuffers(
            vbo=vbo,
            ibo=ibo,
            vertex_count=len(indices),
            index_element_size=indices.dtype.itemsize,
        )

    def _build_vaos(self) -> None:
        assert self._ctx is not None
        earth = self._mesh_buffers["earth"]
        self._vaos["earth"] = self._ctx.vertex_array(
            self._programs["day_night"],
            [(earth.vbo, "3f 3f 2f", "in_pos", "in_normal", "in_uv")],
            earth.ibo,
            index_element_size=earth.index_element_size,
        )
        marker = self._mesh_buffers["marker"]
        self._vaos["marker"] = self._ctx.vertex_array(
            self._programs["color"],
            [(marker.vbo, "3f 20x", "in_pos")],
            marker.ibo,
            index_element_size=marker.index_element_size,
        )
        self._vaos["meridians"] = self._ctx.vertex_array(
            self._programs["color"],
            [(self._meridian_vbo, "3f", "in_pos")],
        )

    def _upload_textures(self, assets: TextureAssets) -> None:
        assert self._ctx is not None
        for texture in (self._day_texture, self._night_texture):
            if texture is not None:
                texture.release()
        self._day_texture = self._create_texture(assets.day)
        self._night_texture = self._create_texture(assets.night)
        logger.debug(
            "Uploaded textures day=%s night=%s", assets.day.shape, assets.night.shape
        )

    def _create_texture(self, image: np.ndarray) -> moderngl.Texture:
        assert self._ctx is not None
        data = np.ascontiguousarray(image, dtype=np.uint8)
        texture = self._ctx.texture(data.shape[1::-1], data.shape[2], data.tobytes())
        texture.build_mipmaps()
        texture.filter = (moderngl.LINEAR_MIPMAP_LINEAR, moderngl.LINEAR)
        return texture

    def _draw_earth(self, projection: np.ndarray, view: np.ndarray, model: np.ndarray) -> None:
        prog = self._programs["day_night"]
        model_view = view @ model
        prog["mvp"].write(gl_bytes(projection @ model_view))
        prog["model_view"].write(gl_bytes(model_view))
        bind_day_night_uniforms(prog, self._shading or ShadingParameters())
        self._day_texture.use(location=0)
        self._night_texture.use(location=1)
        self._vaos["earth"].render()

    def _draw_meridians(
        self, projection: np.ndarray, view: np.ndarray, model: np.ndarray
    ) -> None:
        if not self._meridians_visible or "meridians" not in self._vaos:
            return
        prog = self._programs["color"]
        prog["mvp"].write(gl_bytes(projection @ view @ model))
        prog["color"].value = MERIDIAN_COLOR
        self._ctx.line_width = 1
        vao = self._vaos["meridians"]
        for first, count in self._meridian_ranges:
            vao.render(mode=moderngl.LINE_STRIP, vertices=count, first=first)

    def _draw_marker(self, projection: np.ndarray, view: np.ndarray, model: np.ndarray) -> None:
        if self._marker is None or "marker" not in self._vaos:
            return
        position = lat_lng_to_vector(
            self._marker.latitude_deg,
            self._marker.longitude_deg,
            GLOBE_RADIUS * (1.0 + MARKER_ALTITUDE),
        )
        marker_model = model @ translation(position) @ scale(MARKER_RADIUS * 2.0)
        prog = self._programs["color"]
        prog["mvp"].write(gl_bytes(projection @ view @ marker_model))
        prog["color"].value = tuple(c / 255.0 for c in MARKER_COLOR) + (1.0,)
        self._vaos["marker"].render()
