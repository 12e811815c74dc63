"""Globe engine: ordered initialization, frame loop and teardown.

``GlobeEngine.start()`` returns a ``GlobeController``; anything that later
needs to move the view or pin a marker goes through that handle.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Protocol

from sunglobe.models import GlobeOptions, Marker, ViewState
from sunglobe.services.assets import AssetFetch, TextureAssets
from sunglobe.services.camera_sync import CameraSynchronizer
from sunglobe.services.interaction import InteractionGate
from sunglobe.services.rotation import RotatableSurface, RotationScheduler
from sunglobe.services.scheduling import Lifecycle, Scheduler, TimerHandle
from sunglobe.services.solar_position import declination_at
from sunglobe.services.viewport import ViewportAdapter
from sunglobe.ui.opengl.camera import GlobeCamera
from sunglobe.ui.opengl.shading import ShadingParameters

logger = logging.getLogger(__name__)


class InitStage(Enum):
    LOADING_ASSETS = "loading_assets"
    BUILDING_SHADING = "building_shading"
    BUILDING_CAMERA = "building_camera"
    RUNNING = "running"
    TORN_DOWN = "torn_down"


class GlobeSurface(RotatableSurface, Protocol):
    """Rendering toolkit boundary consumed by the engine."""

    resized: object  # signal(int, int, float)

    def install_shading(self, assets: TextureAssets, params: ShadingParameters) -> bool: ...

    def install_camera(self, camera: GlobeCamera) -> None: ...

    def set_output_size(self, width_px: int, height_px: int) -> None: ...

    def surface_size(self) -> tuple[int, int, float]: ...

    def set_marker(self, marker: Marker | None) -> None: ...

    def set_meridians_visible(self, visible: bool) -> None: ...

    def controls(self): ...


class GlobeEngine:
    """Owns the per-frame loop and every engine component."""

    def __init__(
        self,
        surface: GlobeSurface,
        scheduler: Scheduler,
        options: GlobeOptions | None = None,
        *,
        declination_source: Callable[[float], float] = declination_at,
        asset_fetch_factory: Callable[[ThreadPoolExecutor], AssetFetch] = AssetFetch,
    ) -> None:
        self.options = options or GlobeOptions()
        self._surface = surface
        self._scheduler = scheduler
        self._declination_source = declination_source
        self._asset_fetch_factory = asset_fetch_factory
        self._lifecycle = Lifecycle()
        self._stage = InitStage.LOADING_ASSETS
        self._executor: ThreadPoolExecutor | None = None
        self._assets: AssetFetch | None = None
        self._frame_handle: TimerHandle | None = None
        self._subscriptions: list[tuple[object, Callable]] = []
        self._shading = ShadingParameters(
            light_direction=self.options.light_direction,
            terminator_edges=self.options.terminator_edges,
        )
        self.synchronizer = CameraSynchronizer()
        self.gate = InteractionGate(
            scheduler,
            self._lifecycle,
            debounce_ms=self.options.debounce_ms,
            on_release=self._on_interaction_released,
        )
        self.rotation = RotationScheduler(
            surface,
            self.gate,
            synchronizer=self.synchronizer,
            declination_source=declination_source,
            rate_deg_per_ms=self.options.rotation_rate_deg_per_ms,
            start_time=scheduler.now(),
        )
        self.viewport = ViewportAdapter(
            margin_factor=self.options.margin_factor,
            set_output_size=surface.set_output_size,
        )

    @property
    def stage(self) -> InitStage:
        return self._stage

    @property
    def ready(self) -> bool:
        return self._stage is InitStage.RUNNING

    @property
    def alive(self) -> bool:
        return self._lifecycle.alive

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> "GlobeController":
        if self._executor is not None or not self._lifecycle.alive:
            raise RuntimeError("Globe engine can only be started once")
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="globe-assets")
        self._assets = self._asset_fetch_factory(self._executor)
        self._surface.set_point_of_view(self.options.initial_view.copy(), 0.0)
        self._surface.set_meridians_visible(self.options.show_meridians)
        self._configure_controls()
        self._subscribe(self._surface.resized, self._on_resize)
        self._schedule_frame()
        logger.debug("Globe engine started")
        return GlobeController(self)

    def teardown(self) -> None:
        if not self._lifecycle.alive:
            return
        self._lifecycle.shutdown()
        self._stage = InitStage.TORN_DOWN
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None
        self.gate.cancel()
        for signal, slot in self._subscriptions:
            signal.disconnect(slot)
        self._subscriptions.clear()
        if self._assets is not None:
            self._assets.cancel()
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
        logger.debug("Globe engine torn down")

    def _subscribe(self, signal, callback: Callable) -> None:
        slot = self._lifecycle.guard(callback)
        signal.connect(slot)
        self._subscriptions.append((signal, slot))

    def _configure_controls(self) -> None:
        controls = self._surface.controls()
        interactive = self.options.enable_interaction
        controls.enable_zoom = interactive and self.options.enable_zoom
        controls.enable_pan = interactive and self.options.enable_pan
        controls.enable_rotate = interactive and self.options.enable_rotate
        if interactive:
            self._subscribe(controls.started, self.gate.start)
            self._subscribe(controls.ended, self.gate.end)

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------
    def _schedule_frame(self) -> None:
        self._frame_handle = self._scheduler.request_frame(
            self._lifecycle.guard(self._on_frame)
        )

    def _on_frame(self) -> None:
        now = self._scheduler.now()
        if self._stage is not InitStage.RUNNING:
            self._advance_initialization(now)
        self.rotation.tick(now)
        self._schedule_frame()

    def _advance_initialization(self, now: float) -> None:
        """Step through the ordered init sequence, as far as it can go."""
        if self._stage is InitStage.LOADING_ASSETS:
            if self._assets is None or not self._assets.done():
                return
            self._stage = InitStage.BUILDING_SHADING
            logger.debug("Textures loaded")
        if self._stage is InitStage.BUILDING_SHADING:
            if not self._surface.install_shading(self._assets.result(), self._shading):
                return
            self._stage = InitStage.BUILDING_CAMERA
        if self._stage is InitStage.BUILDING_CAMERA:
            camera = GlobeCamera(
                orthographic_projection=self.options.projection == "orthographic"
            )
            self.synchronizer.apply(camera, self._declination_source(now))
            self._surface.install_camera(camera)
            self.viewport.invalidate()
            width, height, ratio = self._surface.surface_size()
            self.viewport.resize(camera, width, height, ratio)
            self.rotation.reset_baseline(now)
            self._stage = InitStage.RUNNING
            logger.info("Globe engine ready")

    def _on_interaction_released(self, now: float) -> None:
        # Without this the first idle frame would apply the whole pause as rotation.
        self.rotation.reset_baseline(now)

    def _on_resize(self, width: int, height: int, device_pixel_ratio: float = 1.0) -> None:
        camera = self._surface.camera()
        if camera is None:
            # Applied from the surface size once the camera exists.
            return
        if self.viewport.resize(camera, width, height, device_pixel_ratio):
            self._surface.request_render()

    # ------------------------------------------------------------------
    # Controller operations
    # ------------------------------------------------------------------
    def show_location(self, marker: Marker) -> None:
        self._surface.set_marker(marker)
        current = self._surface.point_of_view()
        target = ViewState(
            latitude_deg=marker.latitude_deg,
            longitude_deg=marker.longitude_deg,
            altitude_factor=self.options.recenter_altitude
            if self.options.recenter_altitude > 0
            else current.altitude_factor,
        )
        self._surface.set_point_of_view(target, self.options.recenter_transition_ms)
        logger.debug(
            "Recentering on %.3f, %.3f (%s)",
            marker.latitude_deg,
            marker.longitude_deg,
            marker.label,
        )

    def clear_marker(self) -> None:
        self._surface.set_marker(None)

    def point_of_view(self) -> ViewState:
        return self._surface.point_of_view()


class GlobeController:
    """Handle returned by ``GlobeEngine.start()``.

    Every method is a no-op once the engine has been torn down.
    """

    def __init__(self, engine: GlobeEngine) -> None:
        self._engine = engine
        self._marker: Marker | None = None

    @property
    def ready(self) -> bool:
        return self._engine.ready

    @property
    def alive(self) -> bool:
        return self._engine.alive

    @property
    def marker(self) -> Marker | None:
        return self._marker

    def show_location(self, marker: Marker) -> bool:
        """Pin ``marker`` (replacing any previous one) and animate to it."""
        if not self._engine.alive:
            return False
        self._marker = marker
        self._engine.show_location(marker)
        return True

    def clear_marker(self) -> None:
        if not self._engine.alive:
            return
        self._marker = None
        self._engine.clear_marker()

    def view_state(self) -> ViewState:
        return self._engine.point_of_view()

    def teardown(self) -> None:
        self._engine.teardown()
