"""Per-frame driver for idle auto-rotation and camera tilt."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from sunglobe.models import ViewState
from sunglobe.services.camera_sync import CameraSynchronizer
from sunglobe.services.interaction import InteractionGate
from sunglobe.ui.globe_math import normalize_longitude

logger = logging.getLogger(__name__)


class RotatableSurface(Protocol):
    """The part of the rendering toolkit the scheduler drives."""

    def renderer_ready(self) -> bool: ...

    def camera(self): ...

    def point_of_view(self) -> ViewState: ...

    def set_point_of_view(self, view: ViewState, transition_ms: float = 0.0) -> None: ...

    def is_transitioning(self) -> bool: ...

    def request_render(self) -> None: ...


class RotationScheduler:
    """Advances the globe at a fixed angular rate while nobody is dragging it.

    The view longitude steps back by ``rate * delta`` so surface features
    drift left to right, the way the Earth turns under a fixed viewer.

    The camera tilt is refreshed on every tick, including while the user is
    interacting; only the longitude nudge is gated.
    """

    def __init__(
        self,
        surface: RotatableSurface,
        gate: InteractionGate,
        synchronizer: CameraSynchronizer,
        declination_source: Callable[[float], float],
        *,
        rate_deg_per_ms: float,
        start_time: float,
    ) -> None:
        self._surface = surface
        self._gate = gate
        self._synchronizer = synchronizer
        self._declination_source = declination_source
        self.rate_deg_per_ms = rate_deg_per_ms
        self.last_frame_time = start_time

    def reset_baseline(self, now: float) -> None:
        self.last_frame_time = now

    def tick(self, now: float) -> bool:
        """Run one frame. Returns True when the globe was rotated."""
        delta = now - self.last_frame_time
        self.last_frame_time = now
        camera = self._surface.camera()
        if camera is None or not self._surface.renderer_ready():
            logger.debug("Surface not ready; skipping frame work")
            return False
        self._synchronizer.apply(camera, self._declination_source(now))
        rotated = False
        # Both the gate and a running recenter transition own the view.
        if not self._gate.is_active() and not self._surface.is_transitioning() and delta > 0:
            view = self._surface.point_of_view()
            longitude = normalize_longitude(
                view.longitude_deg - self.rate_deg_per_ms * delta
            )
            self._surface.set_point_of_view(view.copy(longitude_deg=longitude), 0.0)
            rotated = True
        self._surface.request_render()
        return rotated
