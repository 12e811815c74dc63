"""Keep the camera projection in step with the drawing surface size."""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)


class ViewportAdapter:
    """Recomputes projection extents on resize so the globe stays in frame."""

    def __init__(
        self,
        *,
        margin_factor: float,
        set_output_size: Callable[[int, int], None],
    ) -> None:
        self._margin_factor = margin_factor
        self._set_output_size = set_output_size
        self._size: tuple[int, int] | None = None

    @property
    def size(self) -> tuple[int, int] | None:
        return self._size

    def half_extent(self, width: int, height: int) -> float:
        return min(width, height) / self._margin_factor

    def resize(self, camera, width: int, height: int, device_pixel_ratio: float = 1.0) -> bool:
        """Apply a new surface size. Returns False when nothing changed."""
        if width <= 0 or height <= 0:
            return False
        if self._size == (width, height):
            return False
        self._size = (width, height)
        aspect = width / height
        if camera.is_orthographic:
            d = self.half_extent(width, height)
            camera.set_frustum(-d * aspect, d * aspect, d, -d)
        else:
            camera.aspect = aspect
        camera.look_at(camera.target)
        camera.update_projection_matrix()
        self._set_output_size(
            max(int(width * device_pixel_ratio), 1),
            max(int(height * device_pixel_ratio), 1),
        )
        logger.debug("Viewport resized to %dx%d", width, height)
        return True

    def invalidate(self) -> None:
        """Forget the last size so the next resize is applied unconditionally."""
        self._size = None
