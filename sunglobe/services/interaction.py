"""Debounced tracking of user manipulation of the globe view."""

from __future__ import annotations

import logging
from typing import Callable

from sunglobe.services.scheduling import Lifecycle, Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class InteractionGate:
    """Reports whether the user currently owns the view.

    ``start()`` makes the gate active immediately. ``end()`` keeps it active
    until ``debounce_ms`` passes without another ``start()``; the release
    then calls ``on_release(now)`` so the rotation baseline can be reset.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        lifecycle: Lifecycle,
        *,
        debounce_ms: float,
        on_release: Callable[[float], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._lifecycle = lifecycle
        self._debounce_ms = debounce_ms
        self._on_release = on_release
        self._is_interacting = False
        self._release_timer: TimerHandle | None = None

    def is_active(self) -> bool:
        return self._is_interacting

    @property
    def release_pending(self) -> bool:
        return self._release_timer is not None

    def start(self) -> None:
        if not self._lifecycle.alive:
            return
        self._cancel_release()
        if not self._is_interacting:
            logger.debug("Interaction started")
        self._is_interacting = True

    def end(self) -> None:
        if not self._lifecycle.alive:
            return
        self._cancel_release()
        self._release_timer = self._scheduler.call_later(
            self._debounce_ms, self._lifecycle.guard(self._release)
        )

    def cancel(self) -> None:
        """Drop any pending release without changing state."""
        self._cancel_release()

    def _cancel_release(self) -> None:
        if self._release_timer is not None:
            self._release_timer.cancel()
            self._release_timer = None

    def _release(self) -> None:
        self._release_timer = None
        if not self._is_interacting:
            return
        self._is_interacting = False
        now = self._scheduler.now()
        logger.debug("Interaction released at %.0f", now)
        if self._on_release is not None:
            self._on_release(now)
