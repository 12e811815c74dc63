"""QTimer-backed scheduler for the globe engine."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, Qt, QTimer

from sunglobe.services.scheduling import Callback, wall_clock_ms
from sunglobe.ui.constants import FRAME_INTERVAL_MS


class QtTimerHandle:
    """Cancelable wrapper around a single-shot QTimer."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: QTimer | None = timer

    @property
    def active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None

    def _fired(self) -> None:
        if self._timer is not None:
            self._timer.deleteLater()
            self._timer = None


class QtFrameHandle:
    """One pending request on the scheduler's shared frame timer."""

    def __init__(self, scheduler: "QtScheduler") -> None:
        self._scheduler = scheduler

    @property
    def active(self) -> bool:
        return self._scheduler._frame_request is self

    def cancel(self) -> None:
        self._scheduler._cancel_frame(self)


class QtScheduler(QObject):
    """Runs engine callbacks on the GUI thread's event loop.

    Debounce delays get their own single-shot timer. Frames share one timer
    that is restarted per request, so the newest request replaces any
    pending one.
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        clock: Callable[[], float] = wall_clock_ms,
        frame_interval_ms: int = FRAME_INTERVAL_MS,
    ) -> None:
        super().__init__(parent)
        self._clock = clock
        self._frame_timer = QTimer(self)
        self._frame_timer.setSingleShot(True)
        self._frame_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._frame_timer.setInterval(frame_interval_ms)
        self._frame_timer.timeout.connect(self._run_frame)
        self._frame_request: QtFrameHandle | None = None
        self._frame_callback: Callback | None = None

    def now(self) -> float:
        return self._clock()

    def call_later(self, delay_ms: float, callback: Callback) -> QtTimerHandle:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setInterval(max(int(round(delay_ms)), 0))
        handle = QtTimerHandle(timer)

        def _fire() -> None:
            handle._fired()
            callback()

        timer.timeout.connect(_fire)
        timer.start()
        return handle

    def request_frame(self, callback: Callback) -> QtFrameHandle:
        handle = QtFrameHandle(self)
        self._frame_request = handle
        self._frame_callback = callback
        self._frame_timer.start()
        return handle

    def _cancel_frame(self, handle: QtFrameHandle) -> None:
        if self._frame_request is not handle:
            return
        self._frame_timer.stop()
        self._frame_request = None
        self._frame_callback = None

    def _run_frame(self) -> None:
        callback = self._frame_callback
        self._frame_request = None
        self._frame_callback = None
        if callback is not None:
            callback()
