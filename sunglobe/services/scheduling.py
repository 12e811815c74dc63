"""Time source and timer protocols shared by the engine components.

The engine never talks to Qt directly; the Qt adapter lives in
``sunglobe.ui.qt_scheduler`` and tests use a manual fake.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol

Callback = Callable[[], None]


def wall_clock_ms() -> float:
    """Milliseconds since the Unix epoch."""
    return time.time() * 1000.0


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Cooperative timer source; every callback runs on the same thread."""

    def now(self) -> float: ...

    def call_later(self, delay_ms: float, callback: Callback) -> TimerHandle: ...

    def request_frame(self, callback: Callback) -> TimerHandle: ...


class Lifecycle:
    """The single aliveness flag shared by every deferred engine callback."""

    def __init__(self) -> None:
        self.alive = True

    def guard(self, callback: Callable[..., None]) -> Callable[..., None]:
        """Wrap a callback so it turns into a no-op after teardown."""

        def _guarded(*args, **kwargs) -> None:
            if not self.alive:
                return
            callback(*args, **kwargs)

        return _guarded

    def shutdown(self) -> None:
        self.alive = False
