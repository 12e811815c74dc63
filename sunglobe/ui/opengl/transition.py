"""Animated point-of-view changes (recenter on a location)."""

from __future__ import annotations

from dataclasses import dataclass

from sunglobe.models import ViewState
from sunglobe.ui.globe_math import normalize_longitude


def ease_in_out_cubic(fraction: float) -> float:
    f = min(max(fraction, 0.0), 1.0)
    if f < 0.5:
        return 4.0 * f * f * f
    return 1.0 - (-2.0 * f + 2.0) ** 3 / 2.0


@dataclass(frozen=True)
class PointOfViewTransition:
    """Tween between two view states over ``duration_ms``.

    Longitude takes the short way round the antimeridian.
    """

    start: ViewState
    end: ViewState
    start_time: float
    duration_ms: float

    def finished(self, now: float) -> bool:
        return now - self.start_time >= self.duration_ms

    def view_at(self, now: float) -> ViewState:
        if self.duration_ms <= 0.0 or self.finished(now):
            return self.end.copy()
        k = ease_in_out_cubic((now - self.start_time) / self.duration_ms)
        lng_delta = normalize_longitude(self.end.longitude_deg - self.start.longitude_deg)
        return ViewState(
            latitude_deg=self.start.latitude_deg
            + (self.end.latitude_deg - self.start.latitude_deg) * k,
            longitude_deg=normalize_longitude(self.start.longitude_deg + lng_delta * k),
            altitude_factor=self.start.altitude_factor
            + (self.end.altitude_factor - self.start.altitude_factor) * k,
        )
