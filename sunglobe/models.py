"""Dataclasses shared between the globe engine and the UI layer."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from sunglobe.ui.constants import (
    DEFAULT_ALTITUDE_FACTOR,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_LIGHT_DIRECTION,
    DEFAULT_MARGIN_FACTOR,
    DEFAULT_RECENTER_ALTITUDE,
    DEFAULT_RECENTER_TRANSITION_MS,
    DEFAULT_ROTATION_RATE_DEG_PER_MS,
    DEFAULT_TERMINATOR_EDGES,
)


@dataclass(frozen=True)
class SolarPosition:
    """Sub-solar point for a given instant."""

    longitude_deg: float
    declination_deg: float


@dataclass(frozen=True)
class CameraPose:
    """Camera orientation derived from the solar declination."""

    up: tuple[float, float, float]
    tilt_rad: float


@dataclass
class ViewState:
    """Globe orientation relative to the viewer."""

    latitude_deg: float = 0.0
    longitude_deg: float = 0.0
    altitude_factor: float = DEFAULT_ALTITUDE_FACTOR

    def copy(self, **changes: float) -> "ViewState":
        return replace(self, **changes)


@dataclass(frozen=True)
class Marker:
    """A resolved location pinned on the globe."""

    latitude_deg: float
    longitude_deg: float
    label: str = ""

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude_deg <= 90.0:
            raise ValueError("Latitude out of range: %s" % self.latitude_deg)
        if not -180.0 <= self.longitude_deg <= 180.0:
            raise ValueError("Longitude out of range: %s" % self.longitude_deg)


@dataclass
class GlobeOptions:
    """Configuration for a globe engine instance.

    Meridian overlay and pointer interaction are flags rather than separate
    globe variants.
    """

    rotation_rate_deg_per_ms: float = DEFAULT_ROTATION_RATE_DEG_PER_MS
    debounce_ms: float = DEFAULT_DEBOUNCE_MS
    terminator_edges: tuple[float, float] = DEFAULT_TERMINATOR_EDGES
    margin_factor: float = DEFAULT_MARGIN_FACTOR
    light_direction: tuple[float, float, float] = DEFAULT_LIGHT_DIRECTION
    projection: str = "orthographic"  # or "perspective"
    show_meridians: bool = True
    enable_interaction: bool = True
    enable_zoom: bool = True
    enable_pan: bool = False
    enable_rotate: bool = True
    recenter_transition_ms: float = DEFAULT_RECENTER_TRANSITION_MS
    recenter_altitude: float = DEFAULT_RECENTER_ALTITUDE
    initial_view: ViewState = field(default_factory=ViewState)

    def __post_init__(self) -> None:
        lo, hi = self.terminator_edges
        if hi <= lo:
            raise ValueError("Terminator edges must satisfy lo < hi")
        if self.margin_factor <= 0.0:
            raise ValueError("Margin factor must be positive")
        if self.debounce_ms < 0.0:
            raise ValueError("Debounce delay must not be negative")
        if self.projection not in {"orthographic", "perspective"}:
            raise ValueError("Unsupported projection: %s" % self.projection)
