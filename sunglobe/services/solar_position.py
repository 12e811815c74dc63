"""Low-precision solar ephemeris (NOAA spreadsheet formulas).

Accuracy is well under a degree, plenty for drawing a terminator and tilting
the camera with the seasons. Instants are milliseconds since the Unix epoch.
"""

from __future__ import annotations

import math

from sunglobe.models import SolarPosition
from sunglobe.ui.constants import MAX_DECLINATION_DEG, MS_PER_DAY
from sunglobe.ui.globe_math import normalize_longitude

_UNIX_EPOCH_JULIAN_DAY = 2440587.5
_J2000_JULIAN_DAY = 2451545.0
_DAYS_PER_CENTURY = 36525.0


def century(instant_ms: float) -> float:
    """Julian centuries since J2000.0."""
    julian_day = instant_ms / MS_PER_DAY + _UNIX_EPOCH_JULIAN_DAY
    return (julian_day - _J2000_JULIAN_DAY) / _DAYS_PER_CENTURY


def _mean_longitude(t: float) -> float:
    return (280.46646 + t * (36000.76983 + t * 0.0003032)) % 360.0


def _mean_anomaly(t: float) -> float:
    return 357.52911 + t * (35999.05029 - 0.0001537 * t)


def _eccentricity(t: float) -> float:
    return 0.016708634 - t * (0.000042037 + 0.0000001267 * t)


def _equation_of_center(t: float) -> float:
    m = math.radians(_mean_anomaly(t))
    return (
        math.sin(m) * (1.914602 - t * (0.004817 + 0.000014 * t))
        + math.sin(2 * m) * (0.019993 - 0.000101 * t)
        + math.sin(3 * m) * 0.000289
    )


def _apparent_longitude(t: float) -> float:
    true_longitude = _mean_longitude(t) + _equation_of_center(t)
    omega = math.radians(125.04 - 1934.136 * t)
    return true_longitude - 0.00569 - 0.00478 * math.sin(omega)


def _obliquity(t: float) -> float:
    seconds = 21.448 - t * (46.8150 + t * (0.00059 - t * 0.001813))
    mean = 23.0 + (26.0 + seconds / 60.0) / 60.0
    omega = math.radians(125.04 - 1934.136 * t)
    return mean + 0.00256 * math.cos(omega)


def declination(t: float) -> float:
    """Solar declination in degrees for a Julian century value."""
    eps = math.radians(_obliquity(t))
    lam = math.radians(_apparent_longitude(t))
    value = math.degrees(math.asin(math.sin(eps) * math.sin(lam)))
    return max(-MAX_DECLINATION_DEG, min(MAX_DECLINATION_DEG, value))


def equation_of_time(t: float) -> float:
    """Equation of time in minutes (apparent minus mean solar time)."""
    eps = math.radians(_obliquity(t))
    l0 = math.radians(_mean_longitude(t))
    e = _eccentricity(t)
    m = math.radians(_mean_anomaly(t))
    y = math.tan(eps / 2.0) ** 2
    sin_m = math.sin(m)
    value = (
        y * math.sin(2 * l0)
        - 2 * e * sin_m
        + 4 * e * y * sin_m * math.cos(2 * l0)
        - 0.5 * y * y * math.sin(4 * l0)
        - 1.25 * e * e * math.sin(2 * m)
    )
    return math.degrees(value) * 4.0


def declination_at(instant_ms: float) -> float:
    return declination(century(instant_ms))


def position_at(instant_ms: float) -> SolarPosition:
    """Return the sub-solar longitude and declination at an instant."""
    t = century(instant_ms)
    day_start = math.floor(instant_ms / MS_PER_DAY) * MS_PER_DAY
    longitude = (day_start - instant_ms) / MS_PER_DAY * 360.0 - 180.0
    longitude -= equation_of_time(t) / 4.0
    return SolarPosition(
        longitude_deg=normalize_longitude(longitude),
        declination_deg=declination(t),
    )
