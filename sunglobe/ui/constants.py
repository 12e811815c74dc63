"""Shared constants for the Sunlit Globe."""

from __future__ import annotations

from pathlib import Path

TEXTURE_DIR = Path(__file__).resolve().parents[2] / "resources" / "textures"
EARTH_DAYMAP_FILE = TEXTURE_DIR / "earth-day.jpg"
EARTH_NIGHTMAP_FILE = TEXTURE_DIR / "earth-night.jpg"
# Solid fallbacks used when a texture file is missing.
DAYMAP_FALLBACK_COLOR = (11, 42, 63)
NIGHTMAP_FALLBACK_COLOR = (2, 4, 10)

MS_PER_DAY = 86_400_000.0
MAX_DECLINATION_DEG = 23.44
# One revolution per day.
DEFAULT_ROTATION_RATE_DEG_PER_MS = 360.0 / MS_PER_DAY
DEFAULT_DEBOUNCE_MS = 2000.0
DEFAULT_TERMINATOR_EDGES = (0.0, 0.15)
DEFAULT_MARGIN_FACTOR = 2.1
# Sun arriving from the right of the screen, in view space.
DEFAULT_LIGHT_DIRECTION = (1.0, 0.0, 0.0)
DEFAULT_ALTITUDE_FACTOR = 2.5
DEFAULT_RECENTER_ALTITUDE = 2.0
DEFAULT_RECENTER_TRANSITION_MS = 1000.0

GLOBE_RADIUS = 100.0
CAMERA_DISTANCE = 400.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 2000.0
PERSPECTIVE_FOV_DEG = 50.0
LATITUDE_LIMIT_DEG = 89.5
MIN_ALTITUDE_FACTOR = 0.5
MAX_ALTITUDE_FACTOR = 8.0

FRAME_INTERVAL_MS = 16
CLOCK_REFRESH_MS = 1000
MARKER_ALTITUDE = 0.02
MARKER_RADIUS = 0.6
MARKER_COLOR = (255, 221, 0)
MERIDIAN_STEP_DEG = 15
MERIDIAN_SEGMENT_DEG = 2
MERIDIAN_COLOR = (1.0, 1.0, 1.0, 0.55)
CLEAR_COLOR = (0.0, 0.0, 0.0, 1.0)
