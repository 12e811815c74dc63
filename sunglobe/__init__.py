"""Sunlit Globe: a rotating Earth shaded by real-time solar illumination."""

__version__ = "0.1.0"
