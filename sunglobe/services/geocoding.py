"""Resolve free-text places to markers.

Lookups run outside the engine; the engine only ever receives a validated
``Marker``.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

import requests

from sunglobe.models import Marker

logger = logging.getLogger(__name__)

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
_COORDINATE_PATTERN = re.compile(
    r"^\s*([-+]?\d+(?:\.\d+)?)\s*[,;\s]\s*([-+]?\d+(?:\.\d+)?)\s*$"
)


class GeocodingError(Exception):
    """Raised when a query cannot be resolved to a location."""


class Geocoder(Protocol):
    def lookup(self, query: str) -> Marker: ...


def parse_coordinates(text: str) -> Marker | None:
    """Parse ``"lat, lng"`` text. Returns None when the text is not a pair."""
    match = _COORDINATE_PATTERN.match(text)
    if match is None:
        return None
    lat, lng = float(match.group(1)), float(match.group(2))
    try:
        return Marker(latitude_deg=lat, longitude_deg=lng, label=f"{lat:.4f}, {lng:.4f}")
    except ValueError as exc:
        raise GeocodingError(str(exc)) from exc


class CoordinateGeocoder:
    """Accepts only explicit coordinate pairs."""

    def lookup(self, query: str) -> Marker:
        if not query.strip():
            raise GeocodingError("Enter a place name or coordinates")
        marker = parse_coordinates(query)
        if marker is None:
            raise GeocodingError(f"Not a coordinate pair: {query!r}")
        return marker


class NominatimGeocoder:
    """OpenStreetMap Nominatim search, with coordinate pairs short-circuited."""

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        base_url: str = NOMINATIM_SEARCH_URL,
        timeout: float = 10.0,
        user_agent: str = "sunglobe/0.1",
    ) -> None:
        self._session = session or requests.Session()
        self._base_url = base_url
        self._timeout = timeout
        self._headers = {"User-Agent": user_agent}

    def lookup(self, query: str) -> Marker:
        text = query.strip()
        if not text:
            raise GeocodingError("Enter a place name or coordinates")
        marker = parse_coordinates(text)
        if marker is not None:
            return marker
        try:
            response = self._session.get(
                self._base_url,
                params={"format": "json", "q": text, "limit": 1},
                headers=self._headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
            results = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Geocoding request failed for %r: %s", text, exc)
            raise GeocodingError(f"Error looking up location: {exc}") from exc
        if not results:
            raise GeocodingError("Location not found")
        first = results[0]
        try:
            return Marker(
                latitude_deg=float(first["lat"]),
                longitude_deg=float(first["lon"]),
                label=str(first.get("display_name", text)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError(f"Malformed geocoding result: {exc}") from exc
