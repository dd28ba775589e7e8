"""Position readings, reverse geocoding and map links for the check-in flow."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import httpx

from ..core.config import settings
from .errors import GeolocationError

logger = logging.getLogger(__name__)

GEOCODE_TIMEOUT = httpx.Timeout(6.0)


@dataclass(frozen=True)
class GeoReading:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    taken_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def as_payload(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "timestamp": self.taken_at.isoformat(),
        }


class PositionProvider(Protocol):
    """Anything that can produce a fix: a GPS daemon, a fixed test value."""

    async def current_position(self) -> GeoReading: ...


class StaticPositionProvider:
    """Returns a fixed reading, or raises a fixed ``GeolocationError``."""

    def __init__(self, reading: GeoReading | None = None, *, error_code: int | None = None) -> None:
        if reading is None and error_code is None:
            raise ValueError("Provide a reading or an error code")
        self.reading = reading
        self.error_code = error_code
        self.calls = 0

    def move_to(self, latitude: float, longitude: float, accuracy: float | None = None) -> None:
        self.reading = GeoReading(latitude, longitude, accuracy)
        self.error_code = None

    async def current_position(self) -> GeoReading:
        self.calls += 1
        if self.error_code is not None:
            raise GeolocationError(self.error_code)
        assert self.reading is not None
        return GeoReading(self.reading.latitude, self.reading.longitude, self.reading.accuracy)


async def read_position(provider: PositionProvider, timeout: float) -> GeoReading:
    """One reading from ``provider``, failing with a TIMEOUT error after ``timeout`` seconds."""

    try:
        return await asyncio.wait_for(provider.current_position(), timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise GeolocationError(GeolocationError.TIMEOUT) from exc


def fallback_address(latitude: float, longitude: float) -> str:
    return f"Location: {latitude:.4f}, {longitude:.4f}"


async def reverse_geocode(
    latitude: float,
    longitude: float,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Human-readable address for a coordinate; never raises.

    Asks the configured Nominatim endpoint for ``display_name`` and falls back
    to the bare coordinates on any failure.
    """

    params = {"format": "json", "lat": latitude, "lon": longitude}
    headers = {"User-Agent": settings.GEOCODE_USER_AGENT}
    try:
        async with httpx.AsyncClient(timeout=GEOCODE_TIMEOUT, transport=transport) as client:
            response = await client.get(settings.GEOCODE_URL, params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Reverse geocoding failed for %s,%s: %s", latitude, longitude, exc)
        return fallback_address(latitude, longitude)

    name = data.get("display_name") if isinstance(data, dict) else None
    if not name:
        return fallback_address(latitude, longitude)
    return name


def maps_url(latitude: float, longitude: float) -> str:
    """Satellite view at street zoom, for "view on map" links."""

    return f"https://www.google.com/maps?q={latitude},{longitude}&z=19&t=h"


__all__ = [
    "GeoReading",
    "PositionProvider",
    "StaticPositionProvider",
    "read_position",
    "reverse_geocode",
    "fallback_address",
    "maps_url",
]
