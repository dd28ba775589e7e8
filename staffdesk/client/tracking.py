"""Check-in/check-out with live position updates while checked in."""

from __future__ import annotations

import asyncio
import logging
import platform
import time
from typing import Any

import httpx

from ..core.config import settings
from .errors import ApiError, GeolocationError, SessionExpired
from .geo import PositionProvider, read_position, reverse_geocode
from .notify import Notifier
from .services import LocationService
from .storage import LOCATION_STATUS_KEY, MemoryStorage

logger = logging.getLogger(__name__)

TRACKING_ERROR = "Location tracking error. Please check your GPS settings."
NO_GEOLOCATION = "Geolocation is not supported on this device."


def default_device() -> str:
    return f"{platform.system() or 'Unknown'} - {platform.python_implementation()}/{platform.python_version()}"


def broadcast_status_change(storage: MemoryStorage) -> str:
    """Write the check-in broadcast key other processes poll for."""

    stamp = str(int(time.time() * 1000))
    storage.set_item(LOCATION_STATUS_KEY, stamp)
    return stamp


class LiveTracker:
    """Posts a fresh reading for one check-in every ``interval`` seconds.

    Failed readings and failed posts are logged and the loop carries on; a
    rejected session ends it.
    """

    def __init__(
        self,
        locations: LocationService,
        provider: PositionProvider | None,
        *,
        interval: float | None = None,
        reading_timeout: float | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.locations = locations
        self.provider = provider
        self.interval = interval if interval is not None else settings.LIVE_UPDATE_INTERVAL
        self.reading_timeout = reading_timeout if reading_timeout is not None else settings.GEO_WATCH_TIMEOUT
        self.notifier = notifier
        self.location_id: int | None = None
        self.updates_sent = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, location_id: int) -> bool:
        if self.provider is None:
            return False
        if self.running:
            logger.debug("Live tracking already running for %s", self.location_id)
            return False
        self.location_id = location_id
        self.updates_sent = 0
        self._task = asyncio.get_running_loop().create_task(self._run(location_id))
        logger.info("Live location tracking started for location %s", location_id)
        return True

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Live tracking for location %s had failed", self.location_id)
        logger.info("Live location tracking stopped for location %s", self.location_id)
        self.location_id = None

    async def _run(self, location_id: int) -> None:
        while True:
            try:
                reading = await read_position(self.provider, self.reading_timeout)
                await self.locations.live_update(location_id, reading.as_payload())
                self.updates_sent += 1
            except GeolocationError as exc:
                logger.warning("Live tracking reading failed: %s", exc)
                if self.notifier is not None:
                    self.notifier.error(TRACKING_ERROR)
            except SessionExpired:
                logger.info("Session ended; live tracking for %s stops", location_id)
                return
            except ApiError as exc:
                logger.warning("Failed to update location on server: %s", exc.message)
            except Exception:
                logger.exception("Live tracking reading for location %s failed", location_id)
                if self.notifier is not None:
                    self.notifier.error(TRACKING_ERROR)
            await asyncio.sleep(self.interval)


class CheckInFlow:
    def __init__(
        self,
        locations: LocationService,
        storage: MemoryStorage,
        provider: PositionProvider | None,
        *,
        notifier: Notifier | None = None,
        fix_timeout: float | None = None,
        tracker: LiveTracker | None = None,
        geocode_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.locations = locations
        self.storage = storage
        self.provider = provider
        self.notifier = notifier or Notifier()
        self.fix_timeout = fix_timeout if fix_timeout is not None else settings.GEO_FIX_TIMEOUT
        self.tracker = tracker or LiveTracker(locations, provider, notifier=self.notifier)
        self.geocode_transport = geocode_transport

    async def check_in(self, device: str | None = None) -> dict[str, Any] | None:
        """Take a fix, name it, post it. Returns the new record or ``None``."""

        if self.provider is None:
            self.notifier.error(NO_GEOLOCATION)
            return None
        try:
            reading = await read_position(self.provider, self.fix_timeout)
        except GeolocationError as exc:
            self.notifier.error(str(exc))
            return None

        address = await reverse_geocode(reading.latitude, reading.longitude, transport=self.geocode_transport)
        payload = {
            "latitude": reading.latitude,
            "longitude": reading.longitude,
            "address": address,
            "device": device or default_device(),
            "accuracy": reading.accuracy,
        }
        try:
            response = await self.locations.check_in(payload)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.notifier.failure("check in", exc, label="Check-in")
            return None

        record = response.data or {}
        self.notifier.success("Checked in successfully!")
        if record.get("id") is not None:
            self.tracker.start(record["id"])
        broadcast_status_change(self.storage)
        return record

    async def check_out(self, location_id: int) -> dict[str, Any] | None:
        try:
            response = await self.locations.check_out(location_id)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.notifier.failure("check out", exc, label="Check-out")
            return None

        self.notifier.success("Successfully checked out!")
        await self.tracker.stop()
        broadcast_status_change(self.storage)
        return response.data

    async def delete_location(self, location_id: int) -> bool:
        try:
            await self.locations.delete(location_id)
        except SessionExpired:
            raise
        except ApiError as exc:
            self.notifier.failure("delete location record", exc, label="Delete")
            return False
        if self.tracker.location_id == location_id:
            await self.tracker.stop()
        self.notifier.success("Location record deleted successfully!")
        return True


__all__ = ["CheckInFlow", "LiveTracker", "broadcast_status_change", "default_device", "TRACKING_ERROR"]
