"""
Client-side location tracker.

Watches the device position and pushes every fix to the API. Fixes that
cannot be sent because the network is down are stored in the offline queue
for the background sync worker.
"""
import threading
from typing import Optional

import httpx

from client.api import LocationApi
from client.geolocation import (
    Fix, PositionError, PositionErrorCode, PositionSource, WatchOptions
)
from client.offline_queue import OfflineQueue
from core.logger import logger

UNSUPPORTED_MESSAGE = "Geolocation is not supported on this device"

PERMISSION_ERROR_MESSAGES = {
    PositionErrorCode.PERMISSION_DENIED:
        "Location permission denied. Please enable location access in your browser/device settings.",
    PositionErrorCode.POSITION_UNAVAILABLE:
        "Location information unavailable. Make sure GPS is enabled on your device.",
    PositionErrorCode.TIMEOUT:
        "Location request timed out. Try again or check if GPS is enabled.",
}
PERMISSION_FAILED_MESSAGE = "Failed to get location permission"

WATCH_ERROR_MESSAGES = {
    PositionErrorCode.TIMEOUT: "GPS signal weak. Trying again...",
    PositionErrorCode.POSITION_UNAVAILABLE: "GPS unavailable. Make sure location services are enabled.",
}
WATCH_FAILED_MESSAGE = "Failed to get location updates"


class LocationTracker:
    """
    Tracks one signed-in session.

    Owns at most one position watch at a time. Pushes are not serialized
    across fixes; the server keeps whichever fix has the newest capture time.
    """

    def __init__(
        self,
        source: Optional[PositionSource],
        api: LocationApi,
        queue: OfflineQueue,
        token: Optional[str] = None,
        options: WatchOptions = WatchOptions(),
    ):
        self.source = source
        self.api = api
        self.queue = queue
        self.token = token
        self.options = options

        self.current_location: Optional[Fix] = None
        self.error: Optional[str] = None
        self.has_permission = False
        self.watch_id: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def is_tracking(self) -> bool:
        return self.watch_id is not None

    def request_permission(self) -> bool:
        """
        Ask for a single fix to confirm location access.

        Returns:
            True if a fix was obtained
        """
        if self.source is None:
            self.error = UNSUPPORTED_MESSAGE
            return False

        try:
            fix = self.source.get_current_position(self.options)
        except PositionError as e:
            self.error = PERMISSION_ERROR_MESSAGES.get(e.code, PERMISSION_FAILED_MESSAGE)
            logger.warning(f"Location permission request failed: {e.message}")
            self.has_permission = False
            return False
        except Exception as e:
            self.error = PERMISSION_FAILED_MESSAGE
            logger.error(f"Location permission request failed: {e}", exc_info=True)
            self.has_permission = False
            return False

        self.has_permission = True
        self.current_location = fix
        self.error = None
        return True

    def start(self) -> bool:
        """
        Start continuous tracking. A second call while tracking does nothing.

        Returns:
            Whether tracking is active afterwards
        """
        if self.source is None:
            self.error = UNSUPPORTED_MESSAGE
            return False
        if self.is_tracking:
            return True
        if not self.has_permission and not self.request_permission():
            return False

        with self._lock:
            if self.watch_id is None:
                self.error = None
                self.watch_id = self.source.watch_position(self._on_fix, self._on_error, self.options)
                logger.info(f"Location tracking started (watch {self.watch_id})")
        return True

    def stop(self) -> None:
        """Stop watching. Pushes already in flight are not cancelled."""
        with self._lock:
            if self.watch_id is not None:
                self.source.clear_watch(self.watch_id)
                logger.info(f"Location tracking stopped (watch {self.watch_id})")
                self.watch_id = None

    def _on_fix(self, fix: Fix) -> None:
        self.current_location = fix
        self.error = None
        self.push(fix)

    def _on_error(self, error: PositionError) -> None:
        logger.warning(f"Location error: {error.message}")
        self.error = WATCH_ERROR_MESSAGES.get(error.code, WATCH_FAILED_MESSAGE)

    def push(self, fix: Fix) -> bool:
        """
        Send a fix to the server, queueing it if the network is unreachable.

        Returns:
            True if the server accepted the fix
        """
        token = self.token
        if not token:
            return False

        try:
            response = self.api.push_location(fix, token)
        except httpx.TransportError as e:
            logger.warning(f"Location update not sent ({e.__class__.__name__}); queued for sync")
            self.queue.enqueue(fix, token)
            return False

        if response.is_error:
            logger.error(f"Failed to update location to server: HTTP {response.status_code}")
            return False
        return True
