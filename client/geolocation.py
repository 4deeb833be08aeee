"""
Position sources for the location tracker.

A platform bridge (browser wrapper, mobile shell, GPS daemon) feeds fixes into
a PositionSource; the tracker only sees this interface.
"""
import enum
import itertools
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from core.logger import logger
import config


@dataclass(frozen=True)
class Fix:
    """One GPS reading. timestamp is the capture time in epoch milliseconds."""
    latitude: float
    longitude: float
    accuracy: Optional[float]
    timestamp: int

    def to_payload(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class WatchOptions:
    enable_high_accuracy: bool = True
    timeout: float = config.GEOLOCATION_TIMEOUT_SECONDS
    maximum_age: float = config.GEOLOCATION_MAXIMUM_AGE_SECONDS


class PositionErrorCode(enum.IntEnum):
    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


class PositionError(Exception):
    """Raised or delivered when a position cannot be obtained."""

    def __init__(self, code: PositionErrorCode, message: str = ""):
        self.code = PositionErrorCode(code)
        self.message = message or self.code.name.replace("_", " ").lower()
        super().__init__(self.message)


FixCallback = Callable[[Fix], None]
ErrorCallback = Callable[[PositionError], None]


class PositionSource(ABC):
    """Platform position API: a one-shot read plus continuous watches."""

    @abstractmethod
    def get_current_position(self, options: WatchOptions) -> Fix:
        """
        Block until one fix is available.

        Raises:
            PositionError: If permission is denied, no position is available or the timeout expires
        """

    @abstractmethod
    def watch_position(self, on_fix: FixCallback, on_error: ErrorCallback, options: WatchOptions) -> int:
        """Start a watch and return its id."""

    @abstractmethod
    def clear_watch(self, watch_id: int) -> None:
        """Stop a watch; unknown ids are ignored."""


class CallbackPositionSource(PositionSource):
    """
    A source driven from outside via publish() and fail().

    get_current_position() waits for the next publish() or fail() up to the
    options timeout; every active watch receives every published fix or error.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._watches: Dict[int, Tuple[FixCallback, ErrorCallback]] = {}
        self._last_fix: Optional[Fix] = None
        self._last_fix_at: Optional[float] = None
        self._pending: Optional[object] = None
        self._arrived = threading.Condition(self._lock)

    def publish(self, fix: Fix) -> None:
        """Deliver a new fix to waiters and watches."""
        with self._lock:
            self._last_fix = fix
            self._last_fix_at = time.monotonic()
            self._pending = fix
            self._arrived.notify_all()
            watches = list(self._watches.values())
        for on_fix, _ in watches:
            on_fix(fix)

    def fail(self, code: PositionErrorCode, message: str = "") -> None:
        """Deliver an error to waiters and watches."""
        error = PositionError(code, message)
        with self._lock:
            self._pending = error
            self._arrived.notify_all()
            watches = list(self._watches.values())
        for _, on_error in watches:
            on_error(error)

    def get_current_position(self, options: WatchOptions = WatchOptions()) -> Fix:
        with self._lock:
            if (
                self._last_fix is not None
                and time.monotonic() - self._last_fix_at <= options.maximum_age
            ):
                return self._last_fix

            self._pending = None
            if not self._arrived.wait_for(lambda: self._pending is not None, timeout=options.timeout):
                raise PositionError(PositionErrorCode.TIMEOUT, "Timeout expired")
            result = self._pending

        if isinstance(result, PositionError):
            raise result
        return result

    def watch_position(self, on_fix: FixCallback, on_error: ErrorCallback, options: WatchOptions = WatchOptions()) -> int:
        with self._lock:
            watch_id = next(self._ids)
            self._watches[watch_id] = (on_fix, on_error)
        logger.debug(f"Position watch {watch_id} started (high accuracy: {options.enable_high_accuracy})")
        return watch_id

    def clear_watch(self, watch_id: int) -> None:
        with self._lock:
            self._watches.pop(watch_id, None)

    @property
    def active_watches(self) -> int:
        with self._lock:
            return len(self._watches)