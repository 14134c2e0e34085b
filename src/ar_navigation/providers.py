# providers.py
# Platform capabilities the session depends on: location and compass.
# Real devices plug in their own implementations; the simulated providers
# below drive the engine from scripted sequences (demo loop and tests).

import logging
import time
from typing import Callable, Iterable, List, Optional, Protocol

from .exceptions import LocationUnavailable
from .models import GeoPoint, LocationFix

logger = logging.getLogger(__name__)

LocationCallback = Callable[[LocationFix], None]
HeadingCallback = Callable[[Optional[float]], None]


class Subscription:
    """Handle returned by subscribe(); cancel() is idempotent."""

    def __init__(self, on_cancel: Optional[Callable[[], None]] = None) -> None:
        self._on_cancel = on_cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_cancel is not None:
            self._on_cancel()


class LocationProvider(Protocol):
    def current_location(self) -> LocationFix:
        """One-shot fix; raises LocationUnavailable."""
        ...

    def subscribe(self, callback: LocationCallback) -> Subscription:
        ...


class HeadingProvider(Protocol):
    def subscribe(self, callback: HeadingCallback) -> Subscription:
        ...


# ---------------------------------------------------------------------------
# Simulated providers
# ---------------------------------------------------------------------------

class _Broadcaster:
    def __init__(self) -> None:
        self._callbacks: List[Callable] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(lambda: self._callbacks.remove(callback))

    def _broadcast(self, value) -> None:
        for callback in list(self._callbacks):
            callback(value)


class SimulatedLocationProvider(_Broadcaster):
    """
    Location source fed by hand (or from a list of points).

    Args:
        initial:   Position returned by current_location(); None simulates a
                   device without geolocation.
        available: False simulates a denied permission.
    """

    def __init__(self, initial: Optional[GeoPoint] = None, available: bool = True) -> None:
        super().__init__()
        self._position = initial
        self.available = available

    def current_location(self) -> LocationFix:
        if not self.available:
            raise LocationUnavailable("Location permission denied")
        if self._position is None:
            raise LocationUnavailable("Geolocation not supported")
        return LocationFix(point=self._position, timestamp=time.time())

    def emit(self, point: GeoPoint, accuracy_m: Optional[float] = None) -> None:
        self._position = point
        self._broadcast(LocationFix(point=point, accuracy_m=accuracy_m, timestamp=time.time()))

    def replay(self, points: Iterable[GeoPoint]) -> None:
        for point in points:
            self.emit(point)


class SimulatedHeadingProvider(_Broadcaster):
    """Compass source fed by hand; emit(None) mimics an orientation event without alpha."""

    def emit(self, heading: Optional[float]) -> None:
        self._broadcast(heading)
