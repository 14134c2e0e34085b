# heading.py
# Compass handling: device orientation -> heading, and jitter smoothing.

import logging
import math
import time
from collections import deque
from typing import Deque, Optional

import numpy as np

from .geo_utils import normalize_bearing
from .models import HeadingSample

logger = logging.getLogger(__name__)

# Resultant vectors shorter than this are treated as "no dominant direction".
_MIN_RESULTANT = 1e-9


def heading_from_orientation(
    alpha: Optional[float],
    absolute: bool = False,
    webkit_compass_heading: Optional[float] = None,
) -> Optional[float]:
    """
    Convert a device-orientation reading into a compass heading.

    Args:
        alpha:                  Rotation around the z axis, counter-clockwise degrees.
        absolute:               True when alpha is referenced to magnetic north.
        webkit_compass_heading: iOS compass heading (already clockwise from north).

    Returns:
        Heading in [0, 360), or None when the device reported no reading.
    """
    if webkit_compass_heading is not None:
        return normalize_bearing(webkit_compass_heading)
    if alpha is None:
        return None
    if not absolute:
        logger.debug("Relative orientation event; heading is not north-referenced.")
    return normalize_bearing(360.0 - alpha)


class HeadingSmoother:
    """
    Circular moving average over the last N compass samples.

    Averaging unit vectors instead of raw degrees keeps readings that straddle
    north together: 359 and 1 average to 0, not 180.

    When the buffered vectors cancel out, push() returns the previous smoothed
    heading (0.0 if there is none yet).

    Usage:
        smoother = HeadingSmoother(window=5)
        heading = smoother.push(raw_degrees)
    """

    def __init__(self, window: int = 5) -> None:
        if window < 1:
            raise ValueError(f"window must be >= 1, got {window}")
        self.window = window
        self._samples: Deque[HeadingSample] = deque(maxlen=window)
        self._last: float = 0.0

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def value(self) -> float:
        """Most recent smoothed heading."""
        return self._last

    def push(self, raw_heading: float, timestamp: Optional[float] = None) -> float:
        """
        Add a raw sample and return the smoothed heading in [0, 360).

        Args:
            raw_heading: Compass degrees, any range.
            timestamp:   Capture time; defaults to time.time().
        """
        ts = time.time() if timestamp is None else timestamp
        self._samples.append(HeadingSample(degrees=raw_heading, timestamp=ts))

        radians = np.deg2rad([s.degrees for s in self._samples])
        sum_sin = float(np.sin(radians).sum())
        sum_cos = float(np.cos(radians).sum())

        if math.hypot(sum_sin, sum_cos) < _MIN_RESULTANT:
            logger.debug("Heading samples cancel out; keeping previous heading.")
            return self._last

        self._last = normalize_bearing(math.degrees(math.atan2(sum_sin, sum_cos)))
        return self._last

    def reset(self) -> None:
        self._samples.clear()
        self._last = 0.0
