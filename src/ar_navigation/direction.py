# direction.py
# Relative bearing -> direction label + indicator rotation.
#
# Sign convention:
#   relative angle = target bearing - heading, wrapped into (-180, 180];
#   positive means the target is to the right.
#   rotation_degrees = -relative angle, i.e. counter-clockwise-positive rotation
#   of the indicator. A right turn therefore always has a negative rotation and
#   a left turn a positive one.

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import PreconditionViolation
from .geo_utils import normalize_relative_angle
from .models import ManeuverKind


class Direction(Enum):
    STRAIGHT     = ("Continue Straight", "straight")
    SLIGHT_RIGHT = ("Turn Slight Right", "right")
    RIGHT        = ("Turn Right", "right")
    TURN_AROUND  = ("Turn Around", "around")
    LEFT         = ("Turn Left", "left")
    SLIGHT_LEFT  = ("Turn Slight Left", "left")
    ARRIVE       = ("Arrive at Destination", "straight")

    @property
    def text(self) -> str:
        return self.value[0]

    @property
    def side(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class Classification:
    direction: Direction
    rotation_degrees: float
    relative_angle: float

    @property
    def text(self) -> str:
        return self.direction.text


def _sector(angle: float) -> Direction:
    if -15 <= angle <= 15:
        return Direction.STRAIGHT
    if 15 < angle <= 45:
        return Direction.SLIGHT_RIGHT
    if 45 < angle <= 135:
        return Direction.RIGHT
    if angle > 135 or angle <= -135:
        return Direction.TURN_AROUND
    if angle < -45:
        return Direction.LEFT
    return Direction.SLIGHT_LEFT


def classify(relative_angle: float, maneuver: Optional[ManeuverKind] = None) -> Classification:
    """
    Map a relative bearing onto a direction label and indicator rotation.

    Args:
        relative_angle: Target bearing minus heading, any range.
        maneuver:       Maneuver of the current step; ARRIVE forces the arrival label.

    Returns:
        Classification with the label, rotation and the wrapped angle.
    """
    if not math.isfinite(relative_angle):
        raise PreconditionViolation(f"Relative angle must be finite, got {relative_angle}.")

    angle = normalize_relative_angle(relative_angle)
    direction = _sector(angle)
    if maneuver is ManeuverKind.ARRIVE:
        direction = Direction.ARRIVE

    # 0.0 instead of -0.0 keeps the straight-ahead rotation unsigned.
    return Classification(direction=direction, rotation_degrees=-angle + 0.0, relative_angle=angle)
