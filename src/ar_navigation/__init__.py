"""Turn-by-turn AR navigation engine: heading smoothing, step tracking and direction cues."""

from .direction import Classification, Direction, classify
from .exceptions import LocationUnavailable, NavigationError, PreconditionViolation, RouteUnavailable
from .geo_utils import distance_meters, initial_bearing_degrees
from .heading import HeadingSmoother, heading_from_orientation
from .models import (
    GeoPoint,
    LocationFix,
    ManeuverKind,
    NavigationState,
    RenderFrame,
    Route,
    RouteStep,
    SessionPhase,
)
from .nav_config import NavConfig
from .navigator import NavigationSession
from .step_tracker import advance

__all__ = [
    "Classification",
    "Direction",
    "GeoPoint",
    "HeadingSmoother",
    "LocationFix",
    "LocationUnavailable",
    "ManeuverKind",
    "NavConfig",
    "NavigationError",
    "NavigationSession",
    "NavigationState",
    "PreconditionViolation",
    "RenderFrame",
    "Route",
    "RouteStep",
    "RouteUnavailable",
    "SessionPhase",
    "advance",
    "classify",
    "distance_meters",
    "heading_from_orientation",
    "initial_bearing_degrees",
]
