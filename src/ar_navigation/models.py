# models.py
# Shared data structures and enums used across all modules.

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


# ---------------------------------------------------------------------------
# Coordinate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GeoPoint:
    """Immutable geographic coordinate in decimal degrees."""
    lat: float
    lng: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.lat) and math.isfinite(self.lng)
            and -90.0 <= self.lat <= 90.0
            and -180.0 <= self.lng <= 180.0
        )

    @staticmethod
    def from_lnglat(pair) -> "GeoPoint":
        """Build from a GeoJSON-ordered [lng, lat] pair."""
        return GeoPoint(lat=float(pair[1]), lng=float(pair[0]))


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

class ManeuverKind(Enum):
    STRAIGHT         = "straight"
    TURN_LEFT        = "turn_left"
    TURN_RIGHT       = "turn_right"
    TURN_SHARP_LEFT  = "turn_sharp_left"
    TURN_SHARP_RIGHT = "turn_sharp_right"
    SLIGHT_LEFT      = "slight_left"
    SLIGHT_RIGHT     = "slight_right"
    ARRIVE           = "arrive"
    UNKNOWN          = "unknown"


@dataclass(frozen=True)
class RouteStep:
    """A single navigation instruction in a route."""
    instruction: str
    distance_m: float
    location: GeoPoint
    maneuver: ManeuverKind = ManeuverKind.UNKNOWN

    def to_dict(self) -> dict:
        return {
            "instruction": self.instruction,
            "distance_m": self.distance_m,
            "location": {"lat": self.location.lat, "lng": self.location.lng},
            "maneuver": self.maneuver.value,
        }


@dataclass(frozen=True)
class Route:
    """
    Ordered, immutable sequence of steps for one navigation session.

    A re-route builds a new Route; an existing one is never edited.
    """
    steps: Tuple[RouteStep, ...]
    total_distance_m: float
    source: str = "unknown"      # "osrm" | "graphhopper" | "direct"

    def __post_init__(self) -> None:
        # Accept any sequence from callers but store a tuple.
        object.__setattr__(self, "steps", tuple(self.steps))

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    @property
    def destination(self) -> Optional[GeoPoint]:
        return self.steps[-1].location if self.steps else None


# ---------------------------------------------------------------------------
# Sensor samples
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HeadingSample:
    """Raw compass reading, degrees clockwise from north."""
    degrees: float
    timestamp: float


@dataclass(frozen=True)
class LocationFix:
    """Position update as delivered by a location provider."""
    point: GeoPoint
    accuracy_m: Optional[float] = None
    timestamp: Optional[float] = None


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class SessionPhase(Enum):
    IDLE            = "idle"
    LOCATING        = "locating"
    ROUTE_REQUESTED = "route_requested"
    NAVIGATING      = "navigating"
    ARRIVED         = "arrived"
    STOPPED         = "stopped"


@dataclass(frozen=True)
class NavigationState:
    """
    Snapshot of a navigation session.

    The session controller replaces its snapshot on every event; holders of an
    older snapshot keep seeing the values it was created with.
    """
    phase: SessionPhase = SessionPhase.IDLE
    current_location: Optional[GeoPoint] = None
    smoothed_heading: float = 0.0
    current_step_index: int = 0
    route: Optional[Route] = None
    has_arrived: bool = False
    status_message: Optional[str] = None

    @property
    def is_navigating(self) -> bool:
        return self.route is not None

    @property
    def current_step(self) -> Optional[RouteStep]:
        if self.route is None:
            return None
        return self.route.steps[self.current_step_index]


@dataclass(frozen=True)
class RenderFrame:
    """Everything a render sink needs to draw one update."""
    instruction: str
    direction_text: str
    side: str                    # "straight" | "left" | "right" | "around"
    rotation_degrees: float
    distance_text: str
    total_distance_text: str
    step_index: int
    total_steps: int
    arrived: bool
    status_message: Optional[str] = None
    debug: Dict[str, Any] = field(default_factory=dict)

    @property
    def step_label(self) -> str:
        return f"Step {self.step_index + 1} of {self.total_steps}"
