# nav_config.py
# All tuneable constants in one place.
# Pass a NavConfig instance to every module that needs settings.

from dataclasses import dataclass, field
from typing import Optional

from .models import GeoPoint


# ---------------------------------------------------------------------------
# Routing endpoints
# ---------------------------------------------------------------------------

OSRM_BASE_URL: str = "https://router.project-osrm.org"
GRAPHHOPPER_BASE_URL: str = "https://graphhopper.com"

ROUTING_BACKENDS: frozenset = frozenset({"osrm", "graphhopper", "direct"})

# Islington College, Kathmandu
DEFAULT_DESTINATION = GeoPoint(27.709238899431625, 85.32558477122376)


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class NavConfig:
    # Destination
    destination: GeoPoint = field(default_factory=lambda: DEFAULT_DESTINATION)
    destination_name: str = "Islington College"

    # Heading smoothing
    smoothing_window: int = 5              # compass samples in the circular mean

    # Progress tracking
    step_advance_radius_m: float = 20.0    # distance to mark a waypoint as reached
    arrival_radius_m: float = 15.0         # distance to the last step that counts as arrival

    # Routing
    routing_backend: str = "osrm"          # "osrm" | "graphhopper" | "direct"
    routing_profile: str = "driving"       # OSRM profile / GraphHopper vehicle
    osrm_base_url: str = OSRM_BASE_URL
    graphhopper_base_url: str = GRAPHHOPPER_BASE_URL
    graphhopper_api_key: Optional[str] = None
    routing_timeout_s: float = 10.0
    fallback_to_direct_route: bool = True  # straight line to destination when routing fails

    # Status banner
    status_message_ttl_s: float = 5.0

    def __post_init__(self) -> None:
        if self.smoothing_window < 1:
            raise ValueError(f"smoothing_window must be >= 1, got {self.smoothing_window}")
        if self.step_advance_radius_m <= 0 or self.arrival_radius_m <= 0:
            raise ValueError("Radii must be positive.")
        if self.routing_backend not in ROUTING_BACKENDS:
            raise ValueError(f"Unknown routing backend: {self.routing_backend!r}")
