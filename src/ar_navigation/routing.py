# routing.py
# Clients for the external routing services, plus the straight-line fallback.
# Route computation itself happens on the remote service; this module only
# requests it and converts the response into a Route.

import logging
from typing import Dict, List, Optional, Protocol

import requests

from .exceptions import RouteUnavailable
from .geo_utils import distance_meters
from .models import GeoPoint, ManeuverKind, Route, RouteStep
from .nav_config import NavConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Maneuver vocabulary
# ---------------------------------------------------------------------------

INSTRUCTION_TEXT: Dict[ManeuverKind, str] = {
    ManeuverKind.TURN_RIGHT:       "Turn right",
    ManeuverKind.TURN_LEFT:        "Turn left",
    ManeuverKind.TURN_SHARP_RIGHT: "Turn sharp right",
    ManeuverKind.TURN_SHARP_LEFT:  "Turn sharp left",
    ManeuverKind.SLIGHT_RIGHT:     "Turn slight right",
    ManeuverKind.SLIGHT_LEFT:      "Turn slight left",
    ManeuverKind.STRAIGHT:         "Continue straight",
    ManeuverKind.ARRIVE:           "Arrive at destination",
}

_OSRM_MODIFIERS: Dict[str, ManeuverKind] = {
    "right":        ManeuverKind.TURN_RIGHT,
    "left":         ManeuverKind.TURN_LEFT,
    "sharp right":  ManeuverKind.TURN_SHARP_RIGHT,
    "sharp left":   ManeuverKind.TURN_SHARP_LEFT,
    "slight right": ManeuverKind.SLIGHT_RIGHT,
    "slight left":  ManeuverKind.SLIGHT_LEFT,
    "straight":     ManeuverKind.STRAIGHT,
}

# GraphHopper instruction "sign" codes
_GRAPHHOPPER_SIGNS: Dict[int, ManeuverKind] = {
    -3: ManeuverKind.TURN_SHARP_LEFT,
    -2: ManeuverKind.TURN_LEFT,
    -1: ManeuverKind.SLIGHT_LEFT,
    0:  ManeuverKind.STRAIGHT,
    1:  ManeuverKind.SLIGHT_RIGHT,
    2:  ManeuverKind.TURN_RIGHT,
    3:  ManeuverKind.TURN_SHARP_RIGHT,
    4:  ManeuverKind.ARRIVE,
    -7: ManeuverKind.SLIGHT_LEFT,    # keep left
    7:  ManeuverKind.SLIGHT_RIGHT,   # keep right
}


def maneuver_from_osrm(maneuver_type: Optional[str], modifier: Optional[str]) -> ManeuverKind:
    """Map an OSRM maneuver type/modifier pair onto a ManeuverKind."""
    if maneuver_type == "arrive":
        return ManeuverKind.ARRIVE
    if modifier in _OSRM_MODIFIERS:
        return _OSRM_MODIFIERS[modifier]
    if maneuver_type in ("depart", "continue", "new name"):
        return ManeuverKind.STRAIGHT
    return ManeuverKind.UNKNOWN


def maneuver_from_graphhopper(sign: Optional[int]) -> ManeuverKind:
    return _GRAPHHOPPER_SIGNS.get(sign, ManeuverKind.UNKNOWN)


def instruction_for(kind: ManeuverKind, road_name: Optional[str] = None) -> str:
    """Fallback instruction text when the service sends none."""
    text = INSTRUCTION_TEXT.get(kind, "Continue")
    if road_name and kind is not ManeuverKind.ARRIVE:
        text = f"{text} onto {road_name}"
    return text


# ---------------------------------------------------------------------------
# Service interface
# ---------------------------------------------------------------------------

class RouteService(Protocol):
    def get_route(self, origin: GeoPoint, destination: GeoPoint) -> Route:
        """Return a non-empty Route or raise RouteUnavailable."""
        ...


def _fetch_json(url: str, params, timeout: float) -> dict:
    try:
        response = requests.get(url, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        raise RouteUnavailable(f"Routing request failed: {e}") from e
    except ValueError as e:
        raise RouteUnavailable(f"Routing response is not valid JSON: {e}") from e


class OsrmRouteService:
    """
    Route requests against an OSRM server (route/v1 API).

    Args:
        config: NavConfig with base URL, profile and timeout.
    """

    name = "osrm"

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()

    def get_route(self, origin: GeoPoint, destination: GeoPoint) -> Route:
        coords = f"{origin.lng},{origin.lat};{destination.lng},{destination.lat}"
        url = f"{self.config.osrm_base_url}/route/v1/{self.config.routing_profile}/{coords}"
        logger.info(f"Requesting OSRM route: {origin} → {destination}")
        data = _fetch_json(
            url,
            params={"steps": "true", "geometries": "geojson"},
            timeout=self.config.routing_timeout_s,
        )
        return self.parse(data)

    @staticmethod
    def parse(data: dict) -> Route:
        if not isinstance(data, dict):
            raise RouteUnavailable(f"Malformed OSRM response: expected an object, got {type(data).__name__}")
        routes = data.get("routes") or []
        if not routes:
            raise RouteUnavailable(data.get("message") or "No route found")

        best = routes[0]
        try:
            raw_steps = best["legs"][0]["steps"]
            steps: List[RouteStep] = []
            for raw in raw_steps:
                maneuver = raw["maneuver"]
                kind = maneuver_from_osrm(maneuver.get("type"), maneuver.get("modifier"))
                steps.append(RouteStep(
                    instruction=maneuver.get("instruction") or instruction_for(kind, raw.get("name")),
                    distance_m=float(raw.get("distance", 0.0)),
                    location=GeoPoint.from_lnglat(maneuver["location"]),
                    maneuver=kind,
                ))
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise RouteUnavailable(f"Malformed OSRM response: {e}") from e

        if not steps:
            raise RouteUnavailable("OSRM route has no steps")
        return Route(steps=steps, total_distance_m=float(best.get("distance", 0.0)), source="osrm")


class GraphHopperRouteService:
    """
    Route requests against the GraphHopper Directions API.

    Args:
        config: NavConfig with base URL, API key, vehicle profile and timeout.
    """

    name = "graphhopper"

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()

    def get_route(self, origin: GeoPoint, destination: GeoPoint) -> Route:
        if not self.config.graphhopper_api_key:
            raise RouteUnavailable("GraphHopper API key is not configured")

        logger.info(f"Requesting GraphHopper route: {origin} → {destination}")
        data = _fetch_json(
            f"{self.config.graphhopper_base_url}/api/1/route",
            params=[
                ("point", f"{origin.lat},{origin.lng}"),
                ("point", f"{destination.lat},{destination.lng}"),
                ("vehicle", "car" if self.config.routing_profile == "driving" else self.config.routing_profile),
                ("locale", "en"),
                ("instructions", "true"),
                ("points_encoded", "false"),
                ("key", self.config.graphhopper_api_key),
            ],
            timeout=self.config.routing_timeout_s,
        )
        return self.parse(data)

    @staticmethod
    def parse(data: dict) -> Route:
        if not isinstance(data, dict):
            raise RouteUnavailable(f"Malformed GraphHopper response: expected an object, got {type(data).__name__}")
        paths = data.get("paths") or []
        if not paths:
            raise RouteUnavailable(data.get("message") or "Route not found")

        path = paths[0]
        try:
            coordinates = path["points"]["coordinates"]
            steps: List[RouteStep] = []
            for instruction in path.get("instructions", []):
                point_index = instruction["interval"][0]
                steps.append(RouteStep(
                    instruction=instruction.get("text") or "Continue",
                    distance_m=float(instruction.get("distance", 0.0)),
                    location=GeoPoint.from_lnglat(coordinates[point_index]),
                    maneuver=maneuver_from_graphhopper(instruction.get("sign")),
                ))
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise RouteUnavailable(f"Malformed GraphHopper response: {e}") from e

        if not steps:
            raise RouteUnavailable("GraphHopper route has no instructions")
        return Route(steps=steps, total_distance_m=float(path.get("distance", 0.0)), source="graphhopper")


# ---------------------------------------------------------------------------
# Fallback and factory
# ---------------------------------------------------------------------------

def direct_route(origin: GeoPoint, destination: GeoPoint, destination_name: str = "destination") -> Route:
    """Single synthetic step pointing straight at the destination."""
    dist = distance_meters(origin, destination)
    step = RouteStep(
        instruction=f"Head towards {destination_name}",
        distance_m=dist,
        location=destination,
        maneuver=ManeuverKind.STRAIGHT,
    )
    return Route(steps=(step,), total_distance_m=dist, source="direct")


class DirectRouteService:
    """Offline backend: always the straight-line route."""

    name = "direct"

    def __init__(self, config: Optional[NavConfig] = None) -> None:
        self.config = config or NavConfig()

    def get_route(self, origin: GeoPoint, destination: GeoPoint) -> Route:
        return direct_route(origin, destination, self.config.destination_name)


def build_route_service(config: Optional[NavConfig] = None) -> RouteService:
    config = config or NavConfig()
    if config.routing_backend == "direct":
        return DirectRouteService(config)
    if config.routing_backend == "graphhopper":
        return GraphHopperRouteService(config)
    return OsrmRouteService(config)
