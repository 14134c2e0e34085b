# step_tracker.py
# Forward-only selection of the current route step.
# Pure function: the caller stores the returned index for the next call.

from typing import Optional

from .exceptions import PreconditionViolation
from .geo_utils import distance_meters
from .models import GeoPoint, Route


def advance(
    route: Route,
    prior_index: int,
    location: Optional[GeoPoint],
    advance_radius_m: float,
) -> int:
    """
    Pick the current step for a new position without ever moving backwards.

    Only steps from prior_index onwards are considered. The closest one wins,
    and on equal distances the earlier step is kept. If the closest step is the
    prior one and the user is inside advance_radius_m of it, that waypoint
    counts as reached and the next step becomes current (unless it was the last).

    Args:
        route:            Active route, at least one step.
        prior_index:      Index returned by the previous call (0 for a new route).
        location:         Current position.
        advance_radius_m: Distance at which a waypoint counts as reached.

    Returns:
        New index, prior_index <= index < len(route.steps).

    Raises:
        PreconditionViolation: empty route, missing location, or bad prior_index.
    """
    if route is None or not route.steps:
        raise PreconditionViolation("Step tracking needs a non-empty route.")
    if location is None:
        raise PreconditionViolation("Step tracking needs a location.")
    if not 0 <= prior_index < len(route.steps):
        raise PreconditionViolation(
            f"prior_index {prior_index} outside route of {len(route.steps)} steps."
        )

    closest_index = prior_index
    min_dist = float("inf")
    for i in range(prior_index, len(route.steps)):
        d = distance_meters(location, route.steps[i].location)
        if d < min_dist:
            min_dist = d
            closest_index = i

    if (
        min_dist < advance_radius_m
        and closest_index == prior_index
        and prior_index < route.last_index
    ):
        return prior_index + 1

    return closest_index
