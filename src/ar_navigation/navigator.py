# navigator.py
# Public entry point for the navigation engine.
# Owns the session state machine; the math lives in the specialist modules.

import logging
import math
import threading
import time
from dataclasses import replace
from typing import Callable, List, Optional, Tuple, Union

from .direction import Classification, classify
from .exceptions import LocationUnavailable, RouteUnavailable
from .geo_utils import distance_meters, format_distance, initial_bearing_degrees
from .heading import HeadingSmoother
from .models import GeoPoint, LocationFix, NavigationState, RenderFrame, Route, SessionPhase
from .nav_config import NavConfig
from .nav_logger import NavLogger, RenderSink
from .providers import HeadingProvider, LocationProvider, Subscription
from .routing import RouteService, build_route_service, direct_route
from .step_tracker import advance

logger = logging.getLogger(__name__)

ARRIVED_TEXT = "You have reached your destination"

_ACTIVE = (SessionPhase.NAVIGATING, SessionPhase.ARRIVED)
_LISTENING = (SessionPhase.ROUTE_REQUESTED, SessionPhase.NAVIGATING, SessionPhase.ARRIVED)


class NavigationSession:
    """
    Turn-by-turn navigation toward one fixed destination.

    Typical lifecycle:
        session = NavigationSession(locations, compass, config=NavConfig())
        ok, msg = session.start()     # locate, subscribe, fetch route
        ...                           # provider callbacks drive the session
        session.stop()

    Location and heading updates may arrive in any order and from any thread;
    each one is processed to completion under a lock before the next. Updates
    received while the route request is in flight are cached and applied when
    the route arrives.

    Args:
        location_provider: One-shot fix plus a stream of position updates.
        heading_provider:  Stream of raw compass readings.
        route_service:     Routing backend; defaults to the one named in config.
        render_sink:       Receives a RenderFrame after every recompute.
        config:            Optional NavConfig; defaults to NavConfig().
        on_arrival:        Called once per session when the destination is reached.
        clock:             Monotonic clock used for status-message expiry.
    """

    def __init__(
        self,
        location_provider: LocationProvider,
        heading_provider: HeadingProvider,
        route_service: Optional[RouteService] = None,
        render_sink: Optional[RenderSink] = None,
        config: Optional[NavConfig] = None,
        on_arrival: Optional[Callable[[NavigationState], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or NavConfig()

        # Injected capabilities
        self._locations = location_provider
        self._headings  = heading_provider
        self._routes    = route_service or build_route_service(self.config)
        self._sink      = render_sink or NavLogger()
        self._on_arrival = on_arrival
        self._clock = clock

        self._lock = threading.RLock()
        self._smoother = HeadingSmoother(self.config.smoothing_window)
        self._state = NavigationState()
        self._subscriptions: List[Subscription] = []
        self._generation = 0
        self._status: Optional[Tuple[str, float]] = None
        self._last_classification: Optional[Classification] = None
        self._last_frame: Optional[RenderFrame] = None

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> NavigationState:
        with self._lock:
            return replace(self._state, status_message=self._current_status())

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def destination(self) -> GeoPoint:
        return self.config.destination

    @property
    def last_classification(self) -> Optional[Classification]:
        return self._last_classification

    @property
    def last_frame(self) -> Optional[RenderFrame]:
        return self._last_frame

    # ------------------------------------------------------------------
    # Navigation control
    # ------------------------------------------------------------------

    def start(self) -> Tuple[bool, str]:
        """
        Locate the user, subscribe to both input streams and fetch a route.

        Returns:
            (success, message)
        """
        with self._lock:
            if self._state.phase not in (SessionPhase.IDLE, SessionPhase.STOPPED):
                return False, "Navigation is already running."
            self._generation += 1
            generation = self._generation
            self._smoother.reset()
            self._last_classification = None
            self._state = NavigationState(phase=SessionPhase.LOCATING)
            self._set_status("Getting your location...")

        try:
            fix = self._locations.current_location()
        except LocationUnavailable as e:
            logger.error(f"Location unavailable: {e}")
            with self._lock:
                if generation == self._generation:
                    self._teardown(f"Error: {e}")
            return False, str(e)

        with self._lock:
            if generation != self._generation:
                return False, "Navigation stopped."
            self._state = replace(
                self._state,
                phase=SessionPhase.ROUTE_REQUESTED,
                current_location=fix.point,
            )
            self._subscriptions = [
                self._locations.subscribe(lambda f: self._on_location(generation, f)),
                self._headings.subscribe(lambda h: self._on_heading(generation, h)),
            ]

        return self._request_route(generation, fix.point)

    def reroute(self) -> Tuple[bool, str]:
        """
        Replace the active route with a fresh one from the last known position.

        The new route starts a new step sequence at index 0. Once the session
        has arrived it stays arrived, so re-routing is refused.
        """
        with self._lock:
            if self._state.phase is SessionPhase.ARRIVED:
                return False, "Already arrived."
            if self._state.phase is not SessionPhase.NAVIGATING:
                return False, "Navigation is not active."
            generation = self._generation
            origin = self._state.current_location
            self._state = replace(
                self._state,
                phase=SessionPhase.ROUTE_REQUESTED,
                route=None,
                current_step_index=0,
                has_arrived=False,
            )
        logger.info("Re-routing requested.")
        return self._request_route(generation, origin)

    def stop(self) -> None:
        """End the session. Calling it again is a no-op."""
        with self._lock:
            if self._state.phase is SessionPhase.STOPPED:
                return
            self._teardown("Navigation stopped.")
        logger.info("Navigation stopped by user.")

    # ------------------------------------------------------------------
    # Stream updates — also callable directly by a host without providers
    # ------------------------------------------------------------------

    def handle_location(self, update: Union[LocationFix, GeoPoint]) -> None:
        """Process a LocationFix (or bare GeoPoint) from the location stream."""
        with self._lock:
            self._on_location(self._generation, update)

    def handle_heading(self, raw_heading: Optional[float]) -> None:
        """Process a raw compass reading; None means 'no reading' and is ignored."""
        with self._lock:
            self._on_heading(self._generation, raw_heading)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request_route(self, generation: int, origin: GeoPoint) -> Tuple[bool, str]:
        name = self.config.destination_name
        with self._lock:
            self._set_status(f"Calculating route to {name}...")

        route: Optional[Route] = None
        failure: Optional[str] = None
        try:
            route = self._routes.get_route(origin, self.destination)
            if not route.steps:
                raise RouteUnavailable("Route has no steps")
        except RouteUnavailable as e:
            logger.warning(f"Route calculation failed: {e}")
            failure = str(e)
            route = None
        except Exception:
            logger.exception("Routing service raised an unexpected error.")
            with self._lock:
                if generation == self._generation:
                    self._teardown("Error: Failed to get directions")
            raise

        with self._lock:
            if generation != self._generation or self._state.phase is not SessionPhase.ROUTE_REQUESTED:
                return False, "Navigation stopped."

            if route is None:
                if not self.config.fallback_to_direct_route:
                    self._teardown(f"Error: Failed to get directions ({failure})")
                    return False, f"Failed to get directions: {failure}"
                logger.info(f"Using direct route toward {name}.")
                route = direct_route(origin, self.destination, name)

            self._state = replace(
                self._state,
                phase=SessionPhase.NAVIGATING,
                route=route,
                current_step_index=0,
                has_arrived=False,
            )
            if failure:
                self._set_status(f"Failed to get directions, heading straight to {name}")
            else:
                self._set_status(f"Navigating to {name}")
            logger.info(
                f"Route ready ({route.source}) — {len(route)} steps, "
                f"{route.total_distance_m:.0f} m. First: {route.steps[0].instruction}"
            )

            # Apply whatever arrived while the request was in flight.
            self._recompute(track_steps=True)
            return True, f"Route ready. {len(route)} steps."

    def _on_location(self, generation: int, update: Union[LocationFix, GeoPoint]) -> None:
        point = update.point if isinstance(update, LocationFix) else update
        if not isinstance(point, GeoPoint) or not point.is_valid():
            logger.warning(f"Ignoring invalid location sample: {update!r}")
            return

        with self._lock:
            if generation != self._generation or self._state.phase not in _LISTENING:
                return
            self._state = replace(self._state, current_location=point)
            if self._state.phase in _ACTIVE:
                self._recompute(track_steps=True)

    def _on_heading(self, generation: int, raw_heading: Optional[float]) -> None:
        if raw_heading is None:
            return
        try:
            raw = float(raw_heading)
        except (TypeError, ValueError):
            raw = math.nan
        if not math.isfinite(raw):
            logger.warning(f"Ignoring invalid heading sample: {raw_heading!r}")
            return

        with self._lock:
            if generation != self._generation or self._state.phase not in _LISTENING:
                return
            smoothed = self._smoother.push(raw)
            self._state = replace(self._state, smoothed_heading=smoothed)
            if self._state.phase in _ACTIVE:
                self._recompute(track_steps=False)

    def _recompute(self, track_steps: bool) -> None:
        state = self._state
        route, location = state.route, state.current_location
        if route is None or location is None:
            return

        index = state.current_step_index
        if track_steps and state.phase is SessionPhase.NAVIGATING:
            index = advance(route, index, location, self.config.step_advance_radius_m)
            if index != state.current_step_index:
                logger.info(f"Advanced to step {index + 1}/{len(route)}: {route.steps[index].instruction}")

        step = route.steps[index]
        dist_to_step = distance_meters(location, step.location)
        dist_to_dest = distance_meters(location, self.destination)
        bearing = initial_bearing_degrees(location, step.location)
        classification = classify(bearing - state.smoothed_heading, step.maneuver)

        just_arrived = False
        phase = state.phase
        if (
            not state.has_arrived
            and index == route.last_index
            and min(dist_to_step, dist_to_dest) < self.config.arrival_radius_m
        ):
            just_arrived = True
            phase = SessionPhase.ARRIVED
            self._set_status(f"You've arrived at {self.config.destination_name}!")
            logger.info(f"Arrived at {self.config.destination_name}.")

        self._state = replace(
            state,
            phase=phase,
            current_step_index=index,
            has_arrived=state.has_arrived or just_arrived,
            status_message=self._current_status(),
        )
        self._last_classification = classification

        frame = self._build_frame(step.instruction, classification, dist_to_step, dist_to_dest, bearing)
        self._last_frame = frame
        self._sink.publish(frame)

        if just_arrived and self._on_arrival is not None:
            self._on_arrival(self._state)

    def _build_frame(
        self,
        instruction: str,
        classification: Classification,
        dist_to_step: float,
        dist_to_dest: float,
        bearing: float,
    ) -> RenderFrame:
        state = self._state
        debug = {
            "heading": round(state.smoothed_heading, 1),
            "target_bearing": round(bearing, 1),
            "relative_angle": round(classification.relative_angle, 1),
            "lat": state.current_location.lat,
            "lng": state.current_location.lng,
            "distance_to_destination_m": round(dist_to_dest, 1),
        }
        total_text = f"Total distance: {state.route.total_distance_m / 1000:.1f} km"

        if state.has_arrived:
            return RenderFrame(
                instruction=f"Arrived at {self.config.destination_name}!",
                direction_text=ARRIVED_TEXT,
                side="straight",
                rotation_degrees=0.0,
                distance_text=ARRIVED_TEXT,
                total_distance_text=total_text,
                step_index=state.current_step_index,
                total_steps=len(state.route),
                arrived=True,
                status_message=state.status_message,
                debug=debug,
            )

        return RenderFrame(
            instruction=instruction,
            direction_text=classification.text,
            side=classification.direction.side,
            rotation_degrees=classification.rotation_degrees,
            distance_text=format_distance(dist_to_step),
            total_distance_text=total_text,
            step_index=state.current_step_index,
            total_steps=len(state.route),
            arrived=False,
            status_message=state.status_message,
            debug=debug,
        )

    def _teardown(self, message: str) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions = []
        self._generation += 1
        self._set_status(message)
        self._state = NavigationState(phase=SessionPhase.STOPPED)

    def _set_status(self, message: str) -> None:
        self._status = (message, self._clock() + self.config.status_message_ttl_s)

    def _current_status(self) -> Optional[str]:
        if self._status is None:
            return None
        message, expires_at = self._status
        return message if self._clock() < expires_at else None
