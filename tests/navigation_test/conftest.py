"""Shared fixtures: simulated providers, a fake routing backend and a recording sink."""
from __future__ import annotations

import pytest

from ar_navigation.nav_config import NavConfig
from ar_navigation.navigator import NavigationSession
from ar_navigation.providers import SimulatedHeadingProvider, SimulatedLocationProvider

from fakes import DESTINATION, ORIGIN, WAYPOINTS, FakeRouteService, ManualClock, RecordingSink, make_route


@pytest.fixture()
def config() -> NavConfig:
    return NavConfig(
        destination=DESTINATION,
        destination_name="Test Plaza",
        smoothing_window=1,
        arrival_radius_m=15.0,
        step_advance_radius_m=20.0,
    )


@pytest.fixture()
def locations() -> SimulatedLocationProvider:
    return SimulatedLocationProvider(initial=ORIGIN)


@pytest.fixture()
def compass() -> SimulatedHeadingProvider:
    return SimulatedHeadingProvider()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def route_service() -> FakeRouteService:
    return FakeRouteService(route=make_route(*WAYPOINTS))


@pytest.fixture()
def arrivals() -> list:
    return []


@pytest.fixture()
def session(locations, compass, route_service, sink, config, clock, arrivals) -> NavigationSession:
    return NavigationSession(
        locations, compass,
        route_service=route_service,
        render_sink=sink,
        config=config,
        on_arrival=arrivals.append,
        clock=clock,
    )
