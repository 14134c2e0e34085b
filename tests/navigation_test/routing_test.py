"""Routing service clients: response parsing, transport failures, fallback route."""
from __future__ import annotations

import pytest
import requests

from ar_navigation import routing
from ar_navigation.exceptions import RouteUnavailable
from ar_navigation.models import GeoPoint, ManeuverKind
from ar_navigation.nav_config import NavConfig
from ar_navigation.routing import (
    DirectRouteService,
    GraphHopperRouteService,
    OsrmRouteService,
    build_route_service,
    direct_route,
    maneuver_from_graphhopper,
    maneuver_from_osrm,
)

OSRM_RESPONSE = {
    "code": "Ok",
    "routes": [
        {
            "distance": 812.4,
            "duration": 95.1,
            "legs": [
                {
                    "steps": [
                        {
                            "distance": 300.0,
                            "name": "Putalisadak Marg",
                            "maneuver": {"type": "depart", "location": [85.3210, 27.7045]},
                        },
                        {
                            "distance": 500.0,
                            "name": "Kamal Pokhari",
                            "maneuver": {"type": "turn", "modifier": "left", "location": [85.3230, 27.7060]},
                        },
                        {
                            "distance": 0.0,
                            "name": "",
                            "maneuver": {"type": "arrive", "location": [85.3256, 27.7092]},
                        },
                    ]
                }
            ],
        }
    ],
}

GRAPHHOPPER_RESPONSE = {
    "paths": [
        {
            "distance": 640.0,
            "time": 80000,
            "points": {
                "type": "LineString",
                "coordinates": [[85.3210, 27.7045], [85.3220, 27.7050], [85.3256, 27.7092]],
            },
            "instructions": [
                {"text": "Continue onto Putalisadak Marg", "distance": 120.0, "sign": 0, "interval": [0, 1]},
                {"text": "Turn right", "distance": 520.0, "sign": 2, "interval": [1, 2]},
                {"text": "Arrive at destination", "distance": 0.0, "sign": 4, "interval": [2, 2]},
            ],
        }
    ]
}


class _FakeResponse:
    def __init__(self, payload=None, status_error=None, json_error=None):
        self._payload = payload
        self._status_error = status_error
        self._json_error = json_error

    def raise_for_status(self):
        if self._status_error is not None:
            raise self._status_error

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class TestManeuverMapping:
    @pytest.mark.parametrize(
        "kind, modifier, expected",
        [
            ("arrive", None, ManeuverKind.ARRIVE),
            ("turn", "sharp right", ManeuverKind.TURN_SHARP_RIGHT),
            ("turn", "slight left", ManeuverKind.SLIGHT_LEFT),
            ("depart", None, ManeuverKind.STRAIGHT),
            ("roundabout", None, ManeuverKind.UNKNOWN),
        ],
    )
    def test_osrm(self, kind, modifier, expected):
        assert maneuver_from_osrm(kind, modifier) is expected

    def test_graphhopper(self):
        assert maneuver_from_graphhopper(-2) is ManeuverKind.TURN_LEFT
        assert maneuver_from_graphhopper(4) is ManeuverKind.ARRIVE
        assert maneuver_from_graphhopper(6) is ManeuverKind.UNKNOWN


class TestOsrmParse:
    def test_steps_and_locations(self):
        route = OsrmRouteService.parse(OSRM_RESPONSE)
        assert route.source == "osrm"
        assert len(route) == 3
        assert route.total_distance_m == pytest.approx(812.4)
        assert route.steps[1].location == GeoPoint(27.7060, 85.3230)
        assert route.steps[1].maneuver is ManeuverKind.TURN_LEFT
        assert route.steps[-1].maneuver is ManeuverKind.ARRIVE

    def test_instruction_text_built_from_maneuver(self):
        route = OsrmRouteService.parse(OSRM_RESPONSE)
        assert route.steps[1].instruction == "Turn left onto Kamal Pokhari"
        assert route.steps[2].instruction == "Arrive at destination"

    def test_empty_routes(self):
        with pytest.raises(RouteUnavailable):
            OsrmRouteService.parse({"code": "NoRoute", "message": "Impossible route", "routes": []})

    def test_malformed(self):
        with pytest.raises(RouteUnavailable):
            OsrmRouteService.parse({"routes": [{"legs": []}]})

    def test_unparseable_coordinates(self):
        step = {"distance": 10.0, "name": "", "maneuver": {"type": "arrive", "location": ["x", "y"]}}
        with pytest.raises(RouteUnavailable, match="Malformed OSRM"):
            OsrmRouteService.parse({"routes": [{"legs": [{"steps": [step]}]}]})

    @pytest.mark.parametrize("body", [[], ["routes"], "Ok", None])
    def test_non_object_body(self, body):
        with pytest.raises(RouteUnavailable, match="expected an object"):
            OsrmRouteService.parse(body)


class TestGraphHopperParse:
    def test_steps_from_intervals(self):
        route = GraphHopperRouteService.parse(GRAPHHOPPER_RESPONSE)
        assert route.source == "graphhopper"
        assert [s.instruction for s in route.steps][0] == "Continue onto Putalisadak Marg"
        assert route.steps[1].location == GeoPoint(27.7050, 85.3220)
        assert route.steps[2].maneuver is ManeuverKind.ARRIVE

    def test_error_message(self):
        with pytest.raises(RouteUnavailable, match="Cannot find point"):
            GraphHopperRouteService.parse({"message": "Cannot find point 0"})

    def test_unparseable_coordinates(self):
        path = {
            "points": {"coordinates": [["lng", "lat"]]},
            "instructions": [{"text": "Arrive", "distance": 0.0, "sign": 4, "interval": [0, 0]}],
        }
        with pytest.raises(RouteUnavailable, match="Malformed GraphHopper"):
            GraphHopperRouteService.parse({"paths": [path]})

    def test_non_object_body(self):
        with pytest.raises(RouteUnavailable, match="expected an object"):
            GraphHopperRouteService.parse([GRAPHHOPPER_RESPONSE])

    def test_missing_key_fails_before_request(self, monkeypatch):
        monkeypatch.setattr(routing.requests, "get", pytest.fail)
        with pytest.raises(RouteUnavailable):
            GraphHopperRouteService(NavConfig(routing_backend="graphhopper")).get_route(
                GeoPoint(27.70, 85.32), GeoPoint(27.71, 85.33)
            )


class TestTransport:
    def test_osrm_request_shape(self, monkeypatch):
        seen = {}

        def fake_get(url, params=None, timeout=None):
            seen.update(url=url, params=params, timeout=timeout)
            return _FakeResponse(OSRM_RESPONSE)

        monkeypatch.setattr(routing.requests, "get", fake_get)
        OsrmRouteService(NavConfig(routing_timeout_s=3.0)).get_route(
            GeoPoint(27.7045, 85.3210), GeoPoint(27.7092, 85.3256)
        )
        assert seen["url"].endswith("/route/v1/driving/85.321,27.7045;85.3256,27.7092")
        assert seen["params"]["steps"] == "true"
        assert seen["timeout"] == 3.0

    def test_connection_error_becomes_route_unavailable(self, monkeypatch):
        def fake_get(*args, **kwargs):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(routing.requests, "get", fake_get)
        with pytest.raises(RouteUnavailable):
            OsrmRouteService().get_route(GeoPoint(27.70, 85.32), GeoPoint(27.71, 85.33))

    def test_http_error_becomes_route_unavailable(self, monkeypatch):
        response = _FakeResponse(status_error=requests.HTTPError("502"))
        monkeypatch.setattr(routing.requests, "get", lambda *a, **k: response)
        with pytest.raises(RouteUnavailable):
            OsrmRouteService().get_route(GeoPoint(27.70, 85.32), GeoPoint(27.71, 85.33))

    def test_bad_json_becomes_route_unavailable(self, monkeypatch):
        response = _FakeResponse(json_error=ValueError("not json"))
        monkeypatch.setattr(routing.requests, "get", lambda *a, **k: response)
        with pytest.raises(RouteUnavailable):
            OsrmRouteService().get_route(GeoPoint(27.70, 85.32), GeoPoint(27.71, 85.33))

    def test_json_array_body_becomes_route_unavailable(self, monkeypatch):
        response = _FakeResponse(payload=[OSRM_RESPONSE])
        monkeypatch.setattr(routing.requests, "get", lambda *a, **k: response)
        with pytest.raises(RouteUnavailable):
            OsrmRouteService().get_route(GeoPoint(27.70, 85.32), GeoPoint(27.71, 85.33))

class TestDirectRoute:
    def test_single_step_at_destination(self):
        origin, dest = GeoPoint(27.7000, 85.3000), GeoPoint(27.7100, 85.3000)
        route = direct_route(origin, dest, "Islington College")
        assert len(route) == 1
        assert route.steps[0].location == dest
        assert route.steps[0].instruction == "Head towards Islington College"
        assert route.total_distance_m == pytest.approx(1112, abs=1)
        assert route.source == "direct"

    def test_factory(self):
        assert isinstance(build_route_service(NavConfig(routing_backend="direct")), DirectRouteService)
        assert isinstance(build_route_service(NavConfig(routing_backend="graphhopper")), GraphHopperRouteService)
        assert isinstance(build_route_service(NavConfig()), OsrmRouteService)
