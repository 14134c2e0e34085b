# main.py
# Entry point — simulates a walk feeding positions and compass readings into
# a NavigationSession. In production, replace the simulated providers with the
# device's geolocation and orientation sources.

import argparse
import logging
import time
from typing import List

import numpy as np

from .geo_utils import initial_bearing_degrees
from .models import GeoPoint, NavigationState
from .nav_config import NavConfig, ROUTING_BACKENDS
from .nav_logger import NavLogger
from .navigator import NavigationSession
from .providers import SimulatedHeadingProvider, SimulatedLocationProvider

logger = logging.getLogger(__name__)

# Simulation origin: Putalisadak, Kathmandu
DEFAULT_ORIGIN = GeoPoint(27.7045, 85.3210)


def simulated_walk(origin: GeoPoint, destination: GeoPoint, samples: int) -> List[GeoPoint]:
    """Evenly spaced points on the straight line from origin to destination."""
    lats = np.linspace(origin.lat, destination.lat, samples)
    lngs = np.linspace(origin.lng, destination.lng, samples)
    return [GeoPoint(float(lat), float(lng)) for lat, lng in zip(lats, lngs)]


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate an AR navigation session.")
    parser.add_argument("--origin", type=float, nargs=2, metavar=("LAT", "LNG"),
                        default=[DEFAULT_ORIGIN.lat, DEFAULT_ORIGIN.lng])
    parser.add_argument("--destination", type=float, nargs=2, metavar=("LAT", "LNG"), default=None)
    parser.add_argument("--backend", choices=sorted(ROUTING_BACKENDS), default="direct")
    parser.add_argument("--graphhopper-key", default=None)
    parser.add_argument("--samples", type=int, default=40, help="GPS fixes along the walk")
    parser.add_argument("--heading-noise", type=float, default=8.0, help="compass jitter, degrees (std)")
    parser.add_argument("--interval", type=float, default=0.05, help="seconds between fixes")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # ------------------------------------------------------------------
    # Logging setup — configure once here, all modules inherit
    # ------------------------------------------------------------------
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # ------------------------------------------------------------------
    # Config — tweak thresholds or backends here, not inside the modules
    # ------------------------------------------------------------------
    config = NavConfig(routing_backend=args.backend, graphhopper_api_key=args.graphhopper_key)
    if args.destination:
        config.destination = GeoPoint(*args.destination)
        config.destination_name = "destination"

    origin = GeoPoint(*args.origin)
    locations = SimulatedLocationProvider(initial=origin)
    compass = SimulatedHeadingProvider()

    def celebrate(state: NavigationState) -> None:
        print(f"  ✓  Arrived at {config.destination_name} (step {state.current_step_index + 1}).")

    session = NavigationSession(
        locations, compass,
        render_sink=NavLogger(),
        config=config,
        on_arrival=celebrate,
    )

    # 1. Locate + route
    success, msg = session.start()
    if not success:
        print(f"[Main] Could not start navigation: {msg}")
        return 1
    print(f"[Main] {msg}")

    print("\n--- GPS Loop Active ---")
    rng = np.random.default_rng(args.seed)

    # 2. Walk — replace with real GPS / compass feed in production
    for position in simulated_walk(origin, config.destination, args.samples):
        locations.emit(position)

        # The walker faces the destination with a jittery compass.
        facing = initial_bearing_degrees(position, config.destination)
        for _ in range(3):
            compass.emit(facing + rng.normal(0.0, args.heading_noise))

        frame = session.last_frame
        if frame is not None:
            print(f"  GPS ({position.lat:.6f}, {position.lng:.6f}) → "
                  f"[{frame.step_label}] {frame.direction_text}, {frame.distance_text}")

        if session.state.has_arrived:
            break

        # Simulate GPS poll interval (remove in real use)
        time.sleep(args.interval)

    session.stop()
    print("\n--- Session complete ---")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
