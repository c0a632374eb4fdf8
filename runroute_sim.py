#!/usr/bin/env python3
"""
Runroute Simulator - Generate a GPS trace for a simulated run

Plans a loop and writes a playback trace of a runner following it, so the
guidance loop can be exercised without GPS/Termux.

Usage:
    python runroute_sim.py <lat> <lon> [distance_km] [--pace MIN_PER_KM] [-o trace.json]

Then:
    python -m runroute 5 --lat <lat> --lon <lon> --playback trace.json --speed 20
"""

import argparse
import random

from runroute import (
    GPSPlayback, Location, RoutePlanner, RouteStrategy, WaypointGenerator,
    OSRMDirections, StraightLineDirections, trace_along, path_distance,
)


def main():
    parser = argparse.ArgumentParser(description="Generate a simulated run trace")
    parser.add_argument("lat", type=float)
    parser.add_argument("lon", type=float)
    parser.add_argument("distance", type=float, nargs="?", default=5.0,
                        help="Target distance in km (default: 5.0)")
    parser.add_argument("--pace", type=float, default=6.0,
                        help="Running pace in min/km (default: 6.0)")
    parser.add_argument("--interval", type=float, default=3.0,
                        help="Seconds between fixes (default: 3.0)")
    parser.add_argument("--strategy", default="Balanced",
                        choices=[s.value for s in RouteStrategy])
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--offline", action="store_true",
                        help="Use straight-line legs instead of OSRM")
    parser.add_argument("--output", "-o", default="runroute_trace.json")
    args = parser.parse_args()

    provider = StraightLineDirections() if args.offline else OSRMDirections()
    planner = RoutePlanner(provider, generator=WaypointGenerator(random.Random(args.seed)))
    start = Location(lat=args.lat, lon=args.lon)

    print(f"Planning {args.distance}km {args.strategy} loop around ({args.lat}, {args.lon})...")
    planner.start_planning(start, args.distance * 1000, RouteStrategy(args.strategy), refresh=False)
    planner.wait()

    if planner.route_error:
        print(planner.route_error)
    if not planner.current_route:
        return

    fixes = trace_along(planner.current_route, args.pace, args.interval)
    GPSPlayback.from_locations(fixes, args.output, args.interval)
    print(f"Route: {path_distance(planner.current_route):.0f}m, "
          f"{len(fixes)} fixes at {args.pace} min/km -> {args.output}")
    provider_flag = " --provider straight" if args.offline else ""
    print(f"Replay with --seed {args.seed}{provider_flag} --strategy {args.strategy.lower()} "
          "so the planned waypoints match")


if __name__ == "__main__":
    main()
