#!/usr/bin/env python3
"""
Runroute - Loop route planner and voice run guide

Usage:
    python -m runroute [distance_km] [options]

Options:
    --lat LAT         Starting latitude (for testing without GPS)
    --lon LON         Starting longitude (for testing without GPS)
    --time MINUTES    Goal time for pace coaching
    --strategy NAME   Balanced, Scenic, Direct or Varied (default: Balanced)
    --options         Build one route per strategy and list them
    --preview         Preview the planned route without running
    --html FILE       Output route map to HTML file (preview mode)
    --gpx FILE        Export route to GPX file (preview mode)
    --record FILE     Record GPS trace to JSON file for debugging
    --playback FILE   Playback GPS trace from JSON file
    --speed FACTOR    Playback speed multiplier (default: 1.0)
    --provider NAME   Directions provider: osrm, ors or straight (default: osrm)
    --ors-key KEY     OpenRouteService API key (or ORS_API_KEY)
    --seed N          Seed waypoint placement for repeatable routes
"""

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

from .app import Runner
from .config import CONFIG
from .directions import OSRMDirections, OpenRouteServiceDirections, StraightLineDirections
from .gps import GPSRecorder, GPSPlayback
from .models import RouteStrategy

STRATEGIES = {s.value.lower(): s for s in RouteStrategy}


def build_provider(name: str, ors_key=None):
    if name == "ors":
        key = ors_key or os.environ.get("ORS_API_KEY")
        if not key:
            raise ValueError("OpenRouteService needs --ors-key or ORS_API_KEY")
        return OpenRouteServiceDirections(key)
    if name == "straight":
        return StraightLineDirections()
    return OSRMDirections()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Runroute - Loop route planner and voice run guide"
    )
    parser.add_argument("distance", type=float, nargs="?",
                        default=CONFIG["default_run_distance"] / 1000,
                        help="Target distance in km (default: %(default)s)")
    parser.add_argument("--lat", type=float, metavar="LAT",
                        help="Starting latitude (for testing without GPS)")
    parser.add_argument("--lon", type=float, metavar="LON",
                        help="Starting longitude (for testing without GPS)")
    parser.add_argument("--time", type=float, metavar="MINUTES",
                        help="Goal time in minutes, enables pace coaching")
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), default="balanced",
                        help="Waypoint strategy (default: balanced)")
    parser.add_argument("--options", action="store_true",
                        help="Build one route per strategy and list them")
    parser.add_argument("--preview", action="store_true",
                        help="Preview the planned route without running")
    parser.add_argument("--html", metavar="FILE",
                        help="Output route map to HTML file (preview mode)")
    parser.add_argument("--gpx", metavar="FILE",
                        help="Export route to GPX file (preview mode)")
    parser.add_argument("--record", metavar="FILE",
                        help="Record GPS trace to JSON file")
    parser.add_argument("--playback", metavar="FILE",
                        help="Playback GPS trace from JSON file")
    parser.add_argument("--speed", type=float, default=1.0,
                        help="Playback speed multiplier (default: 1.0)")
    parser.add_argument("--log", metavar="FILE",
                        help="Log file path (default: runroute_TIMESTAMP.log)")
    parser.add_argument("--provider", choices=["osrm", "ors", "straight"], default="osrm",
                        help="Directions provider (default: osrm)")
    parser.add_argument("--ors-key", metavar="KEY",
                        help="OpenRouteService API key")
    parser.add_argument("--seed", type=int,
                        help="Seed for waypoint placement")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate lat/lon - must provide both or neither
    if (args.lat is None) != (args.lon is None):
        parser.error("--lat and --lon must be used together")

    distance = args.distance * 1000
    if not CONFIG["min_run_distance"] <= distance <= CONFIG["max_run_distance"]:
        parser.error(f"distance must be between {CONFIG['min_run_distance'] / 1000:g} "
                     f"and {CONFIG['max_run_distance'] / 1000:g} km")
    if args.time is not None and args.time <= 0:
        parser.error("--time must be positive")

    try:
        provider = build_provider(args.provider, args.ors_key)
    except ValueError as e:
        parser.error(str(e))

    log_path = args.log
    if not log_path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = f"runroute_{timestamp}.log"

    start_location = (args.lat, args.lon) if args.lat is not None else None
    runner = Runner(
        provider,
        log_path=log_path,
        preview_mode=args.preview,
        start_location=start_location,
        strategy=STRATEGIES[args.strategy],
        show_options=args.options,
        target_time=args.time,
        html_output=args.html,
        gpx_output=args.gpx,
        seed=args.seed,
    )

    if args.playback:
        if not Path(args.playback).exists():
            print(f"Playback file not found: {args.playback}")
            sys.exit(1)
        runner.set_gps_source(GPSPlayback(args.playback, args.speed))
    elif args.record:
        runner.set_gps_source(GPSRecorder(runner.gps, args.record))

    runner.run(distance)


if __name__ == "__main__":
    main()
