"""Main Runroute application."""

import random
import time
from typing import Optional

from .analyzer import RouteAnalyzer
from .announcer import ProgressAnnouncer
from .audio import Audio
from .companion import CompanionLink, MessageChannel
from .config import CONFIG
from .directions import DirectionsProvider
from .elevation import ElevationProvider
from .export import route_map, save_gpx
from .geo import (
    bearing_to_compass, format_distance, location_bearing, path_distance,
    retry_with_backoff, turn_angle, turn_direction,
)
from .gps import GPS, GPSPlayback, GPSRecorder
from .logger import Logger
from .models import Location, RouteStrategy
from .navigation import Navigator
from .pace import PaceCoach
from .planner import RoutePlanner
from .tracker import RunTracker, format_elapsed
from .waypoints import WaypointGenerator


class Runner:
    """Main application: plan a loop, then guide the run along it"""

    def __init__(self, provider: DirectionsProvider,
                 log_path: Optional[str] = None,
                 preview_mode: bool = False,
                 start_location: Optional[tuple[float, float]] = None,
                 strategy: RouteStrategy = RouteStrategy.BALANCED,
                 show_options: bool = False,
                 target_time: Optional[float] = None,
                 html_output: Optional[str] = None,
                 gpx_output: Optional[str] = None,
                 seed: Optional[int] = None,
                 audio=None,
                 elevation_provider: Optional[ElevationProvider] = None,
                 channel: Optional[MessageChannel] = None,
                 echo: bool = True):
        self.gps = GPS()
        self.audio = audio or Audio()
        self.logger = Logger(log_path, echo=echo)
        self.preview_mode = preview_mode
        self.start_location = start_location  # (lat, lon) tuple for testing
        self.strategy = strategy
        self.show_options = show_options
        self.target_time = target_time  # minutes
        self.html_output = html_output
        self.gpx_output = gpx_output

        self.planner = RoutePlanner(
            provider,
            generator=WaypointGenerator(random.Random(seed)),
            logger=self.logger,
        )
        self.analyzer = RouteAnalyzer(elevation_provider)
        self.navigator = Navigator(self.audio, logger=self.logger)
        self.pace_coach = PaceCoach(self.audio, logger=self.logger)
        self.announcer = ProgressAnnouncer(self.audio, logger=self.logger)
        self.tracker = RunTracker()
        self.companion = CompanionLink(channel, logger=self.logger) if channel else None

        self.target_distance = 0.0
        self.current_location: Optional[Location] = None
        self.last_log_update = 0.0

        # GPS source (can be swapped for recording/playback)
        self.gps_source = self.gps

    def set_gps_source(self, source):
        """Set GPS source (GPS, GPSRecorder, or GPSPlayback)"""
        self.gps_source = source
        if isinstance(source, GPSPlayback):
            # Run timing follows the trace, not the (sped up) wall clock
            self.tracker.clock = source.clock
            self.pace_coach.clock = source.clock

    def get_state(self) -> dict:
        """Get current state as dict for logging"""
        state = {
            "run": self.tracker.summary(),
            "target_distance": self.target_distance,
            "navigation": self.navigator.state.value,
            "waypoint_index": self.navigator.current_waypoint_index,
            "distance_to_next": round(self.navigator.distance_to_next_waypoint),
            "pace_status": self.pace_coach.status.value,
            "gps_status": self.gps_source.get_status() if hasattr(self.gps_source, "get_status") else "unknown",
        }
        if self.current_location:
            state["location"] = {
                "lat": self.current_location.lat,
                "lon": self.current_location.lon,
                "accuracy": self.current_location.accuracy,
            }
        return state

    def periodic_update(self):
        """Log state every log_interval seconds"""
        now = time.time()
        if now - self.last_log_update >= CONFIG["log_interval"]:
            self.logger.log("STATE", self.get_state())
            self.last_log_update = now

    def _get_start_location(self) -> Optional[Location]:
        if self.start_location:
            lat, lon = self.start_location
            self.logger.log("Using provided start location", {"lat": lat, "lon": lon})
            print(f"Using provided location: {lat:.5f}, {lon:.5f}")
            return Location(lat=lat, lon=lon, accuracy=0, timestamp=time.time())

        print("Getting GPS fix...")

        def try_gps():
            loc = self.gps_source.get_location(timeout=10)
            if loc:
                self.logger.log("GPS fix obtained", {"lat": loc.lat, "lon": loc.lon})
            else:
                self.logger.log("GPS attempt failed")
            return loc

        location = retry_with_backoff(
            try_gps,
            max_time=30.0,
            initial_delay=1.0,
            max_delay=8.0,
            description="GPS fix"
        )
        if location:
            print(f"Location: {location.lat:.5f}, {location.lon:.5f} (accuracy: {location.accuracy}m)")
        return location

    def plan(self, location: Location, target_distance: float) -> bool:
        """Plan the loop and wait for it. Returns False when there is no route."""
        if self.show_options:
            print("Generating route options...")
            options = self.planner.generate_options(location, target_distance)
            for option in options:
                print(f"  {option.strategy.value:<9} {format_distance(option.estimated_distance):>16}"
                      f"  {option.waypoint_count:>2} waypoints  {option.complexity}")
            chosen = next((o for o in options if o.strategy is self.strategy), None)
            if chosen:
                self.planner.select_option(chosen)
        else:
            print("Calculating route...")
            self.planner.start_planning(location, target_distance, self.strategy, refresh=False)
            self.planner.wait(timeout=CONFIG["directions_timeout"] * CONFIG["max_waypoint_count"] * 2)

        if self.planner.route_error:
            print(self.planner.route_error)
        if not self.planner.current_route:
            self.logger.log("No route available", {"error": self.planner.route_error})
            self.audio.speak(self.planner.route_error or "Could not plan a route")
            return False

        self.logger.log("Route ready", self.planner.get_state())
        print(f"Route ready: {len(self.planner.current_route)} points, "
              f"{format_distance(path_distance(self.planner.current_route))}")
        return True

    def initialize(self, target_distance: float) -> bool:
        """Get a start fix, plan the route and arm guidance"""
        self.logger.log("Initializing run", {"target_distance": target_distance})
        self.target_distance = target_distance

        location = self._get_start_location()
        if not location:
            self.logger.log("Could not get GPS location after retries")
            print("Could not get GPS location")
            self.audio.speak("Could not get GPS location")
            return False
        self.current_location = location

        if not self.plan(location, target_distance):
            return False

        if self.preview_mode:
            self.display_route_preview()
            return False

        if self.target_time:
            self.pace_coach.set_goal(target_distance / 1000, self.target_time)
        self.tracker.reset()
        self.last_log_update = time.time()
        if self.companion:
            self.companion.channel.open()
        if not self.navigator.start_navigation(self.planner.current_waypoints):
            return False
        self.announcer.announce_start(target_distance)
        return True

    def display_route_preview(self):
        """Print route statistics and a waypoint-by-waypoint breakdown"""
        route = self.planner.current_route
        waypoints = self.planner.current_waypoints
        details = self.analyzer.analyze(route, self.planner.route_steps, self.target_distance)

        print("\n" + "=" * 60)
        print("ROUTE PREVIEW")
        print("=" * 60)

        total_distance = path_distance(route)
        print(f"\nStrategy: {self.planner.strategy.value} ({self.planner.strategy.description})")
        print(f"Total distance: {total_distance:.0f}m ({total_distance/1000:.2f}km)")
        print(f"Waypoints: {max(len(waypoints) - 2, 0)}")
        print(f"Difficulty: {details.difficulty.value}")
        print(f"Estimated time: {format_elapsed(details.estimated_time)}")
        print(f"Turns: {details.number_of_turns} ({details.right_turns} right, "
              f"{details.left_turns} left, {details.sharp_turns} sharp)")
        print(f"Elevation: +{details.total_elevation_gain:.0f}m / -{details.total_elevation_loss:.0f}m "
              f"(max grade {details.max_grade:.1f}%)")
        print(f"Surface: {details.road_percentage:.0f}% road, {details.trail_percentage:.0f}% trail, "
              f"{details.unknown_percentage:.0f}% unknown")

        print("\n" + "-" * 60)
        print("WAYPOINTS")
        print("-" * 60)

        cumulative_distance = 0.0
        for i in range(1, len(waypoints)):
            prev, here = waypoints[i - 1], waypoints[i]
            cumulative_distance += path_distance([prev, here])
            if i < len(waypoints) - 1:
                angle = turn_angle(location_bearing(prev, here), location_bearing(here, waypoints[i + 1]))
                heading = bearing_to_compass(location_bearing(here, waypoints[i + 1]))
                print(f"{cumulative_distance:>6.0f}m | Waypoint {i}: {turn_direction(angle)}, head {heading}")
        print(f"{cumulative_distance:>6.0f}m | Arrive at start")
        print("\n" + "=" * 60)

        if self.html_output:
            m = route_map(route, waypoints, waypoints[0] if waypoints else self.current_location,
                          details, self.planner.route_options)
            m.save(self.html_output)
            print(f"\nRoute map saved to: {self.html_output}")

        if self.gpx_output:
            save_gpx(self.gpx_output, route, waypoints)

    def update(self) -> bool:
        """Process one location fix. Returns False once the run is over."""
        location = self.gps_source.get_location()
        if location is None:
            self.periodic_update()
            return True

        self.current_location = location
        self.tracker.update(location)
        self.navigator.update_location(location)
        self.pace_coach.update_pace(self.tracker.current_pace(), self.tracker.elapsed())
        self.announcer.update(self.tracker.total_distance, self.tracker.elapsed(),
                              self.tracker.current_pace())

        if self.companion:
            self.companion.send_run_state(
                is_running=True,
                distance=self.tracker.total_distance,
                elapsed_time=self.tracker.elapsed(),
                current_pace=self.tracker.current_pace(),
                pace_status=self.pace_coach.status.value,
                target_distance=self.target_distance,
                target_time=self.target_time or 0,
            )

        self.periodic_update()

        if self.navigator.has_arrived:
            self.announcer.announce_complete(self.tracker.total_distance, self.tracker.elapsed())
            if self.companion:
                self.companion.send_haptic("success")
            return False
        return True

    def get_poll_interval(self) -> float:
        """Get poll interval, respecting playback speed if applicable"""
        if isinstance(self.gps_source, GPSPlayback):
            return self.gps_source.get_poll_interval()
        return CONFIG["gps_poll_interval"]

    def is_playback_finished(self) -> bool:
        if isinstance(self.gps_source, GPSPlayback):
            return self.gps_source.is_finished()
        return False

    def finish(self) -> dict:
        """Stop guidance and report the run"""
        if self.navigator.is_navigating:
            self.navigator.stop_navigation()
        self.planner.reset()

        if isinstance(self.gps_source, GPSRecorder):
            self.gps_source.save()

        summary = self.tracker.summary()
        if self.companion:
            self.companion.send_run_state(
                is_running=False,
                distance=self.tracker.total_distance,
                elapsed_time=self.tracker.elapsed(),
                current_pace=self.tracker.current_pace(),
                pace_status=self.pace_coach.status.value,
                target_distance=self.target_distance,
                target_time=self.target_time or 0,
            )
            self.companion.channel.close()
        self.logger.log("Run summary", summary)

        print("\nRun summary:")
        print(f"  Distance: {summary['distance_km']:.2f}km")
        print(f"  Time: {summary['elapsed']}")
        if summary["pace"]:
            print(f"  Pace: {summary['pace']:.2f} min/km")
        return summary

    def run(self, target_distance: float):
        """Plan and run"""
        print("\n=== Runroute ===")
        print(f"Target distance: {target_distance}m")
        if self.preview_mode:
            print("Mode: PREVIEW (plan and display route)")
        else:
            if isinstance(self.gps_source, GPSPlayback):
                print(f"Playback mode: {self.gps_source.speed}x speed")
            print("Press Ctrl+C to stop")
        print()

        try:
            if not self.initialize(target_distance):
                return

            interrupted = False
            try:
                while self.update():
                    if self.is_playback_finished():
                        print("\nPlayback finished")
                        self.logger.log("Playback finished")
                        break
                    time.sleep(self.get_poll_interval())
            except KeyboardInterrupt:
                interrupted = True
                print("\nRun interrupted")
                self.logger.log("Run interrupted by user")
            finally:
                self.finish()
            if interrupted:
                # Queued behind the silence stop_navigation leaves
                self.audio.speak("Run ended", interrupt=False)
        finally:
            self.planner.reset()
            self.audio.close(wait=True)
            self.logger.close()
