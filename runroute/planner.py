"""Route planning session: strategies, options, edits and periodic refresh."""

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from .config import CONFIG
from .directions import DirectionsProvider
from .geo import interpolate, path_distance
from .logger import Logger, quiet_logger
from .models import Location, ResolvedRoute, RouteOption, RouteStrategy
from .resolver import ResolutionTask, RouteResolver, SIMPLIFIED_ROUTE
from .waypoints import WaypointGenerator


def geometric_route(waypoints: Sequence[Location]) -> list[Location]:
    """Straight-line route through every waypoint"""
    points = CONFIG["fallback_interpolation_points"]
    coordinates: list[Location] = []
    for i in range(len(waypoints) - 1):
        coordinates.extend(interpolate(waypoints[i], waypoints[i + 1], points))
    return coordinates


def is_degenerate(waypoints: Sequence[Location]) -> bool:
    """True when a ring has too few points or never leaves its anchor"""
    if len(waypoints) < 3:
        return True
    first = waypoints[0]
    return all(w.close_to(first, CONFIG["location_match_tolerance"]) for w in waypoints)


class RoutePlanner:
    """Owns the active route for one planning session.

    The active route and waypoints are only ever replaced whole, under a
    lock, by the most recent resolution. Starting any new resolution
    cancels the one in flight; the old route stays visible until the new
    one arrives.
    """

    def __init__(self, provider: DirectionsProvider,
                 generator: Optional[WaypointGenerator] = None,
                 logger: Optional[Logger] = None,
                 refresh_interval: Optional[float] = None):
        self.provider = provider
        self.generator = generator or WaypointGenerator()
        self.logger = logger or quiet_logger()
        self.resolver = RouteResolver(provider, self.logger)
        self.refresh_interval = refresh_interval or CONFIG["route_update_interval"]

        self.start_location: Optional[Location] = None
        self.target_distance: float = 0
        self.strategy = RouteStrategy.BALANCED
        self.waypoint_count: Optional[int] = None  # None = derive from distance

        self.current_route: list[Location] = []
        self.current_waypoints: list[Location] = []
        self.route_steps = []
        self.route_error: Optional[str] = None
        self.route_options: list[RouteOption] = []
        self.selected_option: Optional[RouteOption] = None
        self.is_loading = False
        self.is_generating_options = False

        self._lock = threading.Lock()
        self._task: Optional[ResolutionTask] = None
        self._options_cancel: Optional[threading.Event] = None
        self._refresh_stop: Optional[threading.Event] = None
        self._refresh_thread: Optional[threading.Thread] = None

    # -- Planning lifecycle --

    def start_planning(self, location: Location, target_distance: float,
                       strategy: RouteStrategy = RouteStrategy.BALANCED,
                       refresh: bool = True):
        """Plan a loop from `location` and keep refreshing it from the same anchor"""
        self.stop_planning()
        self.start_location = location
        self.target_distance = target_distance
        self.strategy = strategy
        self.waypoint_count = None
        self.logger.log("Planning started", {
            "lat": location.lat,
            "lon": location.lon,
            "target_distance": target_distance,
            "strategy": strategy.value,
        })
        self._plan()

        if refresh:
            self._refresh_stop = threading.Event()
            self._refresh_thread = threading.Thread(
                target=self._refresh_loop, args=(self._refresh_stop,), daemon=True
            )
            self._refresh_thread.start()

    def stop_planning(self):
        """Stop the periodic refresh. The active route is kept.

        Waits for a refresh that is already generating, so nothing it
        launches can land after this returns.
        """
        stop_event, thread = self._refresh_stop, self._refresh_thread
        self._refresh_stop = None
        self._refresh_thread = None
        if stop_event:
            stop_event.set()
        if thread and thread is not threading.current_thread():
            thread.join()

    def reset(self):
        """Stop everything and forget the session"""
        self.stop_planning()
        with self._lock:
            if self._task:
                self._task.cancel()
            self._task = None
            if self._options_cancel:
                self._options_cancel.set()
            self._options_cancel = None
            self.start_location = None
            self.target_distance = 0
            self.waypoint_count = None
            self.current_route = []
            self.current_waypoints = []
            self.route_steps = []
            self.route_error = None
            self.route_options = []
            self.selected_option = None
            self.is_loading = False
            self.is_generating_options = False

    def _refresh_loop(self, stop_event: threading.Event):
        while not stop_event.wait(self.refresh_interval):
            self.logger.log("Periodic route refresh")
            self._plan(stop_event)

    def _plan(self, stop_event: Optional[threading.Event] = None):
        start = self.start_location
        if start is None:
            return
        waypoints = self.generator.generate(
            start, self.target_distance, self.strategy, self.waypoint_count
        )
        self._launch(waypoints, stop_event)

    # -- Resolution --

    def _launch(self, waypoints: Sequence[Location],
                stop_event: Optional[threading.Event] = None) -> Optional[ResolutionTask]:
        """Start resolving `waypoints`, superseding any resolution in flight.

        A refresh passes its stop event; once that is set the refresh
        launches nothing.
        """
        with self._lock:
            if stop_event is not None and stop_event.is_set():
                return None
            if self._task:
                self._task.cancel()
            self.is_loading = True
            task = ResolutionTask(self.resolver, waypoints, self._on_resolved)
            self._task = task
        task.start()
        return task

    def _on_resolved(self, task: ResolutionTask, route: ResolvedRoute):
        with self._lock:
            if task is not self._task:
                return
            self.is_loading = False
            self.route_error = route.error
            if route.is_empty:
                # Aborted: keep whatever route was showing before
                self.logger.log("Keeping previous route", {"error": route.error})
                return
            coordinates, waypoints, steps = route.coordinates, task.waypoints, route.steps
            if task.reverse_on_publish:
                coordinates, waypoints, steps = coordinates[::-1], waypoints[::-1], steps[::-1]
            self.current_route = coordinates
            self.current_waypoints = waypoints
            self.route_steps = steps

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the in-flight resolution finishes. Returns False on timeout."""
        task = self._task
        if task is None:
            return True
        task.join(timeout)
        return not task.is_alive()

    # -- Route options --

    def generate_options(self, location: Location, target_distance: float) -> list[RouteOption]:
        """Build one option per strategy concurrently and select Balanced.

        Results are gathered before anything is published, and kept in
        strategy order regardless of which finished first.
        """
        with self._lock:
            if self._options_cancel:
                self._options_cancel.set()
            cancel_event = threading.Event()
            self._options_cancel = cancel_event
            self.is_generating_options = True

        self.start_location = location
        self.target_distance = target_distance
        self.waypoint_count = None

        strategies = list(RouteStrategy)
        seeds = [self.generator.rng.random() for _ in strategies]
        with ThreadPoolExecutor(max_workers=len(strategies)) as pool:
            futures = [
                pool.submit(self._build_option, location, target_distance, strategy, seed, cancel_event)
                for strategy, seed in zip(strategies, seeds)
            ]
            results = [future.result() for future in futures]

        if cancel_event.is_set():
            return []

        options = [option for option in results if option is not None]
        with self._lock:
            self.route_options = options
            self.is_generating_options = False
        self.logger.log("Route options generated", {
            "options": [
                {"strategy": o.strategy.value, "distance": round(o.estimated_distance)}
                for o in options
            ]
        })

        default = next((o for o in options if o.strategy is RouteStrategy.BALANCED), None)
        if default:
            self.select_option(default)
        return options

    def _build_option(self, location: Location, target_distance: float,
                      strategy: RouteStrategy, seed: float,
                      cancel_event: threading.Event) -> Optional[RouteOption]:
        generator = WaypointGenerator(random.Random(seed))
        waypoints = generator.generate(location, target_distance, strategy, self.waypoint_count)
        if is_degenerate(waypoints):
            return None

        route = self.resolver.resolve(waypoints, cancel_event)
        if route is None:
            return None
        if route.is_empty:
            self.logger.log("Option fell back to geometric route", {
                "strategy": strategy.value,
                "error": route.error,
            })
            route = ResolvedRoute(coordinates=geometric_route(waypoints), error=SIMPLIFIED_ROUTE)

        count = len(waypoints) - 2
        return RouteOption(
            strategy=strategy,
            waypoints=tuple(waypoints),
            route=route,
            estimated_distance=path_distance(route.coordinates),
            waypoint_count=count,
            complexity=RouteOption.complexity_for(count),
        )

    def select_option(self, option: RouteOption):
        """Make an option the active route"""
        with self._lock:
            if self._task:
                self._task.cancel()
            self._task = None
            self.is_loading = False
            self.selected_option = option
            self.strategy = option.strategy
            self.current_route = list(option.route.coordinates)
            self.current_waypoints = list(option.waypoints)
            self.route_steps = list(option.route.steps)
            self.route_error = option.route.error
        self.logger.log("Route option selected", {"strategy": option.strategy.value})

    # -- Editing --

    def toggle_direction(self):
        """Run the loop the other way round"""
        with self._lock:
            self.current_route.reverse()
            self.current_waypoints.reverse()
            self.route_steps.reverse()
            if self._task is not None and self.is_loading:
                # The pending resolution publishes in the new direction
                self._task.reverse_on_publish = not self._task.reverse_on_publish
        self.logger.log("Route direction reversed")

    def update_waypoints(self, waypoints: Sequence[Location]) -> bool:
        """Re-resolve a manually edited ring. Rings under the minimum are rejected."""
        if len(waypoints) < CONFIG["min_edit_waypoint_count"]:
            self.logger.log("Rejected waypoint edit", {"waypoints": len(waypoints)})
            return False
        self.logger.log("Waypoints edited", {"waypoints": len(waypoints)})
        self._launch(waypoints)
        return True

    def insert_waypoint(self, location: Location) -> bool:
        """Add a waypoint just before the loop closes"""
        waypoints = list(self.current_waypoints)
        if len(waypoints) < 2:
            return False
        waypoints.insert(len(waypoints) - 1, location)
        return self.update_waypoints(waypoints)

    def remove_waypoint(self, index: int) -> bool:
        """Remove a non-anchor waypoint, keeping the ring at its minimum size"""
        waypoints = list(self.current_waypoints)
        if len(waypoints) <= CONFIG["min_edit_waypoint_count"]:
            return False
        if not 0 < index < len(waypoints) - 1:
            return False
        del waypoints[index]
        return self.update_waypoints(waypoints)

    def regenerate(self, waypoint_count: int):
        """Rebuild the ring with a different number of waypoints"""
        self.waypoint_count = waypoint_count
        self.logger.log("Regenerating route", {"waypoint_count": waypoint_count})
        self._plan()

    def get_state(self) -> dict:
        """Snapshot of the session for display or logging"""
        with self._lock:
            return {
                "route_points": len(self.current_route),
                "waypoints": len(self.current_waypoints),
                "route_distance": path_distance(self.current_route),
                "route_error": self.route_error,
                "strategy": self.strategy.value,
                "options": len(self.route_options),
                "is_loading": self.is_loading,
            }
