"""Turns waypoint rings into road-following routes."""

import threading
from typing import Callable, Optional, Sequence

from .config import CONFIG
from .directions import DirectionsError, DirectionsProvider
from .geo import interpolate, path_distance
from .logger import Logger, quiet_logger
from .models import Location, ResolvedRoute

SIMPLIFIED_ROUTE = "Using simplified route"
ROUTE_TOO_LONG = "Route too long for this area. Try a shorter distance."
ROUTE_NOT_FOUND = "Could not find a walkable route here. Try a different location."


class RouteResolver:
    """Requests directions for each leg of a waypoint ring, in order.

    Legs are requested one after another. A failed leg is replaced by a
    straight line so one bad request does not lose the route; too many
    failures abort the whole resolution with a descriptive error.
    """

    def __init__(self, provider: DirectionsProvider, logger: Optional[Logger] = None):
        self.provider = provider
        self.logger = logger or quiet_logger()

    def resolve(self, waypoints: Sequence[Location],
                cancel_event: Optional[threading.Event] = None) -> Optional[ResolvedRoute]:
        """Resolve a waypoint ring.

        Returns None if `cancel_event` was set while resolving; the caller
        has moved on and the partial work is dropped without an error.
        """
        if len(waypoints) < 2:
            return ResolvedRoute()

        segment_count = len(waypoints) - 1
        route = ResolvedRoute()
        failed = 0
        succeeded = 0

        for i in range(segment_count):
            if cancel_event is not None and cancel_event.is_set():
                self.logger.log("Route resolution cancelled", {"segment": i})
                return None

            source, destination = waypoints[i], waypoints[i + 1]
            try:
                coordinates, steps = self.provider.directions(source, destination)
                if not coordinates:
                    raise DirectionsError("empty route")
            except DirectionsError as e:
                failed += 1
                self.logger.log("Segment fell back to straight line", {"segment": i, "error": str(e)})
                route.coordinates.extend(
                    interpolate(source, destination, CONFIG["segment_interpolation_points"])
                )
                continue

            succeeded += 1
            route.coordinates.extend(coordinates)
            route.steps.extend(steps)

        if cancel_event is not None and cancel_event.is_set():
            self.logger.log("Route resolution cancelled", {"segment": segment_count})
            return None

        ring_distance = path_distance(waypoints)
        too_long = succeeded == 0 and ring_distance > CONFIG["max_fallback_route_distance"]
        if too_long or failed > segment_count * CONFIG["max_failed_segment_ratio"]:
            error = ROUTE_TOO_LONG if too_long else ROUTE_NOT_FOUND
            self.logger.log("Route resolution aborted", {
                "failed": failed,
                "segments": segment_count,
                "ring_distance": round(ring_distance),
            })
            return ResolvedRoute(error=error)

        if failed:
            route.error = SIMPLIFIED_ROUTE
        self.logger.log("Route resolved", {
            "segments": segment_count,
            "failed": failed,
            "points": len(route.coordinates),
        })
        return route


class ResolutionTask:
    """A single background resolution that can be cancelled.

    `on_complete(task, route)` is called from the worker thread only when
    the resolution finished without being cancelled.
    """

    def __init__(self, resolver: RouteResolver, waypoints: Sequence[Location],
                 on_complete: Callable[["ResolutionTask", ResolvedRoute], None]):
        self.resolver = resolver
        self.waypoints = list(waypoints)
        self.on_complete = on_complete
        self.reverse_on_publish = False  # direction toggled while in flight
        self.cancel_event = threading.Event()
        self.thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> "ResolutionTask":
        self.thread.start()
        return self

    def cancel(self):
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def join(self, timeout: Optional[float] = None):
        self.thread.join(timeout)

    def is_alive(self) -> bool:
        return self.thread.is_alive()

    def _run(self):
        route = self.resolver.resolve(self.waypoints, self.cancel_event)
        if route is not None and not self.cancelled:
            self.on_complete(self, route)
