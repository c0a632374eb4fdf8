"""Runroute - Loop route planner and voice run guide."""

from .config import CONFIG, STRATEGY_SETTINGS
from .models import (
    Location,
    RouteStep,
    ResolvedRoute,
    RouteStrategy,
    RouteOption,
    RouteDifficulty,
    ElevationPoint,
    RouteDetails,
    NavigationState,
    PaceStatus,
)
from .logger import Logger
from .geo import (
    haversine_distance,
    bearing_between,
    bearing_to_compass,
    normalize_angle,
    turn_angle,
    turn_direction,
    offset_location,
    interpolate,
    path_distance,
    format_distance,
    retry_with_backoff,
)
from .waypoints import WaypointGenerator
from .directions import (
    DirectionsError,
    DirectionsProvider,
    OSRMDirections,
    OpenRouteServiceDirections,
    StraightLineDirections,
)
from .resolver import RouteResolver, ResolutionTask
from .planner import RoutePlanner
from .elevation import ElevationError, ElevationProvider, SimulatedElevation, OpenElevation
from .analyzer import RouteAnalyzer
from .audio import Audio
from .navigation import Navigator
from .pace import PaceCoach
from .announcer import ProgressAnnouncer
from .gps import GPS, GPSRecorder, GPSPlayback, trace_along
from .tracker import RunTracker
from .companion import MessageChannel, QueueChannel, CallbackChannel, CompanionLink
from .export import route_to_gpx, route_map
from .app import Runner
from .__main__ import main

__all__ = [
    "CONFIG",
    "STRATEGY_SETTINGS",
    "Location",
    "RouteStep",
    "ResolvedRoute",
    "RouteStrategy",
    "RouteOption",
    "RouteDifficulty",
    "ElevationPoint",
    "RouteDetails",
    "NavigationState",
    "PaceStatus",
    "Logger",
    "haversine_distance",
    "bearing_between",
    "bearing_to_compass",
    "normalize_angle",
    "turn_angle",
    "turn_direction",
    "offset_location",
    "interpolate",
    "path_distance",
    "format_distance",
    "retry_with_backoff",
    "WaypointGenerator",
    "DirectionsError",
    "DirectionsProvider",
    "OSRMDirections",
    "OpenRouteServiceDirections",
    "StraightLineDirections",
    "RouteResolver",
    "ResolutionTask",
    "RoutePlanner",
    "ElevationError",
    "ElevationProvider",
    "SimulatedElevation",
    "OpenElevation",
    "RouteAnalyzer",
    "Audio",
    "Navigator",
    "PaceCoach",
    "ProgressAnnouncer",
    "GPS",
    "GPSRecorder",
    "GPSPlayback",
    "trace_along",
    "RunTracker",
    "MessageChannel",
    "QueueChannel",
    "CallbackChannel",
    "CompanionLink",
    "route_to_gpx",
    "route_map",
    "Runner",
    "main",
]
