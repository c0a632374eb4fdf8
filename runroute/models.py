"""Data classes for Runroute."""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional

from .config import STRATEGY_SETTINGS


@dataclass
class Location:
    lat: float
    lon: float
    accuracy: Optional[float] = None
    timestamp: Optional[float] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Location":
        return cls(**d)

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lon)

    def is_valid(self) -> bool:
        """A negative accuracy marks a reading the platform could not fix"""
        return self.accuracy is None or self.accuracy >= 0

    def close_to(self, other: "Location", tolerance: float) -> bool:
        """Compare by distance instead of exact float equality"""
        from .geo import haversine_distance
        return haversine_distance(self.lat, self.lon, other.lat, other.lon) <= tolerance


@dataclass
class RouteStep:
    """A maneuver returned by the directions provider"""
    instruction: str
    distance: float  # meters


@dataclass
class ResolvedRoute:
    """Road-following coordinates for a waypoint ring"""
    coordinates: list[Location] = field(default_factory=list)
    steps: list[RouteStep] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.coordinates

    def distance(self) -> float:
        from .geo import path_distance
        return path_distance(self.coordinates)


class RouteStrategy(Enum):
    BALANCED = "Balanced"
    SCENIC = "Scenic"
    DIRECT = "Direct"
    VARIED = "Varied"

    @property
    def waypoint_multiplier(self) -> float:
        return STRATEGY_SETTINGS[self.value]["waypoint_multiplier"]

    @property
    def radius_variation(self) -> float:
        return STRATEGY_SETTINGS[self.value]["radius_variation"]

    @property
    def description(self) -> str:
        return STRATEGY_SETTINGS[self.value]["description"]


@dataclass(frozen=True)
class RouteOption:
    """One selectable route produced under a strategy"""
    strategy: RouteStrategy
    waypoints: tuple[Location, ...]
    route: ResolvedRoute
    estimated_distance: float  # meters
    waypoint_count: int
    complexity: str

    @staticmethod
    def complexity_for(waypoint_count: int) -> str:
        if waypoint_count <= 4:
            return "Simple"
        if waypoint_count <= 8:
            return "Moderate"
        return "Complex"


class RouteDifficulty(Enum):
    EASY = "Easy"
    MODERATE = "Moderate"
    CHALLENGING = "Challenging"
    HARD = "Hard"


@dataclass
class ElevationPoint:
    distance_km: float  # cumulative along the route
    elevation: float  # meters


@dataclass
class RouteDetails:
    """Post-hoc statistics for a resolved route"""
    number_of_turns: int
    right_turns: int
    left_turns: int
    sharp_turns: int
    elevation_profile: list[ElevationPoint]
    total_elevation_gain: float
    total_elevation_loss: float
    max_elevation: float
    min_elevation: float
    average_grade: float  # percent
    max_grade: float  # percent
    road_percentage: float
    trail_percentage: float
    unknown_percentage: float
    difficulty: RouteDifficulty
    estimated_time: float  # seconds


class NavigationState(Enum):
    IDLE = "idle"
    NAVIGATING = "navigating"
    ARRIVED = "arrived"


class PaceStatus(Enum):
    TOO_SLOW = "too slow"
    SLIGHTLY_SLOW = "slightly slow"
    ON_PACE = "on pace"
    SLIGHTLY_FAST = "slightly fast"
    TOO_FAST = "too fast"
