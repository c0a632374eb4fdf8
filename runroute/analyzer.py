"""Route statistics: turns, elevation, surface, difficulty and time."""

from typing import Optional, Sequence

from .config import CONFIG
from .elevation import ElevationProvider, SimulatedElevation
from .geo import distance_between, location_bearing, turn_angle
from .models import ElevationPoint, Location, RouteDetails, RouteDifficulty, RouteStep

TRAIL_KEYWORDS = ("trail", "path")
ROAD_KEYWORDS = ("road", "street", "avenue")


def classify_surface(instruction: str) -> str:
    """Guess the surface of a step from its instruction text"""
    text = instruction.lower()
    if any(k in text for k in TRAIL_KEYWORDS):
        return "trail"
    if any(k in text for k in ROAD_KEYWORDS):
        return "road"
    return "unknown"


def _threshold_points(value: float, table: list[tuple[float, int]]) -> int:
    for threshold, points in table:
        if value > threshold:
            return points
    return 0


def difficulty_for(elevation_gain: float, max_grade: float, turns: int) -> RouteDifficulty:
    """Additive score over climb, steepness and turn count"""
    score = (_threshold_points(elevation_gain, CONFIG["difficulty_elevation_points"])
             + _threshold_points(max_grade, CONFIG["difficulty_grade_points"])
             + _threshold_points(turns, CONFIG["difficulty_turn_points"]))
    if score <= 2:
        return RouteDifficulty.EASY
    if score <= 4:
        return RouteDifficulty.MODERATE
    if score <= 6:
        return RouteDifficulty.CHALLENGING
    return RouteDifficulty.HARD


class RouteAnalyzer:
    """Computes RouteDetails for a finished route.

    Stateless apart from the elevation provider; results are not cached and
    must be recomputed when the route changes.
    """

    def __init__(self, elevation_provider: Optional[ElevationProvider] = None):
        self.elevation_provider = elevation_provider or SimulatedElevation()

    def analyze(self, coordinates: Sequence[Location], steps: Sequence[RouteStep],
                target_distance: float) -> RouteDetails:
        right, left, sharp = self._count_turns(coordinates)
        turns = right + left
        profile, gain, loss, max_elev, min_elev, avg_grade, max_grade = self._elevation(coordinates)
        road, trail, unknown = self._surface(steps)

        distance = target_distance
        if distance <= 0:
            distance = self._cumulative(coordinates)[-1] if coordinates else 0.0
        estimated_time = (distance / 1000 * CONFIG["base_pace_seconds_per_km"]
                          + gain * CONFIG["seconds_per_meter_climb"]
                          + turns * CONFIG["seconds_per_turn"])

        return RouteDetails(
            number_of_turns=turns,
            right_turns=right,
            left_turns=left,
            sharp_turns=sharp,
            elevation_profile=profile,
            total_elevation_gain=gain,
            total_elevation_loss=loss,
            max_elevation=max_elev,
            min_elevation=min_elev,
            average_grade=avg_grade,
            max_grade=max_grade,
            road_percentage=road,
            trail_percentage=trail,
            unknown_percentage=unknown,
            difficulty=difficulty_for(gain, max_grade, turns),
            estimated_time=estimated_time,
        )

    def _count_turns(self, coordinates: Sequence[Location]) -> tuple[int, int, int]:
        """Right, left and sharp turn counts at every stride-th point"""
        stride = CONFIG["turn_sample_stride"]
        right = left = sharp = 0
        i = stride
        while i + stride < len(coordinates):
            bearing_in = location_bearing(coordinates[i - stride], coordinates[i])
            bearing_out = location_bearing(coordinates[i], coordinates[i + stride])
            angle = turn_angle(bearing_in, bearing_out)
            if abs(angle) >= CONFIG["min_turn_angle"]:
                if angle > 0:
                    right += 1
                else:
                    left += 1
                if abs(angle) > CONFIG["sharp_turn_angle"]:
                    sharp += 1
            i += stride
        return right, left, sharp

    @staticmethod
    def _cumulative(coordinates: Sequence[Location]) -> list[float]:
        cumulative = [0.0]
        for i in range(1, len(coordinates)):
            cumulative.append(cumulative[-1] + distance_between(coordinates[i - 1], coordinates[i]))
        return cumulative

    def _elevation(self, coordinates: Sequence[Location]):
        if not coordinates:
            return [], 0.0, 0.0, 0.0, 0.0, 0.0, 0.0

        cumulative = self._cumulative(coordinates)
        indices = list(range(0, len(coordinates), CONFIG["elevation_sample_stride"]))
        elevations = self.elevation_provider.elevations([coordinates[i] for i in indices])

        profile = [
            ElevationPoint(distance_km=cumulative[i] / 1000, elevation=elev)
            for i, elev in zip(indices, elevations)
        ]

        gain = loss = max_grade = 0.0
        for k in range(1, len(indices)):
            delta = elevations[k] - elevations[k - 1]
            if delta > 0:
                gain += delta
            else:
                loss += -delta
            segment = cumulative[indices[k]] - cumulative[indices[k - 1]]
            if segment > 0:
                max_grade = max(max_grade, abs(delta) / segment * 100)

        sampled = cumulative[indices[-1]]
        avg_grade = (gain + loss) / sampled * 100 if sampled > 0 else 0.0
        return profile, gain, loss, max(elevations), min(elevations), avg_grade, max_grade

    def _surface(self, steps: Sequence[RouteStep]) -> tuple[float, float, float]:
        """Road, trail and unknown percentages weighted by step distance"""
        totals = {"road": 0.0, "trail": 0.0, "unknown": 0.0}
        for step in steps:
            totals[classify_surface(step.instruction)] += max(step.distance, 0.0)

        total = sum(totals.values())
        if total <= 0:
            return (float(CONFIG["default_road_percentage"]), 0.0,
                    float(CONFIG["default_unknown_percentage"]))
        return (totals["road"] / total * 100,
                totals["trail"] / total * 100,
                totals["unknown"] / total * 100)
