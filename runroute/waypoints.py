"""Closed-loop waypoint generation around a start point."""

import math
import random
from typing import Optional

from .config import CONFIG
from .geo import offset_location
from .models import Location, RouteStrategy


class WaypointGenerator:
    """Places waypoints on a perturbed circle whose circumference is the target distance.

    The ring starts and ends at the center. Placement is random unless a
    seeded `random.Random` is passed in.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    @staticmethod
    def loop_radius(target_distance: float) -> float:
        """Radius in meters of a circle with the target circumference"""
        return target_distance / (2 * math.pi)

    @staticmethod
    def waypoint_count(target_distance: float, strategy: RouteStrategy,
                       override: Optional[int] = None) -> int:
        """Number of non-anchor waypoints for a loop"""
        if override is not None:
            count = override
        else:
            base = max(CONFIG["min_waypoint_count"],
                       int(target_distance / CONFIG["meters_per_waypoint"]))
            count = round(base * strategy.waypoint_multiplier)
        return max(CONFIG["min_edit_waypoint_count"], min(CONFIG["max_waypoint_count"], count))

    def generate(self, center: Location, target_distance: float,
                 strategy: RouteStrategy = RouteStrategy.BALANCED,
                 waypoint_count: Optional[int] = None) -> list[Location]:
        """Build a closed waypoint ring [center, p1, ..., pn, center]"""
        anchor = Location(lat=center.lat, lon=center.lon)
        if target_distance <= 0:
            return [anchor, Location(lat=center.lat, lon=center.lon)]

        radius = self.loop_radius(target_distance)
        count = self.waypoint_count(target_distance, strategy, waypoint_count)
        step = 2 * math.pi / count

        ring = [anchor]
        for i in range(count):
            angle = step * i
            if strategy is RouteStrategy.VARIED:
                angle += self.rng.uniform(-1, 1) * CONFIG["varied_angle_jitter"] * step

            r = radius * (1 + self.rng.uniform(-1, 1) * strategy.radius_variation)
            ring.append(offset_location(anchor, r * math.cos(angle), r * math.sin(angle)))

        ring.append(Location(lat=center.lat, lon=center.lon))
        return ring
