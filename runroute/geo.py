"""Geographic utility functions."""

import math
import time
from typing import Sequence

from .config import CONFIG
from .models import Location


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    R = 6371000  # Earth's radius in meters

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


def distance_between(a: Location, b: Location) -> float:
    """Distance in meters between two locations"""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def bearing_between(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate bearing from point 1 to point 2 in degrees (0-360, 0=North)"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)

    x = math.sin(delta_lambda) * math.cos(phi2)
    y = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda))

    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360) % 360


def location_bearing(a: Location, b: Location) -> float:
    return bearing_between(a.lat, a.lon, b.lat, b.lon)


def normalize_angle(angle: float) -> float:
    """Map any angle in degrees into (-180, 180]"""
    normalized = angle % 360
    if normalized > 180:
        normalized -= 360
    return normalized


def turn_angle(bearing_in: float, bearing_out: float) -> float:
    """Signed turn between two bearings: positive is right, negative is left"""
    return normalize_angle(bearing_out - bearing_in)


def turn_direction(angle: float) -> str:
    """Convert a signed turn angle to a spoken direction phrase"""
    abs_angle = abs(angle)

    if abs_angle < CONFIG["straight_angle_threshold"]:
        return "continue straight"
    if abs_angle > 180 - CONFIG["uturn_angle_threshold"]:
        return "make a U-turn"

    side = "right" if angle > 0 else "left"
    if abs_angle < CONFIG["slight_turn_threshold"]:
        return f"turn slightly {side}"
    elif abs_angle < CONFIG["sharp_turn_threshold"]:
        return f"turn {side}"
    else:
        return f"turn sharply {side}"


def bearing_to_compass(bearing: float) -> str:
    """Convert bearing to compass direction"""
    directions = ["north", "northeast", "east", "southeast",
                  "south", "southwest", "west", "northwest"]
    index = round(bearing / 45) % 8
    return directions[index]


def offset_location(center: Location, north_m: float, east_m: float) -> Location:
    """Move a location by a metric offset.

    Flat equirectangular approximation: latitude uses a constant meters per
    degree, longitude is additionally scaled by cos(latitude). Not valid
    near the poles or across the antimeridian.
    """
    meters_per_degree = CONFIG["meters_per_degree"]
    lat = center.lat + north_m / meters_per_degree
    lon = center.lon + east_m / (meters_per_degree * math.cos(math.radians(center.lat)))
    return Location(lat=lat, lon=lon)


def interpolate(a: Location, b: Location, points: int) -> list[Location]:
    """Straight line from a to b as `points` evenly spaced locations, both ends included"""
    if points < 2:
        return [Location(lat=a.lat, lon=a.lon), Location(lat=b.lat, lon=b.lon)]
    result = []
    for i in range(points):
        t = i / (points - 1)
        result.append(Location(
            lat=a.lat + (b.lat - a.lat) * t,
            lon=a.lon + (b.lon - a.lon) * t,
        ))
    return result


def path_distance(coordinates: Sequence[Location]) -> float:
    """Total length in meters of a polyline"""
    total = 0.0
    for i in range(len(coordinates) - 1):
        total += distance_between(coordinates[i], coordinates[i + 1])
    return total


def format_distance(meters: float) -> str:
    """Human-readable distance for speech"""
    if meters < 1000:
        return f"{int(meters)} meters"
    return f"{meters / 1000:.1f} kilometers"


def retry_with_backoff(func, max_time: float = 30.0, initial_delay: float = 1.0,
                       max_delay: float = 8.0, description: str = "operation",
                       sleep=time.sleep, clock=time.monotonic):
    """Call `func` until it returns something truthy or `max_time` runs out.

    The delay doubles after each failed attempt, capped at `max_delay`.
    Returns the successful result, or None.
    """
    start_time = clock()
    delay = initial_delay
    attempt = 1

    while True:
        result = func()
        if result:
            return result

        elapsed = clock() - start_time
        if elapsed >= max_time:
            print(f"Failed to complete {description} after {elapsed:.1f}s ({attempt} attempts)")
            return None

        sleep_time = min(delay, max_time - elapsed, max_delay)
        if sleep_time > 0:
            print(f"Retrying {description} in {sleep_time:.1f}s (attempt {attempt})...")
            sleep(sleep_time)

        delay = min(delay * 2, max_delay)
        attempt += 1
