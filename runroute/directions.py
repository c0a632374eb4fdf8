"""Pedestrian directions providers."""

from typing import Optional

import requests

from .config import CONFIG
from .geo import distance_between, interpolate
from .models import Location, RouteStep


class DirectionsError(Exception):
    """A directions request failed or returned no usable route"""


class DirectionsProvider:
    """Base class for directions providers.

    `directions()` returns the dense polyline and the maneuver steps for a
    single pedestrian leg, without alternatives, or raises DirectionsError.
    """

    name = "base"

    def directions(self, source: Location, destination: Location) -> tuple[list[Location], list[RouteStep]]:
        raise NotImplementedError


def _geojson_coordinates(coordinates: list) -> list[Location]:
    """GeoJSON [lon, lat] pairs to locations"""
    return [Location(lat=c[1], lon=c[0]) for c in coordinates if len(c) >= 2]


class OSRMDirections(DirectionsProvider):
    """OSRM routing with the foot profile"""

    name = "osrm"
    BASE_URL = "https://router.project-osrm.org"

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        # Option threads share a provider, so no Session unless one is injected
        self.http = session or requests

    @staticmethod
    def _step_instruction(step: dict) -> str:
        maneuver = step.get("maneuver", {})
        parts = [maneuver.get("type", "continue")]
        if maneuver.get("modifier"):
            parts.append(maneuver["modifier"])
        if step.get("name"):
            parts.append(f"onto {step['name']}")
        return " ".join(parts)

    def directions(self, source: Location, destination: Location) -> tuple[list[Location], list[RouteStep]]:
        url = (f"{self.base_url}/route/v1/foot/"
               f"{source.lon},{source.lat};{destination.lon},{destination.lat}")
        params = {
            "overview": "full",
            "geometries": "geojson",
            "steps": "true",
            "alternatives": "false",
        }
        try:
            response = self.http.get(url, params=params, timeout=CONFIG["directions_timeout"])
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise DirectionsError(f"OSRM request failed: {e}") from e

        if data.get("code") != "Ok" or not data.get("routes"):
            raise DirectionsError(f"OSRM returned no route ({data.get('code')})")

        route = data["routes"][0]
        coordinates = _geojson_coordinates(route.get("geometry", {}).get("coordinates", []))
        if not coordinates:
            raise DirectionsError("OSRM route has no geometry")

        steps = []
        for leg in route.get("legs", []):
            for step in leg.get("steps", []):
                steps.append(RouteStep(
                    instruction=self._step_instruction(step),
                    distance=step.get("distance", 0.0),
                ))
        return coordinates, steps


class OpenRouteServiceDirections(DirectionsProvider):
    """OpenRouteService routing with the foot-walking profile"""

    name = "ors"
    BASE_URL = "https://api.openrouteservice.org"

    def __init__(self, api_key: str, base_url: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        # Option threads share a provider, so no Session unless one is injected
        self.http = session or requests

    def directions(self, source: Location, destination: Location) -> tuple[list[Location], list[RouteStep]]:
        url = f"{self.base_url}/v2/directions/foot-walking/geojson"
        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
        }
        body = {
            "coordinates": [[source.lon, source.lat], [destination.lon, destination.lat]],
            "instructions": True,
        }
        try:
            response = self.http.post(url, json=body, headers=headers,
                                         timeout=CONFIG["directions_timeout"])
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise DirectionsError(f"OpenRouteService request failed: {e}") from e

        features = data.get("features") or []
        if not features:
            raise DirectionsError("OpenRouteService returned no route")

        feature = features[0]
        coordinates = _geojson_coordinates(feature.get("geometry", {}).get("coordinates", []))
        if not coordinates:
            raise DirectionsError("OpenRouteService route has no geometry")

        steps = []
        for segment in feature.get("properties", {}).get("segments", []):
            for step in segment.get("steps", []):
                steps.append(RouteStep(
                    instruction=step.get("instruction", ""),
                    distance=step.get("distance", 0.0),
                ))
        return coordinates, steps


class StraightLineDirections(DirectionsProvider):
    """Offline provider: every leg is a straight line.

    For previews without network access and for replaying simulated runs.
    """

    name = "straight"

    def __init__(self, points_per_leg: int = 10):
        self.points_per_leg = points_per_leg

    def directions(self, source: Location, destination: Location) -> tuple[list[Location], list[RouteStep]]:
        coordinates = interpolate(source, destination, self.points_per_leg)
        return coordinates, [RouteStep("continue", distance_between(source, destination))]
