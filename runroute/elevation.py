"""Elevation sources for route analysis."""

import math
import time
from typing import Sequence

import requests

from .models import Location


class ElevationError(Exception):
    """An elevation lookup failed"""


class ElevationProvider:
    """Base class: `elevation()` for one point, `elevations()` for many"""

    def elevation(self, location: Location) -> float:
        raise NotImplementedError

    def elevations(self, locations: Sequence[Location]) -> list[float]:
        return [self.elevation(loc) for loc in locations]


class SimulatedElevation(ElevationProvider):
    """Deterministic stand-in terrain built from sine and cosine of position.

    This is not topography. It gives the analyzer plausible rolling hills
    until a real elevation source is configured.
    """

    def __init__(self, base: float = 100.0, lat_amplitude: float = 30.0,
                 lon_amplitude: float = 20.0, scale: float = 1000.0):
        self.base = base
        self.lat_amplitude = lat_amplitude
        self.lon_amplitude = lon_amplitude
        self.scale = scale

    def elevation(self, location: Location) -> float:
        return (self.base
                + self.lat_amplitude * math.sin(location.lat * self.scale)
                + self.lon_amplitude * math.cos(location.lon * self.scale))


class OpenElevation(ElevationProvider):
    """Open-Elevation DEM lookups, batched"""

    URL = "https://api.open-elevation.com/api/v1/lookup"
    BATCH_SIZE = 100

    def __init__(self, url: str = URL, batch_size: int = BATCH_SIZE, pause: float = 0.5):
        self.url = url
        self.batch_size = batch_size
        self.pause = pause  # seconds between batches

    def elevation(self, location: Location) -> float:
        return self.elevations([location])[0]

    def elevations(self, locations: Sequence[Location]) -> list[float]:
        elevations = []
        for i in range(0, len(locations), self.batch_size):
            batch = locations[i:i + self.batch_size]
            params = {"locations": "|".join(f"{p.lat},{p.lon}" for p in batch)}
            try:
                response = requests.get(self.url, params=params, timeout=30)
                response.raise_for_status()
                data = response.json()
            except (requests.RequestException, ValueError) as e:
                raise ElevationError(f"Elevation lookup failed: {e}") from e

            results = data.get("results", [])
            if len(results) != len(batch):
                raise ElevationError(f"Expected {len(batch)} elevations, got {len(results)}")
            for result in results:
                elev = result.get("elevation")
                elevations.append(elev if elev is not None else 0.0)

            if self.pause and i + self.batch_size < len(locations):
                time.sleep(self.pause)
        return elevations
