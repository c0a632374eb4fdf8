import random
import threading

import pytest

from runroute.directions import DirectionsError, DirectionsProvider
from runroute.geo import distance_between, interpolate, offset_location
from runroute.models import Location, RouteStep

START = Location(lat=51.5074, lon=-0.1278)


class FakeVoice:
    """Records speech instead of playing it."""

    def __init__(self):
        self.calls = []
        self.stops = 0
        self.closed = False

    @property
    def spoken(self):
        return [text for text, _ in self.calls]

    def speak(self, text, interrupt=True):
        self.calls.append((text, interrupt))

    def stop(self):
        self.stops += 1

    def close(self, wait=False):
        self.closed = True


class FakeDirections(DirectionsProvider):
    """Straight legs with a street step; selected calls can fail.

    `fail_calls` holds call indices (in request order) that raise,
    `gate` blocks every call until set, `on_call(index)` runs first.
    """

    name = "fake"

    def __init__(self, fail_calls=(), fail_all=False, points=5, gate=None, on_call=None):
        self.fail_calls = set(fail_calls)
        self.fail_all = fail_all
        self.points = points
        self.gate = gate
        self.on_call = on_call
        self.calls = []
        self._lock = threading.Lock()

    def directions(self, source, destination):
        with self._lock:
            index = len(self.calls)
            self.calls.append((source, destination))
        if self.on_call:
            self.on_call(index)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.fail_all or index in self.fail_calls:
            raise DirectionsError("no route")
        coordinates = interpolate(source, destination, self.points)
        step = RouteStep("turn left onto Main Street", distance_between(source, destination))
        return coordinates, [step]


@pytest.fixture
def voice():
    return FakeVoice()


@pytest.fixture
def start():
    return Location(lat=START.lat, lon=START.lon)


@pytest.fixture
def directions():
    return FakeDirections()


@pytest.fixture
def make_directions():
    return FakeDirections


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def square_ring(start):
    """Closed ring around a 300m square: start, N, NE, E, start."""
    return [
        start,
        offset_location(start, 300, 0),
        offset_location(start, 300, 300),
        offset_location(start, 0, 300),
        Location(lat=start.lat, lon=start.lon),
    ]
