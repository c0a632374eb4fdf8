"""Live location sources: Termux GPS, trace recording and trace playback."""

import json
import subprocess
import time
from datetime import datetime
from typing import Optional

from .config import CONFIG
from .geo import haversine_distance
from .models import Location


class GPS:
    """GPS access via Termux API"""

    def __init__(self, provider: str = "gps"):
        self.provider = provider
        self.last_location: Optional[Location] = None
        self.consecutive_failures = 0
        self.discarded = 0  # fixes dropped for invalid accuracy

    def _fail(self) -> None:
        self.consecutive_failures += 1
        return None

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        """Get current location using termux-location"""
        try:
            result = subprocess.run(
                ["termux-location", "-p", self.provider, "-r", "once"],
                capture_output=True,
                text=True,
                timeout=timeout
            )
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return self._fail()

        if result.returncode != 0 or not result.stdout.strip():
            return self._fail()

        try:
            data = json.loads(result.stdout)
            location = Location(
                lat=data["latitude"],
                lon=data["longitude"],
                accuracy=data.get("accuracy"),
                timestamp=time.time()
            )
        except (json.JSONDecodeError, KeyError, TypeError):
            return self._fail()

        if not location.is_valid():
            self.discarded += 1
            return self._fail()

        self.last_location = location
        self.consecutive_failures = 0
        return location

    def get_status(self) -> str:
        """Get GPS status string"""
        if self.consecutive_failures == 0:
            acc = f", accuracy {self.last_location.accuracy:.0f}m" if self.last_location and self.last_location.accuracy else ""
            return f"GPS OK{acc}"
        return f"GPS: {self.consecutive_failures} consecutive failures"


class GPSRecorder:
    """Wraps a location source and records every reading to a JSON trace"""

    def __init__(self, gps, record_path: str):
        self.gps = gps
        self.record_path = record_path
        self.trace: list[dict] = []
        self.start_time = time.time()

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        location = self.gps.get_location(timeout)

        # Failed attempts are recorded too, so playback reproduces gaps
        self.trace.append({
            "elapsed": time.time() - self.start_time,
            "timestamp": time.time(),
            "location": location.to_dict() if location else None,
            "status": self.gps.get_status(),
        })
        return location

    def get_status(self) -> str:
        return self.gps.get_status()

    def save(self):
        """Save trace to file"""
        with open(self.record_path, "w") as f:
            json.dump({
                "recorded_at": datetime.now().isoformat(),
                "trace": self.trace
            }, f, indent=2)
        print(f"GPS trace saved to {self.record_path} ({len(self.trace)} entries)")


class GPSPlayback:
    """Replays a recorded trace one reading per call"""

    def __init__(self, playback_path: str, speed: float = 1.0):
        self.playback_path = playback_path
        self.speed = speed
        self.index = 0
        self.last_location: Optional[Location] = None
        self.consecutive_failures = 0

        with open(playback_path) as f:
            self.trace: list[dict] = json.load(f)["trace"]
        print(f"Loaded GPS trace from {playback_path} ({len(self.trace)} entries)")

    @classmethod
    def from_locations(cls, locations: list[Location], path: str,
                       interval: float = 1.0) -> "GPSPlayback":
        """Write a synthetic trace to `path` and load it for playback"""
        trace = [
            {"elapsed": i * interval, "location": loc.to_dict()}
            for i, loc in enumerate(locations)
        ]
        with open(path, "w") as f:
            json.dump({"recorded_at": datetime.now().isoformat(), "trace": trace}, f)
        return cls(path)

    def get_location(self, timeout: int = 30) -> Optional[Location]:
        if self.index >= len(self.trace):
            return None

        entry = self.trace[self.index]
        self.index += 1

        if not entry.get("location"):
            self.consecutive_failures += 1
            return None

        location = Location.from_dict(entry["location"])
        if not location.is_valid():
            self.consecutive_failures += 1
            return None
        if location.timestamp is None:
            location.timestamp = entry.get("elapsed")
        self.last_location = location
        self.consecutive_failures = 0
        return location

    def get_poll_interval(self) -> float:
        """Wait between polls, from trace timing scaled by speed"""
        if self.index <= 0 or self.index >= len(self.trace):
            return CONFIG["gps_poll_interval"] / self.speed

        delta = self.trace[self.index].get("elapsed", 0) - self.trace[self.index - 1].get("elapsed", 0)
        return max(0.1, min(delta / self.speed, 5.0))

    def clock(self) -> float:
        """Trace time of the latest fix, so replays keep their original pace"""
        if self.last_location and self.last_location.timestamp is not None:
            return self.last_location.timestamp
        return 0.0

    def is_finished(self) -> bool:
        return self.index >= len(self.trace)

    def get_status(self) -> str:
        progress = f"{self.index}/{len(self.trace)}"
        if self.consecutive_failures == 0:
            return f"Playback OK ({progress})"
        return f"Playback: {self.consecutive_failures} failures ({progress})"


def trace_along(route: list[Location], pace: float, interval: float = 1.0) -> list[Location]:
    """Fixes every `interval` seconds for a runner following `route` at `pace` min/km"""
    if not route or pace <= 0:
        return []

    speed = 1000 / (pace * 60)  # m/s
    step = speed * interval
    fixes = [Location(lat=route[0].lat, lon=route[0].lon, accuracy=5.0, timestamp=0.0)]
    carried = 0.0  # distance already covered into the current leg

    for a, b in zip(route, route[1:]):
        leg = haversine_distance(a.lat, a.lon, b.lat, b.lon)
        position = step - carried
        while position <= leg and leg > 0:
            f = position / leg
            fixes.append(Location(
                lat=a.lat + (b.lat - a.lat) * f,
                lon=a.lon + (b.lon - a.lon) * f,
                accuracy=5.0,
                timestamp=len(fixes) * interval,
            ))
            position += step
        carried = leg - (position - step)

    end = route[-1]
    fixes.append(Location(lat=end.lat, lon=end.lon, accuracy=5.0, timestamp=len(fixes) * interval))
    return fixes
