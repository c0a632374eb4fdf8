"""Distance, path and pace for the run in progress."""

import time
from typing import Callable, Optional

from .config import CONFIG
from .geo import distance_between
from .models import Location


def format_elapsed(seconds: float) -> str:
    """h:mm:ss, or m:ss under an hour"""
    seconds = int(max(seconds, 0))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class RunTracker:
    """Accumulates the run from location fixes.

    The run clock starts at the first accepted fix. Fixes with invalid
    accuracy are ignored entirely. A jump of
    `max_realistic_jump` meters or more between fixes is treated as GPS
    noise: the fix joins the path but adds no distance.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.path: list[Location] = []
        self.total_distance = 0.0  # meters
        self.last_location: Optional[Location] = None
        self.start_time: Optional[float] = None
        self.skipped_jumps = 0

    def reset(self):
        self.path = []
        self.total_distance = 0.0
        self.last_location = None
        self.start_time = None
        self.skipped_jumps = 0

    @property
    def is_running(self) -> bool:
        return self.start_time is not None

    def update(self, location: Location) -> bool:
        """Add a fix. Returns False when the fix was discarded."""
        if not location.is_valid():
            return False
        if self.start_time is None:
            self.start_time = self.clock()

        self.path.append(location)
        if self.last_location is not None:
            step = distance_between(self.last_location, location)
            if step < CONFIG["max_realistic_jump"]:
                self.total_distance += step
            else:
                self.skipped_jumps += 1
        self.last_location = location
        return True

    def elapsed(self) -> float:
        """Seconds since the run started"""
        if self.start_time is None:
            return 0.0
        return self.clock() - self.start_time

    def current_pace(self) -> float:
        """Average pace in minutes per km, 0 until any distance is covered"""
        if self.total_distance <= 0:
            return 0.0
        return (self.elapsed() / 60) / (self.total_distance / 1000)

    def summary(self) -> dict:
        return {
            "distance_km": round(self.total_distance / 1000, 2),
            "elapsed": format_elapsed(self.elapsed()),
            "pace": round(self.current_pace(), 2),
            "points": len(self.path),
        }
