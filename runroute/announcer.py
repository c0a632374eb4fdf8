"""Spoken progress reports during a run."""

from typing import Optional

from .config import CONFIG
from .logger import Logger, quiet_logger

HALFWAY_MESSAGE = "You've reached the halfway point! Keep it up!"


def _plural(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def spoken_duration(seconds: float) -> str:
    """Duration as speech, e.g. '1 hour, 5 minutes, 3 seconds'"""
    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{_plural(hours, 'hour')}, {_plural(minutes, 'minute')}, {_plural(secs, 'second')}"
    if minutes:
        return f"{_plural(minutes, 'minute')}, {_plural(secs, 'second')}"
    return _plural(secs, "second")


class ProgressAnnouncer:
    """Speaks distance, split and halfway reports as the run goes on.

    At most one report is spoken per fix. Halfway comes first, then a
    completed split, then the regular progress report. Every report
    queues behind whatever is already being said.
    """

    def __init__(self, voice, logger: Optional[Logger] = None):
        self.voice = voice
        self.logger = logger or quiet_logger()
        self.interval = CONFIG["announcement_interval"]
        self.split_distance = CONFIG["split_distance"]
        self.reset()

    def reset(self, target_distance: float = 0.0):
        self.target_distance = target_distance
        self.last_announcement_distance = 0.0
        self.splits = 0
        self.last_split_distance = 0.0
        self.last_split_elapsed = 0.0
        self.halfway_announced = False

    def _say(self, message: str, data: Optional[dict] = None):
        self.logger.log(f"AUDIO: {message}", data)
        self.voice.speak(message, interrupt=False)

    def announce_start(self, target_distance: float):
        """Arm the announcer for a run of `target_distance` meters"""
        self.reset(target_distance)
        self._say(f"Starting {target_distance / 1000:.1f} kilometers run. Good luck!")

    def announce_complete(self, distance: float, elapsed: float):
        self._say(f"Run complete! You ran {distance / 1000:.2f} kilometers "
                  f"in {spoken_duration(elapsed)}. Great job!")

    def update(self, distance: float, elapsed: float, pace: float) -> Optional[str]:
        """Maybe speak a report for the run so far. Returns what was said."""
        if (not self.halfway_announced and self.target_distance > 0
                and distance >= self.target_distance / 2):
            self.halfway_announced = True
            self.last_announcement_distance = distance
            self._say(HALFWAY_MESSAGE, {"distance": round(distance)})
            return HALFWAY_MESSAGE

        if self.split_distance > 0 and int(distance // self.split_distance) > self.splits:
            return self._announce_split(distance, elapsed)

        if self.interval > 0 and distance - self.last_announcement_distance >= self.interval:
            self.last_announcement_distance = distance
            message = (f"Distance: {distance / 1000:.1f} kilometers. "
                       f"Time: {spoken_duration(elapsed)}.")
            if pace > 0:
                message += f" Current pace: {pace:.1f} minutes per kilometer."
            self._say(message, {"distance": round(distance)})
            return message
        return None

    def _announce_split(self, distance: float, elapsed: float) -> str:
        self.splits = int(distance // self.split_distance)
        split_time = elapsed - self.last_split_elapsed
        covered = distance - self.last_split_distance
        split_pace = (split_time / 60) / (covered / 1000) if covered > 0 else 0.0
        self.last_split_distance = distance
        self.last_split_elapsed = elapsed
        self.last_announcement_distance = distance

        message = (f"Split {self.splits}. Time: {spoken_duration(split_time)}. "
                   f"Pace: {split_pace:.1f}.")
        self._say(message, {"split": self.splits, "split_time": round(split_time, 1)})
        return message
