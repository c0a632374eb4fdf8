"""Pace status and voice coaching against a time goal."""

import time
from typing import Callable, Optional

from .config import CONFIG
from .logger import Logger, quiet_logger
from .models import PaceStatus

COACHING_MESSAGES = {
    PaceStatus.TOO_SLOW: "You're running significantly slow. Try to pick up the pace to hit your goal.",
    PaceStatus.SLIGHTLY_SLOW: "You're running a bit slow. Speed up slightly to stay on track.",
    PaceStatus.TOO_FAST: "You're running significantly fast. Slow down to conserve energy.",
    PaceStatus.SLIGHTLY_FAST: "You're running a bit fast. You can slow down slightly.",
}


def classify_pace(pace_difference: float) -> PaceStatus:
    """Five-level status from the fractional difference to target pace (positive = slower)"""
    if pace_difference > CONFIG["pace_moderate_threshold"]:
        return PaceStatus.TOO_SLOW
    if pace_difference > CONFIG["pace_slight_threshold"]:
        return PaceStatus.SLIGHTLY_SLOW
    if pace_difference < -CONFIG["pace_moderate_threshold"]:
        return PaceStatus.TOO_FAST
    if pace_difference < -CONFIG["pace_slight_threshold"]:
        return PaceStatus.SLIGHTLY_FAST
    return PaceStatus.ON_PACE


class PaceCoach:
    """Tracks pace against a goal and speaks occasional corrections.

    Coaching is quieter than the status: it waits out a grace period,
    spaces messages apart, and only speaks beyond `pace_tolerance`.
    Coaching messages queue behind navigation speech instead of cutting
    it off.
    """

    def __init__(self, voice, clock: Callable[[], float] = time.monotonic,
                 logger: Optional[Logger] = None):
        self.voice = voice
        self.clock = clock
        self.logger = logger or quiet_logger()
        self.target_pace = 0.0  # minutes per km
        self.status = PaceStatus.ON_PACE
        self.last_coaching_time: Optional[float] = None

    @property
    def has_goal(self) -> bool:
        return self.target_pace > 0

    def set_goal(self, target_distance_km: float, target_time_min: float) -> bool:
        """Arm coaching for a distance/time goal. Non-positive goals are ignored."""
        if target_distance_km <= 0 or target_time_min <= 0:
            return False
        self.target_pace = target_time_min / target_distance_km
        self.last_coaching_time = None
        self.logger.log("Pace goal set", {"target_pace": round(self.target_pace, 2)})
        return True

    def reset(self):
        self.target_pace = 0.0
        self.status = PaceStatus.ON_PACE
        self.last_coaching_time = None

    def update_pace(self, current_pace: float, elapsed_time: float) -> PaceStatus:
        """Recompute status for the current pace (min/km) and maybe coach"""
        if not self.has_goal or current_pace <= 0:
            self.status = PaceStatus.ON_PACE
            return self.status

        pace_difference = (current_pace - self.target_pace) / self.target_pace
        self.status = classify_pace(pace_difference)
        self._coach(pace_difference, elapsed_time)
        return self.status

    def _coach(self, pace_difference: float, elapsed_time: float):
        if elapsed_time <= CONFIG["pace_grace_period"]:
            return
        now = self.clock()
        if (self.last_coaching_time is not None
                and now - self.last_coaching_time < CONFIG["min_time_between_coaching"]):
            return
        if abs(pace_difference) <= CONFIG["pace_tolerance"]:
            return

        message = COACHING_MESSAGES.get(classify_pace(pace_difference))
        if message:
            self.logger.log(f"AUDIO: {message}", {"pace_difference": round(pace_difference, 3)})
            self.voice.speak(message, interrupt=False)
            self.last_coaching_time = now
