"""Turn-by-turn voice guidance along a fixed waypoint sequence."""

from typing import Optional, Sequence

from .config import CONFIG
from .geo import distance_between, format_distance, location_bearing, turn_angle, turn_direction
from .logger import Logger, quiet_logger
from .models import Location, NavigationState

NAVIGATION_STARTED = "Navigation started. Follow the route."
DESTINATION_REACHED = "You have reached your destination."


class Navigator:
    """Navigation state machine: IDLE -> NAVIGATING -> ARRIVED -> (stop) -> IDLE.

    Driven by location updates. `current_waypoint_index` only ever moves
    forward one step at a time and ends at len(waypoints) once the last
    waypoint is reached; the arrival message is spoken exactly once.
    """

    def __init__(self, voice, logger: Optional[Logger] = None):
        self.voice = voice
        self.logger = logger or quiet_logger()
        self.state = NavigationState.IDLE
        self.waypoints: list[Location] = []
        self.current_waypoint_index = 0
        self.distance_to_next_waypoint = 0.0
        self.last_instruction: Optional[str] = None
        self._instruction_given = False
        self._last_instruction_distance = 0.0

    @property
    def is_navigating(self) -> bool:
        return self.state is NavigationState.NAVIGATING

    @property
    def has_arrived(self) -> bool:
        return self.state is NavigationState.ARRIVED

    def start_navigation(self, waypoints: Sequence[Location]) -> bool:
        """Begin guidance. Needs at least two waypoints."""
        if len(waypoints) < 2:
            self.logger.log("Navigation not started", {"waypoints": len(waypoints)})
            return False

        self.waypoints = list(waypoints)
        self.current_waypoint_index = 0
        self.distance_to_next_waypoint = 0.0
        self._instruction_given = False
        self._last_instruction_distance = 0.0
        self.state = NavigationState.NAVIGATING
        self.logger.log("Navigation started", {"waypoints": len(self.waypoints)})
        self._speak(NAVIGATION_STARTED)
        return True

    def stop_navigation(self):
        """Return to IDLE, silencing any speech"""
        self.voice.stop()
        self.state = NavigationState.IDLE
        self.waypoints = []
        self.current_waypoint_index = 0
        self.distance_to_next_waypoint = 0.0
        self.last_instruction = None
        self._instruction_given = False
        self._last_instruction_distance = 0.0
        self.logger.log("Navigation stopped")

    def update_location(self, location: Location):
        """Advance guidance for a new location fix"""
        if not self.is_navigating or not self.waypoints:
            return
        if not location.is_valid():
            return
        if self.current_waypoint_index >= len(self.waypoints):
            return

        target = self.waypoints[self.current_waypoint_index]
        distance = distance_between(location, target)
        self.distance_to_next_waypoint = distance

        if distance < CONFIG["waypoint_reached_threshold"]:
            self._advance(location)
        elif distance < CONFIG["instruction_distance"]:
            closer_by = self._last_instruction_distance - distance
            if not self._instruction_given or closer_by > CONFIG["instruction_repeat_threshold"]:
                self._give_instruction(location)
                self._instruction_given = True
                self._last_instruction_distance = distance

    def _advance(self, location: Location):
        self.current_waypoint_index += 1
        self._instruction_given = False
        self.logger.log("Waypoint reached", {
            "index": self.current_waypoint_index - 1,
            "remaining": len(self.waypoints) - self.current_waypoint_index,
        })

        if self.current_waypoint_index < len(self.waypoints):
            self._give_instruction(location)
        else:
            self.state = NavigationState.ARRIVED
            self.logger.log("Destination reached")
            self._speak(DESTINATION_REACHED)

    def instruction_for(self, location: Location) -> Optional[str]:
        """Spoken instruction for the waypoint currently being approached"""
        index = self.current_waypoint_index
        if index >= len(self.waypoints):
            return None

        target = self.waypoints[index]
        distance_text = format_distance(distance_between(location, target))

        if index == len(self.waypoints) - 1:
            return f"In {distance_text}, you will reach your destination."

        following = self.waypoints[index + 1]
        angle = turn_angle(location_bearing(location, target), location_bearing(target, following))
        return f"In {distance_text}, {turn_direction(angle)}."

    def _give_instruction(self, location: Location):
        instruction = self.instruction_for(location)
        if instruction:
            self._speak(instruction)

    def _speak(self, text: str):
        self.last_instruction = text
        self.logger.log(f"AUDIO: {text}")
        self.voice.speak(text)
