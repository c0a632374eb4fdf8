"""Configuration settings for Runroute."""

CONFIG = {
    "gps_poll_interval": 3,  # seconds
    "default_run_distance": 5000,  # meters (5km default)
    "min_run_distance": 1000,  # meters
    "max_run_distance": 50000,  # meters
    # Waypoint ring generation
    "meters_per_degree": 111320,  # meters per degree of latitude at the equator
    "min_waypoint_count": 4,
    "max_waypoint_count": 12,  # bounds the number of directions requests per route
    "min_edit_waypoint_count": 3,  # a ring never drops below this when edited
    "meters_per_waypoint": 2000,  # one extra waypoint per 2km of target distance
    "varied_angle_jitter": 0.3,  # fraction of the angular step (Varied strategy only)
    "route_update_interval": 30,  # seconds between periodic route refreshes
    # Route resolution
    "directions_timeout": 15,  # seconds per directions request
    "segment_interpolation_points": 6,  # straight-line points for a failed segment
    "fallback_interpolation_points": 10,  # per segment when a whole route falls back
    "max_failed_segment_ratio": 1 / 3,  # abort when more segments than this fail
    "max_fallback_route_distance": 15000,  # meters - "too long" cutoff when nothing resolved
    # Route analysis
    "turn_sample_stride": 20,  # route points between turn samples
    "elevation_sample_stride": 50,  # route points between elevation samples
    "min_turn_angle": 30,  # degrees - smaller changes are not counted as turns
    "sharp_turn_angle": 90,  # degrees
    "base_pace_seconds_per_km": 360,  # 6:00 min/km
    "seconds_per_meter_climb": 0.5,
    "seconds_per_turn": 2,
    "default_road_percentage": 70,  # used when no step data is available
    "default_unknown_percentage": 30,
    # Difficulty scoring: (threshold, points), checked highest first
    "difficulty_elevation_points": [(200, 3), (100, 2), (50, 1)],  # meters of gain
    "difficulty_grade_points": [(15, 3), (10, 2), (5, 1)],  # percent max grade
    "difficulty_turn_points": [(20, 2), (10, 1)],  # counted turns
    # Navigation
    "waypoint_reached_threshold": 20,  # meters - advance to the next waypoint
    "instruction_distance": 50,  # meters - give the turn instruction
    "instruction_repeat_threshold": 30,  # meters closer before repeating it
    "straight_angle_threshold": 20,  # degrees
    "slight_turn_threshold": 45,  # degrees
    "sharp_turn_threshold": 120,  # degrees
    "uturn_angle_threshold": 30,  # degrees from 180
    # Pace coaching
    "pace_slight_threshold": 0.05,  # fraction off target pace - "slightly" status
    "pace_moderate_threshold": 0.15,  # fraction off target pace - "too" status
    "pace_tolerance": 0.10,  # fraction off target pace before coaching speaks
    "pace_grace_period": 120,  # seconds into the run before any coaching
    "min_time_between_coaching": 120,  # seconds
    # Progress announcements
    "announcement_interval": 500,  # meters between distance reports
    "split_distance": 1000,  # meters per announced split
    # Location filtering
    "max_realistic_jump": 100,  # meters - larger jumps are GPS errors
    "location_match_tolerance": 1.0,  # meters - treat closer fixes as unchanged
    "log_interval": 10,  # seconds between state log entries
}

# Route strategies: waypoint-count multiplier and radius variation fraction
STRATEGY_SETTINGS = {
    "Balanced": {
        "waypoint_multiplier": 1.0,
        "radius_variation": 0.2,
        "description": "Even loop with moderate variety",
    },
    "Scenic": {
        "waypoint_multiplier": 1.5,
        "radius_variation": 0.3,
        "description": "More waypoints to wander through the area",
    },
    "Direct": {
        "waypoint_multiplier": 0.75,
        "radius_variation": 0.1,
        "description": "Fewer turns and a rounder loop",
    },
    "Varied": {
        "waypoint_multiplier": 1.25,
        "radius_variation": 0.35,
        "description": "Irregular shape with shifting directions",
    },
}
