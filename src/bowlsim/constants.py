from __future__ import annotations

# Game shape
FRAME_COUNT = 10
TENTH_FRAME = 9          # 0-based index of the final frame
PIN_COUNT = 10
MAX_BALLS = 2
MAX_BALLS_TENTH = 3

# Lane geometry (meters)
LANE_LENGTH = 12.0
LANE_WIDTH = 1.05
PIN_HEIGHT = 0.381
PIN_SPACING = 0.25
BALL_RADIUS = 0.1085
BALL_MASS = 7.26

# Pin classification
FALLEN_UP_Y = 0.7        # cos of ~45 deg tilt
FALLEN_HEIGHT = 0.1
REMOVED_X = 50.0
REMOVED_POSITION = (100.0, -10.0, 100.0)

# Settlement polling (ms / m / m per s)
SETTLE_START_DELAY_MS = 1500
FAST_POLL_MS = 150
SLOW_POLL_MS = 300
SLOW_SPEED = 0.5
REST_SPEED = 0.05
REST_SAMPLES = 3
FLOOR_Y = -1.0
BOUNDS_X = 5.0
BOUNDS_MARGIN_Z = 5.0
GUTTER_MARGIN_Z = 1.0
RETURN_MARGIN_Z = 0.5
SCORING_MARGIN_Z = 2.0

# Throw mapping
MIN_FORCE = 5.0
MAX_FORCE = 70.0
LATERAL_GAIN = 0.4
SIDE_SPIN_GAIN = 0.2
ROLL_GAIN = 0.15

# Message timing
HIGHLIGHT_MS = 3000
DEFAULT_MS = 2000
