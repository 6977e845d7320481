"""Centralized constants for poisson-party.

This module consolidates input bounds, display tuning and the turnout
thresholds used across the session, status and TUI modules.
"""

# =============================================================================
# Party Inputs
# =============================================================================

#: Default number of guests the host expects in total
DEFAULT_EXPECTED_TOTAL: int = 20

#: Smallest and largest accepted expected guest count
MIN_EXPECTED_TOTAL: int = 0
MAX_EXPECTED_TOTAL: int = 1000

#: Largest accepted number of guests present
MAX_ARRIVED_COUNT: int = 10000

#: Default party duration in minutes (3 hours)
DEFAULT_PARTY_DURATION: float = 180.0

#: Party duration bounds in minutes
MIN_PARTY_DURATION: float = 60.0
MAX_PARTY_DURATION: float = 360.0

#: Party durations are configured in steps of this many minutes
PARTY_DURATION_STEP: float = 30.0

# =============================================================================
# Refresh Rate Configuration
# =============================================================================

#: Minimum refresh rate in seconds (fastest)
MIN_REFRESH_RATE: float = 0.5

#: Maximum refresh rate in seconds (slowest)
MAX_REFRESH_RATE: float = 10.0

#: Default refresh rate in seconds
DEFAULT_REFRESH_RATE: float = 1.0

#: Party minutes that pass per wall-clock minute
DEFAULT_TIME_SCALE: float = 1.0

# =============================================================================
# Turnout Status
# =============================================================================

#: Minutes after the start before the turnout ratio is judged
WARMUP_MINUTES: float = 15.0

#: Upper bounds of projected/expected turnout ratio for each mood level
SMALL_TURNOUT_RATIO: float = 0.5
TRICKLING_TURNOUT_RATIO: float = 0.75
PICKING_UP_TURNOUT_RATIO: float = 0.9
ON_TARGET_TURNOUT_RATIO: float = 1.1
POPULAR_TURNOUT_RATIO: float = 1.5
