"""Enumerations and tuning constants for the evolution engine.

The weights and activity thresholds were chosen empirically by the fitness
tracker and have no published derivation. They are kept here, in one
place, so they can be tuned without touching the algorithms.
"""

from enum import Enum, IntEnum, auto


class TriggerType(str, Enum):
    """Originating event class recorded on an EvolutionEvent."""

    WORKOUT = "workout"
    STREAK = "streak"
    MILESTONE = "milestone"
    TEST_MODE = "test_mode"
    INSTANT_WORKOUT = "instant_workout"
    INSTANT_STREAK = "instant_streak"
    INSTANT_MILESTONE = "instant_milestone"


class ActivityLevel(str, Enum):
    """Recent-activity classification driving the requirement discount."""

    VERY_ACTIVE = "very_active"
    ACTIVE = "active"
    MODERATE = "moderate"
    INACTIVE = "inactive"


class RewardKind(str, Enum):
    """Why a creature reward was granted."""

    WORKOUT = "workout"
    STREAK = "streak"
    MILESTONE = "milestone"


class TransitionState(IntEnum):
    """Lifecycle of an owned creature instance inside the transition engine."""

    STABLE = auto()
    ELIGIBLE = auto()
    TRANSITIONING = auto()
    EVOLVED = auto()


# ---------------------------------------------------------------------------
# Cache lifetimes
# ---------------------------------------------------------------------------
CHAIN_CACHE_TTL_S = 30 * 60.0
REQUIREMENT_CACHE_TTL_S = 5.0
CREATURE_DETAIL_TTL_S = 24 * 60 * 60.0

# Evolved instance ids remembered so stale copies cannot evolve twice
MAX_TRACKED_TRANSITIONS = 1024

# ---------------------------------------------------------------------------
# Requirement calculation
# ---------------------------------------------------------------------------
FINAL_FORM_REQUIRED_WORKOUTS = 15
MIN_BASE_REQUIREMENT = 3
MAX_BASE_REQUIREMENT = 20
BASE_REQUIREMENT_OFFSET = 5.0
BASE_REQUIREMENT_PER_WORKOUT = 0.15
CHAIN_DEPTH_FACTOR = 0.3
MIN_COMPLEXITY_MULTIPLIER = 1.0
MAX_COMPLEXITY_MULTIPLIER = 1.5
STREAK_REQUIREMENT_FACTOR = 0.3
MIN_STREAK_REQUIREMENT = 2
MAX_STREAK_REQUIREMENT = 4
MAX_REQUIRED_TYPES = 2
MOST_COMMON_TYPES_LIMIT = 3
DEFAULT_REQUIRED_TYPES = ("normal", "fighting")
DEFAULT_SINGLE_TYPE = "normal"
UNKNOWN_TYPE = "unknown"

# ---------------------------------------------------------------------------
# Workout history weighting
# ---------------------------------------------------------------------------
STREAK_LOOKBACK_DAYS = 30
RECENT_WINDOW_DAYS = 7
EXTENDED_WINDOW_DAYS = 14
RECENT_WORKOUT_WEIGHT = 1.5
EXTENDED_WORKOUT_WEIGHT = 1.2
BASE_WORKOUT_WEIGHT = 1.0

# Activity tiers, most generous first:
# (level, min workouts in 7 days, min streak days, min minutes in 7 days, multiplier)
ACTIVITY_TIERS = (
    (ActivityLevel.VERY_ACTIVE, 5, 7, 150.0, 0.4),
    (ActivityLevel.ACTIVE, 4, 5, 120.0, 0.6),
    (ActivityLevel.MODERATE, 3, 3, 90.0, 0.8),
)
NO_DISCOUNT_MULTIPLIER = 1.0

# ---------------------------------------------------------------------------
# Advisory condition thresholds
# ---------------------------------------------------------------------------
LOW_VOLUME_WORKOUTS = 10
HIGH_VOLUME_WORKOUTS = 50
VARIETY_CATEGORY_COUNT = 3
LEGENDARY_NAME_MARKERS = ("dragon", "legend")
