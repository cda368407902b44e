"""Workout-history statistics: streaks, recency weighting, activity tiers.

All functions are pure; "now" is always passed in so results are
reproducible. History is loaded into a pandas frame once per call, with
unparseable dates coerced to ``NaT`` so they never match a date window
and always break a streak.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from evolution_engine.models.enums import (
    ACTIVITY_TIERS,
    BASE_WORKOUT_WEIGHT,
    EXTENDED_WINDOW_DAYS,
    EXTENDED_WORKOUT_WEIGHT,
    NO_DISCOUNT_MULTIPLIER,
    RECENT_WINDOW_DAYS,
    RECENT_WORKOUT_WEIGHT,
    STREAK_LOOKBACK_DAYS,
    ActivityLevel,
)
from evolution_engine.models.workout import WorkoutRecord

ActivityTier = tuple[ActivityLevel, int, int, float, float]


@dataclass(frozen=True)
class ActivitySnapshot:
    """Recent activity summary used to pick an activity tier."""

    workouts_last_7_days: int
    minutes_last_7_days: float
    streak_days: int


def local_zone() -> tzinfo | None:
    """The machine's current local time zone."""
    return datetime.now().astimezone().tzinfo


def parse_workout_date(value: Any, tz: tzinfo | None = None) -> pd.Timestamp | None:
    """Parse a stored workout date; ``None`` when missing or invalid.

    Offset-qualified timestamps (``...Z``, ``...-07:00``) are converted to
    wall-clock time in *tz* (the local zone when ``None``) and made naive,
    so calendar days are the user's days, not UTC days. Naive timestamps
    are taken as already local.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, (str, date, datetime, pd.Timestamp)):
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(tz or local_zone()).tz_localize(None)
    return ts


def workouts_frame(
    workouts: Iterable[WorkoutRecord], tz: tzinfo | None = None
) -> pd.DataFrame:
    """Load workouts into a frame with columns timestamp, completed, duration_min."""
    timestamps: list[pd.Timestamp | None] = []
    completed: list[bool] = []
    durations: list[float] = []
    for workout in workouts:
        timestamps.append(parse_workout_date(workout.date, tz))
        completed.append(bool(workout.completed))
        durations.append(float(workout.duration_min or 0.0))

    return pd.DataFrame(
        {
            "timestamp": pd.Series(timestamps, dtype="datetime64[ns]"),
            "completed": pd.Series(completed, dtype=bool),
            "duration_min": pd.Series(durations, dtype=np.float64),
        }
    )


def current_streak(
    workouts: Sequence[WorkoutRecord],
    today: date,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
    tz: tzinfo | None = None,
) -> int:
    """Count consecutive days, ending today, with at least one completed workout.

    Walks backward from *today* for at most *lookback_days* days. A day
    without a completed, validly-dated workout ends the streak. Days are
    calendar days in *tz* (the local zone when ``None``).
    """
    frame = workouts_frame(workouts, tz)
    done = frame.loc[frame["completed"] & frame["timestamp"].notna(), "timestamp"]
    workout_days = set(done.dt.normalize().dt.date)

    streak = 0
    for offset in range(lookback_days):
        day = date.fromordinal(today.toordinal() - offset)
        if day not in workout_days:
            break
        streak += 1
    return streak


def streak_as_of(
    workouts: Sequence[WorkoutRecord],
    now: datetime,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> int:
    """Streak ending on *now*'s calendar day, in *now*'s zone when it has one."""
    tz, local_now = _split_zone(now)
    return current_streak(workouts, local_now.date(), lookback_days, tz)


def recent_activity(
    workouts: Sequence[WorkoutRecord],
    now: datetime,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> ActivitySnapshot:
    """Completed workouts and minutes in the last 7 days, plus the live streak."""
    tz, local_now = _split_zone(now)
    frame = workouts_frame(workouts, tz)
    window_start = local_now - pd.Timedelta(days=RECENT_WINDOW_DAYS)
    recent = frame[frame["completed"] & (frame["timestamp"] >= window_start)]
    return ActivitySnapshot(
        workouts_last_7_days=int(len(recent)),
        minutes_last_7_days=float(recent["duration_min"].sum()),
        streak_days=streak_as_of(workouts, now, lookback_days),
    )


def select_tier(
    snapshot: ActivitySnapshot,
    tiers: Sequence[ActivityTier] = ACTIVITY_TIERS,
) -> tuple[ActivityLevel, float]:
    """Return the first (most generous) tier whose thresholds are all met."""
    for level, min_workouts, min_streak, min_minutes, multiplier in tiers:
        if (
            snapshot.workouts_last_7_days >= min_workouts
            and snapshot.streak_days >= min_streak
            and snapshot.minutes_last_7_days >= min_minutes
        ):
            return level, multiplier
    return ActivityLevel.INACTIVE, NO_DISCOUNT_MULTIPLIER


def compute_activity_multiplier(
    workouts: Sequence[WorkoutRecord],
    now: datetime,
    tiers: Sequence[ActivityTier] = ACTIVITY_TIERS,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> float:
    """Requirement discount factor in {0.4, 0.6, 0.8, 1.0} for the default tiers."""
    _, multiplier = select_tier(recent_activity(workouts, now, lookback_days), tiers)
    return multiplier


def classify_activity(
    workouts: Sequence[WorkoutRecord],
    now: datetime,
    tiers: Sequence[ActivityTier] = ACTIVITY_TIERS,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> ActivityLevel:
    level, _ = select_tier(recent_activity(workouts, now, lookback_days), tiers)
    return level


def weighted_completed_count(
    workouts: Sequence[WorkoutRecord],
    now: datetime,
    weights: tuple[float, float, float] = (
        RECENT_WORKOUT_WEIGHT,
        EXTENDED_WORKOUT_WEIGHT,
        BASE_WORKOUT_WEIGHT,
    ),
) -> float:
    """Recency-weighted count of completed workouts.

    Last 7 days count ``weights[0]``, last 14 days ``weights[1]``, anything
    older (or undated) ``weights[2]``.
    """
    tz, current = _split_zone(now)
    frame = workouts_frame(workouts, tz)
    done = frame.loc[frame["completed"], "timestamp"]
    if done.empty:
        return 0.0

    recent_weight, extended_weight, base_weight = weights
    per_workout = np.select(
        [
            (done >= current - pd.Timedelta(days=RECENT_WINDOW_DAYS)).to_numpy(),
            (done >= current - pd.Timedelta(days=EXTENDED_WINDOW_DAYS)).to_numpy(),
        ],
        [recent_weight, extended_weight],
        default=base_weight,
    )
    return float(per_workout.sum())


def _split_zone(now: datetime) -> tuple[tzinfo | None, pd.Timestamp]:
    """Zone of *now* (``None`` for naive) and *now* as naive wall-clock time."""
    ts = pd.Timestamp(now)
    if ts.tzinfo is None:
        return None, ts
    return ts.tzinfo, ts.tz_localize(None)
