"""Evolution requirements and per-instance progress snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class EvolutionCondition:
    """Requirements a creature must meet before it can evolve.

    ``special_conditions`` are advisory strings for display only; they
    never gate eligibility.
    """

    required_workouts: int
    required_types: tuple[str, ...] = field(default_factory=tuple)
    min_workout_streak: int | None = None
    special_conditions: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class EvolutionProgress:
    """Progress of one owned creature towards its next evolution.

    Always derived fresh from workout history; never treated as
    authoritative when persisted.
    """

    workouts_completed: int = 0
    workouts_completed_weighted: float | None = None
    workout_types: frozenset[str] = field(default_factory=frozenset)
    required_workouts: int = 0
    required_types: tuple[str, ...] = field(default_factory=tuple)
    min_workout_streak: int | None = None
    special_conditions: tuple[str, ...] = field(default_factory=tuple)
    activity_multiplier: float = 1.0
    last_evolution_check: datetime | None = None
    current_level: int = 1
