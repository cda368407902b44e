"""Evolution events — the append-only evolution history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from evolution_engine.models.enums import ActivityLevel, TriggerType
from evolution_engine.models.instance import OwnedCreatureInstance


@dataclass(frozen=True)
class TriggerContext:
    """Flat description of what prompted an evolution check.

    Every field is optional; dispatchers fill in only what the triggering
    event carried.
    """

    workout_id: str | None = None
    milestone_id: str | None = None
    streak_days: int | None = None


@dataclass(frozen=True)
class WorkoutContext:
    """Workout summary captured at the moment of evolution."""

    workout_type: str = "mixed"
    workout_pokemon_types: str = "mixed"
    workout_count: int = 0
    activity_level: ActivityLevel | None = None
    trigger_context: TriggerContext | None = None


@dataclass(frozen=True)
class EvolutionEvent:
    """Immutable record of one evolution.

    ``from_creature`` is the snapshot taken before the transition and is
    never updated afterwards, even when the reward that owned it is
    re-pointed at the evolved creature.
    """

    id: str
    from_creature: OwnedCreatureInstance
    to_creature: OwnedCreatureInstance
    trigger_type: TriggerType
    trigger_reason: str
    timestamp: datetime
    workout_context: WorkoutContext
