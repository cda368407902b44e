"""Creature rewards granted for workouts, streaks and milestones."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from evolution_engine.models.creature import Creature
from evolution_engine.models.enums import RewardKind


@dataclass(frozen=True)
class CreatureReward:
    """A reward record. ``creature`` is re-pointed when the creature evolves."""

    id: str
    creature: Creature
    kind: RewardKind
    reason: str
    timestamp: datetime
    seen: bool = False
    workout_id: str | None = None
