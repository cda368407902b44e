"""Data models for the evolution engine."""

from evolution_engine.models.creature import Creature, EvolutionRequirement, EvolutionStage
from evolution_engine.models.enums import (
    ActivityLevel,
    RewardKind,
    TransitionState,
    TriggerType,
)
from evolution_engine.models.event import EvolutionEvent, TriggerContext, WorkoutContext
from evolution_engine.models.instance import EvolutionData, OwnedCreatureInstance
from evolution_engine.models.progress import EvolutionCondition, EvolutionProgress
from evolution_engine.models.reward import CreatureReward
from evolution_engine.models.triggers import (
    MilestoneTrigger,
    StreakTrigger,
    Trigger,
    WorkoutTrigger,
)
from evolution_engine.models.workout import ExerciseEntry, WorkoutRecord

__all__ = [
    "ActivityLevel",
    "Creature",
    "CreatureReward",
    "EvolutionCondition",
    "EvolutionData",
    "EvolutionEvent",
    "EvolutionProgress",
    "EvolutionRequirement",
    "EvolutionStage",
    "ExerciseEntry",
    "MilestoneTrigger",
    "OwnedCreatureInstance",
    "RewardKind",
    "StreakTrigger",
    "TransitionState",
    "Trigger",
    "TriggerContext",
    "TriggerType",
    "WorkoutContext",
    "WorkoutRecord",
    "WorkoutTrigger",
]
