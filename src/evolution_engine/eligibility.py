"""EligibilityEvaluator — answers "can this creature evolve right now?"."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence

from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.math.activity import streak_as_of
from evolution_engine.models.instance import OwnedCreatureInstance
from evolution_engine.models.progress import EvolutionCondition
from evolution_engine.models.workout import WorkoutRecord
from evolution_engine.requirements import RequirementCalculator


@dataclass(frozen=True)
class EligibilityReport:
    """Breakdown of one eligibility check, for display and debugging."""

    conditions: EvolutionCondition | None
    effective_workouts: int = 0
    streak_days: int = 0
    has_enough_workouts: bool = False
    has_required_types: bool = False
    has_streak: bool = False
    missing_types: tuple[str, ...] = ()

    @property
    def eligible(self) -> bool:
        return self.has_enough_workouts and self.has_required_types and self.has_streak


NOT_EVALUATED = EligibilityReport(conditions=None)


class EligibilityEvaluator:
    """Combines live requirements with live progress. Pure and idempotent."""

    def __init__(
        self,
        calculator: RequirementCalculator,
        config: EvolutionEngineConfig | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._calculator = calculator
        self._config = config or EvolutionEngineConfig()
        self._now = now

    def can_evolve(self, instance: OwnedCreatureInstance, workouts: Sequence[WorkoutRecord]) -> bool:
        return self.explain(instance, workouts).eligible

    def explain(
        self, instance: OwnedCreatureInstance, workouts: Sequence[WorkoutRecord]
    ) -> EligibilityReport:
        """Evaluate every requirement and report each outcome."""
        data = instance.evolution_data
        progress = instance.evolution_progress
        if data is None or progress is None:
            return NOT_EVALUATED

        conditions = self._calculator.calculate(data.chain, instance.id, workouts)

        weighted = progress.workouts_completed_weighted
        effective = math.floor(weighted if weighted is not None else progress.workouts_completed)

        observed = {t.lower() for t in progress.workout_types}
        missing = tuple(t for t in conditions.required_types if t.lower() not in observed)

        streak = streak_as_of(workouts, self._now(), self._config.streak_lookback_days)
        needs_streak = conditions.min_workout_streak

        return EligibilityReport(
            conditions=conditions,
            effective_workouts=effective,
            streak_days=streak,
            has_enough_workouts=effective >= conditions.required_workouts,
            has_required_types=not missing,
            has_streak=not needs_streak or streak >= needs_streak,
            missing_types=missing,
        )
