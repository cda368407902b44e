"""ProgressTracker — derives evolution progress for owned creatures.

Progress is never trusted from storage: every call recomputes it from the
workout history so persisted snapshots cannot drift.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Callable, Iterable, Sequence

from evolution_engine.chain_cache import ChainCache
from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.eligibility import EligibilityEvaluator
from evolution_engine.math.activity import compute_activity_multiplier, weighted_completed_count
from evolution_engine.math.chain import next_evolutions
from evolution_engine.math.type_mapping import observed_types
from evolution_engine.models.creature import Creature
from evolution_engine.models.instance import EvolutionData, OwnedCreatureInstance
from evolution_engine.models.progress import EvolutionProgress
from evolution_engine.models.workout import WorkoutRecord
from evolution_engine.requirements import RequirementCalculator

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Recomputes progress and builds owned instances from chain data."""

    def __init__(
        self,
        chain_cache: ChainCache,
        calculator: RequirementCalculator,
        evaluator: EligibilityEvaluator,
        config: EvolutionEngineConfig | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._chains = chain_cache
        self._calculator = calculator
        self._evaluator = evaluator
        self._config = config or EvolutionEngineConfig()
        self._now = now

    def compute_progress(
        self, instance: OwnedCreatureInstance, workouts: Sequence[WorkoutRecord]
    ) -> EvolutionProgress:
        chain = instance.evolution_data.chain if instance.evolution_data else None
        conditions = self._calculator.calculate(chain, instance.id, workouts)
        now = self._now()
        completed = [w for w in workouts if w.completed]
        previous = instance.evolution_progress

        return EvolutionProgress(
            workouts_completed=len(completed),
            workouts_completed_weighted=weighted_completed_count(
                workouts, now, self._config.workout_weights
            ),
            workout_types=observed_types(workouts),
            required_workouts=conditions.required_workouts,
            required_types=conditions.required_types,
            min_workout_streak=conditions.min_workout_streak,
            special_conditions=conditions.special_conditions,
            activity_multiplier=compute_activity_multiplier(
                workouts,
                now,
                tiers=self._config.activity_tiers,
                lookback_days=self._config.streak_lookback_days,
            ),
            last_evolution_check=now,
            current_level=previous.current_level if previous else 1,
        )

    def refresh(
        self, instance: OwnedCreatureInstance, workouts: Sequence[WorkoutRecord]
    ) -> OwnedCreatureInstance:
        """Return *instance* with freshly computed progress and ``can_evolve``."""
        updated = dataclasses.replace(
            instance, evolution_progress=self.compute_progress(instance, workouts)
        )
        return dataclasses.replace(
            updated, can_evolve=self._evaluator.can_evolve(updated, workouts)
        )

    def load_instance(
        self,
        creature: Creature,
        workouts: Sequence[WorkoutRecord],
        reward_id: str | None = None,
    ) -> OwnedCreatureInstance:
        """Attach chain data and progress to a freshly collected creature.

        Degrades to a bare, non-evolvable instance if anything goes wrong.
        """
        try:
            chain = self._chains.get_chain(creature.id)
            data = EvolutionData(
                current_form=creature,
                chain=chain,
                next_evolutions=next_evolutions(chain, creature.id),
            )
            instance = OwnedCreatureInstance(
                creature=creature, evolution_data=data, reward_id=reward_id
            )
            return self.refresh(instance, workouts)
        except Exception:
            logger.exception("Failed to load evolution data for %s", creature.name)
            return OwnedCreatureInstance(creature=creature, reward_id=reward_id)

    def find_candidates(
        self, creatures: Iterable[Creature], workouts: Sequence[WorkoutRecord]
    ) -> list[OwnedCreatureInstance]:
        """Load every creature and keep the ones that can evolve now."""
        candidates = []
        for creature in creatures:
            instance = self.load_instance(creature, workouts)
            if instance.can_evolve:
                candidates.append(instance)
        return candidates
