"""EvolutionTransitionEngine — performs evolutions, at most once per instance.

Each owned instance moves through ``STABLE -> ELIGIBLE -> TRANSITIONING ->
EVOLVED``. ``EVOLVED`` is terminal for that instance; the evolved creature
is a new instance that starts again at ``STABLE``. Every refusal returns
``None`` without touching history, rewards or the listener, so callers can
call :meth:`EvolutionTransitionEngine.evolve` speculatively.

In diagnostic mode (``allow_forced_evolution``) the eligibility check is
skipped, a missing chain target falls back to ``id + 1`` and a failed
fetch yields a placeholder creature.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Callable, Sequence

from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.eligibility import EligibilityEvaluator
from evolution_engine.interfaces import (
    CreatureDataSource,
    EvolutionListener,
    HistoryStore,
    WorkoutStore,
)
from evolution_engine.math.activity import classify_activity
from evolution_engine.math.chain import next_evolution_for, next_evolutions
from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.models.enums import (
    MAX_TRACKED_TRANSITIONS,
    ActivityLevel,
    TransitionState,
    TriggerType,
)
from evolution_engine.models.event import EvolutionEvent, TriggerContext, WorkoutContext
from evolution_engine.models.instance import EvolutionData, OwnedCreatureInstance
from evolution_engine.models.progress import EvolutionProgress
from evolution_engine.models.workout import WorkoutRecord
from evolution_engine.rewards import RewardBook

logger = logging.getLogger(__name__)

PLACEHOLDER_SPRITE = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/0.png"
PLACEHOLDER_ANIMATED_SPRITE = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/showdown/0.gif"
)
FORCED_REASON = "Test mode evolution visualization"


class EvolutionTransitionEngine:
    """Resolves the target, builds the evolved instance and records the event."""

    def __init__(
        self,
        source: CreatureDataSource,
        evaluator: EligibilityEvaluator,
        workout_store: WorkoutStore,
        history_store: HistoryStore,
        rewards: RewardBook | None = None,
        listener: EvolutionListener | None = None,
        config: EvolutionEngineConfig | None = None,
        now: Callable[[], datetime] = datetime.now,
        max_tracked: int = MAX_TRACKED_TRANSITIONS,
    ) -> None:
        self._source = source
        self._evaluator = evaluator
        self._workouts = workout_store
        self._history = history_store
        self._rewards = rewards
        self._listener = listener
        self._config = config or EvolutionEngineConfig()
        self._now = now
        self._states: OrderedDict[str, TransitionState] = OrderedDict()
        self._max_tracked = max(1, max_tracked)

    @property
    def forced(self) -> bool:
        return self._config.allow_forced_evolution

    def state_of(self, instance: OwnedCreatureInstance) -> TransitionState:
        state = self._states.get(instance.instance_id)
        if state is not None:
            return state
        return TransitionState.ELIGIBLE if instance.can_evolve else TransitionState.STABLE

    def evolve(
        self,
        instance: OwnedCreatureInstance,
        trigger_type: TriggerType | None = None,
        trigger_reason: str | None = None,
        trigger_context: TriggerContext | None = None,
        activity_level: ActivityLevel | None = None,
        workouts: Sequence[WorkoutRecord] | None = None,
    ) -> OwnedCreatureInstance | None:
        """Evolve *instance* if allowed. Returns the new instance or ``None``."""
        state = self._states.get(instance.instance_id)
        if state is TransitionState.EVOLVED:
            logger.info("%s (%s) has already evolved", instance.name, instance.instance_id)
            return None
        if state is TransitionState.TRANSITIONING:
            logger.info("%s is already mid-transition", instance.name)
            return None

        target = self.resolve_target(instance)
        if target is None:
            logger.info("No next evolution for %s", instance.name)
            return None

        if workouts is None:
            workouts = self._workouts.get_completed_workouts()

        if not self.forced and not self._evaluator.can_evolve(instance, workouts):
            logger.debug("%s is not eligible to evolve", instance.name)
            return None

        self._states[instance.instance_id] = TransitionState.TRANSITIONING
        try:
            creature, fetched = self._fetch_target(target)
            if creature is None or (not self.forced and creature.id == instance.id):
                self._states.pop(instance.instance_id, None)
                return None

            if fetched:
                kind = trigger_type or self._default_trigger_type()
                reason = trigger_reason or self._default_reason(instance)
            else:
                kind = trigger_type or TriggerType.TEST_MODE
                reason = trigger_reason or f"{FORCED_REASON} (fallback)"
            if activity_level is None:
                activity_level = classify_activity(
                    workouts,
                    self._now(),
                    tiers=self._config.activity_tiers,
                    lookback_days=self._config.streak_lookback_days,
                )

            evolved = self._build_instance(instance, creature)
            event = EvolutionEvent(
                id=uuid.uuid4().hex,
                from_creature=instance,
                to_creature=evolved,
                trigger_type=kind,
                trigger_reason=reason,
                timestamp=self._now(),
                workout_context=self._workout_context(instance, activity_level, trigger_context),
            )
        except Exception:
            self._states.pop(instance.instance_id, None)
            raise

        self._mark_evolved(instance.instance_id)
        logger.info(
            "Evolved %s (#%d) into %s (#%d) [%s]",
            instance.name,
            instance.id,
            evolved.name,
            evolved.id,
            kind.value,
        )

        try:
            self._history.append(event)
        except Exception as exc:
            logger.error("Failed to record evolution history: %s", exc)
        if self._rewards is not None and instance.reward_id is not None:
            self._rewards.replace_creature(instance.reward_id, evolved.creature)
        if self._listener is not None:
            self._listener(instance, evolved, reason)
        return evolved

    def _mark_evolved(self, instance_id: str) -> None:
        self._states[instance_id] = TransitionState.EVOLVED
        self._states.move_to_end(instance_id)
        while len(self._states) > self._max_tracked:
            oldest, state = next(iter(self._states.items()))
            if state is not TransitionState.EVOLVED:
                break
            del self._states[oldest]

    def resolve_target(self, instance: OwnedCreatureInstance) -> Creature | None:
        """Pick the creature *instance* would evolve into.

        Precomputed next evolutions first, then a search of the whole
        chain, then (diagnostic mode only) ``id + 1``.
        """
        data = instance.evolution_data
        if data is not None:
            for candidate in data.next_evolutions:
                if candidate.id != instance.id:
                    return candidate
                logger.warning("Ignoring self-evolution candidate for %s", instance.name)

            stage = next_evolution_for(data.chain, instance.id)
            if stage is not None:
                return Creature(id=stage.id, name=stage.name)

        if self.forced:
            fallback_id = instance.id + 1
            logger.warning(
                "No chain target for %s; forcing evolution into #%d", instance.name, fallback_id
            )
            return Creature(id=fallback_id, name=f"creature-{fallback_id}")
        return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fetch_target(self, target: Creature) -> tuple[Creature | None, bool]:
        """Fetch display data. Returns (creature, fetched_ok)."""
        try:
            return self._source.get_creature(target.id), True
        except Exception as exc:
            if self.forced:
                logger.warning(
                    "Failed to fetch %s (#%d), using placeholder: %s", target.name, target.id, exc
                )
                placeholder = Creature(
                    id=target.id,
                    name=target.name,
                    types=("normal",),
                    sprite_url=PLACEHOLDER_SPRITE,
                    animated_sprite_url=PLACEHOLDER_ANIMATED_SPRITE,
                )
                return placeholder, False
            logger.error("Failed to fetch evolution target #%d: %s", target.id, exc)
            return None, False

    def _build_instance(
        self, instance: OwnedCreatureInstance, creature: Creature
    ) -> OwnedCreatureInstance:
        chain: EvolutionStage | None = (
            instance.evolution_data.chain if instance.evolution_data else None
        )
        previous = instance.evolution_progress
        progress = EvolutionProgress(
            last_evolution_check=self._now(),
            current_level=(previous.current_level if previous else 1) + 1,
        )
        return OwnedCreatureInstance(
            creature=creature,
            evolution_data=EvolutionData(
                current_form=creature,
                chain=chain,
                next_evolutions=next_evolutions(chain, creature.id),
            ),
            evolution_progress=progress,
            can_evolve=False,
            reward_id=instance.reward_id,
        )

    def _default_trigger_type(self) -> TriggerType:
        return TriggerType.TEST_MODE if self.forced else TriggerType.WORKOUT

    def _default_reason(self, instance: OwnedCreatureInstance) -> str:
        if self.forced:
            return FORCED_REASON
        progress = instance.evolution_progress
        count = progress.workouts_completed if progress else 0
        return f"Evolved through {count} workouts"

    @staticmethod
    def _workout_context(
        instance: OwnedCreatureInstance,
        activity_level: ActivityLevel | None,
        trigger_context: TriggerContext | None,
    ) -> WorkoutContext:
        progress = instance.evolution_progress
        types = ", ".join(sorted(progress.workout_types)) if progress else ""
        return WorkoutContext(
            workout_type=types or "mixed",
            workout_pokemon_types=types or "mixed",
            workout_count=progress.workouts_completed if progress else 0,
            activity_level=activity_level,
            trigger_context=trigger_context,
        )

