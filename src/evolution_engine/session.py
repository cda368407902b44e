"""EvolutionSession — builds and wires one session's engine objects.

Caches live on the session, so a process that keeps one session keeps
its chain and requirement caches, and tests get a clean set per session.
"""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Sequence

from evolution_engine.chain_cache import ChainCache
from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.dispatcher import ActivityEventDispatcher
from evolution_engine.eligibility import EligibilityEvaluator
from evolution_engine.interfaces import (
    CreatureDataSource,
    EvolutionListener,
    HistoryStore,
    RewardStore,
    WorkoutStore,
)
from evolution_engine.models.event import EvolutionEvent
from evolution_engine.models.instance import OwnedCreatureInstance
from evolution_engine.progress import ProgressTracker
from evolution_engine.requirements import RequirementCalculator
from evolution_engine.rewards import RewardBook
from evolution_engine.stores import (
    JsonHistoryStore,
    JsonKeyValueStore,
    JsonRewardStore,
    JsonWorkoutStore,
)
from evolution_engine.transition import EvolutionTransitionEngine

logger = logging.getLogger(__name__)


class EvolutionSession:
    """Everything needed to track and evolve one user's collection."""

    def __init__(
        self,
        source: CreatureDataSource,
        workout_store: WorkoutStore,
        history_store: HistoryStore,
        reward_store: RewardStore | None = None,
        config: EvolutionEngineConfig | None = None,
        listener: EvolutionListener | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> None:
        self.config = config or EvolutionEngineConfig()
        self.workout_store = workout_store
        self.history_store = history_store

        self.chain_cache = ChainCache(source, ttl_s=self.config.chain_cache_ttl_s, clock=clock)
        self.calculator = RequirementCalculator(source, self.config, clock=clock, now=now)
        self.evaluator = EligibilityEvaluator(self.calculator, self.config, now=now)
        self.tracker = ProgressTracker(
            self.chain_cache, self.calculator, self.evaluator, self.config, now=now
        )
        self.rewards = RewardBook(
            source,
            base_ids=self.chain_cache.fallback_root_ids,
            store=reward_store,
            rng=rng,
            now=now,
        )
        self.engine = EvolutionTransitionEngine(
            source,
            self.evaluator,
            workout_store,
            history_store,
            rewards=self.rewards,
            listener=listener,
            config=self.config,
            now=now,
        )
        self.dispatcher = ActivityEventDispatcher(
            self.tracker, self.engine, workout_store, should_cancel=should_cancel
        )

    @classmethod
    def from_directory(
        cls,
        data_dir: Path | str,
        source: CreatureDataSource,
        config: EvolutionEngineConfig | None = None,
        **kwargs: Any,
    ) -> "EvolutionSession":
        """Session backed by the JSON key-value files under *data_dir*."""
        kv = JsonKeyValueStore(data_dir)
        return cls(
            source,
            workout_store=JsonWorkoutStore(kv),
            history_store=JsonHistoryStore(kv),
            reward_store=JsonRewardStore(kv),
            config=config,
            **kwargs,
        )

    def owned_instances(self) -> list[OwnedCreatureInstance]:
        """Load every rewarded creature with chain data and fresh progress."""
        workouts = self.workout_store.get_completed_workouts()
        return [
            self.tracker.load_instance(reward.creature, workouts, reward_id=reward.id)
            for reward in self.rewards.rewards
        ]

    def handle_activity_event(
        self,
        kind: str,
        context: Any = None,
        owned_instances: Sequence[OwnedCreatureInstance] | None = None,
    ) -> list[OwnedCreatureInstance]:
        if owned_instances is None:
            owned_instances = self.owned_instances()
        return self.dispatcher.handle_activity_event(kind, context, owned_instances)

    def history(self) -> list[EvolutionEvent]:
        return self.history_store.load()

    def clear_caches(self) -> None:
        self.chain_cache.clear()
        self.calculator.clear_cache()
