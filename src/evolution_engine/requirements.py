"""RequirementCalculator — per-user evolution requirements from workout history.

Requirements scale with how much the user already trains, how deep the
remaining chain is, and how active they have been recently:

    complexity = clamp(chain_depth * 0.3, 1.0, 1.5)
    base       = clamp(floor((completed * 0.15 + 5) * complexity), 3, 20)
    streak     = clamp(floor(base * 0.3), 2, 4)

Both ``base`` and ``streak`` are then discounted by the activity
multiplier (ceiling, never below 1).
"""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime
from typing import Callable, Optional, Sequence

from evolution_engine.cache import TTLCache
from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.interfaces import CreatureDataSource
from evolution_engine.math.activity import compute_activity_multiplier
from evolution_engine.math.chain import chain_depth, find_stage, first_evolution
from evolution_engine.math.type_mapping import category_fingerprint, most_common_types
from evolution_engine.models.creature import EvolutionStage
from evolution_engine.models.enums import (
    BASE_REQUIREMENT_OFFSET,
    BASE_REQUIREMENT_PER_WORKOUT,
    CHAIN_DEPTH_FACTOR,
    DEFAULT_REQUIRED_TYPES,
    DEFAULT_SINGLE_TYPE,
    FINAL_FORM_REQUIRED_WORKOUTS,
    HIGH_VOLUME_WORKOUTS,
    LEGENDARY_NAME_MARKERS,
    LOW_VOLUME_WORKOUTS,
    MAX_BASE_REQUIREMENT,
    MAX_COMPLEXITY_MULTIPLIER,
    MAX_REQUIRED_TYPES,
    MAX_STREAK_REQUIREMENT,
    MIN_BASE_REQUIREMENT,
    MIN_COMPLEXITY_MULTIPLIER,
    MIN_STREAK_REQUIREMENT,
    STREAK_REQUIREMENT_FACTOR,
    VARIETY_CATEGORY_COUNT,
)
from evolution_engine.models.progress import EvolutionCondition
from evolution_engine.models.workout import WorkoutRecord

logger = logging.getLogger(__name__)

FINAL_FORM_CONDITION = EvolutionCondition(
    required_workouts=FINAL_FORM_REQUIRED_WORKOUTS,
    required_types=(),
)

CacheKey = tuple[int, Optional[int], int, str]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def complexity_multiplier(depth: int) -> float:
    return _clamp(depth * CHAIN_DEPTH_FACTOR, MIN_COMPLEXITY_MULTIPLIER, MAX_COMPLEXITY_MULTIPLIER)


def base_requirement(completed_workouts: int, depth: int) -> int:
    raw = math.floor(
        (completed_workouts * BASE_REQUIREMENT_PER_WORKOUT + BASE_REQUIREMENT_OFFSET)
        * complexity_multiplier(depth)
    )
    return int(_clamp(raw, MIN_BASE_REQUIREMENT, MAX_BASE_REQUIREMENT))


def streak_requirement(base: int) -> int:
    raw = math.floor(base * STREAK_REQUIREMENT_FACTOR)
    return int(_clamp(raw, MIN_STREAK_REQUIREMENT, MAX_STREAK_REQUIREMENT))


def apply_multiplier(value: int, multiplier: float) -> int:
    """Scale a requirement by the activity discount, rounding up, floor of 1."""
    return max(1, math.ceil(value * multiplier))


def special_conditions(candidate: EvolutionStage, workouts: Sequence[WorkoutRecord]) -> tuple[str, ...]:
    """Advisory hints shown next to the requirements. Never gate eligibility."""
    notes: list[str] = []
    total = len(workouts)
    if total < LOW_VOLUME_WORKOUTS:
        notes.append("Complete more workouts to evolve")
    elif total > HIGH_VOLUME_WORKOUTS:
        notes.append("High workout volume detected - evolution ready")

    categories = {
        c.strip().lower() for w in workouts for c in w.categories if c.strip()
    }
    if len(categories) < VARIETY_CATEGORY_COUNT:
        notes.append("Try different workout types for better evolution chances")
    else:
        notes.append("Good workout variety - supports evolution")

    name = candidate.name.lower()
    if any(marker in name for marker in LEGENDARY_NAME_MARKERS):
        notes.append("Legendary evolution - requires exceptional dedication")
    return tuple(notes)


class RequirementCalculator:
    """Derives EvolutionConditions, with a short-lived result cache.

    The cache key covers everything the result depends on except the
    clock and the candidate's live types, so a short TTL is enough to
    collapse repeated calls made while handling one user action. The cache
    is dropped entirely whenever the workout history it sees changes.
    """

    def __init__(
        self,
        source: CreatureDataSource | None = None,
        config: EvolutionEngineConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._source = source
        self._config = config or EvolutionEngineConfig()
        self._now = now
        self._cache: TTLCache[CacheKey, EvolutionCondition] = TTLCache(
            self._config.requirement_cache_ttl_s, clock=clock
        )
        self._history_signature: int | None = None

    def calculate(
        self,
        chain: EvolutionStage | None,
        current_creature_id: int,
        workouts: Sequence[WorkoutRecord],
    ) -> EvolutionCondition:
        """Requirements for *current_creature_id* to evolve along *chain*."""
        self._track_history(workouts)

        if chain is None:
            logger.debug("No chain for creature %d; using default condition", current_creature_id)
            return FINAL_FORM_CONDITION

        current = find_stage(chain, current_creature_id)
        if current is None:
            logger.warning(
                "Creature %d not found in chain rooted at %s; using root",
                current_creature_id,
                chain.name,
            )
            current = chain
        candidate = first_evolution(current)

        key: CacheKey = (
            current_creature_id,
            candidate.id if candidate else None,
            len(workouts),
            category_fingerprint(workouts),
        )
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if candidate is None:
            conditions = FINAL_FORM_CONDITION
        else:
            conditions = self._derive(candidate, workouts)
        self._cache.set(key, conditions)
        return conditions

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _derive(self, candidate: EvolutionStage, workouts: Sequence[WorkoutRecord]) -> EvolutionCondition:
        common = most_common_types(workouts)
        completed = sum(1 for w in workouts if w.completed)

        base = base_requirement(completed, chain_depth(candidate))
        required_types = self.required_types(candidate, common)
        if len(workouts) == 0:
            required_types = (common[0],) if common else (DEFAULT_SINGLE_TYPE,)
            base = MIN_BASE_REQUIREMENT
        streak = streak_requirement(base)

        multiplier = compute_activity_multiplier(
            workouts,
            self._now(),
            tiers=self._config.activity_tiers,
            lookback_days=self._config.streak_lookback_days,
        )
        return EvolutionCondition(
            required_workouts=apply_multiplier(base, multiplier),
            required_types=required_types,
            min_workout_streak=apply_multiplier(streak, multiplier),
            special_conditions=special_conditions(candidate, workouts),
        )

    def required_types(self, candidate: EvolutionStage, common: Sequence[str]) -> tuple[str, ...]:
        """Candidate's real types, else the user's top two, else a fixed pair."""
        if self._source is not None:
            try:
                types = self._source.get_types(candidate.id)
                unique = list(dict.fromkeys(t.lower() for t in types or ()))
                if unique:
                    return tuple(unique[:MAX_REQUIRED_TYPES])
            except Exception as exc:
                logger.warning("Failed to fetch types for %s: %s", candidate.name, exc)

        if len(common) >= MAX_REQUIRED_TYPES:
            return tuple(common[:MAX_REQUIRED_TYPES])
        return DEFAULT_REQUIRED_TYPES

    def _track_history(self, workouts: Sequence[WorkoutRecord]) -> None:
        signature = hash(
            tuple((w.id, w.date, w.completed, w.duration_min, w.categories) for w in workouts)
        )
        if signature != self._history_signature:
            if self._history_signature is not None:
                logger.debug("Workout history changed; clearing requirement cache")
            self._cache.clear()
            self._history_signature = signature
