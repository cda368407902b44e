"""RewardBook — creature rewards for workouts, streaks and milestones.

Rewards are kept newest first. Evolving a rewarded creature re-points the
reward at the evolved form; evolution history keeps the original snapshot.
"""

from __future__ import annotations

import dataclasses
import logging
import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Sequence

from evolution_engine.interfaces import CreatureDataSource, RewardStore
from evolution_engine.models.creature import Creature
from evolution_engine.models.enums import RECENT_WINDOW_DAYS, RewardKind
from evolution_engine.models.reward import CreatureReward

logger = logging.getLogger(__name__)

RECENT_REWARDS_LIMIT = 12

FALLBACK_CREATURES: tuple[Creature, ...] = (
    Creature(id=1, name="bulbasaur", types=("grass", "poison")),
    Creature(id=4, name="charmander", types=("fire",)),
    Creature(id=7, name="squirtle", types=("water",)),
    Creature(id=25, name="pikachu", types=("electric",)),
)


@dataclass(frozen=True)
class RewardStats:
    total_rewards: int
    unique_creatures: int
    this_week: int
    streak_rewards: int
    recent: tuple[CreatureReward, ...]


class RewardBook:
    """In-memory reward ledger, persisted through a RewardStore after each change."""

    def __init__(
        self,
        source: CreatureDataSource,
        base_ids: Sequence[int],
        store: RewardStore | None = None,
        fallback_roster: Sequence[Creature] = FALLBACK_CREATURES,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        if not base_ids:
            raise ValueError("base_ids must not be empty")
        self._source = source
        self._base_ids = tuple(base_ids)
        self._store = store
        self._fallback = tuple(fallback_roster)
        self._rng = rng or random.Random()
        self._now = now
        self._rewards: list[CreatureReward] = store.load() if store is not None else []

    @property
    def rewards(self) -> tuple[CreatureReward, ...]:
        return tuple(self._rewards)

    def get(self, reward_id: str) -> CreatureReward | None:
        for reward in self._rewards:
            if reward.id == reward_id:
                return reward
        return None

    # ------------------------------------------------------------------
    # Grants
    # ------------------------------------------------------------------

    def grant_workout_reward(self, workout_id: str | None = None) -> CreatureReward | None:
        """Reward a completed workout. Returns ``None`` for an already-rewarded id."""
        if workout_id is not None and any(r.workout_id == workout_id for r in self._rewards):
            logger.info("Workout %s already rewarded; skipping", workout_id)
            return None
        return self._grant(RewardKind.WORKOUT, "Completed a workout session", workout_id)

    def grant_streak_reward(self, streak_days: int) -> CreatureReward:
        return self._grant(RewardKind.STREAK, f"Maintained {streak_days}-day workout streak")

    def grant_milestone_reward(self, milestone_name: str) -> CreatureReward:
        return self._grant(RewardKind.MILESTONE, f"Achieved milestone: {milestone_name}")

    def random_base_creature(self) -> Creature:
        """Fetch a random base-form creature, or pick one from the fallback roster."""
        creature_id = self._rng.choice(self._base_ids)
        try:
            return self._source.get_creature(creature_id)
        except Exception as exc:
            logger.error("Failed to fetch creature %d: %s", creature_id, exc)
            return self._rng.choice(self._fallback)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def replace_creature(self, reward_id: str, creature: Creature) -> bool:
        """Point *reward_id* at *creature*. Returns False if the reward is unknown."""
        for index, reward in enumerate(self._rewards):
            if reward.id == reward_id:
                self._rewards[index] = dataclasses.replace(reward, creature=creature)
                logger.info(
                    "Reward %s now holds %s (was %s)", reward_id, creature.name, reward.creature.name
                )
                self._persist()
                return True
        logger.warning("Cannot re-point unknown reward %s", reward_id)
        return False

    def mark_seen(self, reward_id: str) -> None:
        for index, reward in enumerate(self._rewards):
            if reward.id == reward_id and not reward.seen:
                self._rewards[index] = dataclasses.replace(reward, seen=True)
                self._persist()
                return

    def stats(self) -> RewardStats:
        week_ago = self._now() - timedelta(days=RECENT_WINDOW_DAYS)
        return RewardStats(
            total_rewards=len(self._rewards),
            unique_creatures=len({r.creature.id for r in self._rewards}),
            this_week=sum(1 for r in self._rewards if _naive(r.timestamp) >= _naive(week_ago)),
            streak_rewards=sum(1 for r in self._rewards if r.kind is RewardKind.STREAK),
            recent=tuple(self._rewards[:RECENT_REWARDS_LIMIT]),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _grant(
        self, kind: RewardKind, reason: str, workout_id: str | None = None
    ) -> CreatureReward:
        reward = CreatureReward(
            id=uuid.uuid4().hex,
            creature=self.random_base_creature(),
            kind=kind,
            reason=reason,
            timestamp=self._now(),
            workout_id=workout_id,
        )
        self._rewards.insert(0, reward)
        logger.info("Granted %s reward: %s (%s)", kind.value, reward.creature.name, reason)
        self._persist()
        return reward

    def _persist(self) -> None:
        if self._store is not None:
            self._store.persist(self._rewards)


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo is not None else value
