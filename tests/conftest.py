"""Shared test fixtures: a fixed clock, workout histories and a fake creature API."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Callable

import pytest

from creature_client.exceptions import CreatureAPIError, CreatureNotFoundError
from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.models.workout import ExerciseEntry, WorkoutRecord
from evolution_engine.session import EvolutionSession
from evolution_engine.stores import InMemoryHistoryStore, InMemoryRewardStore, InMemoryWorkoutStore

NOW = datetime(2025, 6, 15, 18, 0, 0)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.t = start

    def __call__(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds


class FakeCreatureSource:
    """In-memory CreatureDataSource that counts calls and can be told to fail."""

    def __init__(self, creatures, chains) -> None:
        self.creatures = {c.id: c for c in creatures}
        self.chains: dict[int, EvolutionStage] = {}
        for root in chains:
            self._index(root, root)
        self.fail_creature_ids: set[int] = set()
        self.fail_chain_ids: set[int] = set()
        self.creature_calls = 0
        self.chain_calls = 0

    def _index(self, root: EvolutionStage, stage: EvolutionStage) -> None:
        self.chains[stage.id] = root
        for child in stage.evolves_to:
            if child.id != stage.id:
                self._index(root, child)

    def get_creature(self, creature_id: int) -> Creature:
        self.creature_calls += 1
        if creature_id in self.fail_creature_ids:
            raise CreatureAPIError(f"boom {creature_id}", status_code=500)
        if creature_id not in self.creatures:
            raise CreatureNotFoundError(f"Not found: /pokemon/{creature_id}")
        return self.creatures[creature_id]

    def get_types(self, creature_id: int) -> tuple[str, ...]:
        return self.get_creature(creature_id).types

    def get_evolution_chain(self, creature_id: int):
        self.chain_calls += 1
        if creature_id in self.fail_chain_ids:
            raise CreatureAPIError(f"chain boom {creature_id}", status_code=500)
        root = self.chains.get(creature_id)
        return (root,) if root is not None else None


def stage(creature_id: int, name: str, *children: EvolutionStage) -> EvolutionStage:
    return EvolutionStage(id=creature_id, name=name, evolves_to=tuple(children))


CHARMANDER_LINE = stage(4, "charmander", stage(5, "charmeleon", stage(6, "charizard")))
BULBASAUR_LINE = stage(1, "bulbasaur", stage(2, "ivysaur", stage(3, "venusaur")))

CREATURES = (
    Creature(id=1, name="bulbasaur", types=("grass", "poison")),
    Creature(id=2, name="ivysaur", types=("grass", "poison")),
    Creature(id=3, name="venusaur", types=("grass", "poison")),
    Creature(id=4, name="charmander", types=("fire",)),
    Creature(id=5, name="charmeleon", types=("fire",)),
    Creature(id=6, name="charizard", types=("fire", "flying")),
    Creature(id=7, name="squirtle", types=("water",)),
    Creature(id=25, name="pikachu", types=("electric",)),
)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> FakeCreatureSource:
    return FakeCreatureSource(CREATURES, [CHARMANDER_LINE, BULBASAUR_LINE])


@pytest.fixture
def make_workout() -> Callable[..., WorkoutRecord]:
    """Factory: a workout *days_ago* days before NOW, at 08:00."""
    counter = iter(range(1, 10_000))

    def _make(
        days_ago: int = 0,
        categories: tuple[str, ...] = ("cardio",),
        completed: bool = True,
        duration_min: float = 30.0,
        date: str | None = "auto",
    ) -> WorkoutRecord:
        if date == "auto":
            date = (NOW - timedelta(days=days_ago)).replace(hour=8).isoformat()
        return WorkoutRecord(
            id=f"w{next(counter)}",
            date=date,
            completed=completed,
            duration_min=duration_min,
            exercises=tuple(ExerciseEntry(category=c, name=f"{c} drill") for c in categories),
        )

    return _make


@pytest.fixture
def active_history(make_workout) -> list[WorkoutRecord]:
    """20 completed cardio workouts over the last 7 days: very active tier.

    Every day 0..6 has at least one workout (7-day streak), 600 minutes total.
    """
    return [make_workout(days_ago=i % 7) for i in range(20)]


@pytest.fixture
def make_session(source, clock) -> Callable[..., EvolutionSession]:
    def _make(workouts=(), config: EvolutionEngineConfig | None = None, listener=None):
        return EvolutionSession(
            source,
            workout_store=InMemoryWorkoutStore(workouts),
            history_store=InMemoryHistoryStore(),
            reward_store=InMemoryRewardStore(),
            config=config,
            listener=listener,
            clock=clock,
            now=lambda: NOW,
            rng=random.Random(7),
        )

    return _make


@pytest.fixture
def charmander_line() -> EvolutionStage:
    return CHARMANDER_LINE


@pytest.fixture
def bulbasaur_line() -> EvolutionStage:
    return BULBASAUR_LINE


@pytest.fixture
def make_source() -> Callable[..., FakeCreatureSource]:
    """Factory for a fake API with custom creatures and chains."""

    def _make(creatures=CREATURES, chains=()):
        return FakeCreatureSource(creatures, chains)

    return _make
