"""Collaborator contracts consumed by the evolution engine.

Concrete implementations live in ``creature_client`` (network) and
``evolution_engine.stores`` (local persistence). Tests substitute fakes.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.models.event import EvolutionEvent
from evolution_engine.models.instance import OwnedCreatureInstance
from evolution_engine.models.reward import CreatureReward
from evolution_engine.models.workout import WorkoutRecord


class CreatureDataSource(Protocol):
    """External creature-data API. Any method may raise on lookup failure."""

    def get_creature(self, creature_id: int) -> Creature: ...

    def get_types(self, creature_id: int) -> tuple[str, ...]: ...

    def get_evolution_chain(self, creature_id: int) -> Sequence[EvolutionStage] | None: ...


class WorkoutStore(Protocol):
    def get_workouts(self) -> list[WorkoutRecord]: ...

    def get_completed_workouts(self) -> list[WorkoutRecord]: ...


class RewardStore(Protocol):
    """Best-effort reward persistence; errors are logged, never raised."""

    def load(self) -> list[CreatureReward]: ...

    def persist(self, rewards: Sequence[CreatureReward]) -> None: ...


class HistoryStore(Protocol):
    """Append-only evolution history; errors are logged, never raised."""

    def load(self) -> list[EvolutionEvent]: ...

    def append(self, event: EvolutionEvent) -> None: ...


class EvolutionListener(Protocol):
    def __call__(
        self,
        from_instance: OwnedCreatureInstance,
        to_instance: OwnedCreatureInstance,
        reason: str,
    ) -> None: ...
