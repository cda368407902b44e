"""Owned creature instances — what the user actually collects."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.models.progress import EvolutionProgress


def _new_instance_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class EvolutionData:
    """Chain context for an owned creature.

    ``next_evolutions`` holds the direct children of ``current_form`` in
    ``chain``, in chain order, with self-references removed.
    """

    current_form: Creature
    chain: EvolutionStage | None = None
    next_evolutions: tuple[Creature, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class OwnedCreatureInstance:
    """A creature in the user's collection.

    Progress recalculation produces a replaced copy; an evolution produces
    a new instance with a fresh ``instance_id``.
    """

    creature: Creature
    evolution_data: EvolutionData | None = None
    evolution_progress: EvolutionProgress | None = None
    can_evolve: bool = False
    reward_id: str | None = None
    instance_id: str = field(default_factory=_new_instance_id)

    @property
    def id(self) -> int:
        return self.creature.id

    @property
    def name(self) -> str:
        return self.creature.name
