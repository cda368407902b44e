"""Creature identity and evolution-chain tree nodes."""

from __future__ import annotations

from dataclasses import dataclass, field

_SPRITE_BASE = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"


@dataclass(frozen=True)
class Creature:
    """A collectible creature as returned by the creature-data API.

    Immutable once fetched. ``types`` holds one or two lowercase elemental
    type names.
    """

    id: int
    name: str
    types: tuple[str, ...] = ("normal",)
    sprite_url: str | None = None
    animated_sprite_url: str | None = None

    @property
    def primary_type(self) -> str:
        return self.types[0] if self.types else "normal"

    @property
    def static_sprite(self) -> str:
        """Sprite URL, falling back to the public sprite repository."""
        return self.sprite_url or f"{_SPRITE_BASE}/{self.id}.png"


@dataclass(frozen=True)
class EvolutionRequirement:
    """In-game evolution requirement parsed from the API (informational only)."""

    trigger: str = "level-up"
    min_level: int | None = None
    item: str | None = None
    held_item: str | None = None
    time_of_day: str | None = None
    known_move: str | None = None


@dataclass(frozen=True)
class EvolutionStage:
    """A node in an evolution chain.

    The chain is an immutable tree (not necessarily binary). A node with
    an empty ``evolves_to`` is a final form.
    """

    id: int
    name: str
    evolves_to: tuple[EvolutionStage, ...] = field(default_factory=tuple)
    requirements: tuple[EvolutionRequirement, ...] = field(default_factory=tuple)

    @property
    def is_final_form(self) -> bool:
        return len(self.evolves_to) == 0
