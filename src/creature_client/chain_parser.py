"""Pure functions mapping creature-data API responses to domain models.

No I/O — takes raw dicts from CreatureDataClient and returns frozen
Creature / EvolutionStage values. Malformed input raises ``ValueError`` so
callers can treat it like any other failed lookup.
"""

from __future__ import annotations

from typing import Any

from evolution_engine.models.creature import Creature, EvolutionRequirement, EvolutionStage


def id_from_url(url: str) -> int:
    """Extract the trailing numeric id from an API resource URL.

    ``https://pokeapi.co/api/v2/pokemon-species/25/`` -> 25
    """
    parts = [p for p in str(url).split("/") if p]
    if not parts:
        raise ValueError(f"No id in resource URL: {url!r}")
    try:
        return int(parts[-1])
    except ValueError as exc:
        raise ValueError(f"No id in resource URL: {url!r}") from exc


def parse_creature(data: dict[str, Any]) -> Creature:
    """Map a ``/pokemon/{id}`` response to a Creature."""
    try:
        creature_id = int(data["id"])
        name = str(data["name"])
        slots = sorted(data.get("types") or [], key=lambda t: t.get("slot", 0))
        types = tuple(str(t["type"]["name"]).lower() for t in slots)
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed creature payload: {exc}") from exc

    sprites = data.get("sprites") or {}
    return Creature(
        id=creature_id,
        name=name,
        types=types or ("normal",),
        sprite_url=sprites.get("front_default"),
        animated_sprite_url=_animated_sprite(sprites),
    )


def parse_evolution_chain(data: dict[str, Any]) -> tuple[EvolutionStage, ...]:
    """Map an ``/evolution-chain/{id}`` response to a one-root tuple of stages."""
    root = data.get("chain") if isinstance(data, dict) else None
    if not isinstance(root, dict):
        raise ValueError("Evolution chain payload has no 'chain' object")
    return (_parse_stage(root),)


def evolution_chain_id(species: dict[str, Any]) -> int:
    """Pull the evolution-chain id out of a ``/pokemon-species/{id}`` response."""
    try:
        return id_from_url(species["evolution_chain"]["url"])
    except (KeyError, TypeError) as exc:
        raise ValueError("Species payload has no evolution_chain url") from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _parse_stage(stage: dict[str, Any]) -> EvolutionStage:
    try:
        species = stage["species"]
        stage_id = id_from_url(species["url"])
        name = str(species["name"])
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Malformed chain stage: {exc}") from exc

    children = tuple(_parse_stage(child) for child in stage.get("evolves_to") or [])
    requirements = tuple(
        _parse_requirement(detail) for detail in stage.get("evolution_details") or []
    )
    return EvolutionStage(id=stage_id, name=name, evolves_to=children, requirements=requirements)


def _parse_requirement(detail: dict[str, Any]) -> EvolutionRequirement:
    return EvolutionRequirement(
        trigger=_name(detail.get("trigger")) or "level-up",
        min_level=detail.get("min_level") or None,
        item=_name(detail.get("item")),
        held_item=_name(detail.get("held_item")),
        time_of_day=detail.get("time_of_day") or None,
        known_move=_name(detail.get("known_move")),
    )


def _name(ref: Any) -> str | None:
    if isinstance(ref, dict):
        return ref.get("name")
    return None


def _animated_sprite(sprites: dict[str, Any]) -> str | None:
    """Path: versions.generation-v.black-white.animated.front_default"""
    try:
        black_white = sprites["versions"]["generation-v"]["black-white"]
    except (KeyError, TypeError):
        return None
    animated = black_white.get("animated") or {}
    return animated.get("front_default") or black_white.get("front_default")
