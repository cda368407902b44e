"""JSON-compatible dicts for evolution history and rewards.

Keys follow the camelCase layout the tracker UI already keeps in local
storage (``fromPokemon``, ``triggerType``, ...), so existing histories load
unchanged. All functions are pure; ``*_from_dict`` raise ``ValueError`` on
malformed input.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.models.enums import ActivityLevel, RewardKind, TriggerType
from evolution_engine.models.event import EvolutionEvent, TriggerContext, WorkoutContext
from evolution_engine.models.instance import EvolutionData, OwnedCreatureInstance
from evolution_engine.models.progress import EvolutionProgress
from evolution_engine.models.reward import CreatureReward


# ---------------------------------------------------------------------------
# Creatures and chains
# ---------------------------------------------------------------------------


def creature_to_dict(creature: Creature) -> dict[str, Any]:
    return {
        "id": creature.id,
        "name": creature.name,
        "types": list(creature.types),
        "sprites": {
            "static": creature.sprite_url,
            "animated": creature.animated_sprite_url,
        },
    }


def creature_from_dict(data: dict[str, Any]) -> Creature:
    try:
        sprites = data.get("sprites") or {}
        types = data.get("types") or [data.get("type1") or "normal"]
        return Creature(
            id=int(data["id"]),
            name=str(data["name"]),
            types=tuple(str(t) for t in types if t),
            sprite_url=sprites.get("static") or data.get("sprite"),
            animated_sprite_url=sprites.get("animated") or data.get("animatedSprite"),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Malformed creature: {exc}") from exc


def stage_to_dict(stage: EvolutionStage) -> dict[str, Any]:
    return {
        "id": stage.id,
        "name": stage.name,
        "evolvesTo": [stage_to_dict(child) for child in stage.evolves_to],
    }


def stage_from_dict(data: dict[str, Any]) -> EvolutionStage:
    try:
        return EvolutionStage(
            id=int(data["id"]),
            name=str(data["name"]),
            evolves_to=tuple(stage_from_dict(c) for c in data.get("evolvesTo") or []),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Malformed evolution stage: {exc}") from exc


# ---------------------------------------------------------------------------
# Owned instances (event snapshots)
# ---------------------------------------------------------------------------


def instance_to_dict(instance: OwnedCreatureInstance) -> dict[str, Any]:
    result = creature_to_dict(instance.creature)
    result["instanceId"] = instance.instance_id
    result["rewardId"] = instance.reward_id
    result["canEvolve"] = instance.can_evolve

    data = instance.evolution_data
    if data is not None:
        result["evolutionData"] = {
            "evolutionChain": [stage_to_dict(data.chain)] if data.chain else [],
            "nextEvolutions": [creature_to_dict(c) for c in data.next_evolutions],
        }

    progress = instance.evolution_progress
    if progress is not None:
        result["evolutionProgress"] = {
            "currentLevel": progress.current_level,
            "workoutsCompleted": progress.workouts_completed,
            "workoutsCompletedWeighted": progress.workouts_completed_weighted,
            "workoutTypes": sorted(progress.workout_types),
            "requiredWorkouts": progress.required_workouts,
            "requiredTypes": list(progress.required_types),
            "minWorkoutStreak": progress.min_workout_streak,
            "specialConditions": list(progress.special_conditions),
            "activityMultiplier": progress.activity_multiplier,
            "lastEvolutionCheck": _iso(progress.last_evolution_check),
        }
    return result


def instance_from_dict(data: dict[str, Any]) -> OwnedCreatureInstance:
    creature = creature_from_dict(data)
    try:
        evolution = data.get("evolutionData")
        evolution_data = None
        if evolution:
            chain_list = evolution.get("evolutionChain") or []
            evolution_data = EvolutionData(
                current_form=creature,
                chain=stage_from_dict(chain_list[0]) if chain_list else None,
                next_evolutions=tuple(
                    creature_from_dict(c) for c in evolution.get("nextEvolutions") or []
                ),
            )

        raw_progress = data.get("evolutionProgress")
        progress = None
        if raw_progress:
            progress = EvolutionProgress(
                workouts_completed=int(raw_progress.get("workoutsCompleted") or 0),
                workouts_completed_weighted=raw_progress.get("workoutsCompletedWeighted"),
                workout_types=frozenset(raw_progress.get("workoutTypes") or []),
                required_workouts=int(raw_progress.get("requiredWorkouts") or 0),
                required_types=tuple(raw_progress.get("requiredTypes") or []),
                min_workout_streak=raw_progress.get("minWorkoutStreak"),
                special_conditions=tuple(raw_progress.get("specialConditions") or []),
                activity_multiplier=float(raw_progress.get("activityMultiplier") or 1.0),
                last_evolution_check=_parse_dt(raw_progress.get("lastEvolutionCheck")),
                current_level=int(raw_progress.get("currentLevel") or 1),
            )

        kwargs: dict[str, Any] = {}
        if data.get("instanceId"):
            kwargs["instance_id"] = str(data["instanceId"])
        return OwnedCreatureInstance(
            creature=creature,
            evolution_data=evolution_data,
            evolution_progress=progress,
            can_evolve=bool(data.get("canEvolve", False)),
            reward_id=data.get("rewardId"),
            **kwargs,
        )
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Malformed creature snapshot: {exc}") from exc


# ---------------------------------------------------------------------------
# Evolution events
# ---------------------------------------------------------------------------


def event_to_dict(event: EvolutionEvent) -> dict[str, Any]:
    ctx = event.workout_context
    trigger = ctx.trigger_context
    return {
        "id": event.id,
        "fromPokemon": instance_to_dict(event.from_creature),
        "toPokemon": instance_to_dict(event.to_creature),
        "triggerType": event.trigger_type.value,
        "triggerReason": event.trigger_reason,
        "timestamp": _iso(event.timestamp),
        "workoutContext": {
            "workoutType": ctx.workout_type,
            "workoutPokemonTypes": ctx.workout_pokemon_types,
            "workoutCount": ctx.workout_count,
            "activityLevel": ctx.activity_level.value if ctx.activity_level else None,
            "triggerContext": (
                {
                    "workoutId": trigger.workout_id,
                    "milestoneId": trigger.milestone_id,
                    "streakDays": trigger.streak_days,
                }
                if trigger is not None
                else None
            ),
        },
    }


def event_from_dict(data: dict[str, Any]) -> EvolutionEvent:
    try:
        raw_ctx = data.get("workoutContext") or {}
        raw_trigger = raw_ctx.get("triggerContext")
        trigger = None
        if raw_trigger:
            trigger = TriggerContext(
                workout_id=raw_trigger.get("workoutId"),
                milestone_id=raw_trigger.get("milestoneId"),
                streak_days=raw_trigger.get("streakDays"),
            )
        level = raw_ctx.get("activityLevel")
        timestamp = _parse_dt(data.get("timestamp"))
        if timestamp is None:
            raise ValueError("missing timestamp")
        return EvolutionEvent(
            id=str(data["id"]),
            from_creature=instance_from_dict(data["fromPokemon"]),
            to_creature=instance_from_dict(data["toPokemon"]),
            trigger_type=TriggerType(data["triggerType"]),
            trigger_reason=str(data.get("triggerReason") or ""),
            timestamp=timestamp,
            workout_context=WorkoutContext(
                workout_type=raw_ctx.get("workoutType") or "mixed",
                workout_pokemon_types=raw_ctx.get("workoutPokemonTypes") or "mixed",
                workout_count=int(raw_ctx.get("workoutCount") or 0),
                activity_level=ActivityLevel(level) if level else None,
                trigger_context=trigger,
            ),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed evolution event: {exc}") from exc


def event_to_json(event: EvolutionEvent, indent: int | None = None) -> str:
    return json.dumps(event_to_dict(event), indent=indent)


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------


def reward_to_dict(reward: CreatureReward) -> dict[str, Any]:
    creature = reward.creature
    return {
        "id": reward.id,
        "pokemon": {
            "id": creature.id,
            "name": creature.name,
            "sprite": creature.static_sprite,
            "animatedSprite": creature.animated_sprite_url,
            "type1": creature.primary_type,
            "type2": creature.types[1] if len(creature.types) > 1 else None,
        },
        "type": reward.kind.value,
        "reason": reward.reason,
        "timestamp": _iso(reward.timestamp),
        "seen": reward.seen,
        "workoutId": reward.workout_id,
    }


def reward_from_dict(data: dict[str, Any]) -> CreatureReward:
    try:
        raw = data["pokemon"]
        types = [t for t in (raw.get("type1"), raw.get("type2")) if t]
        creature = Creature(
            id=int(raw["id"]),
            name=str(raw["name"]),
            types=tuple(types) or ("normal",),
            sprite_url=raw.get("sprite"),
            animated_sprite_url=raw.get("animatedSprite"),
        )
        timestamp = _parse_dt(data.get("timestamp"))
        if timestamp is None:
            raise ValueError("missing timestamp")
        return CreatureReward(
            id=str(data["id"]),
            creature=creature,
            kind=RewardKind(data.get("type") or "workout"),
            reason=str(data.get("reason") or ""),
            timestamp=timestamp,
            seen=bool(data.get("seen", False)),
            workout_id=data.get("workoutId"),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed reward: {exc}") from exc


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: Any) -> datetime | None:
    if not value:
        return None
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
