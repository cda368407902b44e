"""Exercise category -> elemental creature type mapping."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterable

from evolution_engine.models.enums import MOST_COMMON_TYPES_LIMIT, UNKNOWN_TYPE
from evolution_engine.models.workout import WorkoutRecord

CATEGORY_TYPE_MAP: dict[str, str] = {
    "cardio": "fire",
    "strength": "fighting",
    "flexibility": "grass",
    "balance": "psychic",
    "endurance": "normal",
    "speed": "electric",
    "power": "dragon",
    "general": "normal",
    "chest": "fighting",
    "back": "flying",
    "legs": "ground",
    "arms": "fighting",
    "core": "rock",
    "shoulders": "fighting",
    "running": "fire",
    "cycling": "electric",
    "swimming": "water",
    "yoga": "psychic",
    "pilates": "fairy",
    "dancing": "normal",
    "boxing": "fighting",
    "martial-arts": "fighting",
    "climbing": "rock",
    "hiking": "grass",
}

_WHITESPACE = re.compile(r"\s+")


def map_category_to_type(category: str | None) -> str:
    """Map an exercise category to an elemental type, or ``"unknown"``.

    Categories are matched case-insensitively with inner whitespace
    collapsed to hyphens ("Martial Arts" -> "martial-arts").
    """
    if not category:
        return UNKNOWN_TYPE
    key = _WHITESPACE.sub("-", category.strip().lower())
    return CATEGORY_TYPE_MAP.get(key, UNKNOWN_TYPE)


def type_histogram(workouts: Iterable[WorkoutRecord]) -> Counter[str]:
    """Count mapped types over every exercise in *workouts*, unknowns excluded."""
    counts: Counter[str] = Counter()
    for workout in workouts:
        for exercise in workout.exercises:
            mapped = map_category_to_type(exercise.category)
            if mapped != UNKNOWN_TYPE:
                counts[mapped] += 1
    return counts


def most_common_types(
    workouts: Iterable[WorkoutRecord], limit: int = MOST_COMMON_TYPES_LIMIT
) -> list[str]:
    """Mapped types ranked by frequency, descending; ties keep first-seen order."""
    return [t for t, _ in type_histogram(workouts).most_common(limit)]


def observed_types(workouts: Iterable[WorkoutRecord]) -> frozenset[str]:
    """Distinct mapped types across all exercises."""
    return frozenset(type_histogram(workouts))


def category_fingerprint(workouts: Iterable[WorkoutRecord]) -> str:
    """Sorted, normalized list of every exercise category, joined by ``|``."""
    categories = [
        (exercise.category or "").strip().lower()
        for workout in workouts
        for exercise in workout.exercises
    ]
    return "|".join(sorted(categories))
