"""Workout history records consumed by the evolution engine.

The workout store owns these; the engine only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ExerciseEntry:
    """A single exercise performed in a workout."""

    category: str | None = None
    name: str = ""


@dataclass(frozen=True)
class WorkoutRecord:
    """A logged workout session.

    ``date`` is kept as the raw ISO-8601 string from storage; it may be
    missing or malformed, in which case the workout never counts towards
    date-based statistics.
    """

    id: str
    date: str | None
    completed: bool = False
    duration_min: float = 0.0
    exercises: tuple[ExerciseEntry, ...] = field(default_factory=tuple)

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(e.category for e in self.exercises if e.category)


def workout_from_dict(raw: Mapping[str, Any]) -> WorkoutRecord:
    """Build a WorkoutRecord from a stored workout dict.

    Accepts both the nested ``exercises[].exercise.category`` shape written
    by the tracker UI and a flat ``exercises[].category`` shape.
    """
    exercises: list[ExerciseEntry] = []
    for entry in raw.get("exercises") or []:
        if not isinstance(entry, Mapping):
            continue
        inner = entry.get("exercise")
        source = inner if isinstance(inner, Mapping) else entry
        exercises.append(
            ExerciseEntry(
                category=source.get("category"),
                name=str(source.get("name") or ""),
            )
        )

    try:
        duration = float(raw.get("duration") or raw.get("duration_min") or 0.0)
    except (TypeError, ValueError):
        duration = 0.0

    raw_date = raw.get("date")
    return WorkoutRecord(
        id=str(raw.get("id", "")),
        date=raw_date if isinstance(raw_date, str) else None,
        completed=bool(raw.get("completed", False)),
        duration_min=duration,
        exercises=tuple(exercises),
    )
