"""Activity triggers dispatched to the evolution engine.

A trigger is one of ``WorkoutTrigger``, ``StreakTrigger`` or
``MilestoneTrigger``. ``parse_trigger`` turns the loosely-shaped context
the UI hands over into one of these without ever raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from evolution_engine.models.enums import TriggerType
from evolution_engine.models.event import TriggerContext


@dataclass(frozen=True)
class WorkoutTrigger:
    workout_id: str | None = None


@dataclass(frozen=True)
class StreakTrigger:
    streak_days: int | None = None


@dataclass(frozen=True)
class MilestoneTrigger:
    milestone_id: str | None = None


Trigger = Union[WorkoutTrigger, StreakTrigger, MilestoneTrigger]

TRIGGER_KINDS = ("workout", "streak", "milestone")


def parse_trigger(kind: str, context: Any = None) -> Trigger:
    """Build a trigger from an event kind and an optional context.

    ``context`` may be ``None``, a mapping, or any object exposing
    ``workout`` / ``milestone`` / ``streak_days`` attributes. Missing
    pieces become ``None``.

    Raises:
        ValueError: if ``kind`` is not one of workout, streak, milestone.
    """
    normalized = str(kind).strip().lower()
    if normalized == "workout":
        return WorkoutTrigger(workout_id=_nested_id(_lookup(context, "workout")))
    if normalized == "streak":
        return StreakTrigger(streak_days=_as_int(_lookup(context, "streak_days", "streakDays")))
    if normalized == "milestone":
        return MilestoneTrigger(milestone_id=_nested_id(_lookup(context, "milestone")))
    raise ValueError(f"Unknown activity kind: {kind!r}")


def parse_trigger_context(context: Any = None) -> TriggerContext:
    """Read every field the context carries, whatever the event kind.

    A workout event that also reports the running streak keeps both.
    """
    return TriggerContext(
        workout_id=_nested_id(_lookup(context, "workout")),
        milestone_id=_nested_id(_lookup(context, "milestone")),
        streak_days=_as_int(_lookup(context, "streak_days", "streakDays")),
    )


def trigger_type_for(trigger: Trigger) -> TriggerType:
    """Map an activity trigger onto its ``instant_*`` trigger type."""
    if isinstance(trigger, WorkoutTrigger):
        return TriggerType.INSTANT_WORKOUT
    if isinstance(trigger, StreakTrigger):
        return TriggerType.INSTANT_STREAK
    if isinstance(trigger, MilestoneTrigger):
        return TriggerType.INSTANT_MILESTONE
    raise TypeError(f"Unhandled trigger: {trigger!r}")


def kind_of(trigger: Trigger) -> str:
    if isinstance(trigger, WorkoutTrigger):
        return "workout"
    if isinstance(trigger, StreakTrigger):
        return "streak"
    if isinstance(trigger, MilestoneTrigger):
        return "milestone"
    raise TypeError(f"Unhandled trigger: {trigger!r}")


# ---------------------------------------------------------------------------
# Lenient context access
# ---------------------------------------------------------------------------


def _lookup(context: Any, *names: str) -> Any:
    if context is None:
        return None
    for name in names:
        if isinstance(context, Mapping):
            value = context.get(name)
        else:
            value = getattr(context, name, None)
        if value is not None:
            return value
    return None


def _nested_id(value: Any) -> str | None:
    """Accept either an object/mapping carrying an ``id`` or a bare id."""
    if value is None:
        return None
    if isinstance(value, (str, int)):
        return str(value)
    inner = _lookup(value, "id")
    return str(inner) if inner is not None else None


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
