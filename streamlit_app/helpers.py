"""Utility helpers bridging the Streamlit UI and the evolution engine.

Pure functions for formatting progress, requirement checklists and the
evolution history table.
"""

from __future__ import annotations

import math
from typing import Sequence

import pandas as pd

from evolution_engine.eligibility import EligibilityReport
from evolution_engine.models.enums import ActivityLevel
from evolution_engine.models.event import EvolutionEvent
from evolution_engine.models.instance import OwnedCreatureInstance

# ---------------------------------------------------------------------------
# Display constants
# ---------------------------------------------------------------------------

TYPE_COLORS: dict[str, str] = {
    "normal": "#A8A878",
    "fire": "#F08030",
    "water": "#6890F0",
    "electric": "#F8D030",
    "grass": "#78C850",
    "ice": "#98D8D8",
    "fighting": "#C03028",
    "poison": "#A040A0",
    "ground": "#E0C068",
    "flying": "#A890F0",
    "psychic": "#F85888",
    "bug": "#A8B820",
    "rock": "#B8A038",
    "ghost": "#705898",
    "dragon": "#7038F8",
    "dark": "#705848",
    "steel": "#B8B8D0",
    "fairy": "#EE99AC",
}

ACTIVITY_LABELS: dict[ActivityLevel, str] = {
    ActivityLevel.VERY_ACTIVE: "Very active (60% off)",
    ActivityLevel.ACTIVE: "Active (40% off)",
    ActivityLevel.MODERATE: "Moderate (20% off)",
    ActivityLevel.INACTIVE: "No discount",
}

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def type_color(type_name: str) -> str:
    return TYPE_COLORS.get(type_name.lower(), "#CCCCCC")


def format_creature_name(name: str) -> str:
    """'mr-mime' -> 'Mr Mime'."""
    return " ".join(part.capitalize() for part in name.replace("_", "-").split("-") if part)


def progress_fraction(instance: OwnedCreatureInstance) -> float:
    """Share of required workouts done, clamped to [0, 1]. 0 when unknown."""
    progress = instance.evolution_progress
    if progress is None or progress.required_workouts <= 0:
        return 0.0
    weighted = progress.workouts_completed_weighted
    done = math.floor(weighted if weighted is not None else progress.workouts_completed)
    return max(0.0, min(1.0, done / progress.required_workouts))


def requirement_lines(report: EligibilityReport) -> list[tuple[bool, str]]:
    """Checklist rows ``(met, text)`` for one eligibility report."""
    conditions = report.conditions
    if conditions is None:
        return [(False, "Evolution data not loaded")]

    lines = [
        (
            report.has_enough_workouts,
            f"Workouts: {report.effective_workouts}/{conditions.required_workouts}",
        )
    ]
    if conditions.required_types:
        text = "Types: " + ", ".join(conditions.required_types)
        if report.missing_types:
            text += f" (missing {', '.join(report.missing_types)})"
        lines.append((report.has_required_types, text))
    if conditions.min_workout_streak:
        lines.append(
            (
                report.has_streak,
                f"Streak: {report.streak_days}/{conditions.min_workout_streak} days",
            )
        )
    return lines


def history_frame(events: Sequence[EvolutionEvent]) -> pd.DataFrame:
    """Evolution history as a table, newest first."""
    columns = ["When", "From", "To", "Trigger", "Reason", "Workouts"]
    rows = [
        {
            "When": event.timestamp,
            "From": format_creature_name(event.from_creature.name),
            "To": format_creature_name(event.to_creature.name),
            "Trigger": event.trigger_type.value.replace("_", " "),
            "Reason": event.trigger_reason,
            "Workouts": event.workout_context.workout_count,
        }
        for event in events
    ]
    frame = pd.DataFrame(rows, columns=columns)
    if frame.empty:
        return frame
    return frame.sort_values("When", ascending=False).reset_index(drop=True)
