"""ActivityEventDispatcher — fans activity triggers out over the owned collection."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from evolution_engine.interfaces import WorkoutStore
from evolution_engine.models.instance import OwnedCreatureInstance
from evolution_engine.models.triggers import (
    kind_of,
    parse_trigger,
    parse_trigger_context,
    trigger_type_for,
)
from evolution_engine.progress import ProgressTracker
from evolution_engine.transition import EvolutionTransitionEngine

logger = logging.getLogger(__name__)


class ActivityEventDispatcher:
    """Re-checks every owned creature after a workout, streak or milestone.

    Instances are processed one at a time in collection order. A failure
    for one instance is logged and never stops the rest of the sweep.
    """

    def __init__(
        self,
        tracker: ProgressTracker,
        engine: EvolutionTransitionEngine,
        workout_store: WorkoutStore,
        should_cancel: Callable[[], bool] | None = None,
    ) -> None:
        self._tracker = tracker
        self._engine = engine
        self._workouts = workout_store
        self._should_cancel = should_cancel

    def handle_activity_event(
        self,
        kind: str,
        context: Any,
        owned_instances: Sequence[OwnedCreatureInstance],
    ) -> list[OwnedCreatureInstance]:
        """Refresh progress and attempt an evolution for each owned instance.

        Returns the updated collection: evolved replacements where an
        evolution happened, refreshed copies otherwise. Instances left
        unprocessed after a cancellation are returned unchanged.

        Raises:
            ValueError: if ``kind`` is not workout, streak or milestone.
        """
        trigger = parse_trigger(kind, context)
        if not owned_instances:
            logger.info("No owned creatures to check after %s event", kind_of(trigger))
            return []

        trigger_type = trigger_type_for(trigger)
        trigger_context = parse_trigger_context(context)
        trigger_reason = f"Immediate trigger from {kind_of(trigger)} event"
        workouts = self._workouts.get_completed_workouts()
        logger.info(
            "Checking %d creature(s) after %s event", len(owned_instances), kind_of(trigger)
        )

        updated: list[OwnedCreatureInstance] = []
        evolved_count = 0
        for index, instance in enumerate(owned_instances):
            if self._should_cancel is not None and self._should_cancel():
                logger.info("Activity sweep cancelled after %d creature(s)", index)
                updated.extend(owned_instances[index:])
                break
            try:
                refreshed = self._tracker.refresh(instance, workouts)
                evolved = self._engine.evolve(
                    refreshed,
                    trigger_type=trigger_type,
                    trigger_context=trigger_context,
                    trigger_reason=trigger_reason,
                    workouts=workouts,
                )
            except Exception:
                logger.exception("Evolution check failed for %s", instance.name)
                updated.append(instance)
                continue

            if evolved is not None:
                evolved_count += 1
                updated.append(evolved)
            else:
                updated.append(refreshed)

        if evolved_count == 0 and self._engine.forced:
            logger.warning(
                "Diagnostic mode: no creature evolved after %s event (%d checked)",
                kind_of(trigger),
                len(owned_instances),
            )
        return updated
