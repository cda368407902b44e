"""Local persistence for workouts, rewards and evolution history.

A directory of JSON files stands in for the browser key-value store the
tracker UI uses; each key is one file. Persistence is best-effort: read and
write failures are logged and the caller keeps its in-memory state.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Sequence

from evolution_engine.models.event import EvolutionEvent
from evolution_engine.models.reward import CreatureReward
from evolution_engine.models.workout import WorkoutRecord, workout_from_dict
from evolution_engine.serialization.history import (
    event_from_dict,
    event_to_dict,
    reward_from_dict,
    reward_to_dict,
)

logger = logging.getLogger(__name__)

WORKOUTS_KEY = "fittracker_workouts"
REWARDS_KEY = "pokemonRewards"
HISTORY_KEY = "evolutionHistory"


class JsonKeyValueStore:
    """One JSON document per key under *root*. Writes replace the file atomically."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).expanduser()

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def read(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            with open(path) as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Failed to read %s: %s", path, exc)
            return default

    def write(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(value, f, indent=2)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write %s: %s", path, exc)
            return False
        return True

    def set_aside(self, key: str) -> Path | None:
        """Move an unreadable document out of the way; returns its new path."""
        path = self.path_for(key)
        stamp = time.strftime("%Y%m%dT%H%M%S")
        target = path.with_name(f"{key}.corrupt-{stamp}.json")
        n = 1
        while target.exists():
            target = path.with_name(f"{key}.corrupt-{stamp}-{n}.json")
            n += 1
        try:
            os.replace(path, target)
        except OSError as exc:
            logger.error("Failed to move %s aside: %s", path, exc)
            return None
        logger.error("Moved unreadable %s to %s", path, target)
        return target


# ---------------------------------------------------------------------------
# JSON-backed stores
# ---------------------------------------------------------------------------


def _records(raw: Any, key: str) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.error("Expected a list under %s, got %s", key, type(raw).__name__)
        return []
    return raw


class JsonWorkoutStore:
    """Reads the workout log the tracker writes. Read-only from the engine's side."""

    def __init__(self, kv: JsonKeyValueStore, key: str = WORKOUTS_KEY) -> None:
        self._kv = kv
        self._key = key

    def get_workouts(self) -> list[WorkoutRecord]:
        workouts = []
        for raw in _records(self._kv.read(self._key), self._key):
            try:
                workouts.append(workout_from_dict(raw))
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed workout: %s", exc)
        return workouts

    def get_completed_workouts(self) -> list[WorkoutRecord]:
        return [w for w in self.get_workouts() if w.completed]


class JsonRewardStore:
    def __init__(self, kv: JsonKeyValueStore, key: str = REWARDS_KEY) -> None:
        self._kv = kv
        self._key = key

    def load(self) -> list[CreatureReward]:
        rewards = []
        for raw in _records(self._kv.read(self._key), self._key):
            try:
                rewards.append(reward_from_dict(raw))
            except ValueError as exc:
                logger.warning("Skipping malformed reward: %s", exc)
        return rewards

    def persist(self, rewards: Sequence[CreatureReward]) -> None:
        self._kv.write(self._key, [reward_to_dict(r) for r in rewards])


class JsonHistoryStore:
    """Append-only evolution history."""

    def __init__(self, kv: JsonKeyValueStore, key: str = HISTORY_KEY) -> None:
        self._kv = kv
        self._key = key

    def load(self) -> list[EvolutionEvent]:
        events = []
        for raw in _records(self._kv.read(self._key), self._key):
            try:
                events.append(event_from_dict(raw))
            except ValueError as exc:
                logger.warning("Skipping malformed evolution event: %s", exc)
        return events

    def append(self, event: EvolutionEvent) -> None:
        raw = self._kv.read(self._key)
        if not isinstance(raw, list) and self._kv.path_for(self._key).exists():
            # Never overwrite a log we could not parse.
            if self._kv.set_aside(self._key) is None:
                logger.error("Not recording evolution of %s; history is unreadable", event.from_creature.name)
                return
            raw = []
        raw = _records(raw, self._key)
        raw.append(event_to_dict(event))
        if self._kv.write(self._key, raw):
            logger.info("Recorded evolution %s -> %s", event.from_creature.name, event.to_creature.name)


# ---------------------------------------------------------------------------
# In-memory stores
# ---------------------------------------------------------------------------


class InMemoryWorkoutStore:
    def __init__(self, workouts: Sequence[WorkoutRecord] = ()) -> None:
        self.workouts = list(workouts)

    def add(self, workout: WorkoutRecord) -> None:
        self.workouts.append(workout)

    def get_workouts(self) -> list[WorkoutRecord]:
        return list(self.workouts)

    def get_completed_workouts(self) -> list[WorkoutRecord]:
        return [w for w in self.workouts if w.completed]


class InMemoryRewardStore:
    def __init__(self, rewards: Sequence[CreatureReward] = ()) -> None:
        self.rewards = list(rewards)

    def load(self) -> list[CreatureReward]:
        return list(self.rewards)

    def persist(self, rewards: Sequence[CreatureReward]) -> None:
        self.rewards = list(rewards)


class InMemoryHistoryStore:
    def __init__(self) -> None:
        self.events: list[EvolutionEvent] = []

    def load(self) -> list[EvolutionEvent]:
        return list(self.events)

    def append(self, event: EvolutionEvent) -> None:
        self.events.append(event)
