"""Serialization module — evolution history and rewards to JSON-compatible dicts."""

from evolution_engine.serialization.history import (
    event_from_dict,
    event_to_dict,
    event_to_json,
    reward_from_dict,
    reward_to_dict,
)

__all__ = [
    "event_from_dict",
    "event_to_dict",
    "event_to_json",
    "reward_from_dict",
    "reward_to_dict",
]
