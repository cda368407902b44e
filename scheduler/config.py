"""Environment-variable-based configuration for the nightly scheduler."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.environ.get("EVOLUTION_DATA_DIR", "~/.workout-evolution")).expanduser()
CREATURE_API_URL: str = os.environ.get("CREATURE_API_URL", "https://pokeapi.co/api/v2")
NIGHTLY_HOUR: int = int(os.environ.get("SCHEDULER_HOUR", "21"))
NIGHTLY_MINUTE: int = int(os.environ.get("SCHEDULER_MINUTE", "0"))
STREAK_REWARD_INTERVAL_DAYS: int = int(os.environ.get("STREAK_REWARD_INTERVAL_DAYS", "3"))
