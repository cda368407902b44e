"""Engine configuration — built explicitly or from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from evolution_engine.math.activity import ActivityTier
from evolution_engine.models.enums import (
    ACTIVITY_TIERS,
    BASE_WORKOUT_WEIGHT,
    CHAIN_CACHE_TTL_S,
    EXTENDED_WORKOUT_WEIGHT,
    RECENT_WORKOUT_WEIGHT,
    REQUIREMENT_CACHE_TTL_S,
    STREAK_LOOKBACK_DAYS,
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class EvolutionEngineConfig:
    """Settings shared by every component of one evolution session.

    ``allow_forced_evolution`` is the diagnostic mode: transitions skip the
    eligibility check and fall back to an ``id + 1`` target when the chain
    offers none. Never enable it for real users.
    """

    allow_forced_evolution: bool = False
    chain_cache_ttl_s: float = CHAIN_CACHE_TTL_S
    requirement_cache_ttl_s: float = REQUIREMENT_CACHE_TTL_S
    streak_lookback_days: int = STREAK_LOOKBACK_DAYS
    workout_weights: tuple[float, float, float] = (
        RECENT_WORKOUT_WEIGHT,
        EXTENDED_WORKOUT_WEIGHT,
        BASE_WORKOUT_WEIGHT,
    )
    activity_tiers: tuple[ActivityTier, ...] = field(default_factory=lambda: ACTIVITY_TIERS)
    http_timeout_s: float = 10.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EvolutionEngineConfig":
        """Read overrides from ``EVOLUTION_*`` / ``CREATURE_API_*`` variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            allow_forced_evolution=env.get("EVOLUTION_FORCED_MODE", "").strip().lower() in _TRUTHY,
            chain_cache_ttl_s=float(env.get("EVOLUTION_CHAIN_TTL_S", defaults.chain_cache_ttl_s)),
            requirement_cache_ttl_s=float(
                env.get("EVOLUTION_REQUIREMENT_TTL_S", defaults.requirement_cache_ttl_s)
            ),
            streak_lookback_days=int(
                env.get("EVOLUTION_STREAK_LOOKBACK_DAYS", defaults.streak_lookback_days)
            ),
            http_timeout_s=float(env.get("CREATURE_API_TIMEOUT_S", defaults.http_timeout_s)),
        )
