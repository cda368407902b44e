"""High-level creature-data API client facade (PokeAPI).

All methods wrap raw HTTP calls with a bounded timeout, retry with
exponential backoff, and a TTL cache for creature details.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

import requests

from creature_client.chain_parser import (
    evolution_chain_id,
    parse_creature,
    parse_evolution_chain,
)
from creature_client.exceptions import (
    CreatureAPIError,
    CreatureNotFoundError,
    CreatureRateLimitError,
    CreatureTimeoutError,
)
from evolution_engine.cache import TTLCache
from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.models.enums import CREATURE_DETAIL_TTL_S

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_TIMEOUT_S = 10.0
_MAX_RETRIES = 3
_BASE_BACKOFF_S = 1.0
_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


class CreatureDataClient:
    """Facade for creature detail and evolution-chain lookups."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        session: requests.Session | None = None,
        detail_ttl_s: float = CREATURE_DETAIL_TTL_S,
        clock: Callable[[], float] = time.monotonic,
        max_retries: int = _MAX_RETRIES,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._session = session or requests.Session()
        self._max_retries = max_retries
        self._details: TTLCache[int, Creature] = TTLCache(detail_ttl_s, clock=clock)

    # ------------------------------------------------------------------
    # Creature details
    # ------------------------------------------------------------------

    def get_creature(self, creature_id: int) -> Creature:
        """Fetch display data for a creature, served from cache when fresh."""
        cached = self._details.get(creature_id)
        if cached is not None:
            return cached

        data = self._get_json(f"/pokemon/{creature_id}")
        try:
            creature = parse_creature(data)
        except ValueError as exc:
            raise CreatureAPIError(f"Failed to parse creature {creature_id}: {exc}") from exc
        self._details.set(creature_id, creature)
        return creature

    def get_types(self, creature_id: int) -> tuple[str, ...]:
        """Elemental types of a creature (uses the detail cache)."""
        return self.get_creature(creature_id).types

    def preload(self, creature_ids: Iterable[int]) -> list[Creature]:
        """Warm the detail cache. Failures are logged and skipped."""
        loaded: list[Creature] = []
        for creature_id in creature_ids:
            try:
                loaded.append(self.get_creature(creature_id))
            except Exception:
                logger.warning("Failed to preload creature %d", creature_id)
        return loaded

    def clear_cache(self) -> None:
        self._details.clear()

    # ------------------------------------------------------------------
    # Evolution chains
    # ------------------------------------------------------------------

    def get_evolution_chain(self, creature_id: int) -> tuple[EvolutionStage, ...] | None:
        """Fetch the evolution chain containing *creature_id*.

        Two requests: the species resource gives the chain id, then the
        chain itself is fetched and parsed. Returns ``None`` when the chain
        payload is empty.
        """
        species = self._get_json(f"/pokemon-species/{creature_id}")
        try:
            chain_id = evolution_chain_id(species)
        except ValueError as exc:
            raise CreatureAPIError(f"Species {creature_id} has no chain: {exc}") from exc

        data = self._get_json(f"/evolution-chain/{chain_id}")
        if not data:
            return None
        try:
            chain = parse_evolution_chain(data)
        except ValueError as exc:
            raise CreatureAPIError(f"Failed to parse evolution chain {chain_id}: {exc}") from exc
        logger.info("Fetched evolution chain %d for creature %d", chain_id, creature_id)
        return chain

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_json(self, path: str) -> Any:
        """GET *path* with retry + exponential backoff on 429 / 5xx / network errors."""
        url = f"{self._base_url}{path}"
        last_exc: Exception | None = None
        for attempt in range(self._max_retries):
            try:
                response = self._session.get(url, timeout=self._timeout_s)
            except requests.Timeout as exc:
                last_exc = CreatureTimeoutError(
                    f"Timed out after {self._timeout_s:.0f}s fetching {path}"
                )
                last_exc.__cause__ = exc
            except requests.RequestException as exc:
                last_exc = CreatureAPIError(f"Network error fetching {path}: {exc}")
                last_exc.__cause__ = exc
            else:
                status = response.status_code
                if status == 404:
                    raise CreatureNotFoundError(f"Not found: {path}")
                if status in _RETRYABLE_STATUS:
                    last_exc = CreatureAPIError(
                        f"HTTP {status} fetching {path}", status_code=status
                    )
                elif status >= 400:
                    # Non-retryable error
                    raise CreatureAPIError(f"HTTP {status} fetching {path}", status_code=status)
                else:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise CreatureAPIError(f"Invalid JSON from {path}: {exc}") from exc

            if attempt + 1 < self._max_retries:
                wait = _BASE_BACKOFF_S * (2 ** attempt)
                logger.warning(
                    "Request to %s failed (attempt %d/%d), retrying in %.0fs: %s",
                    path,
                    attempt + 1,
                    self._max_retries,
                    wait,
                    last_exc,
                )
                time.sleep(wait)

        if isinstance(last_exc, CreatureAPIError) and last_exc.status_code == 429:
            raise CreatureRateLimitError(
                f"Rate limited after {self._max_retries} retries: {last_exc}"
            )
        raise last_exc if last_exc is not None else CreatureAPIError(f"Request to {path} failed")
