"""ChainCache — time-bounded memoization over external evolution-chain lookups.

Callers always get ``EvolutionStage | None``: lookup failures degrade to a
small built-in table of well-known root species, and then to ``None``.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from evolution_engine.cache import TTLCache
from evolution_engine.interfaces import CreatureDataSource
from evolution_engine.models.creature import EvolutionStage
from evolution_engine.models.enums import CHAIN_CACHE_TTL_S

logger = logging.getLogger(__name__)


def _line(root: tuple[int, str], *rest: tuple[int, str]) -> EvolutionStage:
    """Build a linear chain from (id, name) pairs, root first."""
    children = (_line(*rest),) if rest else ()
    return EvolutionStage(id=root[0], name=root[1], evolves_to=children)


# Only used when the creature-data API is unavailable.
FALLBACK_CHAINS: dict[int, EvolutionStage] = {
    1: _line((1, "bulbasaur"), (2, "ivysaur"), (3, "venusaur")),
    4: _line((4, "charmander"), (5, "charmeleon"), (6, "charizard")),
    7: _line((7, "squirtle"), (8, "wartortle"), (9, "blastoise")),
    25: _line((25, "pikachu"), (26, "raichu")),
    252: _line((252, "treecko"), (253, "grovyle"), (254, "sceptile")),
    255: _line((255, "torchic"), (256, "combusken"), (257, "blaziken")),
    258: _line((258, "mudkip"), (259, "marshtomp"), (260, "swampert")),
}


class ChainCache:
    """Caches evolution chains (root stage) per creature id for ``ttl_s`` seconds."""

    def __init__(
        self,
        source: CreatureDataSource,
        ttl_s: float = CHAIN_CACHE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
        fallback: dict[int, EvolutionStage] | None = None,
    ) -> None:
        self._source = source
        self._cache: TTLCache[int, EvolutionStage] = TTLCache(ttl_s, clock=clock)
        self._fallback = FALLBACK_CHAINS if fallback is None else fallback

    def get_chain(self, creature_id: int) -> EvolutionStage | None:
        """Return the root of the chain containing *creature_id*, or ``None``."""
        cached = self._cache.get(creature_id)
        if cached is not None:
            logger.debug("Chain cache hit for creature %d", creature_id)
            return cached

        try:
            chain = self._source.get_evolution_chain(creature_id)
            if chain:
                root = chain[0]
                if not isinstance(root, EvolutionStage):
                    raise TypeError(f"unexpected chain node {type(root).__name__}")
                self._cache.set(creature_id, root)
                return root
            logger.warning("Empty evolution chain for creature %d", creature_id)
        except Exception as exc:
            logger.warning("Evolution chain lookup failed for creature %d: %s", creature_id, exc)

        fallback = self._fallback.get(creature_id)
        if fallback is not None:
            logger.info("Using fallback evolution chain for creature %d", creature_id)
            self._cache.set(creature_id, fallback)
            return fallback

        logger.warning("No evolution data found for creature %d", creature_id)
        return None

    def purge_expired(self) -> int:
        return self._cache.purge_expired()

    def clear(self) -> None:
        self._cache.clear()
        logger.info("Evolution chain cache cleared")

    @property
    def fallback_root_ids(self) -> tuple[int, ...]:
        """Ids of the built-in root species (the base creatures handed out as rewards)."""
        return tuple(self._fallback)
