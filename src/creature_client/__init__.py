"""Creature-data API client — all network I/O lives here."""

from creature_client.client import CreatureDataClient
from creature_client.exceptions import (
    CreatureAPIError,
    CreatureClientError,
    CreatureNotFoundError,
    CreatureRateLimitError,
    CreatureTimeoutError,
)

__all__ = [
    "CreatureDataClient",
    "CreatureAPIError",
    "CreatureClientError",
    "CreatureNotFoundError",
    "CreatureRateLimitError",
    "CreatureTimeoutError",
]
