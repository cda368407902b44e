"""Custom exception hierarchy for the creature-data client."""

from __future__ import annotations


class CreatureClientError(Exception):
    """Base exception for all creature_client errors."""


class CreatureAPIError(CreatureClientError):
    """A creature-data API call failed or returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CreatureNotFoundError(CreatureAPIError):
    """HTTP 404 — the requested creature or chain does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class CreatureRateLimitError(CreatureAPIError):
    """HTTP 429 — too many requests, even after retrying."""

    def __init__(self, message: str = "Rate limited by creature-data API") -> None:
        super().__init__(message, status_code=429)


class CreatureTimeoutError(CreatureClientError):
    """The API did not answer within the configured timeout."""
