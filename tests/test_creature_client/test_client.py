"""Tests for creature_client.client — mock-based, no real network calls."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from creature_client.client import CreatureDataClient
from creature_client.exceptions import (
    CreatureAPIError,
    CreatureNotFoundError,
    CreatureRateLimitError,
    CreatureTimeoutError,
)


class FakeClock:
    def __init__(self) -> None:
        self.t = 0.0

    def __call__(self) -> float:
        return self.t


@pytest.fixture
def http():
    """Mocked requests.Session."""
    return MagicMock()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(http, clock):
    return CreatureDataClient(base_url="https://api.test/v2/", session=http, clock=clock)


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("creature_client.client.time.sleep") as sleep:
        yield sleep


# ---------------------------------------------------------------------------
# get_creature
# ---------------------------------------------------------------------------


class TestGetCreature:
    def test_fetches_and_parses(self, client, http, make_response, pokemon_data):
        http.get.return_value = make_response(200, pokemon_data)
        creature = client.get_creature(6)
        assert creature.name == "charizard"
        http.get.assert_called_once_with("https://api.test/v2/pokemon/6", timeout=10.0)

    def test_detail_cache(self, client, http, make_response, pokemon_data, clock):
        http.get.return_value = make_response(200, pokemon_data)
        client.get_creature(6)
        assert client.get_types(6) == ("fire", "flying")
        assert http.get.call_count == 1

        clock.t += 24 * 60 * 60 + 1
        client.get_creature(6)
        assert http.get.call_count == 2

    def test_clear_cache(self, client, http, make_response, pokemon_data):
        http.get.return_value = make_response(200, pokemon_data)
        client.get_creature(6)
        client.clear_cache()
        client.get_creature(6)
        assert http.get.call_count == 2

    def test_not_found(self, client, http, make_response, no_sleep):
        http.get.return_value = make_response(404)
        with pytest.raises(CreatureNotFoundError):
            client.get_creature(99999)
        assert http.get.call_count == 1
        no_sleep.assert_not_called()

    def test_malformed_payload(self, client, http, make_response):
        http.get.return_value = make_response(200, {"name": "nobody"})
        with pytest.raises(CreatureAPIError, match="Failed to parse creature"):
            client.get_creature(1)

    def test_invalid_json(self, client, http, make_response):
        http.get.return_value = make_response(200, ValueError("Expecting value"))
        with pytest.raises(CreatureAPIError, match="Invalid JSON"):
            client.get_creature(1)


# ---------------------------------------------------------------------------
# Retry behaviour
# ---------------------------------------------------------------------------


class TestRetry:
    def test_server_error_then_success(self, client, http, make_response, pokemon_data, no_sleep):
        http.get.side_effect = [make_response(503), make_response(200, pokemon_data)]
        assert client.get_creature(6).id == 6
        assert http.get.call_count == 2
        no_sleep.assert_called_once_with(1.0)

    def test_exponential_backoff(self, client, http, make_response, no_sleep):
        http.get.return_value = make_response(500)
        with pytest.raises(CreatureAPIError) as excinfo:
            client.get_creature(6)
        assert excinfo.value.status_code == 500
        assert http.get.call_count == 3
        assert [c.args[0] for c in no_sleep.call_args_list] == [1.0, 2.0]

    def test_rate_limit_exhausted(self, client, http, make_response):
        http.get.return_value = make_response(429)
        with pytest.raises(CreatureRateLimitError):
            client.get_creature(6)
        assert http.get.call_count == 3

    def test_timeout(self, client, http):
        http.get.side_effect = requests.Timeout("slow")
        with pytest.raises(CreatureTimeoutError, match="Timed out"):
            client.get_creature(6)
        assert http.get.call_count == 3

    def test_network_error_retried(self, client, http, make_response, pokemon_data):
        http.get.side_effect = [requests.ConnectionError("reset"), make_response(200, pokemon_data)]
        assert client.get_creature(6).name == "charizard"

    def test_client_error_not_retried(self, client, http, make_response, no_sleep):
        http.get.return_value = make_response(400)
        with pytest.raises(CreatureAPIError, match="HTTP 400"):
            client.get_creature(6)
        assert http.get.call_count == 1
        no_sleep.assert_not_called()


# ---------------------------------------------------------------------------
# get_evolution_chain
# ---------------------------------------------------------------------------


class TestGetEvolutionChain:
    def test_species_then_chain(self, client, http, make_response, species_data, chain_data):
        http.get.side_effect = [make_response(200, species_data), make_response(200, chain_data)]
        (root,) = client.get_evolution_chain(4)
        assert root.id == 4
        urls = [c.args[0] for c in http.get.call_args_list]
        assert urls == [
            "https://api.test/v2/pokemon-species/4",
            "https://api.test/v2/evolution-chain/2",
        ]

    def test_empty_chain_payload(self, client, http, make_response, species_data):
        http.get.side_effect = [make_response(200, species_data), make_response(200, {})]
        assert client.get_evolution_chain(4) is None

    def test_species_without_chain(self, client, http, make_response):
        http.get.return_value = make_response(200, {"name": "missingno"})
        with pytest.raises(CreatureAPIError, match="has no chain"):
            client.get_evolution_chain(0)

    def test_malformed_chain(self, client, http, make_response, species_data):
        http.get.side_effect = [
            make_response(200, species_data),
            make_response(200, {"chain": {"species": {}}}),
        ]
        with pytest.raises(CreatureAPIError, match="Failed to parse evolution chain"):
            client.get_evolution_chain(4)


class TestPreload:
    def test_skips_failures(self, client, http, make_response, pokemon_data):
        http.get.side_effect = [make_response(200, pokemon_data), make_response(404)]
        loaded = client.preload([6, 99999])
        assert [c.id for c in loaded] == [6]
