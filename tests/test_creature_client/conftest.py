"""Fixtures with realistic PokeAPI response dicts for testing."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest


def _species(name: str, creature_id: int) -> dict:
    return {"name": name, "url": f"https://pokeapi.co/api/v2/pokemon-species/{creature_id}/"}


@pytest.fixture
def pokemon_data() -> dict:
    """Trimmed ``/pokemon/6`` response."""
    return {
        "id": 6,
        "name": "charizard",
        "types": [
            {"slot": 2, "type": {"name": "flying", "url": "https://pokeapi.co/api/v2/type/3/"}},
            {"slot": 1, "type": {"name": "fire", "url": "https://pokeapi.co/api/v2/type/10/"}},
        ],
        "sprites": {
            "front_default": "https://example.test/sprites/6.png",
            "versions": {
                "generation-v": {
                    "black-white": {
                        "front_default": "https://example.test/bw/6.png",
                        "animated": {"front_default": "https://example.test/bw/animated/6.gif"},
                    }
                }
            },
        },
    }


@pytest.fixture
def species_data() -> dict:
    """Trimmed ``/pokemon-species/4`` response."""
    return {
        "id": 4,
        "name": "charmander",
        "evolution_chain": {"url": "https://pokeapi.co/api/v2/evolution-chain/2/"},
    }


@pytest.fixture
def chain_data() -> dict:
    """Trimmed ``/evolution-chain/2`` response."""
    return {
        "id": 2,
        "chain": {
            "species": _species("charmander", 4),
            "evolution_details": [],
            "evolves_to": [
                {
                    "species": _species("charmeleon", 5),
                    "evolution_details": [
                        {"trigger": {"name": "level-up"}, "min_level": 16, "item": None}
                    ],
                    "evolves_to": [
                        {
                            "species": _species("charizard", 6),
                            "evolution_details": [
                                {"trigger": {"name": "level-up"}, "min_level": 36, "time_of_day": ""}
                            ],
                            "evolves_to": [],
                        }
                    ],
                }
            ],
        },
    }


@pytest.fixture
def branching_chain_data() -> dict:
    """Eevee-style chain with several direct evolutions."""
    return {
        "chain": {
            "species": _species("eevee", 133),
            "evolves_to": [
                {
                    "species": _species("vaporeon", 134),
                    "evolution_details": [{"trigger": {"name": "use-item"}, "item": {"name": "water-stone"}}],
                    "evolves_to": [],
                },
                {
                    "species": _species("espeon", 196),
                    "evolution_details": [
                        {"trigger": {"name": "level-up"}, "time_of_day": "day", "min_happiness": 160}
                    ],
                    "evolves_to": [],
                },
            ],
        }
    }


@pytest.fixture
def make_response():
    """Factory for a mocked requests.Response."""

    def _make(status: int = 200, payload=None) -> MagicMock:
        response = MagicMock()
        response.status_code = status
        if isinstance(payload, Exception):
            response.json.side_effect = payload
        else:
            response.json.return_value = payload
        return response

    return _make
