"""Tests for RequirementCalculator and its formula helpers."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from evolution_engine.config import EvolutionEngineConfig
from evolution_engine.models.creature import Creature, EvolutionStage
from evolution_engine.requirements import (
    FINAL_FORM_CONDITION,
    RequirementCalculator,
    apply_multiplier,
    base_requirement,
    complexity_multiplier,
    special_conditions,
    streak_requirement,
)


@pytest.fixture
def calculator(source, clock, now):
    return RequirementCalculator(source, clock=clock, now=lambda: now)


class TestFormulas:
    @pytest.mark.parametrize("depth, expected", [(1, 1.0), (3, 1.0), (4, 1.2), (5, 1.5), (9, 1.5)])
    def test_complexity_multiplier(self, depth, expected):
        assert complexity_multiplier(depth) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "completed, depth, expected",
        [
            (0, 1, 5),     # floor(5 * 1.0)
            (20, 2, 8),    # floor((3 + 5) * 1.0)
            (20, 5, 12),   # floor(8 * 1.5)
            (200, 1, 20),  # clamped high
        ],
    )
    def test_base_requirement(self, completed, depth, expected):
        assert base_requirement(completed, depth) == expected

    @pytest.mark.parametrize("base, expected", [(3, 2), (8, 2), (10, 3), (20, 4)])
    def test_streak_requirement(self, base, expected):
        assert streak_requirement(base) == expected

    @pytest.mark.parametrize(
        "value, multiplier, expected",
        [(10, 0.4, 4), (10, 1.0, 10), (8, 0.6, 5), (1, 0.4, 1), (2, 0.4, 1)],
    )
    def test_apply_multiplier_ceils_with_floor_of_one(self, value, multiplier, expected):
        assert apply_multiplier(value, multiplier) == expected


class TestFinalForm:
    def test_final_form_returns_default(self, calculator, charmander_line, active_history):
        result = calculator.calculate(charmander_line, 6, active_history)
        assert result == FINAL_FORM_CONDITION
        assert result.required_workouts == 15
        assert result.required_types == ()
        assert result.min_workout_streak is None

    def test_final_form_ignores_history(self, calculator, make_workout):
        leaf = EvolutionStage(id=6, name="charizard")
        for history in ([], [make_workout()], [make_workout(days_ago=d) for d in range(40)]):
            assert calculator.calculate(leaf, 6, history) == FINAL_FORM_CONDITION

    def test_missing_chain_returns_default(self, calculator):
        assert calculator.calculate(None, 999, []) == FINAL_FORM_CONDITION


class TestDerivedRequirements:
    def test_zero_workouts_single_type_base_three(self, calculator, charmander_line):
        result = calculator.calculate(charmander_line, 4, [])
        assert result.required_workouts == 3
        assert result.required_types == ("normal",)
        assert result.min_workout_streak == 2

    def test_candidate_types_preferred(self, calculator, charmander_line, make_workout):
        result = calculator.calculate(charmander_line, 4, [make_workout(days_ago=20)])
        assert result.required_types == ("fire",)

    def test_active_user_gets_discount(self, calculator, charmander_line, active_history):
        # base 8, streak 2, multiplier 0.4
        result = calculator.calculate(charmander_line, 4, active_history)
        assert result.required_workouts == 4
        assert result.min_workout_streak == 1

    def test_inactive_user_no_discount(self, calculator, charmander_line, make_workout):
        history = [make_workout(days_ago=30 + d) for d in range(20)]
        result = calculator.calculate(charmander_line, 4, history)
        assert result.required_workouts == 8
        assert result.min_workout_streak == 2

    def test_unknown_current_id_falls_back_to_root(self, calculator, charmander_line, make_workout):
        history = [make_workout(days_ago=20)]
        assert calculator.calculate(charmander_line, 999, history) == calculator.calculate(
            charmander_line, 4, history
        )

    def test_types_capped_at_two(self, make_source, clock, now, make_workout):
        creatures = [Creature(id=2, name="b", types=("Fire", "fire", "Flying", "dragon"))]
        chain = EvolutionStage(id=1, name="a", evolves_to=(EvolutionStage(id=2, name="b"),))
        calc = RequirementCalculator(make_source(creatures, [chain]), clock=clock, now=lambda: now)
        result = calc.calculate(chain, 1, [make_workout(days_ago=20)])
        assert result.required_types == ("fire", "flying")


class TestTypeFallbacks:
    def test_user_top_two_when_lookup_fails(self, source, clock, now, charmander_line, make_workout):
        source.fail_creature_ids.add(5)
        calc = RequirementCalculator(source, clock=clock, now=lambda: now)
        history = [
            make_workout(days_ago=20, categories=("strength", "strength", "cardio")),
            make_workout(days_ago=21, categories=("yoga",)),
        ]
        assert calc.calculate(charmander_line, 4, history).required_types == ("fighting", "fire")

    def test_default_pair_when_too_few_user_types(self, clock, now, charmander_line, make_workout):
        calc = RequirementCalculator(None, clock=clock, now=lambda: now)
        history = [make_workout(days_ago=20, categories=("cardio",))]
        assert calc.calculate(charmander_line, 4, history).required_types == ("normal", "fighting")


class TestRequirementCache:
    def test_repeated_calls_hit_cache(self, clock, now, charmander_line, make_workout):
        source = MagicMock()
        source.get_types.return_value = ("fire",)
        calc = RequirementCalculator(source, clock=clock, now=lambda: now)
        history = [make_workout(days_ago=20)]
        calc.calculate(charmander_line, 4, history)
        calc.calculate(charmander_line, 4, history)
        assert source.get_types.call_count == 1

    def test_cache_expires(self, clock, now, charmander_line, make_workout):
        source = MagicMock()
        source.get_types.return_value = ("fire",)
        calc = RequirementCalculator(source, clock=clock, now=lambda: now)
        history = [make_workout(days_ago=20)]
        calc.calculate(charmander_line, 4, history)
        clock.advance(5.0)
        calc.calculate(charmander_line, 4, history)
        assert source.get_types.call_count == 2

    def test_history_change_clears_cache(self, clock, now, charmander_line, make_workout):
        source = MagicMock()
        source.get_types.return_value = ("fire",)
        config = EvolutionEngineConfig(requirement_cache_ttl_s=3600)
        calc = RequirementCalculator(source, config, clock=clock, now=lambda: now)
        history = [make_workout(days_ago=20)]
        calc.calculate(charmander_line, 4, history)
        history = history + [make_workout(days_ago=19)]
        calc.calculate(charmander_line, 4, history)
        assert source.get_types.call_count == 2


class TestSpecialConditions:
    def test_advisory_notes(self, make_workout):
        candidate = EvolutionStage(id=149, name="dragonite")
        notes = special_conditions(candidate, [make_workout()])
        assert "Complete more workouts to evolve" in notes
        assert "Try different workout types for better evolution chances" in notes
        assert "Legendary evolution - requires exceptional dedication" in notes

    def test_variety_and_volume(self, make_workout):
        candidate = EvolutionStage(id=5, name="charmeleon")
        history = [make_workout(categories=("cardio", "yoga", "strength")) for _ in range(51)]
        notes = special_conditions(candidate, history)
        assert "High workout volume detected - evolution ready" in notes
        assert "Good workout variety - supports evolution" in notes
