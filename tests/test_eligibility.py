"""Tests for EligibilityEvaluator and ProgressTracker."""

from __future__ import annotations

import dataclasses

import pytest

from evolution_engine.chain_cache import ChainCache
from evolution_engine.eligibility import NOT_EVALUATED, EligibilityEvaluator
from evolution_engine.models.creature import Creature
from evolution_engine.models.instance import OwnedCreatureInstance
from evolution_engine.progress import ProgressTracker
from evolution_engine.requirements import RequirementCalculator


@pytest.fixture
def calculator(source, clock, now):
    return RequirementCalculator(source, clock=clock, now=lambda: now)


@pytest.fixture
def evaluator(calculator, now):
    return EligibilityEvaluator(calculator, now=lambda: now)


@pytest.fixture
def tracker(source, clock, calculator, evaluator, now):
    return ProgressTracker(ChainCache(source, clock=clock), calculator, evaluator, now=lambda: now)


CHARMANDER = Creature(id=4, name="charmander", types=("fire",))


class TestEligibility:
    def test_missing_data_is_not_eligible(self, evaluator, active_history):
        bare = OwnedCreatureInstance(creature=CHARMANDER)
        assert evaluator.can_evolve(bare, active_history) is False
        assert evaluator.explain(bare, active_history) is NOT_EVALUATED

    def test_active_user_is_eligible(self, tracker, evaluator, active_history):
        instance = tracker.load_instance(CHARMANDER, active_history)
        report = evaluator.explain(instance, active_history)
        assert report.has_enough_workouts
        assert report.has_required_types
        assert report.has_streak
        assert report.eligible
        assert instance.can_evolve

    def test_missing_type_blocks(self, tracker, evaluator, make_workout):
        history = [make_workout(days_ago=i % 7, categories=("strength",)) for i in range(20)]
        instance = tracker.load_instance(CHARMANDER, history)
        report = evaluator.explain(instance, history)
        assert report.has_enough_workouts
        assert report.missing_types == ("fire",)
        assert not report.eligible

    def test_type_check_is_case_insensitive(self, tracker, evaluator, active_history):
        instance = tracker.load_instance(CHARMANDER, active_history)
        progress = dataclasses.replace(
            instance.evolution_progress, workout_types=frozenset({"FIRE"})
        )
        shouting = dataclasses.replace(instance, evolution_progress=progress)
        assert evaluator.can_evolve(shouting, active_history)

    def test_broken_streak_blocks(self, tracker, evaluator, make_workout):
        # Plenty of old workouts, nothing today: streak 0 < 2
        history = [make_workout(days_ago=2 + i % 5) for i in range(40)]
        instance = tracker.load_instance(CHARMANDER, history)
        report = evaluator.explain(instance, history)
        assert report.streak_days == 0
        assert not report.has_streak
        assert not instance.can_evolve

    def test_weighted_count_is_floored(self, tracker, evaluator, active_history):
        instance = tracker.load_instance(CHARMANDER, active_history)
        required = evaluator.explain(instance, active_history).conditions.required_workouts
        progress = dataclasses.replace(
            instance.evolution_progress, workouts_completed_weighted=required - 0.01
        )
        short = dataclasses.replace(instance, evolution_progress=progress)
        assert not evaluator.explain(short, active_history).has_enough_workouts

    @pytest.mark.parametrize("workouts", [0, 1, 2, 5, 10, 30])
    def test_never_eligible_below_required(self, tracker, evaluator, make_workout, workouts):
        history = [make_workout(days_ago=i % 7) for i in range(workouts)]
        instance = tracker.load_instance(CHARMANDER, history)
        report = evaluator.explain(instance, history)
        weighted = instance.evolution_progress.workouts_completed_weighted
        if report.conditions.required_workouts > int(weighted):
            assert not evaluator.can_evolve(instance, history)

    def test_idempotent(self, tracker, evaluator, active_history):
        instance = tracker.load_instance(CHARMANDER, active_history)
        results = {evaluator.can_evolve(instance, active_history) for _ in range(5)}
        assert results == {True}


class TestProgressTracker:
    def test_load_instance_attaches_chain(self, tracker, active_history):
        instance = tracker.load_instance(CHARMANDER, active_history, reward_id="r1")
        assert instance.evolution_data.chain.id == 4
        assert [c.id for c in instance.evolution_data.next_evolutions] == [5]
        assert instance.reward_id == "r1"

    def test_progress_fields(self, tracker, active_history, now):
        progress = tracker.load_instance(CHARMANDER, active_history).evolution_progress
        assert progress.workouts_completed == 20
        assert progress.workouts_completed_weighted == pytest.approx(30.0)
        assert progress.workout_types == frozenset({"fire"})
        assert progress.required_workouts == 4
        assert progress.required_types == ("fire",)
        assert progress.activity_multiplier == 0.4
        assert progress.last_evolution_check == now

    def test_refresh_keeps_identity_and_level(self, tracker, active_history):
        instance = tracker.load_instance(CHARMANDER, active_history)
        leveled = dataclasses.replace(
            instance,
            evolution_progress=dataclasses.replace(instance.evolution_progress, current_level=3),
        )
        refreshed = tracker.refresh(leveled, [])
        assert refreshed.instance_id == instance.instance_id
        assert refreshed.evolution_progress.current_level == 3
        assert refreshed.evolution_progress.workouts_completed == 0
        assert not refreshed.can_evolve

    def test_final_form_has_no_next(self, tracker, active_history):
        charizard = Creature(id=6, name="charizard", types=("fire", "flying"))
        instance = tracker.load_instance(charizard, active_history)
        assert instance.evolution_data.next_evolutions == ()

    def test_load_degrades_to_bare_instance(self, tracker, active_history, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(tracker, "refresh", explode)
        instance = tracker.load_instance(CHARMANDER, active_history, reward_id="r9")
        assert instance.evolution_data is None
        assert instance.reward_id == "r9"
        assert not instance.can_evolve

    def test_find_candidates(self, tracker, active_history):
        bulbasaur = Creature(id=1, name="bulbasaur", types=("grass", "poison"))
        found = tracker.find_candidates([bulbasaur, CHARMANDER], active_history)
        assert [c.id for c in found] == [4]
