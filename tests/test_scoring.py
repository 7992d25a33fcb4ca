"""
Tests for level and time-attack scoring formulas.
"""

import pytest

from palintris.puzzle_core.config_loader import load_config
from palintris.puzzle_core.level import (
    BonusObjective,
    LevelResult,
    ObjectiveKind,
    minimum_operations,
    under_operations,
    under_time,
)
from palintris.puzzle_core.scoring import LevelScorer, round_half_up, streak_score


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def scorer(config):
    return LevelScorer(config.scoring)


def make_result(completed=True, operations=2, time_spent=20.0, undo_count=0):
    return LevelResult(
        level_id=1,
        completed=completed,
        final_sequence=("A", "B", "A"),
        operations_used=tuple(object() for _ in range(operations)),
        time_spent=time_spent,
        score=0,
        bonuses_achieved=(),
        is_palindrome=completed,
        undo_count=undo_count
    )


class TestRounding:
    """Test half-up rounding."""

    def test_halves_round_up(self):
        assert round_half_up(37.5) == 38
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2
        assert round_half_up(0) == 0


class TestLevelScorer:
    """Test the level score formula."""

    def test_solved_with_time(self, scorer):
        # (1000 + 2 * 100 + 45 * 10) * 1.75 = 2887.5
        assert scorer.score(True, 2, 45, "medium") == 2888

    def test_unsolved_gets_no_completion(self, scorer):
        breakdown = scorer.breakdown(False, 3, None, "easy")

        assert breakdown.completion == 0.0
        assert breakdown.time == 0.0
        assert breakdown.total == 375

    def test_bonus_is_not_multiplied(self, scorer):
        assert scorer.score(True, 0, None, "expert", [200, 150]) == 4350

    def test_negative_budget_is_clamped(self, scorer):
        assert scorer.breakdown(True, -2, None, "easy").operations == 0.0

    def test_unknown_difficulty(self, scorer):
        with pytest.raises(ValueError):
            scorer.score(True, 0, None, "legendary")


class TestStreakScore:
    """Test the time-attack formula."""

    def test_first_solve(self, config):
        assert streak_score(config.time_attack, 1, 0, 30, 1, 5) == 330

    def test_streak_and_difficulty(self, config):
        # (100 + 100 * 4 * 0.25 + 0 + 0) * 1.2
        assert streak_score(config.time_attack, 5, 2, 0, 5, 5) == 240


class TestBonusObjectives:
    """Test objective predicates."""

    def test_under_operations(self):
        objective = under_operations(2)

        assert objective.check(make_result(operations=2))
        assert not objective.check(make_result(operations=3))

    def test_under_time_is_strict(self):
        objective = under_time(20)

        assert not objective.check(make_result(time_spent=20.0))
        assert objective.check(make_result(time_spent=19.9))

    def test_minimum_operations(self):
        assert minimum_operations().check(make_result(operations=1))
        assert not minimum_operations().check(make_result(operations=2))

    def test_requires_completion(self):
        objective = BonusObjective(
            id="clean", description="No undo", points=100,
            kind=ObjectiveKind.NO_UNDO, requires_completion=True
        )

        assert objective.check(make_result())
        assert not objective.check(make_result(undo_count=1))
        assert not objective.check(make_result(completed=False))

    def test_plain_objectives_ignore_completion(self):
        assert under_operations(5).check(make_result(completed=False, operations=0))

    def test_to_dict(self):
        assert under_time(30).to_dict() == {
            "id": "under_30s",
            "description": "Complete in under 30 seconds",
            "points": 150,
            "kind": "under_time",
            "threshold": 30,
            "requires_completion": False,
        }
