"""
Scoring System
==============

Level and time-attack score formulas. All constants come from the injected
configuration.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from palintris.puzzle_core.config_loader import ScoringConfig, TimeAttackConfig


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoreBreakdown:
    """Components of a level score."""
    completion: float
    operations: float
    time: float
    multiplier: float
    bonus: int

    @property
    def total(self) -> int:
        """Final integer score."""
        return round_half_up((self.completion + self.operations + self.time) * self.multiplier) + self.bonus

    def __repr__(self) -> str:
        return (
            f"ScoreBreakdown(total={self.total}, completion={self.completion}, "
            f"ops={self.operations}, time={self.time}, x{self.multiplier}, bonus={self.bonus})"
        )


class LevelScorer:
    """
    Computes the score of a single puzzle attempt.

    ``(completion + unused_ops * op_bonus + time_left * time_bonus) * tier
    multiplier + bonus objective points``, where the completion part is only
    awarded for a solved puzzle.
    """

    def __init__(self, config: ScoringConfig):
        """
        Initialize scorer.

        Args:
            config: Scoring section of the game configuration.
        """
        self._config = config

    def breakdown(
        self,
        solved: bool,
        operations_remaining: int,
        time_remaining: Optional[float],
        difficulty: str,
        bonus_points: Iterable[int] = ()
    ) -> ScoreBreakdown:
        """
        Break a score into its parts.

        Args:
            solved: Whether the puzzle reached the solved state.
            operations_remaining: Unused operation budget.
            time_remaining: Seconds left, or None for untimed puzzles.
            difficulty: Tier name selecting the multiplier.
            bonus_points: Points of each satisfied bonus objective.

        Returns:
            ScoreBreakdown for the attempt.
        """
        cfg = self._config
        return ScoreBreakdown(
            completion=float(cfg.base_complete) if solved else 0.0,
            operations=float(max(0, operations_remaining) * cfg.operation_bonus),
            time=float(time_remaining * cfg.time_bonus) if time_remaining is not None else 0.0,
            multiplier=cfg.multiplier_for(str(getattr(difficulty, "value", difficulty))),
            bonus=sum(bonus_points)
        )

    def score(self, *args, **kwargs) -> int:
        """Shorthand for ``breakdown(...).total``."""
        return self.breakdown(*args, **kwargs).total


def streak_score(
    config: TimeAttackConfig,
    streak: int,
    difficulty: int,
    time_remaining: float,
    moves_used: int,
    moves_available: int
) -> int:
    """
    Score for one solved time-attack puzzle.

    Args:
        config: Time attack configuration.
        streak: Current streak, already counting this solve.
        difficulty: Current difficulty step, already counting this solve.
        time_remaining: Seconds left on the run clock.
        moves_used: Moves spent on this puzzle.
        moves_available: Move budget of this puzzle.

    Returns:
        Integer score, floored.
    """
    base = config.score_base
    score = base + base * (streak - 1) * config.streak_bonus_multiplier
    score += (moves_available - moves_used) * config.move_bonus
    score += math.floor(time_remaining * config.time_bonus)
    multiplier = 1 + difficulty * config.difficulty_score_step
    return int(math.floor(score * multiplier))
