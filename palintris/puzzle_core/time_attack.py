"""
Time Attack
===========

Procedural puzzle director for the time-attack run: every few solves the
sequences get longer, the symbol pool wider and the move budget tighter.

The run clock belongs to the caller. Puzzles produced here are untimed; the
caller adds ``bonus_time_per_solve`` to its own clock after each solve.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from palintris.puzzle_core.config_loader import GameConfig, TimeAttackConfig, get_config
from palintris.puzzle_core.level import Difficulty, PuzzleConfig
from palintris.puzzle_core.operations import OperationType
from palintris.puzzle_core.palindrome import generate_non_palindrome
from palintris.puzzle_core.rng import RandomSource, resolve_rng
from palintris.puzzle_core.scoring import streak_score


logger = logging.getLogger(__name__)

TIME_ATTACK_LEVEL_ID_BASE = 10000


@dataclass(frozen=True)
class TimeAttackStats:
    """Snapshot of a time-attack run."""
    puzzles_solved: int
    current_streak: int
    total_score: int
    difficulty: int


def tier_for_step(difficulty: int) -> Difficulty:
    """Nominal tier label for a difficulty step (0-1 easy, 2-3 medium, 4+ hard)."""
    if difficulty < 2:
        return Difficulty.EASY
    if difficulty < 4:
        return Difficulty.MEDIUM
    return Difficulty.HARD


class TimeAttackDirector:
    """
    Generates ramping puzzles and keeps the run's score.

    Difficulty step is ``puzzles_solved // solves_per_difficulty``. It drives:
    - sequence length: base + step // 2, capped
    - move budget: starting moves - floor(step * ramp), floored
    - pool size: min pool + step // 3, capped
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize director.

        Args:
            config: Game configuration. Uses default if None.
            rng: Random source for sequences. Unseeded if None.
        """
        if config is None:
            config = get_config()

        self._config: TimeAttackConfig = config.time_attack
        self._rng = resolve_rng(rng)
        self._puzzles_generated = 0
        self.reset()

    def reset(self) -> None:
        """Start a new run."""
        self._puzzles_solved = 0
        self._current_streak = 0
        self._total_score = 0

    @property
    def starting_time(self) -> int:
        return self._config.starting_time

    @property
    def bonus_time_per_solve(self) -> int:
        return self._config.bonus_time_per_solve

    @property
    def puzzles_solved(self) -> int:
        return self._puzzles_solved

    @property
    def current_streak(self) -> int:
        return self._current_streak

    @property
    def total_score(self) -> int:
        return self._total_score

    def difficulty(self) -> int:
        """Current difficulty step."""
        return self._puzzles_solved // self._config.solves_per_difficulty

    def sequence_length(self) -> int:
        cfg = self._config
        return min(cfg.max_sequence_length, cfg.base_sequence_length + self.difficulty() // 2)

    def max_moves(self) -> int:
        cfg = self._config
        return max(cfg.min_moves, cfg.starting_moves - int(self.difficulty() * cfg.difficulty_ramp_speed))

    def pool_size(self) -> int:
        cfg = self._config
        return min(cfg.max_pool_size, cfg.min_pool_size + self.difficulty() // 3)

    def generate_puzzle(self) -> PuzzleConfig:
        """
        Generate the next puzzle for the current difficulty.

        Returns:
            An untimed PuzzleConfig whose sequence is not a palindrome.
        """
        difficulty = self.difficulty()
        length = self.sequence_length()
        moves = self.max_moves()
        pool = list(self._config.symbols[:self.pool_size()])

        sequence = generate_non_palindrome(pool, length, rng=self._rng)
        self._puzzles_generated += 1

        logger.debug(
            "Time attack puzzle #%d: step=%d, length=%d, moves=%d, pool=%s",
            self._puzzles_generated, difficulty, length, moves, pool
        )

        return PuzzleConfig(
            id=TIME_ATTACK_LEVEL_ID_BASE + self._puzzles_generated,
            name=f"Time Attack #{self._puzzles_generated}",
            sequence=tuple(sequence),
            allowed_operations=tuple(OperationType(op) for op in self._config.allowed_operations),
            max_operations=moves,
            difficulty=tier_for_step(difficulty),
            time_limit=None
        )

    def record_solve(self, time_remaining: float, moves_used: int, moves_available: int) -> int:
        """
        Record a solved puzzle.

        The solve counts toward streak and difficulty before scoring, so the
        multiplier can step up on the solve that crosses a threshold.

        Args:
            time_remaining: Seconds left on the run clock.
            moves_used: Moves spent on the puzzle.
            moves_available: Move budget the puzzle had.

        Returns:
            Points earned for this solve.
        """
        self._puzzles_solved += 1
        self._current_streak += 1

        score = streak_score(
            self._config,
            streak=self._current_streak,
            difficulty=self.difficulty(),
            time_remaining=time_remaining,
            moves_used=moves_used,
            moves_available=moves_available
        )
        self._total_score += score
        return score

    def reset_streak(self) -> None:
        """Break the streak after a failed puzzle."""
        self._current_streak = 0

    def get_stats(self) -> TimeAttackStats:
        return TimeAttackStats(
            puzzles_solved=self._puzzles_solved,
            current_streak=self._current_streak,
            total_score=self._total_score,
            difficulty=self.difficulty()
        )
