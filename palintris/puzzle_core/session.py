"""
Puzzle Session
==============

Stateful controller for one puzzle attempt: owns the sequence, operation and
time budgets, history and scoring.

The session never schedules anything. Time only moves when the caller invokes
``tick``; a caller that drives it from its own timer can hand the session the
timer's registration so ``destroy`` cancels it.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Protocol, Union

from palintris.puzzle_core.config_loader import GameConfig, get_config
from palintris.puzzle_core.level import (
    LevelResult,
    OperationRecord,
    PuzzleConfig,
    SessionStatus,
)
from palintris.puzzle_core.operations import (
    Delete,
    Insert,
    Operation,
    OperationType,
    Replace,
    Swap,
    apply_operation,
    build_operation,
    is_structurally_valid,
)
from palintris.puzzle_core.palindrome import (
    PalindromeHint,
    RotateDirection,
    get_hints,
    is_palindrome,
    min_operations_to_make_palindrome,
)
from palintris.puzzle_core.scoring import LevelScorer


logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TimerRegistration(Protocol):
    """Handle of an externally scheduled timer."""

    def cancel(self) -> None:
        ...


@dataclass
class PuzzleState:
    """Mutable per-attempt state; only the owning session changes it."""
    sequence: List[str]
    operations_remaining: int
    time_remaining: Optional[int]
    history: List[OperationRecord] = field(default_factory=list)
    status: SessionStatus = SessionStatus.ACTIVE
    undo_count: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status is not SessionStatus.ACTIVE

    def copy(self) -> "PuzzleState":
        return replace(self, sequence=list(self.sequence), history=list(self.history))


class PuzzleSession:
    """
    One attempt at a puzzle.

    State machine:
    - active -> solved   via check_completion()
    - active -> expired  via tick() reaching zero
    Terminal states never change again.
    """

    def __init__(
        self,
        puzzle: PuzzleConfig,
        config: Optional[GameConfig] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize session.

        Args:
            puzzle: Puzzle to play. Not modified.
            config: Game configuration. Uses default if None.
            clock: Zero-argument callable returning seconds. Used only for
                history timestamps and elapsed time. time.monotonic if None.
        """
        if config is None:
            config = get_config()

        self._puzzle = puzzle
        self._config = config
        self._clock = clock or time.monotonic
        self._scorer = LevelScorer(config.scoring)

        self._state = PuzzleState(
            sequence=list(puzzle.sequence),
            operations_remaining=puzzle.max_operations,
            time_remaining=puzzle.time_limit
        )
        # Sequence before each history entry, for undo
        self._previous_sequences: List[List[str]] = []

        self._started_at = self._clock()
        self._ended_at: Optional[float] = None
        self._destroyed = False

        self._timer: Optional[TimerRegistration] = None
        self._on_time_update: Optional[Callable[[int], None]] = None
        self._on_expired: Optional[Callable[[], None]] = None

    @property
    def puzzle(self) -> PuzzleConfig:
        """Puzzle being played."""
        return self._puzzle

    @property
    def sequence(self) -> List[str]:
        """Copy of the current sequence."""
        return list(self._state.sequence)

    @property
    def operations_remaining(self) -> int:
        return self._state.operations_remaining

    @property
    def time_remaining(self) -> Optional[int]:
        """Seconds left, or None for untimed puzzles."""
        return self._state.time_remaining

    @property
    def history(self) -> List[OperationRecord]:
        return list(self._state.history)

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    @property
    def undo_count(self) -> int:
        return self._state.undo_count

    def get_state(self) -> PuzzleState:
        """Detached copy of the current state."""
        return self._state.copy()

    def set_time_callbacks(
        self,
        on_update: Optional[Callable[[int], None]] = None,
        on_expired: Optional[Callable[[], None]] = None
    ) -> None:
        """
        Register notification hooks for timed sessions.

        Args:
            on_update: Called with the new time remaining after each tick.
            on_expired: Called once when time runs out.
        """
        self._on_time_update = on_update
        self._on_expired = on_expired

    def bind_timer(self, registration: TimerRegistration) -> None:
        """Take ownership of the caller's timer registration for destroy()."""
        self._timer = registration

    def _elapsed(self) -> float:
        end = self._ended_at if self._ended_at is not None else self._clock()
        return end - self._started_at

    def _finish(self, status: SessionStatus) -> None:
        self._state.status = status
        self._ended_at = self._clock()
        logger.info(
            "Puzzle %s %s after %d operations",
            self._puzzle.id, status.value, len(self._state.history)
        )

    def can_apply_operation(self, op_type: Union[OperationType, str]) -> bool:
        """True if an operation of this type may be attempted right now."""
        if self._destroyed or self._state.is_terminal:
            return False
        if self._state.operations_remaining <= 0:
            return False
        try:
            return self._puzzle.allows(OperationType(op_type))
        except ValueError:
            return False

    def apply(self, op: Operation) -> bool:
        """
        Apply an operation if it is allowed and structurally valid.

        Args:
            op: Operation variant.

        Returns:
            True if applied. False leaves the state untouched.
        """
        if not self.can_apply_operation(op.type):
            logger.debug("Rejected %s: not allowed in current state", op.type.value)
            return False

        sequence = self._state.sequence
        session_cfg = self._config.session
        if not is_structurally_valid(
            op,
            len(sequence),
            session_cfg.max_sequence_length,
            session_cfg.min_rotate_length,
            session_cfg.min_mirror_length
        ):
            logger.debug("Rejected %r on sequence of length %d", op, len(sequence))
            return False

        record = OperationRecord(
            operation=op.type,
            position=op.position,
            target_position=op.j if isinstance(op, Swap) else getattr(op, "end", None),
            symbol=self._affected_symbol(op, sequence),
            timestamp=self._elapsed(),
            detail=op
        )

        self._previous_sequences.append(list(sequence))
        self._state.sequence = apply_operation(sequence, op)
        self._state.operations_remaining -= 1
        self._state.history.append(record)
        return True

    @staticmethod
    def _affected_symbol(op: Operation, sequence: List[str]) -> Optional[str]:
        if isinstance(op, (Insert, Replace)):
            return op.symbol
        if isinstance(op, Delete):
            return sequence[op.position]
        if isinstance(op, Swap):
            return sequence[op.i]
        return None

    def apply_operation(
        self,
        op_type: Union[OperationType, str],
        position: int,
        target_position: Optional[int] = None,
        symbol: Optional[str] = None,
        direction: Union[RotateDirection, str, None] = None,
        start: Optional[int] = None,
        end: Optional[int] = None
    ) -> bool:
        """
        Apply an operation given as a type tag plus options.

        Args:
            op_type: Operation tag.
            position: Primary index.
            target_position: Swap partner index.
            symbol: Symbol for insert/replace.
            direction: Rotate direction ("left"/"right"), right by default.
            start: Rotate/mirror range start, 0 by default.
            end: Rotate/mirror inclusive range end, last index by default.

        Returns:
            True if applied. False if rejected or a required option is missing.
        """
        op = build_operation(
            op_type,
            position,
            len(self._state.sequence),
            target_position=target_position,
            symbol=symbol,
            direction=direction,
            start=start,
            end=end
        )
        if op is None:
            logger.debug("Rejected %s: missing or invalid options", op_type)
            return False
        return self.apply(op)

    def undo(self) -> bool:
        """
        Revert the last applied operation.

        The operation budget is not refunded.

        Returns:
            True if an operation was reverted.
        """
        if self._destroyed or self._state.is_terminal or not self._state.history:
            return False

        self._state.sequence = self._previous_sequences.pop()
        self._state.history.pop()
        self._state.undo_count += 1
        return True

    def tick(self, seconds: int = 1) -> None:
        """
        Advance the countdown of a timed session.

        Args:
            seconds: Seconds elapsed since the previous tick.

        Raises:
            ValueError: If ``seconds`` is negative.
        """
        if seconds < 0:
            raise ValueError(f"tick seconds must be non-negative, got {seconds}")
        if self._destroyed or self._state.is_terminal:
            return
        if self._state.time_remaining is None:
            return

        self._state.time_remaining = max(0, self._state.time_remaining - seconds)
        if self._on_time_update is not None:
            self._on_time_update(self._state.time_remaining)

        if self._state.time_remaining == 0:
            self._finish(SessionStatus.EXPIRED)
            if self._on_expired is not None:
                self._on_expired()

    def check_completion(self) -> bool:
        """
        Check whether the puzzle is solved, marking it solved if so.

        Returns:
            True if the sequence is a palindrome and matches the target, when
            one is set. Always False once expired.
        """
        if self._state.status is SessionStatus.SOLVED:
            return True
        if self._state.status is SessionStatus.EXPIRED or self._destroyed:
            return False

        sequence = self._state.sequence
        if not is_palindrome(sequence):
            return False
        target = self._puzzle.target_palindrome
        if target is not None and tuple(sequence) != tuple(target):
            return False

        self._finish(SessionStatus.SOLVED)
        return True

    def hints(self) -> List[PalindromeHint]:
        """Hints for the current sequence."""
        return get_hints(self._state.sequence)

    def min_operations(self) -> int:
        """Minimum single-symbol edits from the current sequence to a palindrome."""
        return min_operations_to_make_palindrome(self._state.sequence)

    def get_result(self) -> LevelResult:
        """
        Build the attempt result.

        Bonus objectives are each checked once against a provisional result
        with a zero score. An unsolved attempt scores 0 and earns no bonuses.
        """
        state = self._state
        completed = state.status is SessionStatus.SOLVED
        provisional = LevelResult(
            level_id=self._puzzle.id,
            completed=completed,
            final_sequence=tuple(state.sequence),
            operations_used=tuple(state.history),
            time_spent=self._elapsed(),
            score=0,
            bonuses_achieved=(),
            is_palindrome=is_palindrome(state.sequence),
            undo_count=state.undo_count,
            status=state.status
        )

        if not completed:
            return provisional

        achieved = [b for b in self._puzzle.bonus_objectives if b.check(provisional)]
        score = self._scorer.score(
            solved=completed,
            operations_remaining=state.operations_remaining,
            time_remaining=state.time_remaining,
            difficulty=self._puzzle.difficulty,
            bonus_points=[b.points for b in achieved]
        )

        return replace(
            provisional,
            score=score,
            bonuses_achieved=tuple(b.id for b in achieved)
        )

    def destroy(self) -> None:
        """Cancel the bound timer and disable the session."""
        if self._destroyed:
            return
        self._destroyed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._on_time_update = None
        self._on_expired = None
