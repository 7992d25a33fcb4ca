"""
Baseline Hints Agent - Follows the engine's first hint.

This is a simple heuristic agent that decodes the observed sequence, asks
``get_hints`` where the first mirrored mismatch is, and plays the suggested
fix when the puzzle allows it.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for agents to compare against
3. A verification that the environment API works correctly

Strategy:
- A swap hint is played as a swap, a change hint as a replace
- If the hint can't be played (operation not allowed, or a target is
  pinned), try every structurally valid operation once and keep the one
  leaving the fewest edits to a palindrome (or closest to the target)
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from palintris.puzzle_core.config_loader import GameConfig, get_config
from palintris.puzzle_core.env_gym import ActionCodec
from palintris.puzzle_core.operations import (
    ALL_OPERATIONS,
    Delete,
    Insert,
    Mirror,
    Operation,
    OperationType,
    Replace,
    Rotate,
    Swap,
    apply_operation,
    is_structurally_valid,
)
from palintris.puzzle_core.palindrome import (
    HintSuggestion,
    RotateDirection,
    calculate_similarity,
    get_hints,
    min_operations_to_make_palindrome,
)


class PalindromeAgent:
    """
    Baseline agent that plays the first hint, with a one-step greedy fallback.
    """

    def __init__(self, config: Optional[GameConfig] = None, debug: bool = False):
        """
        Initialize the agent.

        Args:
            config: Game configuration (vocabulary and length cap). Uses default if None.
            debug: If True, print decisions to stdout.
        """
        self._config = config or get_config()
        self._codec = ActionCodec.from_config(self._config)
        self.debug = debug

    def reset(self, seed: Optional[int] = None) -> None:
        """Called when a new episode starts. The agent is stateless."""

    def _hint_operation(self, sequence: List[str], allowed: Sequence[OperationType]) -> Optional[Operation]:
        hints = get_hints(sequence)
        if not hints:
            return None

        hint = hints[0]
        if hint.suggestion is HintSuggestion.SWAP and OperationType.SWAP in allowed:
            return Swap(hint.position, hint.target_position)
        if hint.suggestion is HintSuggestion.CHANGE and OperationType.REPLACE in allowed:
            return Replace(hint.position, hint.target_symbol)
        return None

    def _candidates(
        self,
        sequence: List[str],
        allowed: Sequence[OperationType],
        symbols: Sequence[str]
    ) -> Iterator[Operation]:
        n = len(sequence)
        if OperationType.SWAP in allowed:
            for i in range(n - 1):
                yield Swap(i, i + 1)
        for start in range(n):
            for end in range(start + 1, n):
                if OperationType.MIRROR in allowed:
                    yield Mirror(start, end)
                if OperationType.ROTATE in allowed:
                    yield Rotate(start, end, RotateDirection.RIGHT)
                    yield Rotate(start, end, RotateDirection.LEFT)
        if OperationType.DELETE in allowed:
            for i in range(n):
                yield Delete(i)
        for symbol in symbols:
            if OperationType.REPLACE in allowed:
                for i in range(n):
                    if sequence[i] != symbol:
                        yield Replace(i, symbol)
            if OperationType.INSERT in allowed:
                for i in range(n + 1):
                    yield Insert(i, symbol)

    def _cost(self, sequence: List[str], target: Optional[List[str]]) -> Tuple[float, ...]:
        if target is None:
            return (min_operations_to_make_palindrome(sequence),)
        return (0 if sequence == target else 1, abs(len(sequence) - len(target)),
                -calculate_similarity(sequence, target))

    def _greedy_operation(
        self,
        sequence: List[str],
        allowed: Sequence[OperationType],
        target: Optional[List[str]]
    ) -> Optional[Operation]:
        session_cfg = self._config.session
        symbols = sorted(set(sequence) | set(target or []))
        best: Optional[Operation] = None
        best_cost: Optional[Tuple[float, ...]] = None

        for op in self._candidates(sequence, allowed, symbols):
            if not is_structurally_valid(
                op, len(sequence), session_cfg.max_sequence_length,
                session_cfg.min_rotate_length, session_cfg.min_mirror_length
            ):
                continue
            cost = self._cost(apply_operation(sequence, op), target)
            if best_cost is None or cost < best_cost:
                best, best_cost = op, cost
        return best

    def act(self, observation: Dict[str, Any], debug: bool = False) -> np.ndarray:
        """
        Choose the next operation.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            MultiDiscrete action [operation, first, second, symbol].
        """
        length = int(observation["length"])
        sequence = self._codec.decode_sequence(observation["sequence"][:length])
        allowed = [op for op, flag in zip(ALL_OPERATIONS, observation["allowed_operations"]) if flag]

        target = None
        if int(observation["has_target"]):
            target = self._codec.decode_sequence(observation["target"])

        op = None if target is not None else self._hint_operation(sequence, allowed)
        if op is None:
            op = self._greedy_operation(sequence, allowed, target)

        if self.debug or debug:
            print(f"[Agent] {''.join(sequence)} -> {op!r}")

        if op is None:
            # Nothing is playable; the env rejects this and the episode runs out
            return np.zeros(4, dtype=np.int64)
        return self._codec.encode_action(op)


def create_agent(debug: bool = False) -> PalindromeAgent:
    """Factory function to create a baseline agent."""
    return PalindromeAgent(debug=debug)
