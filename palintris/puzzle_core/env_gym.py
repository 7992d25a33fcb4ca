"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to a Palintris puzzle session.
Reward is always 0.0 - agents compute their own from info.

Time is virtual: every step advances the session clock and countdown by
``seconds_per_step``, so episodes are reproducible.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from palintris.puzzle_core.config_loader import GameConfig, load_config
from palintris.puzzle_core.daily import generate_daily_challenge
from palintris.puzzle_core.level import PuzzleConfig, SessionStatus
from palintris.puzzle_core.levels import get_level_by_id
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
)
from palintris.puzzle_core.palindrome import RotateDirection
from palintris.puzzle_core.session import PuzzleSession
from palintris.puzzle_core.time_attack import TimeAttackDirector


logger = logging.getLogger(__name__)


def build_vocabulary(config: GameConfig) -> List[str]:
    """Every display symbol of every category, first occurrence wins."""
    vocabulary: List[str] = []
    seen = set()
    for category in ("letters", "numbers", "shapes", "colors"):
        for symbol in config.symbols.get(category):
            if symbol not in seen:
                seen.add(symbol)
                vocabulary.append(symbol)
    return vocabulary


class ActionCodec:
    """
    Translation between symbols, operations and their integer encodings.

    Symbols are indexed into the vocabulary; -1 marks padding or a symbol
    outside it.
    """

    def __init__(self, vocabulary: List[str]):
        self.vocabulary = list(vocabulary)
        self._symbol_ids = {s: i for i, s in enumerate(self.vocabulary)}

    @classmethod
    def from_config(cls, config: GameConfig) -> "ActionCodec":
        return cls(build_vocabulary(config))

    def encode_sequence(self, sequence, size: int) -> np.ndarray:
        """Pad or cut ``sequence`` to ``size`` symbol codes."""
        encoded = np.full(size, -1, dtype=np.int16)
        for i, symbol in enumerate(sequence[:size]):
            encoded[i] = self._symbol_ids.get(symbol, -1)
        return encoded

    def decode_sequence(self, encoded) -> List[str]:
        """Symbols of the non-negative codes, in order."""
        return [self.vocabulary[int(code)] for code in encoded if int(code) >= 0]

    def decode_action(self, action: Union[np.ndarray, List[int]]) -> Operation:
        """Map a MultiDiscrete action onto an operation variant."""
        op_index, first, second, symbol_index = (int(a) for a in np.asarray(action).reshape(-1)[:4])
        op_type = ALL_OPERATIONS[op_index]
        low, high = min(first, second), max(first, second)
        symbol = self.vocabulary[symbol_index]

        if op_type is OperationType.SWAP:
            return Swap(first, second)
        if op_type is OperationType.ROTATE:
            direction = RotateDirection.RIGHT if first < second else RotateDirection.LEFT
            return Rotate(low, high, direction)
        if op_type is OperationType.MIRROR:
            return Mirror(low, high)
        if op_type is OperationType.INSERT:
            return Insert(first, symbol)
        if op_type is OperationType.DELETE:
            return Delete(first)
        return Replace(first, symbol)

    def encode_action(self, op: Operation) -> np.ndarray:
        """Inverse of decode_action."""
        op_index = ALL_OPERATIONS.index(op.type)
        symbol_index = 0
        if isinstance(op, Swap):
            first, second = op.i, op.j
        elif isinstance(op, Rotate):
            if RotateDirection(op.direction) is RotateDirection.RIGHT:
                first, second = op.start, op.end
            else:
                first, second = op.end, op.start
        elif isinstance(op, Mirror):
            first, second = op.start, op.end
        else:
            first, second = op.position, 0
            if isinstance(op, (Insert, Replace)):
                symbol_index = self._symbol_ids[op.symbol]
        return np.array([op_index, first, second, symbol_index], dtype=np.int64)


class PalindromeEnv(gym.Env):
    """
    Palintris puzzle as a Gymnasium environment.

    Action Space:
        MultiDiscrete([6, L, L, N]) with L the session length cap and N the
        symbol vocabulary size: (operation, first index, second index, symbol).
        - swap:    Swap(first, second)
        - rotate:  range [min, max]; right if first < second, else left
        - mirror:  range [min, max]
        - insert:  Insert(first, symbol)
        - delete:  Delete(first)
        - replace: Replace(first, symbol)

    Observation Space:
        Dict of the encoded sequence and target, budgets and an allowed-ops mask.

    Reward:
        Always 0.0. Agents compute their own reward from the info dict.

    Info:
        Contains valid, score, status, min_operations, operations_remaining, etc.
    """

    metadata = {
        "render_modes": ["human", "ansi"],
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        seconds_per_step: int = 1,
        max_steps: int = 200,
    ):
        """
        Initialize Palintris environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "human" to print, "ansi" to return text, None for headless.
            seconds_per_step: Virtual seconds each step takes.
            max_steps: Steps before the episode is truncated.
        """
        super().__init__()

        self._config = load_config(config_path)
        self.render_mode = render_mode
        self._seconds_per_step = seconds_per_step
        self._max_steps = max_steps

        self._max_length = self._config.session.max_sequence_length
        self._codec = ActionCodec.from_config(self._config)
        self._vocabulary = self._codec.vocabulary

        self._session: Optional[PuzzleSession] = None
        self._director: Optional[TimeAttackDirector] = None
        self._mode = "time_attack"
        self._virtual_time = 0.0
        self._steps = 0
        self._recorded = False

        self.action_space = spaces.MultiDiscrete(
            [len(ALL_OPERATIONS), self._max_length, self._max_length, len(self._vocabulary)]
        )
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        length = self._max_length
        num_symbols = len(self._vocabulary)
        big = np.iinfo(np.int32).max

        return spaces.Dict({
            "sequence": spaces.Box(low=-1, high=num_symbols - 1, shape=(length,), dtype=np.int16),
            "sequence_mask": spaces.MultiBinary(length),
            "target": spaces.Box(low=-1, high=num_symbols - 1, shape=(length,), dtype=np.int16),
            "has_target": spaces.Discrete(2),
            "length": spaces.Box(low=0, high=length, shape=(), dtype=np.int32),
            "operations_remaining": spaces.Box(low=0, high=big, shape=(), dtype=np.int32),
            "time_remaining": spaces.Box(low=-1, high=big, shape=(), dtype=np.int32),
            "allowed_operations": spaces.MultiBinary(len(ALL_OPERATIONS)),
            "min_operations": spaces.Box(low=0, high=length, shape=(), dtype=np.int32),
        })

    def _encode(self, sequence) -> np.ndarray:
        return self._codec.encode_sequence(sequence, self._max_length)

    def _select_puzzle(self, options: Dict[str, Any]) -> PuzzleConfig:
        if "puzzle" in options:
            self._mode = "custom"
            return options["puzzle"]

        if "date" in options:
            self._mode = "daily"
            return generate_daily_challenge(options["date"], self._config)

        if "level_id" in options:
            level = get_level_by_id(int(options["level_id"]))
            if level is None:
                raise ValueError(f"Unknown level id: {options['level_id']}")
            self._mode = "level"
            return level

        self._mode = "time_attack"
        return self._director.generate_puzzle()

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for time-attack puzzles.
            options: "date" (daily puzzle), "level_id" (campaign level) or
                "puzzle" (a PuzzleConfig). Time-attack puzzle otherwise.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        if self._director is None or seed is not None:
            self._director = TimeAttackDirector(self._config, rng=self.np_random)

        if self._session is not None:
            self._session.destroy()

        puzzle = self._select_puzzle(options or {})
        self._virtual_time = 0.0
        self._steps = 0
        self._recorded = False
        self._session = PuzzleSession(puzzle, self._config, clock=lambda: self._virtual_time)

        logger.debug("Reset %s puzzle %s: %s", self._mode, puzzle.id, "".join(puzzle.sequence))

        info = self._build_info(valid=True)
        return self._get_obs(), info

    def decode_action(self, action: Union[np.ndarray, List[int]]) -> Operation:
        """Map a MultiDiscrete action onto an operation variant."""
        return self._codec.decode_action(action)

    def encode_action(self, op: Operation) -> np.ndarray:
        """Inverse of decode_action, for agents that think in operations."""
        return self._codec.encode_action(op)

    def step(
        self,
        action: Union[np.ndarray, List[int]]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: MultiDiscrete action (see class docstring).

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if self._session is None:
            raise RuntimeError("Call reset() before step()")

        session = self._session
        self._steps += 1
        self._virtual_time += self._seconds_per_step

        op = self.decode_action(action)
        valid = session.apply(op)
        if valid:
            session.check_completion()
        if self._seconds_per_step > 0:
            session.tick(self._seconds_per_step)

        solved = session.status is SessionStatus.SOLVED
        out_of_moves = session.operations_remaining <= 0 and not solved
        terminated = session.is_terminal or out_of_moves
        truncated = not terminated and self._steps >= self._max_steps

        info = self._build_info(valid=valid)
        if (terminated or truncated) and self._mode == "time_attack" and not self._recorded:
            self._recorded = True
            self._record_time_attack(solved)
            info["time_attack_score"] = self._director.total_score

        logger.debug(
            "Step %d: %r valid=%s status=%s", self._steps, op, valid, session.status.value
        )

        return self._get_obs(), 0.0, terminated, truncated, info

    def _record_time_attack(self, solved: bool) -> None:
        session = self._session
        if solved:
            budget = session.puzzle.max_operations
            self._director.record_solve(
                time_remaining=0,
                moves_used=budget - session.operations_remaining,
                moves_available=budget
            )
        else:
            self._director.reset_streak()

    def _get_obs(self) -> Dict[str, np.ndarray]:
        session = self._session
        sequence = session.sequence
        target = session.puzzle.target_palindrome

        mask = np.zeros(self._max_length, dtype=np.int8)
        mask[:min(len(sequence), self._max_length)] = 1
        allowed = np.array(
            [1 if session.puzzle.allows(op) else 0 for op in ALL_OPERATIONS],
            dtype=np.int8
        )
        time_remaining = session.time_remaining

        return {
            "sequence": self._encode(sequence),
            "sequence_mask": mask,
            "target": self._encode(target) if target is not None else np.full(self._max_length, -1, dtype=np.int16),
            "has_target": np.int64(target is not None),
            "length": np.array(len(sequence), dtype=np.int32),
            "operations_remaining": np.array(session.operations_remaining, dtype=np.int32),
            "time_remaining": np.array(-1 if time_remaining is None else time_remaining, dtype=np.int32),
            "allowed_operations": allowed,
            "min_operations": np.array(session.min_operations(), dtype=np.int32),
        }

    def _build_info(self, valid: bool) -> Dict[str, Any]:
        session = self._session
        result = session.get_result()
        return {
            "valid": valid,
            "score": result.score,
            "status": session.status.value,
            "min_operations": session.min_operations(),
            "operations_remaining": session.operations_remaining,
            "operations_used": result.operation_count,
            "bonuses_achieved": result.bonuses_achieved,
            "puzzle_id": session.puzzle.id,
            "mode": self._mode,
            "sequence": session.sequence,
        }

    def render(self) -> Optional[str]:
        """
        Render the current sequence as text.

        Returns:
            The text if render_mode is "ansi", None otherwise.
        """
        if self._session is None:
            return None

        session = self._session
        time_remaining = session.time_remaining
        text = (
            f"[{' '.join(session.sequence)}]  ops={session.operations_remaining}"
            f"  time={'-' if time_remaining is None else time_remaining}"
            f"  {session.status.value}"
        )
        if self.render_mode == "ansi":
            return text
        if self.render_mode == "human":
            print(text)
        return None

    def close(self) -> None:
        """Clean up resources."""
        if self._session is not None:
            self._session.destroy()
            self._session = None

    @property
    def session(self) -> Optional[PuzzleSession]:
        """Access to underlying session (for debugging/tools)."""
        return self._session

    @property
    def vocabulary(self) -> List[str]:
        """Symbols addressed by the action's symbol index."""
        return list(self._vocabulary)

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
