"""
Puzzle Core - The heart of the Palintris engine.

This module provides the sequence algebra, the puzzle session state machine,
scoring, and the daily and time-attack puzzle generators, plus a Gymnasium
environment wrapper for automated solvers.

Main exports:
- PuzzleSession: One attempt at a puzzle (operations, budgets, completion)
- PuzzleConfig: Immutable puzzle description
- generate_daily_challenge: Deterministic puzzle for a YYYY-MM-DD date
- TimeAttackDirector: Ramping procedural puzzles for time attack runs
- PalindromeEnv: Gymnasium environment over a session
- GameConfig: Configuration loaded from game_config.yaml
"""

from palintris.puzzle_core.config_loader import GameConfig, get_config, load_config, reload_config
from palintris.puzzle_core.daily import (
    DailyChallengeGenerator,
    calculate_daily_challenge_reward,
    calculate_streak,
    generate_daily_challenge,
    get_today_date_string,
)
from palintris.puzzle_core.env_gym import PalindromeEnv
from palintris.puzzle_core.level import (
    BonusObjective,
    Difficulty,
    LevelResult,
    ObjectiveKind,
    OperationRecord,
    PuzzleConfig,
    SessionStatus,
)
from palintris.puzzle_core.levels import get_level_by_id, load_levels, validate_level
from palintris.puzzle_core.operations import (
    Delete,
    Insert,
    Mirror,
    Operation,
    OperationType,
    Replace,
    Rotate,
    Swap,
    apply_operation,
)
from palintris.puzzle_core.palindrome import (
    RotateDirection,
    get_hints,
    is_palindrome,
    min_operations_to_make_palindrome,
)
from palintris.puzzle_core.rng import Mulberry32, hash_date_string
from palintris.puzzle_core.session import PuzzleSession
from palintris.puzzle_core.symbols import SymbolCatalog, get_catalog
from palintris.puzzle_core.time_attack import TimeAttackDirector

__all__ = [
    "GameConfig",
    "get_config",
    "load_config",
    "reload_config",
    "DailyChallengeGenerator",
    "calculate_daily_challenge_reward",
    "calculate_streak",
    "generate_daily_challenge",
    "get_today_date_string",
    "PalindromeEnv",
    "BonusObjective",
    "Difficulty",
    "LevelResult",
    "ObjectiveKind",
    "OperationRecord",
    "PuzzleConfig",
    "SessionStatus",
    "get_level_by_id",
    "load_levels",
    "validate_level",
    "Delete",
    "Insert",
    "Mirror",
    "Operation",
    "OperationType",
    "Replace",
    "Rotate",
    "Swap",
    "apply_operation",
    "RotateDirection",
    "get_hints",
    "is_palindrome",
    "min_operations_to_make_palindrome",
    "Mulberry32",
    "hash_date_string",
    "PuzzleSession",
    "SymbolCatalog",
    "get_catalog",
    "TimeAttackDirector",
]
