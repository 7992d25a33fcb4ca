"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml


DIFFICULTY_TIERS = ("tutorial", "easy", "medium", "hard", "expert")
OPERATION_NAMES = ("swap", "rotate", "mirror", "insert", "delete", "replace")
SYMBOL_CATEGORIES = ("letters", "numbers", "shapes", "colors", "mixed")


@dataclass(frozen=True)
class SessionConfig:
    """Structural limits enforced by a puzzle session."""
    max_sequence_length: int     # Insert is refused at this length
    min_rotate_length: int
    min_mirror_length: int


@dataclass(frozen=True)
class ScoringConfig:
    """Level scoring constants."""
    base_complete: int
    operation_bonus: int
    time_bonus: int
    difficulty_multipliers: Tuple[Tuple[str, float], ...]

    def multiplier_for(self, difficulty: str) -> float:
        """Score multiplier for a difficulty tier name."""
        for name, value in self.difficulty_multipliers:
            if name == difficulty:
                return value
        raise ValueError(f"No score multiplier for difficulty '{difficulty}'")


@dataclass(frozen=True)
class DailyTierConfig:
    """Parameter ranges for one daily-challenge difficulty tier."""
    difficulty: str
    length: Tuple[int, int]
    operations: Tuple[int, int]
    time_limit: Tuple[int, int]
    pool_size: int
    allowed_operations: Tuple[str, ...]  # Empty = seeded shuffle of all ops
    shuffled_operation_count: Tuple[int, int]


@dataclass(frozen=True)
class DailyBonusConfig:
    """Daily-challenge bonus objective parameters."""
    speedrun_seconds: int
    speedrun_points: int
    efficient_ratio: float
    efficient_points: int
    perfect_points: int


@dataclass(frozen=True)
class DailyRewardConfig:
    """Token rewards for completing a daily challenge."""
    base_tokens: int
    token_multipliers: Tuple[Tuple[str, float], ...]
    streak_bonus_tokens: Tuple[int, ...]

    def multiplier_for(self, difficulty: str) -> float:
        for name, value in self.token_multipliers:
            if name == difficulty:
                return value
        raise ValueError(f"No token multiplier for difficulty '{difficulty}'")


@dataclass(frozen=True)
class DailyConfig:
    """Daily challenge generation parameters."""
    level_id: int
    symbol_category: str
    max_attempts: int
    difficulty_by_weekday: Tuple[str, ...]  # Sunday = 0
    tiers: Tuple[DailyTierConfig, ...]
    bonuses: DailyBonusConfig
    rewards: DailyRewardConfig

    def get_tier(self, difficulty: str) -> DailyTierConfig:
        """Get tier parameters by difficulty name."""
        for tier in self.tiers:
            if tier.difficulty == difficulty:
                return tier
        raise ValueError(f"No daily tier configured for '{difficulty}'")


@dataclass(frozen=True)
class TimeAttackConfig:
    """Time attack ramp and scoring parameters."""
    starting_time: int
    starting_moves: int
    bonus_time_per_solve: int
    min_moves: int
    difficulty_ramp_speed: float
    base_sequence_length: int
    max_sequence_length: int
    solves_per_difficulty: int
    score_base: int
    streak_bonus_multiplier: float
    move_bonus: int
    time_bonus: int
    difficulty_score_step: float
    min_pool_size: int
    max_pool_size: int
    symbols: Tuple[str, ...]
    allowed_operations: Tuple[str, ...]


@dataclass(frozen=True)
class SymbolsConfig:
    """Symbol pools by category."""
    letters: Tuple[str, ...]
    numbers: Tuple[str, ...]
    shapes: Tuple[str, ...]
    colors: Tuple[str, ...]
    mixed: Tuple[str, ...]

    def get(self, category: str) -> Tuple[str, ...]:
        if category not in SYMBOL_CATEGORIES:
            raise ValueError(f"Unknown symbol category: {category}")
        return getattr(self, category)


@dataclass(frozen=True)
class GameConfig:
    """
    Complete engine configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    session: SessionConfig
    scoring: ScoringConfig
    daily: DailyConfig
    time_attack: TimeAttackConfig
    symbols: SymbolsConfig


def _parse_range(data: List, name: str) -> Tuple[int, int]:
    """Parse an inclusive [min, max] pair from YAML."""
    if len(data) != 2:
        raise ValueError(f"{name} must have 2 values [min, max], got {data}")
    return (int(data[0]), int(data[1]))


def _parse_multipliers(data: Dict) -> Tuple[Tuple[str, float], ...]:
    return tuple((str(name), float(value)) for name, value in data.items())


def _parse_tier(difficulty: str, tier_data: dict) -> DailyTierConfig:
    """Parse a single daily tier from YAML."""
    return DailyTierConfig(
        difficulty=difficulty,
        length=_parse_range(tier_data["length"], f"{difficulty}.length"),
        operations=_parse_range(tier_data["operations"], f"{difficulty}.operations"),
        time_limit=_parse_range(tier_data["time_limit"], f"{difficulty}.time_limit"),
        pool_size=int(tier_data["pool_size"]),
        allowed_operations=tuple(str(op) for op in tier_data.get("allowed_operations", [])),
        shuffled_operation_count=_parse_range(
            tier_data.get("shuffled_operation_count", [5, 6]),
            f"{difficulty}.shuffled_operation_count"
        )
    )


def _parse_symbols(symbols_data: dict) -> SymbolsConfig:
    """Parse symbol pools; mixed is built from prefixes of the others."""
    pools = {
        category: tuple(str(s) for s in symbols_data[category])
        for category in ("letters", "numbers", "shapes", "colors")
    }
    mixed: List[str] = []
    for category, count in symbols_data.get("mixed", {}).items():
        mixed.extend(pools[category][:int(count)])
    return SymbolsConfig(mixed=tuple(mixed), **pools)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    for name, _ in config.scoring.difficulty_multipliers:
        if name not in DIFFICULTY_TIERS:
            raise ValueError(f"Unknown difficulty in scoring multipliers: {name}")

    daily = config.daily
    if len(daily.difficulty_by_weekday) != 7:
        raise ValueError(
            f"difficulty_by_weekday must have 7 entries, got {len(daily.difficulty_by_weekday)}"
        )
    for difficulty in daily.difficulty_by_weekday:
        daily.get_tier(difficulty)

    category_size = len(config.symbols.get(daily.symbol_category))
    for tier in daily.tiers:
        for name in ("length", "operations", "time_limit", "shuffled_operation_count"):
            low, high = getattr(tier, name)
            if low > high:
                raise ValueError(f"Daily tier '{tier.difficulty}' {name} has min > max")
        if tier.length[0] < 2:
            raise ValueError(f"Daily tier '{tier.difficulty}' length must be at least 2")
        if not 2 <= tier.pool_size <= category_size:
            raise ValueError(
                f"Daily tier '{tier.difficulty}' pool_size ({tier.pool_size}) must be "
                f"between 2 and the '{daily.symbol_category}' size ({category_size})"
            )
        for op in tier.allowed_operations:
            if op not in OPERATION_NAMES:
                raise ValueError(f"Unknown operation '{op}' in daily tier '{tier.difficulty}'")
        if tier.shuffled_operation_count[1] > len(OPERATION_NAMES):
            raise ValueError(
                f"Daily tier '{tier.difficulty}' cannot keep more than "
                f"{len(OPERATION_NAMES)} shuffled operations"
            )

    ta = config.time_attack
    if ta.max_pool_size > len(ta.symbols):
        raise ValueError(
            f"time_attack.max_pool_size ({ta.max_pool_size}) exceeds "
            f"symbol count ({len(ta.symbols)})"
        )
    if ta.min_pool_size < 2:
        raise ValueError("time_attack.min_pool_size must be at least 2")
    if ta.base_sequence_length < 2:
        raise ValueError("time_attack.base_sequence_length must be at least 2")
    if ta.max_sequence_length > config.session.max_sequence_length:
        raise ValueError(
            f"time_attack.max_sequence_length ({ta.max_sequence_length}) exceeds "
            f"session.max_sequence_length ({config.session.max_sequence_length})"
        )
    for op in ta.allowed_operations:
        if op not in OPERATION_NAMES:
            raise ValueError(f"Unknown operation '{op}' in time_attack.allowed_operations")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate engine configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    session_data = raw["session"]
    session = SessionConfig(
        max_sequence_length=int(session_data.get("max_sequence_length", 15)),
        min_rotate_length=int(session_data.get("min_rotate_length", 3)),
        min_mirror_length=int(session_data.get("min_mirror_length", 2))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        base_complete=int(scoring_data["base_complete"]),
        operation_bonus=int(scoring_data["operation_bonus"]),
        time_bonus=int(scoring_data["time_bonus"]),
        difficulty_multipliers=_parse_multipliers(scoring_data["difficulty_multipliers"])
    )

    daily_data = raw["daily"]
    bonus_data = daily_data["bonuses"]
    reward_data = daily_data["rewards"]
    daily = DailyConfig(
        level_id=int(daily_data.get("level_id", 9999)),
        symbol_category=str(daily_data.get("symbol_category", "letters")),
        max_attempts=int(daily_data.get("max_attempts", 100)),
        difficulty_by_weekday=tuple(str(d) for d in daily_data["difficulty_by_weekday"]),
        tiers=tuple(
            _parse_tier(str(name), tier_data)
            for name, tier_data in daily_data["tiers"].items()
        ),
        bonuses=DailyBonusConfig(
            speedrun_seconds=int(bonus_data["speedrun_seconds"]),
            speedrun_points=int(bonus_data["speedrun_points"]),
            efficient_ratio=float(bonus_data["efficient_ratio"]),
            efficient_points=int(bonus_data["efficient_points"]),
            perfect_points=int(bonus_data["perfect_points"])
        ),
        rewards=DailyRewardConfig(
            base_tokens=int(reward_data["base_tokens"]),
            token_multipliers=_parse_multipliers(reward_data["token_multipliers"]),
            streak_bonus_tokens=tuple(int(t) for t in reward_data["streak_bonus_tokens"])
        )
    )

    ta_data = raw["time_attack"]
    time_attack = TimeAttackConfig(
        starting_time=int(ta_data["starting_time"]),
        starting_moves=int(ta_data["starting_moves"]),
        bonus_time_per_solve=int(ta_data["bonus_time_per_solve"]),
        min_moves=int(ta_data["min_moves"]),
        difficulty_ramp_speed=float(ta_data["difficulty_ramp_speed"]),
        base_sequence_length=int(ta_data["base_sequence_length"]),
        max_sequence_length=int(ta_data["max_sequence_length"]),
        solves_per_difficulty=int(ta_data.get("solves_per_difficulty", 3)),
        score_base=int(ta_data["score_base"]),
        streak_bonus_multiplier=float(ta_data["streak_bonus_multiplier"]),
        move_bonus=int(ta_data.get("move_bonus", 20)),
        time_bonus=int(ta_data.get("time_bonus", 5)),
        difficulty_score_step=float(ta_data.get("difficulty_score_step", 0.1)),
        min_pool_size=int(ta_data.get("min_pool_size", 3)),
        max_pool_size=int(ta_data.get("max_pool_size", 5)),
        symbols=tuple(str(s) for s in ta_data["symbols"]),
        allowed_operations=tuple(str(op) for op in ta_data.get("allowed_operations", ["swap"]))
    )

    config = GameConfig(
        session=session,
        scoring=scoring,
        daily=daily,
        time_attack=time_attack,
        symbols=_parse_symbols(raw["symbols"])
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached engine configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
