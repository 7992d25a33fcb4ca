"""
Daily Challenge
===============

Builds the puzzle of the day from its canonical ``YYYY-MM-DD`` key. The date
hash seeds a Mulberry32 stream and every parameter is drawn from it, so one
date gives the same puzzle everywhere.

Also holds the calendar helpers (today's key, consecutive-day streaks) and
the token reward table.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from palintris.puzzle_core.config_loader import DailyConfig, DailyTierConfig, GameConfig, get_config
from palintris.puzzle_core.level import (
    BonusObjective,
    Difficulty,
    ObjectiveKind,
    PuzzleConfig,
)
from palintris.puzzle_core.operations import ALL_OPERATIONS, OperationType
from palintris.puzzle_core.palindrome import generate_non_palindrome
from palintris.puzzle_core.rng import Mulberry32, hash_date_string
from palintris.puzzle_core.scoring import round_half_up
from palintris.puzzle_core.symbols import get_catalog


logger = logging.getLogger(__name__)

_DATE_KEY = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# Fixed table so names never depend on the process locale
_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def parse_date_key(date_string: str) -> date:
    """
    Parse a canonical ``YYYY-MM-DD`` key.

    Raises:
        ValueError: If the string is not a canonical calendar date.
    """
    if not _DATE_KEY.fullmatch(date_string):
        raise ValueError(f"Expected a YYYY-MM-DD date, got {date_string!r}")
    return date.fromisoformat(date_string)


def day_of_week(day: date) -> int:
    """Day of week with Sunday = 0."""
    return (day.weekday() + 1) % 7


def difficulty_for_date(day: date, config: Optional[GameConfig] = None) -> Difficulty:
    """Tier from the weekday table: easy weekends, hard Tuesday/Wednesday."""
    if config is None:
        config = get_config()
    return Difficulty(config.daily.difficulty_by_weekday[day_of_week(day)])


def format_display_date(day: date) -> str:
    """``Jan 2, 2024`` style date."""
    return f"{_MONTH_ABBREVIATIONS[day.month - 1]} {day.day}, {day.year}"


class DailyChallengeGenerator:
    """
    Deterministic daily puzzle generator.

    Draw order from the seeded stream is fixed: length, operation budget,
    time limit, the sequence symbols, then (for shuffled tiers) the
    operation order and count. Changing it changes every daily puzzle.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rng_factory: Callable[[int], Mulberry32] = Mulberry32
    ):
        """
        Initialize generator.

        Args:
            config: Game configuration. Uses default if None.
            rng_factory: Builds the seeded stream from the date hash.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._daily: DailyConfig = config.daily
        self._catalog = get_catalog(config)
        self._rng_factory = rng_factory

    def _allowed_operations(
        self,
        rng: Mulberry32,
        tier: DailyTierConfig
    ) -> Tuple[OperationType, ...]:
        if tier.allowed_operations:
            return tuple(OperationType(op) for op in tier.allowed_operations)

        shuffled = list(ALL_OPERATIONS)
        rng.shuffle(shuffled)
        keep = rng.randint(*tier.shuffled_operation_count)
        return tuple(shuffled[:keep])

    def _bonus_objectives(self, max_operations: int) -> Tuple[BonusObjective, ...]:
        bonuses = self._daily.bonuses
        efficient_ops = math.ceil(max_operations * bonuses.efficient_ratio)
        return (
            BonusObjective(
                id="speedrun",
                description=f"Complete in under {bonuses.speedrun_seconds} seconds",
                points=bonuses.speedrun_points,
                kind=ObjectiveKind.UNDER_TIME,
                threshold=bonuses.speedrun_seconds,
                requires_completion=True
            ),
            BonusObjective(
                id="efficient",
                description=f"Use {efficient_ops} or fewer operations",
                points=bonuses.efficient_points,
                kind=ObjectiveKind.MAX_OPERATIONS,
                threshold=efficient_ops,
                requires_completion=True
            ),
            BonusObjective(
                id="perfect",
                description="Complete without using undo",
                points=bonuses.perfect_points,
                kind=ObjectiveKind.NO_UNDO,
                requires_completion=True
            ),
        )

    def generate(self, date_string: str) -> PuzzleConfig:
        """
        Generate the puzzle for a date.

        Args:
            date_string: Canonical ``YYYY-MM-DD`` key.

        Returns:
            The day's PuzzleConfig. Identical for identical keys.

        Raises:
            ValueError: If the key is not canonical.
        """
        day = parse_date_key(date_string)
        rng = self._rng_factory(hash_date_string(date_string))
        difficulty = difficulty_for_date(day, self._config)
        tier = self._daily.get_tier(difficulty.value)

        sequence_length = rng.randint(*tier.length)
        max_operations = rng.randint(*tier.operations)
        time_limit = rng.randint(*tier.time_limit)
        symbol_pool = self._catalog.get_pool(self._daily.symbol_category, tier.pool_size)

        sequence = generate_non_palindrome(
            symbol_pool,
            sequence_length,
            rng=rng,
            max_attempts=self._daily.max_attempts
        )
        allowed_operations = self._allowed_operations(rng, tier)

        logger.debug(
            "Daily %s: %s, length=%d, ops=%d, time=%d, allowed=%s",
            date_string, difficulty.value, sequence_length, max_operations,
            time_limit, [op.value for op in allowed_operations]
        )

        return PuzzleConfig(
            id=self._daily.level_id,
            name=f"Daily Challenge - {format_display_date(day)}",
            description=f"Today's {difficulty.value} puzzle. One attempt only!",
            sequence=tuple(sequence),
            allowed_operations=allowed_operations,
            max_operations=max_operations,
            difficulty=difficulty,
            symbol_category=self._daily.symbol_category,
            time_limit=time_limit,
            bonus_objectives=self._bonus_objectives(max_operations),
            target_palindrome=None
        )


def generate_daily_challenge(date_string: str, config: Optional[GameConfig] = None) -> PuzzleConfig:
    """Generate the daily puzzle for ``date_string`` with the default generator."""
    return DailyChallengeGenerator(config).generate(date_string)


def get_today_date_string(now: Optional[datetime] = None) -> str:
    """Today's key in UTC."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date().isoformat()


def is_today(date_string: str, now: Optional[datetime] = None) -> bool:
    return date_string == get_today_date_string(now)


def calculate_streak(completed_dates: Iterable[str], today: Optional[date] = None) -> int:
    """
    Count consecutive completed days ending today.

    Args:
        completed_dates: Date keys of completed dailies, any order.
        today: Reference day. UTC today if None.

    Returns:
        Length of the unbroken run of days ending at ``today``.
    """
    if today is None:
        today = parse_date_key(get_today_date_string())

    completed = set(completed_dates)
    streak = 0
    while (today - timedelta(days=streak)).isoformat() in completed:
        streak += 1
    return streak


@dataclass(frozen=True)
class DailyReward:
    """Tokens earned for a daily completion."""
    base_tokens: int
    streak_bonus: int

    @property
    def total(self) -> int:
        return self.base_tokens + self.streak_bonus


def get_streak_bonus(streak_days: int, config: Optional[GameConfig] = None) -> int:
    """Bonus tokens for a streak of 1, 2, 3, 4-6, or 7+ days."""
    if config is None:
        config = get_config()
    tokens: List[int] = list(config.daily.rewards.streak_bonus_tokens)

    if streak_days <= 0:
        return 0
    if streak_days <= 3:
        return tokens[streak_days - 1]
    if streak_days < 7:
        return tokens[3]
    return tokens[4]


def calculate_daily_challenge_reward(
    difficulty: str,
    streak_days: int,
    config: Optional[GameConfig] = None
) -> DailyReward:
    """
    Tokens earned for completing a daily challenge.

    Args:
        difficulty: Tier of the completed puzzle.
        streak_days: Current streak including today.
        config: Game configuration. Uses default if None.

    Returns:
        DailyReward with the base and streak parts.
    """
    if config is None:
        config = get_config()
    rewards = config.daily.rewards
    multiplier = rewards.multiplier_for(str(getattr(difficulty, "value", difficulty)))
    return DailyReward(
        base_tokens=round_half_up(rewards.base_tokens * multiplier),
        streak_bonus=get_streak_bonus(streak_days, config)
    )
