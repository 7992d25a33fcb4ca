"""
Level Table
===========

Loads the static campaign from levels.yaml and checks each level for
solvability problems.
"""

from __future__ import annotations

import os
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from palintris.puzzle_core.config_loader import GameConfig, get_config
from palintris.puzzle_core.level import (
    BonusObjective,
    Difficulty,
    PuzzleConfig,
    minimum_operations,
    under_operations,
    under_time,
)
from palintris.puzzle_core.operations import OperationType
from palintris.puzzle_core.palindrome import is_palindrome


REARRANGE_OPERATIONS = frozenset(
    (OperationType.SWAP, OperationType.ROTATE, OperationType.MIRROR)
)


def _parse_objective(data: dict, level_id: int) -> BonusObjective:
    """Build a bonus objective from a ``{kind, value, points}`` entry."""
    kind = data.get("kind")
    extra = {"points": int(data["points"])} if "points" in data else {}

    if kind == "under_operations":
        return under_operations(int(data["value"]), **extra)
    if kind == "under_time":
        return under_time(int(data["value"]), **extra)
    if kind == "perfect":
        return minimum_operations(**extra)
    raise ValueError(f"Level {level_id}: unknown bonus objective kind '{kind}'")


def _parse_level(data: dict) -> PuzzleConfig:
    level_id = int(data["id"])
    target = data.get("target_palindrome")
    time_limit = data.get("time_limit")

    return PuzzleConfig(
        id=level_id,
        name=str(data["name"]),
        description=str(data.get("description", "")),
        sequence=tuple(str(s) for s in data["sequence"]),
        allowed_operations=tuple(OperationType(op) for op in data["allowed_operations"]),
        max_operations=int(data["max_operations"]),
        difficulty=Difficulty(data["difficulty"]),
        symbol_category=str(data.get("symbol_category", "letters")),
        time_limit=int(time_limit) if time_limit is not None else None,
        bonus_objectives=tuple(
            _parse_objective(entry, level_id) for entry in data.get("bonus_objectives") or []
        ),
        target_palindrome=tuple(str(s) for s in target) if target is not None else None
    )


def load_levels(levels_path: Optional[str] = None) -> List[PuzzleConfig]:
    """
    Load the campaign levels.

    Args:
        levels_path: Path to levels.yaml. If None, uses default location.

    Returns:
        Levels in file order.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: On duplicate ids, unknown operations or objectives, or a
            level that already starts as a palindrome.
    """
    if levels_path is None:
        levels_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "levels.yaml"
        )

    levels_path = Path(levels_path)
    if not levels_path.exists():
        raise FileNotFoundError(f"Levels file not found: {levels_path}")

    with open(levels_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    levels: List[PuzzleConfig] = []
    seen: Dict[int, str] = {}
    for entry in raw["levels"]:
        level = _parse_level(entry)
        if level.id in seen:
            raise ValueError(f"Duplicate level id {level.id} ('{seen[level.id]}' and '{level.name}')")
        if is_palindrome(level.sequence):
            raise ValueError(f"Level {level.id} starts as a palindrome")
        seen[level.id] = level.name
        levels.append(level)

    return levels


_cached_levels: Optional[List[PuzzleConfig]] = None


def get_levels() -> List[PuzzleConfig]:
    """Get the cached campaign, loading if necessary."""
    global _cached_levels
    if _cached_levels is None:
        _cached_levels = load_levels()
    return _cached_levels


def get_level_by_id(level_id: int, levels: Optional[List[PuzzleConfig]] = None) -> Optional[PuzzleConfig]:
    """Find a level by id in ``levels`` (the default campaign if None)."""
    for level in levels if levels is not None else get_levels():
        if level.id == level_id:
            return level
    return None


def get_levels_by_difficulty(
    difficulty: str,
    levels: Optional[List[PuzzleConfig]] = None
) -> List[PuzzleConfig]:
    difficulty = Difficulty(difficulty)
    return [
        level for level in (levels if levels is not None else get_levels())
        if level.difficulty is difficulty
    ]


def get_next_level(level_id: int, levels: Optional[List[PuzzleConfig]] = None) -> Optional[PuzzleConfig]:
    """Level following ``level_id`` in campaign order, None after the last."""
    levels = levels if levels is not None else get_levels()
    for index, level in enumerate(levels[:-1]):
        if level.id == level_id:
            return levels[index + 1]
    return None


def odd_symbol_counts(sequence) -> int:
    """Number of distinct symbols occurring an odd number of times."""
    return sum(1 for count in Counter(sequence).values() if count % 2 == 1)


def validate_level(level: PuzzleConfig, config: Optional[GameConfig] = None) -> List[str]:
    """
    Check a level for problems that would make it unfair or unsolvable.

    With only swap/rotate/mirror the multiset of symbols never changes, so
    a palindrome is reachable only when at most one symbol has an odd count
    and any pinned target uses exactly the starting symbols.

    Args:
        level: Level to check.
        config: Game configuration. Uses default if None.

    Returns:
        Human-readable issues; empty if the level is fine.
    """
    if config is None:
        config = get_config()

    issues: List[str] = []
    max_length = config.session.max_sequence_length

    if is_palindrome(level.sequence):
        issues.append("Sequence is already a palindrome")
    if len(level.sequence) > max_length:
        issues.append(f"Sequence length {len(level.sequence)} exceeds the cap of {max_length}")
    if level.max_operations < 1:
        issues.append("Max operations is less than 1")
    if not level.allowed_operations:
        issues.append("No operations allowed")

    target = level.target_palindrome
    if target is not None:
        if not is_palindrome(target):
            issues.append("Target is not a palindrome")
        if len(target) > max_length:
            issues.append(f"Target length {len(target)} exceeds the cap of {max_length}")

    if set(level.allowed_operations) <= REARRANGE_OPERATIONS:
        odd = odd_symbol_counts(level.sequence)
        if odd > 1:
            issues.append(
                f"Has {odd} symbols with odd counts, but no insert/delete/replace allowed"
            )
        if target is not None and Counter(target) != Counter(level.sequence):
            issues.append("Target is not a rearrangement of the sequence")

    return issues
