"""
Tests for the campaign level table and level validation.
"""

import pytest
import yaml

from palintris.puzzle_core.config_loader import load_config
from palintris.puzzle_core.level import Difficulty, ObjectiveKind, PuzzleConfig
from palintris.puzzle_core.levels import (
    get_level_by_id,
    get_levels,
    get_levels_by_difficulty,
    get_next_level,
    load_levels,
    odd_symbol_counts,
    validate_level,
)
from palintris.puzzle_core.operations import OperationType


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def levels():
    return load_levels()


def write_levels(tmp_path, entries):
    path = tmp_path / "levels.yaml"
    path.write_text(yaml.safe_dump({"levels": entries}), encoding="utf-8")
    return str(path)


def level_entry(level_id=1, sequence=("A", "A", "B"), **overrides):
    entry = {
        "id": level_id,
        "name": f"Level {level_id}",
        "sequence": list(sequence),
        "allowed_operations": ["swap"],
        "max_operations": 3,
        "difficulty": "tutorial",
    }
    entry.update(overrides)
    return entry


def make_level(sequence, allowed=(OperationType.SWAP,), max_operations=3, target=None):
    return PuzzleConfig(
        id=99,
        name="Check",
        sequence=tuple(sequence),
        allowed_operations=tuple(allowed),
        max_operations=max_operations,
        difficulty=Difficulty.EASY,
        target_palindrome=tuple(target) if target is not None else None
    )


class TestCampaign:
    """Test the shipped level table."""

    def test_loads_in_order_with_unique_ids(self, levels):
        ids = [level.id for level in levels]

        assert len(levels) >= 30
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_every_level_is_valid(self, levels, config):
        for level in levels:
            assert validate_level(level, config) == [], f"level {level.id}"

    def test_first_level(self, levels):
        first = levels[0]

        assert first.id == 1
        assert first.sequence == ("A", "A", "B")
        assert first.allowed_operations == (OperationType.SWAP,)
        assert first.difficulty is Difficulty.TUTORIAL
        assert first.time_limit is None
        assert first.bonus_objectives[0].kind is ObjectiveKind.EXACT_OPERATIONS

    def test_number_symbols_stay_strings(self, levels):
        level = get_level_by_id(3, levels)

        assert level.sequence == ("1", "2", "1", "2")
        assert level.symbol_category == "numbers"

    def test_pinned_target(self, levels):
        level = get_level_by_id(41, levels)

        assert level.target_palindrome == ("K", "A", "Y", "A", "K")
        assert level.allowed_operations == (OperationType.INSERT, OperationType.DELETE)

    def test_objective_ids(self, levels):
        level = get_level_by_id(50, levels)

        assert [b.id for b in level.bonus_objectives] == ["under_5_ops", "under_120s"]
        assert [b.points for b in level.bonus_objectives] == [200, 150]

    def test_cached_campaign(self):
        assert get_levels() is get_levels()


class TestLookups:
    """Test lookups by id, difficulty and order."""

    def test_by_id(self, levels):
        assert get_level_by_id(36, levels).time_limit == 20
        assert get_level_by_id(17, levels) is None

    def test_by_difficulty(self, levels):
        tutorial = get_levels_by_difficulty("tutorial", levels)

        assert [level.id for level in tutorial] == [1, 2, 3, 4, 5]
        assert all(level.difficulty is Difficulty.EXPERT
                   for level in get_levels_by_difficulty(Difficulty.EXPERT, levels))

    def test_next_level(self, levels):
        assert get_next_level(1, levels).id == 2
        assert get_next_level(16, levels).id == 18
        assert get_next_level(levels[-1].id, levels) is None
        assert get_next_level(999, levels) is None


class TestLoadErrors:
    """Test malformed level files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_levels(str(tmp_path / "missing.yaml"))

    def test_duplicate_id(self, tmp_path):
        path = write_levels(tmp_path, [level_entry(1), level_entry(1)])

        with pytest.raises(ValueError, match="Duplicate"):
            load_levels(path)

    def test_palindromic_start(self, tmp_path):
        path = write_levels(tmp_path, [level_entry(1, sequence=("A", "B", "A"))])

        with pytest.raises(ValueError, match="palindrome"):
            load_levels(path)

    def test_unknown_objective(self, tmp_path):
        entry = level_entry(1, bonus_objectives=[{"kind": "juggle", "value": 2}])
        path = write_levels(tmp_path, [entry])

        with pytest.raises(ValueError, match="juggle"):
            load_levels(path)

    def test_unknown_operation(self, tmp_path):
        path = write_levels(tmp_path, [level_entry(1, allowed_operations=["teleport"])])

        with pytest.raises(ValueError):
            load_levels(path)

    def test_points_override(self, tmp_path):
        entry = level_entry(1, bonus_objectives=[{"kind": "under_time", "value": 9, "points": 40}])
        level = load_levels(write_levels(tmp_path, [entry]))[0]

        assert level.bonus_objectives[0].id == "under_9s"
        assert level.bonus_objectives[0].points == 40


class TestValidateLevel:
    """Test individual validation issues."""

    def test_clean_level(self, config):
        assert validate_level(make_level("AAB"), config) == []

    def test_already_palindrome(self, config):
        assert "Sequence is already a palindrome" in validate_level(make_level("ABA"), config)

    def test_too_long(self, config):
        issues = validate_level(make_level("AABBCCDDEEFFGGHHZ", allowed=list(OperationType)), config)

        assert any("exceeds the cap" in issue for issue in issues)

    def test_no_budget_or_operations(self, config):
        issues = validate_level(make_level("AAB", allowed=(), max_operations=0), config)

        assert "Max operations is less than 1" in issues
        assert "No operations allowed" in issues

    def test_odd_counts_without_edits(self, config):
        issues = validate_level(make_level("ABCD"), config)

        assert issues == ["Has 4 symbols with odd counts, but no insert/delete/replace allowed"]

    def test_odd_counts_fine_with_replace(self, config):
        level = make_level("ABCD", allowed=(OperationType.SWAP, OperationType.REPLACE))

        assert validate_level(level, config) == []

    def test_target_problems(self, config):
        not_palindrome = make_level("AAB", target="ABB")
        wrong_symbols = make_level("AAB", target="BAB")

        assert "Target is not a palindrome" in validate_level(not_palindrome, config)
        assert validate_level(wrong_symbols, config) == [
            "Target is not a rearrangement of the sequence",
        ]

    def test_odd_symbol_counts(self):
        assert odd_symbol_counts("AAB") == 1
        assert odd_symbol_counts("AABB") == 0
        assert odd_symbol_counts([]) == 0
