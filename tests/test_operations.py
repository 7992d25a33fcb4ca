"""
Tests for the operation variants, dispatch and structural validation.
"""

import pytest

from palintris.puzzle_core.operations import (
    ALL_OPERATIONS,
    Delete,
    Insert,
    Mirror,
    OperationType,
    Replace,
    Rotate,
    Swap,
    apply_operation,
    build_operation,
    is_structurally_valid,
    operation_to_dict,
    operations_for_difficulty,
)
from palintris.puzzle_core.palindrome import RotateDirection


MAX_LENGTH = 15


class TestDifficultyOperations:
    """Test per-tier operation unlocks."""

    def test_progression(self):
        assert operations_for_difficulty("tutorial") == (OperationType.SWAP,)
        assert operations_for_difficulty("easy") == (OperationType.SWAP, OperationType.ROTATE)
        assert OperationType.MIRROR in operations_for_difficulty("medium")
        assert OperationType.INSERT in operations_for_difficulty("hard")
        assert OperationType.REPLACE not in operations_for_difficulty("hard")
        assert operations_for_difficulty("expert") == ALL_OPERATIONS

    def test_unknown_tier_raises(self):
        with pytest.raises(ValueError):
            operations_for_difficulty("legendary")


class TestBuildOperation:
    """Test mapping loose arguments onto variants."""

    def test_swap_needs_target(self):
        assert build_operation("swap", 1, 3) is None
        assert build_operation("swap", 1, 3, target_position=2) == Swap(1, 2)

    def test_rotate_defaults_to_whole_sequence_right(self):
        op = build_operation(OperationType.ROTATE, 0, 5)

        assert op == Rotate(0, 4, RotateDirection.RIGHT)

    def test_rotate_with_range_and_direction(self):
        op = build_operation("rotate", 0, 5, start=1, end=3, direction="left")

        assert op == Rotate(1, 3, RotateDirection.LEFT)

    def test_rotate_bad_direction(self):
        assert build_operation("rotate", 0, 5, direction="up") is None

    def test_mirror_defaults(self):
        assert build_operation("mirror", 0, 4) == Mirror(0, 3)

    def test_symbol_operations_need_symbol(self):
        assert build_operation("insert", 1, 4) is None
        assert build_operation("replace", 1, 4) is None
        assert build_operation("insert", 1, 4, symbol="A") == Insert(1, "A")
        assert build_operation("replace", 1, 4, symbol="A") == Replace(1, "A")

    def test_delete(self):
        assert build_operation("delete", 2, 4) == Delete(2)

    def test_unknown_tag(self):
        assert build_operation("explode", 0, 4) is None


class TestApplyOperation:
    """Test the exhaustive dispatch."""

    def test_each_variant(self):
        sequence = ["A", "B", "C", "D"]

        assert apply_operation(sequence, Swap(0, 1)) == ["B", "A", "C", "D"]
        assert apply_operation(sequence, Rotate(0, 3)) == ["D", "A", "B", "C"]
        assert apply_operation(sequence, Mirror(0, 3)) == ["D", "C", "B", "A"]
        assert apply_operation(sequence, Insert(4, "A")) == ["A", "B", "C", "D", "A"]
        assert apply_operation(sequence, Delete(3)) == ["A", "B", "C"]
        assert apply_operation(sequence, Replace(3, "A")) == ["A", "B", "C", "A"]

    def test_rejects_non_operation(self):
        with pytest.raises(TypeError):
            apply_operation(["A"], ("swap", 0, 1))

    def test_variant_tags(self):
        assert [op.type for op in (Swap(0, 1), Rotate(0, 2), Mirror(0, 1),
                                   Insert(0, "A"), Delete(0), Replace(0, "A"))] == list(ALL_OPERATIONS)


class TestStructuralValidity:
    """Test preconditions on indices and lengths."""

    def test_swap_must_be_adjacent_and_in_range(self):
        assert is_structurally_valid(Swap(0, 1), 3, MAX_LENGTH)
        assert is_structurally_valid(Swap(2, 1), 3, MAX_LENGTH)
        assert not is_structurally_valid(Swap(0, 2), 3, MAX_LENGTH)
        assert not is_structurally_valid(Swap(2, 3), 3, MAX_LENGTH)
        assert not is_structurally_valid(Swap(-1, 0), 3, MAX_LENGTH)

    def test_rotate_needs_three_symbols(self):
        assert not is_structurally_valid(Rotate(0, 1), 2, MAX_LENGTH)
        assert is_structurally_valid(Rotate(0, 1), 3, MAX_LENGTH)
        assert not is_structurally_valid(Rotate(1, 1), 3, MAX_LENGTH)
        assert not is_structurally_valid(Rotate(0, 3), 3, MAX_LENGTH)

    def test_mirror_needs_proper_range(self):
        assert is_structurally_valid(Mirror(0, 1), 2, MAX_LENGTH)
        assert not is_structurally_valid(Mirror(1, 1), 2, MAX_LENGTH)
        assert not is_structurally_valid(Mirror(2, 1), 3, MAX_LENGTH)

    def test_insert_respects_length_cap(self):
        assert is_structurally_valid(Insert(3, "A"), 3, MAX_LENGTH)
        assert not is_structurally_valid(Insert(4, "A"), 3, MAX_LENGTH)
        assert not is_structurally_valid(Insert(0, "A"), MAX_LENGTH, MAX_LENGTH)

    def test_delete_keeps_one_symbol(self):
        assert is_structurally_valid(Delete(0), 2, MAX_LENGTH)
        assert not is_structurally_valid(Delete(0), 1, MAX_LENGTH)
        assert not is_structurally_valid(Delete(2), 2, MAX_LENGTH)

    def test_replace_index(self):
        assert is_structurally_valid(Replace(1, "A"), 2, MAX_LENGTH)
        assert not is_structurally_valid(Replace(2, "A"), 2, MAX_LENGTH)


class TestSerialization:
    """Test JSON-ready forms."""

    def test_rotate_to_dict(self):
        assert operation_to_dict(Rotate(1, 3, RotateDirection.LEFT)) == {
            "type": "rotate", "start": 1, "end": 3, "direction": "left",
        }

    def test_insert_to_dict(self):
        assert operation_to_dict(Insert(2, "Z")) == {"type": "insert", "position": 2, "symbol": "Z"}
