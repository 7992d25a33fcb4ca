"""
Operations
==========

The six sequence edits as a closed set of frozen dataclasses, plus one
exhaustive dispatch to the pure transforms in ``palindrome``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

from palintris.puzzle_core.palindrome import (
    RotateDirection,
    apply_delete,
    apply_insert,
    apply_mirror,
    apply_replace,
    apply_rotate,
    apply_swap,
)


class OperationType(str, Enum):
    """Tag of each operation variant."""
    SWAP = "swap"
    ROTATE = "rotate"
    MIRROR = "mirror"
    INSERT = "insert"
    DELETE = "delete"
    REPLACE = "replace"


ALL_OPERATIONS: Tuple[OperationType, ...] = tuple(OperationType)


@dataclass(frozen=True)
class Swap:
    """Exchange two adjacent symbols."""
    i: int
    j: int

    @property
    def type(self) -> OperationType:
        return OperationType.SWAP

    @property
    def position(self) -> int:
        return self.i


@dataclass(frozen=True)
class Rotate:
    """Shift an inclusive range by one, circularly."""
    start: int
    end: int
    direction: RotateDirection = RotateDirection.RIGHT

    @property
    def type(self) -> OperationType:
        return OperationType.ROTATE

    @property
    def position(self) -> int:
        return self.start


@dataclass(frozen=True)
class Mirror:
    """Reverse an inclusive range."""
    start: int
    end: int

    @property
    def type(self) -> OperationType:
        return OperationType.MIRROR

    @property
    def position(self) -> int:
        return self.start


@dataclass(frozen=True)
class Insert:
    """Insert a symbol before ``position``."""
    position: int
    symbol: str

    @property
    def type(self) -> OperationType:
        return OperationType.INSERT


@dataclass(frozen=True)
class Delete:
    """Remove the symbol at ``position``."""
    position: int

    @property
    def type(self) -> OperationType:
        return OperationType.DELETE


@dataclass(frozen=True)
class Replace:
    """Overwrite the symbol at ``position``."""
    position: int
    symbol: str

    @property
    def type(self) -> OperationType:
        return OperationType.REPLACE


Operation = Union[Swap, Rotate, Mirror, Insert, Delete, Replace]


_DIFFICULTY_OPERATIONS: Dict[str, Tuple[OperationType, ...]] = {
    "tutorial": (OperationType.SWAP,),
    "easy": (OperationType.SWAP, OperationType.ROTATE),
    "medium": (OperationType.SWAP, OperationType.ROTATE, OperationType.MIRROR),
    "hard": (
        OperationType.SWAP, OperationType.ROTATE, OperationType.MIRROR,
        OperationType.INSERT, OperationType.DELETE,
    ),
    "expert": ALL_OPERATIONS,
}


def operations_for_difficulty(difficulty: str) -> Tuple[OperationType, ...]:
    """Operations unlocked at a difficulty tier."""
    try:
        return _DIFFICULTY_OPERATIONS[str(getattr(difficulty, "value", difficulty))]
    except KeyError:
        raise ValueError(f"Unknown difficulty: {difficulty}") from None


def build_operation(
    op_type: Union[OperationType, str],
    position: int,
    sequence_length: int,
    target_position: Optional[int] = None,
    symbol: Optional[str] = None,
    direction: Union[RotateDirection, str, None] = None,
    start: Optional[int] = None,
    end: Optional[int] = None
) -> Optional[Operation]:
    """
    Build an operation variant from loose keyword arguments.

    Rotate and mirror default to the whole sequence, rotate defaults to
    rotating right.

    Args:
        op_type: Operation tag.
        position: Primary index.
        sequence_length: Current sequence length (for range defaults).
        target_position: Second index for swap.
        symbol: Symbol for insert/replace.
        direction: Rotate direction.
        start: Range start for rotate/mirror.
        end: Range end (inclusive) for rotate/mirror.

    Returns:
        The operation, or None if the tag is unknown or a required
        argument is missing.
    """
    try:
        op_type = OperationType(op_type)
    except ValueError:
        return None

    if op_type is OperationType.SWAP:
        if target_position is None:
            return None
        return Swap(position, target_position)

    if op_type is OperationType.ROTATE:
        try:
            rotate_direction = RotateDirection(direction or RotateDirection.RIGHT)
        except ValueError:
            return None
        return Rotate(
            start if start is not None else 0,
            end if end is not None else sequence_length - 1,
            rotate_direction
        )

    if op_type is OperationType.MIRROR:
        return Mirror(
            start if start is not None else 0,
            end if end is not None else sequence_length - 1
        )

    if op_type is OperationType.INSERT:
        if symbol is None:
            return None
        return Insert(position, symbol)

    if op_type is OperationType.DELETE:
        return Delete(position)

    if symbol is None:
        return None
    return Replace(position, symbol)


def apply_operation(sequence: Sequence[str], op: Operation) -> List[str]:
    """
    Apply an operation to a sequence.

    Pure and unchecked: call :func:`is_structurally_valid` first.

    Raises:
        TypeError: If ``op`` is not one of the operation variants.
    """
    if isinstance(op, Swap):
        return apply_swap(sequence, op.i, op.j)
    if isinstance(op, Rotate):
        return apply_rotate(sequence, op.start, op.end, op.direction)
    if isinstance(op, Mirror):
        return apply_mirror(sequence, op.start, op.end)
    if isinstance(op, Insert):
        return apply_insert(sequence, op.position, op.symbol)
    if isinstance(op, Delete):
        return apply_delete(sequence, op.position)
    if isinstance(op, Replace):
        return apply_replace(sequence, op.position, op.symbol)
    raise TypeError(f"Not an operation: {op!r}")


def _valid_index(index: int, length: int) -> bool:
    return 0 <= index < length


def _valid_range(start: int, end: int, length: int) -> bool:
    return 0 <= start < end < length


def is_structurally_valid(
    op: Operation,
    length: int,
    max_length: int,
    min_rotate_length: int = 3,
    min_mirror_length: int = 2
) -> bool:
    """
    Check whether an operation can be applied to a sequence of ``length``.

    Args:
        op: Operation to check.
        length: Current sequence length.
        max_length: Length at which insert is refused.
        min_rotate_length: Shortest sequence rotate accepts.
        min_mirror_length: Shortest sequence mirror accepts.

    Returns:
        True if the indices and length preconditions hold.
    """
    if isinstance(op, Swap):
        return (
            _valid_index(op.i, length)
            and _valid_index(op.j, length)
            and abs(op.i - op.j) == 1
        )
    if isinstance(op, Rotate):
        return length >= min_rotate_length and _valid_range(op.start, op.end, length)
    if isinstance(op, Mirror):
        return length >= min_mirror_length and _valid_range(op.start, op.end, length)
    if isinstance(op, Insert):
        return length < max_length and 0 <= op.position <= length
    if isinstance(op, Delete):
        return length > 1 and _valid_index(op.position, length)
    if isinstance(op, Replace):
        return _valid_index(op.position, length)
    return False


def operation_to_dict(op: Operation) -> Dict[str, object]:
    """Serialize an operation to a JSON-ready dict."""
    data: Dict[str, object] = {"type": op.type.value}
    if isinstance(op, Swap):
        data.update(i=op.i, j=op.j)
    elif isinstance(op, Rotate):
        data.update(start=op.start, end=op.end, direction=RotateDirection(op.direction).value)
    elif isinstance(op, Mirror):
        data.update(start=op.start, end=op.end)
    elif isinstance(op, (Insert, Replace)):
        data.update(position=op.position, symbol=op.symbol)
    elif isinstance(op, Delete):
        data.update(position=op.position)
    return data
