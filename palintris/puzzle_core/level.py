"""
Level Model
===========

Immutable puzzle definitions and attempt results exchanged with the rest of
the game: ``PuzzleConfig`` goes into a session, ``LevelResult`` comes out.
Bonus objectives are plain data so a config can be serialized and compared.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from palintris.puzzle_core.operations import Operation, OperationType, operation_to_dict


class Difficulty(str, Enum):
    """Difficulty tiers, easiest first."""
    TUTORIAL = "tutorial"
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class ObjectiveKind(str, Enum):
    """Predicate a bonus objective applies to a result."""
    MAX_OPERATIONS = "max_operations"      # operations used <= threshold
    EXACT_OPERATIONS = "exact_operations"  # operations used == threshold
    UNDER_TIME = "under_time"              # seconds spent < threshold
    NO_UNDO = "no_undo"                    # undo never used


class SessionStatus(str, Enum):
    """Sub-state of a puzzle session."""
    ACTIVE = "active"
    SOLVED = "solved"
    EXPIRED = "expired"


@dataclass(frozen=True)
class OperationRecord:
    """One applied operation in a session's history."""
    operation: OperationType
    position: int
    target_position: Optional[int]
    symbol: Optional[str]            # Symbol inserted/written, or the one moved/removed
    timestamp: float                 # Seconds since the session started
    detail: Operation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation.value,
            "position": self.position,
            "target_position": self.target_position,
            "symbol": self.symbol,
            "timestamp": self.timestamp,
            "detail": operation_to_dict(self.detail),
        }


@dataclass(frozen=True)
class LevelResult:
    """Snapshot of a finished (or abandoned) puzzle attempt."""
    level_id: int
    completed: bool
    final_sequence: Tuple[str, ...]
    operations_used: Tuple[OperationRecord, ...]
    time_spent: float
    score: int
    bonuses_achieved: Tuple[str, ...]
    is_palindrome: bool
    undo_count: int = 0
    status: SessionStatus = SessionStatus.ACTIVE

    @property
    def operation_count(self) -> int:
        """Number of operations left in the history."""
        return len(self.operations_used)


@dataclass(frozen=True)
class BonusObjective:
    """
    Optional scoring goal evaluated once against a result.

    The predicate is selected by ``kind`` and parameterized by ``threshold``;
    nothing is captured from engine state.
    """
    id: str
    description: str
    points: int
    kind: ObjectiveKind
    threshold: float = 0.0
    requires_completion: bool = False

    def check(self, result: LevelResult) -> bool:
        """Evaluate the objective against a result."""
        if self.requires_completion and not result.completed:
            return False

        kind = ObjectiveKind(self.kind)
        if kind is ObjectiveKind.MAX_OPERATIONS:
            return result.operation_count <= self.threshold
        if kind is ObjectiveKind.EXACT_OPERATIONS:
            return result.operation_count == self.threshold
        if kind is ObjectiveKind.UNDER_TIME:
            return result.time_spent < self.threshold
        return result.undo_count == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "points": self.points,
            "kind": ObjectiveKind(self.kind).value,
            "threshold": self.threshold,
            "requires_completion": self.requires_completion,
        }


def under_operations(max_ops: int, points: int = 200) -> BonusObjective:
    """Complete using ``max_ops`` or fewer operations."""
    return BonusObjective(
        id=f"under_{max_ops}_ops",
        description=f"Complete using {max_ops} or fewer operations",
        points=points,
        kind=ObjectiveKind.MAX_OPERATIONS,
        threshold=max_ops
    )


def under_time(seconds: int, points: int = 150) -> BonusObjective:
    """Complete in under ``seconds``."""
    return BonusObjective(
        id=f"under_{seconds}s",
        description=f"Complete in under {seconds} seconds",
        points=points,
        kind=ObjectiveKind.UNDER_TIME,
        threshold=seconds
    )


def minimum_operations(points: int = 500) -> BonusObjective:
    """Complete with a single operation."""
    return BonusObjective(
        id="perfect",
        description="Complete with minimum operations",
        points=points,
        kind=ObjectiveKind.EXACT_OPERATIONS,
        threshold=1
    )


@dataclass(frozen=True)
class PuzzleConfig:
    """
    Complete, immutable description of one puzzle.

    Produced once by a generator or the level table; a session copies what it
    needs and never mutates it.
    """
    id: int
    name: str
    sequence: Tuple[str, ...]
    allowed_operations: Tuple[OperationType, ...]
    max_operations: int
    difficulty: Difficulty
    symbol_category: str = "letters"
    time_limit: Optional[int] = None           # Seconds, None = untimed
    bonus_objectives: Tuple[BonusObjective, ...] = field(default_factory=tuple)
    target_palindrome: Optional[Tuple[str, ...]] = None  # None = any palindrome
    description: str = ""

    def allows(self, op_type: OperationType) -> bool:
        return op_type in self.allowed_operations

    def to_dict(self) -> Dict[str, Any]:
        """Canonical JSON-ready form."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sequence": list(self.sequence),
            "target_palindrome": (
                list(self.target_palindrome) if self.target_palindrome is not None else None
            ),
            "allowed_operations": [OperationType(op).value for op in self.allowed_operations],
            "max_operations": self.max_operations,
            "symbol_category": self.symbol_category,
            "time_limit": self.time_limit,
            "bonus_objectives": [b.to_dict() for b in self.bonus_objectives],
            "difficulty": Difficulty(self.difficulty).value,
        }

    def to_json(self) -> str:
        """Canonical JSON (sorted keys, no whitespace variation)."""
        return json.dumps(self.to_dict(), sort_keys=True, ensure_ascii=False, separators=(",", ":"))

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON, for cross-machine comparison."""
        return hashlib.sha256(self.to_json().encode("utf-8")).hexdigest()
