"""
Palindrome Analysis and Sequence Edits
======================================

Pure functions over symbol sequences: palindrome detection, the minimum
edit count DP, hint heuristics, the six sequence edits, and puzzle sequence
generation.

The edit functions never validate indices; the puzzle session does that
before calling them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from palintris.puzzle_core.rng import RandomSource, draw_index, resolve_rng, sample_symbols


logger = logging.getLogger(__name__)

# Resampling attempts before the deterministic fallback kicks in
MAX_GENERATION_ATTEMPTS = 100


class RotateDirection(str, Enum):
    """Direction of a one-step circular shift."""
    LEFT = "left"
    RIGHT = "right"


class HintSuggestion(str, Enum):
    """Kind of fix a hint proposes."""
    SWAP = "swap"
    CHANGE = "change"


@dataclass(frozen=True)
class PalindromeHint:
    """A suggested fix for one mismatched mirrored pair."""
    position: int
    suggestion: HintSuggestion
    target_position: Optional[int] = None
    target_symbol: Optional[str] = None


@dataclass(frozen=True)
class PalindromicRun:
    """A contiguous palindromic stretch of a sequence (end is inclusive)."""
    start: int
    end: int
    symbols: Tuple[str, ...]


def is_palindrome(sequence: Sequence[str]) -> bool:
    """True if the sequence reads the same forwards and backwards."""
    n = len(sequence)
    if n <= 1:
        return True
    for i in range(n // 2):
        if sequence[i] != sequence[n - 1 - i]:
            return False
    return True


def find_palindromic_subsequences(sequence: Sequence[str]) -> List[PalindromicRun]:
    """
    Find every contiguous palindromic run of length >= 2.

    Args:
        sequence: Symbols to scan.

    Returns:
        Runs ordered by start, then by end.
    """
    runs: List[PalindromicRun] = []
    n = len(sequence)
    for start in range(n):
        for end in range(start + 2, n + 1):
            window = sequence[start:end]
            if is_palindrome(window):
                runs.append(PalindromicRun(start, end - 1, tuple(window)))
    return runs


def min_operations_to_make_palindrome(sequence: Sequence[str]) -> int:
    """
    Minimum number of single-symbol edits that make a palindrome.

    Interval DP over substrings by increasing gap:
    ``dp[i][j] = dp[i+1][j-1]`` when the ends match, otherwise
    ``1 + min(dp[i+1][j], dp[i][j-1])``.

    The table is O(n^2) and rebuilt per call, which is fine for the short
    sequences puzzles use.

    Returns:
        0 exactly when the sequence is already a palindrome.
    """
    n = len(sequence)
    if n <= 1:
        return 0

    dp = np.zeros((n, n), dtype=np.int32)
    for gap in range(1, n):
        for i in range(n - gap):
            j = i + gap
            if sequence[i] == sequence[j]:
                dp[i, j] = dp[i + 1, j - 1] if i + 1 <= j - 1 else 0
            else:
                dp[i, j] = 1 + min(dp[i + 1, j], dp[i, j - 1])

    return int(dp[0, n - 1])


def get_hints(sequence: Sequence[str]) -> List[PalindromeHint]:
    """
    Suggest fixes for each mismatched mirrored pair.

    Prefers a swap with the left symbol's right neighbour, then with the right
    symbol's left neighbour, and otherwise proposes changing the left symbol
    to its mirror. Heuristic; neither optimal nor minimal.
    """
    hints: List[PalindromeHint] = []
    n = len(sequence)
    if n <= 1:
        return hints

    for i in range(n // 2):
        j = n - 1 - i
        if sequence[i] == sequence[j]:
            continue

        if i + 1 < j and sequence[i + 1] == sequence[j]:
            hints.append(PalindromeHint(i, HintSuggestion.SWAP, target_position=i + 1))
        elif j - 1 > i and sequence[j - 1] == sequence[i]:
            hints.append(PalindromeHint(j, HintSuggestion.SWAP, target_position=j - 1))
        else:
            hints.append(PalindromeHint(i, HintSuggestion.CHANGE, target_symbol=sequence[j]))

    return hints


def apply_swap(sequence: Sequence[str], i: int, j: int) -> List[str]:
    """Exchange the symbols at ``i`` and ``j``."""
    result = list(sequence)
    result[i], result[j] = result[j], result[i]
    return result


def apply_rotate(
    sequence: Sequence[str],
    start: int,
    end: int,
    direction: RotateDirection = RotateDirection.RIGHT
) -> List[str]:
    """
    Circularly shift ``sequence[start..end]`` (inclusive) by one position.

    Left moves the first symbol of the range to its end; right moves the
    last symbol to its front.
    """
    result = list(sequence)
    section = result[start:end + 1]
    if not section:
        return result

    if RotateDirection(direction) is RotateDirection.LEFT:
        section = section[1:] + section[:1]
    else:
        section = section[-1:] + section[:-1]

    result[start:end + 1] = section
    return result


def apply_mirror(sequence: Sequence[str], start: int, end: int) -> List[str]:
    """Reverse ``sequence[start..end]`` (inclusive)."""
    result = list(sequence)
    result[start:end + 1] = result[start:end + 1][::-1]
    return result


def apply_insert(sequence: Sequence[str], position: int, symbol: str) -> List[str]:
    """Insert ``symbol`` before ``position``."""
    result = list(sequence)
    result.insert(position, symbol)
    return result


def apply_delete(sequence: Sequence[str], position: int) -> List[str]:
    """Remove the symbol at ``position``."""
    result = list(sequence)
    del result[position]
    return result


def apply_replace(sequence: Sequence[str], position: int, symbol: str) -> List[str]:
    """Overwrite the symbol at ``position``."""
    result = list(sequence)
    result[position] = symbol
    return result


def calculate_similarity(first: Sequence[str], second: Sequence[str]) -> float:
    """Fraction of positions holding the same symbol, over the longer length."""
    if not first and not second:
        return 1.0
    if not first or not second:
        return 0.0

    matches = sum(1 for a, b in zip(first, second) if a == b)
    return matches / max(len(first), len(second))


def break_palindrome(sequence: List[str], symbol_pool: Sequence[str]) -> List[str]:
    """
    Make a palindrome stop being one by changing its first symbol.

    The first pool symbol different from ``sequence[0]`` replaces it, so the
    first and last positions can no longer match. Non-palindromes are returned
    unchanged.
    """
    if len(sequence) < 2 or not is_palindrome(sequence):
        return sequence

    for symbol in symbol_pool:
        if symbol != sequence[0]:
            sequence[0] = symbol
            break
    return sequence


def generate_non_palindrome(
    symbol_pool: Sequence[str],
    length: int,
    rng: Optional[RandomSource] = None,
    max_attempts: int = MAX_GENERATION_ATTEMPTS
) -> List[str]:
    """
    Generate a random sequence that is not a palindrome.

    Resamples up to ``max_attempts`` times, then falls back to
    :func:`break_palindrome`, so it always terminates.

    Args:
        symbol_pool: Symbols to draw from (with replacement).
        length: Sequence length.
        rng: Random source. Unseeded if None.
        max_attempts: Resampling attempts before the fallback.

    Returns:
        A non-palindromic list of ``length`` symbols.

    Raises:
        ValueError: If the pool has fewer than 2 distinct symbols or
            length < 2.
    """
    if len(set(symbol_pool)) < 2 or length < 2:
        raise ValueError("Need at least 2 distinct symbols and length >= 2")

    rng = resolve_rng(rng)
    sequence: List[str] = []
    for _ in range(max_attempts):
        sequence = sample_symbols(rng, symbol_pool, length)
        if not is_palindrome(sequence):
            return sequence

    logger.debug("No non-palindrome after %d attempts; breaking %s", max_attempts, sequence)
    return break_palindrome(sequence, symbol_pool)


def generate_puzzle_sequence(
    target_palindrome: Sequence[str],
    num_operations: int,
    rng: Optional[RandomSource] = None
) -> List[str]:
    """
    Scramble a known palindrome with random swap/rotate/mirror edits.

    Best effort: the minimum number of moves back to a palindrome is not
    guaranteed to equal ``num_operations``. If the scramble lands on a
    palindrome anyway, one swap of the first two symbols is applied.

    Args:
        target_palindrome: Starting palindrome.
        num_operations: Number of scrambling edits.
        rng: Random source. Unseeded if None.

    Returns:
        The scrambled sequence.
    """
    result = list(target_palindrome)
    n = len(result)
    if n < 2:
        return result

    rng = resolve_rng(rng)
    for _ in range(num_operations):
        op_kind = draw_index(rng, 3)
        if op_kind == 0:
            pos = draw_index(rng, n - 1)
            result = apply_swap(result, pos, pos + 1)
        elif op_kind == 1:
            start = draw_index(rng, max(1, n - 2))
            end = start + 2 + draw_index(rng, max(0, n - start - 2))
            result = apply_rotate(result, start, min(end, n - 1), RotateDirection.LEFT)
        else:
            start = draw_index(rng, n - 1)
            end = start + 1 + draw_index(rng, n - start - 1)
            result = apply_mirror(result, start, min(end, n - 1))

    if is_palindrome(result):
        result = apply_swap(result, 0, 1)

    return result
