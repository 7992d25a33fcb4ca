"""
RNG - Seeded Mulberry32 Generator
=================================

Provides the deterministic random stream behind daily challenges.
Every value is derived from 32-bit integer arithmetic only, so a given seed
yields the same stream on every platform.

Not cryptographically secure. Do not use it for anything that must be
unpredictable to an adversary.
"""

from __future__ import annotations

import random
from typing import List, MutableSequence, Optional, Protocol, Sequence, TypeVar


T = TypeVar("T")

_MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_POW_32 = 4294967296.0


class RandomSource(Protocol):
    """Anything exposing ``random() -> float`` in [0, 1)."""

    def random(self) -> float:
        ...


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply on unsigned operands."""
    return (a * b) & _MASK32


def hash_date_string(date_string: str) -> int:
    """
    Hash a date string to a deterministic 32-bit seed.

    Rolling ``h * 31 + code`` over the characters, wrapped to a signed 32-bit
    value at every step; the absolute value is returned.

    Args:
        date_string: Canonical ``YYYY-MM-DD`` date.

    Returns:
        Unsigned seed in [0, 2**31].
    """
    h = 0
    for char in date_string:
        h = ((h << 5) - h + ord(char)) & _MASK32
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class Mulberry32:
    """
    Mulberry32 pseudo-random generator.

    The state advances by a fixed odd increment per draw; two xorshift/multiply
    rounds mix it into the output.
    """

    def __init__(self, seed: int):
        """
        Initialize generator.

        Args:
            seed: Initial 32-bit state. Wider values are truncated.
        """
        self._seed = seed & _MASK32
        self._state = self._seed

    def next_uint32(self) -> int:
        """Advance and return the next raw 32-bit output."""
        self._state = (self._state + _INCREMENT) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        """Next float in [0, 1)."""
        return self.next_uint32() / _TWO_POW_32

    def randint(self, low: int, high: int) -> int:
        """
        Draw an integer in the inclusive range [low, high].

        Uses exactly one draw: ``low + floor(random() * (high - low + 1))``.
        """
        return low + int(self.random() * (high - low + 1))

    def choice(self, items: Sequence[T]) -> T:
        """Pick one element with a single draw."""
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[int(self.random() * len(items))]

    def shuffle(self, items: MutableSequence[T]) -> None:
        """Fisher-Yates shuffle in place, walking from the end."""
        for i in range(len(items) - 1, 0, -1):
            j = int(self.random() * (i + 1))
            items[i], items[j] = items[j], items[i]

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the stream.

        Args:
            seed: New seed. Keeps the original seed if None.
        """
        if seed is not None:
            self._seed = seed & _MASK32
        self._state = self._seed

    @property
    def seed(self) -> int:
        """Seed the stream started from."""
        return self._seed

    def get_state(self) -> int:
        """Get the internal state for checkpointing."""
        return self._state

    def set_state(self, state: int) -> None:
        """Restore a state obtained from get_state()."""
        self._state = state & _MASK32


def resolve_rng(rng: Optional[RandomSource]) -> RandomSource:
    """Return ``rng``, or a fresh unseeded ``random.Random`` when None."""
    if rng is None:
        return random.Random()
    return rng


def draw_index(rng: RandomSource, size: int) -> int:
    """``floor(rng.random() * size)`` for any random source."""
    return int(rng.random() * size)


def sample_symbols(rng: RandomSource, pool: Sequence[str], length: int) -> List[str]:
    """Draw ``length`` symbols from ``pool`` with replacement, one draw each."""
    return [pool[draw_index(rng, len(pool))] for _ in range(length)]
