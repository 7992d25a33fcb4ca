"""
Team Template Agent
===================

Your agent must provide one of:
1. A `PalindromeAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are MultiDiscrete([6, L, L, N]) arrays:
[operation, first index, second index, symbol index].
See PalindromeEnv's docstring for how each operation reads them.
"""

from __future__ import annotations

from typing import Dict

import numpy as np


class PalindromeAgent:
    """
    Your Palintris agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> np.ndarray:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing puzzle state.

        Returns:
            action: Adjacent swap at a random position.
        """
        length = max(2, int(obs["length"]))
        i = int(self.rng.integers(0, length - 1))
        return np.array([0, i, i + 1, 0], dtype=np.int64)

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> np.ndarray:
    """Standalone act function (alternative to class-based agent)."""
    length = max(2, int(obs["length"]))
    i = int(np.random.randint(0, length - 1))
    return np.array([0, i, i + 1, 0], dtype=np.int64)
