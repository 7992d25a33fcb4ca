"""
Baseline Hints Agent Package

A simple heuristic agent that plays the engine's first palindrome hint,
falling back to a one-step greedy search. Serves as a benchmark and example.
"""

from .agent import PalindromeAgent, create_agent

__all__ = ["PalindromeAgent", "create_agent"]
