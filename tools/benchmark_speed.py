"""
Performance Benchmark
=====================

Measures environment step throughput and puzzle generation speed.

Usage:
    python -m tools.benchmark_speed [--steps S] [--days D]
"""

from __future__ import annotations

import argparse
import sys
import time
from datetime import date, timedelta

import numpy as np

from palintris.puzzle_core.config_loader import load_config
from palintris.puzzle_core.daily import DailyChallengeGenerator
from palintris.puzzle_core.env_gym import PalindromeEnv
from palintris.puzzle_core.palindrome import min_operations_to_make_palindrome


def benchmark_env(num_steps: int = 1000, seed: int = 42) -> dict:
    """
    Benchmark environment steps with random actions.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = PalindromeEnv()
    rng = np.random.default_rng(seed)

    # Warmup
    env.reset(seed=seed)
    for _ in range(10):
        _, _, terminated, truncated, _ = env.step(env.action_space.sample())
        if terminated or truncated:
            env.reset()

    env.reset(seed=seed)
    env.action_space.seed(int(rng.integers(0, 2**31)))
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(env.action_space.sample())
        if terminated or truncated:
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "env.step",
        "count": num_steps,
        "elapsed_seconds": elapsed,
        "per_second": num_steps / elapsed,
        "ms_each": (elapsed * 1000) / num_steps
    }


def benchmark_daily(num_days: int = 365) -> dict:
    """Benchmark daily puzzle generation over consecutive dates."""
    generator = DailyChallengeGenerator(load_config())
    first = date(2024, 1, 1)

    start = time.perf_counter()
    for offset in range(num_days):
        generator.generate((first + timedelta(days=offset)).isoformat())
    elapsed = time.perf_counter() - start

    return {
        "mode": "daily",
        "count": num_days,
        "elapsed_seconds": elapsed,
        "per_second": num_days / elapsed,
        "ms_each": (elapsed * 1000) / num_days
    }


def benchmark_min_operations(length: int = 15, count: int = 1000, seed: int = 42) -> dict:
    """Benchmark the minimum-edit DP on random sequences."""
    rng = np.random.default_rng(seed)
    pool = list("ABCDEFGH")
    sequences = [[pool[i] for i in rng.integers(0, len(pool), size=length)] for _ in range(count)]

    start = time.perf_counter()
    for sequence in sequences:
        min_operations_to_make_palindrome(sequence)
    elapsed = time.perf_counter() - start

    return {
        "mode": f"min_ops(len={length})",
        "count": count,
        "elapsed_seconds": elapsed,
        "per_second": count / elapsed,
        "ms_each": (elapsed * 1000) / count
    }


def main():
    parser = argparse.ArgumentParser(description="Benchmark Palintris engine performance")
    parser.add_argument("--steps", type=int, default=2000, help="Environment steps")
    parser.add_argument("--days", type=int, default=365, help="Daily puzzles to generate")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer iterations)")

    args = parser.parse_args()

    steps = 200 if args.quick else args.steps
    days = 30 if args.quick else args.days

    results = [
        benchmark_env(steps),
        benchmark_daily(days),
        benchmark_min_operations(),
    ]

    print()
    print(f"{'Benchmark':<20} {'Count':>8} {'Per sec':>12} {'ms each':>10}")
    print("-" * 54)
    for r in results:
        print(f"{r['mode']:<20} {r['count']:>8} {r['per_second']:>12.1f} {r['ms_each']:>10.3f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
