"""
Level Validation
================

Checks every campaign level for solvability problems and prints a report.

Usage:
    python -m tools.validate_levels [--levels PATH] [--config PATH]

Exits with status 1 if any level has issues.
"""

from __future__ import annotations

import argparse
import logging
import sys

from palintris.puzzle_core.config_loader import load_config
from palintris.puzzle_core.levels import load_levels, odd_symbol_counts, validate_level
from palintris.puzzle_core.palindrome import min_operations_to_make_palindrome


def main():
    parser = argparse.ArgumentParser(description="Validate Palintris campaign levels")
    parser.add_argument("--levels", type=str, default=None, help="Path to levels.yaml")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--details", action="store_true", help="Print a line for every level")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = load_config(args.config)
    try:
        levels = load_levels(args.levels)
    except ValueError as e:
        print(f"Error loading levels: {e}")
        return 1

    print("\n=== Level Validation Report ===\n")

    problems = 0
    for level in levels:
        issues = validate_level(level, config)
        if args.details:
            print(
                f"Level {level.id:>3} {level.name:<24} len={len(level.sequence):>2} "
                f"ops={level.max_operations} min_edits={min_operations_to_make_palindrome(level.sequence)} "
                f"odd_counts={odd_symbol_counts(level.sequence)}"
            )
        if issues:
            problems += 1
            print(f"Level {level.id}: {level.name}")
            for issue in issues:
                print(f"  - {issue}")
            print()

    if problems == 0:
        print("All levels are valid.\n")

    print("Summary:")
    print(f"  - Total levels: {len(levels)}")
    print(f"  - Problem levels: {problems}")
    print()

    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
