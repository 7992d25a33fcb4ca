"""
Human Play Mode
===============

Play Palintris in the terminal. Timed puzzles count down in wall-clock
seconds, charged between commands.

Commands:
    swap I J              Swap adjacent positions I and J
    rotate S E [left]     Rotate positions S..E (right by default)
    mirror S E            Reverse positions S..E
    insert P SYM          Insert SYM before position P
    delete P              Remove position P
    replace P SYM         Overwrite position P with SYM
    undo                  Revert the last operation (budget is not refunded)
    hint                  Show hints for the current sequence
    quit                  Give up

Usage:
    python -m tools.play_human [--level ID | --date YYYY-MM-DD | --time-attack] [--seed SEED]
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from typing import List, Optional

from palintris.puzzle_core.config_loader import GameConfig, load_config
from palintris.puzzle_core.daily import generate_daily_challenge, get_today_date_string
from palintris.puzzle_core.level import LevelResult, PuzzleConfig
from palintris.puzzle_core.levels import get_level_by_id
from palintris.puzzle_core.operations import OperationType
from palintris.puzzle_core.session import PuzzleSession
from palintris.puzzle_core.time_attack import TimeAttackDirector


def render(session: PuzzleSession) -> str:
    """Sequence with index ruler and budgets."""
    sequence = session.sequence
    indices = " ".join(f"{i:>2}" for i in range(len(sequence)))
    symbols = " ".join(f"{s:>2}" for s in sequence)
    time_remaining = session.time_remaining
    time_text = "untimed" if time_remaining is None else f"{time_remaining}s left"
    return (
        f"  {indices}\n"
        f"  {symbols}\n"
        f"  operations left: {session.operations_remaining}, {time_text}, "
        f"min edits: {session.min_operations()}"
    )


def parse_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


def run_command(session: PuzzleSession, tokens: List[str]) -> bool:
    """
    Execute one command line.

    Returns:
        True if an operation or undo was applied.
    """
    command, args = tokens[0].lower(), tokens[1:]

    if command == "undo":
        return session.undo()

    if command == "hint":
        hints = session.hints()
        if not hints:
            print("  No hints: already a palindrome.")
        for hint in hints:
            if hint.target_position is not None:
                print(f"  swap {hint.position} <-> {hint.target_position}")
            else:
                print(f"  change position {hint.position} to {hint.target_symbol}")
        return False

    try:
        op_type = OperationType(command)
    except ValueError:
        print(f"  Unknown command: {command}")
        return False

    numbers = [parse_int(a) for a in args]
    if not numbers or numbers[0] is None:
        print("  Missing position")
        return False

    if op_type in (OperationType.SWAP, OperationType.ROTATE, OperationType.MIRROR):
        if len(numbers) < 2 or numbers[1] is None:
            print("  Need two positions")
            return False
        direction = args[2].lower() if len(args) > 2 else None
        if op_type is OperationType.SWAP:
            return session.apply_operation(op_type, numbers[0], target_position=numbers[1])
        return session.apply_operation(
            op_type, numbers[0], start=numbers[0], end=numbers[1], direction=direction
        )

    symbol = args[1] if len(args) > 1 else None
    return session.apply_operation(op_type, numbers[0], symbol=symbol)


def play(puzzle: PuzzleConfig, config: GameConfig) -> LevelResult:
    """
    Play one puzzle interactively.

    Returns:
        The attempt result.
    """
    session = PuzzleSession(puzzle, config)
    session.set_time_callbacks(on_expired=lambda: print("\n  Time's up!"))

    allowed = ", ".join(OperationType(op).value for op in puzzle.allowed_operations)
    print(f"\n=== {puzzle.name} ({puzzle.difficulty.value}) ===")
    if puzzle.description:
        print(puzzle.description)
    print(f"Allowed: {allowed}")
    if puzzle.target_palindrome is not None:
        print(f"Target: {' '.join(puzzle.target_palindrome)}")
    for bonus in puzzle.bonus_objectives:
        print(f"Bonus: {bonus.description} (+{bonus.points})")

    last_tick = time.monotonic()
    while not session.is_terminal:
        print(render(session))
        try:
            line = input("> ").strip()
        except EOFError:
            break

        elapsed = int(time.monotonic() - last_tick)
        if elapsed > 0:
            last_tick += elapsed
            session.tick(elapsed)
            if session.is_terminal:
                break

        if not line:
            continue
        tokens = line.split()
        if tokens[0].lower() in ("quit", "exit", "q"):
            break

        if not run_command(session, tokens):
            print("  Not applied.")
            continue

        if session.check_completion():
            break
        if session.operations_remaining == 0:
            print("  Out of operations. Undo or quit.")

    result = session.get_result()
    session.destroy()

    print(render(session))
    print(f"\nStatus: {result.status.value}")
    print(f"Score:  {result.score}")
    if result.bonuses_achieved:
        print(f"Bonuses: {', '.join(result.bonuses_achieved)}")
    return result


def main():
    parser = argparse.ArgumentParser(description="Play Palintris in the terminal")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--level", type=int, default=None, help="Campaign level id")
    mode.add_argument("--date", type=str, default=None, help="Daily challenge date (YYYY-MM-DD)")
    mode.add_argument("--time-attack", action="store_true", help="Endless ramping puzzles")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for time attack")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = load_config(args.config)

    if args.time_attack:
        director = TimeAttackDirector(config, rng=random.Random(args.seed))
        run_clock = float(director.starting_time)
        while run_clock > 0:
            puzzle = director.generate_puzzle()
            print(f"\n{run_clock:.0f}s on the run clock")
            started = time.monotonic()
            result = play(puzzle, config)
            run_clock -= time.monotonic() - started
            if not result.completed or run_clock <= 0:
                break
            points = director.record_solve(
                time_remaining=run_clock,
                moves_used=result.operation_count,
                moves_available=puzzle.max_operations
            )
            run_clock += director.bonus_time_per_solve
            stats = director.get_stats()
            print(f"+{points} (total {stats.total_score}), streak {stats.current_streak}, "
                  f"difficulty {stats.difficulty}")
        print(f"Run over: {director.puzzles_solved} solved, {director.total_score} points")
        return 0

    if args.level is not None:
        puzzle = get_level_by_id(args.level)
        if puzzle is None:
            print(f"Unknown level: {args.level}")
            return 1
    else:
        try:
            puzzle = generate_daily_challenge(args.date or get_today_date_string(), config)
        except ValueError as e:
            print(f"Error: {e}")
            return 1

    play(puzzle, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
