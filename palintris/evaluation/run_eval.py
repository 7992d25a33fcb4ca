"""
Evaluation Harness
==================

Runs an agent against the fixed bank of daily-challenge dates and computes
scores.

Usage:
    python -m palintris.evaluation.run_eval --agent contestants/team_name
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import logging
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from palintris.puzzle_core.daily import parse_date_key
from palintris.puzzle_core.env_gym import PalindromeEnv


@dataclass
class EvalResult:
    """Result for a single date."""
    date: str
    final_score: int
    solved: bool
    operations_used: int
    status: str
    bonuses_achieved: List[str]
    elapsed_time: float
    actions: Optional[List[List[int]]] = None


@dataclass
class EvalSummary:
    """Summary of evaluation across all dates."""
    mean_score: float
    std_score: float
    min_score: int
    max_score: int
    median_score: float
    solve_rate: float
    total_time: float
    results: List[EvalResult]


def load_date_bank(path: Optional[str] = None) -> List[str]:
    """
    Load the evaluation date bank.

    Args:
        path: Path to date_bank.json. Uses default if None.

    Returns:
        List of canonical YYYY-MM-DD dates.

    Raises:
        ValueError: If an entry is not a canonical date.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "date_bank.json")

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    dates = [str(d) for d in data["dates"]]
    for date_string in dates:
        parse_date_key(date_string)
    return dates


def load_agent(agent_path: str) -> Callable:
    """
    Load an agent from a path.

    Args:
        agent_path: Path to agent directory or agent.py file.

    Returns:
        Agent's act function.
    """
    agent_path = Path(agent_path)

    if agent_path.is_dir():
        agent_file = agent_path / "agent.py"
    else:
        agent_file = agent_path

    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)

    if hasattr(module, "PalindromeAgent"):
        agent_instance = module.PalindromeAgent()
        if hasattr(agent_instance, "act"):
            return agent_instance.act
        raise AttributeError("PalindromeAgent class must have an 'act' method")

    if hasattr(module, "act"):
        return module.act

    raise AttributeError(
        "Agent module must have either 'PalindromeAgent' class with 'act' method "
        "or standalone 'act' function"
    )


def evaluate_single_date(
    agent_fn: Callable,
    date_string: str,
    record_actions: bool = False,
    verbose: bool = False
) -> EvalResult:
    """
    Evaluate agent on a single daily puzzle.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        date_string: Daily-challenge date.
        record_actions: If True, record all actions.
        verbose: If True, print progress.

    Returns:
        EvalResult for this date.
    """
    env = PalindromeEnv()
    obs, info = env.reset(options={"date": date_string})

    actions: Optional[List[List[int]]] = [] if record_actions else None
    start_time = time.time()

    done = False
    while not done:
        action = agent_fn(obs)
        if actions is not None:
            actions.append([int(a) for a in np.asarray(action).reshape(-1)])

        obs, _, terminated, truncated, info = env.step(action)
        done = terminated or truncated

    elapsed = time.time() - start_time

    result = EvalResult(
        date=date_string,
        final_score=int(info["score"]),
        solved=info["status"] == "solved",
        operations_used=int(info["operations_used"]),
        status=info["status"],
        bonuses_achieved=list(info["bonuses_achieved"]),
        elapsed_time=elapsed,
        actions=actions
    )

    env.close()

    if verbose:
        print(f"  {date_string}: score={result.final_score}, status={result.status}, "
              f"ops={result.operations_used}, time={elapsed:.2f}s")

    return result


def evaluate_agent(
    agent_fn: Callable,
    dates: Optional[List[str]] = None,
    record_actions: bool = False,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate agent on all dates in the date bank.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        dates: List of dates. Uses date_bank.json if None.
        record_actions: If True, record actions.
        verbose: If True, print progress.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if dates is None:
        dates = load_date_bank()
    if not dates:
        raise ValueError("No dates to evaluate")

    if verbose:
        print(f"Evaluating on {len(dates)} daily puzzles...")

    results: List[EvalResult] = []
    total_start = time.time()

    for i, date_string in enumerate(dates):
        if verbose:
            print(f"[{i+1}/{len(dates)}] Running {date_string}...")

        results.append(evaluate_single_date(
            agent_fn,
            date_string,
            record_actions=record_actions,
            verbose=verbose
        ))

    total_time = time.time() - total_start
    scores = [r.final_score for r in results]

    summary = EvalSummary(
        mean_score=float(np.mean(scores)),
        std_score=float(np.std(scores)),
        min_score=int(min(scores)),
        max_score=int(max(scores)),
        median_score=float(np.median(scores)),
        solve_rate=sum(1 for r in results if r.solved) / len(results),
        total_time=total_time,
        results=results
    )

    if verbose:
        print()
        print("=" * 50)
        print("EVALUATION SUMMARY")
        print("=" * 50)
        print(f"Dates evaluated: {len(dates)}")
        print(f"Solve rate:      {summary.solve_rate:.1%}")
        print(f"Mean score:      {summary.mean_score:.2f}")
        print(f"Std deviation:   {summary.std_score:.2f}")
        print(f"Min score:       {summary.min_score}")
        print(f"Max score:       {summary.max_score}")
        print(f"Median score:    {summary.median_score:.2f}")
        print(f"Total time:      {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(
    summary: EvalSummary,
    agent_name: str,
    output_path: str
) -> None:
    """Save evaluation results to JSON."""
    data = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "mean_score": summary.mean_score,
        "std_score": summary.std_score,
        "min_score": summary.min_score,
        "max_score": summary.max_score,
        "median_score": summary.median_score,
        "solve_rate": summary.solve_rate,
        "total_time": summary.total_time,
        "results": [
            {
                "date": r.date,
                "final_score": r.final_score,
                "solved": r.solved,
                "operations_used": r.operations_used,
                "status": r.status,
                "bonuses_achieved": r.bonuses_achieved,
                "elapsed_time": r.elapsed_time
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate a Palintris agent")
    parser.add_argument(
        "--agent",
        type=str,
        required=True,
        help="Path to agent directory or agent.py file"
    )
    parser.add_argument(
        "--dates",
        type=str,
        default=None,
        help="Path to date bank JSON (uses default if not specified)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--record",
        action="store_true",
        help="Record actions"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging from the engine"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    print(f"Loading agent from {args.agent}...")
    try:
        agent_fn = load_agent(args.agent)
    except (OSError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    dates = None
    if args.dates:
        dates = load_date_bank(args.dates)

    summary = evaluate_agent(
        agent_fn,
        dates=dates,
        record_actions=args.record,
        verbose=not args.quiet
    )

    if args.output:
        agent_name = Path(args.agent).name
        save_results(summary, agent_name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
