"""Command line runner: repeated trials of one algorithm on one instance."""

from __future__ import annotations

import argparse
import random
import sys
import time
from pathlib import Path
from typing import Sequence

from .greedy import GreedySearch
from .hmags import HMAGS
from .problem import BestSolution, Problem, ProblemFormatError, read_problem, save_solution
from .sa import SimulatedAnnealing
from .saco import SACO
from .stats import MAX_TRIALS, EvolutionLog, TrialStats

ALGORITHMS = ("SACO", "GS", "HMAGS", "SA")


def start_run(problem: Problem, run: int) -> None:
    """Reset the counters of the problem for a new run."""
    problem.init_evals()
    problem.init_current_best()
    print(f"Run: {run} with random seed {run}")


def end_run(problem: Problem, stats: TrialStats, run: int) -> float:
    """Record the best value of a run and return it."""
    best = problem.current_best
    stats.record(run - 1, best)
    print(
        f"End of run {run} with best solution quality {best:g} "
        f"total evaluations: {problem.evals:g}"
    )
    print(" ")
    return best


def run_algorithm(
    algorithm: str,
    problem: Problem,
    instance_path: str | Path,
    output_path: str | Path,
    run: int,
) -> BestSolution:
    """Run one trial of the named algorithm, save its best solution and return it."""
    if algorithm not in ALGORITHMS:
        raise ValueError(f'Algorithm "{algorithm}" not found')
    rng = random.Random(run)

    if algorithm == "SACO":
        colony = SACO(problem, 1, 2, 80, 0.1, 2, 0, rng=rng)
        colony.init(run)
        while not problem.termination_condition(1):
            colony.optimize()
        best = colony.best
    elif algorithm == "GS":
        greedy = GreedySearch(problem, rng=rng)
        greedy.run()
        best = greedy.best
    elif algorithm == "HMAGS":
        hmags = HMAGS(problem, rng=rng)
        hmags.init()
        started = time.perf_counter()
        with EvolutionLog(output_path, instance_path, run) as log:
            while not problem.termination_condition(1):
                hmags.evolution()
                log.write(hmags.best.tour_length, problem.evals, time.perf_counter() - started)
        best = hmags.best
    else:
        annealing = SimulatedAnnealing(problem, rng=rng)
        annealing.run(annealing.cur_sol)
        best = annealing.best

    save_solution(best, output_path, instance_path, run)
    return best


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="evrpsolver", description="Solve an EVRP instance repeatedly."
    )
    parser.add_argument("algorithm", help="one of " + ", ".join(ALGORITHMS))
    parser.add_argument("problem_instance", help="instance file inside <root>/benchmark")
    parser.add_argument("output_path", help="output directory relative to <root>")
    parser.add_argument("--root", type=Path, default=None, help="project root (default: cwd)")
    parser.add_argument("--trials", type=int, default=MAX_TRIALS, help="number of runs")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    root = args.root if args.root is not None else Path.cwd()
    instance_path = root / "benchmark" / args.problem_instance
    output_path = root / args.output_path

    if not instance_path.exists():
        print(f"Error: Problem instance file not found: {instance_path}", file=sys.stderr)
        return 1
    if args.algorithm not in ALGORITHMS:
        print(f'Error: Algorithm "{args.algorithm}" not found', file=sys.stderr)
        return 1
    try:
        problem = read_problem(instance_path)
    except ProblemFormatError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    print(f"Reading from: {instance_path}")

    full_output_path = output_path / args.algorithm / instance_path.stem
    with TrialStats(full_output_path, instance_path, args.trials) as stats:
        print(f"Running {args.trials} times")
        for run in range(1, args.trials + 1):
            start_run(problem, run)
            run_algorithm(args.algorithm, problem, instance_path, full_output_path, run)
            end_run(problem, stats, run)
    return 0


if __name__ == "__main__":
    sys.exit(main())