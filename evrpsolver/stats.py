"""Per-run performance statistics and evolution logs."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Sequence

MAX_TRIALS = 10


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean of the values."""
    if not values:
        raise ValueError("mean of no values")
    return sum(values) / len(values)


def stdev(values: Sequence[float], average: float) -> float:
    """Sample standard deviation around ``average``; zero for fewer than two values."""
    if len(values) <= 1:
        return 0.0
    deviation = sum((value - average) ** 2 for value in values)
    return math.sqrt(deviation / (len(values) - 1))


def format_summary(values: Sequence[float]) -> str:
    """The values one per line, followed by mean, standard deviation, minimum and maximum."""
    average = mean(values)
    lines = [f"{value:.2f}\n" for value in values]
    lines.append(f"Mean {average:.2f}\t \tStd Dev {stdev(values, average):.2f}\t \n")
    lines.append(f"Min: {min(values):.2f}\t \n")
    lines.append(f"Max: {max(values):.2f}\t \n")
    return "".join(lines)


class TrialStats:
    """Collects the best value of each run and writes a summary file on close."""

    def __init__(
        self, output_path: str | Path, instance: str | Path, trials: int = MAX_TRIALS
    ) -> None:
        directory = Path(output_path)
        directory.mkdir(parents=True, exist_ok=True)
        self.path = directory / f"stats.{Path(instance).stem}.txt"
        self.values = [0.0] * trials
        self._file = self.path.open("w")

    def record(self, run_index: int, value: float) -> None:
        """Store the result of the run with the given zero-based index."""
        if not 0 <= run_index < len(self.values):
            raise IndexError(f"run index {run_index} out of range")
        self.values[run_index] = value

    def close(self) -> Path:
        """Write the summary and close the file; return its path."""
        if not self._file.closed:
            self._file.write(format_summary(self.values))
            self._file.close()
        return self.path

    def __enter__(self) -> TrialStats:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class EvolutionLog:
    """A CSV trace of the best objective, evaluations and elapsed time of one run."""

    def __init__(self, output_dir: str | Path, task: str | Path, run: int) -> None:
        run_dir = Path(output_dir) / str(run)
        run_dir.mkdir(parents=True, exist_ok=True)
        self.path = run_dir / f"evols.{Path(task).stem}.csv"
        self._file = self.path.open("w")
        self._file.write("obj,evals,time\n")

    def write(self, best: float, evals: float, seconds: float) -> None:
        self._file.write(f"{best:.2f},{evals:.2f},{seconds:.2f}\n")

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> EvolutionLog:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()