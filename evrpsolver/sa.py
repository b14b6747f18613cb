"""Simulated annealing over customer orders."""

from __future__ import annotations

import math
import random
from pathlib import Path

from .charging import StationPlanner
from .individual import Individual
from .problem import INF, BestSolution, Problem, save_conv


class SimulatedAnnealing:
    """Anneals an individual with greedy neighbourhood moves, recording the best route."""

    def __init__(
        self,
        problem: Problem,
        best: BestSolution | None = None,
        rng: random.Random | None = None,
        planner: StationPlanner | None = None,
        *,
        alpha: float = 1000.0,
        beta: float = 0.333333,
        t_start: float = 1.0,
        t_end: float = 0.02,
        conv_path: str | Path | None = None,
    ) -> None:
        self.problem = problem
        self.best = best if best is not None else BestSolution()
        self.rng = rng if rng is not None else random.Random()
        self.planner = planner if planner is not None else StationPlanner(problem)
        self.alpha = alpha
        self.beta = beta
        self.t_start = t_start
        self.t_end = t_end
        self.conv_path = conv_path
        self.conv: list[float] = []
        problem.compute_nearest_points()
        self.best_solution = self._individual()
        self.cur_sol = self._individual()

    def _individual(self) -> Individual:
        return Individual(self.problem, self.planner, self.rng)

    def init(self, ant: Individual) -> None:
        """Start the current solution from the order of ``ant``."""
        self.cur_sol.copy_order(ant)
        self.cur_sol.setup()

    def run(self, sol: Individual) -> BestSolution:
        """Anneal ``sol`` in place until the budget or the final temperature is reached.

        An individual without tours is first generated.
        """
        problem = self.problem
        if not sol.tours:
            sol.init("optimal")
        candidate = self._individual()
        log_n = math.log10(problem.actual_size)
        t_current = self.t_start
        conv: list[float] = []

        while problem.evals < problem.termination and t_current > self.t_end:
            t_greedy = problem.actual_size * self.beta
            t_cool = (self.alpha * log_n - 1.0) / (self.alpha * log_n)
            attempts = 0
            while True:
                conv.append(sol.fitness)
                candidate.copy_order(sol)
                if self.rng.random() <= 0.5:
                    candidate.greedy_1()
                else:
                    candidate.greedy_2()
                candidate.setup()
                improve = sol.fitness - candidate.fitness
                attempts += 1
                if improve > 0:
                    break
                if candidate.fitness + 1e10 <= INF and attempts >= t_greedy:
                    upper = abs(candidate.fitness - sol.fitness) / abs(
                        candidate.fitness - self.best.tour_length + 1e-5
                    )
                    if math.exp(-upper / t_current) > self.rng.random():
                        sol.copy_order(candidate)
                    break
                if not (improve < 0 and problem.evals < problem.termination):
                    break

            sol.copy_order(candidate)
            if candidate.is_valid_solution():
                self.best.offer(candidate.fitness, candidate.solution[: candidate.steps])
            t_current = max(t_current * t_cool, self.t_end)

        self.conv = conv
        if self.conv_path is not None:
            save_conv(conv, self.conv_path)
        return self.best