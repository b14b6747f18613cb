"""A single greedy construction of a route."""

from __future__ import annotations

import logging
import random

from .charging import StationPlanner
from .individual import Individual
from .problem import BestSolution, Problem

logger = logging.getLogger(__name__)


class GreedySearch:
    """Builds one nearest-neighbour individual and keeps it if it is valid and better."""

    def __init__(
        self,
        problem: Problem,
        best: BestSolution | None = None,
        rng: random.Random | None = None,
        planner: StationPlanner | None = None,
    ) -> None:
        self.problem = problem
        self.best = best if best is not None else BestSolution()
        self.rng = rng if rng is not None else random.Random()
        self.planner = planner if planner is not None else StationPlanner(problem)
        problem.compute_nearest_points()
        self.cur_sol = Individual(problem, self.planner, self.rng)

    def run(self) -> bool:
        """Construct a solution; return whether it was valid."""
        sol = Individual(self.problem, self.planner, self.rng)
        sol.init("optimal")
        self.cur_sol = sol
        if not sol.is_valid_solution():
            logger.warning("Invalid solution")
            return False
        self.best.offer(sol.fitness, sol.solution[: sol.steps])
        return True