"""A genetic algorithm with rank selection and tour-based crossover."""

from __future__ import annotations

import bisect
import itertools
import random

from .charging import StationPlanner
from .individual import Individual
from .problem import BestSolution, Problem

NUM_OF_INDVS = 200


class HMAGS:
    """A population of individuals evolved by crossover, mutation and rank selection.

    The population holds three blocks of ``num_indvs``: parents, then offspring.
    """

    def __init__(
        self,
        problem: Problem,
        best: BestSolution | None = None,
        rng: random.Random | None = None,
        planner: StationPlanner | None = None,
        num_indvs: int = NUM_OF_INDVS,
    ) -> None:
        if num_indvs < 1:
            raise ValueError("population size must be positive")
        self.problem = problem
        self.best = best if best is not None else BestSolution()
        self.rng = rng if rng is not None else random.Random()
        self.planner = planner if planner is not None else StationPlanner(problem)
        self.num_indvs = num_indvs
        problem.compute_nearest_points()
        self.pop = [self._individual() for _ in range(3 * num_indvs)]
        self.rank = [0.0] * (3 * num_indvs)

    def _individual(self) -> Individual:
        return Individual(self.problem, self.planner, self.rng)

    def _offer(self, individual: Individual) -> None:
        self.best.offer(individual.fitness, individual.solution[: individual.steps])

    def init(self) -> None:
        """Generate the first parents and record the best of them."""
        for individual in self.pop[: self.num_indvs]:
            individual.init("optimal")
            self._offer(individual)

    def compute_rank(self, n: int) -> None:
        """Cumulative selection probabilities of the first ``n`` individuals."""
        fits = [individual.fitness for individual in self.pop[:n]]
        low, high = min(fits), max(fits)
        weights = [((high - f) / (high - low + 1e-6)) ** 2 for f in fits]
        total = sum(weights)
        if total == 0:
            weights = [1.0] * n
            total = float(n)
        self.rank[:n] = list(itertools.accumulate(w / total for w in weights))

    def choose_by_rank(self, prob: float) -> int:
        """Index of the first parent whose cumulative rank exceeds ``prob``."""
        return bisect.bisect_right(self.rank, prob, 0, self.num_indvs)

    def repopulation(self) -> None:
        """Fill the offspring blocks by crossover of rank-chosen parents."""
        n = self.num_indvs
        self.compute_rank(n)
        for i in range(0, 2 * n, 2):
            idx_1 = min(self.choose_by_rank(self.rng.random()), n - 1)
            idx_2 = min(self.choose_by_rank(self.rng.random()), n - 1)
            self.distribute_crossover(self.pop[idx_1], self.pop[idx_2], n + i)
        for individual in self.pop[n:]:
            self._offer(individual)

    def distribute_crossover(
        self, parent_1: Individual, parent_2: Individual, idx: int
    ) -> None:
        """Exchange the tours holding a random customer and store two children at ``idx``."""
        n = self.problem.num_customers
        num = self.rng.randrange(n) + 1
        seg_1 = parent_1.tours[parent_1.tour_index[num]]
        seg_2 = parent_2.tours[parent_2.tour_index[num]]

        child_1 = self._individual()
        child_2 = self._individual()
        child_1.copy_order(parent_1)
        child_2.copy_order(parent_2)

        alens = parent_1.order[seg_1.left : seg_1.right + 1][::-1]
        have = set(alens)
        for customer in reversed(parent_2.order[seg_2.left : seg_2.right + 1]):
            if customer not in have:
                alens.append(customer)
                have.add(customer)

        backward = reversed(alens)
        forward = iter(alens)
        for i in range(n):
            if child_1.order[i] in have:
                child_1.order[i] = next(backward)
            if child_2.order[i] in have:
                child_2.order[i] = next(forward)

        child_1.mutation()
        child_2.mutation()
        for target, child in ((self.pop[idx], child_1), (self.pop[idx + 1], child_2)):
            target.copy_order(child)
            target.setup()

    def selection(self) -> None:
        """Sort everyone and draw the next parents by rank."""
        n = self.num_indvs
        self.pop.sort(key=lambda individual: individual.fitness)
        self.compute_rank(2 * n)
        for i in range(n):
            idx = self.choose_by_rank(self.rng.random())
            self.pop[2 * n + i].copy_order(self.pop[idx])
        for i in range(n):
            self.pop[i].copy_order(self.pop[2 * n + i])

    def evolution(self) -> None:
        """One generation."""
        self.repopulation()
        self.selection()