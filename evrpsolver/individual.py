"""Candidate solutions: customer orders split into tours, completed with stations."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import MutableSequence, Sequence

from .charging import StationPlanner
from .problem import INF, Problem

PR_MUTATE = 0.1
PENALTY = 1.3


@dataclass
class Segment:
    """Inclusive bounds of one tour inside an individual's customer order."""

    left: int
    right: int


def _two_opt(problem: Problem, order: MutableSequence[int], left: int, right: int) -> None:
    """Improve ``order[left:right + 1]`` in place as a tour from and to the depot."""
    while True:
        stop = True
        for i in range(left, right + 1):
            for j in range(right, i, -1):
                u0 = order[i]
                v0 = order[j]
                u1 = order[i - 1] if i - 1 >= left else 0
                v1 = order[j + 1] if j + 1 <= right else 0
                t1 = problem.distance(u1, u0) + problem.distance(v0, v1)
                t2 = problem.distance(u1, v0) + problem.distance(u0, v1)
                if t1 > t2:
                    order[i : j + 1] = order[i : j + 1][::-1]
                    stop = False
        if stop:
            return


def two_opt(problem: Problem, sequence: MutableSequence[int]) -> None:
    """Improve a whole sequence in place with 2-opt moves, the depot closing both ends."""
    _two_opt(problem, sequence, 0, len(sequence) - 1)


class Individual:
    """A customer order divided into tours, and the route built from it."""

    def __init__(
        self,
        problem: Problem,
        planner: StationPlanner | None = None,
        rng: random.Random | None = None,
        mode: int = 1,
    ) -> None:
        self.problem = problem
        self.mode = mode
        self.planner = planner if planner is not None else StationPlanner(problem, mode)
        self.rng = rng if rng is not None else random.Random()
        n = problem.num_customers
        self.order: list[int] = list(range(1, n + 1))
        self.index_of_customer: list[int] = [0] * (n + 1)
        self.tour_index: list[int] = [0] * (n + 1)
        self.tours: list[Segment] = []
        self.solution: list[int] = []
        self.steps = 0
        self.fitness = INF

    @property
    def num_of_tours(self) -> int:
        return len(self.tours)

    def init(self, kind: str = "random") -> None:
        """Generate a new order of the given kind ("optimal" or random) and evaluate it."""
        self.tours = []
        if kind == "optimal":
            self.opt_generate()
        else:
            self.rand_generate()
        self.setup()

    def setup(self) -> None:
        """Re-index, improve each tour and rebuild the route."""
        self.set_tour_index()
        self.fitness = INF
        self.local_search()
        self.complete_gen()

    def _shuffle(self) -> None:
        n = self.problem.num_customers
        self.order = list(range(1, n + 1))
        self.index_of_customer = [0] + list(range(n))
        order, where = self.order, self.index_of_customer
        for _ in range(n):
            a = self.rng.randrange(n)
            b = self.rng.randrange(n)
            order[a], order[b] = order[b], order[a]
            where[order[a]], where[order[b]] = where[order[b]], where[order[a]]

    def rand_generate(self) -> None:
        """A random order cut into tours whenever the capacity would be exceeded."""
        problem = self.problem
        n = problem.num_customers
        self._shuffle()
        capacity = 0.0
        start = 0
        for i in range(n + 1):
            if i < n and capacity + problem.demand(self.order[i]) <= problem.max_capacity:
                capacity += problem.demand(self.order[i])
            else:
                self.tours.append(Segment(start, i - 1))
                capacity = 0.0
                start = i
        self.set_tour_index()

    def opt_generate(self) -> None:
        """Tours grown from random seeds by adding the nearest fitting customers."""
        problem = self.problem
        n = problem.num_customers
        have = [False] * (n + 1)
        self._shuffle()
        order, where = self.order, self.index_of_customer
        first_index = 0
        idx = 0
        while idx < n:
            first_index = self.rng.randrange(n - idx) + idx
            where[order[idx]] = first_index
            order[first_index], order[idx] = order[idx], order[first_index]
            first_index = idx
            first = order[idx]
            have[first] = True
            capacity = problem.demand(first)
            idx += 1
            for customer in problem.nearest[first]:
                if have[customer]:
                    continue
                if capacity + problem.demand(customer) <= problem.max_capacity:
                    have[customer] = True
                    capacity += problem.demand(customer)
                    where[order[idx]] = where[customer]
                    pos = where[customer]
                    order[idx], order[pos] = order[pos], order[idx]
                    idx += 1
                else:
                    self.tours.append(Segment(first_index, idx - 1))
                    break
        self.tours.append(Segment(first_index, n - 1))
        if self.mode == 1:
            self.redistribute_customer()

    def copy_order(self, other: Individual) -> None:
        """Take over the order, tours and fitness of another individual."""
        self.order = list(other.order)
        self.tour_index = list(other.tour_index)
        self.tours = [Segment(s.left, s.right) for s in other.tours]
        self.fitness = other.fitness

    def is_valid_order(self) -> bool:
        n = self.problem.num_customers
        if len(self.order) < n:
            return False
        order = self.order[:n]
        if any(c < 1 or c > n for c in order):
            return False
        return len(set(order)) == n

    def is_valid_solution(self) -> bool:
        return self.problem.check_solution(self.solution[: self.steps])

    def check_full_capacity(self) -> bool:
        """Whether every tour fits the vehicle capacity."""
        return all(
            self.get_capacity_of_tour(t) <= self.problem.max_capacity
            for t in range(self.num_of_tours)
        )

    def get_capacity_of_tour(self, tour_id: int) -> float:
        seg = self.tours[tour_id]
        return float(sum(self.problem.demand(c) for c in self.order[seg.left : seg.right + 1]))

    def local_search(self) -> None:
        """2-opt improvement of every tour."""
        for seg in self.tours:
            _two_opt(self.problem, self.order, seg.left, seg.right)

    def set_tour_index(self) -> None:
        for t, seg in enumerate(self.tours):
            for customer in self.order[seg.left : seg.right + 1]:
                self.tour_index[customer] = t

    def complete_gen(self) -> None:
        """Build the full route with depots and charging stations, and evaluate it."""
        problem = self.problem
        gen_temp = [0]
        for seg in self.tours:
            gen_temp.extend(self.order[seg.left : seg.right + 1])
            gen_temp.append(0)
        full_path: list[int] = []
        count = 0
        for i, seg in enumerate(self.tours):
            ok, count = self.planner.complete_subgen(
                full_path, gen_temp, seg.left + i, seg.right + i + 2, count
            )
            if not ok:
                self.fitness = INF
                return
        route = full_path[:count] + [0]
        if problem.check_solution(route):
            self.fitness = problem.fitness_evaluation(route, True)
        else:
            self.fitness = problem.fitness_evaluation(route, False)
            self.add_penalty()
        self.solution = route
        self.steps = len(route)

    def add_penalty(self) -> None:
        self.fitness *= PENALTY

    def _swap_with_neighbour(self, customer: int, near: int) -> None:
        order, index = self.order, self.tour_index
        for target, replacement in ((customer, near), (near, customer)):
            seg = self.tours[index[target]]
            for i in range(seg.left, seg.right + 1):
                if order[i] == target:
                    order[i] = replacement
                    break
        index[customer], index[near] = index[near], index[customer]

    def _move_nearest(self, from_mutation: bool) -> None:
        problem = self.problem
        order, index, tours = self.order, self.tour_index, self.tours
        customer = order[self.rng.randrange(problem.num_customers)]
        cost = self.get_capacity_of_tour(index[customer])
        near = -1
        for x in problem.nearest[customer]:
            seg = tours[index[x]]
            if (
                index[x] != index[customer]
                and cost + problem.demand(x) <= problem.max_capacity
                and seg.right - seg.left > 1
            ):
                near = x
                break
        if near == -1:
            return
        near_tour, cust_tour = index[near], index[customer]
        src = tours[near_tour]
        near_pos = next(i for i in range(src.left, src.right + 1) if order[i] == near)
        if cust_tour < near_tour:
            order[near_pos], order[src.left] = order[src.left], order[near_pos]
            src.left += 1
            for i in range(near_tour - 1, cust_tour, -1):
                seg = tours[i]
                order[seg.left + 1 : seg.right + 2] = order[seg.left : seg.right + 1]
                seg.left += 1
                seg.right += 1
            tours[cust_tour].right += 1
            order[tours[cust_tour].right] = near
        else:
            order[near_pos], order[src.right] = order[src.right], order[near_pos]
            src.right -= 1
            last = cust_tour if from_mutation else cust_tour - 1
            for i in range(near_tour + 1, last + 1):
                seg = tours[i]
                order[seg.left - 1 : seg.right] = order[seg.left : seg.right + 1]
                seg.left -= 1
                seg.right -= 1
            if from_mutation:
                tours[cust_tour].right += 1
                order[tours[cust_tour].right] = near
            else:
                tours[cust_tour].left -= 1
                order[tours[cust_tour].left] = near
        index[near] = cust_tour

    def mutation(self) -> None:
        """With small probability swap or move a customer towards a nearby tour."""
        problem = self.problem
        p1 = self.rng.random()
        p2 = self.rng.random()
        self.set_tour_index()
        if p1 < PR_MUTATE:
            customer = self.rng.randrange(problem.num_customers) + 1
            near = next(
                (x for x in problem.nearest[customer]
                 if self.tour_index[x] != self.tour_index[customer]),
                -1,
            )
            if near != -1:
                self._swap_with_neighbour(customer, near)
            return
        if p2 < PR_MUTATE:
            self._move_nearest(from_mutation=True)

    def greedy_1(self) -> None:
        """Swap a random customer with a nearby customer of another tour."""
        problem = self.problem
        self.set_tour_index()
        customer = self.rng.randrange(problem.num_customers) + 1
        near = -1
        for x in problem.nearest[customer]:
            if self.rng.random() < 0.1:
                continue
            if self.tour_index[x] != self.tour_index[customer]:
                near = x
                break
        if near != -1:
            self._swap_with_neighbour(customer, near)

    def greedy_2(self) -> None:
        """Move a nearby customer of another tour into a random customer's tour."""
        self.set_tour_index()
        self._move_nearest(from_mutation=False)

    def redistribute_customer(self) -> None:
        """Pull nearby customers into the last tour while that balances the loads."""
        problem = self.problem
        self.set_tour_index()
        order, tours = self.order, self.tours
        last = self.num_of_tours - 1
        if last < 0:
            raise ValueError("individual has no tours")
        have = [False] * (problem.num_customers + 1)
        for c in order[tours[last].left : tours[last].right + 1]:
            have[c] = True
        cap1 = self.get_capacity_of_tour(last)
        customer = order[self.rng.randrange(tours[last].right - tours[last].left + 1) + tours[last].left]
        for x in list(problem.nearest[customer]):
            if have[x]:
                continue
            cap2 = self.get_capacity_of_tour(self.tour_index[x])
            dx = problem.demand(x)
            if not (
                cap1 + dx <= problem.max_capacity
                and abs(cap1 + dx - (cap2 - dx)) < abs(cap1 - cap2)
            ):
                break
            moved = False
            for i in range(last):
                for j in range(tours[i].left, tours[i].right + 1):
                    if order[j] == x:
                        order[j], order[j + 1] = order[j + 1], order[j]
                        moved = True
                if moved:
                    tours[i].right -= 1
                    tours[i + 1].left -= 1
            have[x] = True
            cap1 += dx
            self.tour_index[x] = last
            seg = tours[last]
            customer = order[self.rng.randrange(seg.right - seg.left + 1) + seg.left]

    def show(self) -> str:
        """A readable description of the order, route, tours and fitness."""
        lines = ["-----------", "Order: ", " ".join(map(str, self.order)) + " "]
        lines.append(f"Number of steps: {self.steps}")
        lines.append(" ".join(map(str, self.solution[: self.steps])) + " ")
        lines.extend(f"Tour {t} : {s.left} {s.right}" for t, s in enumerate(self.tours))
        lines.append(f"Fitness: {self.fitness:g}")
        lines.append("-----------")
        return "\n".join(lines) + "\n"