"""Ant colony optimisation with rank-weighted pheromone updates and annealing restarts."""

from __future__ import annotations

import random

from .charging import StationPlanner
from .individual import Individual, Segment, two_opt
from .problem import BestSolution, Problem
from .randoms import Randoms
from .sa import SimulatedAnnealing

NUMBEROFANTS = 6
_TINY_DISTANCE = 1e-12


class SACO:
    """A colony of ants building capacity-feasible routes guided by pheromones.

    When ``k_b`` ants in a row fail to improve the best route, every ant is
    annealed; after ``k_t`` such ants the pheromones are pulled towards their mean.
    """

    def __init__(
        self,
        problem: Problem,
        alpha: float = 1.0,
        beta: float = 2.0,
        q: float = 80.0,
        ro: float = 0.1,
        taumax: float = 2.0,
        init_city: int = 0,
        *,
        rng: random.Random | None = None,
        planner: StationPlanner | None = None,
        num_ants: int = NUMBEROFANTS,
        k_t: int = 6,
        k_b: int = 3,
        pertu_rate: float = 0.1,
        max_attempts: int = 10000,
    ) -> None:
        if num_ants < 1:
            raise ValueError("the colony needs at least one ant")
        self.problem = problem
        self.alpha = alpha
        self.beta = beta
        self.q = q
        self.ro = ro
        self.taumax = taumax
        self.init_city = init_city
        self.k_t = k_t
        self.k_b = k_b
        self.pertu_rate = pertu_rate
        self.max_attempts = max_attempts
        self.rng = rng if rng is not None else random.Random()
        self.planner = planner if planner is not None else StationPlanner(problem)
        self.ants = [Individual(problem, self.planner, self.rng) for _ in range(num_ants)]
        self.best = BestSolution()
        self.cities: list[list[float]] = [[-1.0, -1.0] for _ in range(problem.actual_size)]
        self.pheromones: list[list[float]] = []
        self.delta_pheromones: list[list[float]] = []
        self.randoms: Randoms | None = None
        self.sa: SimulatedAnnealing | None = None
        self.t_cnt = 0
        self.b_cnt = 0

    def init(self, seed: int) -> None:
        """Seed the colony, draw random pheromones and reset the best route."""
        size = self.problem.actual_size
        self.cities = [[-1.0, -1.0] for _ in range(size)]
        self.pheromones = [[0.0] * size for _ in range(size)]
        self.delta_pheromones = [[0.0] * size for _ in range(size)]
        self.randoms = Randoms(seed)
        for ant in self.ants:
            ant.solution = []
            ant.steps = 0
        for i in range(size):
            for j in range(i + 1, size):
                self.connect_cities(i, j)
        self.problem.compute_nearest_points()
        self.best = BestSolution()
        self.sa = SimulatedAnnealing(self.problem, self.best, self.rng, self.planner)
        self.t_cnt = 0
        self.b_cnt = 0

    def _require_init(self) -> Randoms:
        if self.randoms is None:
            raise RuntimeError("init must be called first")
        return self.randoms

    def connect_cities(self, city_i: int, city_j: int) -> None:
        """Give the edge between two cities a random symmetric pheromone level."""
        level = self._require_init().uniform() * self.taumax
        self.pheromones[city_i][city_j] = level
        self.pheromones[city_j][city_i] = level

    def set_city_position(self, city: int, x: float, y: float) -> None:
        self.cities[city] = [x, y]

    def format_pheromones(self) -> str:
        """The pheromone matrix as a text table."""
        size = len(self.pheromones)
        lines = [" PHEROMONES: "]
        lines.append("  | " + "".join(f"{i:5d}   " for i in range(size)))
        lines.append("- | " + "--------" * size)
        for i, row in enumerate(self.pheromones):
            cells = "".join(
                f"{'x':>5s}   " if i == j else f"{value:7.3f} " for j, value in enumerate(row)
            )
            lines.append(f"{i} | {cells}")
        return "\n".join(lines) + "\n\n"

    def _attraction(self, source: int, target: int) -> float:
        length = max(self.problem.distance(source, target), _TINY_DISTANCE)
        return (1.0 / length) ** self.beta * self.pheromones[source][target] ** self.alpha

    def _phi(self, source: int, target: int, visited: list[bool]) -> float:
        own = self._attraction(source, target)
        total = 1e-10 + sum(
            self._attraction(source, c)
            for c in range(1, self.problem.num_customers + 1)
            if not visited[c]
        )
        return own / total

    def _choose(self, weighted: list[tuple[float, int]]) -> int:
        randoms = self._require_init()
        threshold = randoms.uniform() * sum(weight for weight, _ in weighted)
        running = 0.0
        for weight, city in weighted:
            running += weight
            if running >= threshold:
                return city
        return weighted[-1][1]

    def _close_tour(self, path: list[int], start: int) -> tuple[bool, int]:
        gen_temp = path[start:]
        two_opt(self.problem, gen_temp)
        ok, end = self.planner.complete_subgen(path, gen_temp, 0, len(gen_temp) - 1, start)
        if ok:
            del path[end + 1 :]
        return ok, end

    def _route(self, ant: Individual) -> bool:
        problem = self.problem
        n = problem.num_customers
        path = [0]
        visited = [False] * (n + 1)
        capacity = float(problem.max_capacity)
        start_depot = 0
        served = 0
        while served < n:
            source = path[-1]
            weighted = [
                (self._phi(source, target, visited), target)
                for target in range(1, n + 1)
                if target != source
                and capacity >= problem.demand(target)
                and not visited[target]
            ]
            if not weighted:
                if capacity == problem.max_capacity:
                    raise ValueError("remaining customers exceed the vehicle capacity")
                capacity = float(problem.max_capacity)
                path.append(problem.depot)
                ok, start_depot = self._close_tour(path, start_depot)
                if not ok:
                    return False
                continue
            nxt = self._choose(weighted)
            path.append(nxt)
            visited[nxt] = True
            capacity -= problem.demand(nxt)
            served += 1

        path.append(0)
        ok, _ = self._close_tour(path, start_depot)
        if not ok:
            return False
        ant.solution = path
        ant.steps = len(path)
        if problem.check_solution(path):
            ant.fitness = problem.fitness_evaluation(path, True)
            return True
        return False

    def _rebuild_tours(self, ant: Individual) -> None:
        problem = self.problem
        order: list[int] = []
        tours: list[Segment] = []
        start = 0
        for node in ant.solution[1 : ant.steps]:
            if problem.is_charging_station(node):
                if node == problem.depot:
                    tours.append(Segment(start, len(order) - 1))
                    start = len(order)
            else:
                order.append(node)
        ant.order = order
        ant.tours = tours
        ant.set_tour_index()

    def _update_pheromones(self) -> None:
        self.ants.sort(key=lambda ant: ant.fitness)
        delta = self.delta_pheromones
        count = len(self.ants)

        def deposit(route: list[int], weight: float) -> None:
            for a, b in zip(route, route[1:]):
                delta[a][b] += weight
                delta[b][a] += weight

        for k, ant in enumerate(self.ants[:-1]):
            deposit(ant.solution[: ant.steps], (count - k) / ant.fitness)
        deposit(self.best.tour, count / self.best.tour_length)

        keep = 1.0 - self.ro
        self.pheromones = [
            [keep * tau + self.ro * d for tau, d in zip(tau_row, delta_row)]
            for tau_row, delta_row in zip(self.pheromones, delta)
        ]
        size = len(self.pheromones)
        self.delta_pheromones = [[0.0] * size for _ in range(size)]

    def _perturb_pheromones(self) -> None:
        size = len(self.pheromones)
        average = sum(map(sum, self.pheromones)) / (size * size)
        rate = self.pertu_rate
        self.pheromones = [
            [tau * (1.0 - rate) + rate * average for tau in row] for row in self.pheromones
        ]

    def optimize(self) -> None:
        """Let every ant build a route, then update the pheromones."""
        self._require_init()
        for ant in self.ants:
            for _ in range(self.max_attempts):
                ant.steps = 0
                if self._route(ant):
                    break
            else:
                raise RuntimeError("no feasible route found")
            self._rebuild_tours(ant)
            if self.best.offer(ant.fitness, ant.solution[: ant.steps]):
                self.t_cnt = 0
                self.b_cnt = 0
            else:
                self.b_cnt += 1
                self.t_cnt += 1

        if self.b_cnt == self.k_b and self.sa is not None:
            for ant in self.ants:
                self.sa.run(ant)
            self.b_cnt = 0
        self._update_pheromones()
        if self.t_cnt == self.k_t:
            self._perturb_pheromones()