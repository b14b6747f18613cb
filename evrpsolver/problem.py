"""EVRP problem instances: parsing, distances, evaluation and solution output."""

from __future__ import annotations

import math
import re
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

INF = 2e15
MAX_NODE = 1500
MAX_NUM_FINDING_SAFE = 10
EVALS_PER_NODE = 25000

_DELIMITERS = re.compile(r"[ :=\n\t\r\f\v]+")
_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class ProblemFormatError(ValueError):
    """Raised when an instance file cannot be understood."""


@dataclass(frozen=True)
class Node:
    """A node of the instance with a zero-based id and planar coordinates."""

    id: int
    x: float
    y: float


@dataclass
class BestSolution:
    """The best tour found so far in a run."""

    tour_length: float = INF
    tour: list[int] = field(default_factory=list)
    id: int = 1

    @property
    def steps(self) -> int:
        return len(self.tour)

    def offer(self, tour_length: float, tour: Iterable[int]) -> bool:
        """Keep the tour if it is shorter than the current best; report whether it was kept."""
        if tour_length < self.tour_length:
            self.tour_length = tour_length
            self.tour = list(tour)
            return True
        return False


class Problem:
    """An electric vehicle routing instance together with its evaluation counters."""

    def __init__(
        self,
        nodes: Sequence[Node],
        demands: Sequence[int],
        *,
        max_capacity: int,
        battery_capacity: int,
        energy_rate: float,
        depot: int = 0,
        num_stations: int = 0,
        optimum: float = 0.0,
        min_vehicles: int = 0,
    ) -> None:
        if not nodes:
            raise ProblemFormatError("wrong problem instance file")
        self.nodes = list(nodes)
        self.actual_size = len(self.nodes)
        self.num_stations = num_stations
        self.problem_size = self.actual_size - num_stations
        if self.problem_size <= 0:
            raise ProblemFormatError("more stations than nodes")
        if len(demands) < self.problem_size:
            raise ProblemFormatError("missing customer demands")
        self.num_customers = self.problem_size - 1
        self.max_capacity = max_capacity
        self.battery_capacity = battery_capacity
        self.energy_rate = energy_rate
        self.depot = depot
        self.optimum = optimum
        self.min_vehicles = min_vehicles

        self.demands = list(demands[: self.problem_size]) + [0] * num_stations
        self.charging = [i >= self.problem_size for i in range(self.actual_size)]
        if not 0 <= depot < self.actual_size:
            raise ProblemFormatError(f"depot {depot + 1} is not a node")
        self.charging[depot] = True

        self.distances = [
            [math.hypot(a.x - b.x, a.y - b.y) for b in self.nodes] for a in self.nodes
        ]
        self.nearest: list[list[int]] = [[] for _ in range(self.actual_size)]
        self.evals = 0.0
        self.current_best = INF

    @property
    def termination(self) -> int:
        """The evaluation budget of one run."""
        return EVALS_PER_NODE * self.actual_size

    def distance(self, source: int, target: int) -> float:
        """Distance between two nodes; counts as a partial evaluation."""
        self.evals += 1.0 / self.actual_size
        return self.distances[source][target]

    def energy_consumption(self, source: int, target: int) -> float:
        """Energy used travelling between two nodes."""
        return self.energy_rate * self.distances[source][target]

    def demand(self, customer: int) -> int:
        if customer < 0:
            raise ValueError(f"invalid customer {customer}")
        return self.demands[customer]

    def is_charging_station(self, node: int) -> bool:
        if node < 0:
            raise ValueError(f"invalid node {node}")
        return self.charging[node]

    def fitness_evaluation(self, route: Sequence[int], save: bool = True) -> float:
        """Length of a full route; counts as one evaluation."""
        rows = self.distances
        length = sum(rows[a][b] for a, b in zip(route, route[1:]))
        if save and length < self.current_best:
            self.current_best = length
        self.evals += 1
        return length

    def check_solution(self, route: Sequence[int]) -> bool:
        """Whether a route respects capacity, energy and visits each customer once."""
        energy = float(self.battery_capacity)
        capacity = float(self.max_capacity)
        visited = [0] * (self.num_customers + 1)
        for source, target in zip(route, route[1:]):
            if source <= self.num_customers:
                visited[source] += 1
            capacity -= self.demand(target)
            energy -= self.energy_consumption(source, target)
            self.distance(source, target)
            if capacity < 0.0 or energy < 0.0:
                return False
            if target == self.depot:
                capacity = float(self.max_capacity)
                energy = float(self.battery_capacity)
            if self.is_charging_station(target):
                energy = float(self.battery_capacity)
        if any(count != 1 for count in visited[1:]):
            return False
        if not route:
            return False
        return route[0] == 0 and route[-1] == 0

    def compute_nearest_points(self) -> None:
        """For every customer, list all customers by increasing distance."""
        customers = range(1, self.num_customers + 1)
        for i in customers:
            row = self.distances[i]
            self.nearest[i] = sorted(customers, key=row.__getitem__)

    def init_evals(self) -> None:
        self.evals = 0.0

    def init_current_best(self) -> None:
        self.current_best = INF

    def termination_condition(self, rate: float = 1.0) -> bool:
        return self.evals >= rate * self.termination


def _parse_int(token: str | None, what: str) -> int:
    match = _INT_PREFIX.match(token or "")
    if not match:
        raise ProblemFormatError(f"{what} error")
    return int(match.group())


def _parse_float(token: str | None, what: str) -> float:
    match = _FLOAT_PREFIX.match(token or "")
    if not match:
        raise ProblemFormatError(f"{what} error")
    return float(match.group())


def _section_values(lines: deque[str], count: int) -> list[str]:
    values: list[str] = []
    while len(values) < count:
        if not lines:
            raise ProblemFormatError("unexpected end of file in a data section")
        parts = lines.popleft().split()
        needed = count - len(values)
        values.extend(parts[:needed])
        rest = parts[needed:]
        if rest:
            lines.appendleft(" ".join(rest))
    return values


def parse_problem(text: str) -> Problem:
    """Build a problem from the text of an .evrp instance."""
    lines = deque(text.splitlines())
    problem_size = 0
    num_stations = 0
    max_capacity = 0
    battery_capacity = 0
    energy_rate = 0.0
    optimum = 0.0
    min_vehicles = 0
    depot = 0
    nodes: list[Node] = []
    demands: dict[int, int] = {}

    scalar_ints = {
        "DIMENSION",
        "CAPACITY",
        "VEHICLES",
        "ENERGY_CAPACITY",
        "STATIONS",
    }

    while lines:
        tokens = [t for t in _DELIMITERS.split(lines.popleft()) if t]
        if not tokens:
            continue
        keyword = tokens[0]
        value = tokens[1] if len(tokens) > 1 else None
        if keyword in scalar_ints:
            number = _parse_int(value, keyword)
            if keyword == "DIMENSION":
                problem_size = number
            elif keyword == "CAPACITY":
                max_capacity = number
            elif keyword == "VEHICLES":
                min_vehicles = number
            elif keyword == "ENERGY_CAPACITY":
                battery_capacity = number
            else:
                num_stations = number
        elif keyword == "EDGE_WEIGHT_TYPE":
            if value is None:
                raise ProblemFormatError("EDGE_WEIGHT_TYPE error")
            if value != "EUC_2D":
                raise ProblemFormatError("not EUC_2D")
        elif keyword == "ENERGY_CONSUMPTION":
            energy_rate = _parse_float(value, keyword)
        elif keyword == "OPTIMAL_VALUE":
            optimum = _parse_float(value, keyword)
        elif keyword == "NODE_COORD_SECTION":
            if problem_size == 0:
                raise ProblemFormatError("wrong problem instance file")
            count = problem_size + num_stations
            raw = _section_values(lines, 3 * count)
            nodes = [
                Node(
                    _parse_int(raw[3 * i], keyword) - 1,
                    _parse_float(raw[3 * i + 1], keyword),
                    _parse_float(raw[3 * i + 2], keyword),
                )
                for i in range(count)
            ]
        elif keyword == "DEMAND_SECTION":
            if problem_size != 0:
                raw = _section_values(lines, 2 * problem_size)
                for ident, amount in zip(raw[::2], raw[1::2]):
                    index = _parse_int(ident, keyword) - 1
                    if not 0 <= index < problem_size:
                        raise ProblemFormatError(f"demand for unknown node {index + 1}")
                    demands[index] = _parse_int(amount, keyword)
        elif keyword == "DEPOT_SECTION":
            (raw_depot,) = _section_values(lines, 1)
            depot = _parse_int(raw_depot, keyword) - 1

    if not nodes:
        raise ProblemFormatError("wrong problem instance file")
    return Problem(
        nodes,
        [demands.get(i, 0) for i in range(problem_size)],
        max_capacity=max_capacity,
        battery_capacity=battery_capacity,
        energy_rate=energy_rate,
        depot=depot,
        num_stations=num_stations,
        optimum=optimum,
        min_vehicles=min_vehicles,
    )


def read_problem(path: str | Path) -> Problem:
    """Read an .evrp instance file."""
    return parse_problem(Path(path).read_text())


def format_solution(best: BestSolution) -> str:
    """Text of a solution file: the length, then the tour."""
    tour = "".join(f"{node}," for node in best.tour)
    return f"{best.tour_length:.8f}\n{tour}\n"


def save_solution(
    best: BestSolution, output_dir: str | Path, task: str | Path, run: int
) -> Path:
    """Write the best solution of a run and return the file written."""
    run_dir = Path(output_dir) / str(run)
    run_dir.mkdir(parents=True, exist_ok=True)
    target = run_dir / f"solution.{Path(task).stem}.txt"
    target.write_text(format_solution(best))
    return target


def save_conv(conv: Iterable[float], path: str | Path) -> None:
    """Write a convergence trace, one value per line."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text("".join(f"{value:g}\n" for value in conv))