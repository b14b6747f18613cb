import random

from evrpsolver.individual import Individual
from evrpsolver.problem import INF, Node, Problem
from evrpsolver.sa import SimulatedAnnealing

COORDS = [(0, 0), (10, 0), (12, 2), (0, 10), (2, 12), (-10, 0), (-12, -2), (5, 5)]


def _problem(battery=100):
    nodes = [Node(i, float(x), float(y)) for i, (x, y) in enumerate(COORDS)]
    return Problem(
        nodes,
        [0, 1, 1, 1, 1, 1, 1],
        max_capacity=2,
        battery_capacity=battery,
        energy_rate=1.0,
        num_stations=1,
    )


def _annealer(problem, **kwargs):
    return SimulatedAnnealing(problem, rng=random.Random(3), alpha=10.0, **kwargs)


def test_run_finds_valid_best():
    problem = _problem()
    sa = _annealer(problem)
    ant = Individual(problem, sa.planner, sa.rng)
    ant.init("optimal")
    best = sa.run(ant)
    assert best.tour_length < INF
    assert problem.check_solution(best.tour)
    assert best.tour[0] == 0 and best.tour[-1] == 0
    assert abs(problem.fitness_evaluation(best.tour, False) - best.tour_length) < 1e-9
    assert sa.conv


def test_run_keeps_order_a_permutation():
    problem = _problem()
    sa = _annealer(problem)
    ant = Individual(problem, sa.planner, sa.rng)
    ant.init("optimal")
    sa.run(ant)
    assert ant.is_valid_order()
    assert ant.check_full_capacity()


def test_run_without_budget_does_nothing(tmp_path):
    problem = _problem()
    target = tmp_path / "conv.txt"
    sa = _annealer(problem, conv_path=target)
    ant = Individual(problem, sa.planner, sa.rng)
    ant.init("optimal")
    problem.evals = problem.termination
    best = sa.run(ant)
    assert best.tour_length == INF
    assert sa.conv == []
    assert target.read_text() == ""


def test_conv_written_one_value_per_line(tmp_path):
    problem = _problem()
    target = tmp_path / "out" / "conv.txt"
    sa = _annealer(problem, conv_path=target)
    ant = Individual(problem, sa.planner, sa.rng)
    ant.init("optimal")
    sa.run(ant)
    lines = target.read_text().splitlines()
    assert len(lines) == len(sa.conv)


def test_run_generates_individual_without_tours():
    problem = _problem()
    sa = _annealer(problem)
    best = sa.run(sa.cur_sol)
    assert sa.cur_sol.num_of_tours > 0
    assert problem.check_solution(best.tour)


def test_init_copies_order_and_builds_route():
    problem = _problem()
    sa = _annealer(problem)
    ant = Individual(problem, sa.planner, sa.rng)
    ant.init("optimal")
    sa.init(ant)
    assert sa.cur_sol.order == ant.order
    assert sa.cur_sol.is_valid_solution()
    assert abs(sa.cur_sol.fitness - ant.fitness) < 1e-9


def test_best_never_worse_than_offered():
    problem = _problem()
    sa = _annealer(problem)
    ant = Individual(problem, sa.planner, sa.rng)
    ant.init("optimal")
    sa.best.offer(ant.fitness, ant.solution[: ant.steps])
    start = sa.best.tour_length
    best = sa.run(ant)
    assert best.tour_length <= start