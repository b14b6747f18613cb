import random

from evrpsolver.greedy import GreedySearch
from evrpsolver.problem import INF, BestSolution, Node, Problem

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


def test_run_records_valid_solution():
    problem = _problem()
    search = GreedySearch(problem, rng=random.Random(1))
    assert search.run() is True
    assert search.best.tour_length < INF
    assert problem.check_solution(search.best.tour)
    assert abs(problem.fitness_evaluation(search.best.tour, False) - search.best.tour_length) < 1e-9


def test_nearest_points_computed():
    problem = _problem()
    GreedySearch(problem)
    assert problem.nearest[1][0] == 1
    assert sorted(problem.nearest[1]) == list(range(1, 7))


def test_repeated_runs_never_worsen_best():
    problem = _problem()
    search = GreedySearch(problem, rng=random.Random(5))
    lengths = []
    for _ in range(5):
        search.run()
        lengths.append(search.best.tour_length)
    assert lengths == sorted(lengths, reverse=True)


def test_current_best_tracks_evaluation():
    problem = _problem()
    search = GreedySearch(problem, rng=random.Random(2))
    search.run()
    assert problem.current_best <= search.best.tour_length


def test_shared_best_is_updated():
    problem = _problem()
    best = BestSolution()
    search = GreedySearch(problem, best=best, rng=random.Random(4))
    search.run()
    assert best is search.best
    assert best.tour == search.cur_sol.solution[: search.cur_sol.steps]


def test_infeasible_battery_reports_invalid():
    problem = _problem(battery=1)
    search = GreedySearch(problem, rng=random.Random(1))
    assert search.run() is False
    assert search.best.tour_length == INF
    assert search.best.tour == []