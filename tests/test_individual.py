import random

import pytest

from evrpsolver.individual import Individual, Segment, two_opt
from evrpsolver.problem import INF, Node, Problem


def make_problem():
    nodes = [
        Node(0, 0.0, 0.0),
        Node(1, 1.0, 0.0),
        Node(2, 2.0, 0.0),
        Node(3, 0.0, 1.0),
        Node(4, 0.0, 2.0),
        Node(5, 1.0, 1.0),
    ]
    problem = Problem(
        nodes,
        [0, 3, 3, 3, 3],
        max_capacity=10,
        battery_capacity=1000,
        energy_rate=1.0,
        num_stations=1,
    )
    problem.compute_nearest_points()
    return problem


def route_length(problem, seq):
    full = [0] + list(seq) + [0]
    return sum(problem.distances[a][b] for a, b in zip(full, full[1:]))


def test_two_opt_keeps_customers_and_does_not_worsen():
    problem = make_problem()
    seq = [2, 3, 1, 4]
    before = route_length(problem, seq)
    two_opt(problem, seq)
    assert sorted(seq) == [1, 2, 3, 4]
    assert route_length(problem, seq) <= before


@pytest.mark.parametrize("kind", ["random", "optimal"])
@pytest.mark.parametrize("seed", range(10))
def test_init_builds_valid_solution(kind, seed):
    problem = make_problem()
    ind = Individual(problem, rng=random.Random(seed))
    ind.init(kind)
    assert ind.is_valid_order()
    assert ind.fitness < INF
    assert ind.solution[0] == 0 and ind.solution[-1] == 0
    assert ind.steps == len(ind.solution)
    assert ind.is_valid_solution()
    assert ind.fitness == pytest.approx(route_length(problem, ind.solution[1:-1]))


def test_copy_order_is_independent():
    problem = make_problem()
    a = Individual(problem, rng=random.Random(1))
    a.init("optimal")
    b = Individual(problem, rng=random.Random(2))
    b.copy_order(a)
    assert b.order == a.order
    assert b.fitness == a.fitness
    b.order[0] = 99
    b.tours[0].left = 42
    assert a.order[0] != 99
    assert a.tours[0].left != 42


def test_set_tour_index_and_capacity():
    problem = make_problem()
    ind = Individual(problem)
    ind.order = [1, 2, 3, 4]
    ind.tours = [Segment(0, 1), Segment(2, 3)]
    ind.set_tour_index()
    assert ind.tour_index[1:] == [0, 0, 1, 1]
    assert ind.get_capacity_of_tour(0) == 6.0
    assert ind.check_full_capacity()
    ind.tours = [Segment(0, 3)]
    assert not ind.check_full_capacity()


def test_is_valid_order_rejects_duplicates_and_out_of_range():
    problem = make_problem()
    ind = Individual(problem)
    ind.order = [1, 1, 3, 4]
    assert not ind.is_valid_order()
    ind.order = [1, 2, 3, 5]
    assert not ind.is_valid_order()
    ind.order = [4, 3, 2, 1]
    assert ind.is_valid_order()


def test_add_penalty_scales_fitness():
    problem = make_problem()
    ind = Individual(problem)
    ind.fitness = 10.0
    ind.add_penalty()
    assert ind.fitness == pytest.approx(13.0)


@pytest.mark.parametrize("seed", range(15))
def test_neighbourhood_moves_keep_permutation(seed):
    problem = make_problem()
    ind = Individual(problem, rng=random.Random(seed))
    ind.init("random")
    for move in (ind.greedy_1, ind.greedy_2, ind.mutation):
        move()
        assert ind.is_valid_order()
        covered = sorted(
            c for s in ind.tours for c in ind.order[s.left : s.right + 1]
        )
        assert covered == [1, 2, 3, 4]


def test_show_mentions_fitness_and_tours():
    problem = make_problem()
    ind = Individual(problem, rng=random.Random(3))
    ind.init("random")
    text = ind.show()
    assert "Fitness:" in text
    assert f"Number of steps: {ind.steps}" in text
    assert text.count("Tour ") == ind.num_of_tours


def test_redistribute_requires_tours():
    problem = make_problem()
    ind = Individual(problem)
    ind.tours = []
    with pytest.raises(ValueError):
        ind.redistribute_customer()