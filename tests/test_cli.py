from pathlib import Path

import pytest

from evrpsolver.cli import end_run, main, run_algorithm, start_run
from evrpsolver.problem import INF, parse_problem
from evrpsolver.stats import TrialStats

INSTANCE = """NAME: tiny
TYPE: EVRP
OPTIMAL_VALUE: 40
VEHICLES: 1
DIMENSION: 4
STATIONS: 1
CAPACITY: 10
ENERGY_CAPACITY: 100
ENERGY_CONSUMPTION: 1.0
EDGE_WEIGHT_TYPE: EUC_2D
NODE_COORD_SECTION
1 0 0
2 10 0
3 0 10
4 10 10
5 5 5
DEMAND_SECTION
1 0
2 3
3 3
4 3
DEPOT_SECTION
1
-1
EOF
"""


@pytest.fixture
def root(tmp_path):
    bench = tmp_path / "benchmark"
    bench.mkdir()
    (bench / "tiny.evrp").write_text(INSTANCE)
    return tmp_path


def _read_tour(path: Path):
    first, second = path.read_text().splitlines()[:2]
    assert second.endswith(",")
    return float(first), [int(x) for x in second.rstrip(",").split(",")]


def test_start_run_resets_counters(capsys):
    problem = parse_problem(INSTANCE)
    problem.evals = 12.0
    problem.current_best = 3.0
    start_run(problem, 4)
    assert problem.evals == 0.0
    assert problem.current_best == INF
    assert "Run: 4 with random seed 4" in capsys.readouterr().out


def test_end_run_records_best(tmp_path):
    problem = parse_problem(INSTANCE)
    problem.current_best = 42.5
    with TrialStats(tmp_path, "tiny.evrp", trials=3) as stats:
        assert end_run(problem, stats, 2) == 42.5
        assert stats.values == [0.0, 42.5, 0.0]


def test_run_algorithm_unknown_raises(tmp_path):
    problem = parse_problem(INSTANCE)
    with pytest.raises(ValueError):
        run_algorithm("XYZ", problem, "tiny.evrp", tmp_path, 1)


def test_run_algorithm_greedy_writes_solution(tmp_path):
    problem = parse_problem(INSTANCE)
    problem.compute_nearest_points()
    best = run_algorithm("GS", problem, "tiny.evrp", tmp_path, 1)
    length, tour = _read_tour(tmp_path / "1" / "solution.tiny.txt")
    assert tour == best.tour
    assert length == pytest.approx(best.tour_length, abs=1e-7)
    assert problem.check_solution(tour)


def test_run_algorithm_saco_single_iteration(tmp_path):
    problem = parse_problem(INSTANCE)
    problem.evals = problem.termination - 1
    best = run_algorithm("SACO", problem, "tiny.evrp", tmp_path, 1)
    assert problem.check_solution(best.tour)
    assert problem.evals >= problem.termination
    _, tour = _read_tour(tmp_path / "1" / "solution.tiny.txt")
    assert tour == best.tour


def test_run_algorithm_hmags_writes_evolution_log(tmp_path):
    problem = parse_problem(INSTANCE)
    problem.evals = problem.termination - 1
    best = run_algorithm("HMAGS", problem, "tiny.evrp", tmp_path, 2)
    log = (tmp_path / "2" / "evols.tiny.csv").read_text().splitlines()
    assert log[0] == "obj,evals,time"
    assert problem.check_solution(best.tour)


def test_main_greedy_runs_and_writes_stats(root, capsys):
    code = main(["GS", "tiny.evrp", "out", "--root", str(root), "--trials", "2"])
    assert code == 0
    base = root / "out" / "GS" / "tiny"
    stats_lines = (base / "stats.tiny.txt").read_text().splitlines()
    assert len(stats_lines) == 5
    assert stats_lines[2].startswith("Mean ")
    assert stats_lines[3].startswith("Min: ")
    assert stats_lines[4].startswith("Max: ")
    problem = parse_problem(INSTANCE)
    for run in (1, 2):
        length, tour = _read_tour(base / str(run) / f"solution.tiny.txt")
        assert problem.check_solution(tour)
        assert float(stats_lines[run - 1]) == pytest.approx(length, abs=0.006)
    assert "Running 2 times" in capsys.readouterr().out


def test_main_missing_instance(root, capsys):
    assert main(["GS", "absent.evrp", "out", "--root", str(root)]) == 1
    assert "not found" in capsys.readouterr().err


def test_main_unknown_algorithm(root, capsys):
    assert main(["XYZ", "tiny.evrp", "out", "--root", str(root), "--trials", "1"]) == 1
    assert 'Algorithm "XYZ" not found' in capsys.readouterr().err


def test_main_requires_arguments():
    with pytest.raises(SystemExit):
        main(["GS"])