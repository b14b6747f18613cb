import statistics

import pytest

from evrpsolver.stats import (
    MAX_TRIALS,
    EvolutionLog,
    TrialStats,
    format_summary,
    mean,
    stdev,
)


def test_mean_matches_statistics():
    values = [3.5, 1.25, 8.0, 4.0]
    assert mean(values) == pytest.approx(statistics.fmean(values))


def test_mean_of_nothing_raises():
    with pytest.raises(ValueError):
        mean([])


def test_stdev_matches_sample_deviation():
    values = [2.0, 4.0, 4.0, 5.0, 9.0]
    assert stdev(values, mean(values)) == pytest.approx(statistics.stdev(values))


def test_stdev_of_single_or_constant_is_zero():
    assert stdev([5.0], 5.0) == 0.0
    assert stdev([3.0, 3.0, 3.0], 3.0) == 0.0


def test_format_summary_layout():
    values = [1.0, 2.0, 4.5]
    lines = format_summary(values).split("\n")
    assert lines[:3] == ["1.00", "2.00", "4.50"]
    assert lines[3].startswith("Mean ")
    assert "\t \tStd Dev " in lines[3]
    assert lines[4] == "Min: 1.00\t "
    assert lines[5] == "Max: 4.50\t "
    assert lines[6] == ""


def test_trial_stats_writes_summary(tmp_path):
    stats = TrialStats(tmp_path / "out", "benchmark/E-n22-k4.evrp")
    stats.record(0, 10.0)
    stats.record(MAX_TRIALS - 1, 20.0)
    path = stats.close()
    assert path.name == "stats.E-n22-k4.txt"
    expected = [10.0] + [0.0] * (MAX_TRIALS - 2) + [20.0]
    assert path.read_text() == format_summary(expected)


def test_trial_stats_rejects_out_of_range_run(tmp_path):
    with TrialStats(tmp_path, "x.evrp", trials=2) as stats:
        with pytest.raises(IndexError):
            stats.record(2, 1.0)
        with pytest.raises(IndexError):
            stats.record(-1, 1.0)


def test_evolution_log_csv(tmp_path):
    with EvolutionLog(tmp_path, "bench/E-n22-k4.evrp", 3) as log:
        log.write(12.5, 100, 1.25)
    path = tmp_path / "3" / "evols.E-n22-k4.csv"
    assert path.read_text().splitlines() == ["obj,evals,time", "12.50,100.00,1.25"]