# evrpsolver

Heuristic solvers for the capacitated electric vehicle routing problem
(CEVRP). Vehicles with limited cargo capacity and a limited battery serve
every customer from a single depot, recharging at charging stations on
the way. The aim is the shortest total tour length.

Four algorithms are available:

- `GS` (`evrpsolver.greedy.GreedySearch`) – builds one solution by growing
  tours from random seed customers with their nearest neighbours
- `HMAGS` (`evrpsolver.hmags.HMAGS`) – a genetic algorithm with rank
  selection, tour-based crossover and mutation
- `SA` (`evrpsolver.sa.SimulatedAnnealing`) – simulated annealing over
  greedy neighbourhood moves
- `SACO` (`evrpsolver.saco.SACO`) – ant colony optimisation with
  rank-weighted pheromone updates, pheromone perturbation and annealing of
  the ants when the colony stops improving

Charging stations are inserted and repositioned along each tour by
`evrpsolver.charging.StationPlanner`.

## Installation

```
pip install .
```

The package has no dependencies outside the standard library.

## Command line

```
evrpsolver <algorithm> <problem_instance> <output_path> [--root DIR] [--trials N]
```

- `algorithm` is one of `GS`, `HMAGS`, `SA`, `SACO`.
- `problem_instance` is an `.evrp` file looked up as
  `<root>/benchmark/<problem_instance>`.
- `output_path` is the results directory, relative to the root.
- `--root` sets the project root; it defaults to the current directory.
- `--trials` sets the number of runs; it defaults to 10.

The same command is available as `python -m evrpsolver.cli`.

Run *r* (counting from 1) uses a random generator seeded with *r*.
`HMAGS` and `SACO` repeat generations until `25000 × (number of nodes)`
fitness evaluations have been spent; `SA` stops at that budget or when its
temperature reaches its final value; `GS` constructs a single solution.

Results go to `<output_path>/<algorithm>/<instance name>/`:

- `stats.<instance>.txt` – the best value of every run, then the mean,
  sample standard deviation, minimum and maximum
- `<run>/solution.<instance>.txt` – the best tour length of the run (eight
  decimals) and its node sequence
- `<run>/evols.<instance>.csv` – for `HMAGS` only, the best objective, the
  evaluation count and the elapsed seconds after each generation

The command exits with status 1 if the instance file is missing, the
algorithm is unknown or the instance cannot be parsed.

## Instance format

Instances are plain text with `KEY: value` headers (`DIMENSION`,
`STATIONS`, `CAPACITY`, `ENERGY_CAPACITY`, `ENERGY_CONSUMPTION`,
`VEHICLES`, `OPTIMAL_VALUE`, `EDGE_WEIGHT_TYPE: EUC_2D`) followed by a
`NODE_COORD_SECTION`, a `DEMAND_SECTION` and a `DEPOT_SECTION`. Node ids in
the file count from 1; inside the package they count from 0. Malformed
files raise `evrpsolver.problem.ProblemFormatError`.

## Library use

```python
from evrpsolver.problem import read_problem, save_solution
from evrpsolver.greedy import GreedySearch

problem = read_problem("benchmark/E-n22-k4.evrp")
search = GreedySearch(problem)
if search.run():
    print(search.best.tour_length, search.best.tour)
save_solution(search.best, "results", "E-n22-k4.evrp", run=1)
```

Main pieces:

- `evrpsolver.problem` – `Problem` (distances, energy use, demands,
  `fitness_evaluation`, `check_solution`, the evaluation counter and
  `termination_condition`), `parse_problem`, `read_problem`,
  `BestSolution`, `format_solution`, `save_solution`, `save_conv`
- `evrpsolver.individual` – `Individual`, a customer order split into
  tours and completed into a full route, and `two_opt`
- `evrpsolver.stats` – `mean`, `stdev`, `format_summary`, and the
  `TrialStats` and `EvolutionLog` writers (both usable as context managers)
- `evrpsolver.randoms.Randoms` – a seeded Park–Miller generator with
  Bays–Durham shuffle and Gaussian deviates
- `evrpsolver.clock.Clock` – a processor-time stopwatch
- `evrpsolver.cli` – `start_run`, `end_run`, `run_algorithm` and `main`

`SimulatedAnnealing` accepts `conv_path` to write the fitness trace of a
run, one value per line, with `save_conv`.

## Running the tests

```
pip install .[test]
pytest
```