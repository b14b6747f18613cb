[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evrpsolver"
version = "0.1.0"
description = "Heuristic solvers for the capacitated electric vehicle routing problem (CEVRP)"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "evrp",
    "cevrp",
    "vehicle routing",
    "electric vehicles",
    "metaheuristics",
    "genetic algorithm",
    "simulated annealing",
    "ant colony optimization",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
evrpsolver = "evrpsolver.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["evrpsolver"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
