"""Heuristic solvers (greedy, genetic, annealing, ant colony) for the capacitated electric vehicle routing problem."""

__version__ = "0.1.0"

__all__ = [
    "charging",
    "cli",
    "clock",
    "greedy",
    "hmags",
    "individual",
    "problem",
    "randoms",
    "sa",
    "saco",
    "stats",
]