"""Insertion and placement of charging stations along vehicle routes."""

from __future__ import annotations

from typing import Iterator, MutableSequence, Sequence

from .problem import INF, MAX_NODE, MAX_NUM_FINDING_SAFE, Problem


def _put(seq: MutableSequence[int], index: int, value: int) -> None:
    """Store a value, growing the sequence with zeros when needed."""
    if index >= len(seq):
        seq.extend([0] * (index + 1 - len(seq)))
    seq[index] = value


def _rewind(full_path: Sequence[int], count: int, node: int) -> tuple[int, int]:
    """Step back to the last position before ``count`` holding ``node``.

    Returns that position and how many other positions were passed over.
    """
    count -= 1
    skipped = 0
    while full_path[count] != node:
        if count <= 0:
            raise RuntimeError(f"node {node} is not on the partial route")
        count -= 1
        skipped += 1
    return count, skipped


class StationPlanner:
    """Makes routes energy-feasible by visiting charging stations.

    The remaining-energy table is shared between calls, so one planner should
    serve every route built for the same problem.
    """

    def __init__(self, problem: Problem, mode: int = 1) -> None:
        self.problem = problem
        self.mode = mode
        self.remaining_energy: list[int] = [0] * MAX_NODE

    def _candidates(self) -> Iterator[int]:
        problem = self.problem
        for node in range(problem.num_customers + 1, problem.actual_size):
            if not problem.is_charging_station(node):
                yield 0
                return
            yield node

    def _remaining(self, index: int) -> int:
        if index < len(self.remaining_energy):
            return self.remaining_energy[index]
        return 0

    def nearest_station(self, source: int, target: int, energy: float) -> int:
        """The reachable station closest to ``target``, or -1 if none is reachable."""
        problem = self.problem
        best_station = -1
        min_length = INF
        for station in self._candidates():
            length = problem.distance(station, target)
            if problem.energy_consumption(source, station) <= energy and min_length > length:
                min_length = length
                best_station = station
        return best_station

    def nearest_station_back(self, source: int, target: int, energy: float) -> int:
        """The reachable station giving the shortest detour, or -1 if none is reachable."""
        problem = self.problem
        best_station = -1
        min_length = INF
        for station in self._candidates():
            if problem.energy_consumption(source, station) <= energy:
                length = problem.distance(source, station) + problem.distance(station, target)
                if min_length > length:
                    min_length = length
                    best_station = station
        return best_station

    def optimize_station(self, full_path: MutableSequence[int], left: int, right: int) -> None:
        """Move each station of ``full_path[left:right + 1]`` to where its detour is cheapest."""
        problem = self.problem
        battery = problem.battery_capacity
        energy = float(battery)
        i = right
        while i - 2 > left:
            previous = full_path[i - 1]
            if not problem.is_charging_station(previous):
                energy -= problem.energy_consumption(full_path[i], previous)
                i -= 1
                continue

            reach = energy
            source = full_path[i]
            path: list[int] = []
            for j in range(i - 2, left - 1, -1):
                node = full_path[j]
                if problem.is_charging_station(node):
                    break
                reach -= problem.energy_consumption(source, node)
                if reach <= 0:
                    break
                path.append(node)
                source = node

            best_delta = (
                problem.distance(full_path[i], full_path[i - 1])
                + problem.distance(full_path[i - 1], full_path[i - 2])
                - problem.distance(full_path[i], full_path[i - 2])
            )
            index = 0
            source = full_path[i]
            best_station = full_path[i - 1]
            for j, target in enumerate(path):
                if self.mode == 1:
                    station = self.nearest_station(source, target, energy)
                else:
                    station = self.nearest_station_back(source, target, energy)
                energy -= problem.energy_consumption(source, target)
                if station != -1:
                    if j == 0:
                        if problem.distance(best_station, target) > problem.distance(station, target):
                            delta = (
                                problem.distance(source, station)
                                + problem.distance(station, target)
                                - problem.distance(source, target)
                            )
                            if delta < best_delta:
                                best_delta = delta
                                best_station = station
                                index = j
                    else:
                        delta = (
                            problem.distance(source, station)
                            + problem.distance(station, target)
                            - problem.distance(source, target)
                        )
                        if (
                            delta < best_delta
                            and self._remaining(target)
                            + problem.energy_consumption(station, target)
                            <= battery
                        ):
                            best_delta = delta
                            best_station = station
                            index = j
                source = target

            position = i - 1
            for j, node in enumerate(path):
                if j == index:
                    full_path[position] = best_station
                    position -= 1
                full_path[position] = node
                position -= 1
            i -= index
            energy = float(battery)
            i -= 1

    def complete_subgen(
        self,
        full_path: MutableSequence[int],
        gen_temp: Sequence[int],
        left: int,
        right: int,
        start: int,
    ) -> tuple[bool, int]:
        """Copy ``gen_temp[left:right]`` into ``full_path`` from ``start``, adding stations.

        Returns whether a feasible route was found and the position after the
        last node written; the closing node ``gen_temp[right]`` is not counted.
        """
        problem = self.problem
        battery = problem.battery_capacity
        remaining = self.remaining_energy
        count = start
        energy = float(battery)

        for j in range(left, right + 1):
            _put(remaining, j, 0)
        tried = [False] * (right - left + 1)
        remaining[left] = battery

        attempts = 0
        j = left
        while j < right:
            source = gen_temp[j]
            target = gen_temp[j + 1]
            cost = problem.energy_consumption(source, target)
            if cost <= energy:
                _put(full_path, count, source)
                count += 1
                energy -= cost
                _put(remaining, j + 1, int(energy))
                j += 1
                continue

            while True:
                attempts += 1
                if tried[j - left] or attempts == MAX_NUM_FINDING_SAFE:
                    return False, count
                tried[j - left] = True
                best_station = self.nearest_station(source, target, energy)
                if best_station == -1:
                    while tried[j - left] and j - 1 >= left:
                        j -= 1
                        count, _ = _rewind(full_path, count, gen_temp[j])
                        energy = float(remaining[j])
                        source = gen_temp[j]
                        target = gen_temp[j + 1]
                    continue
                energy = battery - problem.energy_consumption(best_station, target)
                if target == 0:
                    energy = float(battery)
                if energy <= remaining[j + 1]:
                    while tried[j - left] and j - 1 >= left:
                        j -= 1
                        count, skipped = _rewind(full_path, count, gen_temp[j])
                        if skipped:
                            energy = float(remaining[j])
                        source = gen_temp[j]
                        target = gen_temp[j + 1]
                    continue
                _put(full_path, count, source)
                _put(full_path, count + 1, best_station)
                count += 2
                remaining[j + 1] = int(energy)
                break
            j += 1

        _put(full_path, count, 0)
        _put(remaining, start, battery)
        for i in range(start + 1, count + 1):
            if problem.is_charging_station(full_path[i]):
                value = battery
            else:
                value = int(
                    remaining[i - 1] - problem.energy_consumption(full_path[i], full_path[i - 1])
                )
            _put(remaining, i, value)
        if self.mode == 1:
            self.optimize_station(full_path, start, count)
        return True, count