"""Constructive heuristics producing a first feasible route state.

All builders append actions through two primitives, :func:`assign_pickup`
and :func:`flush_deliveries`, which keep one :class:`VehicleBuildState` per
vehicle while the chains are being laid out.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ..config.enums import (
    ACT_DELIVERY,
    ACT_PICKUP,
    INIT_CHEAPEST_COST,
    INIT_CLOSEST_VEHICLE,
    INIT_IDS,
    INIT_LARGEST_CAPACITY,
    NO_ACTION,
)
from ..data.model import Problem, Task, encode_action
from ..engine.objective import is_load_constraint_satisfied
from ..engine.route_state import RouteState


class InfeasibleProblem(ValueError):
    """Some task cannot be carried by any vehicle of the fleet."""


@dataclass
class VehicleBuildState:
    """Per-vehicle accumulator used while a heuristic lays out a chain."""

    time: int = 0
    carried: List[int] = field(default_factory=list)
    previous_action: int = NO_ACTION

    def weight_sum(self, problem: Problem) -> float:
        if not self.carried:
            return 0.0
        return float(problem.task_weight[self.carried].sum())

    @classmethod
    def at_chain_end(cls, state: RouteState, vehicle: int) -> "VehicleBuildState":
        """Build state positioned after the last action of an existing chain."""

        seq = state.sequence(vehicle)
        previous = int(seq[-1]) if seq.size else NO_ACTION
        return cls(time=int(seq.size), previous_action=previous)


def _link_after(state: RouteState, previous: int, action: int) -> None:
    if previous % 2 == ACT_PICKUP:
        state.after_pickup[previous // 2] = action
    else:
        state.after_delivery[previous // 2] = action


def assign_pickup(state: RouteState, task: int, vehicle: int, build: VehicleBuildState) -> None:
    """Append a pickup of ``task`` to ``vehicle``'s chain (in place)."""

    t = state.check_task(task)
    v = state.check_vehicle(vehicle)
    action = encode_action(t, ACT_PICKUP)

    state.vehicle[t] = v
    if build.previous_action == NO_ACTION:
        state.first_action[v] = action
    else:
        _link_after(state, build.previous_action, action)
    state.pickup_rank[t] = build.time
    state.after_pickup[t] = NO_ACTION

    build.previous_action = action
    build.carried.append(t)
    build.time += 1


def flush_deliveries(state: RouteState, build: VehicleBuildState) -> None:
    """Append deliveries of every carried task, in pickup order (in place)."""

    for t in build.carried:
        action = encode_action(t, ACT_DELIVERY)
        _link_after(state, build.previous_action, action)
        state.delivery_rank[t] = build.time
        state.after_delivery[t] = NO_ACTION
        build.previous_action = action
        build.time += 1
    build.carried = []


def _check_capacity(problem: Problem) -> None:
    if problem.n_vehicles == 0:
        raise InfeasibleProblem("no vehicle available for the tasks")
    if problem.max_weight() > problem.max_capacity():
        raise InfeasibleProblem(
            f"heaviest task ({problem.max_weight():g}) exceeds the largest capacity "
            f"({problem.max_capacity():g})"
        )


def _sweep_fill(problem: Problem, vehicle_order: Sequence[int], task_order: Sequence[int]) -> RouteState:
    """Fill vehicles one after the other, wrapping around once all were used.

    A vehicle that is left behind delivers everything it carries first, so it
    is empty (and usable again) when the sweep wraps back to it.
    """

    state = RouteState(problem)
    builds = {v: VehicleBuildState() for v in vehicle_order}
    weights = problem.task_weight
    caps = problem.veh_capacity

    idx = 0
    current = vehicle_order[0]
    pos = 0
    while pos < len(task_order):
        t = task_order[pos]
        build = builds[current]
        if build.weight_sum(problem) + weights[t] <= caps[current]:
            assign_pickup(state, t, current, build)
            pos += 1
        else:
            flush_deliveries(state, build)
            idx = (idx + 1) % len(vehicle_order)
            current = vehicle_order[idx]

    for build in builds.values():
        flush_deliveries(state, build)
    return state


def init_largest_capacity(problem: Problem) -> RouteState:
    """Heaviest tasks go to the vehicle with the largest capacity first."""

    _check_capacity(problem)
    caps = problem.veh_capacity
    weights = problem.task_weight
    vehicles = sorted(range(problem.n_vehicles), key=lambda v: caps[v], reverse=True)
    tasks = sorted(range(problem.n_tasks), key=lambda t: weights[t], reverse=True)
    return _sweep_fill(problem, vehicles, tasks)


def init_cheapest_cost(problem: Problem) -> RouteState:
    """Lightest tasks go to the vehicle with the cheapest cost per km first."""

    _check_capacity(problem)
    costs = problem.veh_cost
    weights = problem.task_weight
    vehicles = sorted(range(problem.n_vehicles), key=lambda v: costs[v])
    tasks = sorted(range(problem.n_tasks), key=lambda t: weights[t])
    return _sweep_fill(problem, vehicles, tasks)


def init_closest_vehicle(problem: Problem) -> RouteState:
    """Give every task to the nearest vehicle (by home city) with spare capacity.

    Cities are expanded best-first from the task's pickup city. When no vehicle
    can take the task, every vehicle delivers what it carries and the task goes
    to the last vehicle examined whatever its capacity. That vehicle may be
    smaller than the task: :func:`_check_capacity` only compares the heaviest
    task with the largest capacity, so the fallback can return an overloaded
    chain. :func:`build_initial` checks every chain of this builder and raises
    :class:`InfeasibleProblem` in that case.
    """

    _check_capacity(problem)
    topology = problem.topology
    dist = problem.dist
    weights = problem.task_weight
    caps = problem.veh_capacity

    homes = {c: [] for c in topology.cities()}
    for v in range(problem.n_vehicles):
        homes[int(problem.veh_home[v])].append(v)

    state = RouteState(problem)
    builds = [VehicleBuildState() for _ in range(problem.n_vehicles)]
    current = 0

    for t in range(problem.n_tasks):
        pickup = int(problem.task_pickup[t])
        queue = [(0.0, pickup)]
        visited = {pickup}
        assigned = False

        while queue and not assigned:
            _, city = heapq.heappop(queue)
            for v in homes[city]:
                current = v
                if builds[v].weight_sum(problem) + weights[t] <= caps[v]:
                    assign_pickup(state, t, v, builds[v])
                    assigned = True
                    break
            for nb in topology.neighbors(city):
                if nb not in visited:
                    visited.add(nb)
                    heapq.heappush(queue, (float(dist[nb, pickup]), nb))

        if not assigned:
            for build in builds:
                flush_deliveries(state, build)
            assign_pickup(state, t, current, builds[current])

    for build in builds:
        flush_deliveries(state, build)
    return state


_BUILDERS = {
    INIT_LARGEST_CAPACITY: init_largest_capacity,
    INIT_CLOSEST_VEHICLE: init_closest_vehicle,
    INIT_CHEAPEST_COST: init_cheapest_cost,
}


def build_initial(problem: Problem, heuristic_id: int = INIT_LARGEST_CAPACITY) -> RouteState:
    """Build the initial solution with heuristic ``1``, ``2`` or ``3``.

    Raises
    ------
    ValueError
        For an unknown heuristic id.
    InfeasibleProblem
        When some task is heavier than every vehicle's capacity, or when the
        closest-vehicle fallback left a vehicle overloaded.
    """

    if heuristic_id not in INIT_IDS:
        raise ValueError(f"initial solution id must be one of {INIT_IDS}, got {heuristic_id}")
    if problem.n_tasks == 0:
        return RouteState(problem)
    state = _BUILDERS[heuristic_id](problem)
    if heuristic_id == INIT_CLOSEST_VEHICLE:
        overloaded = [v for v in range(problem.n_vehicles) if not is_load_constraint_satisfied(state, v)]
        if overloaded:
            raise InfeasibleProblem(
                f"closest-vehicle fallback overloaded vehicle(s) {overloaded}; "
                "try another initial solution heuristic"
            )
    return state


def insert_random(state: RouteState, task: Task, rng: np.random.Generator) -> RouteState:
    """Return a new state carrying ``task`` at the end of a random vehicle's chain.

    The vehicle is drawn uniformly among those able to hold the task; the
    input state is left untouched.
    """

    problem = state.problem.with_task(task)
    seeded = state.extended(problem)
    t = int(task.id)

    able = np.flatnonzero(problem.veh_capacity >= problem.task_weight[t])
    if able.size == 0:
        raise InfeasibleProblem(f"task {t} (weight {task.weight:g}) exceeds every vehicle's capacity")
    v = int(able[rng.integers(able.size)])

    build = VehicleBuildState.at_chain_end(seeded, v)
    assign_pickup(seeded, t, v, build)
    flush_deliveries(seeded, build)
    return seeded
