from typing import List

from ..engine.route_state import RouteState
from .reassign import move_task_to_vehicle
from .reorder import change_delivery_rank, change_pickup_rank


def choose_neighbors(state: RouteState) -> List[RouteState]:
    """All valid one-move neighbours of ``state``.

    Three families are generated, in this order: every assigned task moved to
    every other vehicle, then every pickup and finally every delivery shifted
    to each rank in ``[0, 2 * tasks_of_vehicle)``. Degenerate or overloaded
    candidates are dropped by the moves themselves.
    """

    m = state.problem.n_vehicles
    neighbors = []

    for t in state.assigned_tasks():
        for v in range(m):
            n = move_task_to_vehicle(state, t, v)
            if n is not None:
                neighbors.append(n)

    carried = [state.tasks_of(v) for v in range(m)]

    for v in range(m):
        tasks = carried[v]
        for t in tasks:
            for rank in range(2 * tasks.size):
                n = change_pickup_rank(state, t, rank)
                if n is not None:
                    neighbors.append(n)

    for v in range(m):
        tasks = carried[v]
        for t in tasks:
            for rank in range(2 * tasks.size):
                n = change_delivery_rank(state, t, rank)
                if n is not None:
                    neighbors.append(n)

    return neighbors
