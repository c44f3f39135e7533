"""Numba-backed helpers walking and rewriting successor chains.

An action is the integer ``2 * task + kind`` (see :mod:`pdp_sls.config.enums`);
each vehicle's actions form a singly linked chain starting at
``first_action[vehicle]`` and continuing through ``after_pickup[task]`` or
``after_delivery[task]`` depending on the kind of the current action.
"""

from __future__ import annotations

import numpy as np
from numba import njit

from ..config.enums import ACT_PICKUP, NO_ACTION


@njit(cache=True)
def walk_chain(
    vehicle: int,
    first_action: np.ndarray,
    after_pickup: np.ndarray,
    after_delivery: np.ndarray,
) -> np.ndarray:
    """Materialise the ordered action codes of one vehicle."""

    limit = 2 * after_pickup.shape[0]
    out = np.empty(limit, dtype=np.int64)
    count = 0
    a = first_action[vehicle]
    while a != NO_ACTION:
        if count >= limit:
            raise ValueError("action chain does not terminate")
        out[count] = a
        count += 1
        t = a // 2
        if a % 2 == ACT_PICKUP:
            a = after_pickup[t]
        else:
            a = after_delivery[t]
    return out[:count]


@njit(cache=True)
def write_chain(
    vehicle: int,
    seq: np.ndarray,
    task_vehicle: np.ndarray,
    pickup_rank: np.ndarray,
    delivery_rank: np.ndarray,
    first_action: np.ndarray,
    after_pickup: np.ndarray,
    after_delivery: np.ndarray,
) -> None:
    """Splice an explicit action sequence back into the index arrays in place."""

    L = seq.shape[0]
    if L == 0:
        first_action[vehicle] = NO_ACTION
        return

    first_action[vehicle] = seq[0]
    for i in range(L):
        a = seq[i]
        t = a // 2
        nxt = seq[i + 1] if i + 1 < L else NO_ACTION
        task_vehicle[t] = vehicle
        if a % 2 == ACT_PICKUP:
            pickup_rank[t] = i
            after_pickup[t] = nxt
        else:
            delivery_rank[t] = i
            after_delivery[t] = nxt


@njit(cache=True)
def load_feasible(
    vehicle: int,
    first_action: np.ndarray,
    after_pickup: np.ndarray,
    after_delivery: np.ndarray,
    task_weight: np.ndarray,
    capacity: float,
) -> bool:
    """Return ``True`` if the running load never exceeds ``capacity``."""

    limit = 2 * after_pickup.shape[0]
    steps = 0
    load = 0.0
    a = first_action[vehicle]
    while a != NO_ACTION:
        if steps >= limit:
            raise ValueError("action chain does not terminate")
        steps += 1
        t = a // 2
        if a % 2 == ACT_PICKUP:
            load += task_weight[t]
            if load > capacity:
                return False
            a = after_pickup[t]
        else:
            load -= task_weight[t]
            a = after_delivery[t]
    return True


@njit(cache=True)
def route_costs(
    first_action: np.ndarray,
    after_pickup: np.ndarray,
    after_delivery: np.ndarray,
    veh_home: np.ndarray,
    veh_cost: np.ndarray,
    task_pickup: np.ndarray,
    task_delivery: np.ndarray,
    dist: np.ndarray,
    include_home: bool,
) -> np.ndarray:
    """Per-vehicle travel cost of the routes implied by the chains.

    Every hop between consecutive actions is priced at the vehicle's cost per
    distance unit; the leg from the home city to the first action is only
    counted when ``include_home`` is set.
    """

    m = first_action.shape[0]
    limit = 2 * after_pickup.shape[0]
    out = np.zeros(m, dtype=np.float64)
    for v in range(m):
        a = first_action[v]
        if a == NO_ACTION:
            continue
        t = a // 2
        if include_home:
            prev = veh_home[v]
        elif a % 2 == ACT_PICKUP:
            prev = task_pickup[t]
        else:
            prev = task_delivery[t]

        length = 0.0
        steps = 0
        while a != NO_ACTION:
            if steps >= limit:
                raise ValueError("action chain does not terminate")
            steps += 1
            t = a // 2
            if a % 2 == ACT_PICKUP:
                city = task_pickup[t]
                a = after_pickup[t]
            else:
                city = task_delivery[t]
                a = after_delivery[t]
            length += dist[prev, city]
            prev = city
        out[v] = veh_cost[v] * length
    return out
