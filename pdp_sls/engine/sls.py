import time

import numpy as np

from .acceptance import local_choice
from .objective import compute_objective
from ..config.enums import MODE_VEHICLE_DEPENDENT
from ..operators import choose_neighbors


def deadline_from(start, budget_ms, margin_ms=0):
    """Absolute clock reading at which the search must stop."""

    return float(start) + (float(budget_ms) - float(margin_ms)) / 1000.0


def local_search(
    initial,
    deadline,
    p,
    mode=MODE_VEHICLE_DEPENDENT,
    rng=None,
    clock=time.monotonic,
    max_iters=None,
    metrics=None,
    log_period=100,
):
    """Anytime (1 - p)-greedy stochastic local search.

    Iterates while ``clock() < deadline`` (and, when given, for at most
    ``max_iters`` iterations) and returns the cheapest state seen. If the
    deadline has already passed the ``initial`` object itself is returned.
    The search stops early when a state has no valid neighbour.
    """

    if not 0.0 <= float(p) <= 1.0:
        raise ValueError(f"p must lie in [0, 1], got {p}")
    if rng is None:
        rng = np.random.default_rng()
    log_period = max(1, int(log_period))

    start = clock()
    curr = initial
    curr_cost = compute_objective(curr, mode)
    best, best_cost = curr, curr_cost

    it = 0
    while clock() < deadline:
        if max_iters is not None and it >= max_iters:
            break
        it += 1

        candidates = choose_neighbors(curr)
        if not candidates:
            if metrics is not None:
                metrics.append(it, (clock() - start) * 1000.0, curr_cost, best_cost, 0, status="EMPTY")
            break

        prev_cost = curr_cost
        curr = local_choice(candidates, p, rng, mode)
        curr_cost = compute_objective(curr, mode)

        if curr_cost < best_cost:
            best, best_cost = curr, curr_cost
            status = "BEST"
        elif curr_cost < prev_cost:
            status = "IMPROVE"
        else:
            status = "ACCEPT"

        if metrics is not None and ((it % log_period) == 0 or it == 1):
            metrics.append(
                it,
                (clock() - start) * 1000.0,
                curr_cost,
                best_cost,
                len(candidates),
                status=status,
            )

    return best
