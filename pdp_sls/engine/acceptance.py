import numpy as np

from ..config.enums import MODE_VEHICLE_DEPENDENT
from .objective import compute_objective


def best_candidates(candidates, mode=MODE_VEHICLE_DEPENDENT):
    """Indices of the candidates tied at the lowest objective, and that objective."""

    costs = np.array([compute_objective(c, mode) for c in candidates], dtype=np.float64)
    best = float(costs.min())
    return np.flatnonzero(costs == best), best


def local_choice(candidates, p, rng, mode=MODE_VEHICLE_DEPENDENT):
    """Pick the next state among ``candidates``.

    With probability ``p`` one of the cheapest candidates is returned (ties
    broken uniformly), otherwise any candidate uniformly. ``p == 1`` never
    explores and ``p == 0`` never exploits.
    """

    if not candidates:
        raise ValueError("cannot choose among an empty candidate list")
    if rng.random() < p:
        tied, _ = best_candidates(candidates, mode)
        return candidates[int(tied[rng.integers(tied.size)])]
    return candidates[int(rng.integers(len(candidates)))]
