import numpy as np

from ..config.enums import MODE_OPPONENT, MODE_VEHICLE_DEPENDENT
from .kernels import load_feasible, route_costs as _route_costs


def route_costs(state, mode=MODE_VEHICLE_DEPENDENT):
    """Per-vehicle travel cost of ``state``.

    Parameters
    ----------
    state : RouteState
        Solution to evaluate.
    mode : int
        ``MODE_VEHICLE_DEPENDENT`` prices every hop (home leg included) at the
        carrying vehicle's own cost per km. ``MODE_OPPONENT`` models a fleet
        whose vehicles are unknown: every hop is priced at the cheapest cost
        per km and the home leg is dropped, which gives a lower bound that the
        choice of vehicle does not influence.

    Returns
    -------
    ndarray (m,)
        Cost of each vehicle's route.
    """

    problem = state.problem
    if problem.n_vehicles == 0:
        return np.zeros(0, dtype=np.float64)

    if mode == MODE_VEHICLE_DEPENDENT:
        veh_cost = problem.veh_cost
        include_home = True
    elif mode == MODE_OPPONENT:
        veh_cost = np.full(problem.n_vehicles, problem.veh_cost.min(), dtype=np.float64)
        include_home = False
    else:
        raise ValueError(f"unknown objective mode: {mode}")

    return _route_costs(
        state.first_action,
        state.after_pickup,
        state.after_delivery,
        problem.veh_home,
        veh_cost,
        problem.task_pickup,
        problem.task_delivery,
        problem.dist,
        include_home,
    )


def compute_objective(state, mode=MODE_VEHICLE_DEPENDENT):
    return float(route_costs(state, mode).sum())


def is_load_constraint_satisfied(state, vehicle):
    v = state.check_vehicle(vehicle)
    return bool(
        load_feasible(
            v,
            state.first_action,
            state.after_pickup,
            state.after_delivery,
            state.problem.task_weight,
            float(state.problem.veh_capacity[v]),
        )
    )
