import numpy as np
import pytest

from pdp_sls.data.generate_data import generate_data
from pdp_sls.data.model import build_problem
from pdp_sls.engine.acceptance import local_choice
from pdp_sls.engine.objective import compute_objective
from pdp_sls.engine.sls import deadline_from, local_search
from pdp_sls.logging.metrics import Metrics
from pdp_sls.operators import choose_neighbors
from pdp_sls.preprocessing.initial_solution import build_initial


def test_deadline_from_subtracts_margin():
    assert deadline_from(10.0, 5000, 500) == pytest.approx(14.5)
    assert deadline_from(0.0, 1000) == pytest.approx(1.0)


def test_past_deadline_returns_initial_object(scenario, fake_clock):
    initial = build_initial(scenario, 1)
    best = local_search(initial, 0.0, 0.5, rng=np.random.default_rng(0), clock=fake_clock)
    assert best is initial


def test_greedy_search_finds_single_vehicle_tour(scenario, fake_clock):
    initial = build_initial(scenario, 1)
    best = local_search(
        initial,
        1e9,
        1.0,
        rng=np.random.default_rng(0),
        clock=fake_clock,
        max_iters=5,
    )
    # vehicle 0 does A -> B then B -> A at 1 per km
    assert compute_objective(best) == 20.0
    assert best.tasks_of(0).tolist() == [0, 1]
    assert compute_objective(initial) == 40.0


def test_seeded_runs_are_reproducible(make_clock):
    problem = generate_data(n_cities=8, n_vehicles=3, n_tasks=8, seed=5)["problem"]
    initial = build_initial(problem, 2)

    runs = []
    for _ in range(2):
        runs.append(
            local_search(
                initial,
                1e9,
                0.3,
                rng=np.random.default_rng(42),
                clock=make_clock(),
                max_iters=25,
            )
        )
    assert runs[0].same_as(runs[1])
    assert compute_objective(runs[0]) <= compute_objective(initial)


def test_random_walk_never_loses_best(scenario, fake_clock, check_valid):
    initial = build_initial(scenario, 1)
    metrics = Metrics()
    best = local_search(
        initial,
        1e9,
        0.0,
        rng=np.random.default_rng(3),
        clock=fake_clock,
        max_iters=30,
        metrics=metrics,
        log_period=1,
    )
    check_valid(best)
    assert len(metrics.rows) == 30
    best_costs = [row[3] for row in metrics.rows]
    assert best_costs == sorted(best_costs, reverse=True)
    assert compute_objective(best) == best_costs[-1]


def test_no_neighbor_stops_search(fleet, topology, fake_clock):
    problem = build_problem(fleet, [], topology)
    initial = build_initial(problem, 1)
    metrics = Metrics()
    best = local_search(initial, 1e9, 0.5, rng=np.random.default_rng(0), clock=fake_clock, metrics=metrics)
    assert best is initial
    assert metrics.statuses() == ["EMPTY"]


def test_invalid_p_rejected(scenario, fake_clock):
    with pytest.raises(ValueError):
        local_search(build_initial(scenario, 1), 1e9, 1.5, clock=fake_clock)


def test_local_choice_greedy_picks_cheapest(scenario):
    candidates = choose_neighbors(build_initial(scenario, 1))
    rng = np.random.default_rng(0)
    costs = [compute_objective(c) for c in candidates]
    for _ in range(10):
        chosen = local_choice(candidates, 1.0, rng)
        assert compute_objective(chosen) == min(costs)


def test_local_choice_requires_candidates():
    with pytest.raises(ValueError):
        local_choice([], 0.5, np.random.default_rng(0))
