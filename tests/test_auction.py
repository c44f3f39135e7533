import pytest

from pdp_sls.data.model import Task
from pdp_sls.glue.auction import AuctionPlanner, MarginalCosts


def _planner(fleet, topology, clock):
    return AuctionPlanner(fleet, topology, {"seed": 1, "max_iters": 5}, clock=clock)


def test_marginal_costs_for_first_task(fleet, topology, fake_clock):
    planner = _planner(fleet, topology, fake_clock)
    costs = planner.estimate_marginal_costs(Task(id=0, pickup_city=0, delivery_city=1, weight=5.0))

    # either vehicle 0 (10) or vehicle 1 via its home leg (40)
    assert 10.0 <= costs.own <= 40.0
    # one 10 km hop at the cheapest rate, home leg ignored
    assert costs.opponent == 10.0


def test_won_and_lost_tasks_are_tracked(fleet, topology, fake_clock, check_valid):
    planner = _planner(fleet, topology, fake_clock)

    first = Task(id=0, pickup_city=0, delivery_city=1, weight=5.0)
    planner.estimate_marginal_costs(first)
    planner.auction_result(first, won=True)

    second = Task(id=1, pickup_city=1, delivery_city=0, weight=8.0)
    planner.estimate_marginal_costs(second)
    planner.auction_result(second, won=False)

    assert planner.won == [0]
    assert planner.lost == [1]
    assert planner.current.is_assigned(0)
    assert not planner.current.is_assigned(1)
    assert planner.opponent.is_assigned(1)
    assert not planner.opponent.is_assigned(0)
    assert planner.current.problem is planner.opponent.problem
    check_valid(planner.current)
    check_valid(planner.opponent)

    plans = planner.plan()
    carried = [step.task for plan in plans for step in plan.actions()]
    assert sorted(carried) == [0, 0]


def test_task_nobody_can_carry_is_refused(fleet, topology, fake_clock):
    planner = _planner(fleet, topology, fake_clock)
    heavy = Task(id=0, pickup_city=0, delivery_city=1, weight=50.0)

    assert not planner.can_carry(heavy)
    assert planner.estimate_marginal_costs(heavy) is None
    planner.auction_result(heavy, won=False)
    assert planner.problem.n_tasks == 1
    assert not planner.current.is_assigned(0)


def test_cannot_win_refused_task(fleet, topology, fake_clock):
    planner = _planner(fleet, topology, fake_clock)
    heavy = Task(id=0, pickup_city=0, delivery_city=1, weight=50.0)
    planner.estimate_marginal_costs(heavy)
    with pytest.raises(ValueError):
        planner.auction_result(heavy, won=True)


def test_result_must_match_estimate(fleet, topology, fake_clock):
    planner = _planner(fleet, topology, fake_clock)
    task = Task(id=0, pickup_city=0, delivery_city=1, weight=5.0)
    other = Task(id=0, pickup_city=1, delivery_city=0, weight=5.0)

    with pytest.raises(ValueError):
        planner.auction_result(task, won=True)
    planner.estimate_marginal_costs(task)
    with pytest.raises(ValueError):
        planner.auction_result(other, won=True)


def test_plan_without_won_tasks_is_empty(fleet, topology, fake_clock):
    planner = _planner(fleet, topology, fake_clock)
    plans = planner.plan()
    assert len(plans) == 2
    assert all(not p.steps for p in plans)


def test_marginal_cost_difference():
    costs = MarginalCosts(own=40.0, opponent=10.0)
    assert costs.difference == 30.0
    assert MarginalCosts(own=10.0, opponent=10.0).difference == 0.0


def test_failed_estimate_leaves_nothing_pending(fleet, topology, make_clock):
    ticks = make_clock()
    calls = []

    def clock():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("clock unavailable")
        return ticks()

    planner = _planner(fleet, topology, clock)
    task = Task(id=0, pickup_city=0, delivery_city=1, weight=5.0)

    with pytest.raises(RuntimeError):
        planner.estimate_marginal_costs(task)
    with pytest.raises(ValueError):
        planner.auction_result(task, won=True)

    costs = planner.estimate_marginal_costs(task)
    assert costs.opponent == 10.0
    planner.auction_result(task, won=True)
    assert planner.won == [0]
    assert planner.current.is_assigned(0)
