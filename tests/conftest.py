import pytest

from pdp_sls.config.enums import ACT_DELIVERY, ACT_PICKUP
from pdp_sls.data.model import Task, Vehicle, build_problem
from pdp_sls.data.topology import Topology
from pdp_sls.engine.objective import is_load_constraint_satisfied


class FakeClock:
    """Monotonic clock advancing by ``step`` seconds on every reading."""

    def __init__(self, step=0.001):
        self.now = 0.0
        self.step = step

    def __call__(self):
        self.now += self.step
        return self.now


def _two_city_topology():
    return Topology(["A", "B"], [(0, 1, 10.0)])


def _fleet():
    return [
        Vehicle(id=0, home_city=0, capacity=10.0, cost_per_km=1.0),
        Vehicle(id=1, home_city=1, capacity=20.0, cost_per_km=2.0),
    ]


def _scenario_tasks():
    return [
        Task(id=0, pickup_city=0, delivery_city=1, weight=5.0),
        Task(id=1, pickup_city=1, delivery_city=0, weight=8.0),
    ]


def _check_valid(state):
    problem = state.problem
    seen = {}
    for v in range(problem.n_vehicles):
        for i, code in enumerate(state.sequence(v).tolist()):
            key = (code // 2, code % 2)
            assert key not in seen, f"action {key} appears twice"
            seen[key] = (v, i)
        assert is_load_constraint_satisfied(state, v)

    assigned = state.assigned_tasks().tolist()
    assert len(seen) == 2 * len(assigned)
    for t in assigned:
        pv, pi = seen[(t, ACT_PICKUP)]
        dv, di = seen[(t, ACT_DELIVERY)]
        assert pv == dv == state.vehicle_of(t)
        assert pi == state.pickup_rank[t]
        assert di == state.delivery_rank[t]
        assert pi < di


@pytest.fixture
def topology():
    return _two_city_topology()


@pytest.fixture
def fleet():
    return _fleet()


@pytest.fixture
def scenario():
    """Two vehicles, two opposite tasks on a single 10 km road."""

    return build_problem(_fleet(), _scenario_tasks(), _two_city_topology())


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_clock():
    return FakeClock


@pytest.fixture
def check_valid():
    return _check_valid
