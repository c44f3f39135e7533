import numpy as np

from .model import Task, Vehicle, build_problem
from .topology import Topology


def _random_edges(coords, rng, extra_per_city=2):
    n = coords.shape[0]
    pairs = set()
    # random spanning tree keeps the graph connected
    for i in range(1, n):
        j = int(rng.integers(i))
        pairs.add((min(i, j), max(i, j)))
    # plus a few short links to nearest cities
    d = np.hypot(coords[:, None, 0] - coords[None, :, 0], coords[:, None, 1] - coords[None, :, 1])
    np.fill_diagonal(d, np.inf)
    k = min(extra_per_city, n - 1)
    for i in range(n):
        for j in np.argsort(d[i])[:k]:
            j = int(j)
            pairs.add((min(i, j), max(i, j)))
    return sorted(pairs)


def generate_data(n_cities=12, n_vehicles=3, n_tasks=20, seed=0):
    rng = np.random.default_rng(seed)

    coords = rng.uniform(0, 100, size=(n_cities, 2))
    names = [f"C{i}" for i in range(n_cities)]
    topology = Topology.from_coords(names, coords, _random_edges(coords, rng))

    # capacity in 10..30, cost per km in 1..5
    vehicles = [
        Vehicle(
            id=v,
            home_city=int(rng.integers(n_cities)),
            capacity=float(rng.integers(10, 31)),
            cost_per_km=float(rng.integers(1, 6)),
            name=f"vehicle{v}",
        )
        for v in range(n_vehicles)
    ]

    max_cap = max((v.capacity for v in vehicles), default=1.0)
    tasks = []
    for t in range(n_tasks):
        pickup = int(rng.integers(n_cities))
        delivery = int(rng.integers(n_cities - 1))
        if delivery >= pickup:
            delivery += 1
        weight = float(rng.integers(1, int(min(10.0, max_cap)) + 1))
        tasks.append(Task(id=t, pickup_city=pickup, delivery_city=delivery, weight=weight, reward=0.0))

    return {
        "topology": topology,
        "vehicles": vehicles,
        "tasks": tasks,
        "problem": build_problem(vehicles, tasks, topology),
    }
