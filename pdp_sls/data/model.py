"""Vehicles, tasks, actions and the shared problem arrays."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple, Sequence, Tuple

import numpy as np

from ..config.enums import ACT_DELIVERY, ACT_PICKUP
from .topology import Topology


@dataclass(frozen=True)
class Task:
    id: int
    pickup_city: int
    delivery_city: int
    weight: float
    reward: float = 0.0


@dataclass(frozen=True)
class Vehicle:
    id: int
    home_city: int
    capacity: float
    cost_per_km: float
    name: str = ""


class ActionKind(IntEnum):
    PICKUP = ACT_PICKUP
    DELIVERY = ACT_DELIVERY


class Action(NamedTuple):
    """A pickup or delivery of one task, compared by value."""

    task: int
    kind: ActionKind

    @property
    def code(self) -> int:
        return encode_action(self.task, self.kind)

    @classmethod
    def from_code(cls, code: int) -> "Action":
        code = int(code)
        return cls(code // 2, ActionKind(code % 2))

    def __str__(self) -> str:
        return f"(t{self.task}, {self.kind.name})"


def encode_action(task: int, kind: int) -> int:
    return 2 * int(task) + int(kind)


@dataclass(frozen=True, eq=False)
class Problem:
    """Read-only inputs shared by every route state built on them.

    The arrays are indexed by the dense task / vehicle ids so the numba
    kernels never touch the Python objects.
    """

    vehicles: Tuple[Vehicle, ...]
    tasks: Tuple[Task, ...]
    topology: Topology
    task_pickup: np.ndarray    # (n,) int64 city index
    task_delivery: np.ndarray  # (n,) int64 city index
    task_weight: np.ndarray    # (n,) float64
    veh_home: np.ndarray       # (m,) int64 city index
    veh_capacity: np.ndarray   # (m,) float64
    veh_cost: np.ndarray       # (m,) float64 cost per distance unit
    dist: np.ndarray           # (c, c) float64 shortest distances

    @property
    def n_tasks(self) -> int:
        return len(self.tasks)

    @property
    def n_vehicles(self) -> int:
        return len(self.vehicles)

    def max_capacity(self) -> float:
        return float(self.veh_capacity.max()) if self.n_vehicles else 0.0

    def max_weight(self) -> float:
        return float(self.task_weight.max()) if self.n_tasks else 0.0

    def with_task(self, task: Task) -> "Problem":
        """Return a problem extended by one task (its id must be the next dense id)."""

        return build_problem(self.vehicles, self.tasks + (task,), self.topology)


def _check_dense(items, what: str) -> None:
    for pos, item in enumerate(items):
        if item.id != pos:
            raise ValueError(f"{what} ids must be dense 0..{len(items) - 1}; got id {item.id} at position {pos}")


def build_problem(
    vehicles: Sequence[Vehicle],
    tasks: Sequence[Task],
    topology: Topology,
) -> Problem:
    """Validate entities and derive the numeric arrays used by the engine."""

    vehicles = tuple(vehicles)
    tasks = tuple(tasks)
    _check_dense(vehicles, "vehicle")
    _check_dense(tasks, "task")

    n_cities = topology.size
    for t in tasks:
        if not (0 <= t.pickup_city < n_cities and 0 <= t.delivery_city < n_cities):
            raise ValueError(f"task {t.id} references an unknown city")
        if t.weight <= 0:
            raise ValueError(f"task {t.id} must have a positive weight")
    for v in vehicles:
        if not 0 <= v.home_city < n_cities:
            raise ValueError(f"vehicle {v.id} references an unknown home city")
        if v.capacity < 0:
            raise ValueError(f"vehicle {v.id} has a negative capacity")

    return Problem(
        vehicles=vehicles,
        tasks=tasks,
        topology=topology,
        task_pickup=np.array([t.pickup_city for t in tasks], dtype=np.int64),
        task_delivery=np.array([t.delivery_city for t in tasks], dtype=np.int64),
        task_weight=np.array([t.weight for t in tasks], dtype=np.float64),
        veh_home=np.array([v.home_city for v in vehicles], dtype=np.int64),
        veh_capacity=np.array([v.capacity for v in vehicles], dtype=np.float64),
        veh_cost=np.array([v.cost_per_km for v in vehicles], dtype=np.float64),
        dist=topology.dist,
    )
