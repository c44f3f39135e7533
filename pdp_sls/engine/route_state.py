"""Successor-chain encoding of a complete multi-vehicle solution."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from ..config.enums import NO_ACTION, UNASSIGNED
from ..data.model import Action, Problem
from .kernels import walk_chain, write_chain


class RouteState:
    """Five index arrays describing every vehicle's pickup/delivery chain.

    ``vehicle``, ``pickup_rank``, ``delivery_rank``, ``after_pickup`` and
    ``after_delivery`` are indexed by task id, ``first_action`` by vehicle id.
    The :class:`Problem` is shared between states; the arrays are owned by
    exactly one state and are only edited on a fresh clone.
    """

    __slots__ = (
        "problem",
        "vehicle",
        "pickup_rank",
        "delivery_rank",
        "first_action",
        "after_pickup",
        "after_delivery",
    )

    def __init__(
        self,
        problem: Problem,
        vehicle: Optional[np.ndarray] = None,
        pickup_rank: Optional[np.ndarray] = None,
        delivery_rank: Optional[np.ndarray] = None,
        first_action: Optional[np.ndarray] = None,
        after_pickup: Optional[np.ndarray] = None,
        after_delivery: Optional[np.ndarray] = None,
    ):
        n = problem.n_tasks
        m = problem.n_vehicles
        self.problem = problem
        self.vehicle = np.full(n, UNASSIGNED, dtype=np.int64) if vehicle is None else vehicle
        self.pickup_rank = np.zeros(n, dtype=np.int64) if pickup_rank is None else pickup_rank
        self.delivery_rank = np.zeros(n, dtype=np.int64) if delivery_rank is None else delivery_rank
        self.first_action = np.full(m, NO_ACTION, dtype=np.int64) if first_action is None else first_action
        self.after_pickup = np.full(n, NO_ACTION, dtype=np.int64) if after_pickup is None else after_pickup
        self.after_delivery = np.full(n, NO_ACTION, dtype=np.int64) if after_delivery is None else after_delivery

    def clone(self) -> "RouteState":
        return RouteState(
            self.problem,
            self.vehicle.copy(),
            self.pickup_rank.copy(),
            self.delivery_rank.copy(),
            self.first_action.copy(),
            self.after_pickup.copy(),
            self.after_delivery.copy(),
        )

    def extended(self, problem: Problem) -> "RouteState":
        """Copy of this state on a problem holding additional (unassigned) tasks."""

        if problem.n_vehicles != self.problem.n_vehicles:
            raise ValueError("extended problem must keep the same fleet")
        extra = problem.n_tasks - self.problem.n_tasks
        if extra < 0:
            raise ValueError("extended problem cannot drop tasks")

        def pad(arr, fill):
            return np.concatenate((arr, np.full(extra, fill, dtype=np.int64)))

        return RouteState(
            problem,
            pad(self.vehicle, UNASSIGNED),
            pad(self.pickup_rank, 0),
            pad(self.delivery_rank, 0),
            self.first_action.copy(),
            pad(self.after_pickup, NO_ACTION),
            pad(self.after_delivery, NO_ACTION),
        )

    # ------------------------------------------------------------------ checks

    def check_task(self, t: int) -> int:
        t = int(t)
        if not 0 <= t < self.problem.n_tasks:
            raise IndexError(f"task id {t} out of range (n_tasks={self.problem.n_tasks})")
        return t

    def check_vehicle(self, v: int) -> int:
        v = int(v)
        if not 0 <= v < self.problem.n_vehicles:
            raise IndexError(f"vehicle id {v} out of range (n_vehicles={self.problem.n_vehicles})")
        return v

    # ------------------------------------------------------------------ queries

    def vehicle_of(self, t: int) -> int:
        return int(self.vehicle[self.check_task(t)])

    def is_assigned(self, t: int) -> bool:
        return self.vehicle_of(t) != UNASSIGNED

    def assigned_tasks(self) -> np.ndarray:
        return np.flatnonzero(self.vehicle != UNASSIGNED)

    def tasks_of(self, v: int) -> np.ndarray:
        """Ids of the tasks carried by vehicle ``v`` (ascending)."""

        return np.flatnonzero(self.vehicle == self.check_vehicle(v))

    def sequence(self, v: int) -> np.ndarray:
        """Ordered action codes of vehicle ``v``."""

        return walk_chain(self.check_vehicle(v), self.first_action, self.after_pickup, self.after_delivery)

    def actions(self, v: int) -> List[Action]:
        return [Action.from_code(code) for code in self.sequence(v)]

    def same_as(self, other: "RouteState") -> bool:
        """Value equality of the five index arrays."""

        return (
            np.array_equal(self.vehicle, other.vehicle)
            and np.array_equal(self.pickup_rank, other.pickup_rank)
            and np.array_equal(self.delivery_rank, other.delivery_rank)
            and np.array_equal(self.first_action, other.first_action)
            and np.array_equal(self.after_pickup, other.after_pickup)
            and np.array_equal(self.after_delivery, other.after_delivery)
        )

    # ------------------------------------------------------------------ edits

    def write_sequence(self, v: int, seq: Sequence[int]) -> None:
        """Rewrite vehicle ``v``'s chain from explicit action codes (in place)."""

        v = self.check_vehicle(v)
        codes = np.asarray(seq, dtype=np.int64)
        if codes.size and (codes.min() < 0 or codes.max() >= 2 * self.problem.n_tasks):
            raise IndexError("action code references a task id out of range")
        write_chain(
            v,
            codes,
            self.vehicle,
            self.pickup_rank,
            self.delivery_rank,
            self.first_action,
            self.after_pickup,
            self.after_delivery,
        )

    def __repr__(self) -> str:
        routes = "; ".join(
            f"v{v}: " + " ".join(str(a) for a in self.actions(v))
            for v in range(self.problem.n_vehicles)
        )
        return f"RouteState({routes})"
