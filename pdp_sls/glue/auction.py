"""Planning side of an auction agent.

The planner keeps two hypothetical fleets built on the same problem: ours
and a modelled opponent (our own vehicles priced with the opponent
objective). Every auctioned task is added to the problem; a task lost by one
side simply stays unassigned in that side's route state. Bid pricing is left
to the caller, which only receives the marginal costs.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..config.config import AUCTION_DEFAULTS
from ..config.enums import MODE_OPPONENT, MODE_VEHICLE_DEPENDENT
from ..data.model import Task, Vehicle, build_problem
from ..data.topology import Topology
from ..engine.objective import compute_objective
from ..engine.plans import Plan, infer_plans
from ..engine.route_state import RouteState
from ..engine.sls import deadline_from, local_search
from ..logging.metrics import Metrics
from ..preprocessing.initial_solution import insert_random


@dataclass(frozen=True)
class MarginalCosts:
    own: float
    opponent: float

    @property
    def difference(self) -> float:
        return self.own - self.opponent


class AuctionPlanner:
    def __init__(
        self,
        vehicles: Sequence[Vehicle],
        topology: Topology,
        params: Optional[Dict[str, Any]] = None,
        *,
        clock=time.monotonic,
        metrics: Optional[Metrics] = None,
    ):
        self.params = AUCTION_DEFAULTS.copy()
        self.params.update(params or {})
        p = float(self.params["p"])
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"p must lie in [0, 1], got {p}")
        self.params["p"] = p

        self.clock = clock
        self.metrics = metrics
        self.rng = np.random.default_rng(int(self.params["seed"]))

        self.problem = build_problem(vehicles, [], topology)
        self.current = RouteState(self.problem)
        self.opponent = RouteState(self.problem)
        self.updated: Optional[RouteState] = None
        self.updated_opponent: Optional[RouteState] = None

        self.won: List[int] = []
        self.lost: List[int] = []
        # task as given by the caller, and its copy re-numbered with the next dense id
        self._pending_task: Optional[Task] = None
        self._pending_internal: Optional[Task] = None

    # ------------------------------------------------------------------ helpers

    def can_carry(self, task: Task) -> bool:
        return float(task.weight) <= self.problem.max_capacity()

    def _search(self, state: RouteState, deadline: float, mode: int) -> RouteState:
        return local_search(
            state,
            deadline,
            self.params["p"],
            mode=mode,
            rng=self.rng,
            clock=self.clock,
            max_iters=self.params["max_iters"],
            metrics=self.metrics,
            log_period=self.params["log_period"],
        )

    def _bid_deadline(self) -> float:
        return deadline_from(self.clock(), self.params["timeout_bid_ms"] / 2.0, self.params["bid_margin_ms"])

    # ------------------------------------------------------------------ auction

    def estimate_marginal_costs(self, task: Task) -> Optional[MarginalCosts]:
        """Marginal cost of adding ``task`` to our plan and to the opponent's.

        Each side gets half of the bid budget. Returns ``None`` when no vehicle
        of the fleet can carry the task, in which case the task must be refused.
        """

        if self._pending_internal is not None:
            raise ValueError("previous auction result has not been reported")
        internal = replace(task, id=self.problem.n_tasks)

        if not self.can_carry(task):
            updated = updated_opponent = None
            costs = None
        else:
            current_cost = compute_objective(self.current, MODE_VEHICLE_DEPENDENT)
            seeded = insert_random(self.current, internal, self.rng)
            updated = self._search(seeded, self._bid_deadline(), MODE_VEHICLE_DEPENDENT)
            own = compute_objective(updated, MODE_VEHICLE_DEPENDENT) - current_cost

            opponent_cost = compute_objective(self.opponent, MODE_OPPONENT)
            seeded = insert_random(self.opponent, internal, self.rng)
            updated_opponent = self._search(seeded, self._bid_deadline(), MODE_OPPONENT)
            opponent = compute_objective(updated_opponent, MODE_OPPONENT) - opponent_cost
            costs = MarginalCosts(own=own, opponent=opponent)

        # nothing is pending unless both estimates went through
        self.updated = updated
        self.updated_opponent = updated_opponent
        self._pending_task = task
        self._pending_internal = internal
        return costs

    def auction_result(self, task: Task, won: bool) -> None:
        """Commit the hypothetical solution of the side that got ``task``."""

        if self._pending_internal is None or task != self._pending_task:
            raise ValueError("auction result does not match the last estimated task")
        internal = self._pending_internal

        if self.updated is None:
            if won:
                raise ValueError("won a task that no vehicle can carry")
            problem = self.problem.with_task(internal)
            self.current = self.current.extended(problem)
            self.opponent = self.opponent.extended(problem)
        elif won:
            problem = self.updated.problem
            self.current = self.updated
            self.opponent = self.opponent.extended(problem)
        else:
            problem = self.updated_opponent.problem
            self.opponent = self.updated_opponent
            self.current = self.current.extended(problem)

        self.problem = problem
        (self.won if won else self.lost).append(internal.id)
        self.updated = None
        self.updated_opponent = None
        self._pending_internal = None
        self._pending_task = None

    # ------------------------------------------------------------------ plan

    def plan(self) -> List[Plan]:
        """Improve our solution within the plan budget and return the itineraries."""

        if self.won:
            deadline = deadline_from(self.clock(), self.params["timeout_plan_ms"], self.params["plan_margin_ms"])
            self.current = self._search(self.current, deadline, MODE_VEHICLE_DEPENDENT)
        return infer_plans(self.current)


__all__ = ["AuctionPlanner", "MarginalCosts"]
