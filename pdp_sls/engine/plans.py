"""Turn a route state into per-vehicle itineraries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from ..config.enums import STEP_DELIVER, STEP_MOVE, STEP_PICKUP
from ..data.model import Action, ActionKind
from .route_state import RouteState


class Step(NamedTuple):
    kind: str
    city: int
    task: Optional[int] = None


@dataclass
class Plan:
    vehicle_id: int
    home_city: int
    steps: List[Step] = field(default_factory=list)
    distance: float = 0.0
    cost: float = 0.0

    def actions(self) -> List[Step]:
        return [s for s in self.steps if s.kind != STEP_MOVE]


def materialize(state: RouteState) -> List[List[Action]]:
    """Ordered actions of every vehicle, indexed by vehicle id."""

    return [state.actions(v) for v in range(state.problem.n_vehicles)]


def infer_plans(state: RouteState) -> List[Plan]:
    """Move-by-move plans following the shortest paths between action cities."""

    problem = state.problem
    topology = problem.topology
    plans = []
    for v, actions in enumerate(materialize(state)):
        home = int(problem.veh_home[v])
        plan = Plan(vehicle_id=v, home_city=home)
        curr = home
        for action in actions:
            if action.kind == ActionKind.PICKUP:
                target = int(problem.task_pickup[action.task])
                kind = STEP_PICKUP
            else:
                target = int(problem.task_delivery[action.task])
                kind = STEP_DELIVER
            if target != curr:
                for city in topology.path_to(curr, target):
                    plan.steps.append(Step(STEP_MOVE, city))
                plan.distance += topology.distance(curr, target)
                curr = target
            plan.steps.append(Step(kind, target, int(action.task)))
        plan.cost = plan.distance * float(problem.veh_cost[v])
        plans.append(plan)
    return plans
