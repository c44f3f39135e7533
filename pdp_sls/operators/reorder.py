"""Intra-route moves shifting one pickup or one delivery to another rank."""

from typing import Optional

from ..config.enums import UNASSIGNED
from ..engine.objective import is_load_constraint_satisfied
from ..engine.route_state import RouteState


def _owner(state: RouteState, t: int) -> int:
    v = int(state.vehicle[t])
    if v == UNASSIGNED:
        raise ValueError(f"task {t} is not assigned to any vehicle")
    return v


def _rewrite(state: RouteState, v: int, seq) -> Optional[RouteState]:
    neighbor = state.clone()
    neighbor.write_sequence(v, seq)
    if not is_load_constraint_satisfied(neighbor, v):
        return None
    return neighbor


def change_pickup_rank(state: RouteState, task: int, new_rank: int) -> Optional[RouteState]:
    """Move the pickup of ``task`` to position ``new_rank`` of its chain.

    Returns ``None`` for the current rank, for ranks at or after the task's
    delivery and when the load constraint breaks.
    """

    t = state.check_task(task)
    v = _owner(state, t)
    rank = int(state.pickup_rank[t])
    if new_rank == rank or new_rank < 0 or new_rank >= state.delivery_rank[t]:
        return None

    seq = state.sequence(v).tolist()
    action = seq.pop(rank)
    seq.insert(new_rank, action)
    return _rewrite(state, v, seq)


def change_delivery_rank(state: RouteState, task: int, new_rank: int) -> Optional[RouteState]:
    """Move the delivery of ``task`` to position ``new_rank`` of its chain.

    ``new_rank`` may equal the length of the chain without the delivery, in
    which case the delivery becomes the last action. Returns ``None`` for the
    current rank, for ranks at or before the task's pickup and when the load
    constraint breaks.
    """

    t = state.check_task(task)
    v = _owner(state, t)
    rank = int(state.delivery_rank[t])
    if new_rank == rank or new_rank <= state.pickup_rank[t]:
        return None

    seq = state.sequence(v).tolist()
    action = seq.pop(rank)
    if new_rank > len(seq):
        return None
    seq.insert(new_rank, action)
    return _rewrite(state, v, seq)
