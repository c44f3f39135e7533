from typing import Optional

from ..config.enums import ACT_DELIVERY, ACT_PICKUP, UNASSIGNED
from ..data.model import encode_action
from ..engine.objective import is_load_constraint_satisfied
from ..engine.route_state import RouteState


def move_task_to_vehicle(state: RouteState, task: int, vehicle: int) -> Optional[RouteState]:
    """Move ``task`` to the end of ``vehicle``'s chain.

    The pickup is appended immediately followed by the delivery. Returns
    ``None`` when ``vehicle`` already carries the task or when the load
    constraint breaks on either affected vehicle.
    """

    t = state.check_task(task)
    v = state.check_vehicle(vehicle)
    old = int(state.vehicle[t])
    if old == UNASSIGNED:
        raise ValueError(f"task {t} is not assigned to any vehicle")
    if old == v:
        return None

    pickup = encode_action(t, ACT_PICKUP)
    delivery = encode_action(t, ACT_DELIVERY)
    old_seq = [a for a in state.sequence(old).tolist() if a != pickup and a != delivery]
    new_seq = state.sequence(v).tolist()
    new_seq.append(pickup)
    new_seq.append(delivery)

    neighbor = state.clone()
    neighbor.write_sequence(old, old_seq)
    neighbor.write_sequence(v, new_seq)

    if not is_load_constraint_satisfied(neighbor, old):
        return None
    if not is_load_constraint_satisfied(neighbor, v):
        return None
    return neighbor
