"""Neighbour-generating moves for the stochastic local search."""

from .neighborhood import choose_neighbors
from .reassign import move_task_to_vehicle
from .reorder import change_delivery_rank, change_pickup_rank

__all__ = [
    "choose_neighbors",
    "move_task_to_vehicle",
    "change_pickup_rank",
    "change_delivery_rank",
]
