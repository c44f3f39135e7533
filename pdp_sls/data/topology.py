"""City graph with all-pairs shortest distances and shortest paths."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
from numba import njit


@njit(cache=True)
def floyd_warshall(weights: np.ndarray, next_hop: np.ndarray) -> np.ndarray:
    """Return shortest distances for an edge-weight matrix (``inf`` = no edge).

    ``next_hop[i, j]`` is filled with the city that follows ``i`` on a shortest
    path towards ``j`` (``-1`` when ``j`` is unreachable).
    """

    n = weights.shape[0]
    dist = weights.copy()
    for i in range(n):
        for j in range(n):
            if i == j:
                next_hop[i, j] = i
            elif not math.isinf(dist[i, j]):
                next_hop[i, j] = j
            else:
                next_hop[i, j] = -1

    for k in range(n):
        for i in range(n):
            dik = dist[i, k]
            if math.isinf(dik):
                continue
            for j in range(n):
                cand = dik + dist[k, j]
                if cand < dist[i, j]:
                    dist[i, j] = cand
                    next_hop[i, j] = next_hop[i, k]
    return dist


class Topology:
    """Undirected weighted city graph.

    Cities are addressed by their dense index ``0..n-1``; ``names`` keeps the
    human readable labels used by the dataset files.
    """

    def __init__(
        self,
        names: Sequence[str],
        edges: Iterable[Tuple[int, int, float]],
        coords: Optional[np.ndarray] = None,
    ):
        self.names: List[str] = [str(name) for name in names]
        if len(set(self.names)) != len(self.names):
            raise ValueError("city names must be unique")
        self.index: Dict[str, int] = {name: i for i, name in enumerate(self.names)}
        self.coords = None if coords is None else np.asarray(coords, dtype=np.float64)

        n = len(self.names)
        weights = np.full((n, n), np.inf, dtype=np.float64)
        np.fill_diagonal(weights, 0.0)
        self._neighbors: List[List[int]] = [[] for _ in range(n)]

        for a, b, d in edges:
            a, b, d = int(a), int(b), float(d)
            if not (0 <= a < n and 0 <= b < n):
                raise ValueError(f"edge ({a}, {b}) references an unknown city")
            if a == b:
                continue
            if d < 0.0:
                raise ValueError(f"edge ({a}, {b}) has negative length {d}")
            if b not in self._neighbors[a]:
                self._neighbors[a].append(b)
                self._neighbors[b].append(a)
            if d < weights[a, b]:
                weights[a, b] = d
                weights[b, a] = d

        self.next_hop = np.full((n, n), -1, dtype=np.int64)
        self.dist = floyd_warshall(weights, self.next_hop)

    @classmethod
    def from_coords(cls, names, coords, pairs) -> "Topology":
        """Build a topology whose edge lengths are Euclidean distances."""

        coords = np.asarray(coords, dtype=np.float64)
        edges = []
        for a, b in pairs:
            a, b = int(a), int(b)
            edges.append((a, b, float(np.hypot(*(coords[a] - coords[b])))))
        return cls(names, edges, coords=coords)

    @property
    def size(self) -> int:
        return len(self.names)

    def cities(self) -> range:
        return range(self.size)

    def city(self, name) -> int:
        try:
            return self.index[str(name)]
        except KeyError:
            raise ValueError(f"unknown city: {name!r}") from None

    def distance(self, a: int, b: int) -> float:
        return float(self.dist[a, b])

    def neighbors(self, city: int) -> List[int]:
        return list(self._neighbors[city])

    def path_to(self, a: int, b: int) -> List[int]:
        """Cities visited when travelling from ``a`` to ``b`` (``a`` excluded)."""

        if self.next_hop[a, b] < 0:
            raise ValueError(f"city {self.names[b]} is unreachable from {self.names[a]}")
        path = []
        curr = a
        while curr != b:
            curr = int(self.next_hop[curr, b])
            path.append(curr)
        return path

    def is_connected(self) -> bool:
        return bool(np.all(np.isfinite(self.dist)))
