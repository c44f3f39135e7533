"""Dataset and configuration helpers for the command-line glue layer.

Datasets are four small CSV tables read with Pandas: cities (with optional
coordinates), undirected edges, vehicles and tasks. Cities are referenced by
name in the other tables and resolved to dense indices through the
:class:`~pdp_sls.data.topology.Topology`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List

import numpy as np
import pandas as pd
import yaml

from ..data.model import Problem, Task, Vehicle
from ..data.topology import Topology


_CONFIG_PARSERS = {
    ".json": json.loads,
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
}


def load_config(path_cfg: Path) -> Dict:
    """Parse a run configuration; JSON by suffix, YAML otherwise.

    An empty file is an empty configuration. Anything but a mapping at the
    top level is rejected with ``ValueError``.
    """

    path = Path(path_cfg)
    if not path.is_file():
        raise FileNotFoundError(path)

    parse = _CONFIG_PARSERS.get(path.suffix.lower(), yaml.safe_load)
    cfg = parse(path.read_text(encoding="utf-8")) if path.stat().st_size else None
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{path.name}: configuration must be a mapping, got {type(cfg).__name__}")
    return cfg


def _read_frame(path_like: Path, required: Iterable[str]) -> pd.DataFrame:
    path = Path(path_like)
    if not path.exists():
        raise FileNotFoundError(path)
    df = pd.read_csv(path)
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing column(s): {', '.join(missing)}")
    return df


def load_topology(path_cities: Path, path_edges: Path) -> Topology:
    """Build the city graph from ``cities.csv`` and ``edges.csv``.

    Edges without a ``distance`` column get the Euclidean distance between
    the city coordinates, which must then be present.
    """

    cities = _read_frame(path_cities, ["name"])
    names = [str(name) for name in cities["name"]]
    coords = None
    if {"x", "y"}.issubset(cities.columns):
        coords = cities[["x", "y"]].to_numpy(dtype=np.float64, copy=True)

    index = {name: i for i, name in enumerate(names)}

    def resolve(name) -> int:
        try:
            return index[str(name)]
        except KeyError:
            raise ValueError(f"unknown city: {name!r}") from None

    edges = _read_frame(path_edges, ["source", "target"])
    pairs = [(resolve(a), resolve(b)) for a, b in zip(edges["source"], edges["target"])]

    if "distance" in edges.columns:
        lengths = edges["distance"].to_numpy(dtype=np.float64)
        return Topology(names, [(a, b, d) for (a, b), d in zip(pairs, lengths)], coords=coords)
    if coords is None:
        raise ValueError("edges without a 'distance' column need city coordinates 'x' and 'y'")
    return Topology.from_coords(names, coords, pairs)


def load_vehicles(path_table: Path, topology: Topology) -> List[Vehicle]:
    """Load the fleet; vehicle ids follow the row order."""

    df = _read_frame(path_table, ["home", "capacity", "cost_per_km"])
    names = df["name"].fillna("").astype(str) if "name" in df.columns else [""] * len(df.index)
    return [
        Vehicle(
            id=i,
            home_city=topology.city(home),
            capacity=float(cap),
            cost_per_km=float(cost),
            name=name,
        )
        for i, (home, cap, cost, name) in enumerate(
            zip(df["home"], df["capacity"], df["cost_per_km"], names)
        )
    ]


def load_tasks(path_table: Path, topology: Topology) -> List[Task]:
    """Load the tasks; task ids follow the row order."""

    df = _read_frame(path_table, ["pickup", "delivery", "weight"])
    rewards = df["reward"].fillna(0).to_numpy(dtype=np.float64) if "reward" in df.columns else np.zeros(len(df.index))
    return [
        Task(
            id=i,
            pickup_city=topology.city(pickup),
            delivery_city=topology.city(delivery),
            weight=float(weight),
            reward=float(reward),
        )
        for i, (pickup, delivery, weight, reward) in enumerate(
            zip(df["pickup"], df["delivery"], df["weight"], rewards)
        )
    ]


def validate_inputs(problem: Problem) -> None:
    """Check that every city an itinerary may visit is reachable."""

    dist = problem.dist
    if dist.shape != (problem.topology.size, problem.topology.size):
        raise ValueError("dist must have shape (cities, cities)")
    if np.any(problem.veh_cost < 0):
        raise ValueError("vehicle cost per km must be >= 0")

    used = np.unique(np.concatenate((problem.task_pickup, problem.task_delivery, problem.veh_home)))
    if used.size and not np.all(np.isfinite(dist[np.ix_(used, used)])):
        raise ValueError("some task or home city is unreachable from another one")


def save_dataset(outdir: Path, topology: Topology, vehicles, tasks) -> Dict[str, str]:
    """Write a dataset in the layout read by :func:`load_topology` and friends."""

    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    names = topology.names

    cities = pd.DataFrame({"name": names})
    if topology.coords is not None:
        cities["x"] = topology.coords[:, 0]
        cities["y"] = topology.coords[:, 1]
    cities.to_csv(outdir / "cities.csv", index=False)

    rows = []
    for a in topology.cities():
        for b in topology.neighbors(a):
            if a < b:
                rows.append((names[a], names[b], topology.distance(a, b)))
    pd.DataFrame(rows, columns=["source", "target", "distance"]).to_csv(outdir / "edges.csv", index=False)

    pd.DataFrame(
        {
            "home": [names[v.home_city] for v in vehicles],
            "capacity": [v.capacity for v in vehicles],
            "cost_per_km": [v.cost_per_km for v in vehicles],
            "name": [v.name for v in vehicles],
        }
    ).to_csv(outdir / "vehicles.csv", index=False)

    pd.DataFrame(
        {
            "pickup": [names[t.pickup_city] for t in tasks],
            "delivery": [names[t.delivery_city] for t in tasks],
            "weight": [t.weight for t in tasks],
            "reward": [t.reward for t in tasks],
        }
    ).to_csv(outdir / "tasks.csv", index=False)

    return {
        "cities": "cities.csv",
        "edges": "edges.csv",
        "vehicles": "vehicles.csv",
        "tasks": "tasks.csv",
    }


__all__ = [
    "load_config",
    "load_topology",
    "load_vehicles",
    "load_tasks",
    "save_dataset",
    "validate_inputs",
]
