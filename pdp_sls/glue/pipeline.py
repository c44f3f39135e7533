"""Command line pipeline orchestrating dataset loading and the local search."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from ..config.config import DEFAULTS
from ..config.enums import INIT_IDS, MODE_VEHICLE_DEPENDENT
from ..data.model import Problem, build_problem
from ..engine.objective import compute_objective
from ..engine.plans import infer_plans
from ..engine.sls import deadline_from, local_search
from ..logging.metrics import Metrics, save_metrics_json, save_plans_csv
from ..preprocessing.initial_solution import build_initial
from .io import load_config, load_tasks, load_topology, load_vehicles, validate_inputs


DATASET_TABLES = ("cities", "edges", "vehicles", "tasks")


def _dataset_paths(cfg: Dict[str, Any], base_dir: Path) -> Dict[str, Path]:
    """Absolute path of every dataset table, relative entries taken from ``base_dir``."""

    dataset = cfg.get("dataset") or {}
    missing = [k for k in DATASET_TABLES if dataset.get(k) is None]
    if missing:
        raise ValueError("dataset." + ", dataset.".join(missing) + " must be provided")
    return {k: (Path(base_dir) / str(dataset[k])).resolve() for k in DATASET_TABLES}


def assemble_data(cfg: Dict[str, Any], base_dir: Path) -> Problem:
    """Load the dataset tables named in ``cfg["dataset"]`` into a problem."""

    paths = _dataset_paths(cfg, base_dir)
    topology = load_topology(paths["cities"], paths["edges"])
    vehicles = load_vehicles(paths["vehicles"], topology)
    tasks = load_tasks(paths["tasks"], topology)

    problem = build_problem(vehicles, tasks, topology)
    validate_inputs(problem)
    return problem


def build_params(cfg: Dict[str, Any]) -> Dict[str, Any]:
    params = DEFAULTS.copy()
    params.update(cfg.get("params", {}))
    for key in ("seed", "p", "initial_solution_id", "timeout_plan_ms", "max_iters", "log_period"):
        if key in cfg:
            params[key] = cfg[key]

    params["p"] = float(params["p"])
    if not 0.0 <= params["p"] <= 1.0:
        raise ValueError(f"p must lie in [0, 1], got {params['p']}")
    params["initial_solution_id"] = int(params["initial_solution_id"])
    if params["initial_solution_id"] not in INIT_IDS:
        raise ValueError(f"initial_solution_id must be one of {INIT_IDS}")
    if params["max_iters"] is not None:
        params["max_iters"] = int(params["max_iters"])
    params["seed"] = int(params["seed"])
    params["log_period"] = int(params["log_period"])
    return params


def run_pipeline(
    cfg: Dict[str, Any],
    *,
    base_dir: Path,
    outdir: Path,
    export_trace: bool = False,
    clock=time.monotonic,
) -> Dict[str, Any]:
    """Build the initial plan, improve it within the plan budget and export it."""

    outdir.mkdir(parents=True, exist_ok=True)

    problem = assemble_data(cfg, base_dir)
    params = build_params(cfg)
    rng = np.random.default_rng(params["seed"])
    metrics = Metrics()

    start = clock()
    deadline = deadline_from(start, params["timeout_plan_ms"], params["plan_margin_ms"])

    initial = build_initial(problem, params["initial_solution_id"])
    initial_cost = compute_objective(initial, MODE_VEHICLE_DEPENDENT)

    best = local_search(
        initial,
        deadline,
        params["p"],
        mode=MODE_VEHICLE_DEPENDENT,
        rng=rng,
        clock=clock,
        max_iters=params["max_iters"],
        metrics=metrics,
        log_period=params["log_period"],
    )
    best_cost = compute_objective(best, MODE_VEHICLE_DEPENDENT)
    plans = infer_plans(best)

    summary = {
        "best_cost": best_cost,
        "initial_cost": initial_cost,
        "n_tasks": problem.n_tasks,
        "n_vehicles": problem.n_vehicles,
    }
    meta = {
        "seed": params["seed"],
        "config_version": cfg.get("version", "dev"),
        "elapsed_ms": (clock() - start) * 1000.0,
    }

    if export_trace:
        trace_path = outdir / "trace.npz"
        np.savez(
            trace_path,
            iters=np.array([row[0] for row in metrics.rows], dtype=np.int64),
            elapsed_ms=np.array([row[1] for row in metrics.rows], dtype=np.float64),
            curr=np.array([row[2] for row in metrics.rows], dtype=np.float64),
            best=np.array([row[3] for row in metrics.rows], dtype=np.float64),
            vehicle=best.vehicle,
            first_action=best.first_action,
            after_pickup=best.after_pickup,
            after_delivery=best.after_delivery,
        )
        meta["trace"] = str(trace_path)

    save_metrics_json(outdir / "metrics.json", metrics, summary, params, extra=meta)
    save_plans_csv(outdir / "plans.csv", plans, problem.topology.names)
    metrics.save_csv(outdir / "metrics_log.csv")

    return {
        "problem": problem,
        "initial": initial,
        "best": best,
        "plans": plans,
        "metrics": metrics,
        "params": params,
        "summary": summary,
        "meta": meta,
    }


def load_and_run(
    config_path: Path,
    outdir: Path,
    *,
    overrides: Optional[Dict[str, Any]] = None,
    export_trace: bool = False,
) -> Dict[str, Any]:
    """Run the configuration at ``config_path``; dataset paths are relative to it.

    ``overrides`` entries that are not ``None`` replace top-level keys of the
    loaded configuration (``seed``, ``p``, ``initial_solution_id``, ...).
    """

    config_path = Path(config_path).resolve()
    cfg = load_config(config_path)
    cfg.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return run_pipeline(cfg, base_dir=config_path.parent, outdir=Path(outdir), export_trace=export_trace)


def build_arg_parser():
    import argparse

    ap = argparse.ArgumentParser(description="Plan pickups and deliveries for a capacitated fleet")
    ap.add_argument("--config", required=True, help="YAML/JSON run configuration")
    ap.add_argument("--outdir", required=True, help="Directory receiving metrics and plans")
    ap.add_argument("--seed", type=int, default=None, help="Seed of the search RNG")
    ap.add_argument("--p", type=float, default=None, help="Probability of taking the best neighbour")
    ap.add_argument(
        "--heuristic",
        dest="initial_solution_id",
        type=int,
        choices=INIT_IDS,
        default=None,
        help="Initial solution: 1 largest capacity, 2 closest vehicle, 3 cheapest cost",
    )
    ap.add_argument("--max-iters", dest="max_iters", type=int, default=None, help="Cap on search iterations")
    ap.add_argument("--trace", action="store_true", help="Also write trace.npz")
    return ap


def plan_summary(result: Dict[str, Any]) -> Dict[str, Any]:
    """Run summary plus per-vehicle distance and cost of the final plans."""

    plans = result["plans"]
    summary = dict(result["summary"])
    summary["total_distance"] = float(sum(p.distance for p in plans))
    summary["vehicles_used"] = sum(1 for p in plans if p.actions())
    summary["vehicles"] = [
        {"vehicle_id": p.vehicle_id, "actions": len(p.actions()), "distance": p.distance, "cost": p.cost}
        for p in plans
    ]
    return summary


def main(argv: Optional[list[str]] = None) -> Dict[str, Any]:
    args = build_arg_parser().parse_args(argv)
    overrides = {
        "seed": args.seed,
        "p": args.p,
        "initial_solution_id": args.initial_solution_id,
        "max_iters": args.max_iters,
    }
    result = load_and_run(args.config, args.outdir, overrides=overrides, export_trace=args.trace)
    print(json.dumps(plan_summary(result), indent=2))
    return result


__all__ = [
    "assemble_data",
    "build_arg_parser",
    "build_params",
    "load_and_run",
    "main",
    "plan_summary",
    "run_pipeline",
]
