import csv
import json

from ..config.enums import STEP_MOVE


class Metrics:
    def __init__(self):
        self.rows = []

    def append(self, it, elapsed_ms, curr, best, candidates, status=""):
        self.rows.append(
            (
                int(it),
                float(elapsed_ms),
                float(curr),
                float(best),
                int(candidates),
                status,
            )
        )

    def statuses(self):
        return [row[5] for row in self.rows]

    def save_csv(self, path):
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["iter", "elapsed_ms", "curr_cost", "best_cost", "candidates", "status"])
            for row in self.rows:
                w.writerow(list(row))


def save_metrics_json(path, metrics, summary, params, *, extra=None):
    data = {
        "final_best_cost": float(summary["best_cost"]),
        "initial_cost": float(summary["initial_cost"]),
        "n_tasks": int(summary["n_tasks"]),
        "n_vehicles": int(summary["n_vehicles"]),
        "iters_logged": len(metrics.rows),
        "params": params,
    }
    if extra:
        data.update(extra)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def save_plans_csv(path, plans, city_names=None):
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["vehicle_id", "pos", "step", "city", "task_id"])
        for plan in plans:
            for i, step in enumerate(plan.steps):
                city = city_names[step.city] if city_names is not None else step.city
                task = "" if step.kind == STEP_MOVE else step.task
                w.writerow([plan.vehicle_id, i + 1, step.kind, city, task])
