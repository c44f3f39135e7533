"""Glue helpers exposed for CLI and integration harnesses."""

from .auction import AuctionPlanner, MarginalCosts
from .io import (
    load_config,
    load_tasks,
    load_topology,
    load_vehicles,
    save_dataset,
    validate_inputs,
)
from .pipeline import (
    assemble_data,
    build_arg_parser,
    build_params,
    load_and_run,
    main,
    plan_summary,
    run_pipeline,
)

__all__ = [
    "AuctionPlanner",
    "MarginalCosts",
    "assemble_data",
    "build_arg_parser",
    "build_params",
    "load_and_run",
    "load_config",
    "load_tasks",
    "load_topology",
    "load_vehicles",
    "main",
    "plan_summary",
    "run_pipeline",
    "save_dataset",
    "validate_inputs",
]
