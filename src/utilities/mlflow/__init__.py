"""MLflow utilities for experiment tracking and sweep grouping."""

from .callback import MLflowSweepCallback, resolve_sweep_name
from .io import get_experiment_name, setup_mlflow_tracking

__all__ = [
    "MLflowSweepCallback",
    "resolve_sweep_name",
    "get_experiment_name",
    "setup_mlflow_tracking",
]
