"""MLflow tracking setup shared by main.py and the sweep callback."""

import logging
import os

import mlflow
from omegaconf import DictConfig

log = logging.getLogger(__name__)


def get_experiment_name(cfg: DictConfig) -> str:
    """Build full experiment name with optional prefix."""
    name = cfg.experiment_name
    prefix = cfg.mlflow.get("project_prefix", "")
    if prefix and not name.startswith("/"):
        return f"{prefix}/{name}"
    return name


def setup_mlflow_tracking(cfg: DictConfig) -> str:
    """Point MLflow at the configured backend and select the experiment.

    Returns
    -------
    str
        Name of the experiment that is now active.
    """
    tracking_uri = str(cfg.mlflow.get("tracking_uri", "./mlruns"))
    # If using local file backend, clear env overrides
    if str(cfg.mlflow.get("mode", "")).lower() in ("files", "local"):
        os.environ.pop("MLFLOW_TRACKING_URI", None)
    os.environ["MLFLOW_TRACKING_URI"] = tracking_uri
    mlflow.set_tracking_uri(tracking_uri)

    experiment_name = get_experiment_name(cfg)
    try:
        mlflow.set_experiment(experiment_name)
    except Exception as exc:
        fallback = f"{experiment_name}-restored"
        log.warning(f"MLflow set_experiment failed for '{experiment_name}' ({exc}); using '{fallback}'")
        experiment_name = fallback
        mlflow.set_experiment(experiment_name)

    return experiment_name
