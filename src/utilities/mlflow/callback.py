"""Hydra callback for MLflow parent run management during sweeps."""

import logging
import os
from typing import Dict, Optional

import mlflow
from hydra.experimental.callback import Callback
from omegaconf import DictConfig, OmegaConf

from .io import setup_mlflow_tracking

log = logging.getLogger(__name__)


def resolve_sweep_name(pattern: str, config: DictConfig) -> str:
    """Substitute ``{key}`` / ``${key}`` placeholders with case values.

    ``"dt-study-{coupling}"`` groups a sweep into one parent run per
    coupling algorithm.
    """
    name = pattern
    for key, value in config.case.items():
        if not isinstance(value, (str, int, float)):
            continue
        name = name.replace(f"${{{key}}}", str(value)).replace(f"{{{key}}}", str(value))
    return name


class MLflowSweepCallback(Callback):
    """Creates or reuses parent MLflow runs for Hydra multiruns.

    Every job of ``python main.py -m ...`` becomes a child of a parent run
    named after ``sweep_name``; placeholders in the name (see
    ``resolve_sweep_name``) split the sweep into several parents.
    """

    def __init__(self) -> None:
        self._parent_runs: Dict[str, str] = {}  # sweep_name -> run_id
        self._experiment_name: Optional[str] = None
        self._sweep_pattern: str = "sweep"

    def _find_existing_parent(self, sweep_name: str) -> Optional[str]:
        """Find an existing parent run with the same sweep_name."""
        runs = mlflow.search_runs(
            experiment_names=[self._experiment_name],
            filter_string=f"tags.sweep = 'parent' AND tags.`mlflow.runName` = '{sweep_name}'",
            order_by=["start_time DESC"],
            max_results=1,
        )
        if runs.empty:
            return None
        return runs.iloc[0]["run_id"]

    def _get_or_create_parent(self, sweep_name: str, config: DictConfig) -> str:
        """Get existing parent run or create a new one for this sweep_name."""
        if sweep_name in self._parent_runs:
            return self._parent_runs[sweep_name]

        existing_id = self._find_existing_parent(sweep_name)
        if existing_id:
            self._parent_runs[sweep_name] = existing_id
            log.info(f"Reusing existing parent run '{sweep_name}': {existing_id}")
            return existing_id

        with mlflow.start_run(run_name=sweep_name) as parent_run:
            mlflow.log_dict(OmegaConf.to_container(config), "sweep_config.yaml")
            mlflow.set_tag("sweep", "parent")
            parent_id = parent_run.info.run_id

        self._parent_runs[sweep_name] = parent_id
        log.info(f"Created parent run '{sweep_name}': {parent_id}")
        return parent_id

    def on_multirun_start(self, config: DictConfig, **kwargs) -> None:
        """Setup MLflow tracking before sweep starts."""
        if not config.mlflow.get("enabled", False):
            return
        self._experiment_name = setup_mlflow_tracking(config)
        self._sweep_pattern = config.get("sweep_name", "sweep")

        # Flag child jobs that a sweep is active (Hydra mode inside jobs is RUN)
        os.environ["MLFLOW_SWEEP_ACTIVE"] = "1"
        log.info(f"MLflow sweep callback initialized for experiment: {self._experiment_name}")

    def on_job_start(self, config: DictConfig, **kwargs) -> None:
        """Attach the job to the parent run of its resolved sweep name."""
        if os.environ.get("MLFLOW_SWEEP_ACTIVE") != "1":
            return

        sweep_name = resolve_sweep_name(self._sweep_pattern, config)
        os.environ["MLFLOW_PARENT_RUN_ID"] = self._get_or_create_parent(sweep_name, config)

    def on_multirun_end(self, config: DictConfig, **kwargs) -> None:
        """Clean up after sweep completes."""
        if os.environ.get("MLFLOW_SWEEP_ACTIVE") != "1":
            return
        os.environ.pop("MLFLOW_PARENT_RUN_ID", None)
        os.environ.pop("MLFLOW_SWEEP_ACTIVE", None)
        log.info(f"Multirun sweep completed: {len(self._parent_runs)} parent run(s)")
