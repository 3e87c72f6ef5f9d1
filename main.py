"""
Porous-duct coolant solver - Hydra entry point.

Usage:
    uv run python main.py                                  # canonical PISO sodium case
    uv run python main.py case=sodium_loop                 # SIMPLEC evaporator/condenser loop
    uv run python main.py case=isothermal_check case.N=100 plot=true
    uv run python main.py -m case.dt=1e-4,5e-5 mlflow.enabled=true sweep_name="dt-{coupling}"
"""

import logging
import os
import sys
from pathlib import Path

import hydra
import mlflow
from dotenv import load_dotenv
from hydra.core.hydra_config import HydraConfig
from omegaconf import DictConfig, OmegaConf

load_dotenv()
sys.path.insert(0, str(Path(__file__).parent / "src"))

from pisoflow import LoggingCallback, MLflowCallback, PISOParameters, PISOSolver  # noqa: E402
from utilities.console import print_summary  # noqa: E402
from utilities.io import write_profiles  # noqa: E402
from utilities.mlflow import setup_mlflow_tracking  # noqa: E402
from utilities.plotting import generate_plots_for_run  # noqa: E402

log = logging.getLogger(__name__)


def create_solver(cfg: DictConfig) -> PISOSolver:
    """Build parameters from the case subtree and attach observers."""
    params = PISOParameters(**OmegaConf.to_container(cfg.case, resolve=True))
    callbacks = [LoggingCallback(every=params.log_every), MLflowCallback(every=params.log_every)]
    return PISOSolver(params=params, callbacks=callbacks)


def write_outputs(cfg: DictConfig, solver: PISOSolver, output_dir: Path) -> Path:
    """Final-timestep profiles (and optionally the full run and plots) into output_dir."""
    profile_path = output_dir / cfg.output_file
    with open(profile_path, "w") as f:
        write_profiles(f, solver.fields.u, solver.fields.p, solver.fields.T)
    log.info(f"Profiles written to {profile_path}")

    if cfg.get("save_h5"):
        solver.save(output_dir / "solution.h5")
    if cfg.get("plot"):
        generate_plots_for_run(solver, output_dir / "plots")
    return profile_path


def run_solver(cfg: DictConfig, output_dir: Path):
    """Run solver, optionally inside an MLflow run."""
    solver = create_solver(cfg)
    run_name = f"{solver.params.coupling}_N{solver.params.N}_dt{solver.params.dt:g}"

    if not cfg.mlflow.get("enabled", False):
        solver.solve()
        write_outputs(cfg, solver, output_dir)
        return solver

    # Child of a sweep parent when launched as a multirun
    parent_run_id = os.environ.get("MLFLOW_PARENT_RUN_ID")
    tags = {"solver": solver.params.method}
    if parent_run_id:
        tags["mlflow.parentRunId"] = parent_run_id

    with mlflow.start_run(run_name=run_name, tags=tags) as run:
        mlflow.log_params(solver.params.to_mlflow())
        mlflow.log_dict(OmegaConf.to_container(cfg), "config.yaml")

        log.info(f"Solving: {run_name}")
        solver.solve()

        batch = solver.time_series.to_mlflow_batch()
        if batch:
            mlflow.tracking.MlflowClient().log_batch(run.info.run_id, metrics=batch)

        mlflow.log_artifact(str(write_outputs(cfg, solver, output_dir)))

    return solver


@hydra.main(config_path="conf", config_name="config", version_base=None)
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    log.info(f"Case: fluid={cfg.case.fluid}, N={cfg.case.N}, coupling={cfg.case.coupling}")
    if cfg.mlflow.get("enabled", False):
        log.info(f"MLflow experiment: {setup_mlflow_tracking(cfg)}")

    output_dir = Path(HydraConfig.get().runtime.output_dir)
    solver = run_solver(cfg, output_dir)
    print_summary(solver)


if __name__ == "__main__":
    main()
