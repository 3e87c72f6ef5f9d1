"""
Result plots for a finished run.

Generates the final-timestep profiles (u, p, T along the duct) and the
per-timestep convergence history, and optionally uploads them to the
active MLflow run.

Usage (from main.py):
    from utilities.plotting import generate_plots_for_run
    generate_plots_for_run(solver, output_dir)
"""

import logging
from pathlib import Path

import mlflow
import pandas as pd

log = logging.getLogger(__name__)


def _set_style():
    import seaborn as sns

    sns.set_style("whitegrid")
    sns.set_context("paper", font_scale=1.2)


def _title(params) -> str:
    return f"{params.coupling} N={params.N}, dt={params.dt:g} s, fluid={params.fluid}"


def plot_profiles(fields_df: pd.DataFrame, params, output_dir: Path) -> Path:
    """Velocity, pressure and temperature along the duct."""
    import matplotlib.pyplot as plt
    import seaborn as sns

    _set_style()
    fig, axes = plt.subplots(1, 3, figsize=(16, 4.5))
    z_mm = fields_df["z"] * 1e3

    for ax, (col, label, color) in zip(
        axes,
        [("u", "u [m/s]", "tab:blue"), ("p", "p [Pa]", "tab:green"), ("T", "T [K]", "tab:red")],
    ):
        sns.lineplot(x=z_mm, y=fields_df[col], ax=ax, color=color, linewidth=2)
        ax.set_xlabel("z [mm]")
        ax.set_ylabel(label)

    fig.suptitle(f"Final profiles — {_title(params)}", fontweight="bold")
    plt.tight_layout()

    output_path = output_dir / "profiles.pdf"
    fig.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close(fig)
    return output_path


def plot_convergence(timeseries_df: pd.DataFrame, params, output_dir: Path) -> Path:
    """Outer residual and outer iteration count per timestep."""
    import matplotlib.pyplot as plt

    if timeseries_df.empty:
        log.warning("No timeseries data available for convergence plot")
        return None

    _set_style()
    fig, axes = plt.subplots(1, 2, figsize=(12, 4.5))

    axes[0].semilogy(timeseries_df["time"], timeseries_df["residual"], color="tab:blue", label="Outer residual")
    axes[0].axhline(params.tolerance, color="gray", linestyle="--", alpha=0.7, label="Tolerance")
    axes[0].set_xlabel("t [s]")
    axes[0].set_ylabel("Residual [m/s]")
    axes[0].legend(frameon=True)

    axes[1].plot(timeseries_df["time"], timeseries_df["outer_iterations"], color="tab:orange")
    axes[1].set_xlabel("t [s]")
    axes[1].set_ylabel("Outer iterations")

    fig.suptitle(f"Convergence History — {_title(params)}", fontweight="bold")
    plt.tight_layout()

    output_path = output_dir / "convergence.pdf"
    fig.savefig(output_path, dpi=300, bbox_inches="tight")
    plt.close(fig)
    return output_path


def upload_plots_to_mlflow(plot_paths: list, artifact_subdir: str = "plots"):
    """Upload generated plots to the active MLflow run as artifacts."""
    if not mlflow.active_run():
        return
    for path in plot_paths:
        if path and path.exists():
            mlflow.log_artifact(str(path), artifact_path=artifact_subdir)
            log.info(f"Uploaded: {artifact_subdir}/{path.name}")


def generate_plots_for_run(solver, output_dir) -> list:
    """Plot a solved run into output_dir and upload to MLflow if a run is active."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = [
        plot_profiles(solver.fields.to_dataframe(), solver.params, output_dir),
        plot_convergence(solver.time_series.to_dataframe(), solver.params, output_dir),
    ]
    paths = [p for p in paths if p is not None]
    log.info(f"Generated {len(paths)} plots in {output_dir}")

    upload_plots_to_mlflow(paths)
    return paths
