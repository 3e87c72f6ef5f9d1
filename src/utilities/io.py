"""Result I/O: final profiles as text and full runs as HDF5."""

from pathlib import Path
from typing import TextIO

import numpy as np
import pandas as pd


def ensure_output_dir(path) -> Path:
    """Create a directory (and parents) if needed and return it as a Path."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def write_profiles(stream: TextIO, u: np.ndarray, p: np.ndarray, T: np.ndarray, fmt: str = "%.10e"):
    """Write velocity, pressure and temperature as three comma-separated lines.

    Only the final timestep is meant to be written; nothing is persisted
    for intermediate steps.
    """
    np.savetxt(stream, np.vstack([u, p, T]), fmt=fmt, delimiter=", ")


def read_profiles(stream: TextIO):
    """Inverse of ``write_profiles``. Returns u, p, T."""
    data = np.loadtxt(stream, delimiter=",", ndmin=2)
    return data[0], data[1], data[2]


def save_simulation_data(filepath, solver):
    """Save params, metrics, time series and fields of a finished run.

    Parameters
    ----------
    filepath : str or Path
        Output file path (use .h5 extension).
    solver : TransientFlowSolver
        Solver after ``solve()``.
    """
    filepath = Path(filepath)
    ensure_output_dir(filepath.parent)

    with pd.HDFStore(filepath, mode="w", complevel=5) as store:
        store["params"] = solver.params.to_dataframe()
        store["metrics"] = solver.metrics.to_dataframe()
        store["time_series"] = solver.time_series.to_dataframe()
        store["fields"] = solver.fields.to_dataframe()


def load_simulation_data(filepath) -> dict:
    """Load a run saved with ``save_simulation_data`` as a dict of DataFrames."""
    with pd.HDFStore(Path(filepath), mode="r") as store:
        return {key.lstrip("/"): store[key] for key in store.keys()}
