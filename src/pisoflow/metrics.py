"""Shared metrics and diagnostic numbers for the solver."""

from __future__ import annotations

import numpy as np


# -----------------------------------------------------------------------------
# Norms / errors
# -----------------------------------------------------------------------------


def discrete_l2_error(
    f_exact: np.ndarray, f_num: np.ndarray, interval_length: float
) -> float:
    """Compute discrete L2 error between exact and numerical solutions."""
    diff = f_num - f_exact
    h = interval_length / f_exact.size
    return np.sqrt(h) * np.linalg.norm(diff)


def discrete_linf_error(f_exact: np.ndarray, f_num: np.ndarray) -> float:
    """Compute discrete L-infinity (maximum) error."""
    return np.max(np.abs(f_num - f_exact))


# -----------------------------------------------------------------------------
# Flow diagnostics (observational only)
# -----------------------------------------------------------------------------


def max_courant(u: np.ndarray, dt: float, dz: float) -> float:
    """Largest cell Courant number |u| dt / dz."""
    return float(np.max(np.abs(u)) * dt / dz)


def max_reynolds(u: np.ndarray, rho: np.ndarray, mu: np.ndarray, K: float) -> float:
    """Largest permeability-based Reynolds number rho |u| sqrt(K) / mu."""
    return float(np.max(rho * np.abs(u) * np.sqrt(K) / mu))
