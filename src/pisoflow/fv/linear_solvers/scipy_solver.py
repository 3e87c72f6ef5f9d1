"""Scipy-based banded solver for tridiagonal systems."""

import numpy as np
from scipy.linalg import solve_banded


def scipy_solver(
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    d: np.ndarray,
):
    """Solve a tridiagonal system with LAPACK's banded LU (``gbsv``).

    Same calling convention as ``solve_tridiagonal``; used as a reference
    implementation and selectable with ``linear_solver="scipy"``.

    Parameters
    ----------
    a, b, c : np.ndarray
        Sub-, main- and super-diagonal. ``a[0]`` and ``c[-1]`` are ignored.
    d : np.ndarray
        Right-hand side vector.

    Returns
    -------
    x : np.ndarray
        Solution vector.
    """
    n = b.shape[0]
    ab = np.zeros((3, n))
    ab[0, 1:] = c[:-1]
    ab[1, :] = b
    ab[2, :-1] = a[1:]

    # Diagonal ordered form: row 0 super, row 1 main, row 2 sub
    return solve_banded((1, 1), ab, d, check_finite=False)
