"""Direct tridiagonal solver (Thomas algorithm).

The forward sweep carries a data dependency from row i-1 to row i, so this
kernel is compiled without ``parallel=True``.
"""

import numpy as np
from numba import njit


@njit(cache=True, nogil=True, error_model="numpy")
def solve_tridiagonal(a, b, c, d):
    """Solve A x = d for tridiagonal A.

    Parameters
    ----------
    a : ndarray
        Sub-diagonal, ``a[0]`` is ignored.
    b : ndarray
        Main diagonal.
    c : ndarray
        Super-diagonal, ``c[n-1]`` is ignored.
    d : ndarray
        Right-hand side.

    Returns
    -------
    x : ndarray
        Solution vector. No pivoting is done: a zero pivot yields inf/nan.
    """
    n = b.shape[0]
    c_star = np.zeros(n, dtype=np.float64)
    d_star = np.zeros(n, dtype=np.float64)
    x = np.zeros(n, dtype=np.float64)

    c_star[0] = c[0] / b[0] if n > 1 else 0.0
    d_star[0] = d[0] / b[0]

    for i in range(1, n):
        m = b[i] - a[i] * c_star[i - 1]
        if i < n - 1:
            c_star[i] = c[i] / m
        d_star[i] = (d[i] - a[i] * d_star[i - 1]) / m

    x[n - 1] = d_star[n - 1]
    for i in range(n - 2, -1, -1):
        x[i] = d_star[i] - c_star[i] * x[i + 1]

    return x


@njit(cache=True, nogil=True)
def tridiagonal_matvec(a, b, c, x):
    """Reconstruct A @ x from the three diagonals."""
    n = b.shape[0]
    y = np.zeros(n, dtype=np.float64)
    for i in range(n):
        y[i] = b[i] * x[i]
        if i > 0:
            y[i] += a[i] * x[i - 1]
        if i < n - 1:
            y[i] += c[i] * x[i + 1]
    return y
