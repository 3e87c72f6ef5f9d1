"""Linear solvers for FV method."""

from .thomas import solve_tridiagonal, tridiagonal_matvec
from .scipy_solver import scipy_solver

LINEAR_SOLVERS = {
    "thomas": solve_tridiagonal,
    "scipy": scipy_solver,
}


def get_linear_solver(name: str):
    """Look up a tridiagonal solver by name."""
    try:
        return LINEAR_SOLVERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown linear_solver: {name}. Use one of {sorted(LINEAR_SOLVERS)}"
        ) from None


__all__ = [
    "solve_tridiagonal",
    "tridiagonal_matvec",
    "scipy_solver",
    "get_linear_solver",
]
