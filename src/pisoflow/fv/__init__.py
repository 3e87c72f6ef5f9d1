"""Finite volume solver package.

This package contains the collocated finite volume solver implementation
with PISO/SIMPLEC algorithms for pressure-velocity coupling.
"""

from .solver import PISOSolver

__all__ = ["PISOSolver"]
