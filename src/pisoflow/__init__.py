"""Transient 1D porous-duct coolant flow solver.

Solver Hierarchy:
-----------------
TransientFlowSolver (abstract base - time loop, metrics, callbacks)
└── PISOSolver (finite volume with PISO/SIMPLEC coupling and energy equation)
"""

from .base import TransientFlowSolver
from .callbacks import LoggingCallback, MLflowCallback, SolverCallback
from .datastructures import (
    # Configuration
    Parameters,
    PISOParameters,
    SourceZone,
    # Results
    Metrics,
    Fields,
    TimeSeries,
    StepInfo,
    Converged,
    NotConverged,
    Valid,
    OutOfRange,
    # Internal state
    Grid1D,
    PaddedPressure,
    SolverState,
)
from .exceptions import ConvergenceError, PropertyRangeError, SolverError
from .properties import ConstantProperties, FluidProperties, SodiumProperties, create_fluid
from pisoflow.fv.solver import PISOSolver


__all__ = [
    # Base solver
    "TransientFlowSolver",
    "PISOSolver",
    # Configuration
    "Parameters",
    "PISOParameters",
    "SourceZone",
    # Results
    "Metrics",
    "Fields",
    "TimeSeries",
    "StepInfo",
    "Converged",
    "NotConverged",
    "Valid",
    "OutOfRange",
    # Internal state
    "Grid1D",
    "PaddedPressure",
    "SolverState",
    # Properties
    "FluidProperties",
    "SodiumProperties",
    "ConstantProperties",
    "create_fluid",
    # Observers
    "SolverCallback",
    "LoggingCallback",
    "MLflowCallback",
    # Errors
    "SolverError",
    "ConvergenceError",
    "PropertyRangeError",
]
