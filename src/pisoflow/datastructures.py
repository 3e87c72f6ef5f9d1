"""Data structures for solver configuration, state and results.

Structure:
- Parameters: Input configuration (logged to MLflow at start)
- Metrics: Output results (logged to MLflow at end)
- Fields: Spatial solution data
- TimeSeries: Per-timestep history
- SolverState: Internal fields and coefficient buffers shared by all stages
- Converged / NotConverged, Valid / OutOfRange: inspectable step outcomes
"""

from dataclasses import dataclass, asdict, field
from typing import ClassVar, List, Optional

import numpy as np
import pandas as pd


# ========================================================
# Boundary condition kinds
# ========================================================

# Integer codes are what the numba kernels see
FIXED = 0
ZERO_GRADIENT = 1
MIRROR = 2
ZERO_CORRECTION = 3
FIXED_PRESSURE = 4

VELOCITY_OUTLET_BCS = {"fixed": FIXED, "zero_gradient": ZERO_GRADIENT}
PRESSURE_INLET_BCS = {"zero_gradient": ZERO_GRADIENT, "mirror": MIRROR}
PRESSURE_OUTLET_BCS = {"zero_correction": ZERO_CORRECTION, "fixed_pressure": FIXED_PRESSURE}
TEMPERATURE_BCS = {"fixed": FIXED, "zero_gradient": ZERO_GRADIENT}

COUPLINGS = ("PISO", "SIMPLEC")
NONCONVERGENCE_POLICIES = ("continue", "warn", "raise")
RANGE_POLICIES = ("ignore", "warn", "raise")


def _check_choice(name, value, choices):
    if value not in choices:
        raise ValueError(f"Unknown {name}: {value}. Use one of {sorted(choices)}")


# ========================================================
# Parameters (Input Configuration)
# ========================================================


@dataclass
class SourceZone:
    """Volumetric source applied to every node with start <= z <= end.

    Magnitudes are per unit volume: mass [kg/m^3/s], momentum [N/m^3],
    energy [W/m^3]. Negative values model extraction.
    """

    start: float
    end: float
    mass: float = 0.0
    momentum: float = 0.0
    energy: float = 0.0


@dataclass
class Parameters:
    """Base solver parameters - domain, time window and stopping criteria."""

    L: float = 0.01
    N: int = 500
    dt: float = 1e-4
    t_end: float = 0.5
    max_outer_iterations: int = 1000
    tolerance: float = 1e-8
    method: str = ""

    def __post_init__(self):
        if self.N < 3:
            raise ValueError(f"N must be at least 3, got {self.N}")
        if self.dt <= 0 or self.t_end <= 0:
            raise ValueError("dt and t_end must be positive")

    @property
    def n_steps(self) -> int:
        return max(1, int(round(self.t_end / self.dt)))

    def to_dataframe(self):
        return pd.DataFrame([self.to_mlflow()])

    def to_mlflow(self) -> dict:
        """Flat dict of scalar parameters."""
        return {
            k: v for k, v in asdict(self).items() if not isinstance(v, (list, dict))
        }


@dataclass
class PISOParameters(Parameters):
    """Porous-duct coolant solver parameters (PISO / SIMPLEC coupling)."""

    # Porous medium
    K: float = 1e-6  # permeability [m^2]
    CF: float = 0.0  # Forchheimer coefficient [-]

    # Fluid
    fluid: str = "sodium"
    fluid_options: dict = field(default_factory=dict)

    # Pressure-velocity coupling
    coupling: str = "PISO"
    n_correctors: int = 2
    alpha_p: float = 1.0  # pressure relaxation
    alpha_u: float = 1.0  # momentum relaxation
    rhie_chow: bool = True
    rhie_chow_coeff: float = 1.0
    linear_solver: str = "thomas"

    # Boundary and initial conditions
    u_inlet: float = 0.01
    u_outlet: float = 0.01
    outlet_velocity_bc: str = "zero_gradient"
    p_outlet: float = 0.0
    pressure_inlet_bc: str = "zero_gradient"
    pressure_outlet_bc: str = "zero_correction"
    T_inlet: float = 1000.0
    T_outlet: float = 500.0
    T_initial: float = 300.0
    temperature_inlet_bc: str = "fixed"
    temperature_outlet_bc: str = "fixed"

    # Localised injection/extraction
    source_zones: List[SourceZone] = field(default_factory=list)

    # Failure policies and diagnostics
    on_nonconvergence: str = "continue"
    on_out_of_range: str = "warn"
    log_every: int = 100

    method: str = "FV-PISO"

    def __post_init__(self):
        super().__post_init__()
        self.coupling = self.coupling.upper()
        _check_choice("coupling", self.coupling, COUPLINGS)
        _check_choice("outlet_velocity_bc", self.outlet_velocity_bc, VELOCITY_OUTLET_BCS)
        _check_choice("pressure_inlet_bc", self.pressure_inlet_bc, PRESSURE_INLET_BCS)
        _check_choice("pressure_outlet_bc", self.pressure_outlet_bc, PRESSURE_OUTLET_BCS)
        _check_choice("temperature_inlet_bc", self.temperature_inlet_bc, TEMPERATURE_BCS)
        _check_choice("temperature_outlet_bc", self.temperature_outlet_bc, TEMPERATURE_BCS)
        _check_choice("on_nonconvergence", self.on_nonconvergence, NONCONVERGENCE_POLICIES)
        _check_choice("on_out_of_range", self.on_out_of_range, RANGE_POLICIES)
        if self.n_correctors < 1:
            raise ValueError("n_correctors must be at least 1")
        if self.K <= 0:
            raise ValueError("Permeability K must be positive")
        if not 0.0 < self.alpha_p <= 1.0 or not 0.0 < self.alpha_u <= 1.0:
            raise ValueError("Relaxation factors must lie in (0, 1]")
        # Hydra hands over plain dicts
        self.source_zones = [
            z if isinstance(z, SourceZone) else SourceZone(**z) for z in self.source_zones
        ]

    @property
    def dz(self) -> float:
        return self.L / (self.N - 1)


# ========================================================
# Step outcomes
# ========================================================


@dataclass(frozen=True)
class Converged:
    """Outer loop reached the tolerance."""

    iterations: int
    residual: float
    converged: ClassVar[bool] = True


@dataclass(frozen=True)
class NotConverged:
    """Outer loop hit max_outer_iterations; fields hold the last iterate."""

    iterations: int
    residual: float
    converged: ClassVar[bool] = False


@dataclass(frozen=True)
class Valid:
    """All temperatures inside the property correlation range."""

    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class OutOfRange:
    """Coldest temperature below the validity floor."""

    value: float
    floor: float
    ok: ClassVar[bool] = False


@dataclass
class StepInfo:
    """Diagnostics handed to callbacks after every timestep."""

    step: int
    time: float
    status: object  # Converged | NotConverged
    property_status: object  # Valid | OutOfRange
    residual_history: List[float]
    max_courant: float
    max_reynolds: float
    continuity_residual: float
    max_pressure_change: float  # max |p - p_old| over the step
    T_min: float
    T_max: float


# ========================================================
# Metrics (Output Results)
# ========================================================


@dataclass
class Metrics:
    """Solver metrics - output results computed during/after solving."""

    steps: int = 0
    simulated_time: float = 0.0
    converged: bool = False
    nonconverged_steps: int = 0
    out_of_range_steps: int = 0
    total_outer_iterations: int = 0
    final_residual: float = float("inf")
    worst_residual: float = 0.0
    max_courant: float = 0.0
    max_reynolds: float = 0.0
    continuity_residual: float = 0.0
    min_temperature: float = 0.0
    finite: bool = True
    wall_time_seconds: float = 0.0

    def to_dataframe(self):
        return pd.DataFrame([asdict(self)])

    def to_mlflow(self) -> dict:
        return {k: float(v) for k, v in asdict(self).items()}


# ========================================================
# Fields (Spatial Solution Data)
# ========================================================


@dataclass
class Fields:
    """Spatial solution fields (u, p, T) on node coordinates z."""

    z: np.ndarray
    u: np.ndarray
    p: np.ndarray
    T: np.ndarray

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per grid point."""
        return pd.DataFrame(asdict(self))


# ========================================================
# Time Series (Per-timestep history)
# ========================================================


@dataclass
class TimeSeries:
    """Timestep history (one value per timestep)."""

    time: List[float]
    outer_iterations: List[int]
    residual: List[float]
    max_courant: List[float]
    max_reynolds: List[float]
    continuity_residual: List[float]
    max_pressure_change: List[float]
    T_min: Optional[List[float]] = None
    T_max: Optional[List[float]] = None

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to DataFrame with one row per timestep."""
        return pd.DataFrame({k: v for k, v in asdict(self).items() if v is not None})

    def to_mlflow_batch(self):
        """Metric objects for ``MlflowClient.log_batch``."""
        from mlflow.entities import Metric

        metrics = []
        for key in (
            "residual", "max_courant", "max_reynolds", "continuity_residual", "max_pressure_change",
        ):
            for step, value in enumerate(getattr(self, key)):
                metrics.append(Metric(key=f"ts_{key}", value=float(value), timestamp=0, step=step))
        return metrics


# ========================================================
# Grid and solver state
# ========================================================


@dataclass(frozen=True)
class Grid1D:
    """Uniform collocated grid of N nodes over [0, L]."""

    L: float
    N: int

    @property
    def dz(self) -> float:
        return self.L / (self.N - 1)

    @property
    def z(self) -> np.ndarray:
        return np.linspace(0.0, self.L, self.N)


class PaddedPressure:
    """Pressure with one ghost node on each side for the Rhie-Chow stencil.

    ``buffer[k + 1]`` holds ``p[k]``; ``buffer[0]`` and ``buffer[-1]`` are the
    inlet and outlet ghosts. Call ``refresh`` after every pressure update.
    """

    def __init__(self, n: int, p_outlet: float, inlet_bc: str = "zero_gradient"):
        _check_choice("pressure_inlet_bc", inlet_bc, PRESSURE_INLET_BCS)
        self.buffer = np.zeros(n + 2)
        self.p_outlet = p_outlet
        self.inlet_bc = inlet_bc

    @property
    def interior(self) -> np.ndarray:
        return self.buffer[1:-1]

    @property
    def inlet_ghost(self) -> float:
        return self.buffer[0]

    @property
    def outlet_ghost(self) -> float:
        return self.buffer[-1]

    def refresh(self, p: np.ndarray):
        self.buffer[1:-1] = p
        if self.inlet_bc == "mirror":
            self.buffer[0] = p[1]
        else:
            self.buffer[0] = p[0]
        self.buffer[-1] = self.p_outlet


@dataclass
class SolverState:
    """Fields, history snapshots and coefficient buffers of one run.

    Owned by the time loop and passed by reference to every stage. ``bU_lag``
    is the momentum diagonal kept between sub-iterations for Rhie-Chow;
    ``d_corr`` is the pressure-correction coefficient derived from it.
    """

    grid: Grid1D

    # Current solution
    u: np.ndarray
    p: np.ndarray
    T: np.ndarray
    p_padded: PaddedPressure

    # Previous timestep
    u_old: np.ndarray
    p_old: np.ndarray
    T_old: np.ndarray

    # Properties evaluated at the current temperature
    rho: np.ndarray
    mu: np.ndarray
    k: np.ndarray
    cp: np.ndarray

    # Momentum system and lagged coefficients
    aU: np.ndarray
    bU: np.ndarray
    cU: np.ndarray
    dU: np.ndarray
    bU_lag: np.ndarray
    d_corr: np.ndarray

    # Pressure-correction system
    aP: np.ndarray
    bP: np.ndarray
    cP: np.ndarray
    dP: np.ndarray
    p_prime: np.ndarray

    # Energy system
    aT: np.ndarray
    bT: np.ndarray
    cT: np.ndarray
    dT: np.ndarray

    # Static volumetric sources
    Sm: np.ndarray
    Su: np.ndarray
    St: np.ndarray

    @classmethod
    def allocate(cls, grid: Grid1D, p_outlet: float = 0.0, pressure_inlet_bc: str = "zero_gradient"):
        """Allocate all arrays with proper sizes."""
        n = grid.N
        return cls(
            grid=grid,
            # Current solution
            u=np.zeros(n),
            p=np.zeros(n),
            T=np.zeros(n),
            p_padded=PaddedPressure(n, p_outlet, pressure_inlet_bc),
            # History
            u_old=np.zeros(n),
            p_old=np.zeros(n),
            T_old=np.zeros(n),
            # Properties
            rho=np.zeros(n),
            mu=np.zeros(n),
            k=np.zeros(n),
            cp=np.zeros(n),
            # Momentum
            aU=np.zeros(n),
            bU=np.zeros(n),
            cU=np.zeros(n),
            dU=np.zeros(n),
            bU_lag=np.zeros(n),
            d_corr=np.zeros(n),
            # Pressure correction
            aP=np.zeros(n),
            bP=np.zeros(n),
            cP=np.zeros(n),
            dP=np.zeros(n),
            p_prime=np.zeros(n),
            # Energy
            aT=np.zeros(n),
            bT=np.zeros(n),
            cT=np.zeros(n),
            dT=np.zeros(n),
            # Sources
            Sm=np.zeros(n),
            Su=np.zeros(n),
            St=np.zeros(n),
        )

    def snapshot(self):
        """Store the backward-Euler reference for the coming timestep."""
        self.u_old[:] = self.u
        self.p_old[:] = self.p
        self.T_old[:] = self.T

    def apply_source_zones(self, zones: List[SourceZone]):
        """Fill Sm, Su, St from source zones (overlapping zones add up)."""
        z = self.grid.z
        for zone in zones:
            mask = (z >= zone.start) & (z <= zone.end)
            self.Sm[mask] += zone.mass
            self.Su[mask] += zone.momentum
            self.St[mask] += zone.energy
