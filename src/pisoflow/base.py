"""Abstract base solver for transient 1D coolant flow."""

from abc import ABC, abstractmethod
import logging
import time

import numpy as np

from .datastructures import Fields, Metrics, TimeSeries

log = logging.getLogger(__name__)


class TransientFlowSolver(ABC):
    """Abstract base solver for transient duct flow.

    Handles:
    - Parameter management (input configuration)
    - Metrics tracking (output results)
    - Time loop with per-step diagnostics
    - Callback dispatch (logging, MLflow)

    Subclasses must:
    - Set Parameters class attribute (e.g., PISOParameters)
    - Implement step() - advance one timestep and return a StepInfo
    - Call _init_fields(z) after setting up the grid
    - Expose current fields as self.state.u, self.state.p, self.state.T
    """

    Parameters = None  # Subclasses set this to PISOParameters

    def __init__(self, params=None, callbacks=None, **kwargs):
        """Initialize solver with parameters.

        Parameters
        ----------
        params : Parameters, optional
            Parameters object. If not provided, kwargs are used to create params.
        callbacks : list of SolverCallback, optional
            Observers notified at the start, after every timestep and at the end.
        **kwargs
            Configuration parameters passed to Parameters class if params is None.
        """
        if params is None:
            if self.Parameters is None:
                raise ValueError("Subclass must define Parameters class attribute")
            params = self.Parameters(**kwargs)

        self.params = params
        self.callbacks = list(callbacks or [])
        self.metrics = Metrics()
        self.fields = None  # Initialized by subclass via _init_fields()
        self.time_series = None  # Populated after solve()
        self.time = 0.0
        self.step_count = 0

    def _init_fields(self, z: np.ndarray):
        """Pre-allocate the Fields dataclass that will hold the final solution."""
        n_points = len(z)
        self.fields = Fields(
            z=z.copy(),
            u=np.zeros(n_points),
            p=np.zeros(n_points),
            T=np.zeros(n_points),
        )

    @abstractmethod
    def step(self):
        """Advance the solution by one timestep.

        Returns
        -------
        StepInfo
            Convergence status and diagnostics of the step.
        """
        pass

    def _finalize_fields(self):
        """Copy final solution from internal arrays to output fields."""
        self.fields.u[:] = self.state.u
        self.fields.p[:] = self.state.p
        self.fields.T[:] = self.state.T

    def _store_results(self, history, wall_time, max_timeseries_points: int = 1000):
        """Store solve results in self.fields, self.time_series, and self.metrics."""
        self._finalize_fields()

        # Downsample time series to max_timeseries_points
        def downsample(data):
            if data is None or len(data) <= max_timeseries_points:
                return data
            indices = np.linspace(0, len(data) - 1, max_timeseries_points, dtype=int)
            return [data[i] for i in indices]

        self.time_series = TimeSeries(
            time=downsample([h.time for h in history]),
            outer_iterations=downsample([h.status.iterations for h in history]),
            residual=downsample([h.status.residual for h in history]),
            max_courant=downsample([h.max_courant for h in history]),
            max_reynolds=downsample([h.max_reynolds for h in history]),
            continuity_residual=downsample([h.continuity_residual for h in history]),
            max_pressure_change=downsample([h.max_pressure_change for h in history]),
            T_min=downsample([h.T_min for h in history]),
            T_max=downsample([h.T_max for h in history]),
        )

        # Use FINAL values, not downsampled
        nonconverged = sum(1 for h in history if not h.status.converged)
        self.metrics = Metrics(
            steps=len(history),
            simulated_time=self.time,
            converged=nonconverged == 0,
            nonconverged_steps=nonconverged,
            out_of_range_steps=sum(1 for h in history if not h.property_status.ok),
            total_outer_iterations=sum(h.status.iterations for h in history),
            final_residual=history[-1].status.residual if history else float("inf"),
            worst_residual=max((h.status.residual for h in history), default=0.0),
            max_courant=max((h.max_courant for h in history), default=0.0),
            max_reynolds=max((h.max_reynolds for h in history), default=0.0),
            continuity_residual=history[-1].continuity_residual if history else 0.0,
            min_temperature=float(np.min(self.state.T)),
            finite=bool(
                np.all(np.isfinite(self.state.u))
                and np.all(np.isfinite(self.state.p))
                and np.all(np.isfinite(self.state.T))
            ),
            wall_time_seconds=wall_time,
        )

    def solve(self, n_steps: int = None):
        """Integrate in time.

        Stores results in solver attributes:
        - self.fields : Fields dataclass with the final profiles
        - self.time_series : TimeSeries dataclass with per-step history
        - self.metrics : Metrics dataclass with solver metrics

        Parameters
        ----------
        n_steps : int, optional
            Number of timesteps. If None, uses round(params.t_end / params.dt).
        """
        if n_steps is None:
            n_steps = self.params.n_steps

        for cb in self.callbacks:
            cb.on_solve_start(self)

        history = []
        time_start = time.time()

        for _ in range(n_steps):
            info = self.step()
            history.append(info)
            for cb in self.callbacks:
                cb.on_timestep_end(self, info)

        wall_time = time.time() - time_start
        log.info(f"Solver finished {n_steps} steps in {wall_time:.2f} seconds.")

        self._store_results(history, wall_time)

        for cb in self.callbacks:
            cb.on_solve_end(self)

    def save(self, filepath):
        """Save complete solver state to HDF5 file.

        Parameters
        ----------
        filepath : str or Path
            Output file path (use .h5 extension).
        """
        from utilities.io import save_simulation_data

        save_simulation_data(filepath, self)
