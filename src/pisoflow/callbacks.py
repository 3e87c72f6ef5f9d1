"""Observers called by the time loop.

The solver never prints; progress, Courant/Reynolds diagnostics and
experiment tracking are attached as callbacks.
"""

import logging

import mlflow

log = logging.getLogger(__name__)


class SolverCallback:
    """No-op observer; override the hooks you need."""

    def on_solve_start(self, solver):
        pass

    def on_timestep_end(self, solver, info):
        pass

    def on_solve_end(self, solver):
        pass


class LoggingCallback(SolverCallback):
    """Progress line every ``every`` steps, plus every unconverged step."""

    def __init__(self, every: int = 100):
        self.every = max(1, int(every))

    def on_solve_start(self, solver):
        p = solver.params
        log.info(
            f"Starting {p.n_steps} steps of dt={p.dt:.3e} s "
            f"({p.coupling}, {p.n_correctors} correctors, tol={p.tolerance:.1e})"
        )

    def on_timestep_end(self, solver, info):
        if info.step % self.every == 0 or not info.status.converged:
            log.info(
                f"Time: {info.time:.6f} / {solver.params.t_end:.6f} s, "
                f"Courant: {info.max_courant:.4f}, Reynolds: {info.max_reynolds:.4f}, "
                f"outer iterations: {info.status.iterations}, residual: {info.status.residual:.3e}"
            )

    def on_solve_end(self, solver):
        m = solver.metrics
        log.info(
            f"Done: {m.steps} steps, {m.nonconverged_steps} not converged, "
            f"max Courant {m.max_courant:.4f}, time={m.wall_time_seconds:.2f}s"
        )


class MLflowCallback(SolverCallback):
    """Live MLflow metrics while a run is active."""

    def __init__(self, every: int = 50):
        self.every = max(1, int(every))

    def on_timestep_end(self, solver, info):
        if info.step % self.every != 0 or not mlflow.active_run():
            return
        mlflow.log_metrics(
            {
                "residual": info.status.residual,
                "outer_iterations": info.status.iterations,
                "max_courant": info.max_courant,
                "max_reynolds": info.max_reynolds,
                "continuity_residual": info.continuity_residual,
                "max_pressure_change": info.max_pressure_change,
                "T_min": info.T_min,
                "T_max": info.T_max,
            },
            step=info.step,
        )

    def on_solve_end(self, solver):
        if mlflow.active_run():
            mlflow.log_metrics(solver.metrics.to_mlflow())
