"""Exceptions raised when a run is configured to fail hard."""


class SolverError(RuntimeError):
    """Base class for solver failures."""


class ConvergenceError(SolverError):
    """Outer PISO loop hit max_outer_iterations without reaching tolerance."""

    def __init__(self, step: int, residual: float, iterations: int):
        self.step = step
        self.residual = residual
        self.iterations = iterations
        super().__init__(
            f"Timestep {step}: PISO did not converge after {iterations} outer "
            f"iterations (residual={residual:.3e})"
        )


class PropertyRangeError(SolverError):
    """Temperature fell below the validity floor of the property correlations."""

    def __init__(self, value: float, floor: float):
        self.value = value
        self.floor = floor
        super().__init__(
            f"Temperature {value:.2f} K is below the property validity floor {floor:.2f} K"
        )
