"""Temperature-dependent fluid property models.

All functions accept scalars or numpy arrays of temperature in Kelvin and
return SI properties:

- density [kg/m^3]
- viscosity [Pa s]
- conductivity [W/m/K]
- specific_heat [J/kg/K]

Correlations are evaluated outside the numba kernels; the assembly routines
receive the resulting per-cell arrays.
"""

import logging

import numpy as np

from .datastructures import OutOfRange, Valid

log = logging.getLogger(__name__)


class FluidProperties:
    """Base class for property models.

    ``T_min`` is the lower validity bound of the correlations. Evaluating
    below it is allowed (the correlation is extrapolated) but reported.
    """

    name = "fluid"
    T_min = 0.0

    def density(self, T):
        raise NotImplementedError

    def viscosity(self, T):
        raise NotImplementedError

    def conductivity(self, T):
        raise NotImplementedError

    def specific_heat(self, T):
        raise NotImplementedError

    def check_range(self, T):
        """Return ``Valid`` or ``OutOfRange(value)`` for the coldest temperature.

        Logs a warning only if some temperature is strictly below ``T_min``.
        """
        T_lowest = float(np.min(T))
        if T_lowest < self.T_min:
            log.warning(
                f"{self.name}: T = {T_lowest:.2f} K is below the validity limit "
                f"{self.T_min:.2f} K, extrapolating correlations"
            )
            return OutOfRange(value=T_lowest, floor=self.T_min)
        return Valid()

    def evaluate(self, T):
        """Evaluate all four properties on a temperature field.

        Returns
        -------
        rho, mu, k, cp : np.ndarray
        """
        T = np.asarray(T, dtype=np.float64)
        return (
            np.broadcast_to(self.density(T), T.shape).astype(np.float64),
            np.broadcast_to(self.viscosity(T), T.shape).astype(np.float64),
            np.broadcast_to(self.conductivity(T), T.shape).astype(np.float64),
            np.broadcast_to(self.specific_heat(T), T.shape).astype(np.float64),
        )


class SodiumProperties(FluidProperties):
    """Liquid sodium correlations.

    Viscosity follows Shpil'rain et al. (1985), valid for 371 K < T < 2500 K.
    The lower bound is the melting point of sodium.
    """

    name = "sodium"
    T_min = 371.0
    T_crit = 2509.46

    def density(self, T):
        theta = 1.0 - np.asarray(T) / self.T_crit
        return 219.0 + 275.32 * theta + 511.58 * np.sqrt(theta)

    def viscosity(self, T):
        T = np.asarray(T)
        return np.exp(-6.4406 - 0.3958 * np.log(T) + 556.835 / T)

    def conductivity(self, T):
        T = np.asarray(T)
        return 124.67 - 0.11381 * T + 5.5226e-5 * T**2 - 1.1842e-8 * T**3

    def specific_heat(self, T):
        dT = np.asarray(T) - 273.15
        return 1436.72 - 0.58 * dT + 4.627e-4 * dT**2


class ConstantProperties(FluidProperties):
    """Temperature-independent fluid, used for verification runs."""

    name = "constant"

    def __init__(self, rho=1000.0, mu=1e-3, k=0.6, cp=4180.0, T_min=0.0):
        self.rho = rho
        self.mu = mu
        self.k = k
        self.cp = cp
        self.T_min = T_min

    def density(self, T):
        return np.full(np.shape(T), self.rho)

    def viscosity(self, T):
        return np.full(np.shape(T), self.mu)

    def conductivity(self, T):
        return np.full(np.shape(T), self.k)

    def specific_heat(self, T):
        return np.full(np.shape(T), self.cp)


FLUIDS = {
    "sodium": SodiumProperties,
    "constant": ConstantProperties,
}


def create_fluid(name: str, **kwargs) -> FluidProperties:
    """Instantiate a property model by name."""
    if name.lower() not in FLUIDS:
        raise ValueError(f"Unknown fluid: {name}. Use one of {sorted(FLUIDS)}")
    return FLUIDS[name.lower()](**kwargs)
