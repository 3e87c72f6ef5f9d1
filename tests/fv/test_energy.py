"""Tests for the segregated energy equation."""

import numpy as np
import pytest

from pisoflow import ConstantProperties, Grid1D, PISOParameters, SolverState
from pisoflow.datastructures import FIXED, ZERO_GRADIENT
from pisoflow.fv.assembly.energy_eq_assembly import solve_energy
from pisoflow.fv.linear_solvers import solve_tridiagonal
from pisoflow.metrics import discrete_linf_error


def energy_state(params):
    s = SolverState.allocate(Grid1D(L=params.L, N=params.N))
    s.rho[:], s.mu[:], s.k[:], s.cp[:] = ConstantProperties().evaluate(s.T)
    s.bU_lag[:] = 1.0
    s.T[:] = params.T_initial
    return s


def advance(s, params, n_solves, inlet_bc=FIXED, outlet_bc=FIXED):
    for _ in range(n_solves):
        s.T_old[:] = s.T
        solve_energy(s, params, solve_tridiagonal, 1.0, inlet_bc, outlet_bc)
    return s.T


class TestDiffusionLimit:
    """No flow, no source, very large timestep: linear conduction profile."""

    def test_linear_profile(self):
        """T tends to the straight line between the two wall temperatures."""
        params = PISOParameters(
            L=0.01, N=21, dt=1e9, t_end=1e9, fluid="constant",
            T_inlet=400.0, T_outlet=300.0, T_initial=350.0,
        )
        s = energy_state(params)
        T = advance(s, params, 5)
        exact = np.linspace(400.0, 300.0, params.N)
        assert discrete_linf_error(exact, T) < 1e-6

    def test_uniform_source_gives_parabola(self):
        """Uniform heating between cold walls bends the profile upward symmetrically."""
        params = PISOParameters(
            L=0.01, N=21, dt=1e9, t_end=1e9, fluid="constant",
            T_inlet=300.0, T_outlet=300.0, T_initial=300.0,
        )
        s = energy_state(params)
        s.St[:] = 1e6
        T = advance(s, params, 5)
        np.testing.assert_allclose(T, T[::-1], rtol=1e-10)
        z = s.grid.z
        exact = 300.0 + 1e6 / (2.0 * 0.6) * z * (params.L - z)
        np.testing.assert_allclose(T, exact, rtol=1e-6)


class TestAdvection:
    """Upwind transport with a positive velocity."""

    def test_bounded(self):
        """Upwind scheme creates no new extrema."""
        params = PISOParameters(
            L=0.01, N=50, dt=1e-3, fluid="constant",
            T_inlet=400.0, T_outlet=300.0, T_initial=300.0,
        )
        s = energy_state(params)
        s.u[:] = 0.01
        T = advance(s, params, 20)
        assert np.all(T >= 300.0 - 1e-9)
        assert np.all(T <= 400.0 + 1e-9)

    def test_front_moves_downstream(self):
        """Warm inflow heats the upstream half first."""
        params = PISOParameters(
            L=0.01, N=50, dt=1e-2, fluid="constant",
            T_inlet=400.0, T_outlet=300.0, T_initial=300.0,
        )
        s = energy_state(params)
        s.u[:] = 0.01
        T = advance(s, params, 20)
        assert T[5] > T[25] > T[45] - 1e-9

    def test_zero_gradient_outlet(self):
        """Last two temperatures are equal."""
        params = PISOParameters(
            L=0.01, N=30, dt=1e-3, fluid="constant",
            T_inlet=400.0, T_initial=300.0, temperature_outlet_bc="zero_gradient",
        )
        s = energy_state(params)
        s.u[:] = 0.01
        T = advance(s, params, 3, outlet_bc=ZERO_GRADIENT)
        assert T[0] == 400.0
        assert T[-1] == pytest.approx(T[-2], rel=1e-14)
