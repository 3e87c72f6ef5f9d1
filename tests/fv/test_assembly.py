"""Tests for the Rhie-Chow interpolation and the momentum / continuity rows."""

import numpy as np
import pytest

from pisoflow import Grid1D, PaddedPressure, SolverState
from pisoflow.datastructures import FIXED, FIXED_PRESSURE, ZERO_CORRECTION, ZERO_GRADIENT
from pisoflow.fv.assembly.momentum_eq_assembly import (
    assemble_momentum_boundaries,
    assemble_momentum_internal,
    relax_momentum_equation,
    seed_lagged_coefficient,
)
from pisoflow.fv.assembly.pressure_correction_eq_assembly import (
    assemble_pressure_correction_boundaries,
    continuity_imbalance,
)
from pisoflow.fv.assembly.rhie_chow import mdot_calculation, rhie_chow_velocity
from pisoflow.fv.linear_solvers import solve_tridiagonal


@pytest.fixture
def state():
    """20-node state with water-like properties and a seeded lagged diagonal."""
    grid = Grid1D(L=0.01, N=20)
    s = SolverState.allocate(grid)
    s.rho[:] = 1000.0
    s.mu[:] = 1e-3
    s.bU_lag[:] = seed_lagged_coefficient(s.rho, s.mu, grid.dz, 1e-4, 1e-6)
    return s


class TestPaddedPressure:
    """Ghost nodes around the pressure field."""

    def test_zero_gradient_inlet(self):
        """Inlet ghost copies p[0], outlet ghost is the outlet pressure."""
        pad = PaddedPressure(4, p_outlet=2.5)
        p = np.array([4.0, 3.0, 2.0, 1.0])
        pad.refresh(p)
        np.testing.assert_array_equal(pad.interior, p)
        assert pad.inlet_ghost == 4.0
        assert pad.outlet_ghost == 2.5

    def test_mirror_inlet(self):
        """Mirror inlet ghost copies p[1]."""
        pad = PaddedPressure(4, p_outlet=0.0, inlet_bc="mirror")
        pad.refresh(np.array([4.0, 3.0, 2.0, 1.0]))
        assert pad.inlet_ghost == 3.0

    def test_unknown_inlet_bc(self):
        """Only known inlet treatments are accepted."""
        with pytest.raises(ValueError, match="pressure_inlet_bc"):
            PaddedPressure(4, 0.0, inlet_bc="periodic")


class TestRhieChow:
    """Face interpolation."""

    def test_linear_pressure_gives_average(self, state):
        """No correction on interior faces when the pressure field is linear."""
        n = state.grid.N
        state.u[:] = np.linspace(0.01, 0.02, n)
        pad = np.linspace(5.0, 0.0, n + 2)
        faces = rhie_chow_velocity(state.u, pad, state.bU_lag, state.grid.dz, 1.0)
        np.testing.assert_allclose(
            faces[1:-1], 0.5 * (state.u[1:-2] + state.u[2:-1]), rtol=1e-12
        )

    def test_boundary_faces_take_end_velocities(self, state):
        """Faces next to the end nodes carry u[0] and u[-1] whatever the pressure."""
        n = state.grid.N
        state.u[:] = np.linspace(0.01, 0.02, n)
        pad = np.where(np.arange(n + 2) % 2 == 0, 1.0, -1.0)
        for rc_coeff in (0.0, 1.0):
            faces = rhie_chow_velocity(state.u, pad, state.bU_lag, state.grid.dz, rc_coeff)
            assert faces[0] == state.u[0]
            assert faces[-1] == state.u[-1]

    def test_checkerboard_is_damped(self, state):
        """An odd-even pressure mode changes face velocities, unlike plain averaging."""
        n = state.grid.N
        state.u[:] = 0.01
        pad = np.where(np.arange(n + 2) % 2 == 0, 1.0, -1.0)
        with_rc = rhie_chow_velocity(state.u, pad, state.bU_lag, state.grid.dz, 1.0)
        without_rc = rhie_chow_velocity(state.u, pad, state.bU_lag, state.grid.dz, 0.0)
        np.testing.assert_allclose(without_rc, 0.01)
        assert np.max(np.abs(with_rc - 0.01)) > 0.0

    def test_upwind_mass_flux(self):
        """Density is taken from the upstream node."""
        rho = np.array([1.0, 2.0, 3.0])
        mdot = mdot_calculation(rho, np.array([1.0, -1.0]))
        np.testing.assert_array_equal(mdot, [1.0, -3.0])


class TestMomentumAssembly:
    """Momentum rows and their boundary conditions."""

    def assemble(self, state, outlet_bc, u_inlet=0.01, u_outlet=0.02):
        g = state.grid
        nb_sum = np.zeros(g.N)
        assemble_momentum_internal(
            state.u, state.u_old, state.p_padded.buffer, state.rho, state.mu, state.Su,
            state.bU_lag, g.dz, 1e-4, 1e-6, 0.0, 1.0,
            state.aU, state.bU, state.cU, state.dU, nb_sum,
        )
        assemble_momentum_boundaries(
            state.u, state.rho, state.mu, g.dz, 1e-4, 1e-6, 0.0, u_inlet, u_outlet, outlet_bc,
            state.aU, state.bU, state.cU, state.dU, state.bU_lag,
        )
        return nb_sum

    def test_fixed_outlet_enforced(self, state):
        """Solved velocity matches both Dirichlet values exactly."""
        self.assemble(state, FIXED)
        u = solve_tridiagonal(state.aU, state.bU, state.cU, state.dU)
        assert u[0] == 0.01
        assert u[-1] == pytest.approx(0.02, rel=1e-14)

    def test_zero_gradient_outlet_enforced(self, state):
        """Last two nodes are equal."""
        state.u[:] = 0.01
        state.u_old[:] = 0.01
        self.assemble(state, ZERO_GRADIENT)
        u = solve_tridiagonal(state.aU, state.bU, state.cU, state.dU)
        assert u[0] == 0.01
        assert u[-1] == pytest.approx(u[-2], rel=1e-14)

    def test_interior_rows_diagonally_dominant(self, state):
        """Upwind plus transient and drag terms keep b > |a| + |c|."""
        state.u[:] = 0.01
        nb_sum = self.assemble(state, ZERO_GRADIENT)
        interior = slice(1, -1)
        np.testing.assert_allclose(
            nb_sum[interior], np.abs(state.aU[interior]) + np.abs(state.cU[interior])
        )
        assert np.all(state.bU[interior] > nb_sum[interior])

    def test_boundary_lagged_coefficient_positive(self, state):
        """Boundary nodes get a one-sided diagonal, not the unit Dirichlet value."""
        self.assemble(state, FIXED)
        assert state.bU_lag[0] > 1.0
        assert state.bU_lag[-1] > state.bU_lag[0]

    def test_relaxation(self, state):
        """alpha = 1 is a no-op; alpha < 1 scales the interior diagonal."""
        state.u[:] = 0.01
        self.assemble(state, FIXED)
        b, d = relax_momentum_equation(state.bU, state.dU, state.u, 1.0)
        assert b is state.bU and d is state.dU
        b, d = relax_momentum_equation(state.bU, state.dU, state.u, 0.5)
        np.testing.assert_allclose(b[1:-1], 2.0 * state.bU[1:-1])
        assert b[0] == state.bU[0]


class TestContinuityAssembly:
    """Pressure-correction boundary rows and the imbalance diagnostic."""

    def test_outlet_rows(self):
        """Zero correction, or the correction that restores p_outlet."""
        n = 5
        p = np.array([3.0, 2.0, 1.0, 0.5, 0.25])
        aP, bP, cP, dP = (np.zeros(n) for _ in range(4))
        assemble_pressure_correction_boundaries(p, 1.0, ZERO_CORRECTION, aP, bP, cP, dP)
        assert (bP[0], cP[0], dP[0]) == (1.0, -1.0, 0.0)
        assert (aP[-1], bP[-1], dP[-1]) == (0.0, 1.0, 0.0)
        assemble_pressure_correction_boundaries(p, 1.0, FIXED_PRESSURE, aP, bP, cP, dP)
        assert dP[-1] == pytest.approx(0.75)

    def test_uniform_flow_is_balanced(self, state):
        """Uniform velocity and pressure leave no imbalance."""
        state.u[:] = 0.01
        imbalance = continuity_imbalance(
            state.u, state.p_padded.buffer, state.rho, state.Sm, state.bU_lag,
            state.grid.dz, 1.0,
        )
        np.testing.assert_allclose(imbalance, 0.0, atol=1e-15)

    def test_mass_source_shows_as_imbalance(self, state):
        """A source without matching outflow is reported per cell."""
        state.u[:] = 0.01
        state.Sm[5] = 2.0
        imbalance = continuity_imbalance(
            state.u, state.p_padded.buffer, state.rho, state.Sm, state.bU_lag,
            state.grid.dz, 1.0,
        )
        assert imbalance[5] == pytest.approx(-2.0 * state.grid.dz)
        assert imbalance[0] == 0.0 and imbalance[-1] == 0.0
