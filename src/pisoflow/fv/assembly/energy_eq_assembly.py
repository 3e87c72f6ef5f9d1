"""Segregated energy equation.

    d(rho cp T)/dt + d(rho cp u T)/dz = d/dz(k dT/dz) + S_T

Fully implicit: upwind convection with the converged Rhie-Chow face
velocities, central diffusion, backward Euler against T_old.
"""

import numpy as np
from numba import njit, prange

from pisoflow.datastructures import FIXED
from .rhie_chow import rhie_chow_face_velocity, upwind


@njit(parallel=True, cache=True, fastmath=True, nogil=True)
def assemble_energy_internal(
    u, T_old, p_pad, rho, k, cp, St, bU_lag, dz, dt, rc_coeff, aT, bT, cT, dT,
):
    """
    Fill rows 1..N-2 of the temperature system in place.
    """
    n = u.shape[0]

    for i in prange(1, n - 1):
        u_w = rhie_chow_face_velocity(u, p_pad, bU_lag, i - 1, dz, rc_coeff)
        u_e = rhie_chow_face_velocity(u, p_pad, bU_lag, i, dz, rc_coeff)

        # Heat capacity flux rho*cp*u taken from the upstream cell
        G_w = upwind(rho, i - 1, u_w) * upwind(cp, i - 1, u_w) * u_w
        G_e = upwind(rho, i, u_e) * upwind(cp, i, u_e) * u_e

        D_w = 0.5 * (k[i - 1] + k[i]) / dz
        D_e = 0.5 * (k[i] + k[i + 1]) / dz

        a_t = rho[i] * cp[i] * dz / dt

        aT[i] = -(D_w + max(G_w, 0.0))
        cT[i] = -(D_e + max(-G_e, 0.0))
        bT[i] = a_t + D_w + D_e + max(G_e, 0.0) + max(-G_w, 0.0)
        dT[i] = a_t * T_old[i] + St[i] * dz


def assemble_energy_boundaries(T_inlet, T_outlet, inlet_bc, outlet_bc, aT, bT, cT, dT):
    """Dirichlet or zero-gradient rows at both ends."""
    n = bT.shape[0]

    aT[0] = 0.0
    bT[0] = 1.0
    if inlet_bc == FIXED:
        cT[0] = 0.0
        dT[0] = T_inlet
    else:
        cT[0] = -1.0
        dT[0] = 0.0

    cT[n - 1] = 0.0
    bT[n - 1] = 1.0
    if outlet_bc == FIXED:
        aT[n - 1] = 0.0
        dT[n - 1] = T_outlet
    else:
        aT[n - 1] = -1.0
        dT[n - 1] = 0.0


def solve_energy(state, params, linear_solve, rc_coeff, inlet_bc, outlet_bc):
    """Assemble and solve the temperature equation; writes state.T in place."""
    assemble_energy_internal(
        state.u, state.T_old, state.p_padded.buffer,
        state.rho, state.k, state.cp, state.St, state.bU_lag,
        state.grid.dz, params.dt, rc_coeff,
        state.aT, state.bT, state.cT, state.dT,
    )
    assemble_energy_boundaries(
        params.T_inlet, params.T_outlet, inlet_bc, outlet_bc,
        state.aT, state.bT, state.cT, state.dT,
    )
    state.T[:] = linear_solve(state.aT, state.bT, state.cT, state.dT)
    return state.T
