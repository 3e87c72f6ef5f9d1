"""Momentum predictor assembly for the 1D porous duct.

Volume-integrated (per unit cross-section) form of

    d(rho u)/dt + d(rho u u)/dz = -dp/dz + d/dz(mu du/dz)
                                  - mu/K u - CF rho/sqrt(K) |u| u + S_u

with upwind convection through Rhie-Chow face velocities, central
diffusion with linearly interpolated viscosity and backward Euler in time.
"""

import numpy as np
from numba import njit, prange

from pisoflow.datastructures import FIXED
from .rhie_chow import rhie_chow_face_velocity, upwind


@njit(inline="always", cache=True, fastmath=True, nogil=True)
def porous_resistance(rho, mu, u, dz, K, CF):
    """Darcy plus Forchheimer drag coefficient of one cell (multiplies u)."""
    return mu / K * dz + CF * rho * dz / np.sqrt(K) * abs(u)


@njit(parallel=True, cache=True, fastmath=True, nogil=True)
def assemble_momentum_internal(
    u, u_old, p_pad, rho, mu, Su, bU_lag, dz, dt, K, CF, rc_coeff,
    aU, bU, cU, dU, nb_sum,
):
    """
    Fill rows 1..N-2 of the momentum system in place.

    Every cell reads the frozen previous-iteration fields and writes only its
    own row. ``nb_sum`` receives |aU| + |cU| for the SIMPLEC coefficient.
    """
    n = u.shape[0]

    for i in prange(1, n - 1):
        u_w = rhie_chow_face_velocity(u, p_pad, bU_lag, i - 1, dz, rc_coeff)
        u_e = rhie_chow_face_velocity(u, p_pad, bU_lag, i, dz, rc_coeff)

        F_w = upwind(rho, i - 1, u_w) * u_w
        F_e = upwind(rho, i, u_e) * u_e

        D_w = 0.5 * (mu[i - 1] + mu[i]) / dz
        D_e = 0.5 * (mu[i] + mu[i + 1]) / dz

        a_W = D_w + max(F_w, 0.0)
        a_E = D_e + max(-F_e, 0.0)
        a_t = rho[i] * dz / dt

        aU[i] = -a_W
        cU[i] = -a_E
        bU[i] = (
            a_t + D_w + D_e + max(F_e, 0.0) + max(-F_w, 0.0)
            + porous_resistance(rho[i], mu[i], u[i], dz, K, CF)
        )
        dU[i] = a_t * u_old[i] - 0.5 * (p_pad[i + 2] - p_pad[i]) + Su[i] * dz
        nb_sum[i] = a_W + a_E


def assemble_momentum_boundaries(
    u, rho, mu, dz, dt, K, CF, u_inlet, u_outlet, outlet_bc, aU, bU, cU, dU, bU_lag,
):
    """
    Overwrite rows 0 and N-1 with velocity boundary conditions.

    The lagged coefficient at the two boundary nodes gets the one-sided
    momentum diagonal instead of the Dirichlet row's unit value.
    """
    n = u.shape[0]

    # Inlet: fixed velocity
    aU[0] = 0.0
    bU[0] = 1.0
    cU[0] = 0.0
    dU[0] = u_inlet
    bU_lag[0] = (
        rho[0] * dz / dt + 2.0 * mu[0] / dz
        + porous_resistance(rho[0], mu[0], u[0], dz, K, CF)
    )

    # Outlet: fixed velocity or zero gradient
    cU[n - 1] = 0.0
    bU[n - 1] = 1.0
    if outlet_bc == FIXED:
        aU[n - 1] = 0.0
        dU[n - 1] = u_outlet
    else:
        aU[n - 1] = -1.0
        dU[n - 1] = 0.0
    bU_lag[n - 1] = (
        rho[n - 1] * dz / dt + 3.0 * mu[n - 1] / dz
        + porous_resistance(rho[n - 1], mu[n - 1], u[n - 1], dz, K, CF)
    )


def relax_momentum_equation(bU, dU, u, alpha):
    """
    Patankar-style under-relaxation of the interior rows.
    Returns a relaxed copy of the diagonal and right-hand side.
    """
    if alpha == 1.0:
        return bU, dU
    relaxed_b = bU.copy()
    relaxed_d = dU.copy()
    relaxed_b[1:-1] = bU[1:-1] / alpha
    relaxed_d[1:-1] = dU[1:-1] + (1.0 - alpha) / alpha * bU[1:-1] * u[1:-1]
    return relaxed_b, relaxed_d


def seed_lagged_coefficient(rho, mu, dz, dt, K):
    """Initial Rhie-Chow coefficient before any momentum matrix exists."""
    return rho * dz / dt + 2.0 * mu / dz + mu / K * dz
