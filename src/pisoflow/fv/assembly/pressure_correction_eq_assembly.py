import numpy as np
from numba import njit, prange

from pisoflow.datastructures import FIXED_PRESSURE
from .rhie_chow import rhie_chow_face_velocity, upwind


@njit(parallel=True, cache=True, fastmath=True, nogil=True)
def assemble_pressure_correction_internal(
    u, p_pad, rho, Sm, bU_lag, d_corr, dz, rc_coeff, aP, bP, cP, dP,
):
    """
    Assemble rows 1..N-2 of the pressure-correction equation in place.

    Face conductance E_f = rho_f * D_f / dz with linearly averaged density
    and correction coefficient. The right-hand side is the local mass source
    minus the net outflow of the predicted face fluxes.
    """
    n = u.shape[0]

    for i in prange(1, n - 1):
        u_w = rhie_chow_face_velocity(u, p_pad, bU_lag, i - 1, dz, rc_coeff)
        u_e = rhie_chow_face_velocity(u, p_pad, bU_lag, i, dz, rc_coeff)

        F_w = upwind(rho, i - 1, u_w) * u_w
        F_e = upwind(rho, i, u_e) * u_e

        E_w = 0.5 * (rho[i - 1] + rho[i]) * 0.5 * (d_corr[i - 1] + d_corr[i]) / dz
        E_e = 0.5 * (rho[i] + rho[i + 1]) * 0.5 * (d_corr[i] + d_corr[i + 1]) / dz

        aP[i] = -E_w
        cP[i] = -E_e
        bP[i] = E_w + E_e
        dP[i] = Sm[i] * dz - (F_e - F_w)


def assemble_pressure_correction_boundaries(p, p_outlet, outlet_bc, aP, bP, cP, dP):
    """
    Boundary rows: zero-gradient correction at the inlet, and at the outlet
    either a zero correction or a row that restores the fixed pressure.
    """
    n = p.shape[0]

    aP[0] = 0.0
    bP[0] = 1.0
    cP[0] = -1.0
    dP[0] = 0.0

    aP[n - 1] = 0.0
    bP[n - 1] = 1.0
    cP[n - 1] = 0.0
    if outlet_bc == FIXED_PRESSURE:
        dP[n - 1] = p_outlet - p[n - 1]
    else:
        dP[n - 1] = 0.0


@njit(parallel=True, cache=True, fastmath=True, nogil=True)
def continuity_imbalance(u, p_pad, rho, Sm, bU_lag, dz, rc_coeff):
    """
    Net mass outflow minus source, per cell (zero at the boundary nodes).
    """
    n = u.shape[0]
    imbalance = np.zeros(n, dtype=np.float64)

    for i in prange(1, n - 1):
        u_w = rhie_chow_face_velocity(u, p_pad, bU_lag, i - 1, dz, rc_coeff)
        u_e = rhie_chow_face_velocity(u, p_pad, bU_lag, i, dz, rc_coeff)
        F_w = upwind(rho, i - 1, u_w) * u_w
        F_e = upwind(rho, i, u_e) * u_e
        imbalance[i] = F_e - F_w - Sm[i] * dz

    return imbalance
