import numpy as np
from numba import njit, prange


@njit(inline="always", cache=True, fastmath=True, nogil=True)
def rhie_chow_face_velocity(u, p_pad, bU_lag, j, dz, rc_coeff):
    """
    Rhie-Chow velocity at the face between nodes j and j+1.

    The correction is D_f times the difference between the averaged cell
    pressure gradients and the compact face gradient, which expands to a
    4-point stencil on the padded pressure (p_pad[k + 1] == p[k]).

    The two faces next to the end nodes carry the boundary velocity itself,
    so the prescribed inlet (or fixed outlet) value sets the mass flow
    through them.
    """
    n = u.shape[0]
    if j == 0:
        return u[0]
    if j == n - 2:
        return u[n - 1]

    u_bar = 0.5 * (u[j] + u[j + 1])
    if rc_coeff == 0.0:
        return u_bar

    D_f = 0.5 * (dz / bU_lag[j] + dz / bU_lag[j + 1])

    # p_{j-1}, p_j, p_{j+1}, p_{j+2}
    p_W = p_pad[j]
    p_P = p_pad[j + 1]
    p_E = p_pad[j + 2]
    p_EE = p_pad[j + 3]

    correction = D_f * (-p_W + 3.0 * p_P - 3.0 * p_E + p_EE) / (4.0 * dz)
    return u_bar + rc_coeff * correction


@njit(inline="always", cache=True, fastmath=True, nogil=True)
def upwind(phi, j, u_f):
    """Value of phi on the upstream side of face j."""
    if u_f >= 0.0:
        return phi[j]
    return phi[j + 1]


@njit(parallel=True, cache=True, fastmath=True, nogil=True)
def rhie_chow_velocity(u, p_pad, bU_lag, dz, rc_coeff, out=None):
    """
    Face velocities for all N-1 internal faces.
    """
    n_faces = u.shape[0] - 1
    if out is None:
        u_faces = np.zeros(n_faces, dtype=np.float64)
    else:
        u_faces = out

    for j in prange(n_faces):
        u_faces[j] = rhie_chow_face_velocity(u, p_pad, bU_lag, j, dz, rc_coeff)

    return u_faces


@njit(parallel=True, cache=True, fastmath=True, nogil=True)
def mdot_calculation(rho, u_faces, out=None):
    """
    Calculate upwind mass flux through faces: mdot = rho_upwind * u_f
    """
    n_faces = u_faces.shape[0]
    if out is None:
        mdot = np.zeros(n_faces, dtype=np.float64)
    else:
        mdot = out

    for j in prange(n_faces):
        u_f = u_faces[j]
        mdot[j] = upwind(rho, j, u_f) * u_f

    return mdot
