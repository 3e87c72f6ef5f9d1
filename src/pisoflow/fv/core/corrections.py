import numpy as np
from numba import njit, prange

from pisoflow.datastructures import ZERO_GRADIENT


@njit(parallel=True, cache=True, nogil=True)
def velocity_correction(p_prime, d_corr, dz, u_prime=None):
    """
    Velocity correction at interior nodes: u' = -D * dp'/dz (central).
    Boundary entries stay zero.
    """
    n = p_prime.shape[0]
    if u_prime is None:
        u_prime = np.zeros(n)
    else:
        u_prime[0] = 0.0
        u_prime[n - 1] = 0.0

    for i in prange(1, n - 1):
        u_prime[i] = -d_corr[i] * (p_prime[i + 1] - p_prime[i - 1]) / (2.0 * dz)

    return u_prime


def update_fields(state, alpha_p, outlet_velocity_bc):
    """
    Apply a solved pressure correction to p and u.

    Pressure takes ``alpha_p * p'`` everywhere and the padded buffer is
    refreshed. Interior velocities are corrected with the pressure-correction
    gradient; a zero-gradient outlet is re-imposed afterwards.

    Returns
    -------
    max_err : float
        Largest absolute velocity change over the interior nodes.
    """
    state.p += alpha_p * state.p_prime
    state.p_padded.refresh(state.p)

    u_prime = velocity_correction(state.p_prime, state.d_corr, state.grid.dz)
    state.u[1:-1] += u_prime[1:-1]

    if outlet_velocity_bc == ZERO_GRADIENT:
        state.u[-1] = state.u[-2]

    return float(np.max(np.abs(u_prime[1:-1])))
