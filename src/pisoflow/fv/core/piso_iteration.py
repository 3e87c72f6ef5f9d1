"""PISO/SIMPLEC iteration functions for one timestep.

This module provides the momentum predictor, the pressure corrector and the
outer/inner loop, separated from the time loop which is handled by the
solver class. Per timestep the stages run as

    AssembleMomentum -> SolveMomentum
      -> {AssembleContinuity -> SolveContinuity -> UpdateFields} x n_correctors
      -> CheckResidual -> AssembleMomentum | done

Re-linearising momentum is the expensive part, so PISO only repeats it when
the cheap pressure correctors leave a residual above tolerance.
"""

import logging

import numpy as np

from pisoflow.datastructures import (
    PRESSURE_OUTLET_BCS,
    VELOCITY_OUTLET_BCS,
    Converged,
    NotConverged,
)
from pisoflow.fv.assembly.momentum_eq_assembly import (
    assemble_momentum_boundaries,
    assemble_momentum_internal,
    relax_momentum_equation,
)
from pisoflow.fv.assembly.pressure_correction_eq_assembly import (
    assemble_pressure_correction_boundaries,
    assemble_pressure_correction_internal,
)
from pisoflow.fv.core.corrections import update_fields

log = logging.getLogger(__name__)


def rhie_chow_coefficient(params) -> float:
    """Amplification of the Rhie-Chow term, zero when disabled."""
    return float(params.rhie_chow_coeff) if params.rhie_chow else 0.0


def update_correction_coefficient(state, nb_sum, coupling, alpha_u=1.0):
    """D = dz/bU for PISO, dz/(bU/alpha_u - sum|a_nb|) for SIMPLEC.

    The SIMPLEC denominator uses the relaxed diagonal the momentum solve saw;
    the transient term keeps it positive.
    """
    dz = state.grid.dz
    if coupling == "SIMPLEC":
        state.d_corr[:] = dz / (state.bU_lag / alpha_u - nb_sum)
    else:
        state.d_corr[:] = dz / state.bU_lag


def momentum_predictor(state, params, linear_solve):
    """Assemble and solve the momentum equation; writes state.u in place.

    The unrelaxed interior diagonal is kept in ``state.bU_lag`` for the
    Rhie-Chow interpolation of the following correctors.
    """
    dz = state.grid.dz
    nb_sum = np.zeros(state.grid.N)

    assemble_momentum_internal(
        state.u, state.u_old, state.p_padded.buffer,
        state.rho, state.mu, state.Su, state.bU_lag,
        dz, params.dt, params.K, params.CF, rhie_chow_coefficient(params),
        state.aU, state.bU, state.cU, state.dU, nb_sum,
    )
    state.bU_lag[1:-1] = state.bU[1:-1]
    assemble_momentum_boundaries(
        state.u, state.rho, state.mu, dz, params.dt, params.K, params.CF,
        params.u_inlet, params.u_outlet, VELOCITY_OUTLET_BCS[params.outlet_velocity_bc],
        state.aU, state.bU, state.cU, state.dU, state.bU_lag,
    )
    update_correction_coefficient(state, nb_sum, params.coupling, params.alpha_u)

    b, d = relax_momentum_equation(state.bU, state.dU, state.u, params.alpha_u)
    state.u[:] = linear_solve(state.aU, b, state.cU, d)
    return state.u


def pressure_corrector(state, params, linear_solve):
    """One continuity sub-iteration. Returns the max velocity change."""
    assemble_pressure_correction_internal(
        state.u, state.p_padded.buffer, state.rho, state.Sm,
        state.bU_lag, state.d_corr, state.grid.dz, rhie_chow_coefficient(params),
        state.aP, state.bP, state.cP, state.dP,
    )
    assemble_pressure_correction_boundaries(
        state.p, params.p_outlet, PRESSURE_OUTLET_BCS[params.pressure_outlet_bc],
        state.aP, state.bP, state.cP, state.dP,
    )
    state.p_prime[:] = linear_solve(state.aP, state.bP, state.cP, state.dP)
    return update_fields(
        state, params.alpha_p, VELOCITY_OUTLET_BCS[params.outlet_velocity_bc]
    )


def piso_iterate(state, params, linear_solve):
    """Run the outer/inner loop of one timestep.

    The residual checked after each outer iteration is the larger of the
    first corrector's velocity change and the net velocity change over the
    whole outer iteration, so a pass that moves u through the momentum solve
    alone still counts as unconverged.

    Returns
    -------
    status : Converged | NotConverged
    residual_history : list of list of float
        FieldUpdater residuals, one inner list per outer iteration.
    """
    residual_history = []
    residual = float("inf")

    for outer in range(1, params.max_outer_iterations + 1):
        u_start = state.u.copy()

        momentum_predictor(state, params, linear_solve)

        inner = [
            pressure_corrector(state, params, linear_solve)
            for _ in range(params.n_correctors)
        ]
        residual_history.append(inner)

        net_change = float(np.max(np.abs(state.u[1:-1] - u_start[1:-1])))
        residual = max(inner[0], net_change)
        log.debug(f"Outer {outer}: correctors={inner}, residual={residual:.3e}")

        if residual < params.tolerance:
            return Converged(iterations=outer, residual=residual), residual_history

    return NotConverged(iterations=params.max_outer_iterations, residual=residual), residual_history
