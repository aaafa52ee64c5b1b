"""Osculating-to-mean element conversion.

An osculating orbit is averaged by propagating it with a Cartesian
reference propagator carrying the same perturbations and sampling the
osculating equinoctial elements over a few revolutions.  Each element is
fitted with a secular trend plus harmonics of the orbital frequency,

.. math::

    E(t) = c_0 + c_1 t + \\sum_{m=1}^{M} (s_m \\sin m \\nu t + k_m \\cos m \\nu t)

and the intercept ``c0`` is the mean element set at the initial epoch.
The frequency ``nu`` is the fitted mean longitude rate: a first pass uses
the Keplerian mean motion of the osculating orbit, a second pass the rate
found by the first.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import jax
import jax.numpy as jnp
from jax import Array

from dsstjax.errors import ConfigurationError
from dsstjax.integrators import DormandPrince54Integrator
from dsstjax.orbits import EquinoctialOrbit, OrbitType, state_eci_to_equinoctial
from dsstjax.propagation import NumericalPropagator, tolerances
from dsstjax.states import SpacecraftState

from .force_model import DSSTForceModel

logger = logging.getLogger(__name__)

# Reference integrator settings [s]
_MIN_STEP = 1.0
_MAX_STEP = 200.0
_INITIAL_STEP = 100.0

# Position accuracy of the reference propagation [m]
_POSITION_TOLERANCE = 1.0


def fit_secular_and_harmonic(
    times: Array, samples: Array, frequency: float, n_harmonics: int
) -> Array:
    """Least-squares fit of a linear trend plus harmonics to each column.

    Args:
        times: Sample times, shape ``(n,)``. Units: *s*
        samples: Sampled values, shape ``(n, k)``.
        frequency: Fundamental angular frequency. Units: *rad/s*
        n_harmonics: Number of harmonics of ``frequency``.

    Returns:
        jax.Array: Coefficients ``(2 + 2 * n_harmonics, k)`` ordered as
        intercept, slope, then cosine/sine pairs.
    """
    columns = [jnp.ones_like(times), times]
    for m in range(1, n_harmonics + 1):
        phase = m * frequency * times
        columns.extend([jnp.cos(phase), jnp.sin(phase)])
    design = jnp.stack(columns, axis=1)
    coefficients, *_ = jnp.linalg.lstsq(design, samples)
    return coefficients


class OsculatingToMeanConverter:
    """Convert an osculating state into mean equinoctial elements.

    Args:
        state: Osculating spacecraft state.
        satellite_revolution: Number of orbital periods to average over.
        force_models: Models whose instantaneous counterparts perturb the
            reference propagation.
        samples_per_revolution: Element samples per orbital period.
        n_harmonics: Harmonics of the orbital frequency removed by the fit.
    """

    def __init__(
        self,
        state: SpacecraftState,
        satellite_revolution: int,
        force_models: Sequence[DSSTForceModel],
        samples_per_revolution: int = 36,
        n_harmonics: int = 4,
    ) -> None:
        if satellite_revolution < 1:
            raise ConfigurationError(
                "satellite_revolution must be at least 1", value=satellite_revolution
            )
        if n_harmonics < 0:
            raise ConfigurationError("n_harmonics must be non-negative", value=n_harmonics)
        if satellite_revolution * samples_per_revolution < 2 * (2 + 2 * n_harmonics):
            raise ConfigurationError(
                "Too few samples for the requested number of harmonics",
                value=satellite_revolution * samples_per_revolution,
            )
        self.state = state
        self.satellite_revolution = int(satellite_revolution)
        self.force_models = tuple(force_models)
        self.samples_per_revolution = int(samples_per_revolution)
        self.n_harmonics = int(n_harmonics)

    def convert(self) -> EquinoctialOrbit:
        """Return the mean orbit at the state date.

        Raises:
            UnsupportedForceModelError: If a model cannot be mirrored; raised
                before any integration step.
        """
        orbit = self.state.orbit
        if not self.force_models:
            return orbit.retagged(OrbitType.MEAN)

        forces = [model.numerical_force() for model in self.force_models]

        abs_tol, rel_tol = tolerances(_POSITION_TOLERANCE, orbit, orbit_type="cartesian")
        integrator = DormandPrince54Integrator(
            _MIN_STEP, _MAX_STEP, abs_tol, rel_tol, initial_step=_INITIAL_STEP
        )
        reference = NumericalPropagator(integrator, self.state, forces)

        span = self.satellite_revolution * orbit.period
        n_samples = self.satellite_revolution * self.samples_per_revolution
        times = span * jnp.arange(n_samples + 1) / n_samples
        logger.info(
            "Averaging osculating orbit at %s over %d revolution(s) (%d samples, %d force model(s))",
            orbit.epoch, self.satellite_revolution, n_samples + 1, len(forces),
        )

        states = reference.sample([float(t) for t in times])
        elements = jax.vmap(lambda x: state_eci_to_equinoctial(x, orbit.mu))(states)
        elements = elements.at[:, 5].set(jnp.unwrap(elements[:, 5]))

        coefficients = fit_secular_and_harmonic(
            times, elements, float(orbit.mean_motion), self.n_harmonics
        )
        coefficients = fit_secular_and_harmonic(
            times, elements, float(coefficients[1, 5]), self.n_harmonics
        )

        mean_orbit = orbit.with_elements(coefficients[0], orbit_type=OrbitType.MEAN)
        logger.info("Mean orbit: %r", mean_orbit)
        return mean_orbit
