"""Force models averaged by Gaussian quadrature over the mean longitude.

Any perturbation that can be written as an instantaneous acceleration
``a(t, r, v, m)`` is turned into a DSST force model here:

- The Gauss variational equations give the element rates produced by the
  acceleration, ``dE/dt = (dE/dv) . a``, where ``dE/dv`` is the velocity
  block of the equinoctial-from-Cartesian Jacobian (``jax.jacfwd``).
- The rates are sampled on a uniform grid of ``N`` mean longitudes with the
  other mean elements frozen (one ``jax.vmap``-ed, ``jax.jit``-compiled
  kernel call).
- The sample mean is the mean element rate.
- The residual is expanded in a Fourier series of the mean longitude.
  Integrating it over one revolution gives the short-period terms

  .. math::

      \\eta(\\lambda) = \\mathrm{Re} \\sum_{m=1}^{M}
          \\frac{A_m}{i m \\bar n} e^{i m \\lambda}

  with ``A_m = 2 F_m / N`` the complex amplitude of the ``m``-th rfft bin.
  The mean longitude also picks up the Keplerian coupling through the
  semi-major axis correction, ``(3 / (2 a n)) Re sum A_m^a e^{i m lambda} / m^2``.

The mean rates are re-evaluated at every derivative call; the
short-period coefficients are frozen at :meth:`initialize` and reused until
the next reinitialization boundary.  :meth:`GaussianContribution.short_periodic_contribution`
recomputes them from its arguments and is differentiable in all six mean
elements.

References:
    1. D. A. Danielson et al., *Semianalytic Satellite Theory*, Naval
       Postgraduate School, 1995, Sec. 3.2 (Gaussian quadrature averaging).
"""

from __future__ import annotations

import abc
import dataclasses

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import GM_EARTH
from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError
from dsstjax.orbits import state_eci_to_equinoctial, state_equinoctial_to_eci
from dsstjax.propagation import InstantaneousForce
from dsstjax.states import SpacecraftState

from .force_model import DSSTForceModel, ShortPeriodTerm


@dataclasses.dataclass(frozen=True)
class GaussianQuadrature:
    """Sampling of the mean longitude used for averaging.

    Args:
        n_points: Number of uniformly spaced mean longitude samples.
        n_harmonics: Number of Fourier harmonics kept in the short-period
            terms; must be below ``n_points // 2``.
    """

    n_points: int = 64
    n_harmonics: int = 12

    def __post_init__(self) -> None:
        if self.n_points < 8:
            raise ConfigurationError(
                "At least 8 quadrature points are required", element="n_points", value=self.n_points
            )
        if not 1 <= self.n_harmonics < self.n_points // 2:
            raise ConfigurationError(
                "n_harmonics must lie in [1, n_points // 2)",
                element="n_harmonics",
                value=self.n_harmonics,
            )

    def longitudes(self) -> Array:
        n = self.n_points
        return 2.0 * jnp.pi * jnp.arange(n, dtype=get_dtype()) / n


def _fourier_sum(coefficients: Array, lm: ArrayLike) -> Array:
    harmonics = jnp.arange(1, coefficients.shape[1] + 1, dtype=get_dtype())
    return jnp.real(coefficients @ jnp.exp(1j * harmonics * lm))


class FourierShortPeriodTerm(ShortPeriodTerm):
    """Short-period correction as a truncated Fourier series in ``lm``.

    Args:
        coefficients: Complex ``(6, M)`` array; row ``k`` holds the
            coefficients of element ``k`` for harmonics ``1..M``.
        source: Name of the model that produced the term.
        reference_date: Mean state date the coefficients were computed at.
    """

    def __init__(self, coefficients: Array, source: str, reference_date: Epoch) -> None:
        self.coefficients = coefficients
        self.source = source
        self.reference_date = reference_date

    def value(self, date: Epoch, mean_elements: ArrayLike) -> Array:
        return _fourier_sum(self.coefficients, jnp.asarray(mean_elements, dtype=get_dtype())[5])

    def __repr__(self) -> str:
        return (f"FourierShortPeriodTerm(source={self.source}, "
                f"harmonics={self.coefficients.shape[1]}, reference_date={self.reference_date})")


class _GaussianInstantaneousForce(InstantaneousForce):
    """Mirrors a Gaussian model's acceleration into a Cartesian propagator."""

    def __init__(self, model: GaussianContribution) -> None:
        self._model = model

    @property
    def name(self) -> str:
        return self._model.name

    def acceleration(self, t, x_eci, mass):
        return self._model.acceleration(t, x_eci, mass)


class GaussianContribution(DSSTForceModel):
    """Base class for force models averaged by quadrature.

    Subclasses only implement :meth:`acceleration`.

    Args:
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        quadrature: Mean longitude sampling settings.
    """

    def __init__(self, mu: float = GM_EARTH, quadrature: GaussianQuadrature | None = None) -> None:
        self.mu = mu
        self.quadrature = quadrature if quadrature is not None else GaussianQuadrature()
        self._terms: list[ShortPeriodTerm] = []
        self._kernel = None

    @abc.abstractmethod
    def acceleration(self, t: ArrayLike, x_eci: Array, mass: ArrayLike) -> Array:
        """Perturbing acceleration in the inertial frame (traceable).

        Args:
            t: Seconds since J2000.0.
            x_eci: Inertial ``[x, y, z, vx, vy, vz]``.
            mass: Spacecraft mass. Units: *kg*

        Returns:
            jax.Array: 3-element acceleration. Units: *m/s^2*
        """

    def gauss_rates(self, t: ArrayLike, elements: Array, mass: ArrayLike) -> Array:
        """Instantaneous equinoctial element rates due to the perturbation."""
        x = state_equinoctial_to_eci(elements, self.mu)
        jac = jax.jacfwd(state_eci_to_equinoctial)(x, self.mu)
        return jac[:, 3:] @ self.acceleration(t, x, mass)

    def _sample(self, t: ArrayLike, mean_elements: ArrayLike, mass: ArrayLike) -> Array:
        if self._kernel is None:
            self._kernel = jax.jit(jax.vmap(self.gauss_rates, in_axes=(None, 0, None)))
        grid = self.quadrature.longitudes()
        elements = jnp.asarray(mean_elements, dtype=get_dtype())
        elements = jnp.tile(elements, (grid.shape[0], 1)).at[:, 5].set(grid)
        return self._kernel(t, elements, mass)

    def sampled_rates(self, mean_state: SpacecraftState) -> Array:
        """Element rates on the quadrature grid, shape ``(n_points, 6)``."""
        return self._sample(mean_state.date.seconds_since_j2000(), mean_state.orbit.to_array(), mean_state.mass)

    def mean_element_rate(self, mean_state: SpacecraftState) -> Array:
        return jnp.mean(self.sampled_rates(mean_state), axis=0)

    def short_period_coefficients(self, t: ArrayLike, mean_elements: ArrayLike, mass: ArrayLike) -> Array:
        """Fourier coefficients of the short-period terms.

        Pure in its arguments, so it can be differentiated with respect to
        the mean elements.

        Args:
            t: Seconds since J2000.0.
            mean_elements: Mean equinoctial elements ``[a, ex, ey, hx, hy, lm]``.
            mass: Spacecraft mass. Units: *kg*

        Returns:
            jax.Array: Complex ``(6, M)`` coefficients for harmonics ``1..M``.
        """
        rates = self._sample(t, mean_elements, mass)
        n_points = self.quadrature.n_points
        n_harmonics = self.quadrature.n_harmonics

        amplitudes = 2.0 * jnp.fft.rfft(rates, axis=0)[1:n_harmonics + 1] / n_points
        harmonics = jnp.arange(1, n_harmonics + 1, dtype=get_dtype())

        a = jnp.asarray(mean_elements, dtype=get_dtype())[0]
        n = jnp.sqrt(self.mu / a**3)
        coefficients = amplitudes / (1j * harmonics[:, None] * n)
        coefficients = coefficients.at[:, 5].add(1.5 / (a * n) * amplitudes[:, 0] / harmonics**2)
        return coefficients.T

    def short_periodic_contribution(self, t: ArrayLike, mean_elements: ArrayLike, mass: ArrayLike) -> Array:
        """Short-period variations ``eta(t, mean_elements)`` without freezing coefficients."""
        coefficients = self.short_period_coefficients(t, mean_elements, mass)
        return _fourier_sum(coefficients, jnp.asarray(mean_elements, dtype=get_dtype())[5])

    def initialize(self, mean_state: SpacecraftState) -> None:
        coefficients = self.short_period_coefficients(
            mean_state.date.seconds_since_j2000(), mean_state.orbit.to_array(), mean_state.mass
        )
        self._terms = [FourierShortPeriodTerm(coefficients, self.name, mean_state.date)]

    def short_period_terms(self) -> list[ShortPeriodTerm]:
        return list(self._terms)

    def numerical_force(self) -> InstantaneousForce:
        return _GaussianInstantaneousForce(self)
