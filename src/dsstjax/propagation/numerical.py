"""Cartesian reference propagator.

:class:`NumericalPropagator` integrates inertial position, velocity and
mass under point-mass gravity plus any number of
:class:`InstantaneousForce` contributions.  The right-hand side is
compiled once per propagator with ``jax.jit``.

It serves as the high-fidelity reference used to average an osculating
orbit into mean elements, and is usable on its own.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Iterable, Sequence

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.attitude import AttitudeProvider, InertialAttitude
from dsstjax.config import get_dtype
from dsstjax.epoch import Epoch
from dsstjax.errors import MassNonPositiveError
from dsstjax.integrators import Integrator
from dsstjax.orbit_dynamics import accel_central_body
from dsstjax.orbits import EquinoctialOrbit, OrbitType
from dsstjax.states import SpacecraftState

logger = logging.getLogger(__name__)


class InstantaneousForce(abc.ABC):
    """A perturbing force evaluated at an instant.

    Both methods must be traceable with JAX: they are evaluated inside the
    compiled right-hand side of :class:`NumericalPropagator`.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def acceleration(self, t: ArrayLike, x_eci: Array, mass: ArrayLike) -> Array:
        """Perturbing acceleration.

        Args:
            t: Seconds since J2000.0.
            x_eci: Inertial ``[x, y, z, vx, vy, vz]``.
            mass: Spacecraft mass. Units: *kg*

        Returns:
            jax.Array: 3-element acceleration. Units: *m/s^2*
        """

    def mass_rate(self, t: ArrayLike, x_eci: Array, mass: ArrayLike) -> Array:
        """Mass flow rate. Units: *kg/s*"""
        return jnp.zeros((), dtype=get_dtype())


class NumericalPropagator:
    """Propagate a Cartesian state with an :class:`Integrator`.

    The state vector is ``[x, y, z, vx, vy, vz, mass]``.  Each call to
    :meth:`propagate` continues from the previously reached date.

    Args:
        integrator: Integration driver.
        initial_state: Starting spacecraft state.
        forces: Perturbations added to point-mass gravity.
        attitude_provider: Attitude of returned states; inertial by default.
    """

    def __init__(
        self,
        integrator: Integrator,
        initial_state: SpacecraftState,
        forces: Iterable[InstantaneousForce] = (),
        attitude_provider: AttitudeProvider | None = None,
    ) -> None:
        self._integrator = integrator
        self._initial_state = initial_state
        self._forces = tuple(forces)
        self._attitude_provider = attitude_provider or InertialAttitude()
        self._mu = initial_state.mu
        self._t0_j2000 = initial_state.date.seconds_since_j2000()

        self._t = 0.0
        self._y = jnp.concatenate([
            initial_state.position_velocity(),
            jnp.array([initial_state.mass], dtype=get_dtype()),
        ])
        self._dynamics = jax.jit(self._derivative)

    @property
    def forces(self) -> tuple[InstantaneousForce, ...]:
        return self._forces

    @property
    def current_date(self) -> Epoch:
        return self._initial_state.date + self._t

    def _derivative(self, t: ArrayLike, y: Array) -> Array:
        t_j2000 = self._t0_j2000 + t
        x = y[:6]
        mass = y[6]
        acc = accel_central_body(x[:3], self._mu)
        mdot = jnp.zeros((), dtype=y.dtype)
        for force in self._forces:
            acc = acc + force.acceleration(t_j2000, x, mass)
            mdot = mdot + force.mass_rate(t_j2000, x, mass)
        return jnp.concatenate([x[3:6], acc, mdot[None]])

    def _advance(self, offset: float) -> Array:
        self._t, self._y = self._integrator.integrate(self._dynamics, self._t, self._y, offset)
        return self._y

    def propagate(self, target: Epoch) -> SpacecraftState:
        """Propagate to ``target`` and return the osculating state there.

        Raises:
            MassNonPositiveError: If the mass at ``target`` is not positive.
        """
        y = self._advance(target - self._initial_state.date)
        mass = float(y[6])
        if mass <= 0.0:
            raise MassNonPositiveError("Spacecraft mass became non-positive", date=target, value=mass)
        orbit = EquinoctialOrbit.from_state(
            y[:6], target, mu=self._mu, frame=self._initial_state.frame,
            orbit_type=OrbitType.OSCULATING,
        )
        attitude = self._attitude_provider.attitude(orbit, target, orbit.frame)
        return SpacecraftState(orbit, attitude, mass)

    def sample(self, offsets: Sequence[float]) -> Array:
        """Inertial states at successive offsets from the initial date.

        Args:
            offsets: Monotonic offsets in seconds from the initial date.

        Returns:
            jax.Array: ``(len(offsets), 6)`` array of ``[x, y, z, vx, vy, vz]``.
        """
        rows = [self._advance(float(dt))[:6] for dt in offsets]
        logger.debug("Sampled %d reference states over %.1f s", len(rows), self._t)
        return jnp.stack(rows)
