"""Spacecraft state value type."""

from __future__ import annotations

import dataclasses

import jax.numpy as jnp
from jax import Array

from dsstjax.attitude import Attitude
from dsstjax.constants import DEFAULT_MASS
from dsstjax.epoch import Epoch
from dsstjax.orbits import EquinoctialOrbit


@dataclasses.dataclass(frozen=True, eq=False)
class SpacecraftState:
    """Orbit, attitude and mass of a spacecraft at one date.

    Instances are immutable; every propagation update builds a new one.

    Attributes:
        orbit: Orbital state, mean or osculating.
        attitude: Body orientation at the orbit date.
        mass: Spacecraft mass. Units: *kg*
    """

    orbit: EquinoctialOrbit
    attitude: Attitude
    mass: float = DEFAULT_MASS

    @property
    def date(self) -> Epoch:
        return self.orbit.epoch

    @property
    def frame(self) -> str:
        return self.orbit.frame

    @property
    def mu(self) -> float:
        return self.orbit.mu

    def position_velocity(self) -> Array:
        """Inertial ``[x, y, z, vx, vy, vz]`` of the orbit."""
        return self.orbit.position_velocity()

    def to_flat_array(self) -> Array:
        """``[a, ex, ey, hx, hy, lm, mass]`` of the stored orbit."""
        return jnp.concatenate([self.orbit.to_array(), jnp.array([self.mass])])

    def with_mass(self, mass: float) -> SpacecraftState:
        return dataclasses.replace(self, mass=mass)
