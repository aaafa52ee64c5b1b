"""Equinoctial orbit value type.

:class:`EquinoctialOrbit` bundles an equinoctial element set (always
stored with the *mean* longitude) with its epoch, reference frame name,
gravitational parameter and a tag saying whether the elements are mean
or osculating.  Orbits are immutable; the ``with_*`` helpers return new
instances.
"""

from __future__ import annotations

import dataclasses
import enum
import math

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import GM_EARTH
from dsstjax.epoch import Epoch
from dsstjax.errors import InvalidOrbitError
from dsstjax.orbits.equinoctial import (
    longitude_eccentric_to_mean,
    longitude_eccentric_to_true,
    longitude_mean_to_eccentric,
    longitude_true_to_eccentric,
    state_eci_to_equinoctial,
    state_equinoctial_to_eci,
    state_equinoctial_to_koe,
    state_koe_to_equinoctial,
)
from dsstjax.orbits.keplerian import mean_motion, orbital_period

ELEMENT_NAMES = ("a", "ex", "ey", "hx", "hy", "lm")
"""Names of the equinoctial elements in storage order."""


class OrbitType(enum.Enum):
    """Whether an element set is averaged or instantaneous."""

    MEAN = "mean"
    OSCULATING = "osculating"


class PositionAngle(enum.Enum):
    """Longitude convention used when building an orbit."""

    MEAN = "mean"
    ECCENTRIC = "eccentric"
    TRUE = "true"


@dataclasses.dataclass(frozen=True, eq=False)
class EquinoctialOrbit:
    """Equinoctial elements at an epoch.

    Attributes:
        elements: ``[a, ex, ey, hx, hy, lm]`` with mean longitude in *rad*.
        epoch: Date of the elements.
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        frame: Name of the inertial frame the elements are expressed in.
        orbit_type: Mean or osculating tag.

    Raises:
        InvalidOrbitError: If ``a <= 0``, the eccentricity is not below one
            or any element is not finite.
    """

    elements: Array
    epoch: Epoch
    mu: float = GM_EARTH
    frame: str = "EME2000"
    orbit_type: OrbitType = OrbitType.OSCULATING

    def __post_init__(self) -> None:
        elements = jnp.asarray(self.elements, dtype=get_dtype()).reshape(-1)
        if elements.shape != (6,):
            raise InvalidOrbitError(
                f"Expected 6 equinoctial elements, got shape {elements.shape}",
                date=self.epoch,
            )
        object.__setattr__(self, "elements", elements)

        values = [float(v) for v in elements]
        for name, value in zip(ELEMENT_NAMES, values):
            if not math.isfinite(value):
                raise InvalidOrbitError(
                    "Orbital element is not finite", date=self.epoch, element=name, value=value
                )
        if values[0] <= 0.0:
            raise InvalidOrbitError(
                "Semi-major axis must be positive", date=self.epoch, element="a", value=values[0]
            )
        ecc = math.hypot(values[1], values[2])
        if ecc >= 1.0:
            raise InvalidOrbitError(
                "Eccentricity must be below 1", date=self.epoch, element="e", value=ecc
            )
        if self.mu <= 0.0:
            raise InvalidOrbitError(
                "Gravitational parameter must be positive", date=self.epoch, value=self.mu
            )

    # Alternative constructors

    @classmethod
    def from_elements(
        cls,
        a: float,
        ex: float,
        ey: float,
        hx: float,
        hy: float,
        longitude: float,
        epoch: Epoch,
        angle_type: PositionAngle = PositionAngle.MEAN,
        mu: float = GM_EARTH,
        frame: str = "EME2000",
        orbit_type: OrbitType = OrbitType.OSCULATING,
    ) -> EquinoctialOrbit:
        """Build an orbit from individual elements.

        Args:
            a: Semi-major axis. Units: *m*
            ex: First eccentricity vector component.
            ey: Second eccentricity vector component.
            hx: First inclination vector component.
            hy: Second inclination vector component.
            longitude: Longitude argument in the ``angle_type`` convention.
                Units: *rad*
            epoch: Date of the elements.
            angle_type: Convention of ``longitude``.
            mu: Gravitational parameter. Units: *m^3/s^2*
            frame: Inertial frame name.
            orbit_type: Mean or osculating tag.

        Returns:
            EquinoctialOrbit: The orbit with the longitude converted to mean.

        Examples:
            ```python
            from dsstjax import Epoch
            from dsstjax.orbits import EquinoctialOrbit, PositionAngle
            orbit = EquinoctialOrbit.from_elements(
                7069219.98, -4.59e-4, 1.31e-4, -1.003, 0.571, 2.620,
                Epoch(2003, 9, 16), angle_type=PositionAngle.TRUE,
            )
            ```
        """
        if math.hypot(ex, ey) >= 1.0:
            raise InvalidOrbitError(
                "Eccentricity must be below 1", date=epoch, element="e", value=math.hypot(ex, ey)
            )
        lon = jnp.asarray(longitude, dtype=get_dtype())
        if angle_type is PositionAngle.TRUE:
            lon = longitude_eccentric_to_mean(longitude_true_to_eccentric(lon, ex, ey), ex, ey)
        elif angle_type is PositionAngle.ECCENTRIC:
            lon = longitude_eccentric_to_mean(lon, ex, ey)
        elements = jnp.array([a, ex, ey, hx, hy, lon], dtype=get_dtype())
        return cls(elements, epoch, mu=mu, frame=frame, orbit_type=orbit_type)

    @classmethod
    def from_state(
        cls,
        x_eci: ArrayLike,
        epoch: Epoch,
        mu: float = GM_EARTH,
        frame: str = "EME2000",
        orbit_type: OrbitType = OrbitType.OSCULATING,
    ) -> EquinoctialOrbit:
        """Build an orbit from an inertial position/velocity state.

        Args:
            x_eci: ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
            epoch: Date of the state.
            mu: Gravitational parameter. Units: *m^3/s^2*
            frame: Inertial frame name.
            orbit_type: Mean or osculating tag.
        """
        return cls(state_eci_to_equinoctial(x_eci, mu), epoch, mu=mu, frame=frame,
                   orbit_type=orbit_type)

    @classmethod
    def from_keplerian(
        cls,
        x_oe: ArrayLike,
        epoch: Epoch,
        use_degrees: bool = False,
        mu: float = GM_EARTH,
        frame: str = "EME2000",
        orbit_type: OrbitType = OrbitType.OSCULATING,
    ) -> EquinoctialOrbit:
        """Build an orbit from Keplerian elements ``[a, e, i, RAAN, omega, M]``."""
        return cls(state_koe_to_equinoctial(x_oe, use_degrees), epoch, mu=mu, frame=frame,
                   orbit_type=orbit_type)

    # Element accessors

    @property
    def a(self) -> Array:
        return self.elements[0]

    @property
    def ex(self) -> Array:
        return self.elements[1]

    @property
    def ey(self) -> Array:
        return self.elements[2]

    @property
    def hx(self) -> Array:
        return self.elements[3]

    @property
    def hy(self) -> Array:
        return self.elements[4]

    @property
    def lm(self) -> Array:
        """Mean longitude. Units: *rad*"""
        return self.elements[5]

    @property
    def le(self) -> Array:
        """Eccentric longitude. Units: *rad*"""
        return longitude_mean_to_eccentric(self.lm, self.ex, self.ey)

    @property
    def lv(self) -> Array:
        """True longitude. Units: *rad*"""
        return longitude_eccentric_to_true(self.le, self.ex, self.ey)

    @property
    def e(self) -> Array:
        return jnp.sqrt(self.ex**2 + self.ey**2)

    @property
    def i(self) -> Array:
        """Inclination. Units: *rad*"""
        return 2.0 * jnp.arctan(jnp.sqrt(self.hx**2 + self.hy**2))

    @property
    def mean_motion(self) -> Array:
        return mean_motion(self.a, self.mu)

    @property
    def period(self) -> float:
        """Keplerian period. Units: *s*"""
        return float(orbital_period(self.a, self.mu))

    @property
    def date(self) -> Epoch:
        return self.epoch

    def to_array(self) -> Array:
        """Return a copy of ``[a, ex, ey, hx, hy, lm]``."""
        return jnp.array(self.elements)

    def to_keplerian(self, use_degrees: bool = False) -> Array:
        """Return Keplerian elements ``[a, e, i, RAAN, omega, M]``."""
        return state_equinoctial_to_koe(self.elements, use_degrees)

    def position_velocity(self, date: Epoch | None = None, frame: str | None = None) -> Array:
        """Inertial state of the orbit, optionally shifted to ``date``.

        A date different from the orbit epoch advances the mean longitude
        along the Keplerian mean motion, so an orbit can act as its own
        position/velocity provider.

        Args:
            date: Date of the requested state. Defaults to the orbit epoch.
            frame: Requested frame; must match the orbit frame if given.

        Returns:
            jax.Array: ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
        """
        if frame is not None and frame != self.frame:
            raise InvalidOrbitError(
                f"Orbit is expressed in {self.frame}, cannot provide {frame}", date=date
            )
        elements = self.elements
        if date is not None:
            dt = date - self.epoch
            if dt != 0.0:
                elements = elements.at[5].add(self.mean_motion * dt)
        return state_equinoctial_to_eci(elements, self.mu)

    # Derived instances

    def with_elements(
        self,
        elements: ArrayLike,
        epoch: Epoch | None = None,
        orbit_type: OrbitType | None = None,
    ) -> EquinoctialOrbit:
        """Return a new orbit sharing frame and ``mu`` with this one."""
        return EquinoctialOrbit(
            elements,
            self.epoch if epoch is None else epoch,
            mu=self.mu,
            frame=self.frame,
            orbit_type=self.orbit_type if orbit_type is None else orbit_type,
        )

    def retagged(self, orbit_type: OrbitType) -> EquinoctialOrbit:
        """Return the same elements under a different mean/osculating tag."""
        return dataclasses.replace(self, orbit_type=orbit_type)

    def __repr__(self) -> str:
        values = ", ".join(f"{n}={float(v):.10g}" for n, v in zip(ELEMENT_NAMES, self.elements))
        return f"EquinoctialOrbit({values}, epoch={self.epoch}, {self.orbit_type.value})"
