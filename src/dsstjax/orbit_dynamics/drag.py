"""Atmospheric density and drag acceleration.

The drag model assumes an atmosphere co-rotating with the Earth about the
inertial Z axis, a spherical Earth for altitude and a cannonball
spacecraft (constant area and drag coefficient).

References:
    1. D. A. Vallado, *Fundamentals of Astrodynamics and Applications*,
       4th ed., 2013, Sec. 8.6.2, Table 8-4.
"""

from __future__ import annotations

import abc

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import OMEGA_EARTH, R_EARTH
from dsstjax.errors import ConfigurationError

# Vallado Table 8-4: base altitude [km], nominal density [kg/m^3],
# scale height [km]
_VALLADO_BASE_ALTITUDE = (
    0.0, 25.0, 30.0, 40.0, 50.0, 60.0, 70.0, 80.0, 90.0, 100.0, 110.0, 120.0,
    130.0, 140.0, 150.0, 180.0, 200.0, 250.0, 300.0, 350.0, 400.0, 450.0,
    500.0, 600.0, 700.0, 800.0, 900.0, 1000.0,
)
_VALLADO_DENSITY = (
    1.225, 3.899e-2, 1.774e-2, 3.972e-3, 1.057e-3, 3.206e-4, 8.770e-5,
    1.905e-5, 3.396e-6, 5.297e-7, 9.661e-8, 2.438e-8, 8.484e-9, 3.845e-9,
    2.070e-9, 5.464e-10, 2.789e-10, 7.248e-11, 2.418e-11, 9.518e-12,
    3.725e-12, 1.585e-12, 6.967e-13, 1.454e-13, 3.614e-14, 1.170e-14,
    5.245e-15, 3.019e-15,
)
_VALLADO_SCALE_HEIGHT = (
    7.249, 6.349, 6.682, 7.554, 8.382, 7.714, 6.549, 5.799, 5.382, 5.877,
    7.263, 9.473, 12.636, 16.149, 22.523, 29.740, 37.105, 45.546, 53.628,
    53.298, 58.515, 60.828, 63.822, 71.835, 88.667, 124.64, 181.05, 268.00,
)


class Atmosphere(abc.ABC):
    """Atmospheric density model.

    Implementations must be traceable: ``density`` is evaluated inside
    compiled force kernels.
    """

    @abc.abstractmethod
    def density(self, t: ArrayLike, r_eci: ArrayLike) -> Array:
        """Density at inertial position ``r_eci`` and time ``t``.

        Args:
            t: Seconds since J2000.0.
            r_eci: Inertial position. Units: *m*

        Returns:
            jax.Array: Density. Units: *kg/m^3*
        """


class ExponentialAtmosphere(Atmosphere):
    """Piecewise exponential atmosphere, static in time.

    Defaults to the Vallado reference table covering 0-1000 km.  Custom
    tables must be sorted by base altitude.

    Args:
        base_altitudes: Layer base altitudes. Units: *km*
        densities: Density at each base altitude. Units: *kg/m^3*
        scale_heights: Scale height of each layer. Units: *km*
        equatorial_radius: Radius of the spherical Earth. Units: *m*

    Examples:
        ```python
        import jax.numpy as jnp
        from dsstjax.constants import R_EARTH
        from dsstjax.orbit_dynamics import ExponentialAtmosphere
        atm = ExponentialAtmosphere()
        rho = atm.density(0.0, jnp.array([R_EARTH + 400e3, 0.0, 0.0]))
        ```
    """

    def __init__(
        self,
        base_altitudes=_VALLADO_BASE_ALTITUDE,
        densities=_VALLADO_DENSITY,
        scale_heights=_VALLADO_SCALE_HEIGHT,
        equatorial_radius: float = R_EARTH,
    ) -> None:
        if not (len(base_altitudes) == len(densities) == len(scale_heights) > 0):
            raise ConfigurationError("Atmosphere table columns must be non-empty and equal length")
        if any(b <= a for a, b in zip(base_altitudes, base_altitudes[1:])):
            raise ConfigurationError("Atmosphere base altitudes must be strictly increasing")
        if any(h <= 0.0 for h in scale_heights) or any(d <= 0.0 for d in densities):
            raise ConfigurationError("Densities and scale heights must be positive")

        dtype = get_dtype()
        self._h0 = jnp.asarray(base_altitudes, dtype=dtype) * 1.0e3
        self._rho0 = jnp.asarray(densities, dtype=dtype)
        self._scale = jnp.asarray(scale_heights, dtype=dtype) * 1.0e3
        self.equatorial_radius = equatorial_radius

    @classmethod
    def single_layer(
        cls, rho0: float, h0: float, scale_height: float, equatorial_radius: float = R_EARTH
    ) -> ExponentialAtmosphere:
        """One exponential layer ``rho0 * exp(-(h - h0) / H)``, altitudes in *km*."""
        return cls((h0,), (rho0,), (scale_height,), equatorial_radius)

    def density(self, t: ArrayLike, r_eci: ArrayLike) -> Array:
        r = jnp.asarray(r_eci, dtype=get_dtype())
        altitude = jnp.linalg.norm(r) - self.equatorial_radius
        idx = jnp.clip(jnp.searchsorted(self._h0, altitude, side="right") - 1, 0, self._h0.shape[0] - 1)
        return self._rho0[idx] * jnp.exp(-(altitude - self._h0[idx]) / self._scale[idx])


def relative_velocity(x_eci: ArrayLike, omega: float = OMEGA_EARTH) -> Array:
    """Velocity relative to an atmosphere rotating about the inertial Z axis."""
    x = jnp.asarray(x_eci, dtype=get_dtype())
    omega_vec = jnp.array([0.0, 0.0, omega], dtype=x.dtype)
    return x[3:6] - jnp.cross(omega_vec, x[:3])


def accel_drag(
    x_eci: ArrayLike,
    density: ArrayLike,
    mass: ArrayLike,
    area: float,
    cd: float,
    omega: float = OMEGA_EARTH,
) -> Array:
    """Atmospheric drag acceleration in the inertial frame.

    Args:
        x_eci: Inertial state ``[x, y, z, vx, vy, vz]``. Units: *m*, *m/s*
        density: Atmospheric density. Units: *kg/m^3*
        mass: Spacecraft mass. Units: *kg*
        area: Wind-facing cross-sectional area. Units: *m^2*
        cd: Drag coefficient.
        omega: Rotation rate of the atmosphere. Units: *rad/s*

    Returns:
        jax.Array: Drag acceleration ``-0.5 * Cd * A / m * rho * |v_r| * v_r``.
        Units: *m/s^2*
    """
    v_rel = relative_velocity(x_eci, omega)
    return -0.5 * cd * (area / mass) * density * jnp.linalg.norm(v_rel) * v_rel
