"""Solar radiation pressure acceleration and cylindrical Earth shadow."""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import AU, P_SUN, R_EARTH


def accel_srp(
    r_object: ArrayLike,
    r_sun: ArrayLike,
    mass: ArrayLike,
    cr: float,
    area: float,
    p0: float = P_SUN,
) -> Array:
    """Solar radiation pressure on a cannonball spacecraft.

    The pressure is scaled with the inverse square of the actual
    Sun-spacecraft distance.

    Args:
        r_object: Spacecraft position. Units: *m*
        r_sun: Sun position. Units: *m*
        mass: Spacecraft mass. Units: *kg*
        cr: Reflectivity coefficient (1 for a perfect absorber).
        area: Sun-facing area. Units: *m^2*
        p0: Solar radiation pressure at 1 AU. Units: *N/m^2*

    Returns:
        jax.Array: Acceleration pointing away from the Sun. Units: *m/s^2*
    """
    r = jnp.asarray(r_object, dtype=get_dtype())
    s = jnp.asarray(r_sun, dtype=get_dtype())
    d = r - s
    d_norm = jnp.linalg.norm(d)
    return cr * (area / mass) * p0 * AU**2 * d / d_norm**3


def accel_srp_sphere(
    r_object: ArrayLike,
    r_sun: ArrayLike,
    mass: ArrayLike,
    reflection_coefficient: float,
    area: float,
    p0: float = P_SUN,
) -> Array:
    """Solar radiation pressure on a sphere with specular and diffuse reflection.

    No light is absorbed: a fraction ``k`` is reflected specularly and the
    rest diffusely, which gives the effective coefficient
    ``cr = 1 + 4 (1 - k) / 9``.

    Args:
        r_object: Spacecraft position. Units: *m*
        r_sun: Sun position. Units: *m*
        mass: Spacecraft mass. Units: *kg*
        reflection_coefficient: Specular reflection fraction ``k``.
        area: Cross-sectional area. Units: *m^2*
        p0: Solar radiation pressure at 1 AU. Units: *N/m^2*

    Returns:
        jax.Array: Acceleration pointing away from the Sun. Units: *m/s^2*
    """
    cr = 1.0 + 4.0 * (1.0 - reflection_coefficient) / 9.0
    return accel_srp(r_object, r_sun, mass, cr, area, p0)


def eclipse_cylindrical(
    r_object: ArrayLike, r_sun: ArrayLike, equatorial_radius: float = R_EARTH
) -> Array:
    """Illumination fraction for a cylindrical Earth shadow.

    Args:
        r_object: Spacecraft position. Units: *m*
        r_sun: Sun position. Units: *m*
        equatorial_radius: Radius of the shadow cylinder. Units: *m*

    Returns:
        jax.Array: 1.0 if illuminated, 0.0 in shadow.
    """
    r = jnp.asarray(r_object, dtype=get_dtype())
    s = jnp.asarray(r_sun, dtype=get_dtype())
    e_sun = s / jnp.linalg.norm(s)
    along = jnp.dot(r, e_sun)
    perp = jnp.linalg.norm(r - along * e_sun)
    in_shadow = (along < 0.0) & (perp < equatorial_radius)
    return jnp.where(in_shadow, 0.0, 1.0)
