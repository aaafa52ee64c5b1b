"""Gravitational accelerations.

Point-mass attraction of the central body, the J2 zonal harmonic and the
direct-minus-indirect third-body perturbation.  All inputs are inertial
position vectors in *m*; outputs are accelerations in *m/s^2*.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import GM_EARTH, J2_EARTH, R_EARTH


def accel_central_body(r_object: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Point-mass attraction of the central body.

    Args:
        r_object: Position of the object. Units: *m*
        gm: Gravitational parameter. Units: *m^3/s^2*

    Returns:
        jax.Array: Acceleration ``-gm * r / |r|^3``. Units: *m/s^2*

    Examples:
        ```python
        import jax.numpy as jnp
        from dsstjax.constants import R_EARTH
        from dsstjax.orbit_dynamics import accel_central_body
        a = accel_central_body(jnp.array([R_EARTH, 0.0, 0.0]))
        ```
    """
    r = jnp.asarray(r_object, dtype=get_dtype())
    r_norm = jnp.linalg.norm(r)
    return -gm * r / r_norm**3


def accel_j2(
    r_object: ArrayLike,
    gm: float = GM_EARTH,
    j2: float = J2_EARTH,
    equatorial_radius: float = R_EARTH,
) -> Array:
    """Acceleration due to the J2 zonal harmonic of the central body.

    The body-fixed and inertial Z axes are assumed to coincide, which is
    the usual approximation for zonal-only perturbations.

    Args:
        r_object: Position of the object. Units: *m*
        gm: Gravitational parameter. Units: *m^3/s^2*
        j2: Unnormalized J2 coefficient.
        equatorial_radius: Reference radius of the harmonic. Units: *m*

    Returns:
        jax.Array: J2 acceleration. Units: *m/s^2*
    """
    r = jnp.asarray(r_object, dtype=get_dtype())
    r2 = jnp.dot(r, r)
    r_norm = jnp.sqrt(r2)
    z2_r2 = r[2] ** 2 / r2
    factor = -1.5 * j2 * gm * equatorial_radius**2 / r_norm**5
    return factor * jnp.array([
        r[0] * (1.0 - 5.0 * z2_r2),
        r[1] * (1.0 - 5.0 * z2_r2),
        r[2] * (3.0 - 5.0 * z2_r2),
    ])


def accel_third_body(r_object: ArrayLike, r_body: ArrayLike, gm: float) -> Array:
    """Perturbing acceleration of a third body on a geocentric object.

    Direct attraction on the object minus the attraction on the central
    body (the indirect term).

    Args:
        r_object: Position of the object. Units: *m*
        r_body: Position of the perturbing body. Units: *m*
        gm: Gravitational parameter of the perturbing body. Units: *m^3/s^2*

    Returns:
        jax.Array: Perturbing acceleration. Units: *m/s^2*
    """
    r = jnp.asarray(r_object, dtype=get_dtype())
    s = jnp.asarray(r_body, dtype=get_dtype())
    d = s - r
    return gm * (d / jnp.linalg.norm(d) ** 3 - s / jnp.linalg.norm(s) ** 3)
