"""Equinoctial orbital element conversions.

Converts between equinoctial elements ``[a, ex, ey, hx, hy, lm]``,
inertial Cartesian state vectors ``[x, y, z, vx, vy, vz]`` and
Keplerian elements ``[a, e, i, RAAN, omega, M]``.

Element ordering:

| Index | Element                                   | Units         |
|-------|-------------------------------------------|---------------|
| 0     | *a*: semi-major axis                      | m             |
| 1     | *ex*: e cos(omega + RAAN)                 | dimensionless |
| 2     | *ey*: e sin(omega + RAAN)                 | dimensionless |
| 3     | *hx*: tan(i/2) cos(RAAN)                  | dimensionless |
| 4     | *hy*: tan(i/2) sin(RAAN)                  | dimensionless |
| 5     | *lm*: mean longitude M + omega + RAAN     | rad           |

The set is non-singular for circular and equatorial orbits and only
breaks down for retrograde equatorial orbits (i = 180 deg).

The Cartesian conversions are closed form (apart from the Kepler solve in
the forward direction), so ``jax.jacfwd`` of
:func:`state_eci_to_equinoctial` gives the exact partial derivatives used
by the Gauss variational equations and by the tolerance estimator.

References:
    1. R. A. Broucke and P. J. Cefola, "On the equinoctial orbit
       elements", *Celestial Mechanics* 5, 1972.
    2. D. A. Danielson et al., *Semianalytic Satellite Theory*, Naval
       Postgraduate School, 1995, Sec. 2.1.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import DEG2RAD, GM_EARTH, RAD2DEG


# ──────────────────────────────────────────────
# Longitude conversions
# ──────────────────────────────────────────────


def longitude_eccentric_to_mean(le: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Convert eccentric longitude to mean longitude.

    Args:
        le: Eccentric longitude. Units: *rad*
        ex: First eccentricity vector component.
        ey: Second eccentricity vector component.

    Returns:
        Mean longitude. Units: *rad*
    """
    return le - ex * jnp.sin(le) + ey * jnp.cos(le)


def longitude_mean_to_eccentric(lm: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Convert mean longitude to eccentric longitude.

    Solves the equinoctial form of Kepler's equation
    ``lm = le - ex sin(le) + ey cos(le)`` with a fixed number of
    Newton-Raphson iterations so the result is traceable.  The iteration
    starts at ``lm`` for ``e < 0.8`` and at the apoapsis longitude of the
    current revolution otherwise, where Newton's method converges
    monotonically for any ``e < 1``.

    Args:
        lm: Mean longitude. Units: *rad*
        ex: First eccentricity vector component.
        ey: Second eccentricity vector component.

    Returns:
        Eccentric longitude. Units: *rad*
    """
    lm = jnp.asarray(lm, dtype=get_dtype())
    e2 = ex * ex + ey * ey
    # Longitude of periapsis; guarded so circular orbits stay differentiable
    pa = jnp.arctan2(ey, jnp.where(e2 > 0.0, ex, 1.0))
    m_anom = jnp.mod(lm - pa, 2.0 * jnp.pi)
    le0 = jnp.where(e2 < 0.64, lm, lm - m_anom + jnp.pi)

    def newton_step(_, le):
        f = le - ex * jnp.sin(le) + ey * jnp.cos(le) - lm
        fp = 1.0 - ex * jnp.cos(le) - ey * jnp.sin(le)
        return le - f / fp

    return jax.lax.fori_loop(0, 30, newton_step, le0)


def longitude_eccentric_to_true(le: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Convert eccentric longitude to true longitude.

    Args:
        le: Eccentric longitude. Units: *rad*
        ex: First eccentricity vector component.
        ey: Second eccentricity vector component.

    Returns:
        True longitude. Units: *rad*
    """
    epsilon = jnp.sqrt(1.0 - ex * ex - ey * ey)
    num = ex * jnp.sin(le) - ey * jnp.cos(le)
    den = epsilon + 1.0 - ex * jnp.cos(le) - ey * jnp.sin(le)
    return le + 2.0 * jnp.arctan(num / den)


def longitude_true_to_eccentric(lv: ArrayLike, ex: ArrayLike, ey: ArrayLike) -> Array:
    """Convert true longitude to eccentric longitude.

    Args:
        lv: True longitude. Units: *rad*
        ex: First eccentricity vector component.
        ey: Second eccentricity vector component.

    Returns:
        Eccentric longitude. Units: *rad*
    """
    epsilon = jnp.sqrt(1.0 - ex * ex - ey * ey)
    num = ey * jnp.cos(lv) - ex * jnp.sin(lv)
    den = epsilon + 1.0 + ex * jnp.cos(lv) + ey * jnp.sin(lv)
    return lv + 2.0 * jnp.arctan(num / den)


def _equinoctial_frame(hx: Array, hy: Array) -> tuple[Array, Array, Array]:
    """Unit vectors ``f``, ``g``, ``w`` of the equinoctial reference frame."""
    hx2 = hx * hx
    hy2 = hy * hy
    fact = 1.0 / (1.0 + hx2 + hy2)
    f = fact * jnp.array([1.0 + hx2 - hy2, 2.0 * hx * hy, -2.0 * hy])
    g = fact * jnp.array([2.0 * hx * hy, 1.0 - hx2 + hy2, 2.0 * hx])
    w = fact * jnp.array([2.0 * hy, -2.0 * hx, 1.0 - hx2 - hy2])
    return f, g, w


# ──────────────────────────────────────────────
# Cartesian conversions
# ──────────────────────────────────────────────


def state_equinoctial_to_eci(x_eq: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Convert equinoctial elements to an inertial Cartesian state.

    Args:
        x_eq: Equinoctial elements ``[a, ex, ey, hx, hy, lm]`` with mean
            longitude in *rad*.
        gm: Gravitational parameter. Units: *m^3/s^2*

    Returns:
        Inertial state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.

    Examples:
        ```python
        import jax.numpy as jnp
        from dsstjax.constants import R_EARTH
        from dsstjax.orbits import state_equinoctial_to_eci
        x = state_equinoctial_to_eci(jnp.array([R_EARTH + 500e3, 0.0, 0.0, 0.0, 0.0, 0.0]))
        ```
    """
    x_eq = jnp.asarray(x_eq, dtype=get_dtype())
    a, ex, ey, hx, hy, lm = (x_eq[k] for k in range(6))

    le = longitude_mean_to_eccentric(lm, ex, ey)
    f, g, _ = _equinoctial_frame(hx, hy)

    exey = ex * ey
    ex2 = ex * ex
    ey2 = ey * ey
    beta = 1.0 / (1.0 + jnp.sqrt(1.0 - ex2 - ey2))

    cle = jnp.cos(le)
    sle = jnp.sin(le)
    ex_c_ey_s = ex * cle + ey * sle

    # In-plane coordinates
    x1 = a * ((1.0 - beta * ey2) * cle + beta * exey * sle - ex)
    y1 = a * ((1.0 - beta * ex2) * sle + beta * exey * cle - ey)
    factor = jnp.sqrt(gm / a) / (1.0 - ex_c_ey_s)
    x1_dot = factor * (-sle + beta * ey * ex_c_ey_s)
    y1_dot = factor * (cle - beta * ex * ex_c_ey_s)

    r = x1 * f + y1 * g
    v = x1_dot * f + y1_dot * g
    return jnp.concatenate([r, v])


def state_eci_to_equinoctial(x_cart: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Convert an inertial Cartesian state to equinoctial elements.

    Args:
        x_cart: Inertial state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
        gm: Gravitational parameter. Units: *m^3/s^2*

    Returns:
        Equinoctial elements ``[a, ex, ey, hx, hy, lm]`` with mean
        longitude in *rad*, not wrapped.
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())
    r = x_cart[:3]
    v = x_cart[3:6]

    r_mag = jnp.linalg.norm(r)
    h = jnp.cross(r, v)
    w = h / jnp.linalg.norm(h)

    d = 1.0 / (1.0 + w[2])
    hx = -d * w[1]
    hy = d * w[0]

    # Vis-viva
    a = 1.0 / (2.0 / r_mag - jnp.dot(v, v) / gm)

    f, g, _ = _equinoctial_frame(hx, hy)

    e_vec = jnp.cross(v, h) / gm - r / r_mag
    ex = jnp.dot(e_vec, f)
    ey = jnp.dot(e_vec, g)

    lv = jnp.arctan2(jnp.dot(r, g), jnp.dot(r, f))
    le = longitude_true_to_eccentric(lv, ex, ey)
    lm = longitude_eccentric_to_mean(le, ex, ey)

    return jnp.array([a, ex, ey, hx, hy, lm])


def jacobian_equinoctial_wrt_cartesian(x_cart: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Partial derivatives of the equinoctial elements w.r.t. Cartesian state.

    Args:
        x_cart: Inertial state ``[x, y, z, vx, vy, vz]`` in *m* and *m/s*.
        gm: Gravitational parameter. Units: *m^3/s^2*

    Returns:
        6x6 matrix ``d[a, ex, ey, hx, hy, lm] / d[x, y, z, vx, vy, vz]``.
    """
    x_cart = jnp.asarray(x_cart, dtype=get_dtype())
    return jax.jacfwd(state_eci_to_equinoctial)(x_cart, gm)


# ──────────────────────────────────────────────
# Keplerian conversions
# ──────────────────────────────────────────────


def _angle_scale(use_degrees: bool, to_radians: bool) -> float:
    if not use_degrees:
        return 1.0
    return DEG2RAD if to_radians else RAD2DEG


def state_koe_to_equinoctial(x_oe: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert Keplerian elements to equinoctial elements.

    Args:
        x_oe: Keplerian elements ``[a, e, i, RAAN, omega, M]``.
        use_degrees: If ``True``, interpret angular elements as degrees.

    Returns:
        Equinoctial elements ``[a, ex, ey, hx, hy, lm]``.
    """
    x_oe = jnp.asarray(x_oe, dtype=get_dtype())
    a = x_oe[0]
    e = x_oe[1]
    scale = _angle_scale(use_degrees, to_radians=True)
    i, raan, omega, m_anom = (x_oe[k] * scale for k in range(2, 6))

    pa = omega + raan
    tan_half_i = jnp.tan(i / 2.0)
    return jnp.array([
        a,
        e * jnp.cos(pa),
        e * jnp.sin(pa),
        tan_half_i * jnp.cos(raan),
        tan_half_i * jnp.sin(raan),
        m_anom + pa,
    ])


def state_equinoctial_to_koe(x_eq: ArrayLike, use_degrees: bool = False) -> Array:
    """Convert equinoctial elements to Keplerian elements.

    Angles are normalized to ``[0, 2*pi)``.

    Args:
        x_eq: Equinoctial elements ``[a, ex, ey, hx, hy, lm]``.
        use_degrees: If ``True``, return angular elements in degrees.

    Returns:
        Keplerian elements ``[a, e, i, RAAN, omega, M]``.
    """
    x_eq = jnp.asarray(x_eq, dtype=get_dtype())
    a, ex, ey, hx, hy, lm = (x_eq[k] for k in range(6))

    two_pi = 2.0 * jnp.pi
    e = jnp.sqrt(ex * ex + ey * ey)
    i = 2.0 * jnp.arctan(jnp.sqrt(hx * hx + hy * hy))
    raan = jnp.arctan2(hy, hx)
    pa = jnp.arctan2(ey, ex)
    omega = pa - raan
    m_anom = lm - pa

    raan = jnp.mod(raan, two_pi)
    omega = jnp.mod(omega, two_pi)
    m_anom = jnp.mod(m_anom, two_pi)

    scale = _angle_scale(use_degrees, to_radians=False)
    return jnp.array([a, e, i * scale, raan * scale, omega * scale, m_anom * scale])
