"""Low-precision analytical ephemerides for the Sun and Moon.

Positions in the EME2000 inertial frame from the truncated series of
Montenbruck & Gill, accurate to roughly 0.1 deg, which is ample for
third-body and radiation-pressure perturbations.

Both functions take the time as seconds since J2000.0 so they can be
traced inside compiled force kernels (see :meth:`Epoch.seconds_since_j2000`).

References:
    1. O. Montenbruck and E. Gill, *Satellite Orbits: Models, Methods
       and Applications*, 2012, Sec. 3.3.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import AS2RAD, DEG2RAD, SECONDS_PER_DAY

# Obliquity of the J2000 ecliptic [rad]
_EPSILON = 23.43929111 * DEG2RAD

_SECONDS_PER_CENTURY = 36525.0 * SECONDS_PER_DAY

# Lunar series.  Each row is (amplitude, multipliers of [l, l', D, F]) where
# l, l' are the Moon and Sun mean anomalies, D the mean elongation and F
# the mean argument of latitude.

# Ecliptic longitude perturbation [arcsec], sine terms
_MOON_LONGITUDE = (
    (22640.0, (1, 0, 0, 0)),
    (-4586.0, (1, 0, -2, 0)),
    (2370.0, (0, 0, 2, 0)),
    (769.0, (2, 0, 0, 0)),
    (-668.0, (0, 1, 0, 0)),
    (-412.0, (0, 0, 0, 2)),
    (-212.0, (2, 0, -2, 0)),
    (-206.0, (1, 1, -2, 0)),
    (192.0, (1, 0, 2, 0)),
    (-165.0, (0, 1, -2, 0)),
    (-125.0, (0, 0, 1, 0)),
    (-110.0, (1, 1, 0, 0)),
    (148.0, (1, -1, 0, 0)),
    (-55.0, (0, 0, -2, 2)),
)

# Ecliptic latitude correction N [arcsec], sine terms
_MOON_LATITUDE = (
    (-526.0, (0, 0, -2, 1)),
    (44.0, (1, 0, -2, 1)),
    (-31.0, (-1, 0, -2, 1)),
    (-23.0, (0, 1, -2, 1)),
    (11.0, (0, -1, -2, 1)),
    (-25.0, (-2, 0, 0, 1)),
    (21.0, (-1, 0, 0, 1)),
)

# Distance [m], cosine terms around the 385000 km mean
_MOON_DISTANCE = (
    (-20905e3, (1, 0, 0, 0)),
    (-3699e3, (-1, 0, 2, 0)),
    (-2956e3, (0, 0, 2, 0)),
    (-570e3, (2, 0, 0, 0)),
    (246e3, (2, 0, -2, 0)),
    (-205e3, (0, 1, -2, 0)),
    (-171e3, (1, 0, 2, 0)),
    (-152e3, (1, 1, -2, 0)),
)


def _frac(x):
    return x - jnp.floor(x)


def _series(table, args: Array, fn) -> Array:
    amplitudes = jnp.array([row[0] for row in table], dtype=args.dtype)
    multipliers = jnp.array([row[1] for row in table], dtype=args.dtype)
    return jnp.dot(amplitudes, fn(multipliers @ args))


def _ecliptic_to_equatorial(r_ecl: Array) -> Array:
    ce = jnp.cos(_EPSILON)
    se = jnp.sin(_EPSILON)
    return jnp.array([
        r_ecl[0],
        ce * r_ecl[1] - se * r_ecl[2],
        se * r_ecl[1] + ce * r_ecl[2],
    ])


def sun_position(t: ArrayLike) -> Array:
    """Position of the Sun in the EME2000 frame.

    Args:
        t: Seconds since J2000.0.

    Returns:
        3-element Sun position vector. Units: *m*

    Examples:
        ```python
        from dsstjax import Epoch
        from dsstjax.orbit_dynamics import sun_position
        r_sun = sun_position(Epoch(2024, 2, 25).seconds_since_j2000())
        ```
    """
    T = jnp.asarray(t, dtype=get_dtype()) / _SECONDS_PER_CENTURY
    pi2 = 2.0 * jnp.pi

    M = pi2 * _frac(0.9931267 + 99.9973583 * T)
    L = pi2 * _frac(0.7859444 + M / pi2 + (6892.0 * jnp.sin(M) + 72.0 * jnp.sin(2.0 * M)) / 1296.0e3)
    r = 149.619e9 - 2.499e9 * jnp.cos(M) - 0.021e9 * jnp.cos(2.0 * M)

    return _ecliptic_to_equatorial(jnp.array([r * jnp.cos(L), r * jnp.sin(L), 0.0 * r]))


def moon_position(t: ArrayLike) -> Array:
    """Position of the Moon in the EME2000 frame.

    Args:
        t: Seconds since J2000.0.

    Returns:
        3-element Moon position vector. Units: *m*
    """
    T = jnp.asarray(t, dtype=get_dtype()) / _SECONDS_PER_CENTURY
    pi2 = 2.0 * jnp.pi

    L0 = _frac(0.606433 + 1336.851344 * T)
    args = pi2 * _frac(jnp.array([
        0.374897 + 1325.552410 * T,
        0.993133 + 99.997361 * T,
        0.827361 + 1236.853086 * T,
        0.259086 + 1342.227825 * T,
    ]))
    lp = args[1]
    F = args[3]

    dL = _series(_MOON_LONGITUDE, args, jnp.sin)
    L = pi2 * _frac(L0 + dL / 1296.0e3)

    S = F + (dL + 412.0 * jnp.sin(2.0 * F) + 541.0 * jnp.sin(lp)) * AS2RAD
    B = (18520.0 * jnp.sin(S) + _series(_MOON_LATITUDE, args, jnp.sin)) * AS2RAD

    r = 385000e3 + _series(_MOON_DISTANCE, args, jnp.cos)

    return _ecliptic_to_equatorial(jnp.array([
        r * jnp.cos(L) * jnp.cos(B),
        r * jnp.sin(L) * jnp.cos(B),
        r * jnp.sin(B),
    ]))
