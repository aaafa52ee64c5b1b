"""Keplerian orbital mechanics functions.

Period, mean motion and semi-major axis relations for two-body motion
about a central body with gravitational parameter ``gm``.

All functions use JAX operations and are compatible with ``jax.jit``,
``jax.vmap``, and ``jax.grad``. Inputs are coerced to the configured
float dtype (see :func:`dsstjax.config.set_dtype`).
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.constants import GM_EARTH


def mean_motion(a: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Compute the Keplerian mean motion.

    Args:
        a: Semi-major axis. Units: *m*
        gm: Gravitational parameter of the central body. Units: *m^3/s^2*

    Returns:
        Mean motion. Units: *rad/s*

    Examples:
        ```python
        from dsstjax.constants import R_EARTH
        from dsstjax.orbits import mean_motion
        n = mean_motion(R_EARTH + 500e3)
        ```
    """
    a = jnp.asarray(a, dtype=get_dtype())
    return jnp.sqrt(gm / a**3)


def orbital_period(a: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Compute the orbital period.

    Args:
        a: Semi-major axis. Units: *m*
        gm: Gravitational parameter of the central body. Units: *m^3/s^2*

    Returns:
        Orbital period. Units: *s*

    Examples:
        ```python
        from dsstjax.constants import R_EARTH
        from dsstjax.orbits import orbital_period
        T = orbital_period(R_EARTH + 500e3)
        ```
    """
    return 2.0 * jnp.pi / mean_motion(a, gm)


def semimajor_axis_from_orbital_period(period: ArrayLike, gm: float = GM_EARTH) -> Array:
    """Compute the semi-major axis matching an orbital period.

    Args:
        period: Orbital period. Units: *s*
        gm: Gravitational parameter of the central body. Units: *m^3/s^2*

    Returns:
        Semi-major axis. Units: *m*
    """
    period = jnp.asarray(period, dtype=get_dtype())
    return (period**2 * gm / (4.0 * jnp.pi**2)) ** (1.0 / 3.0)
