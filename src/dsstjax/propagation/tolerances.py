"""Integrator tolerances derived from a position error budget.

Given a tolerated position error ``dP`` the matching velocity error is
taken at constant orbital energy (vis-viva):

.. math::

    dV = \\frac{\\mu \\, dP}{|v| \\, |r|^2}

The Cartesian budget is then mapped onto the integrated element set with
the absolute values of the element Jacobian, so that each element's
absolute tolerance corresponds to the same position accuracy.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
from jax import Array

from dsstjax.errors import ConfigurationError, ToleranceError
from dsstjax.orbits import ELEMENT_NAMES, EquinoctialOrbit, jacobian_equinoctial_wrt_cartesian

logger = logging.getLogger(__name__)

_ORBIT_TYPES = ("equinoctial", "cartesian")


def tolerances(
    dP: float, orbit: EquinoctialOrbit, orbit_type: str = "equinoctial"
) -> tuple[Array, Array]:
    """Estimate absolute and relative integration tolerances.

    Args:
        dP: Tolerated position error. Units: *m*
        orbit: Orbit around which the tolerances are linearized.
        orbit_type: ``"equinoctial"`` for ``[a, ex, ey, hx, hy, lm]``
            tolerances, ``"cartesian"`` for position/velocity tolerances.

    Returns:
        tuple: ``(abs_tol, rel_tol)``, two 6-element arrays.

    Raises:
        ToleranceError: If the element Jacobian is not finite.
        ConfigurationError: If ``dP`` is not positive or ``orbit_type`` is
            unknown.

    Examples:
        ```python
        from dsstjax.propagation import tolerances
        abs_tol, rel_tol = tolerances(1.0, orbit)
        ```
    """
    if not dP > 0.0:
        raise ConfigurationError("Position tolerance must be positive", value=dP)
    if orbit_type not in _ORBIT_TYPES:
        raise ConfigurationError(f"Unknown orbit type {orbit_type!r}; expected one of {_ORBIT_TYPES}")

    x = orbit.position_velocity()
    r2 = jnp.dot(x[:3], x[:3])
    v = jnp.linalg.norm(x[3:6])
    dV = orbit.mu * dP / (v * r2)

    rel_tol = jnp.full(6, dP / jnp.sqrt(r2))

    if orbit_type == "cartesian":
        abs_tol = jnp.array([dP, dP, dP, dV, dV, dV])
        return abs_tol, rel_tol

    jac = jacobian_equinoctial_wrt_cartesian(x, orbit.mu)
    finite = jnp.isfinite(jac)
    if not bool(jnp.all(finite)):
        row = int(jnp.argmin(jnp.all(finite, axis=1)))
        raise ToleranceError(
            "Element Jacobian is not finite", date=orbit.epoch, element=ELEMENT_NAMES[row]
        )

    abs_tol = dP * jnp.sum(jnp.abs(jac[:, :3]), axis=1) + dV * jnp.sum(jnp.abs(jac[:, 3:]), axis=1)
    logger.debug("Tolerances for dP=%g m: abs=%s rel=%g", dP, abs_tol, float(rel_tol[0]))
    return abs_tol, rel_tol
