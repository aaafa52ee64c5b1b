"""Classic 4th-order Runge-Kutta integrator (RK4).

Four-stage explicit method with the Butcher tableau

.. math::

    \\begin{array}{c|cccc}
    0   &     &     &     &   \\\\
    1/2 & 1/2 &     &     &   \\\\
    1/2 &  0  & 1/2 &     &   \\\\
    1   &  0  &  0  &  1  &   \\\\
    \\hline
        & 1/6 & 1/3 & 1/3 & 1/6
    \\end{array}

Fixed step, no error estimate. For purely constant derivatives (as in the
mean-element equations of an unperturbed orbit) the step is exact.
"""

from __future__ import annotations

from collections.abc import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.integrators._types import StepResult


def rk4_step(
    dynamics: Callable[[float, Array], Array],
    t: float,
    state: ArrayLike,
    dt: float,
) -> StepResult:
    """Perform a single RK4 integration step.

    Args:
        dynamics: ODE right-hand side function ``f(t, x) -> dx/dt``.
        t: Current time.
        state: Current state vector.
        dt: Timestep to take. May be negative for backward integration.

    Returns:
        StepResult: ``dt_used`` and ``dt_next`` both equal ``dt`` and
        ``error_estimate`` is 0.0.

    Examples:
        ```python
        import jax.numpy as jnp
        from dsstjax.integrators import rk4_step
        def harmonic(t, x):
            return jnp.array([x[1], -x[0]])
        result = rk4_step(harmonic, 0.0, jnp.array([1.0, 0.0]), 0.01)
        result.state  # ~[cos(0.01), -sin(0.01)]
        ```
    """
    state = jnp.asarray(state, dtype=get_dtype())
    h = float(dt)
    half = 0.5 * h

    k1 = dynamics(t, state)
    k2 = dynamics(t + half, state + half * k1)
    k3 = dynamics(t + half, state + half * k2)
    k4 = dynamics(t + h, state + h * k3)

    state_new = state + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
    return StepResult(state=state_new, dt_used=h, error_estimate=0.0, dt_next=h)
