"""Runge-Kutta-Fehlberg 4(5) adaptive integrator (RKF45).

Six stages; the 4th-order solution is propagated and the 5th-order one
is used for error estimation.

- Nodes (c): [0, 1/4, 3/8, 12/13, 1, 1/2]
- 4th-order weights: [25/216, 0, 1408/2565, 2197/4104, -1/5, 0]
- 5th-order weights: [16/135, 0, 6656/12825, 28561/56430, -9/50, 2/55]
"""

from __future__ import annotations

from collections.abc import Callable

from jax import Array
from jax.typing import ArrayLike

from dsstjax.integrators._adaptive import embedded_step
from dsstjax.integrators._types import AdaptiveConfig, StepResult

_C = (0.0, 1.0 / 4.0, 3.0 / 8.0, 12.0 / 13.0, 1.0, 1.0 / 2.0)

_A = (
    (1.0 / 4.0,),
    (3.0 / 32.0, 9.0 / 32.0),
    (1932.0 / 2197.0, -7200.0 / 2197.0, 7296.0 / 2197.0),
    (439.0 / 216.0, -8.0, 3680.0 / 513.0, -845.0 / 4104.0),
    (-8.0 / 27.0, 2.0, -3544.0 / 2565.0, 1859.0 / 4104.0, -11.0 / 40.0),
)

_B4 = (25.0 / 216.0, 0.0, 1408.0 / 2565.0, 2197.0 / 4104.0, -1.0 / 5.0, 0.0)
_B5 = (16.0 / 135.0, 0.0, 6656.0 / 12825.0, 28561.0 / 56430.0, -9.0 / 50.0, 2.0 / 55.0)


def rkf45_step(
    dynamics: Callable[[float, Array], Array],
    t: float,
    state: ArrayLike,
    dt: float,
    config: AdaptiveConfig | None = None,
) -> StepResult:
    """Perform a single adaptive RKF45 integration step.

    Rejected attempts are retried with a smaller step until the error
    meets the tolerance, the minimum step is reached or the attempt limit
    is exhausted.

    Args:
        dynamics: ODE right-hand side function ``f(t, x) -> dx/dt``.
        t: Current time.
        state: Current state vector.
        dt: Requested timestep. May be negative.
        config: Step-size control settings. Defaults to
            :class:`AdaptiveConfig`.

    Returns:
        StepResult: The accepted step.
    """
    if config is None:
        config = AdaptiveConfig()
    return embedded_step(_C, _A, _B4, _B5, 4.0, dynamics, t, state, dt, config)
