"""Dormand-Prince 5(4) adaptive integrator (DP54).

Seven stages; the 5th-order solution is propagated and the embedded
4th-order one is used for error estimation.

- Nodes (c): [0, 1/5, 3/10, 4/5, 8/9, 1, 1]
- 5th-order weights: [35/384, 0, 500/1113, 125/192, -2187/6784, 11/84, 0]
- 4th-order weights: [5179/57600, 0, 7571/16695, 393/640, -92097/339200,
  187/2100, 1/40]

The first-same-as-last stage is not cached between steps.
"""

from __future__ import annotations

from collections.abc import Callable

from jax import Array
from jax.typing import ArrayLike

from dsstjax.integrators._adaptive import embedded_step
from dsstjax.integrators._types import AdaptiveConfig, StepResult

_C = (0.0, 1.0 / 5.0, 3.0 / 10.0, 4.0 / 5.0, 8.0 / 9.0, 1.0, 1.0)

_A = (
    (1.0 / 5.0,),
    (3.0 / 40.0, 9.0 / 40.0),
    (44.0 / 45.0, -56.0 / 15.0, 32.0 / 9.0),
    (19372.0 / 6561.0, -25360.0 / 2187.0, 64448.0 / 6561.0, -212.0 / 729.0),
    (9017.0 / 3168.0, -355.0 / 33.0, 46732.0 / 5247.0, 49.0 / 176.0, -5103.0 / 18656.0),
    (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0),
)

_B5 = (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0, 0.0)
_B4 = (
    5179.0 / 57600.0,
    0.0,
    7571.0 / 16695.0,
    393.0 / 640.0,
    -92097.0 / 339200.0,
    187.0 / 2100.0,
    1.0 / 40.0,
)


def dp54_step(
    dynamics: Callable[[float, Array], Array],
    t: float,
    state: ArrayLike,
    dt: float,
    config: AdaptiveConfig | None = None,
) -> StepResult:
    """Perform a single adaptive DP54 integration step.

    Args:
        dynamics: ODE right-hand side function ``f(t, x) -> dx/dt``.
        t: Current time.
        state: Current state vector.
        dt: Requested timestep. May be negative.
        config: Step-size control settings. Defaults to
            :class:`AdaptiveConfig`.

    Returns:
        StepResult: The accepted step.

    Examples:
        ```python
        import jax.numpy as jnp
        from dsstjax.integrators import dp54_step
        def harmonic(t, x):
            return jnp.array([x[1], -x[0]])
        result = dp54_step(harmonic, 0.0, jnp.array([1.0, 0.0]), 0.1)
        ```
    """
    if config is None:
        config = AdaptiveConfig()
    return embedded_step(_C, _A, _B5, _B4, 4.0, dynamics, t, state, dt, config)
