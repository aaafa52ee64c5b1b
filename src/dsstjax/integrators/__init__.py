"""Numerical ODE integrators.

Step functions share a common interface::

    result = step_fn(dynamics, t, state, dt)

where ``dynamics(t, x) -> dx`` defines the ODE right-hand side and the
result is a :class:`StepResult` named tuple.

- :func:`rk4_step` -- Classic 4th-order Runge-Kutta (fixed step)
- :func:`rkf45_step` -- Runge-Kutta-Fehlberg 4(5) (adaptive step)
- :func:`dp54_step` -- Dormand-Prince 5(4) (adaptive step)

The :class:`Integrator` drivers integrate across an interval and are what
the propagators consume.
"""

from dsstjax.integrators._types import AdaptiveConfig, StepResult
from dsstjax.integrators.dp54 import dp54_step
from dsstjax.integrators.integrator import (
    DormandPrince54Integrator,
    Integrator,
    RungeKutta4Integrator,
    RungeKuttaFehlberg45Integrator,
)
from dsstjax.integrators.rk4 import rk4_step
from dsstjax.integrators.rkf45 import rkf45_step

__all__ = [
    "AdaptiveConfig",
    "StepResult",
    "Integrator",
    "RungeKutta4Integrator",
    "RungeKuttaFehlberg45Integrator",
    "DormandPrince54Integrator",
    "rk4_step",
    "rkf45_step",
    "dp54_step",
]
