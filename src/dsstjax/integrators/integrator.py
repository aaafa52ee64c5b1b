"""Integrator drivers.

Step functions advance a state by one step; an :class:`Integrator` drives a
step function across a whole interval:

- :class:`RungeKutta4Integrator`: fixed step.
- :class:`RungeKuttaFehlberg45Integrator`, :class:`DormandPrince54Integrator`:
  adaptive step with (optionally per-component) tolerances.

``integrate`` accepts an optional ``step_limiter(t, y)`` hook called before
every step.  It may run side effects at the current time and returns the
largest step magnitude allowed from ``t``, so that steps land exactly on
caller-defined boundaries.
"""

from __future__ import annotations

import math
from collections.abc import Callable

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.errors import ConfigurationError
from dsstjax.integrators._types import AdaptiveConfig, StepResult, Tolerance
from dsstjax.integrators.dp54 import dp54_step
from dsstjax.integrators.rk4 import rk4_step
from dsstjax.integrators.rkf45 import rkf45_step

Dynamics = Callable[[float, Array], Array]
StepLimiter = Callable[[float, Array], "float | None"]

# Intervals shorter than this are considered already reached [s]
_TIME_EPS = 1e-9


class Integrator:
    """Base class driving a step function from ``t0`` to ``t1``."""

    def step(self, dynamics: Dynamics, t: float, state: Array, dt: float) -> StepResult:
        raise NotImplementedError

    def initial_step(self, t0: float, t1: float) -> float:
        """Magnitude of the first attempted step."""
        raise NotImplementedError

    def integrate(
        self,
        dynamics: Dynamics,
        t0: float,
        y0: ArrayLike,
        t1: float,
        step_limiter: StepLimiter | None = None,
    ) -> tuple[float, Array]:
        """Integrate ``dy/dt = dynamics(t, y)`` from ``t0`` to ``t1``.

        Args:
            dynamics: ODE right-hand side.
            t0: Initial time.
            y0: Initial state.
            t1: Final time; may be before ``t0``.
            step_limiter: Optional hook ``(t, y) -> max |dt|`` evaluated
                before each step.

        Returns:
            tuple: ``(t1, y(t1))``.
        """
        t = float(t0)
        t1 = float(t1)
        y = jnp.asarray(y0, dtype=get_dtype())
        direction = 1.0 if t1 >= t else -1.0
        h = self.initial_step(t, t1)

        while direction * (t1 - t) > _TIME_EPS:
            h_max = abs(t1 - t)
            if step_limiter is not None:
                limit = step_limiter(t, y)
                if limit is not None and limit > _TIME_EPS:
                    h_max = min(h_max, limit)
            h_try = direction * min(abs(h), h_max)

            result = self.step(dynamics, t, y, h_try)
            t = t + result.dt_used
            y = result.state
            h = result.dt_next

        return t1, y


class RungeKutta4Integrator(Integrator):
    """Fixed-step classical Runge-Kutta driver.

    Args:
        step_size: Step magnitude. Units: *s*
    """

    def __init__(self, step_size: float) -> None:
        if not step_size > 0.0:
            raise ConfigurationError("Step size must be positive", value=step_size)
        self.step_size = float(step_size)

    def initial_step(self, t0: float, t1: float) -> float:
        return self.step_size

    def step(self, dynamics, t, state, dt):
        result = rk4_step(dynamics, t, state, dt)
        return result._replace(dt_next=math.copysign(self.step_size, dt))


class _EmbeddedIntegrator(Integrator):
    """Adaptive driver shared by the embedded Runge-Kutta pairs."""

    _step_fn: Callable[..., StepResult]

    def __init__(
        self,
        min_step: float,
        max_step: float,
        abs_tol: Tolerance,
        rel_tol: Tolerance,
        initial_step: float | None = None,
        safety_factor: float = 0.9,
        max_step_attempts: int = 10,
    ) -> None:
        if not 0.0 < min_step <= max_step:
            raise ConfigurationError(
                f"Step bounds must satisfy 0 < min_step <= max_step, got {min_step}, {max_step}"
            )
        abs_arr = jnp.asarray(abs_tol, dtype=get_dtype())
        rel_arr = jnp.asarray(rel_tol, dtype=get_dtype())
        if bool(jnp.any(abs_arr < 0.0)) or bool(jnp.any(rel_arr < 0.0)):
            raise ConfigurationError("Tolerances must be non-negative")
        if bool(jnp.all(abs_arr == 0.0)) and bool(jnp.all(rel_arr == 0.0)):
            raise ConfigurationError("At least one tolerance must be positive")
        if initial_step is not None and not initial_step > 0.0:
            raise ConfigurationError("Initial step must be positive", value=initial_step)

        self.config = AdaptiveConfig(
            abs_tol=abs_arr,
            rel_tol=rel_arr,
            safety_factor=safety_factor,
            min_step=float(min_step),
            max_step=float(max_step),
            max_step_attempts=max_step_attempts,
        )
        self._initial_step = initial_step

    def initial_step(self, t0: float, t1: float) -> float:
        if self._initial_step is not None:
            h = self._initial_step
        else:
            h = 0.01 * abs(t1 - t0)
        return min(max(h, self.config.min_step), self.config.max_step)

    def step(self, dynamics, t, state, dt):
        return type(self)._step_fn(dynamics, t, state, dt, self.config)


class RungeKuttaFehlberg45Integrator(_EmbeddedIntegrator):
    """Adaptive Runge-Kutta-Fehlberg 4(5) driver."""

    _step_fn = staticmethod(rkf45_step)


class DormandPrince54Integrator(_EmbeddedIntegrator):
    """Adaptive Dormand-Prince 5(4) driver.

    Args:
        min_step: Minimal step magnitude. Units: *s*
        max_step: Maximal step magnitude. Units: *s*
        abs_tol: Absolute tolerance, scalar or per component.
        rel_tol: Relative tolerance, scalar or per component.
        initial_step: First attempted step magnitude; defaults to one
            percent of the integration span.

    Examples:
        ```python
        from dsstjax.integrators import DormandPrince54Integrator
        from dsstjax.propagation import tolerances
        abs_tol, rel_tol = tolerances(1.0, orbit)
        integrator = DormandPrince54Integrator(1.0, 86400.0, abs_tol, rel_tol)
        ```
    """

    _step_fn = staticmethod(dp54_step)
