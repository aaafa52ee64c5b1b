"""Type definitions for numerical integrators.

- :class:`StepResult`: Output of every step function, containing the new state,
  actual timestep used, error estimate, and suggested next timestep.
- :class:`AdaptiveConfig`: Configuration for adaptive step-size control in
  RKF45 and DP54 integrators.

Both are :class:`~typing.NamedTuple` instances.  Time quantities are plain
Python floats because the stepping loop runs in Python: the dynamics
evaluated by the semianalytical propagator have side effects (force-model
re-initialization) that cannot live inside a traced loop.
"""

from __future__ import annotations

from typing import NamedTuple, Union

from jax import Array
from jax.typing import ArrayLike

Tolerance = Union[float, ArrayLike]


class StepResult(NamedTuple):
    """Result of a single integrator step.

    Attributes:
        state: State vector at time ``t + dt_used``.
        dt_used: Actual timestep taken. For adaptive methods this may be
            smaller than the requested ``dt`` if attempts were rejected.
        error_estimate: Normalized error estimate (<= 1.0 means the step met
            the tolerance). Always 0.0 for RK4.
        dt_next: Suggested timestep for the next step.
    """

    state: Array
    dt_used: float
    error_estimate: float
    dt_next: float


class AdaptiveConfig(NamedTuple):
    """Configuration for adaptive step-size control.

    ``abs_tol`` and ``rel_tol`` may be scalars or per-component vectors.  A
    vector shorter than the state controls only the leading components;
    trailing components (for example the spacecraft mass appended to the
    orbital elements) are integrated without error control.

    Attributes:
        abs_tol: Absolute error tolerance (scalar or per component).
        rel_tol: Relative error tolerance (scalar or per component).
        safety_factor: Multiplicative safety factor applied to step-size
            predictions.
        min_scale_factor: Minimum allowed ratio ``dt_next / dt_used``.
        max_scale_factor: Maximum allowed ratio ``dt_next / dt_used``.
        min_step: Absolute minimum step size. A step at this size is
            accepted regardless of error.
        max_step: Absolute maximum step size.
        max_step_attempts: Maximum number of rejected attempts before the
            step is accepted regardless.
    """

    abs_tol: Tolerance = 1e-6
    rel_tol: Tolerance = 1e-3
    safety_factor: float = 0.9
    min_scale_factor: float = 0.2
    max_scale_factor: float = 10.0
    min_step: float = 1e-12
    max_step: float = 900.0
    max_step_attempts: int = 10
