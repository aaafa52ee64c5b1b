"""Adaptive step-size control for embedded Runge-Kutta methods.

Shared by the RKF45 and DP54 integrators:

1. Form the normalized RMS error with mixed absolute/relative tolerances.
2. Accept the step if the normalized error is <= 1.0, otherwise shrink the
   step and retry.
3. Predict the next step size from the error and the method order.

The tableau-driven :func:`embedded_step` replaces hand-unrolled stage code
so both methods share one implementation of the rejection loop.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.integrators._types import AdaptiveConfig, StepResult, Tolerance


def compute_error_norm(
    error_vec: ArrayLike,
    state_new: ArrayLike,
    state_old: ArrayLike,
    abs_tol: Tolerance,
    rel_tol: Tolerance,
) -> float:
    """Compute the normalized RMS error used to accept or reject a step.

    The per-component scale is

    .. math::

        \\text{sc}_i = \\text{abs\\_tol}_i + \\text{rel\\_tol}_i
            \\cdot \\max(|y^{\\text{new}}_i|, |y^{\\text{old}}_i|)

    and the returned value is ``sqrt(mean((err_i / sc_i)^2))`` over the
    controlled components.

    Args:
        error_vec: Difference between high-order and low-order solutions.
        state_new: High-order solution.
        state_old: State at the beginning of the step.
        abs_tol: Absolute tolerance, scalar or vector.
        rel_tol: Relative tolerance, scalar or vector.

    Returns:
        float: Normalized error. The step is accepted if <= 1.0.
    """
    dtype = get_dtype()
    error_vec = jnp.asarray(error_vec, dtype=dtype)
    state_new = jnp.asarray(state_new, dtype=dtype)
    state_old = jnp.asarray(state_old, dtype=dtype)
    abs_tol = jnp.atleast_1d(jnp.asarray(abs_tol, dtype=dtype))
    rel_tol = jnp.atleast_1d(jnp.asarray(rel_tol, dtype=dtype))

    n = max(abs_tol.shape[0], rel_tol.shape[0])
    if n == 1:
        n = error_vec.shape[0]
    n = min(n, error_vec.shape[0])

    scale = abs_tol + rel_tol * jnp.maximum(jnp.abs(state_new[:n]), jnp.abs(state_old[:n]))
    ratio = error_vec[:n] / scale
    return float(jnp.sqrt(jnp.mean(ratio * ratio)))


def compute_next_step_size(
    error: float,
    h: float,
    order: float,
    config: AdaptiveConfig,
) -> float:
    """Compute the next step size from the current error estimate.

    .. math::

        h_{\\text{next}} = |h| \\cdot S \\cdot
            \\left(\\frac{1}{\\text{error}}\\right)^{1/(p+1)}

    clamped by the scale-factor bounds and the absolute step bounds. The
    sign of ``h`` is preserved for backward integration.

    Args:
        error: Normalized error from :func:`compute_error_norm`.
        h: Current step size (may be negative).
        order: Order of the error estimator.
        config: Step-size control settings.

    Returns:
        float: Suggested next step size with the sign of ``h``.
    """
    if error > 0.0 and math.isfinite(error):
        scale = config.safety_factor * (1.0 / error) ** (1.0 / (order + 1.0))
    elif error == 0.0:
        scale = config.max_scale_factor
    else:
        scale = config.min_scale_factor
    scale = min(max(scale, config.min_scale_factor), config.max_scale_factor)
    abs_h = min(max(abs(h) * scale, config.min_step), config.max_step)
    return math.copysign(abs_h, h)


def embedded_step(
    nodes: Sequence[float],
    coupling: Sequence[Sequence[float]],
    b_high: Sequence[float],
    b_low: Sequence[float],
    order: float,
    dynamics: Callable[[float, Array], Array],
    t: float,
    state: ArrayLike,
    dt: float,
    config: AdaptiveConfig,
) -> StepResult:
    """Take one accepted step of an embedded Runge-Kutta pair.

    Args:
        nodes: Butcher nodes ``c``.
        coupling: Lower-triangular rows of the Butcher matrix ``A``; row
            ``k`` holds the weights of stages ``0..k`` for stage ``k+1``.
        b_high: Weights of the propagated solution.
        b_low: Weights of the embedded error-estimation solution.
        order: Order used for step-size prediction.
        dynamics: ODE right-hand side ``f(t, x) -> dx/dt``.
        t: Current time.
        state: Current state vector.
        dt: Requested step; may be negative.
        config: Step-size control settings.

    Returns:
        StepResult: The accepted step.
    """
    state = jnp.asarray(state, dtype=get_dtype())
    h = float(dt)
    attempts = 0

    while True:
        k = [dynamics(t, state)]
        for c, row in zip(nodes[1:], coupling):
            increment = sum(w * ki for w, ki in zip(row, k) if w != 0.0)
            k.append(dynamics(t + c * h, state + h * increment))

        state_high = state + h * sum(w * ki for w, ki in zip(b_high, k) if w != 0.0)
        error_vec = h * sum((wh - wl) * ki for wh, wl, ki in zip(b_high, b_low, k) if wh != wl)
        error = compute_error_norm(error_vec, state_high, state, config.abs_tol, config.rel_tol)
        attempts += 1

        accepted = (
            error <= 1.0
            or abs(h) <= config.min_step
            or attempts >= config.max_step_attempts
        )
        if accepted:
            dt_next = compute_next_step_size(error, h, order, config)
            return StepResult(state=state_high, dt_used=h, error_estimate=error, dt_next=dt_next)

        h = compute_next_step_size(error, h, order, config)
