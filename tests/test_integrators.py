"""Tests for the dsstjax.integrators module.

Tests cover:
- Polynomial exactness (RK4 is exact for degree <= 3 polynomials)
- Harmonic oscillator and two-body accuracy
- Error norm with partial tolerance vectors
- Step-size prediction and rejection (RKF45, DP54)
- Interval drivers: backward integration and step limiting
- Driver configuration errors
"""

import math

import jax.numpy as jnp
import pytest

from dsstjax.constants import GM_EARTH, R_EARTH
from dsstjax.errors import ConfigurationError
from dsstjax.integrators import (
    AdaptiveConfig,
    DormandPrince54Integrator,
    RungeKutta4Integrator,
    RungeKuttaFehlberg45Integrator,
    StepResult,
    dp54_step,
    rk4_step,
    rkf45_step,
)
from dsstjax.integrators._adaptive import compute_error_norm, compute_next_step_size

# Tolerances
_SINGLE_TOL = 1e-8
_ADAPTIVE_TOL = 1e-6


# ──────────────────────────────────────────────
# Helper dynamics functions
# ──────────────────────────────────────────────

def _harmonic_oscillator(t, x):
    """d^2q/dt^2 = -q. State: [q, dq/dt]. Solution: [cos(t), -sin(t)]."""
    return jnp.array([x[1], -x[0]])


def _linear_dynamics(t, x):
    """dx/dt = 1. Solution: x(t) = x0 + t."""
    return jnp.ones_like(x)


def _cubic_dynamics(t, x):
    """dx/dt = 3t^2. Solution: x(t) = x0 + t^3."""
    return 3.0 * t**2 * jnp.ones_like(x)


def _two_body(t, state):
    """Two-body gravitational dynamics. State: [rx, ry, rz, vx, vy, vz]."""
    r = state[:3]
    r_norm = jnp.linalg.norm(r)
    return jnp.concatenate([state[3:], -GM_EARTH * r / r_norm**3])


def _circular_orbit_state(sma):
    v_circ = math.sqrt(GM_EARTH / sma)
    return jnp.array([sma, 0.0, 0.0, 0.0, v_circ, 0.0])


# ──────────────────────────────────────────────
# StepResult and AdaptiveConfig
# ──────────────────────────────────────────────

class TestTypes:
    def test_step_result_fields(self):
        result = StepResult(state=jnp.array([1.0]), dt_used=0.1, error_estimate=0.0, dt_next=0.2)
        assert result.state.shape == (1,)
        assert result.dt_used == pytest.approx(0.1)
        assert result._replace(dt_next=0.5).dt_next == 0.5

    def test_adaptive_config_defaults(self):
        config = AdaptiveConfig()
        assert config.abs_tol == 1e-6
        assert config.rel_tol == 1e-3
        assert config.safety_factor == 0.9
        assert config.max_step_attempts == 10


# ──────────────────────────────────────────────
# Step functions
# ──────────────────────────────────────────────

class TestRK4:
    def test_linear_exactness(self):
        result = rk4_step(_linear_dynamics, 0.0, jnp.array([5.0]), 1.0)
        assert jnp.allclose(result.state, jnp.array([6.0]), atol=_SINGLE_TOL)

    def test_cubic_exactness(self):
        result = rk4_step(_cubic_dynamics, 1.0, jnp.array([0.0]), 2.0)
        assert jnp.allclose(result.state, jnp.array([27.0 - 1.0]), atol=_SINGLE_TOL)

    def test_harmonic_oscillator_single_step(self):
        dt = 0.01
        result = rk4_step(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), dt)
        expected = jnp.array([math.cos(dt), -math.sin(dt)])
        assert jnp.allclose(result.state, expected, atol=1e-10)

    def test_step_result_metadata(self):
        result = rk4_step(_linear_dynamics, 0.0, jnp.array([0.0]), 0.1)
        assert result.dt_used == pytest.approx(0.1)
        assert result.error_estimate == 0.0
        assert result.dt_next == pytest.approx(0.1)

    def test_backward_step(self):
        fwd = rk4_step(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), 0.1)
        bwd = rk4_step(_harmonic_oscillator, 0.1, fwd.state, -0.1)
        assert jnp.allclose(bwd.state, jnp.array([1.0, 0.0]), atol=1e-9)


class TestAdaptiveSteps:
    @pytest.mark.parametrize("step_fn", [rkf45_step, dp54_step])
    def test_harmonic_step_accuracy(self, step_fn):
        config = AdaptiveConfig(abs_tol=1e-12, rel_tol=1e-12)
        result = step_fn(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), 0.05, config)
        t = result.dt_used
        expected = jnp.array([math.cos(t), -math.sin(t)])
        assert jnp.allclose(result.state, expected, atol=1e-10)

    @pytest.mark.parametrize("step_fn", [rkf45_step, dp54_step])
    def test_rejects_oversized_step(self, step_fn):
        config = AdaptiveConfig(abs_tol=1e-10, rel_tol=1e-10)
        result = step_fn(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), 2.0, config)
        assert abs(result.dt_used) < 2.0

    @pytest.mark.parametrize("step_fn", [rkf45_step, dp54_step])
    def test_grows_step_on_easy_problem(self, step_fn):
        result = step_fn(_linear_dynamics, 0.0, jnp.array([0.0]), 1.0)
        assert result.dt_used == pytest.approx(1.0)
        assert result.dt_next > 1.0

    def test_negative_step(self):
        result = dp54_step(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), -0.05)
        assert result.dt_used < 0.0
        assert result.dt_next < 0.0

    def test_default_config(self):
        result = dp54_step(_linear_dynamics, 0.0, jnp.array([0.0]), 0.5)
        assert jnp.allclose(result.state, jnp.array([0.5]))


class TestErrorControl:
    def test_partial_tolerance_vector_ignores_trailing(self):
        err = jnp.array([1e-6, 1e-6, 1e3])
        y = jnp.ones(3)
        norm = compute_error_norm(err, y, y, jnp.array([1e-6, 1e-6]), jnp.array([0.0, 0.0]))
        assert norm == pytest.approx(1.0)

    def test_scalar_tolerance_controls_all(self):
        err = jnp.array([1e-6, 3e-6])
        y = jnp.zeros(2)
        norm = compute_error_norm(err, y, y, 1e-6, 0.0)
        assert norm == pytest.approx(math.sqrt((1.0 + 9.0) / 2.0))

    def test_relative_scale_uses_larger_state(self):
        err = jnp.array([1.0])
        norm = compute_error_norm(err, jnp.array([10.0]), jnp.array([100.0]), 0.0, 0.01)
        assert norm == pytest.approx(1.0)

    def test_next_step_preserves_sign_and_clamps(self):
        config = AdaptiveConfig(min_step=1.0, max_step=50.0)
        assert compute_next_step_size(0.0, -10.0, 4.0, config) == pytest.approx(-50.0)
        assert compute_next_step_size(1e6, 10.0, 4.0, config) == pytest.approx(2.0)
        assert compute_next_step_size(float("nan"), 2.0, 4.0, config) == pytest.approx(1.0)


# ──────────────────────────────────────────────
# Interval drivers
# ──────────────────────────────────────────────

class TestIntegrators:
    def test_rk4_driver_lands_on_end(self):
        t, y = RungeKutta4Integrator(0.3).integrate(_linear_dynamics, 0.0, jnp.array([0.0]), 1.0)
        assert t == 1.0
        assert float(y[0]) == pytest.approx(1.0, abs=1e-12)

    @pytest.mark.parametrize("cls", [RungeKuttaFehlberg45Integrator, DormandPrince54Integrator])
    def test_harmonic_full_period(self, cls):
        integrator = cls(1e-6, 1.0, 1e-10, 1e-10)
        _, y = integrator.integrate(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), 2.0 * math.pi)
        assert jnp.allclose(y, jnp.array([1.0, 0.0]), atol=_ADAPTIVE_TOL)

    def test_backward_integration(self):
        integrator = DormandPrince54Integrator(1e-6, 1.0, 1e-10, 1e-10)
        _, y = integrator.integrate(_harmonic_oscillator, 0.0, jnp.array([1.0, 0.0]), -1.0)
        assert jnp.allclose(y, jnp.array([math.cos(1.0), math.sin(1.0)]), atol=_ADAPTIVE_TOL)

    def test_two_body_period(self):
        sma = R_EARTH + 500e3
        period = 2.0 * math.pi * math.sqrt(sma**3 / GM_EARTH)
        x0 = _circular_orbit_state(sma)
        integrator = DormandPrince54Integrator(1.0, 300.0, 1e-6, 1e-12)
        _, x = integrator.integrate(_two_body, 0.0, x0, period)
        assert float(jnp.linalg.norm(x[:3] - x0[:3])) < 1.0

    def test_step_limiter_lands_on_boundaries(self):
        calls = []

        def limiter(t, y):
            calls.append(t)
            return 10.0 - math.fmod(t, 10.0)

        integrator = DormandPrince54Integrator(1e-3, 100.0, 1e-12, 1e-12, initial_step=100.0)
        integrator.integrate(_linear_dynamics, 0.0, jnp.array([0.0]), 35.0, step_limiter=limiter)
        for boundary in (0.0, 10.0, 20.0, 30.0):
            assert any(abs(t - boundary) < 1e-9 for t in calls)
        assert all(t <= 35.0 for t in calls)

    def test_step_limiter_none_is_ignored(self):
        integrator = RungeKutta4Integrator(0.25)
        t, y = integrator.integrate(_linear_dynamics, 0.0, jnp.array([0.0]), 1.0,
                                    step_limiter=lambda t, y: None)
        assert float(y[0]) == pytest.approx(1.0)

    def test_vector_tolerance_shorter_than_state(self):
        integrator = DormandPrince54Integrator(1e-6, 1.0, jnp.array([1e-10, 1e-10]),
                                               jnp.array([1e-10, 1e-10]))
        y0 = jnp.array([1.0, 0.0, 7.0])

        def dynamics(t, y):
            return jnp.concatenate([_harmonic_oscillator(t, y[:2]), jnp.array([-1.0])])

        _, y = integrator.integrate(dynamics, 0.0, y0, 1.0)
        assert float(y[2]) == pytest.approx(6.0, abs=1e-9)

    def test_zero_span(self):
        y0 = jnp.array([3.0])
        t, y = DormandPrince54Integrator(1e-3, 1.0, 1e-8, 1e-8).integrate(_linear_dynamics, 5.0, y0, 5.0)
        assert t == 5.0
        assert jnp.array_equal(y, y0)


class TestIntegratorConfiguration:
    def test_rk4_non_positive_step(self):
        with pytest.raises(ConfigurationError):
            RungeKutta4Integrator(0.0)

    def test_step_bounds(self):
        with pytest.raises(ConfigurationError):
            DormandPrince54Integrator(10.0, 1.0, 1e-6, 1e-6)

    def test_negative_tolerance(self):
        with pytest.raises(ConfigurationError):
            DormandPrince54Integrator(1.0, 10.0, -1e-6, 1e-6)

    def test_all_zero_tolerances(self):
        with pytest.raises(ConfigurationError):
            DormandPrince54Integrator(1.0, 10.0, 0.0, jnp.zeros(6))

    def test_initial_step_validation(self):
        with pytest.raises(ConfigurationError):
            RungeKuttaFehlberg45Integrator(1.0, 10.0, 1e-6, 1e-6, initial_step=-5.0)

    def test_initial_step_defaults_to_span_fraction(self):
        integrator = DormandPrince54Integrator(1.0, 1000.0, 1e-6, 1e-6)
        assert integrator.initial_step(0.0, 5000.0) == pytest.approx(50.0)
        assert integrator.initial_step(0.0, 10.0) == pytest.approx(1.0)
