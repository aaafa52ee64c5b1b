"""Tests for the dsstjax.propagation module.

Tests cover:
- Tolerance estimation from a position error budget
- The Cartesian reference propagator
"""

import importlib
import math

import jax.numpy as jnp
import pytest

from dsstjax.attitude import InertialAttitude
from dsstjax.constants import GM_EARTH, R_EARTH
from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError, ErrorKind, MassNonPositiveError, ToleranceError
from dsstjax.integrators import DormandPrince54Integrator
from dsstjax.orbits import EquinoctialOrbit, OrbitType
from dsstjax.propagation import InstantaneousForce, NumericalPropagator, tolerances
from dsstjax.states import SpacecraftState

tolerances_module = importlib.import_module("dsstjax.propagation.tolerances")

_EPOCH = Epoch(2003, 9, 16)
_ORBIT = EquinoctialOrbit(jnp.array([7069219.98, -4.59e-4, 1.31e-4, -1.003, 0.571, 2.620]), _EPOCH)


def _state(orbit=_ORBIT, mass=1000.0):
    return SpacecraftState(orbit, InertialAttitude().attitude(orbit, orbit.epoch, orbit.frame), mass)


def _integrator(orbit=_ORBIT):
    abs_tol, rel_tol = tolerances(0.01, orbit, orbit_type="cartesian")
    return DormandPrince54Integrator(1.0, 300.0, abs_tol, rel_tol, initial_step=60.0)


class _ConstantThrust(InstantaneousForce):
    """Tangential thrust with a constant mass flow."""

    def __init__(self, thrust, mdot):
        self.thrust = thrust
        self.mdot = mdot

    def acceleration(self, t, x_eci, mass):
        v = x_eci[3:6]
        return self.thrust / mass * v / jnp.linalg.norm(v)

    def mass_rate(self, t, x_eci, mass):
        return jnp.asarray(self.mdot)


# ──────────────────────────────────────────────
# Tolerances
# ──────────────────────────────────────────────

class TestTolerances:
    def test_shapes(self):
        abs_tol, rel_tol = tolerances(1.0, _ORBIT)
        assert abs_tol.shape == (6,)
        assert rel_tol.shape == (6,)
        assert bool(jnp.all(abs_tol > 0.0))

    def test_linear_in_position_error(self):
        abs_1, rel_1 = tolerances(1.0, _ORBIT)
        abs_2, rel_2 = tolerances(2.0, _ORBIT)
        assert jnp.allclose(abs_2, 2.0 * abs_1, rtol=1e-12)
        assert jnp.allclose(rel_2, 2.0 * rel_1, rtol=1e-12)

    def test_relative_tolerance(self):
        _, rel_tol = tolerances(10.0, _ORBIT)
        r = float(jnp.linalg.norm(_ORBIT.position_velocity()[:3]))
        assert jnp.allclose(rel_tol, 10.0 / r, rtol=1e-12)

    def test_cartesian(self):
        x = _ORBIT.position_velocity()
        r = float(jnp.linalg.norm(x[:3]))
        v = float(jnp.linalg.norm(x[3:]))
        abs_tol, _ = tolerances(1.0, _ORBIT, orbit_type="cartesian")
        dV = GM_EARTH / (v * r * r)
        assert jnp.allclose(abs_tol[:3], 1.0)
        assert jnp.allclose(abs_tol[3:], dV, rtol=1e-12)

    def test_semi_major_axis_tolerance_scale(self):
        # da/dr ~ 2 (a/r)^2, so the a tolerance is a few metres per metre
        abs_tol, _ = tolerances(1.0, _ORBIT)
        assert 1.0 < float(abs_tol[0]) < 20.0

    def test_non_positive_error(self):
        with pytest.raises(ConfigurationError):
            tolerances(0.0, _ORBIT)

    def test_unknown_orbit_type(self):
        with pytest.raises(ConfigurationError):
            tolerances(1.0, _ORBIT, orbit_type="keplerian")

    def test_non_finite_jacobian(self, monkeypatch):
        def broken(x, mu):
            return jnp.ones((6, 6)).at[5, 2].set(jnp.inf)

        monkeypatch.setattr(tolerances_module, "jacobian_equinoctial_wrt_cartesian", broken)
        with pytest.raises(ToleranceError) as excinfo:
            tolerances(1.0, _ORBIT)
        assert excinfo.value.kind is ErrorKind.NON_FINITE_JACOBIAN
        assert excinfo.value.element == "lm"
        assert excinfo.value.date == _EPOCH


# ──────────────────────────────────────────────
# Numerical propagator
# ──────────────────────────────────────────────

class TestNumericalPropagator:
    def test_two_body_period(self):
        propagator = NumericalPropagator(_integrator(), _state())
        state = propagator.propagate(_EPOCH + _ORBIT.period)
        x0 = _ORBIT.position_velocity()
        assert float(jnp.linalg.norm(state.position_velocity()[:3] - x0[:3])) < 1.0
        assert state.orbit.orbit_type is OrbitType.OSCULATING
        assert state.mass == pytest.approx(1000.0)
        assert state.date == _EPOCH + _ORBIT.period

    def test_continues_from_last_date(self):
        propagator = NumericalPropagator(_integrator(), _state())
        propagator.propagate(_EPOCH + 600.0)
        assert propagator.current_date == _EPOCH + 600.0
        state = propagator.propagate(_EPOCH + 1200.0)
        expected = _ORBIT.position_velocity(_EPOCH + 1200.0)
        assert float(jnp.linalg.norm(state.position_velocity()[:3] - expected[:3])) < 1.0

    def test_sample_shape(self):
        propagator = NumericalPropagator(_integrator(), _state())
        states = propagator.sample([0.0, 100.0, 200.0])
        assert states.shape == (3, 6)
        assert jnp.allclose(states[0], _ORBIT.position_velocity())

    def test_thrust_raises_semi_major_axis(self):
        sma = R_EARTH + 500e3
        orbit = EquinoctialOrbit(jnp.array([sma, 0.0, 0.0, 0.0, 0.0, 0.0]), _EPOCH)
        propagator = NumericalPropagator(_integrator(orbit), _state(orbit), [_ConstantThrust(1.0, -0.01)])
        state = propagator.propagate(_EPOCH + 1000.0)
        # da/dt = 2 a^2 v T / (mu m) for tangential thrust on a circular orbit
        v = math.sqrt(GM_EARTH / sma)
        da = 2.0 * sma**2 * v * 1.0 / (GM_EARTH * 995.0) * 1000.0
        assert float(state.orbit.a) - sma == pytest.approx(da, rel=0.02)
        assert state.mass == pytest.approx(990.0, abs=1e-6)
        assert propagator.forces[0].name == "_ConstantThrust"

    def test_mass_depletion(self):
        propagator = NumericalPropagator(_integrator(), _state(mass=10.0), [_ConstantThrust(0.0, -1.0)])
        with pytest.raises(MassNonPositiveError) as excinfo:
            propagator.propagate(_EPOCH + 20.0)
        assert excinfo.value.kind is ErrorKind.MASS_NON_POSITIVE
        assert excinfo.value.date == _EPOCH + 20.0
