"""Tests for the osculating-to-mean converter.

Tests cover:
- Least-squares trend and harmonic fit
- Argument validation
- Pass-through without force models
- Unsupported models rejected before the reference propagation
- Recovery of mean elements from J2 osculating elements
"""

import math

import jax.numpy as jnp
import pytest

from dsstjax.attitude import InertialAttitude
from dsstjax.constants import R_EARTH
from dsstjax.dsst import DSSTForceModel, DSSTPropagator, DSSTZonal, OsculatingToMeanConverter
from dsstjax.dsst.converter import fit_secular_and_harmonic
from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError, UnsupportedForceModelError
from dsstjax.integrators import DormandPrince54Integrator, RungeKutta4Integrator
from dsstjax.orbits import EquinoctialOrbit, OrbitType
from dsstjax.states import SpacecraftState

_EPOCH = Epoch(2010, 3, 1, 12, 0, 0.0)

_SMA = R_EARTH + 700e3
_INC = math.radians(50.0)
_MEAN_ORBIT = EquinoctialOrbit(
    jnp.array([_SMA, 1e-3, 0.0, math.tan(_INC / 2.0) * math.cos(0.5), math.tan(_INC / 2.0) * math.sin(0.5), 0.3]),
    _EPOCH,
    orbit_type=OrbitType.MEAN,
)

# Recovery tolerances, well below the J2 short-period amplitudes
_A_TOL = 250.0  # m
_ECC_TOL = 1e-4
_INC_TOL = 5e-5
_LM_TOL = 2e-4  # rad


def _state(orbit):
    return SpacecraftState(orbit, InertialAttitude().attitude(orbit, orbit.epoch, orbit.frame))


def _angle_difference(a, b):
    return math.remainder(float(a) - float(b), 2.0 * math.pi)


class _RecordingModel(DSSTForceModel):
    """Model without an instantaneous counterpart."""

    def __init__(self):
        self.initialized = False

    def initialize(self, mean_state):
        self.initialized = True

    def mean_element_rate(self, mean_state):
        return jnp.zeros(6)

    def short_period_terms(self):
        return []


# ──────────────────────────────────────────────
# Fit
# ──────────────────────────────────────────────

class TestFit:
    def test_recovers_trend_and_harmonics(self):
        times = jnp.linspace(0.0, 12000.0, 73)
        nu = 2.0 * jnp.pi / 6000.0
        samples = jnp.stack([
            3.0 + 0.01 * times + 2.0 * jnp.sin(nu * times) - 0.5 * jnp.cos(2.0 * nu * times),
            -1.0 + 0.3 * jnp.cos(3.0 * nu * times),
        ], axis=1)
        coefficients = fit_secular_and_harmonic(times, samples, float(nu), 4)
        assert coefficients.shape == (10, 2)
        assert jnp.allclose(coefficients[0], jnp.array([3.0, -1.0]), atol=1e-8)
        assert float(coefficients[1, 0]) == pytest.approx(0.01, abs=1e-10)
        # cos(m nu t) at 2 + 2 (m - 1), sin at 3 + 2 (m - 1)
        assert float(coefficients[3, 0]) == pytest.approx(2.0, abs=1e-8)
        assert float(coefficients[4, 0]) == pytest.approx(-0.5, abs=1e-8)
        assert float(coefficients[6, 1]) == pytest.approx(0.3, abs=1e-8)

    def test_no_harmonics_is_linear_fit(self):
        times = jnp.linspace(0.0, 10.0, 11)
        samples = (2.0 + 0.5 * times)[:, None]
        coefficients = fit_secular_and_harmonic(times, samples, 1.0, 0)
        assert coefficients.shape == (2, 1)
        assert jnp.allclose(coefficients[:, 0], jnp.array([2.0, 0.5]))


# ──────────────────────────────────────────────
# Construction and trivial conversions
# ──────────────────────────────────────────────

class TestConverterConfiguration:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"satellite_revolution": 0},
            {"satellite_revolution": 1, "n_harmonics": -1},
            {"satellite_revolution": 1, "samples_per_revolution": 8, "n_harmonics": 4},
        ],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ConfigurationError):
            OsculatingToMeanConverter(_state(_MEAN_ORBIT), force_models=[DSSTZonal()], **kwargs)

    def test_without_models_returns_same_elements(self):
        orbit = _MEAN_ORBIT.retagged(OrbitType.OSCULATING)
        mean = OsculatingToMeanConverter(_state(orbit), 2, []).convert()
        assert mean.orbit_type is OrbitType.MEAN
        assert jnp.array_equal(mean.elements, orbit.elements)
        assert mean.epoch == orbit.epoch

    def test_unsupported_model_fails_before_stepping(self):
        model = _RecordingModel()
        converter = OsculatingToMeanConverter(_state(_MEAN_ORBIT), 2, [DSSTZonal(), model])
        with pytest.raises(UnsupportedForceModelError) as excinfo:
            converter.convert()
        assert excinfo.value.element == "_RecordingModel"
        assert not model.initialized

    def test_propagator_surfaces_unsupported_model(self):
        propagator = DSSTPropagator(RungeKutta4Integrator(60.0), _MEAN_ORBIT, True, 86400.0)
        propagator.add_force_model(_RecordingModel())
        with pytest.raises(UnsupportedForceModelError):
            propagator.propagate(_EPOCH + 60.0)


# ──────────────────────────────────────────────
# Mean element recovery
# ──────────────────────────────────────────────

class TestMeanRecovery:
    def test_unperturbed_orbit_is_unchanged(self):
        orbit = _MEAN_ORBIT.retagged(OrbitType.OSCULATING)
        mean = OsculatingToMeanConverter(_state(orbit), 2, [DSSTZonal(j2=0.0)]).convert()
        assert float(mean.a) == pytest.approx(float(orbit.a), abs=10.0)
        assert jnp.allclose(mean.elements[1:5], orbit.elements[1:5], atol=1e-6)
        assert abs(_angle_difference(mean.lm, orbit.lm)) < 2e-6

    def test_recovers_j2_mean_elements(self):
        zonal = DSSTZonal()
        zonal.initialize(_state(_MEAN_ORBIT))
        mean_elements = _MEAN_ORBIT.to_array()
        osculating = mean_elements + zonal.short_periodic_variations(_EPOCH, mean_elements)
        osc_orbit = _MEAN_ORBIT.with_elements(osculating, orbit_type=OrbitType.OSCULATING)

        # The correction must be large compared to the tolerances
        assert abs(float(osculating[0] - mean_elements[0])) > 2.0 * _A_TOL or \
            float(jnp.max(jnp.abs(osculating[1:3] - mean_elements[1:3]))) > 2.0 * _ECC_TOL

        recovered = OsculatingToMeanConverter(_state(osc_orbit), 2, [DSSTZonal()]).convert()
        assert recovered.orbit_type is OrbitType.MEAN
        assert float(recovered.a) == pytest.approx(_SMA, abs=_A_TOL)
        assert jnp.allclose(recovered.elements[1:3], mean_elements[1:3], atol=_ECC_TOL)
        assert jnp.allclose(recovered.elements[3:5], mean_elements[3:5], atol=_INC_TOL)
        assert abs(_angle_difference(recovered.lm, mean_elements[5])) < _LM_TOL

    def test_mean_orbit_of_propagator_matches_converter(self):
        orbit = _MEAN_ORBIT.retagged(OrbitType.OSCULATING)
        abs_tol, rel_tol = DSSTPropagator.tolerances(1.0, orbit)
        propagator = DSSTPropagator(
            DormandPrince54Integrator(1.0, 86400.0, abs_tol, rel_tol), orbit, True, 86400.0,
            satellite_revolution=1,
        )
        propagator.add_force_model(DSSTZonal())
        direct = OsculatingToMeanConverter(propagator.initial_state, 1, [DSSTZonal()]).convert()
        assert jnp.allclose(propagator.mean_orbit().elements, direct.elements, rtol=1e-12)
