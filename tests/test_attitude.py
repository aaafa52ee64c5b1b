"""Tests for the dsstjax.attitude and dsstjax.states modules."""

import math

import jax.numpy as jnp
import pytest

from dsstjax.attitude import (
    FixedPVProvider,
    InertialAttitude,
    LofAttitude,
    quaternion_to_rotation_matrix,
    rotation_matrix_to_quaternion,
)
from dsstjax.constants import DEFAULT_MASS, GM_EARTH, R_EARTH
from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError
from dsstjax.orbits import EquinoctialOrbit
from dsstjax.states import SpacecraftState

_ROT_TOL = 1e-12
_SMA = R_EARTH + 500e3
_EPOCH = Epoch(2003, 9, 16)


def _circular_equatorial():
    return EquinoctialOrbit(jnp.array([_SMA, 0.0, 0.0, 0.0, 0.0, 0.0]), _EPOCH)


class TestQuaternionConversions:
    def test_identity(self):
        q = rotation_matrix_to_quaternion(jnp.eye(3))
        assert jnp.allclose(q, jnp.array([1.0, 0.0, 0.0, 0.0]), atol=_ROT_TOL)

    @pytest.mark.parametrize(
        "q",
        [
            [0.9, 0.1, -0.3, 0.2],
            [0.1, 0.9, 0.3, -0.2],
            [0.05, -0.2, 0.95, 0.1],
            [0.0, 0.0, 0.0, 1.0],
        ],
    )
    def test_roundtrip(self, q):
        q = jnp.array(q) / jnp.linalg.norm(jnp.array(q))
        q_back = rotation_matrix_to_quaternion(quaternion_to_rotation_matrix(q))
        # q and -q describe the same rotation
        assert jnp.allclose(q_back, q, atol=1e-12) or jnp.allclose(q_back, -q, atol=1e-12)

    def test_rotation_matrix_orthonormal(self):
        R = quaternion_to_rotation_matrix(jnp.array([0.7, 0.2, -0.4, 0.5]))
        assert jnp.allclose(R @ R.T, jnp.eye(3), atol=_ROT_TOL)
        assert float(jnp.linalg.det(R)) == pytest.approx(1.0, abs=_ROT_TOL)

    def test_rotation_about_z(self):
        angle = 0.3
        q = jnp.array([math.cos(angle / 2.0), 0.0, 0.0, math.sin(angle / 2.0)])
        R = quaternion_to_rotation_matrix(q)
        # Reference-to-body: the body x axis seen from the reference frame is rotated by +angle
        assert float(R[0, 0]) == pytest.approx(math.cos(angle), abs=_ROT_TOL)
        assert float(R[0, 1]) == pytest.approx(math.sin(angle), abs=_ROT_TOL)


class TestInertialAttitude:
    def test_default_identity(self):
        att = InertialAttitude().attitude(_circular_equatorial(), _EPOCH, "EME2000")
        assert jnp.allclose(att.quaternion, jnp.array([1.0, 0.0, 0.0, 0.0]))
        assert jnp.allclose(att.rotation_rate, 0.0)
        assert att.date == _EPOCH
        assert att.frame == "EME2000"

    def test_normalizes(self):
        att = InertialAttitude([2.0, 0.0, 0.0, 0.0]).attitude(_circular_equatorial(), _EPOCH, "EME2000")
        assert float(jnp.linalg.norm(att.quaternion)) == pytest.approx(1.0)

    def test_invalid_shape(self):
        with pytest.raises(ConfigurationError):
            InertialAttitude([1.0, 0.0, 0.0])


class TestLofAttitude:
    def test_lvlh_circular_equatorial(self):
        att = LofAttitude("LVLH").attitude(_circular_equatorial(), _EPOCH, "EME2000")
        n = math.sqrt(GM_EARTH / _SMA**3)
        assert jnp.allclose(att.quaternion, jnp.array([1.0, 0.0, 0.0, 0.0]), atol=1e-12)
        assert jnp.allclose(att.rotation_rate, jnp.array([0.0, 0.0, n]), atol=1e-15)

    def test_vvlh_axes(self):
        x = _circular_equatorial().position_velocity()
        R = LofAttitude("VVLH").rotation_matrix(x)
        expected = jnp.array([[0.0, 1.0, 0.0], [0.0, 0.0, -1.0], [-1.0, 0.0, 0.0]])
        assert jnp.allclose(R, expected, atol=1e-12)
        assert float(jnp.linalg.det(R)) == pytest.approx(1.0, abs=1e-12)

    def test_attitude_matrix_matches_lof(self):
        orbit = EquinoctialOrbit(jnp.array([_SMA, 0.001, 0.002, 0.3, -0.4, 1.0]), _EPOCH)
        provider = LofAttitude("LVLH")
        att = provider.attitude(orbit, _EPOCH, "EME2000")
        R = provider.rotation_matrix(orbit.position_velocity())
        assert jnp.allclose(att.rotation_matrix(), R, atol=1e-12)

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            LofAttitude("TNW")


class TestFixedPVProvider:
    def test_ignores_date(self):
        orbit = _circular_equatorial()
        provider = FixedPVProvider(orbit)
        assert jnp.array_equal(provider.position_velocity(_EPOCH + 1000.0), orbit.position_velocity())


class TestSpacecraftState:
    def test_flat_array(self):
        orbit = _circular_equatorial()
        att = InertialAttitude().attitude(orbit, _EPOCH, orbit.frame)
        state = SpacecraftState(orbit, att, 500.0)
        flat = state.to_flat_array()
        assert flat.shape == (7,)
        assert float(flat[6]) == 500.0
        assert float(flat[0]) == pytest.approx(_SMA)

    def test_defaults_and_with_mass(self):
        orbit = _circular_equatorial()
        att = InertialAttitude().attitude(orbit, _EPOCH, orbit.frame)
        state = SpacecraftState(orbit, att)
        assert state.mass == DEFAULT_MASS
        assert state.with_mass(10.0).mass == 10.0
        assert state.mass == DEFAULT_MASS
        assert state.date == _EPOCH
        assert state.mu == GM_EARTH
