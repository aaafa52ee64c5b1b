"""Attitude values and providers.

An :class:`AttitudeProvider` turns a position/velocity source, a date and
a frame name into an :class:`Attitude`.  The propagators only need a
default inertial orientation and local-orbital-frame pointing, so two
providers are included:

- :class:`InertialAttitude`: constant orientation with respect to the
  inertial frame (the default everywhere).
- :class:`LofAttitude`: body axes aligned with a local orbital frame
  (``"LVLH"`` or ``"VVLH"``).

Quaternions are scalar-first ``[w, x, y, z]`` and describe the rotation
from the reference frame to the body frame.

:class:`FixedPVProvider` is the constant-value adapter used to obtain an
attitude before any propagation has happened: it reports the same
position/velocity for every requested date.
"""

from __future__ import annotations

import abc
import dataclasses
from typing import Protocol

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError


class PVCoordinatesProvider(Protocol):
    """Anything able to report an inertial state at a date."""

    def position_velocity(self, date: Epoch | None = None, frame: str | None = None) -> Array:
        ...


@dataclasses.dataclass(frozen=True, eq=False)
class Attitude:
    """Orientation of the spacecraft body at a date.

    Attributes:
        date: Date of the attitude.
        frame: Reference frame name.
        quaternion: Reference-to-body rotation ``[w, x, y, z]``.
        rotation_rate: Body angular velocity in body axes. Units: *rad/s*
        rotation_acceleration: Body angular acceleration in body axes.
            Units: *rad/s^2*
    """

    date: Epoch
    frame: str
    quaternion: Array
    rotation_rate: Array
    rotation_acceleration: Array

    def rotation_matrix(self) -> Array:
        """Reference-to-body direction cosine matrix."""
        return quaternion_to_rotation_matrix(self.quaternion)


def rotation_matrix_to_quaternion(R: ArrayLike) -> Array:
    """Convert a direction cosine matrix to a scalar-first unit quaternion.

    All four Shepperd candidates are formed and the one built from the
    largest diagonal combination is selected, which keeps the divisor away
    from zero.

    Args:
        R: Rotation matrix of shape ``(3, 3)``.

    Returns:
        jax.Array: ``[w, x, y, z]`` with ``w >= 0``.
    """
    R = jnp.asarray(R, dtype=get_dtype())
    traces = jnp.array([
        1.0 + R[0, 0] + R[1, 1] + R[2, 2],
        1.0 + R[0, 0] - R[1, 1] - R[2, 2],
        1.0 - R[0, 0] + R[1, 1] - R[2, 2],
        1.0 - R[0, 0] - R[1, 1] + R[2, 2],
    ])
    s = jnp.sqrt(jnp.maximum(traces, 1e-300))

    d12 = R[1, 2] - R[2, 1]
    d20 = R[2, 0] - R[0, 2]
    d01 = R[0, 1] - R[1, 0]
    s01 = R[0, 1] + R[1, 0]
    s20 = R[2, 0] + R[0, 2]
    s12 = R[1, 2] + R[2, 1]

    candidates = 0.5 * jnp.array([
        [s[0], d12 / s[0], d20 / s[0], d01 / s[0]],
        [d12 / s[1], s[1], s01 / s[1], s20 / s[1]],
        [d20 / s[2], s01 / s[2], s[2], s12 / s[2]],
        [d01 / s[3], s20 / s[3], s12 / s[3], s[3]],
    ])
    q = candidates[jnp.argmax(traces)]
    return jnp.where(q[0] < 0.0, -q, q)


def quaternion_to_rotation_matrix(q: ArrayLike) -> Array:
    """Convert a scalar-first quaternion to a direction cosine matrix."""
    q = jnp.asarray(q, dtype=get_dtype())
    q = q / jnp.linalg.norm(q)
    w, x, y, z = q[0], q[1], q[2], q[3]
    return jnp.array([
        [w * w + x * x - y * y - z * z, 2.0 * (x * y + w * z), 2.0 * (x * z - w * y)],
        [2.0 * (x * y - w * z), w * w - x * x + y * y - z * z, 2.0 * (y * z + w * x)],
        [2.0 * (x * z + w * y), 2.0 * (y * z - w * x), w * w - x * x - y * y + z * z],
    ])


class FixedPVProvider:
    """Position/velocity source that ignores the requested date.

    Used to compute the attitude of the initial state: the orbit is fixed
    at its epoch, so every query returns the same inertial state.

    Args:
        orbit: Any object exposing ``position_velocity()`` and ``frame``.
    """

    def __init__(self, orbit) -> None:
        self._frame = orbit.frame
        self._pv = orbit.position_velocity()

    def position_velocity(self, date: Epoch | None = None, frame: str | None = None) -> Array:
        return self._pv


class AttitudeProvider(abc.ABC):
    """Computes the spacecraft attitude along a trajectory."""

    @abc.abstractmethod
    def attitude(self, pv_provider: PVCoordinatesProvider, date: Epoch, frame: str) -> Attitude:
        """Attitude at ``date`` for the trajectory described by ``pv_provider``."""


class InertialAttitude(AttitudeProvider):
    """Fixed orientation with respect to the reference frame.

    Args:
        quaternion: Reference-to-body rotation ``[w, x, y, z]``. Defaults
            to the identity.
    """

    def __init__(self, quaternion: ArrayLike | None = None) -> None:
        if quaternion is None:
            quaternion = jnp.array([1.0, 0.0, 0.0, 0.0])
        quaternion = jnp.asarray(quaternion, dtype=get_dtype())
        if quaternion.shape != (4,):
            raise ConfigurationError(f"Quaternion must have 4 components, got {quaternion.shape}")
        self._quaternion = quaternion / jnp.linalg.norm(quaternion)

    def attitude(self, pv_provider: PVCoordinatesProvider, date: Epoch, frame: str) -> Attitude:
        zeros = jnp.zeros(3, dtype=get_dtype())
        return Attitude(date, frame, self._quaternion, zeros, zeros)


class LofAttitude(AttitudeProvider):
    """Body axes aligned with a local orbital frame.

    ``"LVLH"``: X radial outward, Z along the orbital momentum, Y completing
    the triad (roughly along-track).  ``"VVLH"``: Z towards the central
    body, Y opposite to the orbital momentum, X completing the triad.

    The body rotates with the orbital angular rate ``h / r^2`` about the
    orbit normal; the angular acceleration is neglected.

    Args:
        lof_type: ``"LVLH"`` or ``"VVLH"``.
    """

    _TYPES = ("LVLH", "VVLH")

    def __init__(self, lof_type: str = "LVLH") -> None:
        if lof_type not in self._TYPES:
            raise ConfigurationError(f"Unknown local orbital frame {lof_type!r}")
        self.lof_type = lof_type

    def rotation_matrix(self, x_eci: ArrayLike) -> Array:
        """Inertial-to-LOF rotation matrix; rows are the LOF axes."""
        x_eci = jnp.asarray(x_eci, dtype=get_dtype())
        r = x_eci[:3]
        h = jnp.cross(r, x_eci[3:6])
        r_hat = r / jnp.linalg.norm(r)
        h_hat = h / jnp.linalg.norm(h)
        if self.lof_type == "LVLH":
            x_axis, z_axis = r_hat, h_hat
            y_axis = jnp.cross(z_axis, x_axis)
        else:
            z_axis, y_axis = -r_hat, -h_hat
            x_axis = jnp.cross(y_axis, z_axis)
        return jnp.stack([x_axis, y_axis, z_axis])

    def attitude(self, pv_provider: PVCoordinatesProvider, date: Epoch, frame: str) -> Attitude:
        x_eci = pv_provider.position_velocity(date, frame)
        R = self.rotation_matrix(x_eci)
        r = x_eci[:3]
        omega_eci = jnp.cross(r, x_eci[3:6]) / jnp.dot(r, r)
        return Attitude(
            date,
            frame,
            rotation_matrix_to_quaternion(R),
            R @ omega_eci,
            jnp.zeros(3, dtype=get_dtype()),
        )
