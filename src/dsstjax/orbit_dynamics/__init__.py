"""Instantaneous perturbing accelerations and environment models.

These traceable functions are the physics shared by the averaged force
models in :mod:`dsstjax.dsst` and the Cartesian reference propagator in
:mod:`dsstjax.propagation`.
"""

from dsstjax.orbit_dynamics.config import SpacecraftParams
from dsstjax.orbit_dynamics.drag import (
    Atmosphere,
    ExponentialAtmosphere,
    accel_drag,
    relative_velocity,
)
from dsstjax.orbit_dynamics.ephemerides import moon_position, sun_position
from dsstjax.orbit_dynamics.gravity import accel_central_body, accel_j2, accel_third_body
from dsstjax.orbit_dynamics.srp import accel_srp, accel_srp_sphere, eclipse_cylindrical

__all__ = [
    "Atmosphere",
    "ExponentialAtmosphere",
    "SpacecraftParams",
    "accel_central_body",
    "accel_drag",
    "accel_j2",
    "accel_srp",
    "accel_srp_sphere",
    "accel_third_body",
    "eclipse_cylindrical",
    "moon_position",
    "relative_velocity",
    "sun_position",
]
