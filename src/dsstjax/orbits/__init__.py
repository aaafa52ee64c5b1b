"""Orbital element sets, conversions and the orbit value type."""

from .equinoctial import (
    jacobian_equinoctial_wrt_cartesian,
    longitude_eccentric_to_mean,
    longitude_eccentric_to_true,
    longitude_mean_to_eccentric,
    longitude_true_to_eccentric,
    state_eci_to_equinoctial,
    state_equinoctial_to_eci,
    state_equinoctial_to_koe,
    state_koe_to_equinoctial,
)
from .keplerian import mean_motion, orbital_period, semimajor_axis_from_orbital_period
from .orbit import ELEMENT_NAMES, EquinoctialOrbit, OrbitType, PositionAngle

__all__ = [
    "ELEMENT_NAMES",
    "EquinoctialOrbit",
    "OrbitType",
    "PositionAngle",
    "jacobian_equinoctial_wrt_cartesian",
    "longitude_eccentric_to_mean",
    "longitude_eccentric_to_true",
    "longitude_mean_to_eccentric",
    "longitude_true_to_eccentric",
    "mean_motion",
    "orbital_period",
    "semimajor_axis_from_orbital_period",
    "state_eci_to_equinoctial",
    "state_equinoctial_to_eci",
    "state_equinoctial_to_koe",
    "state_koe_to_equinoctial",
]
