"""Averaged solar radiation pressure with a cylindrical Earth shadow.

The averaged model is parametrized by the radiation pressure coefficient
``cr``.  Its numerical mirror models a non-absorbing sphere with specular
reflection fraction ``k = 1 + (1 - cr) * 2.25``, whose effective coefficient
``1 + 4 (1 - k) / 9`` is ``cr`` again.
"""

from __future__ import annotations

from dsstjax.constants import GM_EARTH, R_EARTH
from dsstjax.orbit_dynamics import (
    SpacecraftParams,
    accel_srp,
    accel_srp_sphere,
    eclipse_cylindrical,
    sun_position,
)
from dsstjax.propagation import InstantaneousForce

from .gaussian import GaussianContribution, GaussianQuadrature


def numerical_reflection_coefficient(cr: float) -> float:
    """Convert a DSST pressure coefficient to the numerical reflection one."""
    return 1.0 + (1.0 - cr) * 2.25


def _srp_acceleration(t, x_eci, mass, cr, area, equatorial_radius):
    r_sun = sun_position(t)
    nu = eclipse_cylindrical(x_eci[:3], r_sun, equatorial_radius)
    return nu * accel_srp(x_eci[:3], r_sun, mass, cr, area)


class SolarRadiationPressureForce(InstantaneousForce):
    """Instantaneous radiation pressure in the numerical convention.

    Args:
        reflection_coefficient: Specular reflection fraction ``k``.
        area: Sun-facing area. Units: *m^2*
        equatorial_radius: Radius of the shadow cylinder. Units: *m*
    """

    def __init__(self, reflection_coefficient: float, area: float,
                 equatorial_radius: float = R_EARTH) -> None:
        self.reflection_coefficient = reflection_coefficient
        self.area = area
        self.equatorial_radius = equatorial_radius

    def acceleration(self, t, x_eci, mass):
        r_sun = sun_position(t)
        nu = eclipse_cylindrical(x_eci[:3], r_sun, self.equatorial_radius)
        return nu * accel_srp_sphere(x_eci[:3], r_sun, mass, self.reflection_coefficient, self.area)


class DSSTSolarRadiationPressure(GaussianContribution):
    """Averaged radiation pressure on a cannonball spacecraft.

    Args:
        cr: Radiation pressure coefficient.
        area: Sun-facing area. Units: *m^2*
        equatorial_radius: Radius of the shadow cylinder. Units: *m*
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        quadrature: Mean longitude sampling settings.
    """

    def __init__(
        self,
        cr: float,
        area: float,
        equatorial_radius: float = R_EARTH,
        mu: float = GM_EARTH,
        quadrature: GaussianQuadrature | None = None,
    ) -> None:
        super().__init__(mu, quadrature)
        self.params = SpacecraftParams(srp_area=area, cr=cr)
        self.equatorial_radius = equatorial_radius

    @property
    def cr(self) -> float:
        return self.params.cr

    @property
    def area(self) -> float:
        return self.params.srp_area

    def acceleration(self, t, x_eci, mass):
        return _srp_acceleration(t, x_eci, mass, self.cr, self.area, self.equatorial_radius)

    def numerical_force(self) -> InstantaneousForce:
        return SolarRadiationPressureForce(
            numerical_reflection_coefficient(self.cr), self.area, self.equatorial_radius
        )
