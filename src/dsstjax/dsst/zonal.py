"""J2 zonal harmonic of the central body."""

from __future__ import annotations

from dsstjax.constants import GM_EARTH, J2_EARTH, R_EARTH
from dsstjax.orbit_dynamics import accel_j2

from .gaussian import GaussianContribution, GaussianQuadrature


class DSSTZonal(GaussianContribution):
    """Averaged J2 perturbation.

    Args:
        j2: Unnormalized J2 coefficient.
        equatorial_radius: Reference radius. Units: *m*
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        quadrature: Mean longitude sampling settings.
    """

    def __init__(
        self,
        j2: float = J2_EARTH,
        equatorial_radius: float = R_EARTH,
        mu: float = GM_EARTH,
        quadrature: GaussianQuadrature | None = None,
    ) -> None:
        super().__init__(mu, quadrature)
        self.j2 = j2
        self.equatorial_radius = equatorial_radius

    def acceleration(self, t, x_eci, mass):
        return accel_j2(x_eci[:3], self.mu, self.j2, self.equatorial_radius)
