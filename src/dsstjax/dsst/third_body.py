"""Averaged third-body attraction from the Sun or the Moon."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from jax import Array
from jax.typing import ArrayLike

from dsstjax.constants import GM_EARTH, GM_MOON, GM_SUN
from dsstjax.orbit_dynamics import accel_third_body, moon_position, sun_position

from .gaussian import GaussianContribution, GaussianQuadrature


@dataclass(frozen=True)
class CelestialBody:
    """Perturbing body with an analytical ephemeris.

    Args:
        name: Body name.
        gm: Gravitational parameter. Units: *m^3/s^2*
        position: Traceable ``t -> r`` with ``t`` in seconds since J2000.0.
    """

    name: str
    gm: float
    position: Callable[[ArrayLike], Array]


SUN = CelestialBody("Sun", GM_SUN, sun_position)
MOON = CelestialBody("Moon", GM_MOON, moon_position)


class DSSTThirdBody(GaussianContribution):
    """Third-body perturbation; the body position is frozen over each quadrature.

    Args:
        body: Perturbing body, :data:`SUN` by default.
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        quadrature: Mean longitude sampling settings.
    """

    def __init__(
        self,
        body: CelestialBody = SUN,
        mu: float = GM_EARTH,
        quadrature: GaussianQuadrature | None = None,
    ) -> None:
        super().__init__(mu, quadrature)
        self.body = body

    @property
    def name(self) -> str:
        return f"DSSTThirdBody({self.body.name})"

    def acceleration(self, t, x_eci, mass):
        return accel_third_body(x_eci[:3], self.body.position(t), self.body.gm)
