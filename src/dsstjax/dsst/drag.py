"""Averaged atmospheric drag."""

from __future__ import annotations

from dsstjax.constants import GM_EARTH, OMEGA_EARTH
from dsstjax.orbit_dynamics import Atmosphere, SpacecraftParams, accel_drag

from .gaussian import GaussianContribution, GaussianQuadrature


class DSSTAtmosphericDrag(GaussianContribution):
    """Drag on a cannonball spacecraft averaged over the mean longitude.

    Args:
        atmosphere: Density model.
        cd: Drag coefficient.
        area: Cross-sectional area. Units: *m^2*
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        quadrature: Mean longitude sampling settings.

    Examples:
        ```python
        from dsstjax.dsst import DSSTAtmosphericDrag
        from dsstjax.orbit_dynamics import ExponentialAtmosphere
        drag = DSSTAtmosphericDrag(ExponentialAtmosphere(), cd=2.0, area=25.0)
        ```
    """

    def __init__(
        self,
        atmosphere: Atmosphere,
        cd: float,
        area: float,
        mu: float = GM_EARTH,
        quadrature: GaussianQuadrature | None = None,
    ) -> None:
        super().__init__(mu, quadrature)
        self.atmosphere = atmosphere
        self.params = SpacecraftParams(drag_area=area, cd=cd)

    @property
    def cd(self) -> float:
        return self.params.cd

    @property
    def area(self) -> float:
        return self.params.drag_area

    def acceleration(self, t, x_eci, mass):
        density = self.atmosphere.density(t, x_eci[:3])
        return accel_drag(x_eci, density, mass, self.area, self.cd, OMEGA_EARTH)
