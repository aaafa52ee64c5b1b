"""Spacecraft physical properties shared by the surface-force models."""

from __future__ import annotations

from dataclasses import dataclass

from dsstjax.errors import ConfigurationError


@dataclass(frozen=True)
class SpacecraftParams:
    """Cannonball spacecraft properties.

    All values are SI.  Defaults represent a generic small satellite.

    Args:
        drag_area: Wind-facing cross-sectional area [m^2].
        srp_area: Sun-facing cross-sectional area [m^2].
        cd: Coefficient of drag [dimensionless].
        cr: Coefficient of reflectivity [dimensionless].
    """

    drag_area: float = 10.0
    srp_area: float = 10.0
    cd: float = 2.2
    cr: float = 1.3

    def __post_init__(self) -> None:
        for name in ("drag_area", "srp_area"):
            value = getattr(self, name)
            if not value > 0.0:
                raise ConfigurationError(f"{name} must be positive", element=name, value=value)
        if not self.cd > 0.0:
            raise ConfigurationError("cd must be positive", element="cd", value=self.cd)
        if self.cr < 0.0:
            raise ConfigurationError("cr must be non-negative", element="cr", value=self.cr)
