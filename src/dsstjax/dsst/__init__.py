"""Draper Semianalytical Satellite Theory (DSST) propagation.

- :class:`DSSTPropagator` -- orchestrates a propagation run
- :class:`DSSTForceModel` -- averaged force-model contract
- :class:`GaussianContribution` -- quadrature-averaged base for concrete models
- :class:`DSSTZonal`, :class:`DSSTAtmosphericDrag`, :class:`DSSTThirdBody`,
  :class:`DSSTSolarRadiationPressure` -- concrete force models
- :class:`ReinitializationClock`, :class:`MeanElementDerivatives`,
  :class:`MeanPlusShortPeriodicMapper`, :class:`OsculatingToMeanConverter`
  -- engine components
"""

from .converter import OsculatingToMeanConverter
from .derivatives import MeanElementDerivatives
from .drag import DSSTAtmosphericDrag
from .force_model import DSSTForceModel, ForceModelRegistry, ShortPeriodTerm
from .gaussian import FourierShortPeriodTerm, GaussianContribution, GaussianQuadrature
from .mapper import MeanPlusShortPeriodicMapper
from .propagator import DSSTPropagator, PropagationRun, PropagatorSettings
from .scheduler import ReinitializationClock
from .srp import (
    DSSTSolarRadiationPressure,
    SolarRadiationPressureForce,
    numerical_reflection_coefficient,
)
from .third_body import MOON, SUN, CelestialBody, DSSTThirdBody
from .zonal import DSSTZonal

__all__ = [
    "CelestialBody",
    "DSSTAtmosphericDrag",
    "DSSTForceModel",
    "DSSTPropagator",
    "DSSTSolarRadiationPressure",
    "DSSTThirdBody",
    "DSSTZonal",
    "ForceModelRegistry",
    "FourierShortPeriodTerm",
    "GaussianContribution",
    "GaussianQuadrature",
    "MOON",
    "MeanElementDerivatives",
    "MeanPlusShortPeriodicMapper",
    "OsculatingToMeanConverter",
    "PropagationRun",
    "PropagatorSettings",
    "ReinitializationClock",
    "SUN",
    "ShortPeriodTerm",
    "SolarRadiationPressureForce",
    "numerical_reflection_coefficient",
]
