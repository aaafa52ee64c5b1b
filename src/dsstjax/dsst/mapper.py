"""Mapping between the integrator's flat state and spacecraft states.

The integrated vector is ``[a, ex, ey, hx, hy, lm, mass]`` in *mean*
elements.  States handed to callers are osculating: the currently valid
short-period terms are added on the way out.
"""

from __future__ import annotations

from collections.abc import Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.attitude import AttitudeProvider
from dsstjax.config import get_dtype
from dsstjax.constants import GM_EARTH
from dsstjax.epoch import Epoch
from dsstjax.errors import ErrorKind, InvalidOrbitError, MassNonPositiveError, PropagationError
from dsstjax.orbits import EquinoctialOrbit, OrbitType
from dsstjax.states import SpacecraftState

from .converter import OsculatingToMeanConverter
from .force_model import DSSTForceModel, ShortPeriodTerm


class MeanPlusShortPeriodicMapper:
    """Maps flat mean vectors to osculating states and back.

    Args:
        attitude_provider: Source of the attitude of mapped states.
        mu: Central body gravitational parameter. Units: *m^3/s^2*
        frame: Inertial frame name of the orbits.
        force_models: Models of the run; used for the osculating-to-mean
            conversion.
        satellite_revolution: Revolutions averaged by the conversion.
    """

    def __init__(
        self,
        attitude_provider: AttitudeProvider,
        mu: float = GM_EARTH,
        frame: str = "EME2000",
        force_models: Sequence[DSSTForceModel] = (),
        satellite_revolution: int = 2,
    ) -> None:
        self.attitude_provider = attitude_provider
        self.mu = mu
        self.frame = frame
        self.force_models = tuple(force_models)
        self.satellite_revolution = satellite_revolution
        self.short_period_terms: tuple[ShortPeriodTerm, ...] = ()

    def _orbit(self, elements: Array, date: Epoch, orbit_type: OrbitType) -> EquinoctialOrbit:
        try:
            return EquinoctialOrbit(elements, date, mu=self.mu, frame=self.frame, orbit_type=orbit_type)
        except InvalidOrbitError as err:
            raise PropagationError(
                "Propagated elements left the valid orbit domain",
                kind=ErrorKind.INVALID_ORBIT,
                date=date,
                element=err.element,
                value=err.value,
            ) from err

    def refresh_short_period_terms(self) -> None:
        """Collect the terms produced by the latest model initialization."""
        self.short_period_terms = tuple(
            term for model in self.force_models for term in model.short_period_terms()
        )

    def short_periodic_variations(self, date: Epoch, mean_elements: ArrayLike) -> Array:
        """Sum of the current short-period terms at ``date``."""
        total = jnp.zeros(6, dtype=get_dtype())
        for term in self.short_period_terms:
            total = total + term.value(date, mean_elements)
        return total

    def to_mean_state(self, y: ArrayLike, date: Epoch) -> SpacecraftState:
        """Mean spacecraft state of the flat vector, without mass checks.

        Raises:
            PropagationError: If the elements are not a valid orbit (kind
                ``INVALID_ORBIT``).
        """
        y = jnp.asarray(y, dtype=get_dtype())
        orbit = self._orbit(y[:6], date, OrbitType.MEAN)
        attitude = self.attitude_provider.attitude(orbit, date, self.frame)
        return SpacecraftState(orbit, attitude, float(y[6]))

    def to_spacecraft_state(self, y: ArrayLike, date: Epoch) -> SpacecraftState:
        """Osculating spacecraft state of the flat mean vector at ``date``.

        Raises:
            MassNonPositiveError: If ``y[6] <= 0``.
            PropagationError: If the osculating elements are not a valid
                orbit (kind ``INVALID_ORBIT``).
        """
        y = jnp.asarray(y, dtype=get_dtype())
        mass = float(y[6])
        if mass <= 0.0:
            raise MassNonPositiveError(
                "Spacecraft mass became non-positive", date=date, element="mass", value=mass
            )
        mean_elements = y[:6]
        osculating = mean_elements + self.short_periodic_variations(date, mean_elements)
        orbit = self._orbit(osculating, date, OrbitType.OSCULATING)
        attitude = self.attitude_provider.attitude(orbit, date, self.frame)
        return SpacecraftState(orbit, attitude, mass)

    def to_flat_vector(self, state: SpacecraftState) -> Array:
        """Flat mean vector of ``state``.

        Without force models the elements are copied; otherwise the state is
        taken as osculating and averaged first.
        """
        if self.force_models:
            orbit = OsculatingToMeanConverter(
                state, self.satellite_revolution, self.force_models
            ).convert()
        else:
            orbit = state.orbit
        return jnp.concatenate([orbit.to_array(), jnp.array([state.mass], dtype=get_dtype())])
