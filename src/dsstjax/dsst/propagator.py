"""DSST semianalytical propagator.

Mean equinoctial elements and mass are integrated numerically with the
averaged force-model rates; short-period corrections are added whenever
a state is handed back to the caller.

A propagation is carried out by a :class:`PropagationRun` created for
that call alone.  The run owns the reinitialization clock, the snapshot of
force models, the mapper (with its cached short-period terms) and the
integration cursor, so nothing mutable is shared between runs.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Sequence

from jax import Array

from dsstjax.attitude import AttitudeProvider, FixedPVProvider, InertialAttitude
from dsstjax.constants import DEFAULT_MASS
from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError, ErrorKind, MassNonPositiveError, PropagationError
from dsstjax.integrators import Integrator
from dsstjax.orbits import EquinoctialOrbit, OrbitType
from dsstjax.propagation import tolerances as _tolerances
from dsstjax.states import SpacecraftState

from .derivatives import MeanElementDerivatives
from .force_model import DSSTForceModel, ForceModelRegistry
from .mapper import MeanPlusShortPeriodicMapper
from .scheduler import ReinitializationClock

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class PropagatorSettings:
    """Scalar settings of a :class:`DSSTPropagator`.

    Args:
        is_osculating: Whether the initial orbit is osculating.
        time_shift_to_initialize: Reinitialization interval [s].
        satellite_revolution: Revolutions averaged by the
            osculating-to-mean conversion.
    """

    is_osculating: bool
    time_shift_to_initialize: float
    satellite_revolution: int = 2

    def __post_init__(self) -> None:
        if not self.time_shift_to_initialize > 0.0:
            raise ConfigurationError(
                "time_shift_to_initialize must be positive",
                element="time_shift_to_initialize",
                value=self.time_shift_to_initialize,
            )
        if int(self.satellite_revolution) != self.satellite_revolution or self.satellite_revolution < 1:
            raise ConfigurationError(
                "satellite_revolution must be a positive integer",
                element="satellite_revolution",
                value=self.satellite_revolution,
            )


@dataclasses.dataclass
class PropagationRun:
    """Mutable state of one propagation run.

    Attributes:
        start: Start date.
        direction: ``1`` forward, ``-1`` backward.
        force_models: Snapshot of the models used throughout the run.
        clock: Reinitialization clock.
        mapper: Flat-vector mapper holding the current short-period terms.
        derivatives: Mean-element derivative evaluator.
        t: Current offset from ``start`` [s].
        y: Current flat mean vector.
    """

    start: Epoch
    direction: int
    force_models: tuple[DSSTForceModel, ...]
    clock: ReinitializationClock
    mapper: MeanPlusShortPeriodicMapper
    derivatives: MeanElementDerivatives
    t: float
    y: Array

    @property
    def date(self) -> Epoch:
        return self.start + self.t

    @property
    def reset_dates(self) -> list[Epoch]:
        return self.clock.reset_dates

    @property
    def mean_state(self) -> SpacecraftState:
        return self.mapper.to_mean_state(self.y, self.date)

    def check_reset(self, t: float, y: Array) -> None:
        date = self.start + t
        if self.clock.is_due(date):
            mean_state = self.mapper.to_mean_state(y, date)
            self.clock.check_and_reset(date, mean_state, self.force_models)
            self.mapper.refresh_short_period_terms()

    def dynamics(self, t: float, y: Array) -> Array:
        return self.derivatives.compute(self.mapper.to_mean_state(y, self.start + t))

    def _step_limiter(self, t: float, y: Array) -> float:
        self.check_reset(t, y)
        return self.clock.time_to_next_reset(self.start + t)

    def advance_to(self, integrator: Integrator, date: Epoch) -> SpacecraftState:
        """Integrate to ``date`` and map the result to an osculating state."""
        target = date - self.start
        _, self.y = integrator.integrate(
            self.dynamics, self.t, self.y, target, step_limiter=self._step_limiter
        )
        self.t = target
        self.check_reset(target, self.y)
        return self.mapper.to_spacecraft_state(self.y, date)

    def short_periodic_variations(self, date: Epoch, mean_elements) -> Array:
        return self.mapper.short_periodic_variations(date, mean_elements)


class DSSTPropagator:
    """Semianalytical propagator of mean equinoctial elements.

    Args:
        integrator: Integrator of the mean elements and mass.
        initial_orbit: Initial orbit.
        is_osculating: Whether ``initial_orbit`` holds osculating elements;
            if so it is averaged before integration.
        time_shift_to_initialize: Period of the force-model
            reinitialization. Units: *s*
        attitude_provider: Attitude source; inertial by default.
        mass: Initial mass. Units: *kg*
        satellite_revolution: Revolutions averaged by the
            osculating-to-mean conversion.

    Examples:
        ```python
        from dsstjax import Epoch
        from dsstjax.dsst import DSSTAtmosphericDrag, DSSTPropagator
        from dsstjax.integrators import DormandPrince54Integrator
        from dsstjax.orbit_dynamics import ExponentialAtmosphere

        abs_tol, rel_tol = DSSTPropagator.tolerances(1.0, orbit)
        integrator = DormandPrince54Integrator(10.0, 86400.0, abs_tol, rel_tol)
        propagator = DSSTPropagator(integrator, orbit, False, 86400.0)
        propagator.add_force_model(DSSTAtmosphericDrag(ExponentialAtmosphere(), 2.0, 25.0))
        state = propagator.propagate(orbit.epoch + 3 * orbit.period)
        ```
    """

    def __init__(
        self,
        integrator: Integrator,
        initial_orbit: EquinoctialOrbit,
        is_osculating: bool,
        time_shift_to_initialize: float,
        attitude_provider: AttitudeProvider | None = None,
        mass: float = DEFAULT_MASS,
        satellite_revolution: int = 2,
    ) -> None:
        self._settings = PropagatorSettings(
            bool(is_osculating), float(time_shift_to_initialize), satellite_revolution
        )
        self._integrator = integrator
        self._attitude_provider = attitude_provider or InertialAttitude()
        self._force_models = ForceModelRegistry()
        self._active = False
        self._last_run: PropagationRun | None = None

        if not mass > 0.0:
            raise MassNonPositiveError(
                "Initial mass must be positive", date=initial_orbit.epoch, element="mass", value=mass
            )
        attitude = self._attitude_provider.attitude(
            FixedPVProvider(initial_orbit), initial_orbit.epoch, initial_orbit.frame
        )
        self._initial_state = SpacecraftState(initial_orbit, attitude, float(mass))

    # Configuration

    @staticmethod
    def tolerances(dP: float, orbit: EquinoctialOrbit) -> tuple[Array, Array]:
        """Equinoctial integration tolerances for a position accuracy ``dP``."""
        return _tolerances(dP, orbit, orbit_type="equinoctial")

    @property
    def settings(self) -> PropagatorSettings:
        return self._settings

    @property
    def initial_state(self) -> SpacecraftState:
        return self._initial_state

    @property
    def force_models(self) -> tuple[DSSTForceModel, ...]:
        return self._force_models.snapshot()

    @property
    def last_run(self) -> PropagationRun | None:
        return self._last_run

    @property
    def mean_state(self) -> SpacecraftState | None:
        """Mean state at the end of the latest run."""
        return None if self._last_run is None else self._last_run.mean_state

    def _check_idle(self) -> None:
        if self._active:
            raise PropagationError(
                "A propagation run is already active on this propagator",
                kind=ErrorKind.CONCURRENT_RUN,
            )

    def add_force_model(self, model: DSSTForceModel) -> None:
        self._check_idle()
        self._force_models.add(model)

    def remove_force_models(self) -> None:
        self._check_idle()
        self._force_models.clear()

    def set_satellite_revolution(self, satellite_revolution: int) -> None:
        self._check_idle()
        self._settings = dataclasses.replace(self._settings, satellite_revolution=satellite_revolution)

    def reset_initial_state(self, state: SpacecraftState) -> None:
        """Replace the initial state; its orbit keeps the construction tag."""
        self._check_idle()
        self._initial_state = state

    # Propagation

    def _start_run(self, direction: int) -> PropagationRun:
        state = self._initial_state
        models = self._force_models.snapshot()
        mapper = MeanPlusShortPeriodicMapper(
            self._attitude_provider,
            mu=state.mu,
            frame=state.frame,
            force_models=models,
            satellite_revolution=self._settings.satellite_revolution,
        )
        if self._settings.is_osculating:
            y0 = mapper.to_flat_vector(state)
        else:
            y0 = state.to_flat_array()

        logger.info(
            "Starting %s DSST run from %s with %d force model(s)",
            "forward" if direction > 0 else "backward", state.date, len(models),
        )
        return PropagationRun(
            start=state.date,
            direction=direction,
            force_models=models,
            clock=ReinitializationClock(state.date, self._settings.time_shift_to_initialize, direction),
            mapper=mapper,
            derivatives=MeanElementDerivatives(models),
            t=0.0,
            y=y0,
        )

    def ephemeris(self, dates: Sequence[Epoch]) -> list[SpacecraftState]:
        """Propagate once through ``dates`` and return the osculating states.

        Dates must be monotonic in one direction from the initial date.

        Raises:
            PropagationError: If a run is already active, or a propagation
                failure occurs (see :class:`MassNonPositiveError`,
                :class:`ForceModelError`).
        """
        self._check_idle()
        dates = list(dates)
        if not dates:
            return []

        start = self._initial_state.date
        direction = -1 if dates[-1] < start else 1
        previous = start
        for date in dates:
            if direction * (date - previous) < -1e-9:
                raise ConfigurationError(
                    "Sample dates must be monotonic away from the initial date", date=date
                )
            previous = date

        self._active = True
        try:
            run = self._start_run(direction)
            self._last_run = run
            states = [run.advance_to(self._integrator, date) for date in dates]
        finally:
            self._active = False

        logger.info("DSST run finished at %s after %d reset(s)", run.date, len(run.reset_dates))
        return states

    def propagate(self, target: Epoch) -> SpacecraftState:
        """Propagate from the initial state to ``target``."""
        return self.ephemeris([target])[0]

    def mean_orbit(self) -> EquinoctialOrbit:
        """Mean orbit at the initial date (averaged if the orbit is osculating)."""
        mapper = MeanPlusShortPeriodicMapper(
            self._attitude_provider,
            mu=self._initial_state.mu,
            frame=self._initial_state.frame,
            force_models=self._force_models.snapshot() if self._settings.is_osculating else (),
            satellite_revolution=self._settings.satellite_revolution,
        )
        y = mapper.to_flat_vector(self._initial_state)
        return self._initial_state.orbit.with_elements(y[:6], orbit_type=OrbitType.MEAN)
