"""Reinitialization scheduling of the force models.

Short-period coefficients are only valid near the mean state they were
computed from, so every force model is re-initialized on a fixed grid of
dates anchored at the start of the run: ``start``, ``start + dt``,
``start + 2 dt`` and so on (mirrored for backward propagation).  The
grid never drifts: a reset always advances the anchor by exactly one
interval, whatever date triggered it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from dsstjax.epoch import Epoch
from dsstjax.errors import ConfigurationError
from dsstjax.states import SpacecraftState

from .force_model import DSSTForceModel

logger = logging.getLogger(__name__)


class ReinitializationClock:
    """Decides when the force models must be re-initialized.

    Args:
        start: Start date of the run.
        interval: Reinitialization period. Units: *s*
        direction: ``1`` for forward propagation, ``-1`` for backward.
    """

    def __init__(self, start: Epoch, interval: float, direction: int = 1) -> None:
        if not interval > 0.0:
            raise ConfigurationError("Reinitialization interval must be positive", value=interval)
        if direction not in (1, -1):
            raise ConfigurationError("Direction must be 1 or -1", value=direction)
        self.start = start
        self.interval = float(interval)
        self.direction = direction
        self._last_reset: Epoch | None = None
        self.reset_dates: list[Epoch] = []

    @property
    def last_reset_date(self) -> Epoch | None:
        return self._last_reset

    @property
    def next_reset_date(self) -> Epoch:
        """Next boundary; the start date until the first reset happened."""
        if self._last_reset is None:
            return self.start
        return self._last_reset + self.direction * self.interval

    def is_due(self, date: Epoch) -> bool:
        if self._last_reset is None:
            return True
        boundary = self.next_reset_date
        return date >= boundary if self.direction > 0 else date <= boundary

    def check_and_reset(
        self,
        date: Epoch,
        mean_state: SpacecraftState,
        force_models: Iterable[DSSTForceModel],
    ) -> bool:
        """Re-initialize every model if ``date`` reached the next boundary.

        Args:
            date: Date under evaluation.
            mean_state: Mean state at ``date``.
            force_models: Models of the current run.

        Returns:
            bool: ``True`` if a reset happened.
        """
        if not self.is_due(date):
            return False

        boundary = self.next_reset_date
        for model in force_models:
            model.initialize(mean_state)
        self._last_reset = boundary
        self.reset_dates.append(boundary)
        logger.debug("Force models re-initialized at %s (boundary %s)", date, boundary)
        return True

    def time_to_next_reset(self, date: Epoch) -> float:
        """Seconds from ``date`` to the next boundary, in the run direction."""
        return self.direction * (self.next_reset_date - date)
