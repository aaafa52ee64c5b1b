"""Averaged force-model contract and the ordered model registry.

A DSST force model contributes two things:

- mean element rates, the secular and long-period drift of the six
  equinoctial elements averaged over the fast angle;
- short-period terms, closed-form series that recover the osculating
  elements from the mean ones.

Models are re-initialized from the current mean state at every
reinitialization boundary; the short-period terms they hand out are valid
until the next boundary.
"""

from __future__ import annotations

import abc
from collections.abc import Iterable, Iterator, Sequence

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from dsstjax.config import get_dtype
from dsstjax.epoch import Epoch
from dsstjax.errors import UnsupportedForceModelError
from dsstjax.propagation import InstantaneousForce
from dsstjax.states import SpacecraftState


class ShortPeriodTerm(abc.ABC):
    """Short-periodic correction valid over one reinitialization window."""

    @abc.abstractmethod
    def value(self, date: Epoch, mean_elements: ArrayLike) -> Array:
        """Osculating-minus-mean correction of ``[a, ex, ey, hx, hy, lm]``.

        Args:
            date: Evaluation date.
            mean_elements: Mean equinoctial elements at ``date``.

        Returns:
            jax.Array: 6-element correction.
        """


class DSSTForceModel(abc.ABC):
    """Capability contract of an averaged perturbation."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @abc.abstractmethod
    def initialize(self, mean_state: SpacecraftState) -> None:
        """Recompute window-dependent data from the mean state at a boundary."""

    @abc.abstractmethod
    def mean_element_rate(self, mean_state: SpacecraftState) -> Array:
        """Averaged rates of ``[a, ex, ey, hx, hy, lm]`` (6-vector)."""

    @abc.abstractmethod
    def short_period_terms(self) -> Sequence[ShortPeriodTerm]:
        """Terms computed by the latest :meth:`initialize` call."""

    def short_periodic_variations(self, date: Epoch, mean_elements: ArrayLike) -> Array:
        """Sum of this model's short-period terms at ``date``."""
        total = jnp.zeros(6, dtype=get_dtype())
        for term in self.short_period_terms():
            total = total + term.value(date, mean_elements)
        return total

    def mass_rate(self, mean_state: SpacecraftState) -> float:
        """Mass flow rate in *kg/s*; zero unless the model consumes mass."""
        return 0.0

    def numerical_force(self) -> InstantaneousForce:
        """Build the equivalent instantaneous force for a Cartesian propagator.

        Raises:
            UnsupportedForceModelError: If the model has no instantaneous
                counterpart.
        """
        raise UnsupportedForceModelError(
            f"{self.name} cannot be mirrored into a numerical propagator", element=self.name
        )


class ForceModelRegistry:
    """Ordered, mutable collection of force models.

    Runs work on an immutable :meth:`snapshot`, so edits between runs never
    affect a run in progress.
    """

    def __init__(self, models: Iterable[DSSTForceModel] = ()) -> None:
        self._models: list[DSSTForceModel] = []
        for model in models:
            self.add(model)

    def add(self, model: DSSTForceModel) -> None:
        if not isinstance(model, DSSTForceModel):
            raise TypeError(f"Expected a DSSTForceModel, got {type(model).__name__}")
        self._models.append(model)

    def clear(self) -> None:
        self._models.clear()

    def snapshot(self) -> tuple[DSSTForceModel, ...]:
        return tuple(self._models)

    def __iter__(self) -> Iterator[DSSTForceModel]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __bool__(self) -> bool:
        return bool(self._models)

    def __repr__(self) -> str:
        return f"ForceModelRegistry([{', '.join(m.name for m in self._models)}])"
