"""Mean-element derivative evaluator."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

import jax.numpy as jnp
from jax import Array

from dsstjax.config import get_dtype
from dsstjax.errors import ForceModelError
from dsstjax.orbits import ELEMENT_NAMES
from dsstjax.states import SpacecraftState

from .force_model import DSSTForceModel

logger = logging.getLogger(__name__)


class MeanElementDerivatives:
    """Sums the force-model mean rates into the integrator derivative.

    The derivative of the flat state ``[a, ex, ey, hx, hy, lm, mass]`` is
    the sum of every model's mean element rate and mass rate plus the
    Keplerian mean motion ``sqrt(mu / a^3)`` on the mean longitude.

    Args:
        force_models: Models of the current run, in evaluation order.
    """

    def __init__(self, force_models: Sequence[DSSTForceModel]) -> None:
        self.force_models = tuple(force_models)

    def compute(self, mean_state: SpacecraftState) -> Array:
        """Derivative of the flat state at ``mean_state``.

        Raises:
            ForceModelError: If a model returns a non-finite rate.
        """
        rates = jnp.zeros(6, dtype=get_dtype())
        mass_rate = 0.0

        for model in self.force_models:
            contribution = jnp.asarray(model.mean_element_rate(mean_state), dtype=get_dtype())
            finite = jnp.isfinite(contribution)
            if not bool(jnp.all(finite)):
                index = int(jnp.argmin(finite))
                raise ForceModelError(
                    f"{model.name} returned a non-finite mean element rate",
                    date=mean_state.date,
                    element=ELEMENT_NAMES[index],
                    value=float(contribution[index]),
                )
            rates = rates + contribution

            dm = float(model.mass_rate(mean_state))
            if not math.isfinite(dm):
                raise ForceModelError(
                    f"{model.name} returned a non-finite mass rate",
                    date=mean_state.date,
                    element="mass",
                    value=dm,
                )
            mass_rate += dm

        # Keplerian contribution
        rates = rates.at[5].add(mean_state.orbit.mean_motion)
        return jnp.concatenate([rates, jnp.array([mass_rate], dtype=get_dtype())])

    __call__ = compute
