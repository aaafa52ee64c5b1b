"""Numerical reference propagation and integrator tolerance utilities."""

from dsstjax.propagation.numerical import InstantaneousForce, NumericalPropagator
from dsstjax.propagation.tolerances import tolerances

__all__ = [
    "InstantaneousForce",
    "NumericalPropagator",
    "tolerances",
]
