"""Error taxonomy for the propagation engine.

Every failure raised by dsstjax derives from :class:`DSSTError` and
carries an explicit :class:`ErrorKind`, so callers can branch on the kind
without inspecting the message:

- **Propagation errors** abort the current run
  (:class:`MassNonPositiveError`, :class:`ForceModelError`, and
  :class:`PropagationError` of kind ``INVALID_ORBIT`` when integrated
  elements leave the valid orbit domain).
- **Configuration errors** are raised during setup, before any
  integration step (:class:`UnsupportedForceModelError`,
  :class:`ToleranceError`, :class:`InvalidOrbitError`).

No error is ever retried or downgraded to a warning inside the library.
"""

from __future__ import annotations

import enum
from typing import Any


class ErrorKind(enum.Enum):
    """Kinds of failure reported by the propagation engine."""

    MASS_NON_POSITIVE = "mass_non_positive"
    FORCE_MODEL_FAILURE = "force_model_failure"
    CONCURRENT_RUN = "concurrent_run"
    UNSUPPORTED_FORCE_MODEL = "unsupported_force_model"
    NON_FINITE_JACOBIAN = "non_finite_jacobian"
    INVALID_ORBIT = "invalid_orbit"
    INVALID_CONFIGURATION = "invalid_configuration"


class DSSTError(Exception):
    """Base class of every dsstjax error.

    Args:
        message: Human readable description.
        kind: The failure kind.
        date: Epoch at which the failure occurred, if any.
        element: Offending element (name or index), if any.
        value: Offending value, if any.
    """

    default_kind = ErrorKind.INVALID_CONFIGURATION

    def __init__(
        self,
        message: str,
        kind: ErrorKind | None = None,
        date: Any = None,
        element: str | int | None = None,
        value: Any = None,
    ) -> None:
        self.kind = kind if kind is not None else self.default_kind
        self.date = date
        self.element = element
        self.value = value
        context = []
        if date is not None:
            context.append(f"date={date}")
        if element is not None:
            context.append(f"element={element}")
        if value is not None:
            context.append(f"value={value}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class PropagationError(DSSTError):
    """A failure that aborts the current propagation run."""

    default_kind = ErrorKind.FORCE_MODEL_FAILURE


class MassNonPositiveError(PropagationError):
    """Spacecraft mass reached zero or became negative."""

    default_kind = ErrorKind.MASS_NON_POSITIVE


class ForceModelError(PropagationError):
    """A force model produced a non-finite contribution."""

    default_kind = ErrorKind.FORCE_MODEL_FAILURE


class ConfigurationError(DSSTError, ValueError):
    """Invalid setup detected before any integration step."""

    default_kind = ErrorKind.INVALID_CONFIGURATION


class UnsupportedForceModelError(ConfigurationError):
    """A force model cannot be mirrored into a numerical propagator."""

    default_kind = ErrorKind.UNSUPPORTED_FORCE_MODEL


class ToleranceError(ConfigurationError):
    """The element Jacobian used to derive tolerances is not finite."""

    default_kind = ErrorKind.NON_FINITE_JACOBIAN


class InvalidOrbitError(ConfigurationError):
    """Orbital elements violate ``a > 0`` or ``e < 1``."""

    default_kind = ErrorKind.INVALID_ORBIT
