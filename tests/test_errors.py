"""Tests for the dsstjax.errors module."""

import pytest

from dsstjax.epoch import Epoch
from dsstjax.errors import (
    ConfigurationError,
    DSSTError,
    ErrorKind,
    ForceModelError,
    InvalidOrbitError,
    MassNonPositiveError,
    PropagationError,
    ToleranceError,
    UnsupportedForceModelError,
)


class TestErrorKinds:
    @pytest.mark.parametrize(
        "cls, kind",
        [
            (MassNonPositiveError, ErrorKind.MASS_NON_POSITIVE),
            (ForceModelError, ErrorKind.FORCE_MODEL_FAILURE),
            (UnsupportedForceModelError, ErrorKind.UNSUPPORTED_FORCE_MODEL),
            (ToleranceError, ErrorKind.NON_FINITE_JACOBIAN),
            (InvalidOrbitError, ErrorKind.INVALID_ORBIT),
            (ConfigurationError, ErrorKind.INVALID_CONFIGURATION),
        ],
    )
    def test_default_kind(self, cls, kind):
        assert cls("boom").kind is kind

    def test_explicit_kind_overrides_default(self):
        err = PropagationError("busy", kind=ErrorKind.CONCURRENT_RUN)
        assert err.kind is ErrorKind.CONCURRENT_RUN


class TestErrorHierarchy:
    def test_propagation_errors(self):
        assert issubclass(MassNonPositiveError, PropagationError)
        assert issubclass(ForceModelError, PropagationError)

    def test_configuration_errors_are_value_errors(self):
        for cls in (UnsupportedForceModelError, ToleranceError, InvalidOrbitError):
            assert issubclass(cls, ConfigurationError)
            assert issubclass(cls, ValueError)

    def test_everything_is_dssterror(self):
        assert issubclass(PropagationError, DSSTError)
        assert issubclass(ConfigurationError, DSSTError)


class TestErrorContext:
    def test_context_attributes(self):
        date = Epoch(2003, 9, 16)
        err = ForceModelError("bad rate", date=date, element="ex", value=float("nan"))
        assert err.date == date
        assert err.element == "ex"

    def test_context_in_message(self):
        err = MassNonPositiveError("mass", element="mass", value=-1.0)
        assert "element=mass" in str(err)
        assert "value=-1.0" in str(err)

    def test_no_context(self):
        assert str(ConfigurationError("plain")) == "plain"
