import jax.numpy as jnp
import pytest

from dsstjax.config import set_dtype


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, the worker running test_config.py may have switched
    to float32.  This fixture restores the library default so all other
    tests get float64.
    """
    set_dtype(jnp.float64)
