"""
dsstjax is a semianalytical (DSST) satellite orbit propagation library implemented in JAX.
"""

from .config import set_dtype, get_dtype

from .constants import (
    DEG2RAD,
    RAD2DEG,
    AS2RAD,
    JD_MJD_OFFSET,
    MJD2000,
    AU,
    R_EARTH,
    GM_EARTH,
    J2_EARTH,
    OMEGA_EARTH,
    GM_SUN,
    P_SUN,
    GM_MOON,
    DEFAULT_MASS,
)

from .epoch import Epoch

from .errors import (
    ErrorKind,
    DSSTError,
    PropagationError,
    MassNonPositiveError,
    ForceModelError,
    ConfigurationError,
    UnsupportedForceModelError,
    ToleranceError,
    InvalidOrbitError,
)

from .orbits import (
    EquinoctialOrbit,
    OrbitType,
    PositionAngle,
)

from .attitude import (
    Attitude,
    AttitudeProvider,
    FixedPVProvider,
    InertialAttitude,
    LofAttitude,
)

from .states import SpacecraftState

from .propagation import (
    InstantaneousForce,
    NumericalPropagator,
    tolerances,
)

from .dsst import (
    DSSTAtmosphericDrag,
    DSSTForceModel,
    DSSTPropagator,
    DSSTSolarRadiationPressure,
    DSSTThirdBody,
    DSSTZonal,
)
