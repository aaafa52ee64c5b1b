"""
The `constants` module defines the mathematical and physical constants used by the propagators.
"""

from jax.numpy import pi as PI

# Mathematical Constants
"""
Constant to convert degrees to radians. Equal to 2pi/360. Units: *rad/deg*
"""
DEG2RAD = 2.0 * PI / 360.0

"""
Constant to convert radians to degrees. Equal to 360/2pi. Units: *deg/rad*
"""
RAD2DEG = 360.0 / (PI * 2.0)

"""
Constant to convert arcseconds to radians. Equal to 2pi/(360*3600). Units: *rad/as*
"""
AS2RAD = 2.0 * PI / 360.0 / 3600.0

# Time Constants

"""
Offset between Julian Date and Modified Julian Date. Units: *days*
"""
JD_MJD_OFFSET = 2400000.5

"""
Modified Julian Date of the J2000.0 epoch (2000-01-01 12:00:00 TT). Units: *days*
"""
MJD2000 = 51544.5

"""
Number of SI seconds in a day. Units: *s*
"""
SECONDS_PER_DAY = 86400.0

# Physical Constants
"""
Astronomical Unit. TDB-compatible value. Units: *m*

References:

1. P. Gérard and B. Luzum, *IERS Technical Note 36*, 2010
"""
AU = 1.49597870700e11  # [m] Astronomical Unit IAU 2010

# Earth Constants
"""
Earth's equatorial radius. [m]

References:

1. GGM05s Gravity Model
"""
R_EARTH = 6.378136300e6  # [m] GGM05s Value

"""
Earth's Gravitational constant [m^3/s^2]

References:

1. O. Montenbruck, and E. Gill, *Satellite Orbits: Models, Methods and
Applications*, 2012.
"""
GM_EARTH = 3.986004415e14  # [m^3/s^2] GGM05s Value

"""
Earth's second zonal harmonic (unnormalized). [dimensionless]

References:

1. GGM05s Gravity Model.
"""
J2_EARTH = 0.0010826358191967  # [] GGM05s value

"""
Earth axial rotation rate. [rad/s]

References:

1. D. Vallado, *Fundamentals of Astrodynamics and Applications (4th Ed.)*, p. 222, 2010
"""
OMEGA_EARTH = 7.292115146706979e-5  # [rad/s]

# Sun Constants
"""
Gravitational constant of the Sun. [m^3/s^2]
"""
GM_SUN = 132712440041.939400 * 1e9

"""
Nominal solar radiation pressure at 1 AU. [N/m^2]
"""
P_SUN = 4.560e-6  # (~1367 W/m^2)

# Moon Constants
"""
Gravitational constant of the Moon. [m^3/s^2]
"""
GM_MOON = 4902.800066 * 1e9

# Propagator defaults
"""
Placeholder spacecraft mass used when none is supplied. [kg]
"""
DEFAULT_MASS = 1000.0
