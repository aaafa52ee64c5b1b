"""The epoch module provides the ``Epoch`` class for representing instants in time.

The Epoch class uses an internal representation of an integer Modified
Julian Day number and a double-precision number of seconds within that
day.  Keeping the day count separate from the seconds gives sub-
microsecond resolution over centuries, which matters because the
propagators compare integration times against reinitialization
boundaries.

Unlike the JAX-traceable array code elsewhere in the package, epochs
are plain Python values: they drive the Python-level integration loop
and are converted to a scalar ``seconds_since_j2000()`` before entering
any compiled kernel.

Equality holds within a tolerance of 1e-6 s, which is not transitive, so
epochs are unhashable and cannot be used as set members or dict keys.

.. note::

    No time-scale distinction is made.  UTC is assumed to approximate TT,
    which is adequate for the low-precision ephemerides used by the force
    models.
"""

from __future__ import annotations

import math
import re

from .constants import JD_MJD_OFFSET, MJD2000, SECONDS_PER_DAY

# Integer MJD of the day containing the J2000.0 epoch (2000-01-01 12:00:00)
_MJD_J2000_DAY = int(math.floor(MJD2000))

# Seconds into that day at which J2000.0 occurs
_J2000_SECONDS = (MJD2000 - _MJD_J2000_DAY) * SECONDS_PER_DAY

# Tolerance for Epoch equality comparisons [s]
_EQ_TOL = 1e-6

# Valid ISO 8601 epoch string patterns
_EPOCH_PATTERNS = [
    # YYYY-MM-DD
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})$'),
    # YYYY-MM-DDTHH:MM:SSZ
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})Z$'),
    # YYYY-MM-DDTHH:MM:SS.fffZ
    re.compile(r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d+)Z$'),
]


def caldate_to_mjd(year: int, month: int, day: int) -> int:
    """Modified Julian Day number of 00:00 on a Gregorian calendar date.

    Args:
        year: Year.
        month: Month (1-12).
        day: Day of month.

    Returns:
        int: MJD of midnight starting that day.

    References:
        J. Meeus, *Astronomical Algorithms*, 2nd ed., 1998, ch. 7.
    """
    if month <= 2:
        year -= 1
        month += 12
    a = year // 100
    b = 2 - a + a // 4
    jd = (math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1))
          + day + b - 1524.5)
    return int(round(jd - JD_MJD_OFFSET))


def mjd_to_caldate(mjd: int) -> tuple[int, int, int]:
    """Gregorian calendar date of an integer Modified Julian Day.

    Args:
        mjd: Modified Julian Day number.

    Returns:
        tuple: ``(year, month, day)``.
    """
    z = int(mjd + JD_MJD_OFFSET + 0.5)
    if z < 2299161:
        a = z
    else:
        alpha = int((z - 1867216.25) / 36524.25)
        a = z + 1 + alpha - alpha // 4
    b = a + 1524
    c = int((b - 122.1) / 365.25)
    d = int(365.25 * c)
    e = int((b - d) / 30.6001)

    day = b - d - int(30.6001 * e)
    month = e - 1 if e < 14 else e - 13
    year = c - 4716 if month > 2 else c - 4715
    return year, month, day


class Epoch:
    """Represents a single instant in time.

    Epochs are immutable: arithmetic returns new instances.  Subtracting
    two epochs yields the difference in seconds.

    Constructors:
        Epoch(2018, 1, 1)
        Epoch(2018, 1, 1, 12, 0, 0.0)
        Epoch("2018-01-01T12:00:00Z")
        Epoch(other_epoch)
    """

    __slots__ = ('_mjd', '_seconds')

    def __init__(self, *args: int | float | str | Epoch) -> None:
        """Initialize Epoch. Supports multiple constructor forms.

        Args:
            *args: Either (year, month, day[, hour, minute, second]),
                a string in ISO 8601 format, or another Epoch instance.
        """
        if len(args) == 1:
            if isinstance(args[0], str):
                self._init_string(args[0])
            elif isinstance(args[0], Epoch):
                self._mjd = args[0]._mjd
                self._seconds = args[0]._seconds
            else:
                raise ValueError(f"Cannot construct Epoch from {type(args[0])}")
        elif 3 <= len(args) <= 6:
            self._init_date(*args)
        else:
            raise ValueError(
                "Epoch requires date components (3-6 args), a string, or an Epoch"
            )

    @classmethod
    def _from_internal(cls, mjd: int, seconds: float) -> Epoch:
        """Create an Epoch from a day number and seconds, normalizing them."""
        obj = object.__new__(cls)
        day_offset = math.floor(seconds / SECONDS_PER_DAY)
        obj._mjd = int(mjd + day_offset)
        obj._seconds = float(seconds - day_offset * SECONDS_PER_DAY)
        return obj

    @classmethod
    def from_seconds_since_j2000(cls, seconds: float) -> Epoch:
        """Create an Epoch offset from J2000.0.

        Args:
            seconds: Seconds elapsed since 2000-01-01T12:00:00.

        Returns:
            Epoch: The corresponding instant.
        """
        return cls._from_internal(_MJD_J2000_DAY, _J2000_SECONDS + float(seconds))

    def _init_date(self, year, month, day, hour=0, minute=0, second=0.0):
        mjd = caldate_to_mjd(int(year), int(month), int(day))
        seconds = hour * 3600.0 + minute * 60.0 + float(second)
        day_offset = math.floor(seconds / SECONDS_PER_DAY)
        self._mjd = mjd + day_offset
        self._seconds = seconds - day_offset * SECONDS_PER_DAY

    def _init_string(self, string):
        for pattern in _EPOCH_PATTERNS:
            m = pattern.match(string)
            if m:
                groups = m.groups()
                hour, minute, second = 0, 0, 0.0
                if len(groups) >= 6:
                    hour = int(groups[3])
                    minute = int(groups[4])
                    second = float(groups[5])
                if len(groups) == 7:
                    second += float(f"0.{groups[6]}")
                self._init_date(int(groups[0]), int(groups[1]), int(groups[2]),
                                hour, minute, second)
                return

        raise ValueError(
            f'Invalid Epoch string: "{string}" is not ISO 8601 compliant'
        )

    # Arithmetic operators

    def __add__(self, delta: float) -> Epoch:
        return Epoch._from_internal(self._mjd, self._seconds + float(delta))

    def __radd__(self, delta: float) -> Epoch:
        return self.__add__(delta)

    def __sub__(self, other: Epoch | float) -> Epoch | float:
        """Subtract seconds or compute the difference between Epochs.

        Args:
            other: If Epoch, returns the time difference in seconds.
                If numeric, returns a new Epoch with seconds subtracted.

        Returns:
            float or Epoch: Time difference in seconds, or new Epoch.
        """
        if isinstance(other, Epoch):
            return ((self._mjd - other._mjd) * SECONDS_PER_DAY
                    + (self._seconds - other._seconds))
        return Epoch._from_internal(self._mjd, self._seconds - float(other))

    # Comparison operators (equal within a microsecond)

    def __eq__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return abs(self - other) <= _EQ_TOL

    def __ne__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return not self.__eq__(other)

    def __lt__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return (self - other) < -_EQ_TOL

    def __le__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return (self - other) <= _EQ_TOL

    def __gt__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return (self - other) > _EQ_TOL

    def __ge__(self, other):
        if not isinstance(other, Epoch):
            return NotImplemented
        return (self - other) >= -_EQ_TOL

    # Time properties

    def seconds_since_j2000(self) -> float:
        """Seconds elapsed since J2000.0 (2000-01-01T12:00:00)."""
        return (self._mjd - _MJD_J2000_DAY) * SECONDS_PER_DAY + self._seconds - _J2000_SECONDS

    def julian_centuries(self) -> float:
        """Julian centuries elapsed since J2000.0."""
        return self.seconds_since_j2000() / (SECONDS_PER_DAY * 36525.0)

    def mjd(self) -> float:
        """Return the Modified Julian Date."""
        return self._mjd + self._seconds / SECONDS_PER_DAY

    def jd(self) -> float:
        """Return the Julian Date."""
        return self.mjd() + JD_MJD_OFFSET

    def caldate(self) -> tuple[int, int, int, int, int, float]:
        """Return the calendar date components.

        Returns:
            tuple: (year, month, day, hour, minute, second) where second
                includes fractional part.
        """
        year, month, day = mjd_to_caldate(self._mjd)
        hour = int(self._seconds // 3600)
        minute = int((self._seconds - hour * 3600) // 60)
        second = self._seconds - hour * 3600 - minute * 60
        return year, month, day, hour, minute, second

    # String representations

    def __str__(self):
        year, month, day, hour, minute, second = self.caldate()
        return (f'{year:04d}-{month:02d}-{day:02d}T'
                f'{hour:02d}:{minute:02d}:{second:06.3f}Z')

    def __repr__(self):
        return f'Epoch(_mjd={self._mjd}, _seconds={self._seconds})'
