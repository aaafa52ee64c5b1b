"""Tests for the dsstjax.epoch module."""

import pytest

from dsstjax.epoch import Epoch, caldate_to_mjd, mjd_to_caldate


class TestCalendarConversions:
    def test_j2000_day(self):
        assert caldate_to_mjd(2000, 1, 1) == 51544

    def test_leap_day(self):
        assert caldate_to_mjd(2024, 3, 1) - caldate_to_mjd(2024, 2, 28) == 2

    @pytest.mark.parametrize("date", [(2000, 1, 1), (2003, 9, 16), (2024, 2, 29), (1980, 12, 31)])
    def test_mjd_roundtrip(self, date):
        assert mjd_to_caldate(caldate_to_mjd(*date)) == date


class TestEpochConstruction:
    def test_j2000_seconds_zero(self):
        assert Epoch(2000, 1, 1, 12, 0, 0.0).seconds_since_j2000() == pytest.approx(0.0, abs=1e-9)

    def test_from_string(self):
        assert Epoch("2003-09-16T00:00:00Z") == Epoch(2003, 9, 16)

    def test_from_string_fraction(self):
        epc = Epoch("2003-09-16T01:02:03.5Z")
        assert epc.caldate()[3:5] == (1, 2)
        assert epc.caldate()[5] == pytest.approx(3.5)

    def test_invalid_string(self):
        with pytest.raises(ValueError, match="ISO 8601"):
            Epoch("16/09/2003")

    def test_invalid_args(self):
        with pytest.raises(ValueError):
            Epoch(2003, 9)

    def test_copy(self):
        epc = Epoch(2003, 9, 16, 6, 0, 0.0)
        assert Epoch(epc) == epc

    def test_from_seconds_since_j2000(self):
        epc = Epoch.from_seconds_since_j2000(86400.0)
        assert epc == Epoch(2000, 1, 2, 12, 0, 0.0)


class TestEpochArithmetic:
    def test_add_seconds_across_day(self):
        epc = Epoch(2003, 9, 16, 23, 0, 0.0) + 7200.0
        assert epc == Epoch(2003, 9, 17, 1, 0, 0.0)

    def test_subtract_seconds(self):
        epc = Epoch(2003, 9, 16) - 60.0
        assert epc == Epoch(2003, 9, 15, 23, 59, 0.0)

    def test_difference(self):
        assert Epoch(2003, 9, 17) - Epoch(2003, 9, 16) == pytest.approx(86400.0)

    def test_ordering(self):
        epc = Epoch(2003, 9, 16)
        assert epc < epc + 1.0
        assert epc + 1.0 > epc
        assert epc <= epc + 1e-9
        assert epc >= epc - 1e-9

    def test_sub_microsecond_equality(self):
        epc = Epoch(2003, 9, 16)
        assert epc == epc + 1e-7
        assert epc != epc + 1e-3

    def test_unhashable(self):
        # 0.4999995 s and 0.5000004 s compare equal but straddle any rounding key
        early = Epoch(2003, 9, 16, 0, 0, 0.4999995)
        late = Epoch(2003, 9, 16, 0, 0, 0.5000004)
        assert early == late
        with pytest.raises(TypeError):
            hash(early)
        with pytest.raises(TypeError):
            {late: 1}

    def test_str(self):
        assert str(Epoch(2003, 9, 16, 1, 2, 3.0)) == "2003-09-16T01:02:03.000Z"

    def test_julian_centuries(self):
        epc = Epoch(2000, 1, 1, 12, 0, 0.0) + 36525.0 * 86400.0
        assert epc.julian_centuries() == pytest.approx(1.0)
