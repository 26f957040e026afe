"""
Tests for the half-open interval helpers (utils/date_ranges.py)
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from datetime import date, datetime, timedelta

from utils.date_ranges import overlaps, parse_optional_date, parse_to_date, stay_nights


def d(day, month=1, year=2024):
    return date(year, month, day)


class TestOverlaps:
    """Stays occupy [check_in, check_out)"""

    def test_back_to_back_stays_do_not_overlap(self):
        assert overlaps(d(1), d(5), d(5), d(8)) is False
        assert overlaps(d(5), d(8), d(1), d(5)) is False

    def test_one_shared_night_overlaps(self):
        assert overlaps(d(1), d(5), d(4), d(8)) is True

    def test_containment_both_ways(self):
        assert overlaps(d(1), d(10), d(3), d(5)) is True
        assert overlaps(d(3), d(5), d(1), d(10)) is True

    def test_identical_ranges(self):
        assert overlaps(d(1), d(5), d(1), d(5)) is True

    def test_disjoint_ranges(self):
        assert overlaps(d(1), d(3), d(10), d(12)) is False

    def test_matches_shared_nights_over_a_small_calendar(self):
        """overlaps() is true exactly when the two stays share at least one night"""
        days = [d(1) + timedelta(days=i) for i in range(6)]
        ranges = [(a, b) for a in days for b in days if a < b]

        def nights(start, end):
            return {start + timedelta(days=i) for i in range((end - start).days)}

        for existing in ranges:
            for candidate in ranges:
                expected = bool(nights(*existing) & nights(*candidate))
                assert overlaps(*existing, *candidate) is expected, (existing, candidate)
                assert overlaps(*candidate, *existing) is expected


class TestParsing:

    def test_iso_date(self):
        assert parse_to_date("2024-01-05") == d(5)

    def test_iso_timestamp_from_browser(self):
        assert parse_to_date("2024-01-01T00:00:00.000Z") == d(1)

    def test_datetime_and_date_passthrough(self):
        assert parse_to_date(datetime(2024, 1, 3, 14, 0)) == d(3)
        assert parse_to_date(d(3)) == d(3)

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            parse_to_date("not a date")
        with pytest.raises(ValueError):
            parse_to_date(None)
        with pytest.raises(ValueError):
            parse_to_date(12345)

    def test_optional(self):
        assert parse_optional_date(None) is None
        assert parse_optional_date("") is None
        assert parse_optional_date("2024-02-29") == date(2024, 2, 29)

    def test_stay_nights(self):
        assert stay_nights(d(1), d(5)) == 4
