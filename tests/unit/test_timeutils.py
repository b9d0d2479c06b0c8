"""Aritmética de horas del día."""
from datetime import date, time, timedelta, timezone

import pytest

from clinic_scheduler.scheduling import InvalidDuration, InvalidInterval, TimeInterval
from clinic_scheduler.scheduling.timeutils import (
    Ordering,
    add_minutes,
    compare,
    contains,
    day_of_week,
    minutes_between,
    overlaps,
    to_time,
)

from tests.helpers import interval


class TestToTime:
    def test_accepts_strings(self):
        assert to_time("09:30") == time(9, 30)
        assert to_time(" 17:05:10 ") == time(17, 5, 10)

    def test_accepts_timedelta_from_midnight(self):
        assert to_time(timedelta(hours=8, minutes=15)) == time(8, 15)

    def test_drops_microseconds(self):
        assert to_time(time(9, 0, 0, 500)) == time(9, 0)

    def test_rejects_offset_aware_time(self):
        with pytest.raises(ValueError):
            to_time(time(10, 0, tzinfo=timezone.utc))

    @pytest.mark.parametrize("bad", ["25:00", "9h", "", 930, timedelta(days=1)])
    def test_rejects_garbage(self, bad):
        with pytest.raises(ValueError):
            to_time(bad)


class TestAddMinutes:
    def test_simple(self):
        assert add_minutes(time(9, 45), 30) == time(10, 15)

    def test_zero_is_identity(self):
        assert add_minutes(time(11, 0), 0) == time(11, 0)

    def test_last_second_of_day_is_fine(self):
        assert add_minutes(time(23, 0, 59), 59) == time(23, 59, 59)

    def test_crossing_midnight_fails(self):
        with pytest.raises(InvalidDuration):
            add_minutes(time(23, 45), 30)

    def test_negative_before_midnight_fails(self):
        with pytest.raises(InvalidDuration):
            add_minutes(time(0, 10), -15)


def test_minutes_between_and_compare():
    assert minutes_between(time(9, 0), time(12, 0)) == 180
    assert minutes_between(time(12, 0), time(9, 0)) == -180
    assert compare(time(9, 0), time(9, 1)) is Ordering.BEFORE
    assert compare(time(9, 1), time(9, 0)) is Ordering.AFTER
    assert compare(time(9, 0), time(9, 0)) is Ordering.EQUAL


class TestOverlaps:
    def test_touching_intervals_do_not_overlap(self):
        assert not overlaps(interval("09:30", "10:00"), interval("10:00", "10:30"))
        assert not overlaps(interval("10:00", "10:30"), interval("09:30", "10:00"))

    def test_partial_overlap(self):
        assert overlaps(interval("09:45", "10:15"), interval("10:00", "10:30"))

    def test_nested(self):
        assert overlaps(interval("09:00", "12:00"), interval("10:00", "10:15"))

    def test_is_symmetric(self):
        a, b = interval("08:00", "09:10"), interval("09:00", "09:30")
        assert overlaps(a, b) == overlaps(b, a)


def test_contains_includes_edges():
    shift = interval("09:00", "12:00")
    assert contains(shift, interval("09:00", "09:30"))
    assert contains(shift, interval("11:30", "12:00"))
    assert not contains(shift, interval("11:45", "12:15"))
    assert not contains(shift, interval("08:45", "09:15"))


def test_day_of_week_starts_on_sunday():
    assert day_of_week(date(2024, 1, 7)) == 0  # domingo
    assert day_of_week(date(2024, 1, 8)) == 1  # lunes
    assert day_of_week(date(2024, 1, 13)) == 6  # sábado


class TestTimeInterval:
    def test_duration_and_str(self):
        iv = TimeInterval.from_start(time(9, 15), 45)
        assert iv.end == time(10, 0)
        assert iv.duration_minutes == 45
        assert str(iv) == "09:15-10:00"

    @pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("10:00", "09:00")])
    def test_empty_or_inverted_rejected(self, start, end):
        with pytest.raises(InvalidInterval):
            interval(start, end)
