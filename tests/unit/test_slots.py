"""Generación de slots libres."""
from datetime import time, timedelta

import pytest

from clinic_scheduler.scheduling import (
    AppointmentConflictIndex,
    AppointmentStatus,
    InvalidDuration,
    Service,
    ShiftCalendar,
    generate_slots,
)
from clinic_scheduler.scheduling.timeutils import contains, overlaps

from tests.helpers import MONDAY, TODAY, interval, make_appt, make_week

CONSULT = Service(id=1, duration_minutes=30, name="Consulta")
EMPTY = AppointmentConflictIndex()


def _starts(slots):
    return [s.start.strftime("%H:%M") for s in slots]


def test_empty_morning_yields_eleven_slots(monday_calendar):
    slots = list(generate_slots(monday_calendar, EMPTY, 1, TODAY, CONSULT))
    assert len(slots) == 11
    assert _starts(slots)[:3] == ["09:00", "09:15", "09:30"]
    assert slots[-1] == interval("11:30", "12:00")


def test_existing_appointment_removes_overlapping_slots(monday_calendar):
    conflicts = AppointmentConflictIndex([make_appt(1, "10:00", "10:30")])
    starts = _starts(generate_slots(monday_calendar, conflicts, 1, TODAY, CONSULT))
    for taken in ("09:45", "10:00", "10:15"):
        assert taken not in starts
    assert "09:30" in starts
    assert "10:30" in starts
    assert len(starts) == 8


def test_cancelled_appointment_frees_the_slot(monday_calendar):
    conflicts = AppointmentConflictIndex([
        make_appt(1, "10:00", "10:30", status=AppointmentStatus.cancelled),
    ])
    assert len(list(generate_slots(monday_calendar, conflicts, 1, TODAY, CONSULT))) == 11


def test_other_staff_bookings_ignored(monday_calendar):
    conflicts = AppointmentConflictIndex([make_appt(1, "09:00", "12:00", staff_id=99)])
    assert len(list(generate_slots(monday_calendar, conflicts, 1, TODAY, CONSULT))) == 11


def test_same_inputs_same_output(monday_calendar):
    conflicts = AppointmentConflictIndex([make_appt(1, "09:30", "10:15"), make_appt(2, "11:00", "11:10")])
    first = list(generate_slots(monday_calendar, conflicts, 1, TODAY, CONSULT))
    second = list(generate_slots(monday_calendar, conflicts, 1, TODAY, CONSULT))
    assert first == second


def test_every_slot_fits_and_is_free(monday_calendar):
    booked = [make_appt(1, "09:10", "09:40"), make_appt(2, "10:50", "11:05")]
    conflicts = AppointmentConflictIndex(booked)
    shift = monday_calendar.shift_for(TODAY).window
    slots = list(generate_slots(monday_calendar, conflicts, 1, TODAY, CONSULT))
    assert slots
    for slot in slots:
        assert contains(shift, slot)
        assert slot.duration_minutes == 30
        assert not any(overlaps(slot, b.interval) for b in booked)


def test_service_longer_than_shift_yields_nothing():
    cal = ShiftCalendar(make_week({MONDAY: ("09:00", "09:20")}))
    assert list(generate_slots(cal, EMPTY, 1, TODAY, CONSULT)) == []


def test_service_exactly_shift_length():
    cal = ShiftCalendar(make_week({MONDAY: ("09:00", "09:30")}))
    assert list(generate_slots(cal, EMPTY, 1, TODAY, CONSULT)) == [interval("09:00", "09:30")]


def test_day_without_shift_yields_nothing(monday_calendar):
    assert list(generate_slots(monday_calendar, EMPTY, 1, TODAY + timedelta(days=1), CONSULT)) == []


def test_custom_granularity(monday_calendar):
    starts = _starts(generate_slots(monday_calendar, EMPTY, 1, TODAY, CONSULT, granularity_minutes=60))
    assert starts == ["09:00", "10:00", "11:00"]


def test_late_shift_does_not_cross_midnight():
    cal = ShiftCalendar(make_week({MONDAY: ("22:00", "23:59")}))
    slots = list(generate_slots(cal, EMPTY, 1, TODAY, CONSULT))
    assert slots[-1].end <= time(23, 59)


@pytest.mark.parametrize("granularity", [0, -15])
def test_bad_granularity(monday_calendar, granularity):
    with pytest.raises(InvalidDuration):
        list(generate_slots(monday_calendar, EMPTY, 1, TODAY, CONSULT, granularity))


@pytest.mark.parametrize("minutes", [0, -30, 12.5, True])
def test_bad_service_duration(minutes):
    with pytest.raises(InvalidDuration):
        Service(id=1, duration_minutes=minutes)


def test_break_removes_slots():
    cal = ShiftCalendar(make_week({MONDAY: ("09:00", "14:00")}, breaks={MONDAY: ("12:00", "13:00")}))
    starts = _starts(generate_slots(cal, EMPTY, 1, TODAY, CONSULT))
    for blocked in ("11:45", "12:00", "12:15", "12:30", "12:45"):
        assert blocked not in starts
    assert "11:30" in starts
    assert "13:00" in starts
    # 09:00..11:30 (11) + 13:00..13:30 (3)
    assert len(starts) == 14


def test_break_and_bookings_together():
    cal = ShiftCalendar(make_week({MONDAY: ("09:00", "14:00")}, breaks={MONDAY: ("12:00", "13:00")}))
    conflicts = AppointmentConflictIndex([make_appt(1, "11:30", "12:00"), make_appt(2, "12:30", "13:15")])
    slots = list(generate_slots(cal, conflicts, 1, TODAY, CONSULT))
    starts = _starts(slots)
    assert starts[-2:] == ["13:15", "13:30"]
    assert "11:30" not in starts
    assert "13:00" not in starts
    for slot in slots:
        assert cal.is_available(TODAY, slot)
        assert not conflicts.has_conflict(1, TODAY, slot)
