"""Builders for engine value objects used across the test suite."""
from datetime import date, time

from clinic_scheduler.scheduling import (
    Appointment,
    AppointmentStatus,
    TimeInterval,
    WeeklyShift,
)

# Lunes
TODAY = date(2024, 1, 8)
SUNDAY, MONDAY, TUESDAY, SATURDAY = 0, 1, 2, 6


def t(value: str) -> time:
    h, m = map(int, value.split(":"))
    return time(h, m)


def interval(start: str, end: str) -> TimeInterval:
    return TimeInterval(t(start), t(end))


def make_week(active: dict, breaks: dict = None) -> list:
    """active: {day_of_week: ("HH:MM", "HH:MM")}; the rest are inactive.
    breaks: {day_of_week: ("HH:MM", "HH:MM")} optional per-day break."""
    breaks = breaks or {}
    week = []
    for d in range(7):
        start, end = active.get(d, ("09:00", "17:00"))
        break_window = interval(*breaks[d]) if d in breaks else None
        week.append(WeeklyShift(
            day_of_week=d,
            window=interval(start, end),
            is_active=d in active,
            break_window=break_window,
        ))
    return week


def make_appt(appt_id, start, end, staff_id=1, day=TODAY,
              status=AppointmentStatus.confirmed, patient_id=10):
    return Appointment(
        id=appt_id,
        staff_id=staff_id,
        patient_id=patient_id,
        service_id=1,
        date=day,
        interval=interval(start, end),
        status=status,
    )
