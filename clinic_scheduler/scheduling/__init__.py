"""
Motor de agenda de la clínica.

- timeutils.py:   aritmética de horas e intervalos semiabiertos
- availability.py: calendario semanal de turnos (ShiftCalendar)
- overlap.py:     índice de citas reservadas por (personal, fecha)
- slots.py:       generación de slots libres
- validation.py:  reglas de reserva y de cambio de estado

Todo es puro: sin BD, sin red, sin logs.
"""
from .availability import ShiftCalendar, build_week, default_week
from .domain import (
    ACTIVE_STATUSES,
    Actor,
    Appointment,
    AppointmentStatus,
    BookingRequest,
    Role,
    Service,
    TimeInterval,
    WeeklyShift,
)
from .errors import (
    DateOutOfRange,
    IllegalTransition,
    IncompleteSchedule,
    InvalidDuration,
    InvalidInterval,
    NotOwner,
    OutsideShift,
    ReasonRequired,
    SchedulingError,
    SlotTaken,
)
from .overlap import AppointmentConflictIndex
from .slots import DEFAULT_GRANULARITY_MINUTES, generate_slots
from .validation import BOOKING_WINDOW_DAYS, TRANSITIONS, BookingValidator, can_transition

__all__ = [
    "ACTIVE_STATUSES",
    "Actor",
    "Appointment",
    "AppointmentConflictIndex",
    "AppointmentStatus",
    "BOOKING_WINDOW_DAYS",
    "BookingRequest",
    "BookingValidator",
    "DEFAULT_GRANULARITY_MINUTES",
    "DateOutOfRange",
    "IllegalTransition",
    "IncompleteSchedule",
    "InvalidDuration",
    "InvalidInterval",
    "NotOwner",
    "OutsideShift",
    "ReasonRequired",
    "Role",
    "SchedulingError",
    "Service",
    "ShiftCalendar",
    "SlotTaken",
    "TRANSITIONS",
    "TimeInterval",
    "WeeklyShift",
    "build_week",
    "can_transition",
    "default_week",
    "generate_slots",
]
