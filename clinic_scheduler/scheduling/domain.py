# clinic_scheduler/scheduling/domain.py
from __future__ import annotations
import enum
from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from .errors import IncompleteSchedule, InvalidDuration, InvalidInterval
from .timeutils import add_minutes, contains, minutes_between


class AppointmentStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"
    walkin = "walkin"


# Estados que ocupan agenda; cancelled/completed nunca bloquean slots
ACTIVE_STATUSES = frozenset({
    AppointmentStatus.pending,
    AppointmentStatus.confirmed,
    AppointmentStatus.walkin,
})


class Role(str, enum.Enum):
    patient = "patient"
    doctor = "doctor"
    nurse = "nurse"
    admin = "admin"


STAFF_ROLES = frozenset({Role.doctor, Role.nurse, Role.admin})
# Recepción: puede operar citas de cualquier médico
FRONT_DESK_ROLES = frozenset({Role.nurse, Role.admin})


@dataclass(frozen=True)
class TimeInterval:
    """Rango [start, end) dentro de un día implícito."""
    start: time
    end: time

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidInterval(
                f"Intervalo inválido {self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"
            )

    @classmethod
    def from_start(cls, start: time, minutes: int) -> "TimeInterval":
        return cls(start, add_minutes(start, minutes))

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start, self.end)

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


@dataclass(frozen=True)
class WeeklyShift:
    day_of_week: int  # 0=domingo
    window: TimeInterval
    is_active: bool = True
    # Descanso opcional dentro del turno (p. ej. comida); no se agenda ahí
    break_window: Optional[TimeInterval] = None

    def __post_init__(self):
        if not isinstance(self.day_of_week, int) or not 0 <= self.day_of_week <= 6:
            raise IncompleteSchedule(f"day_of_week fuera de rango: {self.day_of_week}")
        if self.break_window is not None and not contains(self.window, self.break_window):
            raise IncompleteSchedule(
                f"Descanso {self.break_window} fuera del turno {self.window} (día {self.day_of_week})"
            )


@dataclass(frozen=True)
class Service:
    id: int
    duration_minutes: int
    name: str = ""

    def __post_init__(self):
        d = self.duration_minutes
        if isinstance(d, bool) or not isinstance(d, int) or d <= 0:
            raise InvalidDuration(f"Duración de servicio inválida: {d!r}")


@dataclass(frozen=True)
class Appointment:
    id: Optional[int]
    staff_id: int
    patient_id: int
    service_id: int
    date: date
    interval: TimeInterval
    status: AppointmentStatus = AppointmentStatus.pending
    notes: str = ""
    reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


@dataclass(frozen=True)
class BookingRequest:
    staff_id: int
    patient_id: int
    service_id: int
    date: date
    requested_start: time
    notes: str = ""


@dataclass(frozen=True)
class Actor:
    role: Role
    staff_id: Optional[int] = None
    patient_id: Optional[int] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_front_desk(self) -> bool:
        return self.role in FRONT_DESK_ROLES
