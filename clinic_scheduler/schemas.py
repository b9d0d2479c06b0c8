from __future__ import annotations
import datetime as dt
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field

from .models import StaffRole
from .scheduling import Actor, Appointment, AppointmentStatus, BookingRequest, Role, WeeklyShift
from .scheduling.timeutils import to_time

# Hora local de la clínica: sin offset y sin microsegundos (422 si trae tzinfo)
LocalTime = Annotated[dt.time, AfterValidator(to_time)]


class ActorIn(BaseModel):
    role: Role
    staff_id: int | None = None
    patient_id: int | None = None

    def to_actor(self) -> Actor:
        return Actor(role=self.role, staff_id=self.staff_id, patient_id=self.patient_id)


class BookRequest(BaseModel):
    staff_id: int
    patient_id: int
    service_id: int
    date: dt.date
    start_time: LocalTime
    notes: str = ""

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            staff_id=self.staff_id,
            patient_id=self.patient_id,
            service_id=self.service_id,
            date=self.date,
            requested_start=self.start_time,
            notes=self.notes,
        )


class WalkinRequest(BaseModel):
    actor: ActorIn
    staff_id: int
    patient_id: int
    service_id: int
    start_time: LocalTime
    # Por defecto hoy (TZ de la clínica)
    date: Optional[dt.date] = None
    notes: str = ""


class StatusChangeRequest(BaseModel):
    actor: ActorIn
    status: AppointmentStatus
    reason: str | None = None


class RescheduleRequest(BaseModel):
    actor: ActorIn
    new_date: dt.date
    new_start_time: LocalTime
    new_staff_id: int | None = None


class AppointmentOut(BaseModel):
    id: int
    staff_id: int
    patient_id: int
    service_id: int
    date: dt.date
    start_time: str
    end_time: str
    status: AppointmentStatus
    notes: str = ""
    cancellation_reason: str | None = None

    @classmethod
    def from_domain(cls, appt: Appointment) -> "AppointmentOut":
        return cls(
            id=appt.id,
            staff_id=appt.staff_id,
            patient_id=appt.patient_id,
            service_id=appt.service_id,
            date=appt.date,
            start_time=appt.interval.start.strftime("%H:%M"),
            end_time=appt.interval.end.strftime("%H:%M"),
            status=appt.status,
            notes=appt.notes,
            cancellation_reason=appt.reason,
        )


class SlotOut(BaseModel):
    start: str
    end: str


class SlotsResponse(BaseModel):
    staff_id: int
    service_id: int
    date: dt.date
    duration_minutes: int
    slots: list[SlotOut]


class ShiftIn(BaseModel):
    day_of_week: int  # 0=domingo
    start_time: LocalTime
    end_time: LocalTime
    is_active: bool = True
    break_start_time: Optional[LocalTime] = None
    break_end_time: Optional[LocalTime] = None


class ScheduleIn(BaseModel):
    days: list[ShiftIn]


class ShiftOut(BaseModel):
    day_of_week: int
    start_time: str
    end_time: str
    is_active: bool
    break_start_time: str | None = None
    break_end_time: str | None = None

    @classmethod
    def from_domain(cls, shift: WeeklyShift) -> "ShiftOut":
        return cls(
            day_of_week=shift.day_of_week,
            start_time=shift.window.start.strftime("%H:%M"),
            end_time=shift.window.end.strftime("%H:%M"),
            is_active=shift.is_active,
            break_start_time=shift.break_window.start.strftime("%H:%M") if shift.break_window else None,
            break_end_time=shift.break_window.end.strftime("%H:%M") if shift.break_window else None,
        )


class ScheduleOut(BaseModel):
    staff_id: int
    is_default: bool
    days: list[ShiftOut]


class OnDutyOut(BaseModel):
    staff_id: int
    name: str
    role: StaffRole
    start_time: str
    end_time: str


class StaffIn(BaseModel):
    name: str
    email: str | None = None
    role: StaffRole = StaffRole.doctor


class ServiceIn(BaseModel):
    name: str
    duration_minutes: int = Field(gt=0)


class PatientIn(BaseModel):
    name: str
    contact: str
    consent_messages: bool = True


class CreatedResponse(BaseModel):
    id: int
