"""
Validación de reservas y de cambios de estado.

Reglas de reserva, en orden (la primera que falla gana):
    1. DateRange          hoy <= fecha <= hoy + ventana      -> DateOutOfRange
    2. IntervalValidity   [inicio, inicio + duración) válido  -> InvalidInterval
    3. ShiftAvailability  dentro del turno de ese día         -> OutsideShift
    4. NoConflict         sin choque con citas activas        -> SlotTaken

Reglas de mutación sobre una cita existente:
    5. Ownership          personal asignado, paciente o recepción -> NotOwner
    6. StatusTransition   arista legal de TRANSITIONS            -> IllegalTransition
    7. Motivo obligatorio cuando el personal cancela             -> ReasonRequired

Nada aquí persiste ni registra logs; el llamador decide qué hacer con el
resultado o con la excepción.
"""
from __future__ import annotations
from datetime import date, time, timedelta
from typing import Dict, FrozenSet, Optional

from .availability import ShiftCalendar
from .domain import (
    ACTIVE_STATUSES,
    Actor,
    Appointment,
    AppointmentStatus,
    BookingRequest,
    Role,
    Service,
    TimeInterval,
)
from .errors import (
    DateOutOfRange,
    IllegalTransition,
    InvalidInterval,
    NotOwner,
    OutsideShift,
    ReasonRequired,
    SchedulingError,
    SlotTaken,
)
from .overlap import AppointmentConflictIndex

BOOKING_WINDOW_DAYS = 30

S = AppointmentStatus
TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    S.pending: frozenset({S.confirmed, S.cancelled}),
    S.confirmed: frozenset({S.completed, S.cancelled}),
    # Los walk-in normalmente los confirma recepción en el momento
    S.walkin: frozenset({S.confirmed, S.cancelled}),
    S.cancelled: frozenset(),
    S.completed: frozenset(),
}


def can_transition(current: AppointmentStatus, new: AppointmentStatus) -> bool:
    return new in TRANSITIONS.get(current, frozenset())


class BookingValidator:

    def __init__(
        self,
        calendar: ShiftCalendar,
        conflicts: AppointmentConflictIndex,
        today: date,
        booking_window_days: int = BOOKING_WINDOW_DAYS,
    ):
        self.calendar = calendar
        self.conflicts = conflicts
        self.today = today
        self.booking_window_days = booking_window_days

    # ===== Reglas 1-4 =====

    def check_date_range(self, d: date) -> None:
        last = self.today + timedelta(days=self.booking_window_days)
        if d < self.today or d > last:
            raise DateOutOfRange(
                f"La fecha {d.isoformat()} debe estar entre {self.today.isoformat()} y {last.isoformat()}"
            )

    @staticmethod
    def compute_interval(start: time, service: Service) -> TimeInterval:
        try:
            return TimeInterval.from_start(start, service.duration_minutes)
        except SchedulingError as e:
            raise InvalidInterval(e.detail)

    def check_slot(self, staff_id: int, d: date, interval: TimeInterval) -> None:
        if not self.calendar.is_available(d, interval):
            raise OutsideShift(f"{interval} no está dentro del turno del {d.isoformat()}")
        if self.conflicts.has_conflict(staff_id, d, interval):
            raise SlotTaken(f"El horario {interval} del {d.isoformat()} ya fue tomado")

    def validate_and_build(
        self,
        request: BookingRequest,
        service: Service,
        appointment_id: Optional[int] = None,
    ) -> Appointment:
        """Aplica reglas 1-4 y devuelve la cita pending con fin calculado."""
        self.check_date_range(request.date)
        return self._build(request, service, appointment_id, S.pending)

    def validate_walkin(
        self,
        request: BookingRequest,
        service: Service,
        appointment_id: Optional[int] = None,
    ) -> Appointment:
        """Walk-in: sólo para hoy; después las mismas reglas 2-4."""
        if request.date != self.today:
            raise DateOutOfRange(
                f"Un walk-in sólo puede agendarse para hoy ({self.today.isoformat()})"
            )
        return self._build(request, service, appointment_id, S.walkin)

    def _build(self, request, service, appointment_id, status) -> Appointment:
        interval = self.compute_interval(request.requested_start, service)
        self.check_slot(request.staff_id, request.date, interval)
        return Appointment(
            id=appointment_id,
            staff_id=request.staff_id,
            patient_id=request.patient_id,
            service_id=service.id,
            date=request.date,
            interval=interval,
            status=status,
            notes=request.notes or "",
        )

    # ===== Reglas 5-7 =====

    @staticmethod
    def check_ownership(appointment: Appointment, actor: Actor) -> None:
        if actor.is_front_desk:
            return
        if actor.role == Role.doctor and actor.staff_id is not None \
                and appointment.staff_id == actor.staff_id:
            return
        if actor.role == Role.patient and actor.patient_id is not None \
                and appointment.patient_id == actor.patient_id:
            return
        raise NotOwner(f"La cita {appointment.id} no pertenece a {actor.role.value}")

    @classmethod
    def validate_transition(
        cls,
        appointment: Appointment,
        actor: Actor,
        new_status: AppointmentStatus,
        reason: Optional[str] = None,
    ) -> None:
        """No depende del calendario ni del índice: se puede llamar sobre la clase."""
        cls.check_ownership(appointment, actor)
        if not can_transition(appointment.status, new_status):
            raise IllegalTransition(
                f"No se puede pasar de {appointment.status.value} a {new_status.value}"
            )
        if new_status == S.cancelled and actor.is_staff and not (reason or "").strip():
            raise ReasonRequired("El personal debe indicar el motivo del rechazo")

    def validate_reschedule(
        self,
        appointment: Appointment,
        actor: Actor,
        new_date: date,
        new_start: time,
        service: Service,
        new_staff_id: Optional[int] = None,
    ) -> Appointment:
        """
        Mueve una cita activa a otra fecha/hora (y opcionalmente a otro médico).

        El calendario y el índice de este validador deben ser los del personal
        destino, con la cita misma excluida del índice.
        """
        self.check_ownership(appointment, actor)
        if appointment.status not in ACTIVE_STATUSES:
            raise IllegalTransition(
                f"No se puede reprogramar una cita {appointment.status.value}"
            )
        staff_id = appointment.staff_id if new_staff_id is None else new_staff_id
        if staff_id != appointment.staff_id and not actor.is_front_desk:
            raise NotOwner("Sólo recepción puede reasignar la cita a otro médico")

        self.check_date_range(new_date)
        interval = self.compute_interval(new_start, service)
        self.check_slot(staff_id, new_date, interval)
        return Appointment(
            id=appointment.id,
            staff_id=staff_id,
            patient_id=appointment.patient_id,
            service_id=service.id,
            date=new_date,
            interval=interval,
            status=appointment.status,
            notes=appointment.notes,
            reason=appointment.reason,
        )
