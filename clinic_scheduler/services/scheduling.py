# clinic_scheduler/services/scheduling.py
"""
Operaciones de agenda expuestas a routers/UI.

Cada llamada arma ShiftCalendar y AppointmentConflictIndex frescos desde la
BD; no hay caché entre peticiones. Las escrituras bloquean la fila del
personal, revalidan dentro de la misma transacción y dejan que el índice
único de `appointments` sea la última barrera contra la doble reserva.
"""
from __future__ import annotations
import logging
from datetime import date, datetime, time
from typing import List, Optional, Sequence, Tuple

import pytz
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from .. import models
from ..scheduling import (
    Actor,
    Appointment,
    AppointmentConflictIndex,
    AppointmentStatus,
    BookingRequest,
    BookingValidator,
    NotOwner,
    SchedulingError,
    ShiftCalendar,
    SlotTaken,
    TimeInterval,
    WeeklyShift,
    generate_slots,
)
from .records import (
    RecordNotFound,
    get_appointment_row,
    get_service,
    get_shift_calendar,
    get_staff,
    list_appointments,
    to_domain_appointment,
    to_domain_service,
)

logger = logging.getLogger(__name__)


# ====== Utilidades de tiempo ======
def _local_tz():
    return pytz.timezone(settings.TIMEZONE)


def local_today() -> date:
    """Fecha de hoy en la TZ de la clínica."""
    return datetime.now(_local_tz()).date()


# ====== Helpers internos ======
def _validator_for(db: Session, staff_id: int, day: date, today: date,
                   exclude_ids: Sequence[int] = ()) -> BookingValidator:
    calendar = get_shift_calendar(db, staff_id)
    conflicts = AppointmentConflictIndex(list_appointments(db, staff_id, day), exclude_ids=exclude_ids)
    return BookingValidator(calendar, conflicts, today, settings.BOOKING_WINDOW_DAYS)


def _active_staff(db: Session, staff_id: int, for_update: bool = False) -> models.Staff:
    staff = get_staff(db, staff_id, for_update=for_update)
    if not staff.is_active:
        raise RecordNotFound("Staff", staff_id)
    return staff


def _ensure_patient(db: Session, patient_id: int) -> None:
    if db.get(models.Patient, patient_id) is None:
        raise RecordNotFound("Patient", patient_id)


def _commit_slot(db: Session, row: models.Appointment) -> models.Appointment:
    """Commit con el índice único como red final ante carreras."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            "Choque de reserva al commit: staff=%s date=%s start=%s",
            row.staff_id, row.appointment_date, row.start_time,
        )
        raise SlotTaken("Este horario acaba de ser tomado por otra reserva")
    db.refresh(row)
    return row


def _create(db: Session, request: BookingRequest, today: Optional[date], walkin: bool) -> Appointment:
    today = today or local_today()
    service = get_service(db, request.service_id)
    _ensure_patient(db, request.patient_id)
    _active_staff(db, request.staff_id, for_update=True)

    validator = _validator_for(db, request.staff_id, request.date, today)
    try:
        if walkin:
            appt = validator.validate_walkin(request, service)
        else:
            appt = validator.validate_and_build(request, service)
    except SchedulingError as e:
        db.rollback()
        logger.info("Reserva rechazada (%s): staff=%s date=%s start=%s",
                    e.code, request.staff_id, request.date, request.requested_start)
        raise

    row = models.Appointment(
        staff_id=appt.staff_id,
        patient_id=appt.patient_id,
        service_id=appt.service_id,
        appointment_date=appt.date,
        start_time=appt.interval.start,
        end_time=appt.interval.end,
        status=appt.status,
        notes=appt.notes,
    )
    db.add(row)
    row = _commit_slot(db, row)
    logger.info("Cita creada id=%s staff=%s date=%s %s status=%s",
                row.id, row.staff_id, row.appointment_date, appt.interval, row.status.value)
    return to_domain_appointment(row)


# ====== Operaciones públicas ======
def compute_available_slots(
    db: Session,
    staff_id: int,
    day: date,
    service_id: int,
    today: Optional[date] = None,
) -> List[TimeInterval]:
    """
    Slots libres para esa fecha exacta.

    Fuera de la ventana de reserva no hay nada que ofrecer: lista vacía.
    """
    today = today or local_today()
    _active_staff(db, staff_id)
    service = get_service(db, service_id)

    validator = _validator_for(db, staff_id, day, today)
    try:
        validator.check_date_range(day)
    except SchedulingError:
        return []

    return list(generate_slots(
        validator.calendar,
        validator.conflicts,
        staff_id,
        day,
        service,
        granularity_minutes=settings.SLOT_GRANULARITY_MIN,
    ))


def submit_booking(db: Session, request: BookingRequest, today: Optional[date] = None) -> Appointment:
    return _create(db, request, today, walkin=False)


def book_walkin(db: Session, request: BookingRequest, actor: Actor, today: Optional[date] = None) -> Appointment:
    """Walk-in desde recepción: mismo día, estado walkin."""
    if not actor.is_front_desk:
        raise NotOwner("Sólo recepción puede registrar walk-ins")
    return _create(db, request, today, walkin=True)


def change_status(
    db: Session,
    appointment_id: int,
    actor: Actor,
    new_status: AppointmentStatus,
    reason: Optional[str] = None,
) -> Appointment:
    row = get_appointment_row(db, appointment_id, for_update=True)
    current = to_domain_appointment(row)
    try:
        BookingValidator.validate_transition(current, actor, new_status, reason)
    except SchedulingError as e:
        logger.info("Cambio de estado rechazado (%s): appt=%s %s->%s actor=%s",
                    e.code, appointment_id, current.status.value, new_status.value, actor.role.value)
        raise

    row.status = new_status
    if new_status == AppointmentStatus.cancelled:
        row.cancellation_reason = (reason or "").strip() or None
    db.commit()
    db.refresh(row)
    logger.info("Cita %s: %s -> %s (actor=%s)",
                appointment_id, current.status.value, new_status.value, actor.role.value)
    return to_domain_appointment(row)


def reschedule(
    db: Session,
    appointment_id: int,
    actor: Actor,
    new_date: date,
    new_start: time,
    new_staff_id: Optional[int] = None,
    today: Optional[date] = None,
) -> Appointment:
    """Mueve una cita activa; opcionalmente la reasigna a otro médico."""
    today = today or local_today()
    row = get_appointment_row(db, appointment_id, for_update=True)
    current = to_domain_appointment(row)
    target_staff = current.staff_id if new_staff_id is None else new_staff_id
    _active_staff(db, target_staff, for_update=True)

    validator = _validator_for(db, target_staff, new_date, today, exclude_ids=[row.id])
    try:
        moved = validator.validate_reschedule(
            current, actor, new_date, new_start, to_domain_service(row.service), new_staff_id,
        )
    except SchedulingError as e:
        db.rollback()
        logger.info("Reprogramación rechazada (%s): appt=%s -> %s %s staff=%s",
                    e.code, appointment_id, new_date, new_start, target_staff)
        raise

    row.staff_id = moved.staff_id
    row.appointment_date = moved.date
    row.start_time = moved.interval.start
    row.end_time = moved.interval.end
    row = _commit_slot(db, row)
    logger.info("Cita %s reprogramada a %s %s (staff=%s)",
                row.id, row.appointment_date, moved.interval, row.staff_id)
    return to_domain_appointment(row)


def replace_shift_schedule(db: Session, staff_id: int, new_week: Sequence[WeeklyShift]) -> ShiftCalendar:
    """
    Reemplaza los 7 días del horario de un miembro del personal.

    Se valida en memoria primero; si falla, las filas guardadas no se tocan.
    """
    get_staff(db, staff_id, for_update=True)
    calendar = get_shift_calendar(db, staff_id)
    try:
        calendar.replace_schedule(new_week)
    except SchedulingError as e:
        db.rollback()
        logger.info("Horario rechazado (%s) staff=%s: %s", e.code, staff_id, e.detail)
        raise

    db.execute(delete(models.ShiftEntry).where(models.ShiftEntry.staff_id == staff_id))
    db.add_all([
        models.ShiftEntry(
            staff_id=staff_id,
            day_of_week=shift.day_of_week,
            start_time=shift.window.start,
            end_time=shift.window.end,
            is_active=shift.is_active,
            break_start_time=shift.break_window.start if shift.break_window else None,
            break_end_time=shift.break_window.end if shift.break_window else None,
        )
        for shift in calendar.week()
    ])
    db.commit()
    logger.info("Horario reemplazado staff=%s activos=%s", staff_id,
                [s.day_of_week for s in calendar.week() if s.is_active])
    return calendar


def staff_on_duty(
    db: Session,
    day: date,
    role: Optional[models.StaffRole] = None,
) -> List[Tuple[models.Staff, WeeklyShift]]:
    """Personal activo con turno ese día (con su turno, para mostrar horario)."""
    stmt = select(models.Staff).where(models.Staff.is_active.is_(True)).order_by(models.Staff.name)
    if role is not None:
        stmt = stmt.where(models.Staff.role == role)
    staff_rows = db.execute(stmt).scalars().all()

    out = []
    for staff in staff_rows:
        shift = get_shift_calendar(db, staff.id).shift_for(day)
        if shift is not None:
            out.append((staff, shift))
    return out


def shift_schedule(db: Session, staff_id: int) -> ShiftCalendar:
    get_staff(db, staff_id)
    return get_shift_calendar(db, staff_id)
