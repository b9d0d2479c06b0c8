# clinic_scheduler/services/records.py
"""
Lecturas de BD que alimentan al motor de agenda.

Convierte filas ORM en los tipos de valor de `scheduling.domain` para que el
motor nunca vea una sesión de SQLAlchemy.
"""
from __future__ import annotations
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models
from ..config import settings
from ..scheduling import domain
from ..scheduling.availability import ShiftCalendar, build_week
from ..scheduling.timeutils import to_time

logger = logging.getLogger(__name__)


class RecordNotFound(LookupError):
    def __init__(self, kind: str, record_id):
        super().__init__(f"{kind} {record_id} no encontrado")
        self.kind = kind
        self.record_id = record_id


# ====== ORM -> dominio ======
def to_domain_appointment(row: models.Appointment) -> domain.Appointment:
    return domain.Appointment(
        id=row.id,
        staff_id=row.staff_id,
        patient_id=row.patient_id,
        service_id=row.service_id,
        date=row.appointment_date,
        interval=domain.TimeInterval(to_time(row.start_time), to_time(row.end_time)),
        status=row.status,
        notes=row.notes or "",
        reason=row.cancellation_reason,
    )


def to_domain_service(row: models.Service) -> domain.Service:
    return domain.Service(id=row.id, duration_minutes=row.duration_minutes, name=row.name)


def default_calendar() -> ShiftCalendar:
    return ShiftCalendar.default(
        to_time(settings.DEFAULT_SHIFT_START),
        to_time(settings.DEFAULT_SHIFT_END),
    )


# ====== Lecturas ======
def get_staff(db: Session, staff_id: int, for_update: bool = False) -> models.Staff:
    stmt = select(models.Staff).where(models.Staff.id == staff_id)
    if for_update:
        # Serializa escrituras por médico (no-op en SQLite)
        stmt = stmt.with_for_update()
    staff = db.execute(stmt).scalar_one_or_none()
    if staff is None:
        raise RecordNotFound("Staff", staff_id)
    return staff


def get_service(db: Session, service_id: int) -> domain.Service:
    row = db.get(models.Service, service_id)
    if row is None or not row.is_active:
        raise RecordNotFound("Service", service_id)
    return to_domain_service(row)


def get_appointment_row(db: Session, appointment_id: int, for_update: bool = False) -> models.Appointment:
    stmt = select(models.Appointment).where(models.Appointment.id == appointment_id)
    if for_update:
        # Dos cambios de estado simultáneos se serializan sobre la fila de la cita;
        # populate_existing descarta la copia que ya tuviera la sesión
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    row = db.execute(stmt).scalar_one_or_none()
    if row is None:
        raise RecordNotFound("Appointment", appointment_id)
    return row


def list_appointments(
    db: Session,
    staff_id: int,
    start: date,
    end: Optional[date] = None,
) -> List[domain.Appointment]:
    """Citas del personal en [start, end] (todas; el índice filtra por estado)."""
    end = end or start
    rows = db.execute(
        select(models.Appointment)
        .where(models.Appointment.staff_id == staff_id)
        .where(models.Appointment.appointment_date >= start)
        .where(models.Appointment.appointment_date <= end)
        .order_by(models.Appointment.appointment_date, models.Appointment.start_time)
    ).scalars().all()
    return [to_domain_appointment(r) for r in rows]


def list_patient_appointments(
    db: Session,
    patient_id: int,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[domain.Appointment]:
    """Historial del paciente, con rango de fechas opcional."""
    stmt = select(models.Appointment).where(models.Appointment.patient_id == patient_id)
    if start is not None:
        stmt = stmt.where(models.Appointment.appointment_date >= start)
    if end is not None:
        stmt = stmt.where(models.Appointment.appointment_date <= end)
    rows = db.execute(
        stmt.order_by(models.Appointment.appointment_date, models.Appointment.start_time)
    ).scalars().all()
    return [to_domain_appointment(r) for r in rows]


def get_shift_calendar(db: Session, staff_id: int) -> ShiftCalendar:
    """Calendario semanal; sin filas se aplica el horario por defecto."""
    rows = db.execute(
        select(models.ShiftEntry)
        .where(models.ShiftEntry.staff_id == staff_id)
        .order_by(models.ShiftEntry.day_of_week)
    ).scalars().all()
    if not rows:
        logger.debug("Staff %s sin horario: usando horario por defecto", staff_id)
        return default_calendar()
    return ShiftCalendar(build_week(
        {
            "day_of_week": r.day_of_week,
            "start_time": r.start_time,
            "end_time": r.end_time,
            "is_active": r.is_active,
            "break_start_time": r.break_start_time,
            "break_end_time": r.break_end_time,
        }
        for r in rows
    ))
