# clinic_scheduler/models.py
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import (
    Integer, String, Date, Time, DateTime, Enum, ForeignKey, Boolean, Text,
    Index, UniqueConstraint, text,
)
from datetime import date, time, datetime, timezone
import enum
from .database import Base
from .scheduling.domain import AppointmentStatus

# Citas que ocupan agenda (mismo criterio que el índice de conflictos)
_ACTIVE_SLOT_WHERE = text("status IN ('pending', 'confirmed', 'walkin')")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StaffRole(str, enum.Enum):
    doctor = "doctor"
    nurse = "nurse"
    admin = "admin"


class Staff(Base):
    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, unique=True)
    role: Mapped[StaffRole] = mapped_column(Enum(StaffRole, name="staff_role"), default=StaffRole.doctor, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Patient(Base):
    __tablename__ = "patients"
    __table_args__ = (
        UniqueConstraint("contact", name="uq_patients_contact"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True, default=None, index=True)
    # ÚNICO y NO NULO
    contact: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    consent_messages: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Service(Base):
    __tablename__ = "services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ShiftEntry(Base):
    __tablename__ = "shift_entries"
    __table_args__ = (
        UniqueConstraint("staff_id", "day_of_week", name="uq_shift_staff_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    staff_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("staff.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=domingo
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Descanso opcional; ambos o ninguno
    break_start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    break_end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # Garantía final contra doble reserva entre peticiones concurrentes
        Index(
            "uq_appointments_active_slot",
            "staff_id", "date", "start_time",
            unique=True,
            sqlite_where=_ACTIVE_SLOT_WHERE,
            postgresql_where=_ACTIVE_SLOT_WHERE,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    staff_id: Mapped[int] = mapped_column(Integer, ForeignKey("staff.id"), nullable=False, index=True)
    patient_id: Mapped[int] = mapped_column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    service_id: Mapped[int] = mapped_column(Integer, ForeignKey("services.id"), nullable=False)
    appointment_date: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(AppointmentStatus, name="appointment_status"),
        default=AppointmentStatus.pending,
        nullable=False,
    )
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    staff = relationship("Staff")
    patient = relationship("Patient")
    service = relationship("Service")
