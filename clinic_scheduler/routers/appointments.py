from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from dateutil import parser as dtparser

from ..database import get_db
from .. import schemas
from ..services import scheduling
from ..services.records import (
    get_appointment_row,
    get_service,
    list_appointments,
    list_patient_appointments,
    to_domain_appointment,
)

router = APIRouter(prefix="", tags=["appointments"])


def _parse_day(value: str):
    try:
        return dtparser.parse(value).date()
    except (ValueError, OverflowError):
        raise HTTPException(status_code=400, detail="Formato de fecha inválido. Usa YYYY-MM-DD.")


@router.get("/slots", response_model=schemas.SlotsResponse)
def get_slots(
    staff_id: int,
    service_id: int,
    date: str = Query(..., description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    d = _parse_day(date)
    slots = scheduling.compute_available_slots(db, staff_id, d, service_id)
    service = get_service(db, service_id)
    return schemas.SlotsResponse(
        staff_id=staff_id,
        service_id=service_id,
        date=d,
        duration_minutes=service.duration_minutes,
        slots=[
            schemas.SlotOut(start=s.start.strftime("%H:%M"), end=s.end.strftime("%H:%M"))
            for s in slots
        ],
    )


@router.post("/appointments", response_model=schemas.AppointmentOut, status_code=201)
def book(req: schemas.BookRequest, db: Session = Depends(get_db)):
    appt = scheduling.submit_booking(db, req.to_request())
    return schemas.AppointmentOut.from_domain(appt)


@router.post("/appointments/walkin", response_model=schemas.AppointmentOut, status_code=201)
def book_walkin(req: schemas.WalkinRequest, db: Session = Depends(get_db)):
    booking = schemas.BookRequest(
        staff_id=req.staff_id,
        patient_id=req.patient_id,
        service_id=req.service_id,
        date=req.date or scheduling.local_today(),
        start_time=req.start_time,
        notes=req.notes,
    )
    appt = scheduling.book_walkin(db, booking.to_request(), req.actor.to_actor())
    return schemas.AppointmentOut.from_domain(appt)


@router.get("/appointments", response_model=list[schemas.AppointmentOut])
def list_appointments_route(
    staff_id: int | None = None,
    patient_id: int | None = None,
    date: str | None = Query(None, description="YYYY-MM-DD (obligatorio con staff_id)"),
    end_date: str | None = Query(None, description="YYYY-MM-DD (por defecto: igual a date)"),
    db: Session = Depends(get_db),
):
    """
    Agenda de un médico (staff_id + date) o historial de un paciente
    (patient_id, fechas opcionales).
    """
    start = _parse_day(date) if date else None
    end = _parse_day(end_date) if end_date else start

    if staff_id is not None:
        if start is None:
            raise HTTPException(status_code=400, detail="date es obligatorio al filtrar por staff_id")
        appts = list_appointments(db, staff_id, start, end)
        if patient_id is not None:
            appts = [a for a in appts if a.patient_id == patient_id]
    elif patient_id is not None:
        appts = list_patient_appointments(db, patient_id, start, end)
    else:
        raise HTTPException(status_code=400, detail="Indica staff_id o patient_id")
    return [schemas.AppointmentOut.from_domain(a) for a in appts]


@router.get("/appointments/{appointment_id}", response_model=schemas.AppointmentOut)
def get_appointment(appointment_id: int, db: Session = Depends(get_db)):
    row = get_appointment_row(db, appointment_id)
    return schemas.AppointmentOut.from_domain(to_domain_appointment(row))


@router.post("/appointments/{appointment_id}/status", response_model=schemas.AppointmentOut)
def change_status(appointment_id: int, req: schemas.StatusChangeRequest, db: Session = Depends(get_db)):
    appt = scheduling.change_status(db, appointment_id, req.actor.to_actor(), req.status, req.reason)
    return schemas.AppointmentOut.from_domain(appt)


@router.post("/appointments/{appointment_id}/reschedule", response_model=schemas.AppointmentOut)
def reschedule(appointment_id: int, req: schemas.RescheduleRequest, db: Session = Depends(get_db)):
    appt = scheduling.reschedule(
        db,
        appointment_id,
        req.actor.to_actor(),
        req.new_date,
        req.new_start_time,
        new_staff_id=req.new_staff_id,
    )
    return schemas.AppointmentOut.from_domain(appt)
