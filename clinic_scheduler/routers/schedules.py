from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from dateutil import parser as dtparser

from ..database import get_db
from ..models import StaffRole
from .. import schemas
from ..scheduling import build_week
from ..services import scheduling

router = APIRouter(prefix="/staff", tags=["schedules"])


def _schedule_out(staff_id: int, calendar) -> schemas.ScheduleOut:
    return schemas.ScheduleOut(
        staff_id=staff_id,
        is_default=calendar.is_default,
        days=[schemas.ShiftOut.from_domain(s) for s in calendar.week()],
    )


# Antes de /{staff_id}/... para que "on-duty" no se tome como id
@router.get("/on-duty", response_model=list[schemas.OnDutyOut])
def on_duty(
    date: str = Query(..., description="YYYY-MM-DD"),
    role: StaffRole | None = None,
    db: Session = Depends(get_db),
):
    try:
        d = dtparser.parse(date).date()
    except (ValueError, OverflowError):
        raise HTTPException(status_code=400, detail="Formato de fecha inválido. Usa YYYY-MM-DD.")
    return [
        schemas.OnDutyOut(
            staff_id=staff.id,
            name=staff.name,
            role=staff.role,
            start_time=shift.window.start.strftime("%H:%M"),
            end_time=shift.window.end.strftime("%H:%M"),
        )
        for staff, shift in scheduling.staff_on_duty(db, d, role)
    ]


@router.get("/{staff_id}/schedule", response_model=schemas.ScheduleOut)
def get_schedule(staff_id: int, db: Session = Depends(get_db)):
    return _schedule_out(staff_id, scheduling.shift_schedule(db, staff_id))


@router.put("/{staff_id}/schedule", response_model=schemas.ScheduleOut)
def replace_schedule(staff_id: int, req: schemas.ScheduleIn, db: Session = Depends(get_db)):
    """Reemplaza la semana completa (7 días); no hay actualizaciones parciales."""
    week = build_week(day.model_dump() for day in req.days)
    calendar = scheduling.replace_shift_schedule(db, staff_id, week)
    return _schedule_out(staff_id, calendar)
