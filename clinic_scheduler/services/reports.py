# clinic_scheduler/services/reports.py
from __future__ import annotations
from datetime import date
from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .. import models
from ..scheduling import AppointmentStatus
from ..scheduling.timeutils import minutes_between, to_time


def appointment_stats(
    db: Session,
    start: date,
    end: date,
    today: date,
    staff_id: Optional[int] = None,
) -> Dict[str, object]:
    """
    Resumen de citas en [start, end] para el tablero de admin.

    Conteo por estado, citas de hoy y duración promedio (minutos) de las
    citas no canceladas.
    """
    A = models.Appointment
    base = select(A).where(A.appointment_date >= start, A.appointment_date <= end)
    if staff_id is not None:
        base = base.where(A.staff_id == staff_id)

    counts_stmt = (
        select(A.status, func.count(A.id))
        .where(A.appointment_date >= start, A.appointment_date <= end)
        .group_by(A.status)
    )
    if staff_id is not None:
        counts_stmt = counts_stmt.where(A.staff_id == staff_id)
    by_status = {s.value: 0 for s in AppointmentStatus}
    for status, n in db.execute(counts_stmt).all():
        by_status[status.value] = n

    rows = db.execute(base).scalars().all()
    durations = [
        minutes_between(to_time(r.start_time), to_time(r.end_time))
        for r in rows
        if r.status != AppointmentStatus.cancelled
    ]

    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "total": sum(by_status.values()),
        "by_status": by_status,
        "today": sum(1 for r in rows if r.appointment_date == today),
        "average_duration_min": round(sum(durations) / len(durations), 1) if durations else 0.0,
    }
