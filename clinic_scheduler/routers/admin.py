# clinic_scheduler/routers/admin.py
from __future__ import annotations
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from .. import models, schemas
from ..services.reports import appointment_stats
from ..services import scheduling

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])

# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────
def _require_admin(x_admin_token: str | None) -> None:
    expected = (settings.ADMIN_TOKEN or "").strip()
    provided = (x_admin_token or "").strip()
    if not expected:
        raise HTTPException(status_code=403, detail="ADMIN_TOKEN no configurado")
    if provided != expected:
        raise HTTPException(status_code=401, detail="Token inválido")


def _parse_date(s: str):
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Formato de fecha inválido. Use YYYY-MM-DD.")


def _add_and_commit(db: Session, row, what: str):
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"{what} duplicado")
    db.refresh(row)
    logger.info("%s creado id=%s", what, row.id)
    return row

# ──────────────────────────────────────────────────────────────────────────────
# Básicos
# (main.py monta este router con prefix="/admin")
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/ping")
def admin_ping():
    return {"ok": True, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/health")
def admin_health():
    return {
        "ok": True,
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "tz": settings.TIMEZONE,
        "today": scheduling.local_today().isoformat(),
        "slot_granularity_min": settings.SLOT_GRANULARITY_MIN,
        "booking_window_days": settings.BOOKING_WINDOW_DAYS,
        "ts": datetime.now(timezone.utc).isoformat(),
    }

# ──────────────────────────────────────────────────────────────────────────────
# Reportes
# ──────────────────────────────────────────────────────────────────────────────
@router.get("/stats")
def admin_stats(
    x_admin_token: str | None = Header(default=None),
    start_date: Optional[str] = Query(None, description="YYYY-MM-DD (por defecto: hoy-30d)"),
    end_date: Optional[str] = Query(None, description="YYYY-MM-DD (por defecto: hoy)"),
    staff_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    _require_admin(x_admin_token)
    today = scheduling.local_today()
    s_d = _parse_date(start_date) if start_date else (today - timedelta(days=30))
    e_d = _parse_date(end_date) if end_date else today
    if s_d > e_d:
        raise HTTPException(status_code=400, detail="start_date debe ser <= end_date")
    return {"ok": True, **appointment_stats(db, s_d, e_d, today, staff_id=staff_id)}

# ──────────────────────────────────────────────────────────────────────────────
# Datos de referencia (personal, servicios, pacientes)
# ──────────────────────────────────────────────────────────────────────────────
@router.post("/staff", response_model=schemas.CreatedResponse, status_code=201)
def admin_create_staff(
    req: schemas.StaffIn,
    x_admin_token: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    _require_admin(x_admin_token)
    row = _add_and_commit(db, models.Staff(name=req.name, email=req.email, role=req.role), "Staff")
    return schemas.CreatedResponse(id=row.id)


@router.post("/services", response_model=schemas.CreatedResponse, status_code=201)
def admin_create_service(
    req: schemas.ServiceIn,
    x_admin_token: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    _require_admin(x_admin_token)
    row = _add_and_commit(
        db, models.Service(name=req.name, duration_minutes=req.duration_minutes), "Service"
    )
    return schemas.CreatedResponse(id=row.id)


@router.post("/patients", response_model=schemas.CreatedResponse, status_code=201)
def admin_create_patient(
    req: schemas.PatientIn,
    x_admin_token: str | None = Header(default=None),
    db: Session = Depends(get_db),
):
    _require_admin(x_admin_token)
    row = _add_and_commit(
        db,
        models.Patient(name=req.name, contact=req.contact, consent_messages=req.consent_messages),
        "Patient",
    )
    return schemas.CreatedResponse(id=row.id)
