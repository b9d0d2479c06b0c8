# clinic_scheduler/main.py
import os
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .scheduling import SchedulingError
from .services.records import RecordNotFound

# Routers
from .routers.appointments import router as appointments_router
from .routers.schedules import router as schedules_router
from .routers.admin import router as admin_router

# ──────────────────────────────────────────────────────────────────────────────
# LOGGING
# Controla niveles con variables de entorno:
#   LOG_LEVEL, SQLA_LOG_LEVEL, UVICORN_LOG_LEVEL
# ──────────────────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

# (Opcional) ruido de SQLAlchemy y Uvicorn
logging.getLogger("sqlalchemy.engine").setLevel(
    getattr(logging, os.getenv("SQLA_LOG_LEVEL", "WARNING"), logging.WARNING)
)
logging.getLogger("uvicorn.error").setLevel(
    getattr(logging, os.getenv("UVICORN_LOG_LEVEL", "INFO"), logging.INFO)
)

logger = logging.getLogger(__name__)

# Código de regla -> status HTTP
# 422: el pedido en sí es inválido; 409: choca con el estado actual de la agenda
ERROR_STATUS = {
    "DateOutOfRange": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "InvalidInterval": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "InvalidDuration": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "IncompleteSchedule": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "ReasonRequired": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "OutsideShift": status.HTTP_409_CONFLICT,
    "SlotTaken": status.HTTP_409_CONFLICT,
    "IllegalTransition": status.HTTP_409_CONFLICT,
    "NotOwner": status.HTTP_403_FORBIDDEN,
}

# ──────────────────────────────────────────────────────────────────────────────
# FastAPI App
# ──────────────────────────────────────────────────────────────────────────────
app = FastAPI(title=settings.APP_NAME)

# Monta rutas
app.include_router(appointments_router)
app.include_router(schedules_router)
app.include_router(admin_router, prefix="/admin")  # admin.py NO repite /admin


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """La UI necesita saber qué regla falló (p. ej. SlotTaken -> elegir otro horario)."""
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
        content={"code": exc.code, "detail": exc.detail},
    )


@app.exception_handler(RecordNotFound)
async def not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"code": "NotFound", "detail": str(exc)},
    )

# ──────────────────────────────────────────────────────────────────────────────
# Ciclo de vida
# ──────────────────────────────────────────────────────────────────────────────
@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Startup completo: %s (%s)", settings.APP_NAME, settings.ENV)


@app.get("/")
def root():
    return {"ok": True, "app": settings.APP_NAME, "env": settings.ENV}
