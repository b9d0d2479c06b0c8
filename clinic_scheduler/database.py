# clinic_scheduler/database.py
from __future__ import annotations
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from .config import settings


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def make_engine(url: str) -> Engine:
    """
    Engine según el tipo de base.

    - SQLite en memoria: una sola conexión compartida (StaticPool), si no
      cada sesión vería una base vacía. Lo usan los tests.
    - SQLite archivo: sin pool configurable.
    - Postgres: pool dimensionado desde settings; la agenda bloquea la fila
      del médico con FOR UPDATE, así que conviene pocas conexiones largas.
    """
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if _is_memory_sqlite(url):
            options["poolclass"] = StaticPool
        else:
            options["pool_pre_ping"] = True
        return create_engine(url, future=True, **options)

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
        future=True,
    )


if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL no está configurada (revisa tu .env).")

engine = make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)

Base = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    """Crea las tablas que falten (appointments incluye el índice único parcial)."""
    from . import models  # noqa: F401  registra los metadatos
    Base.metadata.create_all(bind=bind or engine)


# Dependencia FastAPI: una sesión por request
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
