"""Shared test fixtures."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from clinic_scheduler import models
from clinic_scheduler.database import get_db, init_db, make_engine
from clinic_scheduler.scheduling import ShiftCalendar

from tests.helpers import MONDAY, TODAY, make_week


@pytest.fixture
def monday_calendar() -> ShiftCalendar:
    """Lunes 09:00-12:00 activo, resto inactivo."""
    return ShiftCalendar(make_week({MONDAY: ("09:00", "12:00")}))


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded(db):
    """Dos médicos, una enfermera, un servicio de 30 min y dos pacientes."""
    doc_a = models.Staff(name="Dra. Ana", email="ana@clinic.test", role=models.StaffRole.doctor)
    doc_b = models.Staff(name="Dr. Beto", email="beto@clinic.test", role=models.StaffRole.doctor)
    nurse = models.Staff(name="Enf. Carla", email="carla@clinic.test", role=models.StaffRole.nurse)
    consult = models.Service(name="Consulta", duration_minutes=30)
    long_visit = models.Service(name="Valoración", duration_minutes=90)
    p1 = models.Patient(name="Paciente Uno", contact="+520000000001")
    p2 = models.Patient(name="Paciente Dos", contact="+520000000002")
    db.add_all([doc_a, doc_b, nurse, consult, long_visit, p1, p2])
    db.commit()
    return {
        "doc_a": doc_a.id,
        "doc_b": doc_b.id,
        "nurse": nurse.id,
        "consult": consult.id,
        "long_visit": long_visit.id,
        "p1": p1.id,
        "p2": p2.id,
    }


@pytest.fixture
def client(session_factory, monkeypatch):
    from clinic_scheduler.main import app
    from clinic_scheduler.services import scheduling

    monkeypatch.setattr(scheduling, "local_today", lambda: TODAY)

    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_db
    yield TestClient(app)
    app.dependency_overrides.clear()
