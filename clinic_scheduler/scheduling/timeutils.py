# clinic_scheduler/scheduling/timeutils.py
from __future__ import annotations
import enum
from datetime import date, datetime, time, timedelta
from typing import Union

from .errors import InvalidDuration

_SECONDS_PER_DAY = 24 * 60 * 60


class Ordering(str, enum.Enum):
    BEFORE = "before"
    EQUAL = "equal"
    AFTER = "after"


# ====== Conversión ======
def to_time(value: Union[time, timedelta, str]) -> time:
    """
    Convierte distintos formatos de hora a datetime.time.

    Acepta time, timedelta desde medianoche (así devuelven TIME algunos
    drivers) o string "HH:MM" / "HH:MM:SS". Descarta microsegundos y
    rechaza horas con tzinfo.
    """
    if isinstance(value, time):
        # La agenda trabaja en hora local de la clínica, sin offset
        if value.tzinfo is not None:
            raise ValueError(f"Hora con zona horaria no admitida: {value.isoformat()}")
        return value.replace(microsecond=0)
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds())
        if not 0 <= seconds < _SECONDS_PER_DAY:
            raise ValueError(f"timedelta fuera del día: {value}")
        return _from_seconds(seconds)
    if isinstance(value, str):
        s = value.strip()
        for fmt in ("%H:%M:%S", "%H:%M"):
            try:
                return datetime.strptime(s, fmt).time()
            except ValueError:
                continue
        raise ValueError(f"Hora inválida: {value!r}. Usa HH:MM o HH:MM:SS.")
    raise ValueError(f"Cannot convert {type(value)} to time")


def seconds_of(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def _from_seconds(seconds: int) -> time:
    return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)


# ====== Aritmética ======
def add_minutes(t: time, minutes: int) -> time:
    """
    Suma minutos sin dar la vuelta al día.

    Una cita que cruza la medianoche es un error de dominio: si el resultado
    cae antes de 00:00:00 o después de 23:59:59 se lanza InvalidDuration.
    """
    total = seconds_of(t) + minutes * 60
    if not 0 <= total < _SECONDS_PER_DAY:
        raise InvalidDuration(
            f"{t.strftime('%H:%M:%S')} + {minutes} min cruza la medianoche"
        )
    return _from_seconds(total)


def minutes_between(a: time, b: time) -> int:
    """Minutos completos de a hasta b (negativo si b es anterior)."""
    return (seconds_of(b) - seconds_of(a)) // 60


def compare(a: time, b: time) -> Ordering:
    if a < b:
        return Ordering.BEFORE
    if a > b:
        return Ordering.AFTER
    return Ordering.EQUAL


def overlaps(a, b) -> bool:
    # Semiabierto: [09:30, 10:00) y [10:00, 10:30) no se solapan
    return a.start < b.end and b.start < a.end


def contains(outer, inner) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


def day_of_week(d: date) -> int:
    """0=domingo .. 6=sábado (date.weekday() usa 0=lunes)."""
    return (d.weekday() + 1) % 7
