"""
Calendario semanal de turnos de un miembro del personal.

Un turno por día de la semana (0=domingo .. 6=sábado). Los días sin turno o
con is_active=False no tienen disponibilidad. El calendario sólo se cambia
completo vía replace_schedule; no hay actualizaciones parciales.
"""
from __future__ import annotations
from datetime import date, time
from typing import Dict, Iterable, List, Optional

from .domain import TimeInterval, WeeklyShift
from .errors import IncompleteSchedule, SchedulingError
from .timeutils import contains, day_of_week, overlaps, to_time

DEFAULT_SHIFT_START = time(9, 0)
DEFAULT_SHIFT_END = time(17, 0)
# Lunes a viernes
DEFAULT_WORKDAYS = frozenset({1, 2, 3, 4, 5})


def default_week(start: time = DEFAULT_SHIFT_START, end: time = DEFAULT_SHIFT_END) -> List[WeeklyShift]:
    """Horario por defecto para personal sin calendario: L-V activo, S-D inactivo."""
    window = TimeInterval(start, end)
    return [
        WeeklyShift(day_of_week=d, window=window, is_active=d in DEFAULT_WORKDAYS)
        for d in range(7)
    ]


class ShiftCalendar:

    def __init__(self, week: Optional[Iterable[WeeklyShift]] = None):
        self._shifts: Dict[int, WeeklyShift] = {}
        self.replace_schedule(default_week() if week is None else week)
        self.is_default = week is None

    @classmethod
    def default(cls, start: time = DEFAULT_SHIFT_START, end: time = DEFAULT_SHIFT_END) -> "ShiftCalendar":
        calendar = cls(default_week(start, end))
        calendar.is_default = True
        return calendar

    def replace_schedule(self, new_week: Iterable[WeeklyShift]) -> None:
        """
        Reemplaza los siete días de una sola vez.

        Se valida todo antes de tocar el estado: si algo falla se lanza
        IncompleteSchedule y el horario anterior queda intacto. Los rangos
        invertidos ya no llegan aquí (TimeInterval los rechaza al construirse);
        build_week es la entrada que los reporta como IncompleteSchedule.
        """
        entries = list(new_week)
        if len(entries) != 7:
            raise IncompleteSchedule(f"Se requieren 7 días, se recibieron {len(entries)}")

        staged: Dict[int, WeeklyShift] = {}
        for entry in entries:
            if not isinstance(entry, WeeklyShift):
                raise IncompleteSchedule(f"Entrada inválida: {entry!r}")
            if entry.day_of_week in staged:
                raise IncompleteSchedule(f"Día repetido: {entry.day_of_week}")
            staged[entry.day_of_week] = entry

        if set(staged) != set(range(7)):
            missing = sorted(set(range(7)) - set(staged))
            raise IncompleteSchedule(f"Faltan días: {missing}")

        self._shifts = staged
        self.is_default = False

    def shift_for(self, d: date) -> Optional[WeeklyShift]:
        """Turno activo para esa fecha, o None."""
        shift = self._shifts.get(day_of_week(d))
        if shift is None or not shift.is_active:
            return None
        return shift

    def is_working(self, d: date) -> bool:
        return self.shift_for(d) is not None

    def is_available(self, d: date, interval: TimeInterval) -> bool:
        shift = self.shift_for(d)
        if shift is None:
            return False
        if not contains(shift.window, interval):
            return False
        return shift.break_window is None or not overlaps(shift.break_window, interval)

    def week(self) -> List[WeeklyShift]:
        return [self._shifts[d] for d in range(7)]


def build_week(rows: Iterable[dict]) -> List[WeeklyShift]:
    """
    Construye WeeklyShift desde dicts {day_of_week, start_time, end_time,
    is_active, break_start_time, break_end_time}.

    El descanso es opcional pero va completo (inicio y fin) o no va. Un rango
    inválido se reporta como IncompleteSchedule, igual que en replace_schedule.
    """
    week = []
    for row in rows:
        day = row.get("day_of_week")
        break_start, break_end = row.get("break_start_time"), row.get("break_end_time")
        if (break_start is None) != (break_end is None):
            raise IncompleteSchedule(f"Día {day}: descanso sin inicio o sin fin")
        try:
            window = TimeInterval(to_time(row["start_time"]), to_time(row["end_time"]))
            break_window = None
            if break_start is not None:
                break_window = TimeInterval(to_time(break_start), to_time(break_end))
        except ValueError as e:
            raise IncompleteSchedule(f"Día {day}: {e}")
        except SchedulingError as e:
            raise IncompleteSchedule(f"Día {day}: {e.detail}")
        week.append(WeeklyShift(
            day_of_week=row["day_of_week"],
            window=window,
            is_active=bool(row.get("is_active", True)),
            break_window=break_window,
        ))
    return week
