"""
Generación de slots reservables para una fecha exacta.

Los candidatos arrancan al inicio del turno y avanzan cada
`granularity_minutes`. Se descarta el candidato cuyo rango
[inicio, inicio + duración) se sale del turno, cae en el descanso o choca
con una cita.
"""
from __future__ import annotations
from datetime import date
from typing import Iterator

from .availability import ShiftCalendar
from .domain import Service, TimeInterval
from .errors import InvalidDuration
from .overlap import AppointmentConflictIndex
from .timeutils import add_minutes, minutes_between

DEFAULT_GRANULARITY_MINUTES = 15


def generate_slots(
    calendar: ShiftCalendar,
    conflicts: AppointmentConflictIndex,
    staff_id: int,
    target_date: date,
    service: Service,
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
) -> Iterator[TimeInterval]:
    """
    Produce los slots libres en orden.

    El slot es la hora de inicio; el `end` del TimeInterval es sólo
    inicio + duración del servicio, calculado para que quien llama no
    tenga que repetir la cuenta.

    Es un generador: no guarda nada entre llamadas y las mismas entradas
    producen siempre la misma secuencia. Si no hay turno ese día o el turno
    es más corto que el servicio, no produce nada.
    """
    if granularity_minutes <= 0:
        raise InvalidDuration(f"Granularidad inválida: {granularity_minutes}")

    shift = calendar.shift_for(target_date)
    if shift is None:
        return

    window = shift.window
    duration = service.duration_minutes
    # Último inicio posible cuyo fin no pase del cierre del turno
    last_offset = minutes_between(window.start, window.end) - duration
    if last_offset < 0:
        return

    booked = conflicts.booked_intervals(staff_id, target_date)
    if shift.break_window is not None:
        # El descanso bloquea igual que una cita
        booked = tuple(sorted(booked + (shift.break_window,), key=lambda iv: (iv.start, iv.end)))
    cursor = 0

    for offset in range(0, last_offset + 1, granularity_minutes):
        start = add_minutes(window.start, offset)
        slot = TimeInterval(start, add_minutes(start, duration))

        # Las reservas que terminaron antes de este candidato ya no importan
        while cursor < len(booked) and booked[cursor].end <= slot.start:
            cursor += 1
        if cursor < len(booked) and booked[cursor].start < slot.end:
            continue

        yield slot
