"""
Índice de conflictos de agenda.

Mapea (staff_id, fecha) -> intervalos reservados ordenados por inicio.
Sólo las citas pending/confirmed/walkin ocupan agenda.
"""
from __future__ import annotations
from bisect import bisect_left
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Tuple

from .domain import ACTIVE_STATUSES, Appointment, TimeInterval
from .timeutils import overlaps

_Key = Tuple[int, date]


class AppointmentConflictIndex:

    def __init__(self, appointments: Iterable[Appointment] = (), exclude_ids: Iterable[int] = ()):
        excluded = set(exclude_ids)
        buckets: Dict[_Key, List[TimeInterval]] = defaultdict(list)
        for appt in appointments:
            if appt.status not in ACTIVE_STATUSES:
                continue
            if appt.id is not None and appt.id in excluded:
                continue
            buckets[(appt.staff_id, appt.date)].append(appt.interval)

        # Orden ascendente por inicio: slots.py hace un solo barrido lineal
        self._booked: Dict[_Key, Tuple[TimeInterval, ...]] = {
            key: tuple(sorted(intervals, key=lambda iv: (iv.start, iv.end)))
            for key, intervals in buckets.items()
        }
        self._starts: Dict[_Key, List] = {
            key: [iv.start for iv in intervals] for key, intervals in self._booked.items()
        }

    def booked_intervals(self, staff_id: int, d: date) -> Tuple[TimeInterval, ...]:
        return self._booked.get((staff_id, d), ())

    def has_conflict(self, staff_id: int, d: date, interval: TimeInterval) -> bool:
        booked = self.booked_intervals(staff_id, d)
        if not booked:
            return False
        # Sólo los que empiezan antes de que termine `interval` pueden solaparse
        upper = bisect_left(self._starts[(staff_id, d)], interval.end)
        return any(overlaps(interval, iv) for iv in booked[:upper])
