"""
Errores del motor de agenda.

Cada regla violada tiene su propia clase y un `code` estable para que quien
llama (router, UI) pueda decidir el mensaje sin parsear texto.
"""


class SchedulingError(Exception):
    code = "scheduling_error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.code)
        self.detail = detail or self.code


class DateOutOfRange(SchedulingError):
    code = "DateOutOfRange"


class InvalidInterval(SchedulingError):
    code = "InvalidInterval"


class OutsideShift(SchedulingError):
    code = "OutsideShift"


class SlotTaken(SchedulingError):
    code = "SlotTaken"


class NotOwner(SchedulingError):
    code = "NotOwner"


class IllegalTransition(SchedulingError):
    code = "IllegalTransition"


class IncompleteSchedule(SchedulingError):
    code = "IncompleteSchedule"


class InvalidDuration(SchedulingError):
    code = "InvalidDuration"


class ReasonRequired(SchedulingError):
    code = "ReasonRequired"
