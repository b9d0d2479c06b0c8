"""Agenda de la clínica: motor de slots y validación de citas + API."""
__version__ = "0.1.0"
