# clinic_scheduler/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===== App =====
    APP_NAME: str = "clinic_scheduler"
    ENV: str = "dev"
    # TZ local de la clínica (define qué es "hoy" para las reservas)
    TIMEZONE: str = "America/Mexico_City"

    # ===== DB =====
    # En producción define DATABASE_URL con tu Postgres. Local puede caer a SQLite.
    DATABASE_URL: str = "sqlite:///./clinic_scheduler.db"

    # Opciones de pool (sólo aplican fuera de SQLite)
    DB_POOL_SIZE: int = 2
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 min

    # ===== Agenda =====
    SLOT_GRANULARITY_MIN: int = 15
    BOOKING_WINDOW_DAYS: int = 30
    # Horario por defecto para personal sin calendario (L-V)
    DEFAULT_SHIFT_START: str = "09:00"
    DEFAULT_SHIFT_END: str = "17:00"

    # ===== Admin =====
    ADMIN_TOKEN: Optional[str] = None

    def model_post_init(self, __context) -> None:
        """Normaliza valores que no tienen sentido como vienen del entorno."""
        if self.SLOT_GRANULARITY_MIN <= 0:
            self.SLOT_GRANULARITY_MIN = 15
        if self.BOOKING_WINDOW_DAYS < 0:
            self.BOOKING_WINDOW_DAYS = 30
        self.DEFAULT_SHIFT_START = self.DEFAULT_SHIFT_START.strip()
        self.DEFAULT_SHIFT_END = self.DEFAULT_SHIFT_END.strip()


settings = Settings()
