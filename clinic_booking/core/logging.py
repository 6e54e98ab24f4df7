# clinic_booking/core/logging.py
import logging

from clinic_booking.core.config import settings


def configure_logging() -> None:
    """Configure the root logger from settings. Safe to call more than once."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT,
    )
    # SQL echo goes through the engine logger; keep it quiet unless asked for
    if not settings.DB_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
