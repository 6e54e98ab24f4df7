# clinic_booking/routers/__init__.py
from . import appointments
from . import health

__all__ = ["appointments", "health"]
