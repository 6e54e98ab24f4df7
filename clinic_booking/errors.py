# clinic_booking/errors.py
from __future__ import annotations

from typing import Any, Dict, List

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from clinic_booking.modules.appointments.service import AppointmentError, InvalidInput

VALIDATION_MESSAGE = "The given data was invalid."


def error_response(exc: AppointmentError) -> JSONResponse:
    """Render a service error as the API's JSON envelope."""
    content: Dict[str, Any] = {"message": exc.message}
    if isinstance(exc, InvalidInput):
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


def _field_name(loc) -> str:
    # ("body", "doctor_id") / ("query", "date") -> "doctor_id" / "date"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "request"


def _clean(msg: str) -> str:
    return msg.removeprefix("Value error, ")


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        errors.setdefault(_field_name(err.get("loc", ())), []).append(
            _clean(err.get("msg", "invalid"))
        )
    return JSONResponse(
        status_code=422,
        content={"message": VALIDATION_MESSAGE, "errors": errors},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Every HTTP error carries a `message`, like the rest of the API."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )
