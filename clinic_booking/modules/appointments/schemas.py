# clinic_booking/modules/appointments/schemas.py
from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, PlainSerializer, field_validator

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

# Timestamps leave the API as "YYYY-MM-DD HH:MM:SS"
Timestamp = Annotated[
    datetime,
    PlainSerializer(lambda v: v.strftime(DATETIME_FORMAT), return_type=str),
]


def _parse_strict(value, fmt: str, label: str, shown: str) -> datetime:
    if not isinstance(value, str):
        raise ValueError(f"The {label} must be a string.")
    try:
        parsed = datetime.strptime(value, fmt)
    except ValueError:
        raise ValueError(f"The {label} does not match the format {shown}.")
    # strptime accepts unpadded fields ("2030-1-1 9:0:0"); require the exact layout
    if parsed.strftime(fmt) != value:
        raise ValueError(f"The {label} does not match the format {shown}.")
    return parsed


class AppointmentCreateRequest(BaseModel):
    """
    Payload to book an appointment.
    - patient_id is taken from the current user, it cannot be sent by the client.
    """
    doctor_id: int = Field(..., ge=1)
    appointment_time: datetime = Field(..., description="YYYY-MM-DD HH:MM:SS, in the future")

    @field_validator("appointment_time", mode="before")
    @classmethod
    def _parse_time(cls, v):
        return _parse_strict(v, DATETIME_FORMAT, "appointment time", "YYYY-MM-DD HH:MM:SS")

    @field_validator("appointment_time")
    @classmethod
    def _after_now(cls, v: datetime) -> datetime:
        if v <= datetime.now():
            raise ValueError("The appointment time must be a date after now.")
        return v


class AvailableSlotsQuery(BaseModel):
    doctor_id: int = Field(..., ge=1)
    date: dt.date

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v):
        return _parse_strict(v, DATE_FORMAT, "date", "YYYY-MM-DD").date()

    @field_validator("date")
    @classmethod
    def _not_past(cls, v: dt.date) -> dt.date:
        if v < dt.date.today():
            raise ValueError("The date must be a date after or equal to today.")
        return v


class AppointmentPublic(BaseModel):
    """
    DTO returned after booking.
    """
    id: int
    patient_id: int
    doctor_id: int
    appointment_time: Timestamp
    status: str
    created_at: Timestamp
    updated_at: Timestamp

    class Config:
        from_attributes = True


class MyAppointment(BaseModel):
    """
    Projection of the caller's next appointment, with the doctor resolved.
    """
    id: int
    doctor_name: str
    specialty: Optional[str] = None
    appointment_time: Timestamp
    status: str


# --- Response envelopes ---

class MessageResponse(BaseModel):
    message: str


class AppointmentBookedResponse(MessageResponse):
    data: AppointmentPublic


class AvailableSlotsResponse(MessageResponse):
    data: List[Timestamp]


class MyAppointmentResponse(MessageResponse):
    data: MyAppointment


class ValidationErrorResponse(MessageResponse):
    errors: dict[str, List[str]]
