# clinic_booking/modules/appointments/service.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.modules.appointments import repository as appt_repo
from clinic_booking.modules.appointments.schemas import (
    AppointmentCreateRequest,
    AppointmentPublic,
    AvailableSlotsQuery,
    MyAppointment,
)
from clinic_booking.modules.appointments.slots import SlotWindow, free_slots
from clinic_booking.modules.users import repository as users_repo

logger = logging.getLogger(__name__)


# Service-level errors; the router maps them to JSON responses
class AppointmentError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidInput(AppointmentError):
    """
    Input that is well-formed but fails a check needing the database
    (e.g. an unknown doctor). Rendered like any other validation error.
    """
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "The given data was invalid."

    def __init__(self, field: str, detail: str):
        super().__init__()
        self.errors = {field: [detail]}


class SlotConflict(AppointmentError):
    status_code = status.HTTP_409_CONFLICT
    message = "This appointment slot is already booked."


class PatientAlreadyBooked(AppointmentError):
    status_code = status.HTTP_409_CONFLICT
    message = "You already have a booked appointment."


class NoUpcomingAppointment(AppointmentError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "No upcoming appointment found."


class NotFoundOrAlreadyCancelled(AppointmentError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Appointment not found or already canceled."


def _now() -> datetime:
    # Second precision, matching the stored format
    return datetime.now().replace(microsecond=0)


async def _ensure_doctor_exists(session: AsyncSession, doctor_id: int) -> None:
    if not await users_repo.exists(session, doctor_id):
        raise InvalidInput("doctor_id", "The selected doctor id is invalid.")


# BOOK
async def book_appointment_svc(
    session: AsyncSession,
    payload: AppointmentCreateRequest,
    caller_id: int,
    *,
    now: Optional[datetime] = None,
) -> AppointmentPublic:
    """
    Book `payload.appointment_time` with `payload.doctor_id` for the caller.

    Logic:
    - doctor must exist (422 otherwise, before any booking rule runs)
    - nobody may hold the same doctor/time, whatever its status
    - the caller may hold at most one upcoming booked appointment
    """
    await _ensure_doctor_exists(session, payload.doctor_id)
    now = now or _now()

    existing = await appt_repo.find_by_doctor_and_time(
        session,
        doctor_id=payload.doctor_id,
        appointment_time=payload.appointment_time,
    )
    if existing:
        logger.info(
            "Slot conflict doctor=%s time=%s", payload.doctor_id, payload.appointment_time
        )
        raise SlotConflict()

    if await appt_repo.find_active_for_patient(session, patient_id=caller_id, now=now):
        logger.info("Patient %s already holds an upcoming appointment", caller_id)
        raise PatientAlreadyBooked()

    try:
        appt = await appt_repo.create(
            session,
            patient_id=caller_id,
            doctor_id=payload.doctor_id,
            appointment_time=payload.appointment_time,
        )
    except appt_repo.DuplicateSlotError:
        # Lost the race against a concurrent booking of the same slot
        logger.info(
            "Slot taken concurrently doctor=%s time=%s",
            payload.doctor_id,
            payload.appointment_time,
        )
        raise SlotConflict()

    logger.info(
        "Appointment %s booked patient=%s doctor=%s time=%s",
        appt.id, caller_id, appt.doctor_id, appt.appointment_time,
    )
    return AppointmentPublic.model_validate(appt)


# AVAILABLE SLOTS
async def list_available_slots_svc(
    session: AsyncSession,
    query: AvailableSlotsQuery,
) -> List[datetime]:
    await _ensure_doctor_exists(session, query.doctor_id)

    taken = await appt_repo.list_times_for_doctor_on(
        session, doctor_id=query.doctor_id, day=query.date
    )
    return free_slots(SlotWindow(day=query.date), taken)


# MY APPOINTMENT
async def get_my_appointment_svc(
    session: AsyncSession,
    caller_id: int,
    *,
    now: Optional[datetime] = None,
) -> MyAppointment:
    appt = await appt_repo.find_active_for_patient(
        session, patient_id=caller_id, now=now or _now()
    )
    if not appt:
        raise NoUpcomingAppointment()

    doctor = appt.doctor
    return MyAppointment(
        id=appt.id,
        doctor_name=doctor.full_name if doctor else "",
        specialty=doctor.specialty if doctor else None,
        appointment_time=appt.appointment_time,
        status=appt.status,
    )


# CANCEL
async def cancel_appointment_svc(
    session: AsyncSession,
    appointment_id: int,
    caller_id: int,
) -> None:
    """
    Hard-delete the caller's booked appointment.

    Someone else's appointment is reported exactly like a missing one.
    """
    appt = await appt_repo.find_cancellable(
        session, appointment_id=appointment_id, patient_id=caller_id
    )
    if not appt:
        raise NotFoundOrAlreadyCancelled()

    await appt_repo.delete_appointment(session, appointment_id=appt.id)
    logger.info("Appointment %s cancelled by patient %s", appointment_id, caller_id)


__all__ = [
    "AppointmentError",
    "InvalidInput",
    "SlotConflict",
    "PatientAlreadyBooked",
    "NoUpcomingAppointment",
    "NotFoundOrAlreadyCancelled",
    "book_appointment_svc",
    "list_available_slots_svc",
    "get_my_appointment_svc",
    "cancel_appointment_svc",
]
