# clinic_booking/routers/appointments.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.db.sql import get_session
from clinic_booking.dependencies import get_current_user
from clinic_booking.errors import error_response
from clinic_booking.modules.users.models import User
from clinic_booking.modules.appointments.schemas import (
    AppointmentBookedResponse,
    AppointmentCreateRequest,
    AvailableSlotsQuery,
    AvailableSlotsResponse,
    MessageResponse,
    MyAppointmentResponse,
    ValidationErrorResponse,
)
from clinic_booking.modules.appointments.service import (
    AppointmentError,
    book_appointment_svc,
    cancel_appointment_svc,
    get_my_appointment_svc,
    list_available_slots_svc,
)

router = APIRouter(tags=["appointments"])

_VALIDATION = {422: {"model": ValidationErrorResponse, "description": "Invalid input"}}


# POST /appointments
@router.post(
    "/appointments",
    response_model=AppointmentBookedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment for the current user",
    responses={
        409: {"model": MessageResponse, "description": "Slot taken or patient already booked"},
        **_VALIDATION,
    },
)
async def appointments_book(
    payload: AppointmentCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),  # Bearer required
):
    try:
        appt = await book_appointment_svc(session, payload, current_user.id)
    except AppointmentError as e:
        return error_response(e)
    return AppointmentBookedResponse(message="Appointment booked successfully.", data=appt)


# GET /appointments/available-slots
@router.get(
    "/appointments/available-slots",
    response_model=AvailableSlotsResponse,
    summary="Free half-hour slots of a doctor on one day (09:00-17:00)",
    responses=_VALIDATION,
)
async def appointments_available_slots(
    query: Annotated[AvailableSlotsQuery, Query()],
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        slots = await list_available_slots_svc(session, query)
    except AppointmentError as e:
        return error_response(e)
    return AvailableSlotsResponse(message="Available slots retrieved.", data=slots)


# GET /appointments/mine
@router.get(
    "/appointments/mine",
    response_model=MyAppointmentResponse,
    summary="The current user's next booked appointment",
    responses={404: {"model": MessageResponse, "description": "No upcoming appointment"}},
)
async def appointments_mine(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        appt = await get_my_appointment_svc(session, current_user.id)
    except AppointmentError as e:
        return error_response(e)
    return MyAppointmentResponse(message="Appointment retrieved successfully.", data=appt)


# DELETE /appointments/{id}
@router.delete(
    "/appointments/{appointment_id}",
    response_model=MessageResponse,
    summary="Cancel (delete) one of the current user's appointments",
    responses={404: {"model": MessageResponse, "description": "Not found or already cancelled"}},
)
async def appointments_cancel(
    appointment_id: int = Path(..., ge=1),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    try:
        await cancel_appointment_svc(session, appointment_id, current_user.id)
    except AppointmentError as e:
        return error_response(e)
    return MessageResponse(message="Appointment cancelled successfully.")
