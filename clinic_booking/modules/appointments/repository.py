# clinic_booking/modules/appointments/repository.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.modules.appointments.models import Appointment, ApptStatus


class DuplicateSlotError(Exception):
    """Raised when the (doctor_id, appointment_time) unique constraint is hit."""


async def find_by_doctor_and_time(
    session: AsyncSession, *, doctor_id: int, appointment_time: datetime
) -> Optional[Appointment]:
    """
    Any appointment for this doctor at exactly this time, whatever its status.
    """
    stmt = select(Appointment).where(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_time == appointment_time,
    )
    return (await session.execute(stmt)).scalars().first()


async def find_active_for_patient(
    session: AsyncSession, *, patient_id: int, now: datetime
) -> Optional[Appointment]:
    """
    Earliest booked appointment of the patient at or after `now`.
    """
    stmt = (
        select(Appointment)
        .where(
            Appointment.patient_id == patient_id,
            Appointment.status == ApptStatus.BOOKED.value,
            Appointment.appointment_time >= now,
        )
        .order_by(Appointment.appointment_time.asc())
        .limit(1)
    )
    return (await session.execute(stmt)).scalars().first()


async def create(
    session: AsyncSession, *, patient_id: int, doctor_id: int, appointment_time: datetime
) -> Appointment:
    appt = Appointment(
        patient_id=patient_id,
        doctor_id=doctor_id,
        appointment_time=appointment_time,
        status=ApptStatus.BOOKED.value,
    )
    session.add(appt)
    try:
        # Flush to force INSERT and surface the unique constraint here
        await session.flush()
    except IntegrityError as exc:
        # The session is unusable after a failed flush; reset it so the
        # request can still commit its audit entry
        await session.rollback()
        message = str(exc.orig).lower() if exc.orig else str(exc).lower()
        if "uq_appt_doctor_time" in message or "unique" in message:
            raise DuplicateSlotError("slot_already_taken") from exc
        raise

    # server_default columns (created_at/updated_at) are loaded here
    await session.refresh(appt)
    return appt


async def list_times_for_doctor_on(
    session: AsyncSession, *, doctor_id: int, day: date
) -> Sequence[datetime]:
    """
    appointment_time of every row for the doctor on `day`, any status.
    """
    day_start = datetime.combine(day, time.min)
    day_end = day_start + timedelta(days=1)
    stmt = (
        select(Appointment.appointment_time)
        .where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_time >= day_start,
            Appointment.appointment_time < day_end,
        )
        .order_by(Appointment.appointment_time)
    )
    return (await session.execute(stmt)).scalars().all()


async def find_cancellable(
    session: AsyncSession, *, appointment_id: int, patient_id: int
) -> Optional[Appointment]:
    stmt = select(Appointment).where(
        Appointment.id == appointment_id,
        Appointment.patient_id == patient_id,
        Appointment.status == ApptStatus.BOOKED.value,
    )
    return (await session.execute(stmt)).scalars().first()


async def delete_appointment(session: AsyncSession, *, appointment_id: int) -> int:
    res = await session.execute(delete(Appointment).where(Appointment.id == appointment_id))
    return res.rowcount or 0  # type: ignore
