# clinic_booking/modules/appointments/models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_booking.db.base import Base, BigIntPK, IntPKMixin, TimestampMixin, ReprMixin
from clinic_booking.modules.users.models import User


class ApptStatus(PyEnum):
    BOOKED = "booked"
    CANCELLED = "cancelled"


class Appointment(IntPKMixin, TimestampMixin, ReprMixin, Base):
    """
    A patient's visit with a doctor at one exact timestamp.

    Cancelling deletes the row, so `cancelled` is never observed in practice;
    the value is kept so the column's domain matches the API contract.
    """

    __tablename__ = "appointments"

    patient_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    doctor_id: Mapped[int] = mapped_column(
        BigIntPK,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # Naive server-local time, second precision
    appointment_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApptStatus.BOOKED.value,
        server_default=ApptStatus.BOOKED.value,
    )

    doctor: Mapped[Optional[User]] = relationship(
        "User",
        foreign_keys=[doctor_id],
        lazy="joined",
    )

    __table_args__ = (
        # Avoid double booking: 1 doctor, same timestamp
        UniqueConstraint("doctor_id", "appointment_time", name="uq_appt_doctor_time"),
        Index("ix_appt_patient_status_time", "patient_id", "status", "appointment_time"),
    )
