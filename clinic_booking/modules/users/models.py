# clinic_booking/modules/users/models.py
from __future__ import annotations

import datetime as dt
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from clinic_booking.db.base import Base, BigIntPK, IntPKMixin, TimestampMixin, ReprMixin


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        BigIntPK, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(255), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(nullable=True)
    timestamp: Mapped[dt.datetime] = mapped_column(server_default=func.now())


class UserRole(PyEnum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class User(IntPKMixin, TimestampMixin, ReprMixin, Base):
    """
    Account row shared by patients and doctors.

    Identity (passwords, login) is owned by the identity provider; this table
    only holds what the booking flow reads.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default=UserRole.PATIENT.value
    )
    # Only meaningful for doctors
    specialty: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint(
            "role IN ('patient', 'doctor', 'admin')", name="ck_users_role_valid"
        ),
        Index("ix_users_role", "role"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
