# clinic_booking/db/base.py
from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import BigInteger, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


# BIGINT on real databases, INTEGER on SQLite so that autoincrement works there
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")


class IntPKMixin:
    """Auto-increment integer primary key."""

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Server-side timestamps."""

    created_at: Mapped[dt.datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )


class ReprMixin:
    """__repr__ for debugging/logging."""

    def __repr__(self) -> str:
        cols: list[str] = []
        for k in getattr(self, "__mapper__").c.keys():
            v: Any = getattr(self, k, None)
            cols.append(f"{k}={v!r}")
        return f"<{self.__class__.__name__} {' '.join(cols)}>"


__all__ = ["Base", "BigIntPK", "IntPKMixin", "TimestampMixin", "ReprMixin"]
