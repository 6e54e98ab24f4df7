# clinic_booking/db/sql.py
from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from clinic_booking.core.config import settings
from clinic_booking.db.base import Base
from clinic_booking.modules.log import write_audit_log

logger = logging.getLogger(__name__)

def build_engine(dsn: str) -> AsyncEngine:
    """
    Create the async engine for `dsn`.

    Pool sizing only applies to server databases; in-memory SQLite needs a
    single shared connection or every session would see an empty database.
    """
    url = make_url(dsn)
    if url.get_backend_name() == "sqlite":
        kwargs = {}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(dsn, echo=settings.DB_ECHO, **kwargs)

    return create_async_engine(
        dsn,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )

engine = build_engine(settings.SQL_DSN)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    autoflush=False,
    class_=AsyncSession,
)

async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Provide a DB session for each request.
    Automatically apply commit/rollback and write audit logs.

    The caller id is read from request.state after the handler ran;
    get_current_user stores it there.
    """
    async with AsyncSessionLocal() as session:
        action = f"{request.method} {request.url.path}"

        try:
            yield session

            await session.commit()

            await write_audit_log(
                session,
                getattr(request.state, "user_id", None),
                f"{action} COMMIT",
                "Operation completed successfully",
            )
            await session.commit()

        except Exception as exc:
            logger.warning("Rolling back %s: %s", action, exc)
            await session.rollback()

            await write_audit_log(
                session,
                getattr(request.state, "user_id", None),
                f"{action} ROLLBACK",
                str(exc),
            )
            await session.commit()

            raise

async def init_db(*, drop: bool = False) -> None:
    """
    Create database tables from the ORM metadata.
    """
    # Import all models here so they get registered on Base.metadata
    from clinic_booking.modules.users import models as users_models  # noqa: F401
    from clinic_booking.modules.appointments import models as appointments_models  # noqa: F401

    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
