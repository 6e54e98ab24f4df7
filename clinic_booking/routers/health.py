# clinic_booking/routers/health.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from clinic_booking.db.sql import get_session

router = APIRouter()


@router.get("/health")
async def health_root():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db(session: AsyncSession = Depends(get_session)):
    """
    Validates database connectivity with SELECT 1.
    Returns 503 if no connectivity (useful for readiness/liveness checks).
    """
    try:
        await session.execute(text("SELECT 1"))
        return {"status": "ok", "database": session.bind.dialect.name}
    except SQLAlchemyError as exc:
        # Don't expose internal details
        raise HTTPException(status_code=503, detail="database_unavailable") from exc
