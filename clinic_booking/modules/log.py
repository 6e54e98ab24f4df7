from __future__ import annotations

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.modules.users.models import AuditLog


async def write_audit_log(
    session: AsyncSession,
    user_id: int | None,
    action: str,
    details: str | None = None,
):
    """
    Write an audit log entry.

    action:
        "POST /api/appointments COMMIT"
        "DELETE /api/appointments/3 ROLLBACK"

    details:
        free text, the exception message on rollback
    """
    stmt = insert(AuditLog).values(
        user_id=user_id,
        action=action,
        details=details,
    )
    await session.execute(stmt)
