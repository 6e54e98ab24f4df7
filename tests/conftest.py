import os

# Must be set before clinic_booking.core.config is imported
os.environ["SQL_DSN"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select

from clinic_booking.core.security import create_access_token
from clinic_booking.db.sql import AsyncSessionLocal, engine, init_db
from clinic_booking.main import app
from clinic_booking.modules.appointments.models import Appointment
from clinic_booking.modules.users.models import User


@pytest.fixture
async def fresh_db():
    await init_db(drop=True)
    yield
    await engine.dispose()


@pytest.fixture
async def session(fresh_db):
    async with AsyncSessionLocal() as s:
        yield s


@pytest.fixture
async def client(fresh_db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def _add_user(**fields) -> User:
    async with AsyncSessionLocal() as s:
        user = User(**fields)
        s.add(user)
        await s.commit()
        await s.refresh(user)
        return user


@pytest.fixture
async def patient(fresh_db):
    return await _add_user(
        email="pat@example.com", first_name="Pat", last_name="Lee", role="patient"
    )


@pytest.fixture
async def other_patient(fresh_db):
    return await _add_user(
        email="sam@example.com", first_name="Sam", last_name="Ng", role="patient"
    )


@pytest.fixture
async def doctor(fresh_db):
    return await _add_user(
        email="house@example.com",
        first_name="Greg",
        last_name="House",
        role="doctor",
        specialty="Diagnostics",
    )


@pytest.fixture
async def second_doctor(fresh_db):
    return await _add_user(
        email="grey@example.com",
        first_name="Meredith",
        last_name="Grey",
        role="doctor",
        specialty="General Surgery",
    )


def bearer(user: User) -> dict:
    token = create_access_token(subject=str(user.id), role=user.role)
    return {"Authorization": f"Bearer {token}"}


async def stored_appointments() -> list[Appointment]:
    async with AsyncSessionLocal() as s:
        rows = await s.execute(select(Appointment).order_by(Appointment.id))
        return list(rows.scalars().all())


@pytest.fixture
def auth():
    return bearer


@pytest.fixture
def appointments_in_db():
    return stored_appointments
