from datetime import date, timedelta

from sqlalchemy import select

from clinic_booking.db.sql import AsyncSessionLocal
from clinic_booking.modules.users.models import AuditLog

URL = "/api/appointments"
SLOTS_URL = "/api/appointments/available-slots"
MINE_URL = "/api/appointments/mine"


async def _book(client, headers, doctor_id, when="2030-01-01 10:00:00"):
    return await client.post(
        URL, json={"doctor_id": doctor_id, "appointment_time": when}, headers=headers
    )


async def test_book_returns_201_with_record(client, auth, patient, doctor):
    res = await _book(client, auth(patient), doctor.id)

    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Appointment booked successfully."
    assert body["data"]["doctor_id"] == doctor.id
    assert body["data"]["patient_id"] == patient.id
    assert body["data"]["appointment_time"] == "2030-01-01 10:00:00"
    assert body["data"]["status"] == "booked"


async def test_patient_id_in_body_is_ignored(client, auth, patient, other_patient, doctor, appointments_in_db):
    res = await client.post(
        URL,
        json={
            "doctor_id": doctor.id,
            "appointment_time": "2030-01-01 10:00:00",
            "patient_id": other_patient.id,
        },
        headers=auth(patient),
    )
    assert res.status_code == 201
    [row] = await appointments_in_db()
    assert row.patient_id == patient.id


async def test_double_booking_same_slot(client, auth, patient, other_patient, doctor, appointments_in_db):
    assert (await _book(client, auth(patient), doctor.id)).status_code == 201

    res = await _book(client, auth(other_patient), doctor.id)
    assert res.status_code == 409
    assert res.json() == {"message": "This appointment slot is already booked."}
    assert len(await appointments_in_db()) == 1


async def test_second_booking_for_same_patient(client, auth, patient, doctor, second_doctor):
    assert (await _book(client, auth(patient), doctor.id)).status_code == 201

    res = await _book(client, auth(patient), second_doctor.id, "2030-01-01 11:00:00")
    assert res.status_code == 409
    assert res.json() == {"message": "You already have a booked appointment."}


async def test_book_validation_errors(client, auth, patient, doctor):
    res = await _book(client, auth(patient), 999)
    assert res.status_code == 422
    assert res.json()["message"] == "The given data was invalid."
    assert "doctor_id" in res.json()["errors"]

    res = await _book(client, auth(patient), doctor.id, "2030-01-01T10:00")
    assert res.status_code == 422
    assert "appointment_time" in res.json()["errors"]

    res = await _book(client, auth(patient), doctor.id, "2001-01-01 10:00:00")
    assert res.status_code == 422
    assert res.json()["errors"]["appointment_time"] == [
        "The appointment time must be a date after now."
    ]

    res = await client.post(URL, json={}, headers=auth(patient))
    assert res.status_code == 422
    assert {"doctor_id", "appointment_time"} <= set(res.json()["errors"])


async def test_format_errors_reported_before_unknown_doctor(client, auth, patient):
    res = await _book(client, auth(patient), 999, "2001-01-01 10:00:00")
    assert res.status_code == 422
    errors = res.json()["errors"]
    assert "appointment_time" in errors
    assert "doctor_id" not in errors

    res = await _book(client, auth(patient), 999)
    assert res.status_code == 422
    assert "doctor_id" in res.json()["errors"]


async def test_requires_bearer_token(client, doctor):
    res = await _book(client, {}, doctor.id)
    assert res.status_code == 401
    assert "message" in res.json()

    res = await client.get(MINE_URL, headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401


async def test_available_slots(client, auth, patient, doctor):
    res = await client.get(
        SLOTS_URL, params={"doctor_id": doctor.id, "date": "2030-01-01"}, headers=auth(patient)
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Available slots retrieved."
    data = res.json()["data"]
    assert len(data) == 16
    assert data[0] == "2030-01-01 09:00:00"
    assert data[-1] == "2030-01-01 16:30:00"

    await _book(client, auth(patient), doctor.id)

    res = await client.get(
        SLOTS_URL, params={"doctor_id": doctor.id, "date": "2030-01-01"}, headers=auth(patient)
    )
    data = res.json()["data"]
    assert len(data) == 15
    assert "2030-01-01 10:00:00" not in data


async def test_available_slots_validation(client, auth, patient, doctor):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    res = await client.get(
        SLOTS_URL, params={"doctor_id": doctor.id, "date": yesterday}, headers=auth(patient)
    )
    assert res.status_code == 422
    assert "date" in res.json()["errors"]

    res = await client.get(
        SLOTS_URL, params={"doctor_id": 999, "date": "2030-01-01"}, headers=auth(patient)
    )
    assert res.status_code == 422
    assert "doctor_id" in res.json()["errors"]

    res = await client.get(SLOTS_URL, params={"date": "2030-01-01"}, headers=auth(patient))
    assert res.status_code == 422


async def test_my_appointment(client, auth, patient, doctor):
    res = await client.get(MINE_URL, headers=auth(patient))
    assert res.status_code == 404
    assert res.json() == {"message": "No upcoming appointment found."}

    booked = (await _book(client, auth(patient), doctor.id)).json()["data"]

    res = await client.get(MINE_URL, headers=auth(patient))
    assert res.status_code == 200
    assert res.json() == {
        "message": "Appointment retrieved successfully.",
        "data": {
            "id": booked["id"],
            "doctor_name": "Greg House",
            "specialty": "Diagnostics",
            "appointment_time": "2030-01-01 10:00:00",
            "status": "booked",
        },
    }


async def test_cancel_flow(client, auth, patient, other_patient, doctor):
    booked = (await _book(client, auth(patient), doctor.id)).json()["data"]

    res = await client.delete(f"{URL}/{booked['id']}", headers=auth(other_patient))
    assert res.status_code == 404
    assert res.json() == {"message": "Appointment not found or already canceled."}

    res = await client.delete(f"{URL}/{booked['id']}", headers=auth(patient))
    assert res.status_code == 200
    assert res.json() == {"message": "Appointment cancelled successfully."}

    assert (await client.get(MINE_URL, headers=auth(patient))).status_code == 404
    assert (await client.delete(f"{URL}/{booked['id']}", headers=auth(patient))).status_code == 404

    # the slot can be taken again
    assert (await _book(client, auth(other_patient), doctor.id)).status_code == 201


async def test_requests_are_audited(client, auth, patient, doctor):
    await _book(client, auth(patient), doctor.id)

    async with AsyncSessionLocal() as s:
        rows = (await s.execute(select(AuditLog))).scalars().all()

    assert [r.action for r in rows] == ["POST /api/appointments COMMIT"]
    assert rows[0].user_id == patient.id


async def test_health(client):
    assert (await client.get("/api/health")).json() == {"status": "ok"}

    res = await client.get("/api/health/db")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "database": "sqlite"}
