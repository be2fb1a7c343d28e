# tests/test_api.py

from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.common.database.database import guard_store
from src.common.exceptions import TransientStoreError
from src.models.models import UserRole
from src.modules.queue import queue_store


async def test_root_health(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_invalid_token_is_unauthorized(client):
    response = await client.get("/queue/requests/mine", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


async def test_consultation_flow_over_http(client, make_user, make_doctor, auth_headers):
    patient = await make_user()
    doctor = await make_doctor()
    as_patient, as_doctor = auth_headers(patient), auth_headers(doctor)

    response = await client.post(
        "/queue/requests", json={"doctor_id": str(doctor.id), "note": "Follow-up"}, headers=as_patient
    )
    assert response.status_code == 201
    body = response.json()
    assert body["created"] is True
    entry_id = body["entry"]["id"]

    response = await client.post("/queue/requests", json={"doctor_id": str(doctor.id)}, headers=as_patient)
    assert response.status_code == 200
    assert response.json()["created"] is False
    assert response.json()["entry"]["id"] == entry_id

    response = await client.get("/queue/requests/mine", headers=as_patient)
    assert response.json()["total"] == 1

    response = await client.get("/queue/doctor", headers=as_doctor)
    assert response.json()["total"] == 1
    assert response.json()["presence"] == "available"

    response = await client.post(
        f"/queue/entries/{entry_id}/call", json={"expected_minutes": 15, "price": 100, "currency": "usd"},
        headers=as_doctor,
    )
    assert response.status_code == 200
    assert response.json()["status"] == "called"
    assert response.json()["currency"] == "USD"

    response = await client.get(f"/queue/doctors/{doctor.id}/presence", headers=as_patient)
    assert response.json()["presence"] == "calling"

    response = await client.post(f"/queue/entries/{entry_id}/start", headers=as_doctor)
    assert response.json()["status"] == "in_session"

    response = await client.get(f"/room/{entry_id}", headers=as_patient)
    assert response.status_code == 200
    room = response.json()
    assert room["role"] == "patient"
    assert room["doctor_presence"] == "busy"
    assert room["chat_channel"] == entry_id
    assert room["capabilities"]["audio"]["enabled"] is True
    assert room["capabilities"]["prescriptions"]["reason"] == "not_available_for_role"

    response = await client.get(f"/clinical/{entry_id}", headers=as_doctor)
    assert response.status_code == 200
    assert response.json()["vitals"] == []

    response = await client.post(f"/queue/entries/{entry_id}/end", headers=as_doctor)
    assert response.json()["status"] == "done"

    response = await client.get("/queue/requests/mine", headers=as_patient)
    assert response.json()["total"] == 0


async def test_error_bodies_are_typed(client, make_user, make_doctor, auth_headers):
    patient = await make_user()
    doctor = await make_doctor()
    stranger = await make_user()

    response = await client.post("/queue/requests", json={"doctor_id": str(uuid4())}, headers=auth_headers(patient))
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundError"

    response = await client.post("/queue/requests", json={"doctor_id": str(doctor.id)}, headers=auth_headers(patient))
    entry_id = response.json()["entry"]["id"]

    response = await client.get(f"/queue/entries/{entry_id}", headers=auth_headers(stranger))
    assert response.status_code == 403
    assert response.json()["error"] == "AuthorizationError"

    response = await client.post(f"/queue/entries/{entry_id}/end", headers=auth_headers(doctor))
    assert response.status_code == 409
    assert response.json()["error"] == "InvalidTransitionError"
    assert response.json()["current_status"] == "waiting"

    await client.post(f"/queue/entries/{entry_id}/cancel", headers=auth_headers(patient))
    response = await client.post(f"/queue/entries/{entry_id}/start", headers=auth_headers(doctor))
    assert response.status_code == 409
    assert response.json()["current_status"] == "canceled"


async def test_presence_map_endpoint(client, make_user, make_doctor, auth_headers):
    patient = await make_user()
    busy_doctor = await make_doctor()
    idle_doctor = await make_doctor()

    response = await client.post(
        "/queue/requests", json={"doctor_id": str(busy_doctor.id)}, headers=auth_headers(patient)
    )
    entry_id = response.json()["entry"]["id"]
    await client.post(f"/queue/entries/{entry_id}/start", headers=auth_headers(busy_doctor))

    response = await client.get(
        "/queue/presence",
        params=[("doctor_ids", str(busy_doctor.id)), ("doctor_ids", str(idle_doctor.id))],
        headers=auth_headers(patient),
    )

    assert response.status_code == 200
    assert response.json()["presence"] == {
        str(busy_doctor.id): "busy",
        str(idle_doctor.id): "available",
    }


async def test_doctor_queue_is_for_doctors(client, make_user, auth_headers):
    patient = await make_user(UserRole.PATIENT)

    response = await client.get("/queue/doctor", headers=auth_headers(patient))

    assert response.status_code == 403


def _connection_lost(calls):
    @guard_store
    async def failing_get_entry(session, entry_id):
        calls.append(entry_id)
        raise OperationalError("SELECT consultation_queue", {}, ConnectionResetError("server closed the connection"))

    return failing_get_entry


async def test_store_outage_returns_503_with_retry_after(client, make_user, make_doctor, auth_headers, monkeypatch):
    patient = await make_user()
    doctor = await make_doctor()
    response = await client.post("/queue/requests", json={"doctor_id": str(doctor.id)}, headers=auth_headers(patient))
    entry_id = response.json()["entry"]["id"]

    calls = []
    monkeypatch.setattr(queue_store, "get_entry", _connection_lost(calls))

    response = await client.get(f"/queue/entries/{entry_id}", headers=auth_headers(patient))

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "5"
    assert response.json()["error"] == "TransientStoreError"
    assert len(calls) == 1


async def test_driver_errors_surface_as_transient_store_error(session, monkeypatch):
    calls = []

    async def dropped_connection(*args, **kwargs):
        calls.append(args)
        raise OperationalError("SELECT 1", {}, ConnectionResetError("reset by peer"))

    monkeypatch.setattr(session, "execute", dropped_connection)

    with pytest.raises(TransientStoreError) as exc_info:
        await queue_store.get_entry(session, uuid4())

    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert len(calls) == 1
