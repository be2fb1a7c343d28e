# tests/test_doctor_queue.py

import pytest

from src.common.exceptions import AuthorizationError
from src.models.models import QueueEntry, UserRole
from src.modules.queue import lifecycle, queue_service
from src.modules.queue.admission import submit_request
from src.modules.queue.schemas import QueueStatus


@pytest.fixture
def doctor_with_patients(session, make_user, make_doctor):
    """One doctor and ``count`` patients each holding a waiting entry."""
    async def _build(count: int, notes=None):
        doctor = await make_doctor()
        entry_ids = []
        for i in range(count):
            patient = await make_user(full_name=f"Patient {i}")
            note = notes[i] if notes else None
            result = await submit_request(session, patient, patient.id, doctor.id, note=note)
            entry_ids.append(result.entry.id)
        return doctor, entry_ids

    return _build


async def test_active_queue_orders_by_position_then_arrival(session, doctor_with_patients):
    doctor, (first, second, third, fourth) = await doctor_with_patients(4)

    for entry_id, position in ((first, None), (second, 2), (third, 1), (fourth, None)):
        entry = await session.get(QueueEntry, entry_id)
        entry.position = position
    await session.commit()

    queue = await queue_service.get_doctor_queue(session, doctor)

    assert [e.id for e in queue.entries] == [third, second, first, fourth]


async def test_history_includes_terminal_entries(session, doctor_with_patients):
    doctor, (done_id, canceled_id, waiting_id) = await doctor_with_patients(3)
    await lifecycle.start_entry(session, doctor, done_id)
    await lifecycle.end_entry(session, doctor, done_id)
    await lifecycle.cancel_entry(session, doctor, canceled_id)

    history = await queue_service.get_doctor_history(session, doctor)
    active = await queue_service.get_doctor_queue(session, doctor)

    assert [e.id for e in history.entries] == [done_id, canceled_id, waiting_id]
    assert [e.id for e in active.entries] == [waiting_id]


async def test_history_status_filter(session, doctor_with_patients):
    doctor, (done_id, waiting_id) = await doctor_with_patients(2)
    await lifecycle.start_entry(session, doctor, done_id)
    await lifecycle.end_entry(session, doctor, done_id)

    done = await queue_service.get_doctor_history(session, doctor, status=QueueStatus.DONE)
    waiting = await queue_service.get_doctor_history(session, doctor, status=QueueStatus.WAITING)
    canceled = await queue_service.get_doctor_history(session, doctor, status=QueueStatus.CANCELED)

    assert [e.id for e in done.entries] == [done_id]
    assert [e.id for e in waiting.entries] == [waiting_id]
    assert canceled.total == 0


async def test_history_search_over_note_status_and_ids(session, doctor_with_patients):
    doctor, (rash_id, cough_id) = await doctor_with_patients(2, notes=["Skin RASH on arm", "dry cough"])
    await lifecycle.call_entry(session, doctor, cough_id)
    cough = await queue_service.get_entry_for_participant(session, doctor, cough_id)

    by_note = await queue_service.get_doctor_history(session, doctor, q="rash")
    by_status = await queue_service.get_doctor_history(session, doctor, q="CALLED")
    by_patient = await queue_service.get_doctor_history(session, doctor, q=str(cough.patient_id)[:8])
    by_entry = await queue_service.get_doctor_history(session, doctor, q=str(rash_id))
    blank = await queue_service.get_doctor_history(session, doctor, q="   ")
    combined = await queue_service.get_doctor_history(session, doctor, status=QueueStatus.WAITING, q="cough")

    assert [e.id for e in by_note.entries] == [rash_id]
    assert [e.id for e in by_status.entries] == [cough_id]
    assert cough_id in [e.id for e in by_patient.entries]
    assert [e.id for e in by_entry.entries] == [rash_id]
    assert blank.total == 2
    assert combined.total == 0


async def test_history_is_for_doctors(session, make_user):
    patient = await make_user(UserRole.PATIENT)

    with pytest.raises(AuthorizationError):
        await queue_service.get_doctor_history(session, patient)


async def test_history_route_filters(client, doctor_with_patients, auth_headers):
    doctor, (entry_id,) = await doctor_with_patients(1, notes=["Follow-up"])

    response = await client.get(
        "/queue/doctor/history", params={"status": "waiting", "q": "follow"}, headers=auth_headers(doctor)
    )
    assert response.status_code == 200
    assert [e["id"] for e in response.json()["entries"]] == [str(entry_id)]

    response = await client.get("/queue/doctor/history", params={"status": "done"}, headers=auth_headers(doctor))
    assert response.json()["total"] == 0

    response = await client.get("/queue/doctor/history", params={"status": "bogus"}, headers=auth_headers(doctor))
    assert response.status_code == 422


async def test_entry_detail_respects_admin_join_flag(session, doctor_with_patients, make_user, set_flags):
    _, (entry_id,) = await doctor_with_patients(1)
    admin = await make_user(UserRole.ADMIN)

    await set_flags(admin_join_enabled=False)
    with pytest.raises(AuthorizationError):
        await queue_service.get_entry_for_participant(session, admin, entry_id)

    await set_flags(admin_join_enabled=True)
    entry = await queue_service.get_entry_for_participant(session, admin, entry_id)
    assert entry.id == entry_id
