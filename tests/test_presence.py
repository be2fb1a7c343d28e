# tests/test_presence.py

from datetime import datetime
from types import SimpleNamespace
from uuid import uuid4

from src.modules.queue.presence import derive_status, derive_status_map
from src.modules.queue.schemas import DoctorPresence

T = datetime(2026, 3, 2, 9, 0, 0)


def row(doctor_id=None, status="waiting", **stamps):
    values = dict(called_at=None, started_at=None, ended_at=None, canceled_at=None)
    values.update(stamps)
    return SimpleNamespace(doctor_id=doctor_id, status=status, **values)


def test_no_rows_is_available():
    assert derive_status([]) == DoctorPresence.AVAILABLE


def test_started_open_row_is_busy():
    assert derive_status([row(started_at=T)]) == DoctorPresence.BUSY


def test_called_only_row_is_calling():
    assert derive_status([row(called_at=T)]) == DoctorPresence.CALLING


def test_requested_only_row_is_available():
    assert derive_status([row()]) == DoctorPresence.AVAILABLE


def test_busy_wins_over_calling():
    rows = [row(called_at=T), row(called_at=T, started_at=T)]
    assert derive_status(rows) == DoctorPresence.BUSY


def test_ended_row_does_not_count_as_busy():
    assert derive_status([row(called_at=T, started_at=T, ended_at=T)]) == DoctorPresence.AVAILABLE


def test_canceled_overrides_started():
    assert derive_status([row(started_at=T, canceled_at=T)]) == DoctorPresence.AVAILABLE


def test_canceled_call_is_not_calling():
    assert derive_status([row(called_at=T, canceled_at=T)]) == DoctorPresence.AVAILABLE


def test_status_string_is_not_trusted():
    # Stored status claims a session, timestamps say nothing happened yet.
    assert derive_status([row(status="in_session")]) == DoctorPresence.AVAILABLE
    # Stored status lags behind a start that already happened.
    assert derive_status([row(status="waiting", started_at=T)]) == DoctorPresence.BUSY


def test_accepts_plain_mappings():
    assert derive_status([{"called_at": T, "started_at": None}]) == DoctorPresence.CALLING


def test_status_map_groups_by_doctor():
    busy_doc, calling_doc, idle_doc = uuid4(), uuid4(), uuid4()
    rows = [
        row(doctor_id=busy_doc, started_at=T),
        row(doctor_id=calling_doc, called_at=T),
        row(doctor_id=calling_doc),
    ]

    result = derive_status_map(rows, [busy_doc, calling_doc, idle_doc])

    assert result == {
        busy_doc: DoctorPresence.BUSY,
        calling_doc: DoctorPresence.CALLING,
        idle_doc: DoctorPresence.AVAILABLE,
    }
