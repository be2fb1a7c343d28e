# src/modules/queue/queue_service.py
"""Queue read models: entry details, queue lists and doctor presence."""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.common.exceptions import AuthorizationError
from src.common.utils.global_messages import GlobalMessages
from src.models.models import QueueEntry, QueueStatus as DBQueueStatus, User, UserRole
from src.modules.settings.schemas import RoomFlags
from src.modules.settings.settings_service import load_room_flags
from . import queue_store as store
from .presence import derive_status, derive_status_map
from .schemas import (
    QueueEntryResponse, QueueListResponse, DoctorQueueResponse,
    PresenceResponse, PresenceMapResponse, DoctorPresence, QueueStatus
)


def _convert_status(db_status: DBQueueStatus) -> QueueStatus:
    """Convert database status to schema status."""
    return QueueStatus(db_status.value)


def build_entry_response(entry: QueueEntry) -> QueueEntryResponse:
    """Snapshot of the full entry row."""
    return QueueEntryResponse(
        id=entry.id,
        doctor_id=entry.doctor_id,
        patient_id=entry.patient_id,
        status=_convert_status(entry.status),
        requested_at=entry.requested_at,
        called_at=entry.called_at,
        started_at=entry.started_at,
        ended_at=entry.ended_at,
        canceled_at=entry.canceled_at,
        position=entry.position,
        expected_minutes=entry.expected_minutes,
        is_free=bool(entry.is_free),
        price=entry.price,
        currency=entry.currency,
        note=entry.note,
    )


def is_admin_joiner(user: User, flags: RoomFlags) -> bool:
    """Admins act on entries they are not part of only while admin join is on."""
    return user.role == UserRole.ADMIN and flags.admin_join_enabled


def estimate_wait(position: Optional[int], avg_visit_minutes: int) -> tuple[Optional[int], Optional[int]]:
    """Patients ahead and ETA in minutes; unknown when position is not set."""
    if position is None:
        return None, None
    ahead = max(0, position - 1)
    return ahead, ahead * avg_visit_minutes


async def get_entry_for_participant(
    session: AsyncSession,
    user: User,
    entry_id: UUID
) -> QueueEntryResponse:
    """Entry detail for its doctor, its patient, or a joining admin."""
    flags = await load_room_flags(session)
    entry = await store.get_entry(session, entry_id)
    if user.id not in (entry.doctor_id, entry.patient_id) and not is_admin_joiner(user, flags):
        raise AuthorizationError(GlobalMessages.ROOM_ACCESS_DENIED)
    return build_entry_response(entry)


async def get_patient_queue(session: AsyncSession, user: User) -> QueueListResponse:
    """Caller's own active requests, newest first."""
    entries = await store.list_active_for_patient(session, user.id)
    return QueueListResponse(
        entries=[build_entry_response(e) for e in entries],
        total=len(entries)
    )


async def get_doctor_queue(session: AsyncSession, user: User) -> DoctorQueueResponse:
    """Caller doctor's active queue with presence derived from the same rows."""
    if user.role != UserRole.DOCTOR:
        raise AuthorizationError(GlobalMessages.NOT_SESSION_DOCTOR)

    entries = await store.list_active_for_doctor(session, user.id)
    flags = await load_room_flags(session)
    return DoctorQueueResponse(
        doctor_id=user.id,
        presence=derive_status(entries),
        avg_visit_minutes=flags.avg_visit_minutes,
        entries=[build_entry_response(e) for e in entries],
        total=len(entries)
    )


async def get_doctor_history(
    session: AsyncSession,
    user: User,
    status: Optional[QueueStatus] = None,
    q: Optional[str] = None
) -> QueueListResponse:
    """Caller doctor's entries in any status, optionally filtered and searched."""
    if user.role != UserRole.DOCTOR:
        raise AuthorizationError(GlobalMessages.NOT_SESSION_DOCTOR)

    db_status = DBQueueStatus(status.value) if status is not None else None
    entries = await store.list_for_doctor(session, user.id, status=db_status, q=q)
    return QueueListResponse(
        entries=[build_entry_response(e) for e in entries],
        total=len(entries)
    )


async def get_doctor_presence(session: AsyncSession, doctor_id: UUID) -> PresenceResponse:
    rows = await store.list_timestamp_rows(session, [doctor_id])
    return PresenceResponse(doctor_id=doctor_id, presence=derive_status(rows))


async def get_presence_map(session: AsyncSession, doctor_ids: Iterable[UUID]) -> PresenceMapResponse:
    """Presence for several doctors from one snapshot read."""
    doctor_ids: List[UUID] = list(dict.fromkeys(doctor_ids))
    rows = await store.list_timestamp_rows(session, doctor_ids)
    return PresenceMapResponse(presence=derive_status_map(rows, doctor_ids))


async def presence_for_doctor(session: AsyncSession, doctor_id: UUID) -> DoctorPresence:
    return (await get_doctor_presence(session, doctor_id)).presence
