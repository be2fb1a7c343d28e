# src/modules/queue/queue_store.py
"""Read/write helpers over the consultation_queue table."""

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, update, desc
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import guard_store
from src.common.exceptions import NotFoundError
from src.common.utils.global_messages import GlobalMessages
from src.models.models import QueueEntry, QueueStatus, ACTIVE_STATUSES


@guard_store
async def get_entry(session: AsyncSession, entry_id: UUID) -> QueueEntry:
    """Load one entry or raise NotFoundError."""
    result = await session.execute(select(QueueEntry).where(QueueEntry.id == entry_id))
    entry = result.scalar_one_or_none()
    if entry is None:
        raise NotFoundError(GlobalMessages.ENTRY_NOT_FOUND)
    return entry


@guard_store
async def find_active_entry(
    session: AsyncSession,
    patient_id: UUID,
    doctor_id: UUID
) -> Optional[QueueEntry]:
    """Newest active entry for the (patient, doctor) pair, if any."""
    result = await session.execute(
        select(QueueEntry)
        .where(QueueEntry.patient_id == patient_id)
        .where(QueueEntry.doctor_id == doctor_id)
        .where(QueueEntry.status.in_(ACTIVE_STATUSES))
        .order_by(desc(QueueEntry.requested_at))
        .limit(1)
    )
    return result.scalars().first()


@guard_store
async def list_active_for_doctor(session: AsyncSession, doctor_id: UUID) -> List[QueueEntry]:
    """Doctor's active queue, ranked by position then arrival."""
    result = await session.execute(
        select(QueueEntry)
        .where(QueueEntry.doctor_id == doctor_id)
        .where(QueueEntry.status.in_(ACTIVE_STATUSES))
        .order_by(QueueEntry.position.asc().nulls_last(), QueueEntry.requested_at.asc())
    )
    return list(result.scalars().all())


def _matches_search(entry: QueueEntry, needle: str) -> bool:
    haystack = (
        str(entry.id),
        str(entry.patient_id),
        entry.status.value,
        entry.note or "",
    )
    return any(needle in value.lower() for value in haystack)


@guard_store
async def list_for_doctor(
    session: AsyncSession,
    doctor_id: UUID,
    status: Optional[QueueStatus] = None,
    q: Optional[str] = None
) -> List[QueueEntry]:
    """Doctor's entries in every status, oldest first, for the history view.

    ``q`` is a case-insensitive substring match over the entry id, patient
    id, status and note.
    """
    stmt = select(QueueEntry).where(QueueEntry.doctor_id == doctor_id)
    if status is not None:
        stmt = stmt.where(QueueEntry.status == status)
    result = await session.execute(stmt.order_by(QueueEntry.requested_at.asc()))
    entries = list(result.scalars().all())

    needle = (q or "").strip().lower()
    if needle:
        entries = [e for e in entries if _matches_search(e, needle)]
    return entries


@guard_store
async def list_active_for_patient(session: AsyncSession, patient_id: UUID) -> List[QueueEntry]:
    """Patient's active requests, newest first."""
    result = await session.execute(
        select(QueueEntry)
        .where(QueueEntry.patient_id == patient_id)
        .where(QueueEntry.status.in_(ACTIVE_STATUSES))
        .order_by(desc(QueueEntry.requested_at))
    )
    return list(result.scalars().all())


@guard_store
async def list_timestamp_rows(session: AsyncSession, doctor_ids: Iterable[UUID]) -> List[Any]:
    """Timestamp snapshot rows used for presence derivation.

    Rows with ended_at or canceled_at set can never contribute to presence,
    so they are filtered out in SQL.
    """
    doctor_ids = list(doctor_ids)
    if not doctor_ids:
        return []
    result = await session.execute(
        select(
            QueueEntry.doctor_id,
            QueueEntry.called_at,
            QueueEntry.started_at,
            QueueEntry.ended_at,
            QueueEntry.canceled_at,
        )
        .where(QueueEntry.doctor_id.in_(doctor_ids))
        .where(QueueEntry.ended_at.is_(None))
        .where(QueueEntry.canceled_at.is_(None))
    )
    return list(result.all())


@guard_store
async def insert_entry(session: AsyncSession, **fields) -> QueueEntry:
    """Add and flush a new entry. IntegrityError is left to the caller."""
    entry = QueueEntry(**fields)
    session.add(entry)
    await session.flush()
    return entry


@guard_store
async def compare_and_set(
    session: AsyncSession,
    entry_id: UUID,
    expected_status: QueueStatus,
    timestamp_column: str,
    values: Dict[str, Any]
) -> bool:
    """Apply ``values`` only if the entry still has ``expected_status``.

    The target timestamp column must also still be NULL, so a timestamp is
    written at most once. Returns True when exactly one row changed.
    """
    stmt = (
        update(QueueEntry)
        .where(QueueEntry.id == entry_id)
        .where(QueueEntry.status == expected_status)
        .where(getattr(QueueEntry, timestamp_column).is_(None))
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount == 1


@guard_store
async def commit(session: AsyncSession) -> None:
    await session.commit()


@guard_store
async def refresh(session: AsyncSession, entry: QueueEntry) -> QueueEntry:
    await session.refresh(entry)
    return entry
