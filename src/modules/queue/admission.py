# src/modules/queue/admission.py
"""Admission of patients into a doctor's queue (find-or-create)."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.config import settings
from src.common.database.database import guard_store
from src.common.exceptions import AuthorizationError, ConflictError, NotFoundError
from src.common.utils import global_functions
from src.common.utils.global_messages import GlobalMessages
from src.models.models import Doctor, QueueEntry, QueueStatus, User, UserRole
from src.modules.settings.settings_service import load_room_flags
from . import events, queue_store as store
from .queue_service import build_entry_response, estimate_wait
from .schemas import AdmissionResponse

logger = logging.getLogger(__name__)


def normalize_pricing(
    is_free: Optional[bool],
    price: Optional[float],
    currency: Optional[str]
) -> dict:
    """Free visits carry price 0 and no currency; paid ones default the currency."""
    if is_free:
        return {"is_free": True, "price": 0, "currency": None}

    fields = {}
    if is_free is not None:
        fields["is_free"] = False
    if price is not None:
        fields["price"] = price
        fields["currency"] = (currency or settings.DEFAULT_CURRENCY).upper()
    elif currency:
        fields["currency"] = currency.upper()
    return fields


@guard_store
async def resolve_doctor(session: AsyncSession, doctor_id: UUID) -> Doctor:
    """Doctor directory lookup; only approved, active doctors are admissible."""
    result = await session.execute(select(Doctor).where(Doctor.user_id == doctor_id))
    doctor = result.scalar_one_or_none()
    if doctor is None or not doctor.is_approved or not doctor.is_active:
        raise NotFoundError(GlobalMessages.DOCTOR_NOT_FOUND)
    return doctor


async def _build_admission_response(
    session: AsyncSession,
    entry: QueueEntry,
    created: bool
) -> AdmissionResponse:
    flags = await load_room_flags(session)
    ahead, eta_minutes = estimate_wait(entry.position, flags.avg_visit_minutes)
    return AdmissionResponse(
        created=created,
        message=GlobalMessages.REQUEST_SUBMITTED if created else GlobalMessages.REQUEST_ALREADY_ACTIVE,
        entry=build_entry_response(entry),
        position=entry.position,
        ahead=ahead,
        eta_minutes=eta_minutes
    )


async def submit_request(
    session: AsyncSession,
    caller: User,
    patient_id: UUID,
    doctor_id: UUID,
    note: Optional[str] = None,
    is_free: Optional[bool] = None,
    price: Optional[float] = None,
    currency: Optional[str] = None
) -> AdmissionResponse:
    """Admit ``patient_id`` into ``doctor_id``'s queue.

    Re-submitting while a request is still waiting, called or in session
    returns that request instead of creating a second one. The application
    check is backed by the ``uq_queue_active_pair`` partial unique index; a
    lost race is recovered by re-reading the winning row.
    """
    if caller.id != patient_id:
        raise AuthorizationError(GlobalMessages.NOT_REQUEST_OWNER)
    if caller.role != UserRole.PATIENT:
        raise AuthorizationError(GlobalMessages.PATIENTS_ONLY)

    await resolve_doctor(session, doctor_id)

    existing = await store.find_active_entry(session, patient_id, doctor_id)
    if existing is not None:
        logger.info("Patient %s already has active entry %s with doctor %s", patient_id, existing.id, doctor_id)
        return await _build_admission_response(session, existing, created=False)

    clean_note = (note or "").strip() or None
    fields = dict(
        doctor_id=doctor_id,
        patient_id=patient_id,
        status=QueueStatus.WAITING,
        requested_at=global_functions.utcnow(),
        note=clean_note,
    )
    fields.update(normalize_pricing(is_free, price, currency))

    try:
        entry = await store.insert_entry(session, **fields)
        await store.commit(session)
    except IntegrityError:
        await session.rollback()
        winner = await store.find_active_entry(session, patient_id, doctor_id)
        if winner is None:
            raise ConflictError()
        logger.info("Concurrent admission for patient %s resolved to entry %s", patient_id, winner.id)
        return await _build_admission_response(session, winner, created=False)

    entry = await store.refresh(session, entry)
    logger.info("Admitted patient %s to doctor %s queue as entry %s", patient_id, doctor_id, entry.id)

    response = await _build_admission_response(session, entry, created=True)
    await events.emit(events.QueueEventKind.CREATED, response.entry, actor_id=caller.id)
    return response
