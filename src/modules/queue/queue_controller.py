# src/modules/queue/queue_controller.py
"""Queue controller with API routes."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.auth.dependencies import get_current_user
from src.models.models import User

from . import admission, lifecycle, queue_service as service
from .schemas import (
    ConsultationRequestCreate, CallEntryRequest, AdmissionResponse,
    QueueEntryResponse, QueueListResponse, DoctorQueueResponse,
    PresenceResponse, PresenceMapResponse, QueueStatus
)

router = APIRouter(prefix="/queue", tags=["Queue"])


# ============================================================================
# PATIENT ENDPOINTS
# ============================================================================

@router.post("/requests", response_model=AdmissionResponse, status_code=201)
async def submit_consultation_request(
    request: ConsultationRequestCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Join a doctor's queue; returns the existing request if one is still active."""
    result = await admission.submit_request(
        db,
        current_user,
        patient_id=current_user.id,
        doctor_id=request.doctor_id,
        note=request.note,
        is_free=request.is_free,
        price=request.price,
        currency=request.currency,
    )
    if not result.created:
        response.status_code = status.HTTP_200_OK
    return result


@router.get("/requests/mine", response_model=QueueListResponse)
async def get_my_requests(
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get the caller's active consultation requests."""
    return await service.get_patient_queue(db, current_user)


# ============================================================================
# DOCTOR ENDPOINTS
# ============================================================================

@router.get("/doctor", response_model=DoctorQueueResponse)
async def get_doctor_queue(
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get the calling doctor's active queue."""
    return await service.get_doctor_queue(db, current_user)


@router.get("/doctor/history", response_model=QueueListResponse)
async def get_doctor_history(
    status_filter: Optional[QueueStatus] = Query(None, alias="status"),
    q: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get the calling doctor's entries in every status, with filter and search."""
    return await service.get_doctor_history(db, current_user, status=status_filter, q=q)


@router.get("/presence", response_model=PresenceMapResponse)
async def get_presence_map(
    doctor_ids: List[UUID] = Query(..., description="Doctors to derive presence for"),
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Derive presence for several doctors at once."""
    return await service.get_presence_map(db, doctor_ids)


@router.get("/doctors/{doctor_id}/presence", response_model=PresenceResponse)
async def get_doctor_presence(
    doctor_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Derive one doctor's presence (available, calling or busy)."""
    return await service.get_doctor_presence(db, doctor_id)


# ============================================================================
# ENTRY ENDPOINTS
# ============================================================================

@router.get("/entries/{entry_id}", response_model=QueueEntryResponse)
async def get_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get a single queue entry."""
    return await service.get_entry_for_participant(db, current_user, entry_id)


@router.post("/entries/{entry_id}/call", response_model=QueueEntryResponse)
async def call_entry(
    entry_id: UUID,
    request: Optional[CallEntryRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Call a waiting patient."""
    request = request or CallEntryRequest()
    return await lifecycle.call_entry(
        db,
        current_user,
        entry_id,
        expected_minutes=request.expected_minutes,
        is_free=request.is_free,
        price=request.price,
        currency=request.currency,
    )


@router.post("/entries/{entry_id}/start", response_model=QueueEntryResponse)
async def start_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Start the live session."""
    return await lifecycle.start_entry(db, current_user, entry_id)


@router.post("/entries/{entry_id}/end", response_model=QueueEntryResponse)
async def end_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """End the live session."""
    return await lifecycle.end_entry(db, current_user, entry_id)


@router.post("/entries/{entry_id}/cancel", response_model=QueueEntryResponse)
async def cancel_entry(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Cancel an active request."""
    return await lifecycle.cancel_entry(db, current_user, entry_id)
