# src/modules/queue/schemas.py
"""Queue module Pydantic schemas."""

from typing import Optional, List, Dict
from datetime import datetime
from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from enum import Enum


class QueueStatus(str, Enum):
    WAITING = "waiting"
    CALLED = "called"
    IN_SESSION = "in_session"
    DONE = "done"
    CANCELED = "canceled"


class DoctorPresence(str, Enum):
    AVAILABLE = "available"
    CALLING = "calling"
    BUSY = "busy"


# ============================================================================
# REQUEST SCHEMAS
# ============================================================================

class ConsultationRequestCreate(BaseModel):
    """Patient request to join a doctor's queue."""
    doctor_id: UUID
    note: Optional[str] = Field(default=None, max_length=2000)
    is_free: Optional[bool] = None
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class CallEntryRequest(BaseModel):
    """Visit estimate and pricing the doctor may confirm while calling."""
    expected_minutes: Optional[int] = Field(default=None, ge=1, le=240)
    is_free: Optional[bool] = None
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value):
        return value.upper() if value else value


# ============================================================================
# RESPONSE SCHEMAS
# ============================================================================

class QueueEntryResponse(BaseModel):
    """Full queue entry row, including the timestamp trail."""
    id: UUID
    doctor_id: UUID
    patient_id: UUID
    status: QueueStatus
    requested_at: datetime
    called_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    position: Optional[int] = None
    expected_minutes: Optional[int] = None
    is_free: bool = False
    price: Optional[float] = None
    currency: Optional[str] = None
    note: Optional[str] = None


class AdmissionResponse(BaseModel):
    """Result of a consultation request submission."""
    created: bool
    message: str
    entry: QueueEntryResponse
    position: Optional[int] = None
    ahead: Optional[int] = None
    eta_minutes: Optional[int] = None


class QueueListResponse(BaseModel):
    entries: List[QueueEntryResponse]
    total: int


class DoctorQueueResponse(BaseModel):
    """Doctor's active queue plus the presence derived from it."""
    doctor_id: UUID
    presence: DoctorPresence
    avg_visit_minutes: int
    entries: List[QueueEntryResponse]
    total: int


class PresenceResponse(BaseModel):
    doctor_id: UUID
    presence: DoctorPresence


class PresenceMapResponse(BaseModel):
    presence: Dict[UUID, DoctorPresence]
