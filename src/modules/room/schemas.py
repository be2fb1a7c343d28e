# src/modules/room/schemas.py
"""Room module Pydantic schemas."""

from typing import Optional
from pydantic import BaseModel
from uuid import UUID
from enum import Enum

from src.modules.queue.schemas import QueueEntryResponse, DoctorPresence
from src.modules.settings.schemas import RoomFlags


class RoomRole(str, Enum):
    DOCTOR = "doctor"
    PATIENT = "patient"
    ADMIN = "admin"


class CapabilityReason(str, Enum):
    ROOM_DISABLED = "room_disabled"
    DISABLED_BY_ADMIN = "disabled_by_admin"
    NOT_AVAILABLE_FOR_ROLE = "not_available_for_role"


class Capability(BaseModel):
    """One room feature; disabled features carry a placeholder to render."""
    enabled: bool
    reason: Optional[CapabilityReason] = None
    placeholder: Optional[str] = None


class RoomCapabilities(BaseModel):
    room_disabled: bool
    chat: Capability
    audio: Capability
    video: Capability
    vitals_panel: Capability
    attachments: Capability
    prescriptions: Capability


class RoomStateResponse(BaseModel):
    """Everything the live room needs to render for the caller."""
    entry: QueueEntryResponse
    role: RoomRole
    flags: RoomFlags
    capabilities: RoomCapabilities
    max_visit_minutes: int
    chat_channel: UUID
    doctor_presence: DoctorPresence
    doctor_name: str
    patient_name: str
