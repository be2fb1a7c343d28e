# src/modules/clinical/schemas.py
"""Clinical context Pydantic schemas."""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel
from uuid import UUID


class VitalReading(BaseModel):
    """Latest reading for one measurement type."""
    id: UUID
    vital_type: str
    value_numeric: Optional[float] = None
    value2_numeric: Optional[float] = None
    value_text: Optional[str] = None
    unit: Optional[str] = None
    display_value: str
    recorded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PatientFileInfo(BaseModel):
    id: UUID
    consultation_id: Optional[UUID] = None
    file_type: Optional[str] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    storage_path: str
    public_url: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ClinicalContextResponse(BaseModel):
    """Read-only snapshot shown beside a session."""
    entry_id: UUID
    patient_id: UUID
    vitals: List[VitalReading]
    files: List[PatientFileInfo]
