# src/modules/clinical/clinical_service.py
"""Clinical context shown alongside a session: latest vitals and recent files."""

from datetime import datetime, timezone
from typing import Any, Iterable, List
from uuid import UUID

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.config import settings
from src.common.database.database import guard_store
from src.models.models import PatientFile, PatientVital, User
from src.modules.room.room_service import authorize_participant
from .schemas import ClinicalContextResponse, PatientFileInfo, VitalReading

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _recorded_key(vital: Any) -> datetime:
    recorded_at = vital.recorded_at
    if recorded_at is None:
        return _OLDEST
    # SQLite hands back naive datetimes; treat them as UTC.
    if recorded_at.tzinfo is None:
        return recorded_at.replace(tzinfo=timezone.utc)
    return recorded_at


def latest_vitals_by_type(rows: Iterable[Any]) -> List[Any]:
    """Reduce readings to the most recent one per vital_type.

    Rows without a type are skipped; a missing recorded_at sorts oldest.
    Output is ordered by type name.
    """
    latest = {}
    for row in rows:
        if not row.vital_type:
            continue
        current = latest.get(row.vital_type)
        if current is None or _recorded_key(row) > _recorded_key(current):
            latest[row.vital_type] = row
    return [latest[key] for key in sorted(latest)]


def _fmt(number: float) -> str:
    return f"{number:g}"


def format_vital_value(vital: Any) -> str:
    """Human-readable value: text, "120 / 80 mmHg" pairs, or a single number."""
    unit = f" {vital.unit}" if vital.unit else ""
    if vital.value_text and vital.value_text.strip():
        return vital.value_text.strip()
    if vital.value_numeric is not None and vital.value2_numeric is not None:
        return f"{_fmt(vital.value_numeric)} / {_fmt(vital.value2_numeric)}{unit}"
    if vital.value_numeric is not None:
        return f"{_fmt(vital.value_numeric)}{unit}"
    if vital.value2_numeric is not None:
        return f"{_fmt(vital.value2_numeric)}{unit}"
    return "—"


def _build_vital_reading(vital: PatientVital) -> VitalReading:
    return VitalReading(
        id=vital.id,
        vital_type=vital.vital_type,
        value_numeric=vital.value_numeric,
        value2_numeric=vital.value2_numeric,
        value_text=vital.value_text,
        unit=vital.unit,
        display_value=format_vital_value(vital),
        recorded_at=vital.recorded_at,
    )


@guard_store
async def fetch_recent_vitals(session: AsyncSession, patient_id: UUID) -> List[PatientVital]:
    result = await session.execute(
        select(PatientVital)
        .where(PatientVital.patient_id == patient_id)
        .order_by(desc(PatientVital.recorded_at))
        .limit(settings.CLINICAL_VITALS_SCAN_LIMIT)
    )
    return list(result.scalars().all())


@guard_store
async def fetch_recent_files(session: AsyncSession, patient_id: UUID) -> List[PatientFile]:
    result = await session.execute(
        select(PatientFile)
        .where(PatientFile.patient_id == patient_id)
        .order_by(desc(PatientFile.created_at))
        .limit(settings.CLINICAL_FILES_LIMIT)
    )
    return list(result.scalars().all())


async def assemble_clinical_context(
    session: AsyncSession,
    user: User,
    entry_id: UUID
) -> ClinicalContextResponse:
    """Snapshot for the entry's patient. Performs no writes."""
    entry, _, _ = await authorize_participant(session, user, entry_id)

    vitals = await fetch_recent_vitals(session, entry.patient_id)
    files = await fetch_recent_files(session, entry.patient_id)

    return ClinicalContextResponse(
        entry_id=entry.id,
        patient_id=entry.patient_id,
        vitals=[_build_vital_reading(v) for v in latest_vitals_by_type(vitals)],
        files=[PatientFileInfo.model_validate(f) for f in files],
    )
