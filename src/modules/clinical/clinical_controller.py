# src/modules/clinical/clinical_controller.py
"""Clinical context controller with API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.auth.dependencies import get_current_user
from src.models.models import User

from . import clinical_service as service
from .schemas import ClinicalContextResponse

router = APIRouter(prefix="/clinical", tags=["Clinical Context"])


@router.get("/{entry_id}", response_model=ClinicalContextResponse)
async def get_clinical_context(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Latest vitals per type and recent files for the session's patient."""
    return await service.assemble_clinical_context(db, current_user, entry_id)
