# src/modules/room/room_controller.py
"""Room controller with API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.auth.dependencies import get_current_user
from src.models.models import User

from . import room_service as service
from .schemas import RoomStateResponse

router = APIRouter(prefix="/room", tags=["Room"])


@router.get("/{entry_id}", response_model=RoomStateResponse)
async def open_room(
    entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get the live room state and capabilities for the caller."""
    return await service.open_room(db, current_user, entry_id)
