# src/modules/settings/settings_controller.py
"""Settings controller with API routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import get_db_session
from src.auth.dependencies import get_current_user, require_admin
from src.models.models import User

from . import settings_service as service
from .schemas import RoomFlags, UpdateRoomFlagsRequest, RoomFlagsActionResponse

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/room-flags", response_model=RoomFlags)
async def get_room_flags(
    db: AsyncSession = Depends(get_db_session),
    current_user: User = Depends(get_current_user)
):
    """Get the effective live-room flags."""
    return await service.load_room_flags(db)


@router.put("/room-flags", response_model=RoomFlagsActionResponse)
async def update_room_flags(
    request: UpdateRoomFlagsRequest,
    db: AsyncSession = Depends(get_db_session),
    admin: User = Depends(require_admin)
):
    """Update live-room flags (admin only)."""
    return await service.update_room_flags(db, admin, request)
