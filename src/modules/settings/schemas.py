# src/modules/settings/schemas.py
"""Pydantic schemas for settings module."""

from typing import Optional
from pydantic import BaseModel, Field


class RoomFlags(BaseModel):
    """Capability toggles for the live consultation room."""
    live_video_enabled: bool = False
    live_audio_enabled: bool = True
    live_chat_enabled: bool = True
    live_attachments_enabled: bool = True
    prescriptions_enabled: bool = True
    vitals_panel_enabled: bool = True
    admin_join_enabled: bool = True
    max_visit_minutes: int = 20
    avg_visit_minutes: int = 10

    class Config:
        from_attributes = True


class UpdateRoomFlagsRequest(BaseModel):
    """Partial update; omitted keys keep their stored value."""
    live_video_enabled: Optional[bool] = None
    live_audio_enabled: Optional[bool] = None
    live_chat_enabled: Optional[bool] = None
    live_attachments_enabled: Optional[bool] = None
    prescriptions_enabled: Optional[bool] = None
    vitals_panel_enabled: Optional[bool] = None
    admin_join_enabled: Optional[bool] = None
    max_visit_minutes: Optional[int] = Field(default=None, ge=1, le=240)
    avg_visit_minutes: Optional[int] = Field(default=None, ge=1, le=240)


class RoomFlagsActionResponse(BaseModel):
    success: bool
    message: str
    flags: RoomFlags
