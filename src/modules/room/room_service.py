# src/modules/room/room_service.py
"""Room capability gate: who may enter a live room and what it exposes."""

import logging
from typing import Dict, FrozenSet
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.database.database import guard_store
from src.common.exceptions import AuthorizationError
from src.common.utils.global_messages import GlobalMessages
from src.models.models import QueueEntry, User
from src.modules.queue import queue_store
from src.modules.queue.queue_service import build_entry_response, is_admin_joiner, presence_for_doctor
from src.modules.settings.schemas import RoomFlags
from src.modules.settings.settings_service import load_room_flags
from .schemas import (
    Capability, CapabilityReason, RoomCapabilities, RoomRole, RoomStateResponse
)

logger = logging.getLogger(__name__)

ALL_ROLES: FrozenSet[RoomRole] = frozenset(RoomRole)

# capability -> (flag that gates it, roles that may use it)
CAPABILITY_RULES: Dict[str, tuple] = {
    "chat": ("live_chat_enabled", ALL_ROLES),
    "audio": ("live_audio_enabled", ALL_ROLES),
    "video": ("live_video_enabled", ALL_ROLES),
    "vitals_panel": ("vitals_panel_enabled", ALL_ROLES),
    "attachments": ("live_attachments_enabled", frozenset({RoomRole.DOCTOR, RoomRole.PATIENT})),
    "prescriptions": ("prescriptions_enabled", frozenset({RoomRole.DOCTOR})),
}


def is_room_disabled(flags: RoomFlags) -> bool:
    """Audio and video both off is the administrative hard stop for the room."""
    return not flags.live_video_enabled and not flags.live_audio_enabled


def resolve_role(user: User, entry: QueueEntry, flags: RoomFlags) -> RoomRole:
    """Entry's doctor, entry's patient, or an admin when admin join is on."""
    if user.id == entry.doctor_id:
        return RoomRole.DOCTOR
    if user.id == entry.patient_id:
        return RoomRole.PATIENT
    if is_admin_joiner(user, flags):
        return RoomRole.ADMIN
    raise AuthorizationError(GlobalMessages.ROOM_ACCESS_DENIED)


def resolve_capabilities(flags: RoomFlags, role: RoomRole) -> RoomCapabilities:
    """Combine flags with the caller's role into the effective capability set."""
    room_disabled = is_room_disabled(flags)
    capabilities = {}
    for name, (flag_name, roles) in CAPABILITY_RULES.items():
        if room_disabled:
            capabilities[name] = Capability(
                enabled=False,
                reason=CapabilityReason.ROOM_DISABLED,
                placeholder=GlobalMessages.ROOM_DISABLED,
            )
        elif not getattr(flags, flag_name):
            capabilities[name] = Capability(
                enabled=False,
                reason=CapabilityReason.DISABLED_BY_ADMIN,
                placeholder=GlobalMessages.FEATURE_DISABLED,
            )
        elif role not in roles:
            capabilities[name] = Capability(
                enabled=False,
                reason=CapabilityReason.NOT_AVAILABLE_FOR_ROLE,
                placeholder=GlobalMessages.FEATURE_NOT_FOR_ROLE,
            )
        else:
            capabilities[name] = Capability(enabled=True)
    return RoomCapabilities(room_disabled=room_disabled, **capabilities)


@guard_store
async def _load_display_names(session: AsyncSession, user_ids) -> Dict[UUID, str]:
    result = await session.execute(select(User).where(User.id.in_(list(user_ids))))
    return {u.id: u.display_name for u in result.scalars().all()}


async def authorize_participant(session: AsyncSession, user: User, entry_id: UUID):
    """Load the entry, the flags and the caller's room role in one go."""
    flags = await load_room_flags(session)
    entry = await queue_store.get_entry(session, entry_id)
    try:
        role = resolve_role(user, entry, flags)
    except AuthorizationError:
        logger.warning("User %s denied entry to room %s", user.id, entry_id)
        raise
    return entry, flags, role


async def open_room(session: AsyncSession, user: User, entry_id: UUID) -> RoomStateResponse:
    """Room state for the caller; flags are read once per call."""
    entry, flags, role = await authorize_participant(session, user, entry_id)
    names = await _load_display_names(session, {entry.doctor_id, entry.patient_id})

    return RoomStateResponse(
        entry=build_entry_response(entry),
        role=role,
        flags=flags,
        capabilities=resolve_capabilities(flags, role),
        max_visit_minutes=flags.max_visit_minutes,
        chat_channel=entry.id,
        doctor_presence=await presence_for_doctor(session, entry.doctor_id),
        doctor_name=names.get(entry.doctor_id, "—"),
        patient_name=names.get(entry.patient_id, "—"),
    )
