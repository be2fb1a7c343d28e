# src/modules/settings/settings_service.py
"""Service layer for the key/value configuration store."""

import logging
import math
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.common.config import settings
from src.models.models import SystemSetting, User
from src.common.database.database import guard_store
from .schemas import RoomFlags, UpdateRoomFlagsRequest, RoomFlagsActionResponse

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "on"}


def parse_bool(value: Any) -> bool:
    """Coerce a stored setting to bool (bools, 0/1, strings, {"enabled": x})."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, dict) and "enabled" in value:
        return bool(value["enabled"])
    return False


def parse_number(value: Any) -> int:
    """Coerce a stored setting to int; anything unparseable becomes 0."""
    if isinstance(value, dict) and "value" in value:
        value = value["value"]
    if isinstance(value, bool):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if math.isfinite(number) else 0


def flags_from_mapping(raw: Dict[str, Any]) -> RoomFlags:
    """Overlay stored values onto the defaults, coercing by the default's type."""
    defaults = RoomFlags(avg_visit_minutes=settings.DEFAULT_AVG_VISIT_MINUTES)
    values = defaults.model_dump()
    for key, default in values.items():
        if raw.get(key) is None:
            continue
        if isinstance(default, bool):
            values[key] = parse_bool(raw[key])
        else:
            values[key] = parse_number(raw[key])
    # A zero or negative average visit is never a usable estimate.
    if values["avg_visit_minutes"] <= 0:
        values["avg_visit_minutes"] = settings.DEFAULT_AVG_VISIT_MINUTES
    return RoomFlags(**values)


@guard_store
async def load_settings_map(session: AsyncSession) -> Dict[str, Any]:
    result = await session.execute(select(SystemSetting))
    return {row.key.strip(): row.value for row in result.scalars().all() if row.key and row.key.strip()}


async def load_room_flags(session: AsyncSession) -> RoomFlags:
    """Read the flat configuration snapshot once and build RoomFlags."""
    return flags_from_mapping(await load_settings_map(session))


@guard_store
async def update_room_flags(
    session: AsyncSession,
    user: User,
    request: UpdateRoomFlagsRequest
) -> RoomFlagsActionResponse:
    """Upsert the provided flags (admin only, enforced by the route)."""
    changes = request.model_dump(exclude_none=True)
    if changes:
        result = await session.execute(select(SystemSetting).where(SystemSetting.key.in_(list(changes))))
        existing = {row.key: row for row in result.scalars().all()}
        for key, value in changes.items():
            if key in existing:
                existing[key].value = value
            else:
                session.add(SystemSetting(key=key, value=value))
        await session.commit()
        logger.info("Room flags updated by %s: %s", user.id, changes)

    flags = await load_room_flags(session)
    return RoomFlagsActionResponse(
        success=True,
        message="Room settings updated successfully" if changes else "No changes submitted",
        flags=flags
    )
