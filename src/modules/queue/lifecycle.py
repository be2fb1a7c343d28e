# src/modules/queue/lifecycle.py
"""Session lifecycle: waiting -> called -> in_session -> done, or canceled.

Each transition sets exactly one timestamp column and never clears one.
Writes are conditional on the status the caller saw, so a transition that
arrives after someone else moved the entry fails with a stale-session
error instead of overwriting it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.common.exceptions import AuthorizationError, InvalidTransitionError
from src.common.utils import global_functions
from src.common.utils.global_messages import GlobalMessages
from src.models.models import (
    QueueEntry, QueueStatus, User, ACTIVE_STATUSES, TERMINAL_STATUSES
)
from src.modules.settings.schemas import RoomFlags
from src.modules.settings.settings_service import load_room_flags
from . import events, queue_store as store
from .admission import normalize_pricing
from .queue_service import build_entry_response, is_admin_joiner
from .schemas import QueueEntryResponse


@dataclass(frozen=True)
class Transition:
    name: str
    sources: Tuple[QueueStatus, ...]
    target: QueueStatus
    timestamp_column: str
    event: events.QueueEventKind


CALL = Transition("call", (QueueStatus.WAITING,), QueueStatus.CALLED, "called_at", events.QueueEventKind.CALLED)
START = Transition(
    "start", (QueueStatus.WAITING, QueueStatus.CALLED), QueueStatus.IN_SESSION, "started_at",
    events.QueueEventKind.STARTED,
)
END = Transition("end", (QueueStatus.IN_SESSION,), QueueStatus.DONE, "ended_at", events.QueueEventKind.ENDED)
CANCEL = Transition("cancel", ACTIVE_STATUSES, QueueStatus.CANCELED, "canceled_at", events.QueueEventKind.CANCELED)

TRANSITIONS = {t.name: t for t in (CALL, START, END, CANCEL)}

logger = logging.getLogger(__name__)


def authorize_transition(user: User, entry: QueueEntry, transition: Transition, flags: RoomFlags) -> None:
    """Doctor (or joining admin) drives the session; cancel is also open to the patient."""
    if user.id == entry.doctor_id or is_admin_joiner(user, flags):
        return
    if transition is CANCEL:
        if user.id == entry.patient_id:
            return
        raise AuthorizationError(GlobalMessages.NOT_ALLOWED_TO_CANCEL)
    raise AuthorizationError(GlobalMessages.NOT_SESSION_DOCTOR)


def check_transition(entry: QueueEntry, transition: Transition) -> None:
    """Raise InvalidTransitionError unless ``transition`` may leave ``entry.status``."""
    if entry.status in transition.sources:
        return
    message = (
        GlobalMessages.STALE_SESSION if entry.status in TERMINAL_STATUSES
        else GlobalMessages.INVALID_TRANSITION
    )
    raise InvalidTransitionError(message, current_status=entry.status.value)


async def apply_transition(
    session: AsyncSession,
    user: User,
    entry_id: UUID,
    transition: Transition,
    extra_values: Optional[Dict[str, Any]] = None,
    flags: Optional[RoomFlags] = None
) -> QueueEntryResponse:
    """Authorize, validate and persist one lifecycle transition."""
    actor_id = user.id
    if flags is None:
        flags = await load_room_flags(session)

    entry = await store.get_entry(session, entry_id)
    try:
        authorize_transition(user, entry, transition, flags)
    except AuthorizationError:
        logger.warning("User %s denied %s on entry %s", actor_id, transition.name, entry_id)
        raise

    # Retried cancellation is a no-op.
    if transition is CANCEL and entry.status == QueueStatus.CANCELED:
        return build_entry_response(entry)

    check_transition(entry, transition)

    values = {"status": transition.target, transition.timestamp_column: global_functions.utcnow()}
    values.update(extra_values or {})

    changed = await store.compare_and_set(
        session, entry_id, entry.status, transition.timestamp_column, values
    )
    if not changed:
        entry = await store.refresh(session, entry)
        if transition is CANCEL and entry.status == QueueStatus.CANCELED:
            return build_entry_response(entry)
        logger.warning(
            "Stale %s on entry %s: status is now %s", transition.name, entry_id, entry.status.value
        )
        raise InvalidTransitionError(GlobalMessages.STALE_SESSION, current_status=entry.status.value)

    await store.commit(session)
    entry = await store.refresh(session, entry)
    logger.info("Entry %s moved to %s by %s", entry_id, entry.status.value, actor_id)

    response = build_entry_response(entry)
    await events.emit(transition.event, response, actor_id=actor_id)
    return response


async def call_entry(
    session: AsyncSession,
    user: User,
    entry_id: UUID,
    expected_minutes: Optional[int] = None,
    is_free: Optional[bool] = None,
    price: Optional[float] = None,
    currency: Optional[str] = None
) -> QueueEntryResponse:
    """Call a waiting patient, confirming visit length and pricing."""
    flags = await load_room_flags(session)
    entry = await store.get_entry(session, entry_id)

    extra = normalize_pricing(is_free, price, currency)
    if expected_minutes is not None:
        extra["expected_minutes"] = expected_minutes
    elif entry.expected_minutes is None:
        extra["expected_minutes"] = flags.avg_visit_minutes

    return await apply_transition(session, user, entry_id, CALL, extra, flags=flags)


async def start_entry(session: AsyncSession, user: User, entry_id: UUID) -> QueueEntryResponse:
    """Start the session, with or without a prior call."""
    return await apply_transition(session, user, entry_id, START)


async def end_entry(session: AsyncSession, user: User, entry_id: UUID) -> QueueEntryResponse:
    """End an in-progress session; the entry leaves the active queue."""
    return await apply_transition(session, user, entry_id, END)


async def cancel_entry(session: AsyncSession, user: User, entry_id: UUID) -> QueueEntryResponse:
    """Cancel a still-active entry. Safe to retry."""
    return await apply_transition(session, user, entry_id, CANCEL)
