# src/modules/queue/events.py
"""In-process fan-out of queue entry changes.

Every admission and lifecycle transition emits the full entry row so UI
layers, notification senders or audit logs can react without re-deriving
state. Listeners run after the change is committed.
"""

import inspect
import logging
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union
from uuid import UUID

from pydantic import BaseModel

from src.common.utils import global_functions
from .schemas import QueueEntryResponse

logger = logging.getLogger(__name__)


class QueueEventKind(str, Enum):
    CREATED = "created"
    CALLED = "called"
    STARTED = "started"
    ENDED = "ended"
    CANCELED = "canceled"


class QueueEvent(BaseModel):
    kind: QueueEventKind
    entry: QueueEntryResponse
    actor_id: Optional[UUID] = None
    occurred_at: datetime


Listener = Callable[[QueueEvent], Union[None, Awaitable[None]]]

_listeners: List[Listener] = []


def subscribe(listener: Listener) -> Listener:
    """Register a listener; usable as a decorator."""
    if listener not in _listeners:
        _listeners.append(listener)
    return listener


def unsubscribe(listener: Listener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


async def emit(kind: QueueEventKind, entry: QueueEntryResponse, actor_id: UUID = None) -> QueueEvent:
    """Deliver an event to every listener in registration order."""
    event = QueueEvent(kind=kind, entry=entry, actor_id=actor_id, occurred_at=global_functions.utcnow())
    for listener in list(_listeners):
        try:
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            # The transition is already committed; a listener cannot undo it.
            logger.exception("Queue event listener %r failed for %s", listener, kind.value)
    return event


@subscribe
def audit_log_listener(event: QueueEvent) -> None:
    logger.info(
        "queue.%s entry=%s doctor=%s patient=%s status=%s actor=%s",
        event.kind.value,
        event.entry.id,
        event.entry.doctor_id,
        event.entry.patient_id,
        event.entry.status.value,
        event.actor_id,
    )
