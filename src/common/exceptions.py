# src/common/exceptions.py
"""Typed errors raised by the queue services and their HTTP rendering."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.common.utils.global_messages import GlobalMessages

logger = logging.getLogger(__name__)


class QueueError(Exception):
    """Base class for errors surfaced to the caller as typed results."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthorizationError(QueueError):
    """Caller is not permitted to perform the admission or transition."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = GlobalMessages.ROOM_ACCESS_DENIED


class NotFoundError(QueueError):
    """Referenced doctor or queue entry does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = GlobalMessages.ENTRY_NOT_FOUND


class InvalidTransitionError(QueueError):
    """Transition attempted from a terminal or incompatible state."""
    status_code = status.HTTP_409_CONFLICT
    default_message = GlobalMessages.STALE_SESSION

    def __init__(self, message: str = None, current_status: str = None):
        super().__init__(message)
        self.current_status = current_status


class ConflictError(QueueError):
    """Admission raced against an existing active entry that could not be recovered."""
    status_code = status.HTTP_409_CONFLICT
    default_message = GlobalMessages.REQUEST_ALREADY_ACTIVE


class TransientStoreError(QueueError):
    """The persistence layer is unavailable; the caller may retry with backoff."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = GlobalMessages.STORE_UNAVAILABLE
    retry_after_seconds = 5


async def queue_error_handler(request: Request, exc: QueueError) -> JSONResponse:
    """Render a QueueError as a JSON error body with its status code."""
    if isinstance(exc, TransientStoreError):
        logger.error("Store unavailable on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)

    content = {"detail": exc.message, "error": type(exc).__name__}
    headers = None
    if isinstance(exc, InvalidTransitionError) and exc.current_status:
        content["current_status"] = exc.current_status
    if isinstance(exc, TransientStoreError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for the typed queue errors."""
    app.add_exception_handler(QueueError, queue_error_handler)
