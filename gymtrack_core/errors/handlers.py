# =============================================================================
# gymtrack_core/errors/handlers.py
# Error Handling Utilities for GymTrack Core
# =============================================================================

from __future__ import annotations
import asyncio
import traceback
from typing import Optional

from gymtrack_core.logging import get_logger
from .exceptions import GymTrackError, AuthenticationError, AUTH_ERROR_MESSAGES, AuthErrorKind

logger = get_logger(__name__)


def handle_error(
    error: Exception,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> str:
    """
    Centralized error handling function.

    Logs the error with its code and details and returns the message the
    presentation layer should display.

    Args:
        error: The exception to handle
        log_error: Whether to log the error
        user_message: Custom message to return (uses error message if None)

    Returns:
        User-facing message for the error
    """
    if isinstance(error, AuthenticationError):
        message = user_message or error.user_message
        code = error.code
        details = error.details
    elif isinstance(error, GymTrackError):
        message = user_message or error.message
        code = error.code
        details = error.details
    else:
        message = user_message or AUTH_ERROR_MESSAGES[AuthErrorKind.UNKNOWN]
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}

    if log_error:
        logger.error(
            f"[{code}] {error}",
            extra={"details": details},
            exc_info=error,
        )

    return message


def log_task_failure(task: asyncio.Task) -> None:
    """
    Done-callback for fire-and-forget tasks.

    Retrieves the task's exception so it is logged instead of reported as
    "never retrieved" by the event loop.
    """
    if task.cancelled():
        logger.debug(f"Background task cancelled: {task.get_name()}")
        return

    error = task.exception()
    if error is not None:
        logger.warning(
            f"Background task {task.get_name()} failed: {error}",
            exc_info=error,
        )
