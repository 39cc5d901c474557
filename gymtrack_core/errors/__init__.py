# =============================================================================
# gymtrack_core/errors/__init__.py
# Centralized Error Handling for GymTrack Core
# =============================================================================

from .exceptions import (
    GymTrackError,
    ValidationError,
    CacheError,
    RemoteBackendError,
    AuthErrorKind,
    AuthenticationError,
    AUTH_ERROR_MESSAGES,
    ConfigurationError,
    SessionStateError,
)

from .handlers import (
    handle_error,
    log_task_failure,
)

__all__ = [
    # Exceptions
    "GymTrackError",
    "ValidationError",
    "CacheError",
    "RemoteBackendError",
    "AuthErrorKind",
    "AuthenticationError",
    "AUTH_ERROR_MESSAGES",
    "ConfigurationError",
    "SessionStateError",
    # Handlers
    "handle_error",
    "log_task_failure",
]
