# =============================================================================
# gymtrack_core/errors/exceptions.py
# Custom Exception Hierarchy for GymTrack Core
# =============================================================================

from enum import Enum
from typing import Optional, Dict, Any


class GymTrackError(Exception):
    """
    Base exception for all GymTrack errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "AUTH_001")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "GT_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# INPUT EXCEPTIONS
# =============================================================================

class ValidationError(GymTrackError):
    """Raised when user input fails validation, before any I/O happens"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            code="VAL_001",
            details=details,
            **kwargs,
        )

    @property
    def field(self) -> Optional[str]:
        return self.details.get("field")


# =============================================================================
# STORAGE EXCEPTIONS
# =============================================================================

class CacheError(GymTrackError):
    """Raised when the on-device cache cannot be read or written"""

    def __init__(
        self,
        message: str,
        namespace: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if namespace:
            details["namespace"] = namespace

        super().__init__(
            message=message,
            code="CACHE_001",
            details=details,
            **kwargs,
        )


class RemoteBackendError(GymTrackError):
    """Raised when a remote backend call fails (network, quota, bad payload)"""

    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        operation: Optional[str] = None,
        category: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if backend:
            details["backend"] = backend
        if operation:
            details["operation"] = operation
        if category:
            details["category"] = category

        super().__init__(
            message=message,
            code="REMOTE_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# AUTHENTICATION EXCEPTIONS
# =============================================================================

class AuthErrorKind(Enum):
    """User-facing classes of authentication failure."""
    INVALID_CREDENTIALS = "invalid_credentials"
    RATE_LIMITED = "rate_limited"
    EMAIL_UNCONFIRMED = "email_unconfirmed"
    UNKNOWN = "unknown"


AUTH_ERROR_MESSAGES: Dict[AuthErrorKind, str] = {
    AuthErrorKind.INVALID_CREDENTIALS: "Incorrect email or password.",
    AuthErrorKind.RATE_LIMITED: "Too many attempts. Please wait a moment and try again.",
    AuthErrorKind.EMAIL_UNCONFIRMED: "Please confirm your email address before signing in.",
    AuthErrorKind.UNKNOWN: "Something went wrong. Please try again.",
}


class AuthenticationError(GymTrackError):
    """Raised when a user-initiated authentication action fails"""

    def __init__(
        self,
        message: str,
        kind: AuthErrorKind = AuthErrorKind.UNKNOWN,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        details["kind"] = kind.value

        super().__init__(
            message=message,
            code="AUTH_001",
            details=details,
            **kwargs,
        )
        self.kind = kind

    @property
    def user_message(self) -> str:
        """Message safe to show directly to the user"""
        return AUTH_ERROR_MESSAGES[self.kind]


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(GymTrackError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        recoverable = kwargs.pop("recoverable", False)
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=recoverable,
            **kwargs,
        )


# =============================================================================
# STATE EXCEPTIONS
# =============================================================================

class SessionStateError(GymTrackError):
    """Raised when an operation needs a signed-in account or an active workout"""

    def __init__(
        self,
        message: str,
        required: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if required:
            details["required"] = required

        super().__init__(
            message=message,
            code="STATE_001",
            details=details,
            **kwargs,
        )
