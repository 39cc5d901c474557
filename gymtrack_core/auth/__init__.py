"""
Authentication helpers shared by every backend and the app store.
"""

from .session import AuthEvent, AuthSession, SignUpResult, AuthListener, Unsubscribe
from .validation import (
    validate_email,
    validate_password,
    validate_required,
    validate_sign_in,
    validate_sign_up,
)
from .authentication import parse_oauth_callback, classify_auth_error, to_authentication_error

__all__ = [
    "AuthEvent",
    "AuthSession",
    "SignUpResult",
    "AuthListener",
    "Unsubscribe",
    "validate_email",
    "validate_password",
    "validate_required",
    "validate_sign_in",
    "validate_sign_up",
    "parse_oauth_callback",
    "classify_auth_error",
    "to_authentication_error",
]
