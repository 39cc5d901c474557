# =============================================================================
# gymtrack_core/auth/authentication.py
# OAuth Callback Parsing and Auth Error Classification
# =============================================================================

from __future__ import annotations
from typing import Tuple
from urllib.parse import parse_qs, urlsplit

from gymtrack_core.errors import AuthenticationError, AuthErrorKind, GymTrackError

# Substrings seen in Supabase Auth and Firebase Identity Toolkit error payloads
_INVALID_MARKERS = (
    "invalid login credentials",
    "invalid_login_credentials",
    "invalid_password",
    "email_not_found",
    "invalid credentials",
    "user_disabled",
)
_RATE_MARKERS = (
    "rate limit",
    "too_many_attempts",
    "too many requests",
    "over_email_send_rate_limit",
)
_UNCONFIRMED_MARKERS = (
    "email not confirmed",
    "email_not_confirmed",
)


def parse_oauth_callback(url: str) -> Tuple[str, str]:
    """
    Extract (access_token, refresh_token) from an OAuth redirect URI.

    Tokens are read from the fragment first, then from the query string,
    e.g. ``gymtrackpro://auth/callback#access_token=...&refresh_token=...``.

    Raises:
        AuthenticationError: if either token is missing
    """
    parts = urlsplit(url or "")

    for component in (parts.fragment, parts.query):
        params = parse_qs(component)
        access = params.get("access_token", [None])[0]
        refresh = params.get("refresh_token", [None])[0]
        if access and refresh:
            return access, refresh

    raise AuthenticationError(
        "No tokens found in redirect URL",
        kind=AuthErrorKind.UNKNOWN,
    )


def classify_auth_error(error: BaseException) -> AuthErrorKind:
    """Map a backend auth failure to one of the user-facing kinds"""
    if isinstance(error, AuthenticationError):
        return error.kind

    status = getattr(error, "status", None) or getattr(error, "status_code", None)
    if status == 429:
        return AuthErrorKind.RATE_LIMITED

    text = " ".join(
        str(part) for part in (getattr(error, "code", ""), getattr(error, "message", ""), error)
        if part
    ).lower()

    if any(marker in text for marker in _RATE_MARKERS):
        return AuthErrorKind.RATE_LIMITED
    if any(marker in text for marker in _UNCONFIRMED_MARKERS):
        return AuthErrorKind.EMAIL_UNCONFIRMED
    if any(marker in text for marker in _INVALID_MARKERS):
        return AuthErrorKind.INVALID_CREDENTIALS
    return AuthErrorKind.UNKNOWN


def to_authentication_error(error: BaseException, action: str) -> AuthenticationError:
    """Wrap any failure of a user-initiated auth action"""
    if isinstance(error, AuthenticationError):
        return error

    details = error.details if isinstance(error, GymTrackError) else {}
    wrapped = AuthenticationError(
        f"{action} failed: {error}",
        kind=classify_auth_error(error),
        details={"action": action, **details},
    )
    wrapped.__cause__ = error
    return wrapped
