# =============================================================================
# gymtrack_core/auth/session.py
# Authenticated Session Types
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class AuthEvent(Enum):
    """Auth state changes reported to subscribers."""
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


@dataclass
class AuthSession:
    """An authenticated backend session"""
    user_id: str
    email: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    display_name: Optional[str] = None
    expires_at: Optional[int] = None  # epoch seconds


@dataclass
class SignUpResult:
    """
    Outcome of a sign-up.

    session is None when the backend requires the address to be confirmed
    before the first sign-in.
    """
    session: Optional[AuthSession]
    needs_confirmation: bool


AuthListener = Callable[[AuthEvent, Optional[AuthSession]], None]
Unsubscribe = Callable[[], None]
