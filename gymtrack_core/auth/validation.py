# =============================================================================
# gymtrack_core/auth/validation.py
# Credential and Form Validation
# =============================================================================
"""
Input checks run before any I/O. Each raises ValidationError naming the
offending field; nothing is mutated when a check fails.
"""

import re
from typing import Optional

from gymtrack_core.errors import ValidationError

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: Optional[str]) -> str:
    """Return the trimmed email or raise ValidationError"""
    value = (email or "").strip()
    if not value:
        raise ValidationError("Email is required", field="email")
    if not EMAIL_PATTERN.fullmatch(value):
        raise ValidationError("Invalid email format", field="email")
    return value


def validate_password(password: Optional[str]) -> str:
    if not password or not password.strip():
        raise ValidationError("Password is required", field="password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )
    return password


def validate_required(value: Optional[str], field: str, label: Optional[str] = None) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{label or field.capitalize()} is required", field=field)
    return text


def validate_sign_in(email: Optional[str], password: Optional[str]) -> str:
    """
    Validate sign-in form input.

    Returns:
        The normalized email
    """
    normalized = validate_email(email)
    validate_password(password)
    return normalized


def validate_sign_up(
    email: Optional[str],
    password: Optional[str],
    confirm_password: Optional[str],
    name: Optional[str],
) -> tuple:
    """
    Validate sign-up form input.

    Returns:
        (normalized email, trimmed name)
    """
    display_name = validate_required(name, "name")
    normalized = validate_email(email)
    validate_password(password)
    if password != confirm_password:
        raise ValidationError("Passwords do not match", field="confirm_password")
    return normalized, display_name
