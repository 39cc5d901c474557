# =============================================================================
# tests/unit/test_auth.py
# Unit Tests for Input Validation, OAuth Parsing and Error Classification
# =============================================================================

import pytest

from gymtrack_core.auth import (
    AuthEvent,
    classify_auth_error,
    parse_oauth_callback,
    to_authentication_error,
    validate_email,
    validate_password,
    validate_sign_in,
    validate_sign_up,
)
from gymtrack_core.errors import (
    AuthenticationError,
    AuthErrorKind,
    RemoteBackendError,
    ValidationError,
    handle_error,
)


class TestEmailValidation:
    """Test email checks"""

    def test_valid_email_is_trimmed(self):
        assert validate_email("  me@example.com ") == "me@example.com"

    @pytest.mark.parametrize("email", ["", "   ", None])
    def test_missing_email(self, email):
        with pytest.raises(ValidationError, match="Email is required") as exc_info:
            validate_email(email)
        assert exc_info.value.field == "email"

    @pytest.mark.parametrize("email", ["plainaddress", "me@example", "me @example.com", "@x."])
    def test_malformed_email(self, email):
        with pytest.raises(ValidationError, match="Invalid email format"):
            validate_email(email)


class TestPasswordValidation:
    """Test password checks"""

    def test_short_password(self):
        with pytest.raises(ValidationError, match="at least 6") as exc_info:
            validate_password("12345")
        assert exc_info.value.field == "password"

    def test_minimum_length_accepted(self):
        assert validate_password("123456") == "123456"

    def test_blank_password(self):
        with pytest.raises(ValidationError, match="Password is required"):
            validate_password("      ")


class TestFormValidation:
    """Test sign-in and sign-up forms"""

    def test_sign_in_returns_normalized_email(self):
        assert validate_sign_in(" me@example.com", "secret1") == "me@example.com"

    def test_sign_up_requires_name_first(self):
        """Name is checked before anything else"""
        with pytest.raises(ValidationError) as exc_info:
            validate_sign_up("bad", "1", "2", "  ")
        assert exc_info.value.field == "name"

    def test_sign_up_password_mismatch(self):
        with pytest.raises(ValidationError, match="do not match") as exc_info:
            validate_sign_up("me@example.com", "secret1", "secret2", "Me")
        assert exc_info.value.field == "confirm_password"

    def test_sign_up_success(self):
        assert validate_sign_up("me@example.com", "secret1", "secret1", " Me ") == ("me@example.com", "Me")


class TestOAuthCallback:
    """Test token extraction from redirect URIs"""

    def test_tokens_in_fragment(self):
        url = "gymtrackpro://auth/callback#access_token=abc&refresh_token=def&token_type=bearer"
        assert parse_oauth_callback(url) == ("abc", "def")

    def test_tokens_in_query(self):
        url = "gymtrackpro://auth/callback?access_token=abc&refresh_token=def"
        assert parse_oauth_callback(url) == ("abc", "def")

    def test_fragment_preferred_over_query(self):
        url = "gymtrackpro://auth/callback?access_token=q&refresh_token=q#access_token=f&refresh_token=f"
        assert parse_oauth_callback(url) == ("f", "f")

    @pytest.mark.parametrize("url", [
        "gymtrackpro://auth/callback",
        "gymtrackpro://auth/callback#access_token=abc",
        "gymtrackpro://auth/callback?error=access_denied",
        "",
    ])
    def test_missing_tokens(self, url):
        with pytest.raises(AuthenticationError, match="No tokens found"):
            parse_oauth_callback(url)


class _StatusError(Exception):
    def __init__(self, message, status=None, code=None):
        super().__init__(message)
        self.status = status
        self.code = code


class TestErrorClassification:
    """Test mapping backend failures to user-facing kinds"""

    @pytest.mark.parametrize("message,kind", [
        ("Invalid login credentials", AuthErrorKind.INVALID_CREDENTIALS),
        ("INVALID_PASSWORD", AuthErrorKind.INVALID_CREDENTIALS),
        ("EMAIL_NOT_FOUND", AuthErrorKind.INVALID_CREDENTIALS),
        ("Email not confirmed", AuthErrorKind.EMAIL_UNCONFIRMED),
        ("For security purposes, email rate limit exceeded", AuthErrorKind.RATE_LIMITED),
        ("TOO_MANY_ATTEMPTS_TRY_LATER", AuthErrorKind.RATE_LIMITED),
        ("connection reset by peer", AuthErrorKind.UNKNOWN),
    ])
    def test_message_markers(self, message, kind):
        assert classify_auth_error(Exception(message)) is kind

    def test_http_429_is_rate_limited(self):
        assert classify_auth_error(_StatusError("slow down", status=429)) is AuthErrorKind.RATE_LIMITED

    def test_code_attribute_is_inspected(self):
        error = _StatusError("Bad request", status=400, code="email_not_confirmed")
        assert classify_auth_error(error) is AuthErrorKind.EMAIL_UNCONFIRMED

    def test_authentication_error_keeps_kind(self):
        error = AuthenticationError("x", kind=AuthErrorKind.RATE_LIMITED)
        assert classify_auth_error(error) is AuthErrorKind.RATE_LIMITED

    def test_wrapping(self):
        cause = RemoteBackendError("INVALID_PASSWORD", backend="firestore")
        wrapped = to_authentication_error(cause, "Sign in")

        assert wrapped.kind is AuthErrorKind.INVALID_CREDENTIALS
        assert wrapped.details["action"] == "Sign in"
        assert wrapped.details["backend"] == "firestore"
        assert wrapped.__cause__ is cause
        assert wrapped.user_message == "Incorrect email or password."

    def test_wrapping_is_idempotent(self):
        error = AuthenticationError("x")
        assert to_authentication_error(error, "Sign in") is error


class TestHandleError:
    """Test user-facing messages for the presentation layer"""

    def test_authentication_error_message(self):
        error = AuthenticationError("raw", kind=AuthErrorKind.EMAIL_UNCONFIRMED)
        assert handle_error(error, log_error=False) == "Please confirm your email address before signing in."

    def test_validation_error_message(self):
        assert handle_error(ValidationError("Email is required", field="email"), log_error=False) == (
            "Email is required"
        )

    def test_unexpected_error_message(self):
        assert handle_error(RuntimeError("boom"), log_error=False) == "Something went wrong. Please try again."

    def test_error_string_format(self):
        error = ValidationError("Bad", field="email")
        assert str(error) == "[VAL_001] Bad | Details: {'field': 'email'}"


class TestAuthEvents:
    def test_event_values(self):
        assert AuthEvent("SIGNED_IN") is AuthEvent.SIGNED_IN
