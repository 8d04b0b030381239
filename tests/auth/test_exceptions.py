"""Tests for auth/exceptions.py."""

import pytest

from auth.exceptions import (
    AuthError,
    BadRequestError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    InvalidAccessTokenError,
    InvalidVerificationTokenError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)


class TestErrorHierarchy:

    @pytest.mark.parametrize(
        "error_class",
        [
            ConflictError,
            UnauthorizedError,
            ForbiddenError,
            BadRequestError,
            NotFoundError,
            ConfigurationError,
        ],
    )
    def test_all_errors_are_auth_errors(self, error_class):
        assert issubclass(error_class, AuthError)

    def test_invalid_verification_token_is_bad_request(self):
        assert issubclass(InvalidVerificationTokenError, BadRequestError)

    def test_invalid_access_token_is_unauthorized(self):
        assert issubclass(InvalidAccessTokenError, UnauthorizedError)


class TestMessages:

    def test_default_message_used_when_none_given(self):
        assert ConflictError().message == "A user with this email already exists"
        assert UnauthorizedError().message == "Invalid credentials"
        assert ForbiddenError().message == "Email not verified"

    def test_custom_message_overrides_default(self):
        error = BadRequestError("Current password is incorrect")
        assert error.message == "Current password is incorrect"
        assert str(error) == "Current password is incorrect"

    def test_invalid_verification_token_fixed_message(self):
        assert InvalidVerificationTokenError().message == "Invalid or expired verification token"

    def test_rate_limited_carries_retry_after(self):
        error = RateLimitedError(retry_after_seconds=42)
        assert error.retry_after_seconds == 42
        assert "42" in error.message
