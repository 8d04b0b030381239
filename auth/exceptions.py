"""Typed exceptions for auth failures.

Each class is an error kind, not a transport code. The HTTP layer maps
them one-to-one onto status codes (see api/errors.py).
"""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""

    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConflictError(AuthError):
    """Resource uniqueness violated (duplicate email at sign-up)."""

    default_message = "A user with this email already exists"


class UnauthorizedError(AuthError):
    """
    Credential check failed.

    Sign-in raises this with the same message for an unknown email and a
    wrong password so callers cannot tell the two apart.
    """

    default_message = "Invalid credentials"


class ForbiddenError(AuthError):
    """Principal is authenticated but lacks a required state."""

    default_message = "Email not verified"


class BadRequestError(AuthError):
    """Request violates a business rule."""

    default_message = "Bad request"


class InvalidVerificationTokenError(BadRequestError):
    """
    Verification token is unknown, expired, or already consumed.

    One message for all three cases, so a caller learns nothing about
    whether the token ever existed.
    """

    default_message = "Invalid or expired verification token"


class InvalidAccessTokenError(UnauthorizedError):
    """Bearer token has a bad signature, is malformed, or has expired."""

    default_message = "Invalid or expired access token"


class NotFoundError(AuthError):
    """
    Internal lookup by id or email found nothing.

    Never raised on the anti-enumeration paths (sign-in, resend).
    """

    default_message = "Not found"


class RateLimitedError(AuthError):
    """Too many attempts. Client should wait before retrying."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(f"Rate limited. Retry after {retry_after_seconds} seconds.")


class ConfigurationError(AuthError):
    """Required configuration is missing or invalid. Fatal at startup."""

    default_message = "Invalid configuration"
