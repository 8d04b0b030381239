"""Authentication service - orchestrates sign-up, sign-in and email verification.

Per-user state machine: Unverified -> Verified, forward only, driven by a
successful verification token. AuthService holds no persisted state of
its own; it sequences the directory, token store, hasher, issuer and
dispatcher.
"""

import logging
import secrets
from dataclasses import dataclass
from uuid import UUID

from auth.config import AuthConfig
from auth.directory import UserDirectory
from auth.exceptions import (
    BadRequestError,
    ForbiddenError,
    InvalidVerificationTokenError,
    NotFoundError,
    UnauthorizedError,
)
from auth.notifications import NotificationDispatcher
from auth.password import PasswordHasher
from auth.security_logger import SecurityEvent, SecurityLogger
from auth.templates import render_verification_email, verification_link
from auth.tokens import AccessTokenIssuer
from auth.types import User, UserProfile
from auth.verification import VerificationTokenStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class SignUpResult:
    """Result of sign-up. Never carries the hash or the verification token."""

    id: UUID


@dataclass
class SignInResult:
    jwt: str


@dataclass
class SuccessResult:
    success: bool = True


class AuthService:
    """Orchestrates the credential authentication protocols.

    Handles:
    - Sign-up (with verification email)
    - Sign-in (with enumeration-safe failures)
    - Email verification
    - Resend verification (always reports success)
    - Password change
    """

    def __init__(
        self,
        config: AuthConfig,
        users: UserDirectory,
        verification_tokens: VerificationTokenStore,
        password_hasher: PasswordHasher,
        token_issuer: AccessTokenIssuer,
        dispatcher: NotificationDispatcher,
        security_logger: SecurityLogger,
    ):
        self._config = config
        self._users = users
        self._verification_tokens = verification_tokens
        self._password_hasher = password_hasher
        self._token_issuer = token_issuer
        self._dispatcher = dispatcher
        self._security_logger = security_logger
        # Compared against when the email is unknown, so a miss costs one
        # bcrypt check just like a wrong password does.
        self._decoy_hash = password_hasher.hash(secrets.token_urlsafe(16))

    def _send_verification_email(self, user: User, token: str) -> None:
        """Queue the verification email without waiting for delivery."""
        email = render_verification_email(
            name=user.name,
            link=verification_link(self._config.frontend_url, token),
            expiry_minutes=self._config.verification_token_expiry_minutes,
            app_name=self._config.app_name,
        )
        self._dispatcher.dispatch(
            to=user.email,
            subject=email.subject,
            html=email.html,
            text=email.text,
        )

    def sign_up(self, email: str, name: str, password: str) -> SignUpResult:
        """Create an unverified account and email a verification link.

        Flow:
        1. Hash password
        2. Create user (Conflict if the email is taken)
        3. Issue verification token
        4. Queue verification email (best-effort)

        Raises:
            ConflictError: If a user with this email already exists.
        """
        password_hash = self._password_hasher.hash(password)
        user = self._users.create(email=email, name=name, password_hash=password_hash)

        token = self._verification_tokens.issue(user.id)
        self._send_verification_email(user, token)

        self._security_logger.log(
            SecurityEvent.USER_SIGNED_UP,
            email=user.email,
            user_id=user.id,
        )
        logger.info("User %s signed up", user.id)

        return SignUpResult(id=user.id)

    def sign_in(self, email: str, password: str) -> SignInResult:
        """Check credentials and issue an access token.

        Unknown email and wrong password fail identically. The verified
        check runs only after the credentials are confirmed, so sign-in
        cannot be used to probe the verification state of someone else's
        account.

        Raises:
            UnauthorizedError: Unknown email or wrong password.
            ForbiddenError: Credentials valid but email not verified.
        """
        user = self._users.find_by_email(email)

        if user is None:
            self._password_hasher.compare(password, self._decoy_hash)
            self._security_logger.log(
                SecurityEvent.SIGN_IN_FAILED,
                email=email,
                details={"reason": "unknown_email"},
            )
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not self._password_hasher.compare(password, user.password_hash):
            self._security_logger.log(
                SecurityEvent.SIGN_IN_FAILED,
                email=user.email,
                user_id=user.id,
                details={"reason": "bad_password"},
            )
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not user.is_email_verified:
            self._security_logger.log(
                SecurityEvent.SIGN_IN_UNVERIFIED,
                email=user.email,
                user_id=user.id,
            )
            raise ForbiddenError("Email not verified")

        access_token = self._token_issuer.issue(user.id, user.email)

        self._security_logger.log(
            SecurityEvent.SIGN_IN_SUCCEEDED,
            email=user.email,
            user_id=user.id,
        )

        return SignInResult(jwt=access_token)

    def verify_email(self, token: str) -> SuccessResult:
        """Consume a verification token and mark its user verified.

        The token is deleted only after the user update commits. If the
        process dies in between, the user is already verified and the
        leftover token is harmless.

        Raises:
            InvalidVerificationTokenError: Unknown, expired or already used
                token, or a token whose user no longer exists.
        """
        try:
            user_id = self._verification_tokens.validate(token)
        except InvalidVerificationTokenError:
            self._security_logger.log(
                SecurityEvent.VERIFICATION_FAILED,
                details={"reason": "invalid_or_expired"},
            )
            raise

        try:
            user = self._users.update(user_id, {"is_email_verified": True})
        except NotFoundError:
            self._verification_tokens.consume(token)
            self._security_logger.log(
                SecurityEvent.VERIFICATION_FAILED,
                user_id=user_id,
                details={"reason": "user_missing"},
            )
            raise InvalidVerificationTokenError()

        self._verification_tokens.consume(token)

        self._security_logger.log(
            SecurityEvent.EMAIL_VERIFIED,
            email=user.email,
            user_id=user.id,
        )

        return SuccessResult()

    def resend_verification(self, email: str) -> SuccessResult:
        """Send a fresh verification link to an unverified account.

        Always returns success: unknown email, already-verified account and
        a newly issued token all look the same to the caller. Issuing the
        new token invalidates any earlier link.
        """
        user = self._users.find_by_email(email)

        if user is None or user.is_email_verified:
            return SuccessResult()

        token = self._verification_tokens.issue(user.id)
        self._send_verification_email(user, token)

        self._security_logger.log(
            SecurityEvent.VERIFICATION_RESENT,
            email=user.email,
            user_id=user.id,
        )

        return SuccessResult()

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Public profile of a user.

        Raises:
            NotFoundError: No user with this id.
        """
        return UserProfile.from_user(self._users.get_by_id(user_id))

    def change_password(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
    ) -> SuccessResult:
        """Replace the user's credential hash.

        Access tokens issued before the change stay valid until they expire.

        Raises:
            UnauthorizedError: No user with this id.
            BadRequestError: Current password wrong, or new password equals
                the current one.
        """
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User not found")

        if not self._password_hasher.compare(current_password, user.password_hash):
            self._security_logger.log(
                SecurityEvent.PASSWORD_CHANGE_FAILED,
                email=user.email,
                user_id=user.id,
                details={"reason": "bad_current_password"},
            )
            raise BadRequestError("Current password is incorrect")

        if current_password == new_password:
            raise BadRequestError(
                "New password must be different from the current password"
            )

        new_hash = self._password_hasher.hash(new_password)
        self._users.update(user.id, {"password_hash": new_hash})

        self._security_logger.log(
            SecurityEvent.PASSWORD_CHANGED,
            email=user.email,
            user_id=user.id,
        )

        return SuccessResult()
