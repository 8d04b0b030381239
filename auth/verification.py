"""Single-use, time-limited verification tokens.

At most one live token exists per user: issuing a new one deletes every
token the user already had, so only the newest emailed link works.
Tokens hold a weak reference (user_id) back to the user; nothing here
assumes that user still exists.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from uuid import UUID

from auth.config import AuthConfig
from auth.directory import require_literal
from auth.exceptions import InvalidVerificationTokenError
from auth.types import TokenPurpose, VerificationToken
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


class VerificationTokenRepository(ABC):
    """Persistence port for verification token rows."""

    @abstractmethod
    def insert(self, token: VerificationToken) -> None:
        pass

    @abstractmethod
    def find_by_token(self, token: str) -> VerificationToken | None:
        pass

    @abstractmethod
    def delete_by_token(self, token: str) -> None:
        """Idempotent: no error if the token is already gone."""

    @abstractmethod
    def delete_all_for_user(self, user_id: UUID) -> int:
        """Delete every token for the user, any purpose. Returns count deleted."""

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        """Delete tokens with expires_at <= now. Returns count deleted."""


class VerificationTokenStore:
    """Issues, validates and consumes verification tokens.

    Usage:
        store = VerificationTokenStore(repository, config)
        token = store.issue(user.id)
        user_id = store.validate(token)   # raises InvalidVerificationTokenError
        store.consume(token)
    """

    TOKEN_BYTES = 32

    def __init__(self, repository: VerificationTokenRepository, config: AuthConfig):
        self._repository = repository
        self._expiry = timedelta(minutes=config.verification_token_expiry_minutes)

    def issue(
        self,
        user_id: UUID,
        purpose: TokenPurpose = TokenPurpose.EMAIL_VERIFICATION,
    ) -> str:
        """Create a fresh token for the user and return the raw string.

        Every existing token for the user is deleted first, regardless of
        purpose.
        """
        now = now_utc()
        token = VerificationToken(
            token=secrets.token_urlsafe(self.TOKEN_BYTES),
            user_id=user_id,
            purpose=purpose,
            expires_at=now + self._expiry,
            created_at=now,
        )

        replaced = self._repository.delete_all_for_user(user_id)
        self._repository.insert(token)

        logger.debug(
            "Issued %s token for user %s (replaced %d)",
            purpose.value,
            user_id,
            replaced,
        )
        return token.token

    def validate(self, token: str) -> UUID:
        """Return the user id bound to a live token.

        Does not delete the token on success; the caller consumes it once
        the protected action has committed. An expired token is deleted as
        a side effect and reported exactly like an unknown one.

        Raises:
            InvalidVerificationTokenError: Unknown or expired token.
        """
        token = require_literal(token, "token")
        record = self._repository.find_by_token(token)

        if record is None:
            raise InvalidVerificationTokenError()

        if record.expires_at <= now_utc():
            self._repository.delete_by_token(token)
            logger.info("Deleted expired verification token for user %s", record.user_id)
            raise InvalidVerificationTokenError()

        return record.user_id

    def consume(self, token: str) -> None:
        """Delete a token. Safe to call with a token that no longer exists."""
        self._repository.delete_by_token(require_literal(token, "token"))

    def delete_all_for_user(self, user_id: UUID) -> None:
        """Delete every token for the user. Idempotent."""
        self._repository.delete_all_for_user(user_id)

    def purge_expired(self) -> int:
        """Background cleanup for tokens nobody ever read. Returns count deleted."""
        deleted = self._repository.delete_expired(now_utc())
        if deleted:
            logger.info("Purged %d expired verification tokens", deleted)
        return deleted
