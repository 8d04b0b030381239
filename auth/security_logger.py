"""Security event logging for auth audit trail.

Append-only log to the security_events table. Details never include
plaintext passwords, credential hashes or raw verification tokens.
"""

from enum import Enum
from typing import Any
from uuid import UUID

from psycopg2.extras import Json

from clients.postgres_client import PostgresClient
from utils.timezone import now_utc


class SecurityEvent(Enum):
    """Auth security event types."""

    USER_SIGNED_UP = "user_signed_up"
    SIGN_IN_SUCCEEDED = "sign_in_succeeded"
    SIGN_IN_FAILED = "sign_in_failed"
    SIGN_IN_UNVERIFIED = "sign_in_unverified"
    EMAIL_VERIFIED = "email_verified"
    VERIFICATION_FAILED = "verification_failed"
    VERIFICATION_RESENT = "verification_resent"
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_CHANGE_FAILED = "password_change_failed"


class SecurityLogger:
    """Append-only security event logger."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def log(
        self,
        event: SecurityEvent,
        email: str | None = None,
        user_id: UUID | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Log security event to database."""
        self._db.execute_returning(
            """INSERT INTO security_events
               (event_type, email, user_id, details, created_at)
               VALUES (%s, %s, %s, %s, %s)
               RETURNING id""",
            (
                event.value,
                email,
                str(user_id) if user_id else None,
                Json(details) if details else None,
                now_utc(),
            ),
        )

    def recent_events_for_user(self, user_id: UUID, limit: int = 50) -> list[dict]:
        """Newest-first audit trail for one account."""
        return self._db.execute(
            """SELECT event_type, email, details, created_at
               FROM security_events
               WHERE user_id = %s
               ORDER BY created_at DESC
               LIMIT %s""",
            (str(user_id), limit),
        )
