"""PostgreSQL implementations of the user directory and token repository.

Tables: users, verification_tokens (see schema.sql). Every lookup is a
parameterized equality match; the unique index on users.email is the real
guarantee against duplicate sign-ups.
"""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from psycopg2 import errors as pg_errors

from clients.postgres_client import PostgresClient
from auth.directory import UserDirectory, require_literal
from auth.exceptions import ConflictError, NotFoundError
from auth.types import TokenPurpose, User, VerificationToken
from auth.verification import VerificationTokenRepository
from utils.timezone import as_utc, now_utc

logger = logging.getLogger(__name__)

_USER_COLUMNS = "id, email, name, password_hash, is_email_verified, created_at, updated_at"
_TOKEN_COLUMNS = "token, user_id, purpose, expires_at, created_at"


def _as_uuid(value: Any) -> UUID:
    return UUID(value) if isinstance(value, str) else value


def _row_to_user(row: dict) -> User:
    return User(
        id=_as_uuid(row["id"]),
        email=row["email"],
        name=row["name"],
        password_hash=row["password_hash"],
        is_email_verified=row["is_email_verified"],
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
    )


def _row_to_token(row: dict) -> VerificationToken:
    return VerificationToken(
        token=row["token"],
        user_id=_as_uuid(row["user_id"]),
        purpose=TokenPurpose(row["purpose"]),
        expires_at=as_utc(row["expires_at"]),
        created_at=as_utc(row["created_at"]),
    )


class PostgresUserDirectory(UserDirectory):
    """User records in the users table."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def find_by_id(self, user_id: UUID) -> User | None:
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s",
            (str(user_id),),
        )
        return _row_to_user(row) if row else None

    def find_by_email(self, email: str) -> User | None:
        """Find user by email (exact match, case-sensitive)."""
        row = self._db.execute_single(
            f"SELECT {_USER_COLUMNS} FROM users WHERE email = %s",
            (require_literal(email, "email"),),
        )
        return _row_to_user(row) if row else None

    def insert(self, user: User) -> User:
        try:
            rows = self._db.execute_returning(
                f"""INSERT INTO users ({_USER_COLUMNS})
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    RETURNING {_USER_COLUMNS}""",
                (
                    str(user.id),
                    user.email,
                    user.name,
                    user.password_hash,
                    user.is_email_verified,
                    user.created_at,
                    user.updated_at,
                ),
            )
        except pg_errors.UniqueViolation as e:
            logger.info("Concurrent sign-up lost the race on the email unique index")
            raise ConflictError("A user with this email already exists") from e
        return _row_to_user(rows[0])

    def update(self, user_id: UUID, fields: dict[str, Any]) -> User:
        self._check_update_fields(fields)
        columns = sorted(fields)
        assignments = [f"{column} = %s" for column in columns] + ["updated_at = %s"]
        values = [fields[column] for column in columns]
        set_clause = ", ".join(assignments)

        rows = self._db.execute_returning(
            f"""UPDATE users SET {set_clause}
                WHERE id = %s
                RETURNING {_USER_COLUMNS}""",
            (*values, now_utc(), str(user_id)),
        )
        if not rows:
            raise NotFoundError(f'User with id "{user_id}" not found')
        return _row_to_user(rows[0])


class PostgresVerificationTokenRepository(VerificationTokenRepository):
    """Verification token rows in the verification_tokens table."""

    def __init__(self, postgres: PostgresClient):
        self._db = postgres

    def insert(self, token: VerificationToken) -> None:
        self._db.execute_returning(
            f"""INSERT INTO verification_tokens ({_TOKEN_COLUMNS})
                VALUES (%s, %s, %s, %s, %s)
                RETURNING token""",
            (
                token.token,
                str(token.user_id),
                token.purpose.value,
                token.expires_at,
                token.created_at,
            ),
        )

    def find_by_token(self, token: str) -> VerificationToken | None:
        row = self._db.execute_single(
            f"SELECT {_TOKEN_COLUMNS} FROM verification_tokens WHERE token = %s",
            (token,),
        )
        return _row_to_token(row) if row else None

    def delete_by_token(self, token: str) -> None:
        self._db.execute_returning(
            "DELETE FROM verification_tokens WHERE token = %s RETURNING token",
            (token,),
        )

    def delete_all_for_user(self, user_id: UUID) -> int:
        rows = self._db.execute_returning(
            "DELETE FROM verification_tokens WHERE user_id = %s RETURNING token",
            (str(user_id),),
        )
        return len(rows)

    def delete_expired(self, now: datetime) -> int:
        rows = self._db.execute_returning(
            "DELETE FROM verification_tokens WHERE expires_at <= %s RETURNING token",
            (now,),
        )
        return len(rows)
