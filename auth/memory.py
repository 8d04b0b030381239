"""In-memory implementations of the persistence ports.

Used by tests and local development. insert() enforces email uniqueness
the way the database's unique index does, so the concurrent sign-up case
still surfaces as ConflictError.
"""

import threading
from datetime import datetime
from typing import Any, Dict
from uuid import UUID

from auth.directory import UserDirectory, require_literal
from auth.exceptions import ConflictError, NotFoundError
from auth.types import User, VerificationToken
from auth.verification import VerificationTokenRepository
from utils.timezone import now_utc


class InMemoryUserDirectory(UserDirectory):
    """Dict-backed user directory."""

    def __init__(self):
        self._users: Dict[UUID, User] = {}
        self._lock = threading.RLock()

    def find_by_id(self, user_id: UUID) -> User | None:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    def find_by_email(self, email: str) -> User | None:
        email = require_literal(email, "email")
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return user.model_copy()
        return None

    def insert(self, user: User) -> User:
        with self._lock:
            if any(existing.email == user.email for existing in self._users.values()):
                raise ConflictError("A user with this email already exists")
            self._users[user.id] = user.model_copy()
        return user

    def update(self, user_id: UUID, fields: dict[str, Any]) -> User:
        self._check_update_fields(fields)
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundError(f'User with id "{user_id}" not found')
            updated = user.model_copy(update={**fields, "updated_at": now_utc()})
            self._users[user_id] = updated
            return updated.model_copy()

    def __len__(self) -> int:
        return len(self._users)


class InMemoryVerificationTokenRepository(VerificationTokenRepository):
    """Dict-backed verification token rows, keyed by token string."""

    def __init__(self):
        self._tokens: Dict[str, VerificationToken] = {}
        self._lock = threading.RLock()

    def insert(self, token: VerificationToken) -> None:
        with self._lock:
            if token.token in self._tokens:
                raise ConflictError("Verification token already exists")
            self._tokens[token.token] = token

    def find_by_token(self, token: str) -> VerificationToken | None:
        with self._lock:
            return self._tokens.get(token)

    def delete_by_token(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def delete_all_for_user(self, user_id: UUID) -> int:
        with self._lock:
            doomed = [t for t, row in self._tokens.items() if row.user_id == user_id]
            for t in doomed:
                del self._tokens[t]
            return len(doomed)

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            doomed = [t for t, row in self._tokens.items() if row.expires_at <= now]
            for t in doomed:
                del self._tokens[t]
            return len(doomed)

    def tokens_for_user(self, user_id: UUID) -> list[VerificationToken]:
        """All rows bound to a user. For inspection in tests."""
        with self._lock:
            return [row for row in self._tokens.values() if row.user_id == user_id]

    def __len__(self) -> int:
        return len(self._tokens)
