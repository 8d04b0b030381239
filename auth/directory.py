"""User directory port.

The directory exclusively owns user records. AuthService depends only on
this interface; auth/database.py and auth/memory.py provide the PostgreSQL
and in-memory implementations.
"""

from abc import ABC, abstractmethod
from typing import Any
from uuid import UUID, uuid4

from auth.exceptions import BadRequestError, ConflictError, NotFoundError
from auth.types import User
from utils.timezone import now_utc

# Fields callers may change through update(); id, email and created_at are fixed.
UPDATABLE_FIELDS = frozenset({"name", "password_hash", "is_email_verified"})


def require_literal(value: Any, field: str) -> str:
    """Reject anything but a plain string before it reaches a query.

    Lookups are equality matches on literal data. Structured input (dicts,
    lists) could be read as a query operator by a document store, so it is
    refused outright.
    """
    if not isinstance(value, str):
        raise BadRequestError(f"{field} must be a string")
    return value


class UserDirectory(ABC):
    """Persistence port for user records."""

    @abstractmethod
    def find_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""

    @abstractmethod
    def find_by_email(self, email: str) -> User | None:
        """Find user by exact (case-sensitive) email."""

    @abstractmethod
    def insert(self, user: User) -> User:
        """Persist a new user.

        Raises:
            ConflictError: If the store's unique constraint on email rejects it.
        """

    @abstractmethod
    def update(self, user_id: UUID, fields: dict[str, Any]) -> User:
        """Apply a partial update and bump updated_at.

        Raises:
            NotFoundError: If no user has this id.
        """

    def create(self, email: str, name: str, password_hash: str) -> User:
        """Create an unverified user.

        Check-then-insert: the pre-check gives a clean Conflict in the common
        case, and the store's unique index catches the concurrent case.

        Raises:
            ConflictError: If the email is already registered.
        """
        email = require_literal(email, "email")
        if self.find_by_email(email) is not None:
            raise ConflictError("A user with this email already exists")

        now = now_utc()
        user = User(
            id=uuid4(),
            email=email,
            name=name,
            password_hash=password_hash,
            is_email_verified=False,
            created_at=now,
            updated_at=now,
        )
        return self.insert(user)

    def get_by_id(self, user_id: UUID) -> User:
        """Like find_by_id, but a miss is an error.

        Raises:
            NotFoundError: If no user has this id.
        """
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f'User with id "{user_id}" not found')
        return user

    @staticmethod
    def _check_update_fields(fields: dict[str, Any]) -> None:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
