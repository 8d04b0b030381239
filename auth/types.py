"""Pydantic models for auth domain."""

import re
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 8
_SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def validate_password_strength(password: str) -> str:
    """Apply the password policy to a new password.

    Raises:
        ValueError: With the first rule the password breaks.
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )
    if not re.search(r"[a-zA-Z]", password):
        raise ValueError("Password must contain at least one letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one number")
    if not _SPECIAL_CHARACTERS.search(password):
        raise ValueError("Password must contain at least one special character")
    return password


class TokenPurpose(str, Enum):
    """What a verification token is allowed to prove."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class User(BaseModel):
    """A registered user. password_hash is always a bcrypt digest."""

    id: UUID
    email: str
    name: str
    password_hash: str = Field(..., repr=False)
    is_email_verified: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserProfile(BaseModel):
    """Public view of a user. Never carries the credential hash."""

    id: UUID
    email: str
    name: str
    is_email_verified: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            is_email_verified=user.is_email_verified,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class VerificationToken(BaseModel):
    """A single-use verification token awaiting consumption."""

    token: str = Field(..., description="Opaque random token")
    user_id: UUID
    purpose: TokenPurpose
    expires_at: datetime
    created_at: datetime


class AccessTokenClaims(BaseModel):
    """Decoded claims of a verified access token."""

    sub: UUID
    email: str
    iat: datetime
    exp: datetime


# Request payloads


class SignUpRequest(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    password: str

    @field_validator("password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return validate_password_strength(value)


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def _strong_password(cls, value: str) -> str:
        return validate_password_strength(value)
