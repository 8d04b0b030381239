"""Tests for auth/types.py - domain models and request payloads."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from auth.types import (
    ChangePasswordRequest,
    SignUpRequest,
    User,
    UserProfile,
    validate_password_strength,
)
from utils.timezone import now_utc


class TestPasswordStrength:

    def test_strong_password_accepted(self):
        assert validate_password_strength("SecureP@ss1") == "SecureP@ss1"

    @pytest.mark.parametrize(
        "password, message",
        [
            ("Sh0rt!", "at least 8 characters"),
            ("12345678!", "at least one letter"),
            ("Password!", "at least one number"),
            ("Password1", "at least one special character"),
        ],
    )
    def test_weak_passwords_rejected(self, password, message):
        with pytest.raises(ValueError, match=message):
            validate_password_strength(password)


class TestSignUpRequest:

    def test_valid_payload(self):
        body = SignUpRequest(email="new@example.com", name="New User", password="SecureP@ss1")
        assert body.email == "new@example.com"

    def test_invalid_email_rejected(self):
        with pytest.raises(ValidationError):
            SignUpRequest(email="not-an-email", name="New User", password="SecureP@ss1")

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            SignUpRequest(email="new@example.com", name="", password="SecureP@ss1")

    def test_long_name_rejected(self):
        with pytest.raises(ValidationError):
            SignUpRequest(email="new@example.com", name="x" * 101, password="SecureP@ss1")

    def test_weak_password_rejected(self):
        with pytest.raises(ValidationError, match="special character"):
            SignUpRequest(email="new@example.com", name="New User", password="Password1")

    def test_email_must_be_string(self):
        with pytest.raises(ValidationError):
            SignUpRequest(email={"$ne": None}, name="New User", password="SecureP@ss1")


class TestChangePasswordRequest:

    def test_new_password_must_be_strong(self):
        with pytest.raises(ValidationError):
            ChangePasswordRequest(current_password="anything", new_password="weak")

    def test_current_password_required(self):
        with pytest.raises(ValidationError):
            ChangePasswordRequest(current_password="", new_password="SecureP@ss2")


class TestUserProfile:

    def test_profile_omits_password_hash(self):
        now = now_utc()
        user = User(
            id=uuid4(),
            email="a@example.com",
            name="A",
            password_hash="$2b$04$secret",
            created_at=now,
            updated_at=now,
        )
        profile = UserProfile.from_user(user)

        dumped = profile.model_dump()
        assert "password_hash" not in dumped
        assert dumped["email"] == "a@example.com"
        assert dumped["is_email_verified"] is False

    def test_user_repr_hides_password_hash(self):
        now = now_utc()
        user = User(
            id=uuid4(),
            email="a@example.com",
            name="A",
            password_hash="$2b$04$secret",
            created_at=now,
            updated_at=now,
        )
        assert "$2b$04$secret" not in repr(user)
