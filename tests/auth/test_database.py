"""Tests for the PostgreSQL user directory and token repository.

PostgresClient is mocked; these tests pin the SQL contract and row mapping.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock
from uuid import uuid4

import pytest
from psycopg2 import errors as pg_errors

from auth.database import PostgresUserDirectory, PostgresVerificationTokenRepository
from auth.exceptions import BadRequestError, ConflictError, NotFoundError
from auth.types import TokenPurpose, VerificationToken
from clients.postgres_client import PostgresClient


@pytest.fixture
def mock_db():
    return Mock(spec=PostgresClient)


@pytest.fixture
def user_row():
    now = datetime(2026, 1, 1, 12, 0)
    return {
        "id": str(uuid4()),
        "email": "a@example.com",
        "name": "A",
        "password_hash": "$2b$04$hash",
        "is_email_verified": False,
        "created_at": now,
        "updated_at": now,
    }


class TestPostgresUserDirectory:

    def test_find_by_id_maps_row(self, mock_db, user_row):
        mock_db.execute_single.return_value = user_row
        directory = PostgresUserDirectory(mock_db)

        user = directory.find_by_id(user_row["id"])

        assert str(user.id) == user_row["id"]
        assert user.created_at.tzinfo == timezone.utc
        assert "WHERE id = %s" in mock_db.execute_single.call_args.args[0]

    def test_find_by_email_miss(self, mock_db):
        mock_db.execute_single.return_value = None
        directory = PostgresUserDirectory(mock_db)

        assert directory.find_by_email("nobody@example.com") is None
        query, params = mock_db.execute_single.call_args.args
        assert "WHERE email = %s" in query
        assert params == ("nobody@example.com",)

    def test_find_by_email_rejects_structured_input(self, mock_db):
        directory = PostgresUserDirectory(mock_db)

        with pytest.raises(BadRequestError):
            directory.find_by_email({"$gt": ""})
        mock_db.execute_single.assert_not_called()

    def test_create_inserts_after_precheck(self, mock_db, user_row):
        mock_db.execute_single.return_value = None
        mock_db.execute_returning.side_effect = lambda query, params: [
            dict(zip(
                ["id", "email", "name", "password_hash", "is_email_verified", "created_at", "updated_at"],
                params,
            ))
        ]
        directory = PostgresUserDirectory(mock_db)

        user = directory.create(email="a@example.com", name="A", password_hash="$2b$04$hash")

        assert user.email == "a@example.com"
        assert user.is_email_verified is False
        assert "INSERT INTO users" in mock_db.execute_returning.call_args.args[0]

    def test_unique_violation_becomes_conflict(self, mock_db):
        mock_db.execute_single.return_value = None
        mock_db.execute_returning.side_effect = pg_errors.UniqueViolation()
        directory = PostgresUserDirectory(mock_db)

        with pytest.raises(ConflictError, match="already exists"):
            directory.create(email="a@example.com", name="A", password_hash="hash")

    def test_precheck_hit_conflicts_without_insert(self, mock_db, user_row):
        mock_db.execute_single.return_value = user_row
        directory = PostgresUserDirectory(mock_db)

        with pytest.raises(ConflictError):
            directory.create(email="a@example.com", name="A", password_hash="hash")
        mock_db.execute_returning.assert_not_called()

    def test_update_builds_set_clause(self, mock_db, user_row):
        mock_db.execute_returning.return_value = [{**user_row, "is_email_verified": True}]
        directory = PostgresUserDirectory(mock_db)

        user = directory.update(user_row["id"], {"is_email_verified": True})

        query, params = mock_db.execute_returning.call_args.args
        assert "SET is_email_verified = %s, updated_at = %s" in query
        assert params[0] is True
        assert params[-1] == str(user_row["id"])
        assert user.is_email_verified is True

    def test_update_missing_user(self, mock_db):
        mock_db.execute_returning.return_value = []
        directory = PostgresUserDirectory(mock_db)

        with pytest.raises(NotFoundError):
            directory.update(uuid4(), {"name": "X"})

    def test_update_rejects_unknown_fields(self, mock_db):
        directory = PostgresUserDirectory(mock_db)

        with pytest.raises(ValueError):
            directory.update(uuid4(), {"email": "b@example.com; DROP TABLE users"})
        mock_db.execute_returning.assert_not_called()


class TestPostgresVerificationTokenRepository:

    def test_insert_params(self, mock_db):
        repo = PostgresVerificationTokenRepository(mock_db)
        now = datetime.now(timezone.utc)
        user_id = uuid4()

        repo.insert(
            VerificationToken(
                token="tok",
                user_id=user_id,
                purpose=TokenPurpose.EMAIL_VERIFICATION,
                expires_at=now + timedelta(minutes=15),
                created_at=now,
            )
        )

        params = mock_db.execute_returning.call_args.args[1]
        assert params[:3] == ("tok", str(user_id), "email_verification")

    def test_find_by_token_maps_row(self, mock_db):
        user_id = uuid4()
        mock_db.execute_single.return_value = {
            "token": "tok",
            "user_id": str(user_id),
            "purpose": "email_verification",
            "expires_at": datetime(2026, 1, 1, 12, 15),
            "created_at": datetime(2026, 1, 1, 12, 0),
        }
        repo = PostgresVerificationTokenRepository(mock_db)

        record = repo.find_by_token("tok")

        assert record.user_id == user_id
        assert record.purpose == TokenPurpose.EMAIL_VERIFICATION
        assert record.expires_at.tzinfo == timezone.utc

    def test_delete_all_for_user_counts_rows(self, mock_db):
        mock_db.execute_returning.return_value = [{"token": "a"}, {"token": "b"}]
        repo = PostgresVerificationTokenRepository(mock_db)

        assert repo.delete_all_for_user(uuid4()) == 2

    def test_delete_expired_uses_inclusive_bound(self, mock_db):
        mock_db.execute_returning.return_value = []
        repo = PostgresVerificationTokenRepository(mock_db)

        assert repo.delete_expired(datetime.now(timezone.utc)) == 0
        assert "expires_at <= %s" in mock_db.execute_returning.call_args.args[0]
