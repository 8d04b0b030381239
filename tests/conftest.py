"""Shared test fixtures for the auth test suite."""

from unittest.mock import Mock

import pytest

from auth.config import AuthConfig
from auth.memory import InMemoryUserDirectory, InMemoryVerificationTokenRepository
from auth.notifications import NotificationDispatcher
from auth.password import PasswordHasher
from auth.security_logger import SecurityLogger
from auth.service import AuthService
from auth.tokens import AccessTokenIssuer
from auth.verification import VerificationTokenStore
from clients.email_client import EmailGatewayClient


# =============================================================================
# TEST CONSTANTS
# =============================================================================

TEST_EMAIL = "testuser@example.com"
TEST_NAME = "Test User"
TEST_PASSWORD = "SecureP@ss1"
TEST_JWT_SECRET = "test-jwt-secret-value"


# =============================================================================
# CONFIG & PRIMITIVES
# =============================================================================


@pytest.fixture
def config() -> AuthConfig:
    """Test config with the minimum bcrypt cost so hashing stays fast."""
    return AuthConfig(
        jwt_secret=TEST_JWT_SECRET,
        jwt_expires_in="15m",
        password_hash_rounds=4,
        verification_token_expiry_minutes=15,
        frontend_url="https://app.example.com",
    )


@pytest.fixture
def password_hasher(config):
    return PasswordHasher(config)


@pytest.fixture
def token_issuer(config):
    return AccessTokenIssuer(config)


# =============================================================================
# STORES
# =============================================================================


@pytest.fixture
def users():
    return InMemoryUserDirectory()


@pytest.fixture
def token_repository():
    return InMemoryVerificationTokenRepository()


@pytest.fixture
def verification_tokens(token_repository, config):
    return VerificationTokenStore(token_repository, config)


# =============================================================================
# NOTIFICATIONS & AUDIT
# =============================================================================


@pytest.fixture
def mock_email_client():
    """Mock email client - no actual emails sent in tests."""
    mock = Mock(spec=EmailGatewayClient)
    mock.send_email.return_value = None
    return mock


@pytest.fixture
def dispatcher(mock_email_client):
    """Real dispatcher over the mock client; drained and stopped after each test."""
    d = NotificationDispatcher(mock_email_client, max_workers=2)
    yield d
    d.shutdown(wait_for_delivery=True)


@pytest.fixture
def mock_security_logger():
    return Mock(spec=SecurityLogger)


# =============================================================================
# SERVICE
# =============================================================================


@pytest.fixture
def auth_service(
    config,
    users,
    verification_tokens,
    password_hasher,
    token_issuer,
    dispatcher,
    mock_security_logger,
):
    return AuthService(
        config=config,
        users=users,
        verification_tokens=verification_tokens,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        dispatcher=dispatcher,
        security_logger=mock_security_logger,
    )


@pytest.fixture
def sent_token(mock_email_client, dispatcher):
    """Return a callable that extracts the token from the latest sent email."""

    def _latest() -> str:
        assert dispatcher.wait_for_pending(timeout=5)
        text = mock_email_client.send_email.call_args.kwargs["text"]
        marker = "verify-email?token="
        start = text.index(marker) + len(marker)
        return text[start:].split()[0]

    return _latest


@pytest.fixture
def verified_user(auth_service, users, sent_token):
    """A signed-up, verified user. Returns the User record."""
    result = auth_service.sign_up(email=TEST_EMAIL, name=TEST_NAME, password=TEST_PASSWORD)
    auth_service.verify_email(sent_token())
    return users.find_by_id(result.id)
