"""Authentication and authorization modules."""

from auth.exceptions import (
    AuthError,
    BadRequestError,
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    InvalidAccessTokenError,
    InvalidVerificationTokenError,
    NotFoundError,
    RateLimitedError,
    UnauthorizedError,
)
from auth.types import (
    User,
    UserProfile,
    VerificationToken,
    AccessTokenClaims,
    TokenPurpose,
)
from auth.config import AuthConfig
from auth.directory import UserDirectory
from auth.verification import VerificationTokenRepository, VerificationTokenStore
from auth.database import PostgresUserDirectory, PostgresVerificationTokenRepository
from auth.memory import InMemoryUserDirectory, InMemoryVerificationTokenRepository
from auth.password import PasswordHasher
from auth.tokens import AccessTokenIssuer
from auth.notifications import NotificationDispatcher
from auth.rate_limiter import RateLimiter
from auth.security_logger import SecurityLogger, SecurityEvent
from auth.service import AuthService, SignUpResult, SignInResult, SuccessResult
from auth.security_middleware import AuthMiddleware
from auth.api import create_auth_router
