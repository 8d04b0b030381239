"""Access token issuing and verification.

Tokens are HS256 JWTs carrying the subject id and email. They are not
persisted and there is no revocation list: a token stays valid until its
exp claim passes.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from auth.config import AuthConfig
from auth.exceptions import ConfigurationError, InvalidAccessTokenError
from auth.types import AccessTokenClaims
from utils.timezone import now_utc


class AccessTokenIssuer:
    """Mints and verifies signed, time-limited access tokens.

    Construction fails with ConfigurationError when the secret or lifetime
    is missing, so a misconfigured process never starts serving.
    """

    ALGORITHM = "HS256"

    def __init__(self, config: AuthConfig):
        if not config.jwt_secret:
            raise ConfigurationError("JWT secret is required")
        if not config.jwt_expires_in:
            raise ConfigurationError("JWT lifetime is required")

        try:
            lifetime_seconds = config.access_token_lifetime_seconds
        except ValueError as e:
            raise ConfigurationError(f"Invalid JWT lifetime: {e}") from e

        self._secret = config.jwt_secret
        self._lifetime = timedelta(seconds=lifetime_seconds)

    @property
    def lifetime(self) -> timedelta:
        return self._lifetime

    def issue(self, subject_id: UUID, email: str) -> str:
        """Sign a new access token for the subject."""
        now = now_utc()
        payload = {
            "sub": str(subject_id),
            "email": email,
            "iat": now,
            "exp": now + self._lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self.ALGORITHM)

    def verify(self, token: str) -> AccessTokenClaims:
        """Verify signature and expiry, then decode the claims.

        Raises:
            InvalidAccessTokenError: Bad signature, malformed token or
                payload, or expired token.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.ALGORITHM],
                options={"require": ["sub", "exp", "iat"]},
            )
            return AccessTokenClaims(
                sub=UUID(payload["sub"]),
                email=payload["email"],
                iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidAccessTokenError("Access token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidAccessTokenError(f"Invalid access token: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidAccessTokenError(f"Malformed token payload: {e}") from e
