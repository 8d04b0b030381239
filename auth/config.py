"""Authentication configuration."""

import re

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}
_HTTP_URL = TypeAdapter(AnyHttpUrl)


def parse_duration(value: str | int) -> int:
    """Parse a lifetime like "15m", "1d", "30s", "2h" or "900" into seconds.

    Raises:
        ValueError: If the value is not a positive duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int):
        seconds = value
    else:
        match = _DURATION_PATTERN.match(value)
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        seconds = int(amount) * _UNIT_SECONDS[unit]

    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


class AuthConfig(BaseModel):
    """
    Authentication configuration.

    Built once at startup and handed to every component that needs it.
    A missing signing secret or an unparseable token lifetime fails
    validation, which stops the process before it serves anything.
    """

    # Access tokens
    jwt_secret: str = Field(
        ...,
        description="HMAC secret for signing access tokens",
        min_length=1,
    )
    jwt_expires_in: str = Field(
        default="15m",
        description="Access token lifetime as a duration string",
    )

    # Credential hashing
    password_hash_rounds: int = Field(
        default=10,
        description="bcrypt cost factor",
        ge=4,
        le=16,
    )

    # Verification tokens
    verification_token_expiry_minutes: int = Field(
        default=15,
        description="How long a verification link remains valid",
        ge=1,
        le=1440,
    )

    # Rate limiting
    resend_rate_limit_attempts: int = Field(
        default=3,
        description="Max resend-verification requests per email per window",
        ge=1,
    )
    resend_rate_limit_window_minutes: int = Field(
        default=5,
        ge=1,
    )
    change_password_rate_limit_attempts: int = Field(
        default=5,
        description="Max change-password attempts per user per window",
        ge=1,
    )
    change_password_rate_limit_window_minutes: int = Field(
        default=15,
        ge=1,
    )
    default_rate_limit_attempts: int = Field(
        default=60,
        description="Max requests per client IP per window on every auth route",
        ge=1,
    )
    default_rate_limit_window_seconds: int = Field(
        default=60,
        ge=1,
    )

    # Application
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Base URL for verification link generation",
    )
    app_name: str = Field(
        default="Easy Auth",
        description="Application name for emails",
    )

    @field_validator("jwt_secret")
    @classmethod
    def _secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("jwt_secret must not be blank")
        return value

    @field_validator("jwt_expires_in")
    @classmethod
    def _lifetime_parses(cls, value: str) -> str:
        parse_duration(value)
        return value

    @field_validator("frontend_url")
    @classmethod
    def _valid_http_url(cls, value: str) -> str:
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as e:
            raise ValueError(f"frontend_url must be an http(s) URL: {value!r}") from e
        return value.rstrip("/")

    @property
    def access_token_lifetime_seconds(self) -> int:
        """Access token lifetime in seconds."""
        return parse_duration(self.jwt_expires_in)
