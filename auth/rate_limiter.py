"""Rate limiting for sensitive auth endpoints.

Uses Valkey with sliding window TTL - each attempt resets the expiry.
Attackers bypassing frontend rate limiting hit an ever-extending lockout.
"""

from dataclasses import dataclass

from clients.valkey_client import ValkeyClient
from auth.config import AuthConfig
from auth.exceptions import RateLimitedError


@dataclass(frozen=True)
class RateLimitRule:
    """How many attempts a scope allows per window."""

    scope: str
    attempts: int
    window_seconds: int


class RateLimiter:
    """Per-scope, per-subject attempt counters in Valkey."""

    KEY_PREFIX = "ratelimit:"
    RESEND_VERIFICATION = "resend_verification"
    CHANGE_PASSWORD = "change_password"
    DEFAULT = "default"

    def __init__(self, valkey: ValkeyClient, config: AuthConfig):
        self._valkey = valkey
        self._rules = {
            self.RESEND_VERIFICATION: RateLimitRule(
                scope=self.RESEND_VERIFICATION,
                attempts=config.resend_rate_limit_attempts,
                window_seconds=config.resend_rate_limit_window_minutes * 60,
            ),
            self.CHANGE_PASSWORD: RateLimitRule(
                scope=self.CHANGE_PASSWORD,
                attempts=config.change_password_rate_limit_attempts,
                window_seconds=config.change_password_rate_limit_window_minutes * 60,
            ),
            self.DEFAULT: RateLimitRule(
                scope=self.DEFAULT,
                attempts=config.default_rate_limit_attempts,
                window_seconds=config.default_rate_limit_window_seconds,
            ),
        }

    def _rule(self, scope: str) -> RateLimitRule:
        try:
            return self._rules[scope]
        except KeyError:
            raise ValueError(f"Unknown rate limit scope: {scope}")

    def _key(self, scope: str, subject: str) -> str:
        """Generate rate limit key (subject normalized to lowercase)."""
        return f"{self.KEY_PREFIX}{scope}:{subject.lower()}"

    def check_rate_limit(self, scope: str, subject: str) -> None:
        """Count one attempt and fail if the scope's limit is exceeded.

        Sliding window: TTL resets on every attempt. Hammering extends lockout.

        Raises:
            RateLimitedError: If rate limit exceeded.
        """
        rule = self._rule(scope)
        key = self._key(scope, subject)

        count = self._valkey.incr(key)
        self._valkey.expire(key, rule.window_seconds)

        if count > rule.attempts:
            ttl = self._valkey.ttl(key)
            raise RateLimitedError(retry_after_seconds=max(ttl, 1))

    def ping(self) -> bool:
        """Counter store health check. Raises redis.ConnectionError if unreachable."""
        return self._valkey.ping()
