"""Credential hashing with bcrypt.

Only one-way hashes ever leave this module. Verification goes through
bcrypt.checkpw, never through string equality on digests.
"""

import bcrypt

from auth.config import AuthConfig
from auth.exceptions import BadRequestError

# bcrypt ignores everything past 72 bytes; refuse instead of truncating.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Salted bcrypt hashing with a fixed cost factor.

    Usage:
        hasher = PasswordHasher(config)
        digest = hasher.hash("SecureP@ss1")
        hasher.compare("SecureP@ss1", digest)  # True
    """

    def __init__(self, config: AuthConfig):
        self._rounds = config.password_hash_rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Raises:
            BadRequestError: If the password exceeds bcrypt's input limit.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise BadRequestError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def compare(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash.

        A malformed stored hash or an over-long password counts as a
        mismatch rather than an error.
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except (ValueError, TypeError):
            return False
