"""Password hashing and bearer-token (JWT) issuance/verification for principals."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from app.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


class InvalidTokenError(Exception):
    """Raised when a bearer token is malformed, expired, or does not name a principal."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def token_lifetime_seconds() -> int:
    return settings.JWT_EXPIRE_MINUTES * 60


def create_access_token(principal_id: int) -> str:
    """Create a JWT whose sub is the principal (user) id."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(principal_id),
        "exp": now + timedelta(seconds=token_lifetime_seconds()),
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def principal_id_from_token(token: str) -> int:
    """
    Decode and validate a bearer token and return the principal id it names.
    Raises InvalidTokenError on a bad signature, expiry, or a missing/non-integer sub.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.PyJWTError as e:
        raise InvalidTokenError("Invalid or expired token") from e
    sub = payload.get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError) as e:
        raise InvalidTokenError("Invalid token payload") from e
