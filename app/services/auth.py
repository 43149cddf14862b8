"""Authentication service: demo credential directory and JWT tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import TYPE_CHECKING, Optional

import bcrypt as _bcrypt
from jose import JWTError, jwt

from app.config import get_settings
from app.schemas.user import User

if TYPE_CHECKING:
    from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

# JWT configuration
ALGORITHM = "HS256"

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


class CredentialDirectory:
    """Username -> bcrypt hash table built from the build-time demo passwords.

    Held in memory only; it is never written to the key-value store.
    """

    def __init__(self, passwords: dict[str, str], rounds: int = 12) -> None:
        self._hashes = {
            username: _bcrypt.hashpw(password.encode("utf-8"), _bcrypt.gensalt(rounds=rounds))
            for username, password in passwords.items()
        }

    def __contains__(self, username: str) -> bool:
        return username in self._hashes

    def verify(self, username: str, password: str) -> bool:
        """Return True if password matches the stored hash for username."""
        hashed = self._hashes.get(username)
        if hashed is None:
            return False
        return _bcrypt.checkpw(password.encode("utf-8"), hashed)


@lru_cache(maxsize=1)
def get_credential_directory() -> CredentialDirectory:
    """Return the process-wide credential directory (hashed once per process)."""
    from app.seed.loader import get_seed_passwords

    return CredentialDirectory(get_seed_passwords(), rounds=get_settings().bcrypt_rounds)


def authenticate_user(
    users: UserDirectory,
    credentials: CredentialDirectory,
    username: str,
    password: str,
) -> Optional[User]:
    """Validate credentials and return user, or None if invalid.

    Unknown users and wrong passwords are indistinguishable to the caller.
    """
    user = users.get_by_username(username)
    if user is None:
        return None
    if not credentials.verify(username, password):
        return None
    return user


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.access_token_expire_hours)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT token. Returns payload or None."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None
