"""Password hashing for stored user credentials."""

import bcrypt

from .config import settings

# bcrypt only considers the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of ``password``."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("ascii")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check ``password`` against a stored hash.

    Malformed or missing hashes never match.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        return False
