"""Password hashing with bcrypt."""

import logging

import bcrypt

from taskforge.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt only consumes the first 72 bytes of the password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password using bcrypt with a fresh salt.

    Args:
        password: The plaintext password
        rounds: bcrypt cost factor (defaults to BCRYPT_ROUNDS)

    Returns:
        str: The encoded digest, salt and cost included
    """
    if rounds is None:
        rounds = get_settings().BCRYPT_ROUNDS
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    A corrupted or non-bcrypt digest is treated as a failed match.
    """
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False
