"""
Password hashing service using PBKDF2-HMAC-SHA256.
"""

import base64
import os

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from config import settings


HASH_SCHEME = "pbkdf2_sha256"
SALT_BYTES = 16


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )


def hash_password(password: str) -> str:
    """
    Hash a password for storage.

    Args:
        password: Plain text password

    Returns:
        Encoded hash "pbkdf2_sha256$<iterations>$<salt>$<digest>"
    """
    iterations = max(int(settings.PASSWORD_HASH_ITERATIONS), 1)
    salt = os.urandom(SALT_BYTES)
    digest = _kdf(salt, iterations).derive(password.encode())
    return "$".join([
        HASH_SCHEME,
        str(iterations),
        base64.urlsafe_b64encode(salt).decode(),
        base64.urlsafe_b64encode(digest).decode(),
    ])


def verify_password(password: str, encoded: str) -> bool:
    """
    Check a password against a stored hash.

    Args:
        password: Plain text password
        encoded: Value produced by hash_password

    Returns:
        True when the password matches
    """
    try:
        scheme, iterations, salt, digest = str(encoded or "").split("$")
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    try:
        _kdf(base64.urlsafe_b64decode(salt), int(iterations)).verify(
            password.encode(),
            base64.urlsafe_b64decode(digest),
        )
    except (InvalidKey, ValueError):
        return False
    return True
