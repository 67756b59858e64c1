"""Password hashing helpers (pbkdf2_hmac)."""

import hashlib
import secrets
from typing import Optional

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000


def hash_password(password: str, salt: Optional[str] = None, iterations: int = DEFAULT_ITERATIONS) -> str:
    """
    Hash a plaintext password into a self-describing string.

    Format: ``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``.
    """
    salt = salt or secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"{ALGORITHM}${iterations}${salt}${dk.hex()}"


def verify_password(password: Optional[str], encoded: str) -> bool:
    if password is None or not encoded:
        return False
    try:
        algorithm, iterations, salt, digest = encoded.split("$", 3)
        iterations = int(iterations)
    except ValueError:
        return False
    if algorithm != ALGORITHM:
        return False
    candidate = hash_password(password, salt=salt, iterations=iterations)
    return secrets.compare_digest(candidate.rsplit("$", 1)[1], digest)
