"""Salted one-way password hashing through werkzeug.

Stored format is werkzeug's ``pbkdf2:sha256:<iterations>$<salt>$<hash>``.
"""

from werkzeug.security import check_password_hash, generate_password_hash

DEFAULT_ITERATIONS = 600_000
SALT_LENGTH = 16


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    return generate_password_hash(
        password, method=f"pbkdf2:sha256:{iterations}", salt_length=SALT_LENGTH,
    )


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    if not stored:
        return False
    try:
        return check_password_hash(stored, password)
    except ValueError:
        # Unknown hash method
        return False
