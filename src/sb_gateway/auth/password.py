"""Password hashing utilities using bcrypt.

Uses the ``bcrypt`` library directly (>=4.0); passlib is unmaintained and
incompatible with bcrypt >=4. bcrypt only looks at the first 72 bytes, so
longer inputs are rejected at the schema layer (max_length=72).
"""

import bcrypt


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt. Returns a utf-8 hash string."""
    hashed_bytes: bytes = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt())
    return hashed_bytes.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False
