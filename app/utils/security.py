"""
Gahoi Sathi — Password and session-token primitives.

Passwords are stored as bcrypt hashes.  Session tokens are opaque
``secrets.token_urlsafe`` strings; only their SHA-256 is persisted so a
presented token can be looked up without storing it.
"""

from __future__ import annotations

import hashlib
import secrets

import bcrypt

from app.errors import ValidationError

BCRYPT_ROUNDS = 12
# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72
_TOKEN_BYTES = 32


def hash_password(password: str, *, rounds: int = BCRYPT_ROUNDS) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(password: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        # Malformed stored hash or an over-long password
        return False


def generate_token() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Deterministic digest so a presented token can be looked up."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
