"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT encoding/decoding via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from utils.exceptions import InvalidTokenError

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def encode_token(
    subject: str,
    token_type: str,
    secret: str,
    expires_in: timedelta,
    algorithm: str = "HS256",
    issuer: str | None = None,
) -> str:
    """Sign a JWT for `subject` that expires `expires_in` from now."""
    now = _now()
    payload = {
        "sub": str(subject),
        "type": token_type,
        "iat": now,
        "exp": now + expires_in,
        "jti": generate_jti(),
    }
    if issuer:
        payload["iss"] = issuer
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str, secret: str, algorithm: str = "HS256", issuer: str | None = None
) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises InvalidTokenError on a bad signature,
    a malformed token or an expired token.
    """
    if not token or not isinstance(token, str):
        raise InvalidTokenError("Invalid token")
    try:
        return jwt.decode(
            token, secret, algorithms=[algorithm], issuer=issuer, options={"require": ["exp", "sub"]}
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError(expired=True)
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(f"Invalid token: {exc}")
