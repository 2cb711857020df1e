"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT signing/verification via PyJWT
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError

ph = PasswordHasher()


class TokenExpiredError(Exception):
    """Signature is valid but the token is past its exp claim."""


class TokenInvalidError(Exception):
    """Malformed token, bad signature or wrong secret."""


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False

def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())

def _now() -> datetime:
    return datetime.now(timezone.utc)

def sign_token(
    payload: Dict[str, Any],
    secret: str,
    ttl: timedelta,
    algorithm: str = "HS256",
    issuer: str | None = None,
    now: datetime | None = None,
) -> str:
    """
    Sign payload with secret; iat/exp are derived from now + ttl.
    """
    issued_at = now or _now()
    claims = dict(payload)
    claims["iat"] = int(issued_at.timestamp())
    claims["exp"] = int((issued_at + ttl).timestamp())
    if issuer:
        claims["iss"] = issuer
    return jwt.encode(claims, secret, algorithm=algorithm)

def verify_token(
    token: str, secret: str, algorithm: str = "HS256", issuer: str | None = None
) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises TokenExpiredError on an expired token and
    TokenInvalidError on anything else (bad signature, garbage input, wrong or
    missing iss when an issuer is given).
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            issuer=issuer,
            options={"require": ["exp", "iat", "sub", "jti"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenInvalidError(f"Invalid token: {exc}") from exc
