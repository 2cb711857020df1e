"""
Access/refresh token issuance and verification.

Two independent signing contexts (secret + lifetime), one per TokenKind. A
TokenVerifier is bound to exactly one kind, so an access token can never be
accepted where a refresh token is expected and vice versa: the secrets differ
and the `type` claim is checked as well.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from services.errors import AuthError, AuthResult
from services.user_store import UserStore
from utils.security import (
    TokenExpiredError,
    TokenInvalidError,
    generate_jti,
    sign_token,
    verify_token,
)

logger = logging.getLogger(__name__)


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenSettings:
    secret: str
    ttl: timedelta
    algorithm: str = "HS256"
    issuer: Optional[str] = None


@dataclass(frozen=True)
class IssuedToken:
    token: str
    token_id: str


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    token_id: str
    expires_at: datetime


class TokenIssuer:
    def __init__(
        self,
        store: UserStore,
        access: TokenSettings,
        refresh: TokenSettings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._store = store
        self._settings = {TokenKind.ACCESS: access, TokenKind.REFRESH: refresh}
        self._clock = clock

    def _sign(self, kind: TokenKind, user_id: str, email: str) -> IssuedToken:
        settings = self._settings[kind]
        token_id = generate_jti()
        token = sign_token(
            {"sub": str(user_id), "email": email, "jti": token_id, "type": kind.value},
            settings.secret,
            settings.ttl,
            algorithm=settings.algorithm,
            issuer=settings.issuer,
            now=self._clock() if self._clock else None,
        )
        return IssuedToken(token=token, token_id=token_id)

    def issue_access_token(self, user_id: str, email: str) -> IssuedToken:
        return self._sign(TokenKind.ACCESS, user_id, email)

    def issue_refresh_token(self, user_id: str, email: str) -> str:
        """Sign a refresh token and append it to the user's list (caller commits)."""
        issued = self._sign(TokenKind.REFRESH, user_id, email)
        self._store.append_refresh_token(user_id, issued.token)
        return issued.token


class TokenVerifier:
    def __init__(self, kind: TokenKind, settings: TokenSettings):
        self.kind = kind
        self._settings = settings

    def verify(self, token: str) -> AuthResult[TokenClaims]:
        if not isinstance(token, str) or not token:
            return AuthResult.failure(AuthError.TOKEN_MALFORMED)
        try:
            decoded = verify_token(
                token,
                self._settings.secret,
                algorithm=self._settings.algorithm,
                issuer=self._settings.issuer,
            )
        except TokenExpiredError:
            logger.info("%s token rejected: expired", self.kind.value)
            return AuthResult.failure(AuthError.TOKEN_EXPIRED)
        except TokenInvalidError as exc:
            logger.info("%s token rejected: %s", self.kind.value, exc)
            return AuthResult.failure(AuthError.TOKEN_MALFORMED)

        if decoded.get("type") != self.kind.value:
            logger.info("%s token rejected: wrong type %r", self.kind.value, decoded.get("type"))
            return AuthResult.failure(AuthError.TOKEN_MALFORMED)

        return AuthResult.success(
            TokenClaims(
                subject=str(decoded["sub"]),
                token_id=str(decoded["jti"]),
                expires_at=datetime.fromtimestamp(decoded["exp"], tz=timezone.utc),
            )
        )
