"""
Session manager: login, refresh, access-token validation and invalidation.

Per-user lifecycle, as seen in the token tables:
  anonymous  - no refresh tokens stored
  active     - one or more refresh tokens stored
  revoked    - list emptied by invalidate_all (back to anonymous for login)
Access tokens are unused until the first successful validation, then spent
for good; presenting a spent token is an authentication failure.

Model: login hands out an access token only. Each authenticated request
spends its access token and (with rotate=True) receives a new refresh token,
which the client exchanges at refresh_tokens() for the next access token.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from models.db_storage import DBStorage
from services.credentials import CredentialVerifier, Identity
from services.errors import AuthError, AuthResult
from services.tokens import TokenIssuer, TokenKind, TokenSettings, TokenVerifier
from services.user_store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    user: Identity

    def to_dict(self) -> dict:
        return {"access_token": self.access_token, "user": self.user.to_dict()}


@dataclass(frozen=True)
class AuthenticatedUser:
    identity: Identity
    token_id: str
    # set when the request was asked to rotate
    refresh_token: Optional[str] = None


class SessionManager:
    def __init__(
        self,
        store: UserStore,
        issuer: TokenIssuer,
        access_verifier: TokenVerifier,
        refresh_verifier: TokenVerifier,
    ):
        if access_verifier.kind is not TokenKind.ACCESS or refresh_verifier.kind is not TokenKind.REFRESH:
            raise ValueError("verifiers must be (access, refresh)")
        self._store = store
        self._issuer = issuer
        self._credentials = CredentialVerifier(store)
        self._access = access_verifier
        self._refresh = refresh_verifier

    @classmethod
    def from_config(cls, storage: DBStorage, config: Mapping, clock=None) -> "SessionManager":
        algorithm = config.get("JWT_ALGORITHM", "HS256")
        issuer_name = config.get("JWT_ISSUER")
        access = TokenSettings(
            secret=config["JWT_SECRET"],
            ttl=config["JWT_EXPIRES"],
            algorithm=algorithm,
            issuer=issuer_name,
        )
        refresh = TokenSettings(
            secret=config["JWT_REFRESH_SECRET"],
            ttl=config["JWT_REFRESH_EXPIRES"],
            algorithm=algorithm,
            issuer=issuer_name,
        )
        store = UserStore(storage)
        return cls(
            store=store,
            issuer=TokenIssuer(store, access, refresh, clock=clock),
            access_verifier=TokenVerifier(TokenKind.ACCESS, access),
            refresh_verifier=TokenVerifier(TokenKind.REFRESH, refresh),
        )

    @property
    def store(self) -> UserStore:
        return self._store

    def login(self, email: str, password: str) -> AuthResult[LoginResult]:
        identity = self._credentials.verify(email, password)
        if identity is None:
            logger.info("login rejected for %s", email)
            return AuthResult.failure(AuthError.INVALID_CREDENTIALS)

        access = self._issuer.issue_access_token(identity.id, identity.email)
        return AuthResult.success(LoginResult(access_token=access.token, user=identity))

    def refresh_tokens(self, refresh_token: str) -> AuthResult[LoginResult]:
        """
        Exchange a stored refresh token for a new access token. The refresh
        token is consumed; every failure collapses to INVALID_REFRESH_TOKEN.
        """
        verified = self._refresh.verify(refresh_token)
        if not verified.ok:
            logger.info("refresh rejected: %s", verified.error.value)
            return AuthResult.failure(AuthError.INVALID_REFRESH_TOKEN)

        claims = verified.value
        user = self._store.find_by_id(claims.subject)
        if user is None:
            logger.info("refresh rejected: %s", AuthError.USER_NOT_FOUND.value)
            return AuthResult.failure(AuthError.INVALID_REFRESH_TOKEN)

        access = None
        with self._store.atomic():
            # the DELETE is the membership check: a concurrent duplicate sees rowcount 0
            if self._store.consume_refresh_token(user.id, refresh_token):
                access = self._issuer.issue_access_token(user.id, user.email)

        if access is None:
            logger.info("refresh rejected: token not in list of user %s", user.id)
            return AuthResult.failure(AuthError.INVALID_REFRESH_TOKEN)

        return AuthResult.success(
            LoginResult(access_token=access.token, user=Identity.from_user(user))
        )

    def validate_access_token(self, token: str, rotate: bool = False) -> AuthResult[AuthenticatedUser]:
        """
        Verify an access token and spend it. With rotate=True a new refresh
        token is stored in the same transaction and returned to the caller.
        """
        verified = self._access.verify(token)
        if not verified.ok:
            return AuthResult.failure(verified.error)

        claims = verified.value
        user = self._store.find_by_id(claims.subject)
        if user is None:
            logger.info("access token rejected: %s", AuthError.USER_NOT_FOUND.value)
            return AuthResult.failure(AuthError.USER_NOT_FOUND)

        refresh_token = None
        with self._store.atomic():
            fresh = self._store.mark_token_used(user.id, claims.token_id, claims.expires_at)
            if fresh and rotate:
                refresh_token = self._issuer.issue_refresh_token(user.id, user.email)

        if not fresh:
            logger.warning("access token %s replayed for user %s", claims.token_id, user.id)
            return AuthResult.failure(AuthError.TOKEN_ALREADY_USED)

        return AuthResult.success(
            AuthenticatedUser(
                identity=Identity.from_user(user),
                token_id=claims.token_id,
                refresh_token=refresh_token,
            )
        )

    def issue_refresh_token(self, user_id: str, email: str) -> str:
        with self._store.atomic():
            return self._issuer.issue_refresh_token(user_id, email)

    def invalidate_all(self, user_id: str, include_used: bool = False) -> None:
        """Drop every refresh token of the user. Idempotent."""
        with self._store.atomic():
            self._store.clear_tokens(user_id, include_used=include_used)
        logger.info("tokens invalidated for user %s", user_id)
