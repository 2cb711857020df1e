"""
Authentication outcomes.

Auth failures are returned as values, not raised: every SessionManager
operation hands back an AuthResult and the HTTP layer decides the status
code. The kinds are kept apart for logging only; clients always see a plain
401.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AuthError(str, Enum):
    INVALID_CREDENTIALS = "InvalidCredentials"
    INVALID_REFRESH_TOKEN = "InvalidRefreshToken"
    TOKEN_EXPIRED = "TokenExpired"
    TOKEN_MALFORMED = "TokenMalformed"
    TOKEN_ALREADY_USED = "TokenAlreadyUsed"
    USER_NOT_FOUND = "UserNotFound"


@dataclass(frozen=True)
class AuthResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "AuthResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthError) -> "AuthResult[T]":
        return cls(error=error)


class MailDeliveryError(Exception):
    """The SMTP transport refused or failed to deliver a message."""
