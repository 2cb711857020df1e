from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional

from models.user import User
from services.user_store import UserStore
from utils.security import verify_password


@dataclass(frozen=True)
class Identity:
    """Public view of a user: never carries the password hash."""
    id: str
    email: str
    role: str

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        role = user.role.value if hasattr(user.role, "value") else str(user.role)
        return cls(id=user.id, email=user.email, role=role)

    def to_dict(self) -> dict:
        return asdict(self)


class CredentialVerifier:
    def __init__(self, store: UserStore):
        self._store = store

    def verify(self, email: str, password: str) -> Optional[Identity]:
        """
        Return the matching user's public view, or None. An unknown email and a
        wrong password are indistinguishable to the caller.
        """
        user = self._store.find_by_email(email)
        if user is None:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return Identity.from_user(user)
