"""
Token store: per-user refresh-token list and spent access-token ids.

Every mutation is a single conditional statement (DELETE ... WHERE token = ?,
INSERT ... ON CONFLICT DO NOTHING) so the row count tells the caller whether
it won the race. Nothing here commits on its own; callers wrap related
mutations in `atomic()`.
"""
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError

from models.db_storage import DBStorage
from models.refresh_token import RefreshToken
from models.used_token_id import UsedTokenId
from models.user import User


def _norm_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    def __init__(self, storage: DBStorage):
        self._storage = storage

    @property
    def session(self):
        return self._storage.get_session()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Commit everything done inside the block, or nothing."""
        session = self.session
        try:
            yield
            session.commit()
        except BaseException:
            # includes cancellation (KeyboardInterrupt, GeneratorExit)
            session.rollback()
            raise

    def find_by_email(self, email: str) -> Optional[User]:
        return self.session.query(User).filter(User.email == _norm_email(email)).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def refresh_tokens(self, user_id: str) -> List[str]:
        rows = self.session.execute(
            select(RefreshToken.token)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.created_at)
        )
        return [token for (token,) in rows]

    def append_refresh_token(self, user_id: str, token: str) -> None:
        self.session.execute(
            insert(RefreshToken.__table__).values(user_id=user_id, token=token)
        )

    def consume_refresh_token(self, user_id: str, token: str) -> bool:
        """Remove token from the user's list. True only for the caller that removed it."""
        result = self.session.execute(
            delete(RefreshToken.__table__).where(
                RefreshToken.user_id == user_id, RefreshToken.token == token
            )
        )
        return result.rowcount == 1

    def mark_token_used(self, user_id: str, token_id: str, expires_at: datetime | None = None) -> bool:
        """Record token_id as spent. False if it was already recorded."""
        values = {"user_id": user_id, "token_id": token_id, "expires_at": expires_at}
        dialect = self._storage.dialect
        if dialect in ("sqlite", "postgresql"):
            if dialect == "sqlite":
                from sqlalchemy.dialects.sqlite import insert as dialect_insert
            else:
                from sqlalchemy.dialects.postgresql import insert as dialect_insert
            stmt = (
                dialect_insert(UsedTokenId.__table__)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["user_id", "token_id"])
            )
            return self.session.execute(stmt).rowcount == 1

        # Other backends: savepoint so a duplicate does not poison the outer transaction
        try:
            with self.session.begin_nested():
                self.session.execute(insert(UsedTokenId.__table__).values(**values))
        except IntegrityError:
            return False
        return True

    def is_token_used(self, user_id: str, token_id: str) -> bool:
        q = self.session.query(UsedTokenId).filter(
            UsedTokenId.user_id == user_id, UsedTokenId.token_id == token_id
        )
        return self.session.query(q.exists()).scalar()

    def clear_tokens(self, user_id: str, include_used: bool = False) -> None:
        self.session.execute(
            delete(RefreshToken.__table__).where(RefreshToken.user_id == user_id)
        )
        if include_used:
            self.session.execute(
                delete(UsedTokenId.__table__).where(UsedTokenId.user_id == user_id)
            )
