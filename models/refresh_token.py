"""
RefreshToken model: one row per currently valid refresh token of a user.
Fields:
- token (the raw signed string, unique) - possession of a stored string is the validity proof
- user_id (String(36)) - FK to users.id
- created_at - issuance order
Rows are deleted when the token is consumed by a refresh or by invalidation.
"""
from sqlalchemy import Column, String, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(1024), nullable=False, unique=True)

    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_refresh_tokens_user_id", "user_id"),
    )

    def __repr__(self):
        return f"<RefreshToken user={self.user_id}>"
