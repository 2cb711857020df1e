from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class UsedTokenId(BaseModel, Base):
    """Access-token id (jti) that has already been presented once."""
    __tablename__ = "used_token_ids"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_id = Column(String(64), nullable=False)
    # exp claim of the spent token, kept for auditing
    expires_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="used_token_ids")

    __table_args__ = (
        UniqueConstraint("user_id", "token_id", name="uq_used_token_ids_user_token"),
    )

    def __repr__(self):
        return f"<UsedTokenId token={self.token_id}>"
