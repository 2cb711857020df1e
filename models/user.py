from enum import Enum

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base


class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(BaseModel, Base):
    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(SAEnum(Role, name="user_role", native_enum=False), nullable=False, default=Role.USER)

    # Ordered by issuance; membership of the raw string is what makes a refresh token valid
    refresh_tokens = relationship(
        "RefreshToken",
        order_by="RefreshToken.created_at",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    used_token_ids = relationship(
        "UsedTokenId",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
