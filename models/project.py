from enum import Enum

from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    Text,
    JSON,
    Index,
)
from sqlalchemy.types import Enum as SAEnum

from models.base_model import BaseModel, Base


class ProjectCategory(str, Enum):
    DEFAULT = "DEFAULT"
    FULL_STACK = "FULL_STACK"
    FRONT_END = "FRONT_END"
    BACK_END = "BACK_END"
    MOBILE = "MOBILE"
    GAME = "GAME"


class Project(BaseModel, Base):
    __tablename__ = "projects"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    technologies = Column(JSON, nullable=False, default=list)
    image_url = Column(String(2048), nullable=False)
    live_url = Column(String(2048), nullable=True)
    github_url = Column(String(2048), nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    # Higher is shown first by default
    importance = Column(Integer, nullable=False, default=0)
    category = Column(
        SAEnum(ProjectCategory, name="project_category", native_enum=False),
        nullable=False,
        default=ProjectCategory.DEFAULT,
    )

    __table_args__ = (
        Index("ix_projects_category", "category"),
        Index("ix_projects_importance", "importance"),
    )
