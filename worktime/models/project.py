"""SQLAlchemy model for projects that group a user's work sessions."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class Project(Base):
    """A user-owned project. Projects are archived, never deleted."""

    __tablename__ = "projects"
    __allow_unmapped__ = True

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(Text, nullable=False)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    owner = relationship("User", back_populates="projects")
    sessions = relationship("WorkSession", back_populates="project")


__all__ = ["Project"]
