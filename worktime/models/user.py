"""SQLAlchemy model for registered accounts."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class User(Base):
    __tablename__ = "users"
    __allow_unmapped__ = True

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    email = Column(Text, nullable=False, unique=True, index=True)
    # Never leaves the server; schemas do not declare it.
    password_hash = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)
    last_login = Column(Text, nullable=True)

    projects = relationship("Project", back_populates="owner")


__all__ = ["User"]
