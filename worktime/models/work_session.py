from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class WorkSession(Base):
    __tablename__ = "sessions"
    __allow_unmapped__ = True

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=True, index=True)
    name = Column(Text, nullable=False)
    work_type = Column(Text, nullable=False, index=True)
    start_time = Column(Text, nullable=False, index=True)
    end_time = Column(Text, nullable=False)
    duration_seconds = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)

    project = relationship("Project", back_populates="sessions")


__all__ = ["WorkSession"]
