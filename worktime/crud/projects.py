"""CRUD helpers for user-owned projects.

Every query is filtered by ``user_id``; a project belonging to someone else is
indistinguishable from one that does not exist.
"""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.project import Project
from ..services.timecalc import utcnow_iso

UPDATABLE_FIELDS = ("name", "description", "color", "is_archived")


def list_projects(db: Session, user_id: str, include_archived: bool = True):
    stmt = select(Project).where(Project.user_id == user_id)
    if not include_archived:
        stmt = stmt.where(Project.is_archived.is_(False))
    stmt = stmt.order_by(desc(Project.created_at))
    return db.execute(stmt).scalars().all()


def get_project(db: Session, user_id: str, project_id: str) -> Project | None:
    stmt = select(Project).where(Project.id == project_id, Project.user_id == user_id)
    return db.execute(stmt).scalars().first()


def create_project(db: Session, user_id: str, payload: dict) -> Project:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("Project name is required")
    now = utcnow_iso()
    project = Project(
        user_id=user_id,
        name=name,
        description=(payload.get("description") or None),
        color=(payload.get("color") or settings.DEFAULT_PROJECT_COLOR),
        is_archived=False,
        created_at=now,
        updated_at=now,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def update_project(db: Session, project: Project, payload: dict) -> Project:
    changes = {field: payload[field] for field in UPDATABLE_FIELDS if field in payload}
    if not changes:
        raise ValueError("No updates provided")
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValueError("Project name cannot be empty")
        project.name = name
    if "description" in changes:
        project.description = changes["description"] or None
    if "color" in changes:
        project.color = changes["color"] or settings.DEFAULT_PROJECT_COLOR
    if "is_archived" in changes:
        project.is_archived = bool(changes["is_archived"])
    project.updated_at = utcnow_iso()
    db.commit()
    db.refresh(project)
    return project


def archive_project(db: Session, project: Project) -> Project:
    # Sessions keep pointing at archived projects, so rows are never removed.
    project.is_archived = True
    project.updated_at = utcnow_iso()
    db.commit()
    db.refresh(project)
    return project
