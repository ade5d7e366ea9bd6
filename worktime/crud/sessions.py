"""CRUD helpers for completed work sessions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from ..models.work_session import WorkSession
from ..services.timecalc import to_iso, utcnow_iso
from .projects import get_project


class ProjectNotOwned(LookupError):
    pass


def _stamp(value) -> str:
    if isinstance(value, datetime):
        return to_iso(value)
    return str(value)


def list_sessions(
    db: Session,
    user_id: str,
    limit: int = 50,
    offset: int = 0,
    work_type: str | None = None,
):
    stmt = (
        select(WorkSession)
        .options(selectinload(WorkSession.project))
        .where(WorkSession.user_id == user_id)
    )
    if work_type:
        stmt = stmt.where(WorkSession.work_type == work_type)
    stmt = (
        stmt.order_by(desc(WorkSession.start_time), desc(WorkSession.created_at))
        .limit(limit)
        .offset(offset)
    )
    return db.execute(stmt).scalars().all()


def get_session(db: Session, user_id: str, session_id: str) -> WorkSession | None:
    stmt = (
        select(WorkSession)
        .options(selectinload(WorkSession.project))
        .where(WorkSession.id == session_id, WorkSession.user_id == user_id)
    )
    return db.execute(stmt).scalars().first()


def create_session(db: Session, user_id: str, payload: dict) -> WorkSession:
    name = (payload.get("name") or "").strip()
    if not name:
        raise ValueError("Session name is required")
    work_type = (payload.get("work_type") or "").strip()
    if not work_type:
        raise ValueError("Work type is required")
    project_id = payload.get("project_id")
    if project_id is not None:
        project_id = str(project_id)
        if get_project(db, user_id, project_id) is None:
            raise ProjectNotOwned("Project not found or does not belong to you")
    session = WorkSession(
        user_id=user_id,
        project_id=project_id,
        name=name,
        work_type=work_type,
        start_time=_stamp(payload["start_time"]),
        end_time=_stamp(payload["end_time"]),
        duration_seconds=int(payload["duration_seconds"]),
        notes=(payload.get("notes") or None),
        created_at=utcnow_iso(),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def delete_session(db: Session, session: WorkSession) -> None:
    db.delete(session)
    db.commit()
