from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.sessions import ProjectNotOwned, create_session, delete_session, get_session, list_sessions
from ..db.session import get_db
from ..deps.auth import current_user_id
from ..schemas.session import (
    MessageOut,
    ProjectRef,
    SessionCreate,
    SessionEnvelope,
    SessionOut,
    SessionPage,
)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _session_to_schema(session) -> SessionOut:
    payload = SessionOut.model_validate(session, from_attributes=True)
    project = session.project
    if project is not None:
        payload.project = ProjectRef(id=project.id, name=project.name, color=project.color)
    return payload


@router.post("", response_model=SessionEnvelope, status_code=201)
def api_create_session(
    payload: SessionCreate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    try:
        session = create_session(db, user_id, payload.model_dump())
    except ProjectNotOwned as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return SessionEnvelope(message="Session created successfully", session=_session_to_schema(session))


@router.get("", response_model=SessionPage)
def api_list_sessions(
    limit: int = Query(default=settings.SESSIONS_PAGE_LIMIT, ge=1, le=settings.SESSIONS_PAGE_MAX),
    offset: int = Query(default=0, ge=0),
    work_type: str | None = Query(default=None),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    work_type = (work_type or "").strip() or None
    sessions = [_session_to_schema(s) for s in list_sessions(db, user_id, limit, offset, work_type)]
    return SessionPage(sessions=sessions, count=len(sessions), limit=limit, offset=offset)


@router.get("/{session_id}", response_model=SessionEnvelope)
def api_get_session(session_id: str, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    session = get_session(db, user_id, session_id)
    if not session:
        raise HTTPException(404, "Session not found")
    return SessionEnvelope(session=_session_to_schema(session))


@router.delete("/{session_id}", response_model=MessageOut)
def api_delete_session(session_id: str, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    session = get_session(db, user_id, session_id)
    if not session:
        raise HTTPException(404, "Session not found")
    delete_session(db, session)
    return MessageOut(message="Session deleted successfully")
