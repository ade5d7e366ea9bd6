from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..crud.projects import archive_project, create_project, get_project, list_projects, update_project
from ..db.session import get_db
from ..deps.auth import current_user_id
from ..schemas.project import ProjectCreate, ProjectEnvelope, ProjectList, ProjectOut, ProjectUpdate
from ..schemas.session import MessageOut

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _project_to_schema(project) -> ProjectOut:
    return ProjectOut.model_validate(project, from_attributes=True)


@router.get("", response_model=ProjectList)
def api_list_projects(
    include_archived: bool = Query(default=True),
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    projects = [_project_to_schema(p) for p in list_projects(db, user_id, include_archived=include_archived)]
    return ProjectList(projects=projects, count=len(projects))


@router.post("", response_model=ProjectEnvelope, status_code=201)
def api_create_project(payload: ProjectCreate, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    try:
        project = create_project(db, user_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ProjectEnvelope(message="Project created successfully", project=_project_to_schema(project))


@router.get("/{project_id}", response_model=ProjectEnvelope)
def api_get_project(project_id: str, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    project = get_project(db, user_id, project_id)
    if not project:
        raise HTTPException(404, "Project not found")
    return ProjectEnvelope(project=_project_to_schema(project))


@router.put("/{project_id}", response_model=ProjectEnvelope)
def api_update_project(
    project_id: str,
    payload: ProjectUpdate,
    user_id: str = Depends(current_user_id),
    db: Session = Depends(get_db),
):
    project = get_project(db, user_id, project_id)
    if not project:
        raise HTTPException(404, "Project not found")
    try:
        updated = update_project(db, project, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ProjectEnvelope(message="Project updated successfully", project=_project_to_schema(updated))


@router.delete("/{project_id}", response_model=MessageOut)
def api_archive_project(project_id: str, user_id: str = Depends(current_user_id), db: Session = Depends(get_db)):
    project = get_project(db, user_id, project_id)
    if not project:
        raise HTTPException(404, "Project not found")
    archive_project(db, project)
    return MessageOut(message="Project archived successfully")
