"""Client-side entities and the mapping between form fields and the wire.

The API reads snake_case request bodies and answers in camelCase. Each entity
has exactly one function per direction that knows about this.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..services.timecalc import to_iso

WORK_TYPES = ("Deep Work", "Light Work", "Meeting", "Study", "Coding")

# (label, seconds) quick picks for the goal duration; 0 means no goal.
GOAL_OPTIONS = (
    ("None", 0),
    ("25 min", 25 * 60),
    ("45 min", 45 * 60),
    ("1 hour", 60 * 60),
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class User(_WireModel):
    id: str
    email: str
    name: str
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    last_login: Optional[str] = Field(default=None, alias="lastLogin")


class ProjectSummary(_WireModel):
    id: str
    name: str
    color: str


class Project(_WireModel):
    id: str
    name: str
    description: Optional[str] = None
    color: str
    is_archived: bool = Field(default=False, alias="isArchived")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")


class WorkSession(_WireModel):
    id: str
    name: str
    work_type: str = Field(alias="workType")
    start_time: datetime = Field(alias="startTime")
    end_time: datetime = Field(alias="endTime")
    duration_seconds: int = Field(alias="durationSeconds")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    notes: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    project: Optional[ProjectSummary] = None


@dataclass
class SessionForm:
    name: str = ""
    work_type: str = ""
    goal_seconds: int = 0
    project_id: Optional[str] = None
    notes: str = ""


def validate_session_form(form: SessionForm) -> dict[str, str]:
    """Return ``{field: message}`` for every problem; empty when the form is usable."""
    errors: dict[str, str] = {}
    if not (form.name or "").strip():
        errors["name"] = "Session name is required"
    if (form.work_type or "").strip() not in WORK_TYPES:
        errors["work_type"] = "Please select a work type"
    if form.goal_seconds < 0:
        errors["goal_seconds"] = "Goal duration cannot be negative"
    return errors


def validate_credentials(email: str, password: str, name: str | None = None) -> dict[str, str]:
    errors: dict[str, str] = {}
    if "@" not in (email or ""):
        errors["email"] = "Valid email is required"
    if not password:
        errors["password"] = "Password is required"
    if name is not None:
        if len(password or "") < 6:
            errors["password"] = "Password must be at least 6 characters"
        if not name.strip():
            errors["name"] = "Name is required"
    return errors


def session_to_wire(
    form: SessionForm,
    *,
    start_time: datetime,
    end_time: datetime,
    duration_seconds: int,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": form.name.strip(),
        "work_type": form.work_type.strip(),
        "start_time": to_iso(start_time),
        "end_time": to_iso(end_time),
        "duration_seconds": int(duration_seconds),
    }
    if form.project_id:
        payload["project_id"] = form.project_id
    if form.notes and form.notes.strip():
        payload["notes"] = form.notes.strip()
    return payload


def session_from_wire(payload: dict[str, Any]) -> WorkSession:
    return WorkSession.model_validate(payload)


def project_to_wire(
    *,
    name: str | None = None,
    description: str | None = None,
    color: str | None = None,
    is_archived: bool | None = None,
) -> dict[str, Any]:
    fields = {"name": name, "description": description, "color": color, "is_archived": is_archived}
    return {key: value for key, value in fields.items() if value is not None}


def project_from_wire(payload: dict[str, Any]) -> Project:
    return Project.model_validate(payload)


def user_from_wire(payload: dict[str, Any]) -> User:
    return User.model_validate(payload)


def user_to_storage(user: User) -> dict[str, Any]:
    return user.model_dump(by_alias=True)
