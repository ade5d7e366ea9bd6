"""Pydantic schemas for work session payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.config import settings
from ..services.timecalc import seconds_between


class SessionCreate(BaseModel):
    name: str
    work_type: str
    start_time: datetime
    end_time: datetime
    duration_seconds: int = Field(..., ge=1)
    project_id: Optional[UUID] = None
    notes: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Write spec",
                "work_type": "Deep Work",
                "start_time": "2024-05-01T09:00:00.000Z",
                "end_time": "2024-05-01T09:25:00.000Z",
                "duration_seconds": 1500,
            }
        }
    }

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Session name is required")
        return value

    @field_validator("work_type")
    @classmethod
    def _work_type_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Work type is required")
        return value

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def _check_window(self) -> "SessionCreate":
        span = seconds_between(self.start_time, self.end_time)
        if span <= 0:
            raise ValueError("End time must be after start time")
        if abs(span - self.duration_seconds) > settings.SESSION_DURATION_TOLERANCE_SECONDS:
            raise ValueError("Duration does not match start and end time")
        return self


class ProjectRef(BaseModel):
    id: str
    name: str
    color: str


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    work_type: str = Field(serialization_alias="workType")
    start_time: str = Field(serialization_alias="startTime")
    end_time: str = Field(serialization_alias="endTime")
    duration_seconds: int = Field(serialization_alias="durationSeconds")
    project_id: Optional[str] = Field(default=None, serialization_alias="projectId")
    notes: Optional[str] = None
    created_at: str = Field(serialization_alias="createdAt")
    project: Optional[ProjectRef] = None


class SessionEnvelope(BaseModel):
    message: Optional[str] = None
    session: SessionOut


class SessionPage(BaseModel):
    sessions: list[SessionOut]
    count: int
    limit: int
    offset: int


class MessageOut(BaseModel):
    message: str
