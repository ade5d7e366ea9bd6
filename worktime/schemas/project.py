"""Pydantic schemas that describe project payloads for the API."""

from __future__ import annotations

import re
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

HEX_COLOR_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def _check_color(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not HEX_COLOR_RE.match(value):
        raise ValueError("Color must be a valid hex code")
    return value


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip()


HexColor = Annotated[str, AfterValidator(_check_color)]
Text = Annotated[str, AfterValidator(_strip_optional)]


class ProjectCreate(BaseModel):
    name: str
    description: Optional[Text] = None
    color: Optional[HexColor] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Project name is required")
        return value


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[Text] = None
    color: Optional[HexColor] = None
    is_archived: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Project name cannot be empty")
        return value


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    color: str
    is_archived: bool = Field(serialization_alias="isArchived")
    created_at: str = Field(serialization_alias="createdAt")
    updated_at: str = Field(serialization_alias="updatedAt")


class ProjectEnvelope(BaseModel):
    message: Optional[str] = None
    project: ProjectOut


class ProjectList(BaseModel):
    projects: list[ProjectOut]
    count: int
