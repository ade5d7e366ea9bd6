"""Project and single-session calls of the client against the in-process app."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from worktime.client import NotFoundError, ValidationError
from worktime.client.models import SessionForm, project_to_wire, session_to_wire

pytestmark = pytest.mark.anyio


@pytest.fixture()
async def api(wired):
    api, auth = wired
    await auth.register("a@b.com", "secret1", "Ada")
    return api


async def test_create_update_and_archive_project(api):
    project = await api.create_project(project_to_wire(name="Thesis", description="Chapter 3"))

    assert project.color == "#00E599"
    assert project.is_archived is False

    updated = await api.update_project(project.id, project_to_wire(name="Thesis v2", color="#112233"))
    assert updated.name == "Thesis v2"
    assert updated.color == "#112233"
    assert updated.description == "Chapter 3"

    await api.archive_project(project.id)

    assert await api.list_projects(include_archived=False) == []
    everything = await api.list_projects(include_archived=True)
    assert [p.id for p in everything] == [project.id]
    assert everything[0].is_archived is True


async def test_empty_project_update_is_rejected(api):
    project = await api.create_project(project_to_wire(name="Thesis"))

    with pytest.raises(ValidationError) as excinfo:
        await api.update_project(project.id, project_to_wire())
    assert excinfo.value.message == "No updates provided"


async def test_unknown_project_is_not_found(api):
    with pytest.raises(NotFoundError):
        await api.archive_project(str(uuid.uuid4()))


async def test_get_session_by_id_includes_project(api):
    project = await api.create_project(project_to_wire(name="Thesis", color="#123456"))
    end = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    created = await api.create_session(
        session_to_wire(
            SessionForm(name="Write", work_type="Deep Work", project_id=project.id),
            start_time=end - timedelta(minutes=25),
            end_time=end,
            duration_seconds=1500,
        )
    )

    fetched = await api.get_session(created.id)

    assert fetched.id == created.id
    assert fetched.duration_seconds == 1500
    assert fetched.project.id == project.id
    assert fetched.project.color == "#123456"


async def test_get_missing_session_is_not_found(api):
    with pytest.raises(NotFoundError) as excinfo:
        await api.get_session(str(uuid.uuid4()))

    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Session not found"
