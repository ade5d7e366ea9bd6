"""Session completion workflow: timer -> submitter -> API -> local list."""

import json
from datetime import datetime, timezone

import anyio
import httpx
import pytest
from conftest import USER_JSON, scripted_client, session_json

from worktime.client import AuthState, Dashboard
from worktime.client.models import SessionForm
from worktime.client.storage import TOKEN_KEY, MemoryStore

pytestmark = pytest.mark.anyio

NOW = datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


def _fixed_clock():
    return NOW


def _run(dashboard, seconds):
    for _ in range(seconds):
        dashboard.timer.tick()


def _fill(dashboard, name="Write spec", work_type="Deep Work", **extra):
    dashboard.form = SessionForm(name=name, work_type=work_type, **extra)


def _signed_in_store():
    return MemoryStore({TOKEN_KEY: "tok-1", "user": dict(USER_JSON)})


def _scripted(handler, redirects=None):
    """Scripted server that also answers /me so the stored token resolves."""

    def route(request):
        if request.url.path == "/api/auth/me":
            return httpx.Response(200, json={"user": USER_JSON})
        return handler(request)

    return scripted_client(route, _signed_in_store(), redirects)


async def test_completed_session_is_persisted_and_listed_first(wired):
    api, auth = wired
    await auth.register("a@b.com", "secret1", "Ada")
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard, goal_seconds=3000)

    assert dashboard.start() == {}
    _run(dashboard, 1500)
    assert dashboard.timer.progress == 0.5
    session = await dashboard.stop()

    assert session.duration_seconds == 1500
    assert (session.end_time - session.start_time).total_seconds() == 1500
    assert session.end_time == NOW
    assert session.name == "Write spec"
    assert session.work_type == "Deep Work"
    assert dashboard.sessions[0].id == session.id
    assert dashboard.timer.is_running is False
    assert dashboard.timer.elapsed_seconds == 0

    listed, count = await api.list_sessions()
    assert count == 1
    assert listed[0].id == session.id


async def test_form_edits_while_running_do_not_change_the_session(wired):
    api, auth = wired
    await auth.register("a@b.com", "secret1", "Ada")
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard)
    dashboard.start()
    _run(dashboard, 60)

    dashboard.form.name = "Something else"
    session = await dashboard.stop()

    assert session.name == "Write spec"


async def test_start_with_empty_name_reports_field_error(wired):
    api, auth = wired
    dashboard = Dashboard(api, auth)
    _fill(dashboard, name="   ", work_type="")

    errors = dashboard.start()

    assert errors == {"name": "Session name is required", "work_type": "Please select a work type"}
    assert dashboard.timer.is_running is False


async def test_reset_clears_timer_and_form(wired):
    api, auth = wired
    dashboard = Dashboard(api, auth)
    _fill(dashboard, goal_seconds=1500)
    dashboard.start()
    _run(dashboard, 10)

    dashboard.reset()

    assert dashboard.timer.elapsed_seconds == 0
    assert dashboard.timer.goal_seconds == 0
    assert dashboard.timer.is_running is False
    assert dashboard.form == SessionForm()


async def test_server_error_leaves_timer_idle_and_reports():
    def handler(request):
        return httpx.Response(500, json={"error": "Internal server error"})

    api, auth, seen = _scripted(handler)
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard)
    dashboard.start()
    _run(dashboard, 30)

    assert await dashboard.stop() is None

    assert dashboard.error == "Internal server error"
    assert dashboard.timer.is_running is False
    assert dashboard.timer.elapsed_seconds == 0
    assert dashboard.sessions == []
    await api.aclose()


async def test_timeout_is_reported_not_retried():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    api, auth, seen = _scripted(handler)
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard)
    dashboard.start()
    _run(dashboard, 5)

    assert await dashboard.stop() is None

    assert dashboard.error == "The server took too long to respond"
    assert [r.url.path for r in seen].count("/api/sessions") == 1
    assert dashboard.timer.is_running is False
    await api.aclose()


async def test_wire_payload_uses_snake_case_and_one_clock_reading():
    def handler(request):
        return httpx.Response(201, json={"message": "ok", "session": session_json(projectId="p-1")})

    api, auth, seen = _scripted(handler)
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard, project_id="p-1", notes=" outline ")
    dashboard.start()
    _run(dashboard, 1500)
    await dashboard.stop()

    body = json.loads(seen[-1].content)
    assert body == {
        "name": "Write spec",
        "work_type": "Deep Work",
        "start_time": "2024-05-01T09:35:00.000Z",
        "end_time": "2024-05-01T10:00:00.000Z",
        "duration_seconds": 1500,
        "project_id": "p-1",
        "notes": "outline",
    }
    await api.aclose()


async def test_invalid_submission_never_hits_the_network():
    api, auth, seen = _scripted(lambda request: httpx.Response(201, json={"session": session_json()}))
    await auth.initialize()
    calls_before = len(seen)
    dashboard = Dashboard(api, auth, clock=_fixed_clock)

    result = await dashboard.submitter.complete(SessionForm(name="Write spec", work_type="Deep Work"), 0)

    assert result is None
    assert dashboard.submitter.field_errors == {"duration": "Session must last at least one second"}
    assert len(seen) == calls_before
    await api.aclose()


async def test_response_after_logout_is_discarded():
    holder = {}

    def handler(request):
        holder["auth"].logout()
        return httpx.Response(201, json={"message": "ok", "session": session_json()})

    api, auth, _ = _scripted(handler)
    holder["auth"] = auth
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard)
    dashboard.start()
    _run(dashboard, 1500)

    assert await dashboard.stop() is None

    assert auth.state is AuthState.UNAUTHENTICATED
    assert dashboard.sessions == []
    assert dashboard.timer.is_running is False
    await api.aclose()


async def test_unauthorized_during_submission_signs_out(redirects):
    api, auth, _ = _scripted(
        lambda request: httpx.Response(401, json={"error": "Invalid or expired token"}),
        redirects,
    )
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard)
    dashboard.start()
    _run(dashboard, 10)

    assert await dashboard.stop() is None

    assert auth.state is AuthState.UNAUTHENTICATED
    assert redirects == ["/login"]
    assert dashboard.error == "Invalid or expired token"
    assert dashboard.timer.is_running is False
    await api.aclose()


async def test_refresh_delete_and_logout(wired):
    api, auth = wired
    await auth.register("a@b.com", "secret1", "Ada")
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    for name in ("First", "Second"):
        _fill(dashboard, name=name)
        dashboard.start()
        _run(dashboard, 60)
        await dashboard.stop()

    loaded = await dashboard.load()
    assert len(loaded) == 2

    target = loaded[0].id
    assert await dashboard.delete(target) is True
    assert [s.id for s in dashboard.sessions] == [loaded[1].id]
    assert await dashboard.delete(target) is False
    assert dashboard.error == "Session not found"

    dashboard.logout()
    assert dashboard.sessions == []
    assert auth.state is AuthState.UNAUTHENTICATED


async def test_new_run_started_while_saving_keeps_counting():
    saving = anyio.Event()
    release = anyio.Event()

    async def handler(request):
        saving.set()
        await release.wait()
        return httpx.Response(201, json={"message": "ok", "session": session_json(durationSeconds=30)})

    api, auth, _ = _scripted(handler)
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard, name="First")
    dashboard.start()
    _run(dashboard, 30)
    saved = []

    async def stop_first():
        saved.append(await dashboard.stop())

    with anyio.fail_after(5):
        async with anyio.create_task_group() as tg:
            tg.start_soon(stop_first)
            await saving.wait()
            _fill(dashboard, name="Second")
            assert dashboard.start() == {}
            _run(dashboard, 7)
            release.set()

    assert saved[0].id == "s-1"
    assert dashboard.sessions[0].id == "s-1"
    assert dashboard.timer.is_running is True
    assert dashboard.timer.elapsed_seconds == 7
    await api.aclose()


async def test_forced_signout_discards_running_timer(redirects):
    def handler(request):
        return httpx.Response(401, json={"error": "Invalid or expired token"})

    api, auth, _ = _scripted(handler, redirects)
    await auth.initialize()
    dashboard = Dashboard(api, auth, clock=_fixed_clock)
    _fill(dashboard)
    dashboard.start()
    _run(dashboard, 12)

    assert await dashboard.load() is None

    assert auth.state is AuthState.UNAUTHENTICATED
    assert redirects == ["/login"]
    assert dashboard.timer.is_running is False
    assert dashboard.timer.elapsed_seconds == 0
    dashboard.timer.tick()
    assert dashboard.timer.elapsed_seconds == 0
    await api.aclose()


async def test_quick_goal_sets_form_goal(wired):
    api, auth = wired
    dashboard = Dashboard(api, auth)

    assert dashboard.choose_goal("25 min") == 1500
    assert dashboard.form.goal_seconds == 1500
    dashboard.choose_goal("None")
    assert dashboard.form.goal_seconds == 0
    with pytest.raises(KeyError):
        dashboard.choose_goal("2 days")
