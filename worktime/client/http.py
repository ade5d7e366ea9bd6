from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from ..core.config import settings
from .errors import TransientError, error_from_response
from .models import (
    Project,
    User,
    WorkSession,
    project_from_wire,
    session_from_wire,
    user_from_wire,
)

logger = logging.getLogger(__name__)


class CredentialSource(Protocol):
    """What the HTTP client needs from whoever owns the credential."""

    @property
    def token(self) -> Optional[str]: ...

    @property
    def epoch(self) -> int: ...

    def handle_unauthorized(self, epoch: int) -> bool: ...


class ApiClient:
    """Async client for the WorkTime REST API.

    Protected requests carry the current bearer token and remember the auth
    epoch they were issued under. A 401 on such a request is reported back to
    the credential owner together with that epoch. Requests are never retried.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout if timeout is not None else settings.CLIENT_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        self._credentials: CredentialSource | None = None

    def bind(self, credentials: CredentialSource) -> None:
        self._credentials = credentials

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        protected: bool = True,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers: dict[str, str] = {}
        epoch: int | None = None
        if protected and self._credentials is not None:
            epoch = self._credentials.epoch
            token = self._credentials.token
            if token:
                headers["Authorization"] = f"Bearer {token}"
        if params:
            params = {key: value for key, value in params.items() if value is not None}
        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.TimeoutException as exc:
            logger.warning("http.timeout", extra={"extra_data": {"method": method, "path": path}})
            raise TransientError("The server took too long to respond") from exc
        except httpx.TransportError as exc:
            logger.warning("http.unreachable", extra={"extra_data": {"method": method, "path": path}})
            raise TransientError("Could not reach the server") from exc

        if response.status_code == 401 and epoch is not None and self._credentials is not None:
            self._credentials.handle_unauthorized(epoch)
        if response.is_error:
            raise error_from_response(response)
        if not response.content:
            return {}
        return response.json()

    # ---- auth
    async def register(self, email: str, password: str, name: str) -> tuple[str, User]:
        body = await self.request(
            "POST",
            "/api/auth/register",
            protected=False,
            json={"email": email, "password": password, "name": name},
        )
        return body["token"], user_from_wire(body["user"])

    async def login(self, email: str, password: str) -> tuple[str, User]:
        body = await self.request(
            "POST",
            "/api/auth/login",
            protected=False,
            json={"email": email, "password": password},
        )
        return body["token"], user_from_wire(body["user"])

    async def me(self) -> User:
        body = await self.request("GET", "/api/auth/me")
        return user_from_wire(body["user"])

    # ---- sessions
    async def create_session(self, payload: dict[str, Any]) -> WorkSession:
        body = await self.request("POST", "/api/sessions", json=payload)
        return session_from_wire(body["session"])

    async def list_sessions(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        work_type: str | None = None,
    ) -> tuple[list[WorkSession], int]:
        body = await self.request(
            "GET",
            "/api/sessions",
            params={"limit": limit, "offset": offset, "work_type": work_type},
        )
        return [session_from_wire(item) for item in body.get("sessions", [])], int(body.get("count", 0))

    async def get_session(self, session_id: str) -> WorkSession:
        body = await self.request("GET", f"/api/sessions/{session_id}")
        return session_from_wire(body["session"])

    async def delete_session(self, session_id: str) -> None:
        await self.request("DELETE", f"/api/sessions/{session_id}")

    # ---- projects
    async def create_project(self, payload: dict[str, Any]) -> Project:
        body = await self.request("POST", "/api/projects", json=payload)
        return project_from_wire(body["project"])

    async def list_projects(self, include_archived: bool = True) -> list[Project]:
        body = await self.request(
            "GET",
            "/api/projects",
            params={"include_archived": "true" if include_archived else "false"},
        )
        return [project_from_wire(item) for item in body.get("projects", [])]

    async def update_project(self, project_id: str, payload: dict[str, Any]) -> Project:
        body = await self.request("PUT", f"/api/projects/{project_id}", json=payload)
        return project_from_wire(body["project"])

    async def archive_project(self, project_id: str) -> None:
        await self.request("DELETE", f"/api/projects/{project_id}")
