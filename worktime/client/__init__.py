"""Client core: timer, session submission and the auth session state machine."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import httpx

from ..core.config import settings
from .auth import LOGIN_PATH, AuthSessionManager, AuthState
from .dashboard import Dashboard
from .errors import (
    ApiError,
    AuthError,
    ConflictError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from .http import ApiClient
from .storage import JsonFileStore, MemoryStore
from .submitter import SessionSubmitter
from .timer import AsyncioTicker, TimerController, TimerState, format_elapsed, progress


def build_client(
    base_url: str | None = None,
    *,
    state_path: Path | str | None = None,
    store: MemoryStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    on_login_required: Optional[Callable[[str], None]] = None,
) -> tuple[ApiClient, AuthSessionManager]:
    """Create an API client and the auth manager that owns its credential."""

    api = ApiClient(base_url, transport=transport)
    if store is None:
        store = JsonFileStore(state_path or settings.CLIENT_STATE_PATH)
    auth = AuthSessionManager(api, store, on_login_required=on_login_required)
    return api, auth


__all__ = [
    "ApiClient",
    "ApiError",
    "AsyncioTicker",
    "AuthError",
    "AuthSessionManager",
    "AuthState",
    "ConflictError",
    "Dashboard",
    "JsonFileStore",
    "LOGIN_PATH",
    "MemoryStore",
    "NotFoundError",
    "SessionSubmitter",
    "TimerController",
    "TimerState",
    "TransientError",
    "ValidationError",
    "build_client",
    "format_elapsed",
    "progress",
]
