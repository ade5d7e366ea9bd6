from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .auth import AuthSessionManager
from .errors import ApiError
from .http import ApiClient
from .models import SessionForm, WorkSession, session_to_wire, validate_session_form
from .timer import TimerController

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionSubmitter:
    """Turns a stopped timer into a persisted session and keeps the local list.

    The list is most-recent-first and belongs to one auth epoch; it empties
    itself when the epoch changes. Session creation carries no idempotency
    key, so a user retrying after a timeout can end up with two rows.
    """

    def __init__(
        self,
        api: ApiClient,
        auth: AuthSessionManager,
        timer: TimerController,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._api = api
        self._auth = auth
        self._timer = timer
        self._clock = clock or _utcnow
        self._sessions: list[WorkSession] = []
        self._list_epoch = auth.epoch
        self.error: Optional[str] = None
        self.field_errors: dict[str, str] = {}
        self.submitting = False

    @property
    def sessions(self) -> list[WorkSession]:
        if self._list_epoch != self._auth.epoch:
            self._sessions = []
            self._list_epoch = self._auth.epoch
        return self._sessions

    async def complete(self, form: SessionForm, elapsed_seconds: int) -> Optional[WorkSession]:
        # The timer may start a new run while this one is in flight.
        run = self._timer.run_id
        self.error = None
        self.field_errors = validate_session_form(form)
        if elapsed_seconds < 1:
            self.field_errors["duration"] = "Session must last at least one second"
        if self.field_errors:
            self.error = "Session was not saved"
            self._timer.force_idle(run)
            return None

        epoch = self._auth.epoch
        now = self._clock()
        payload = session_to_wire(
            form,
            start_time=now - timedelta(seconds=elapsed_seconds),
            end_time=now,
            duration_seconds=elapsed_seconds,
        )
        self.submitting = True
        try:
            session = await self._api.create_session(payload)
        except ApiError as exc:
            self.error = exc.message or "Failed to save session"
            logger.warning("session.save_failed", extra={"extra_data": {"status": exc.status_code}})
            return None
        finally:
            self.submitting = False
            self._timer.force_idle(run)

        if epoch != self._auth.epoch:
            logger.info("session.discarded_stale", extra={"extra_data": {"session_id": session.id}})
            return None
        self.sessions.insert(0, session)
        logger.info("session.saved", extra={"extra_data": {"session_id": session.id}})
        return session

    async def refresh(
        self,
        *,
        limit: int | None = None,
        offset: int | None = None,
        work_type: str | None = None,
    ) -> Optional[list[WorkSession]]:
        epoch = self._auth.epoch
        try:
            sessions, _count = await self._api.list_sessions(limit=limit, offset=offset, work_type=work_type)
        except ApiError as exc:
            self.error = exc.message or "Failed to load sessions"
            return None
        if epoch != self._auth.epoch:
            return None
        self._sessions = list(sessions)
        self._list_epoch = epoch
        self.error = None
        return self._sessions

    async def delete(self, session_id: str) -> bool:
        epoch = self._auth.epoch
        try:
            await self._api.delete_session(session_id)
        except ApiError as exc:
            self.error = exc.message or "Failed to delete session"
            return False
        if epoch != self._auth.epoch:
            return False
        self._sessions = [s for s in self.sessions if s.id != session_id]
        return True
