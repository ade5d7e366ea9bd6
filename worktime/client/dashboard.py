from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from .auth import AuthSessionManager, AuthState
from .http import ApiClient
from .models import GOAL_OPTIONS, SessionForm, WorkSession, validate_session_form
from .submitter import SessionSubmitter
from .timer import AsyncioTicker, TimerController

logger = logging.getLogger(__name__)


class Dashboard:
    """Wires the session form, the timer and the submitter together.

    The form is copied when the timer starts; edits made while running do not
    leak into the session being measured.
    """

    def __init__(
        self,
        api: ApiClient,
        auth: AuthSessionManager,
        *,
        ticker: Optional[AsyncioTicker] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.auth = auth
        self.form = SessionForm()
        self._active_form: Optional[SessionForm] = None
        self.timer = TimerController(
            validator=self._validate,
            on_complete=self._complete,
            on_reset=self._reset_form,
            ticker=ticker,
        )
        self.submitter = SessionSubmitter(api, auth, self.timer, clock=clock)
        auth.subscribe(self._auth_changed)

    @property
    def sessions(self) -> list[WorkSession]:
        return self.submitter.sessions

    @property
    def error(self) -> Optional[str]:
        return self.submitter.error

    def choose_goal(self, label: str) -> int:
        """Apply one of the quick goal picks by its label."""
        seconds = dict(GOAL_OPTIONS)[label]
        self.form.goal_seconds = seconds
        return seconds

    def start(self) -> dict[str, str]:
        if self.timer.is_running:
            return {}
        self.timer.set_goal(max(self.form.goal_seconds, 0))
        errors = self.timer.start()
        if not errors:
            self._active_form = replace(self.form)
        return errors

    async def stop(self) -> Optional[WorkSession]:
        return await self.timer.stop()

    def reset(self) -> None:
        self.timer.reset()

    async def load(self) -> Optional[list[WorkSession]]:
        return await self.submitter.refresh()

    async def delete(self, session_id: str) -> bool:
        return await self.submitter.delete(session_id)

    def logout(self) -> None:
        self.timer.reset()
        self.auth.logout()

    def _validate(self) -> dict[str, str]:
        return validate_session_form(self.form)

    async def _complete(self, elapsed_seconds: int) -> Optional[WorkSession]:
        form = self._active_form or self.form
        self._active_form = None
        return await self.submitter.complete(form, elapsed_seconds)

    def _auth_changed(self, state: AuthState) -> None:
        if state is not AuthState.AUTHENTICATED and self.timer.is_running:
            logger.info("dashboard.timer_discarded_on_signout")
            self.timer.reset()

    def _reset_form(self) -> None:
        self.form = SessionForm()
        self._active_form = None
