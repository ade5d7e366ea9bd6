"""Auth session state machine for the client.

``Loading`` while a stored token is being resolved, then either
``Authenticated`` or ``Unauthenticated``. All mutation goes through
``initialize``, ``login``, ``register``, ``logout`` and
``handle_unauthorized``.

``epoch`` increases on every transition into or out of ``Authenticated``.
Asynchronous work records the epoch it started under and drops its result
when the epoch has moved on, so a late response can never revive a session
the user already left.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from .errors import ApiError, ValidationError
from .http import ApiClient
from .models import User, user_from_wire, user_to_storage, validate_credentials
from .storage import TOKEN_KEY, USER_KEY, MemoryStore

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


class AuthState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class AuthSessionManager:
    def __init__(
        self,
        api: ApiClient,
        store: MemoryStore,
        *,
        on_login_required: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._api = api
        self._store = store
        self._on_login_required = on_login_required
        self._listeners: list[Callable[[AuthState], None]] = []
        self._token: Optional[str] = None
        self._epoch = 0
        self.state = AuthState.LOADING
        self.user: Optional[User] = None
        self.error: Optional[str] = None
        api.bind(self)

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def is_loading(self) -> bool:
        return self.state is AuthState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    async def initialize(self) -> AuthState:
        """Resolve a stored token into a user, or fall back to signed out."""
        token = self._store.get(TOKEN_KEY)
        if not token:
            self._enter_unauthenticated()
            return self.state
        self._token = token
        epoch = self._epoch
        try:
            user = await self._api.me()
        except ApiError as exc:
            if epoch != self._epoch:
                # A login or logout completed while /me was in flight; it wins.
                return self.state
            logger.info("auth.stored_token_rejected", extra={"extra_data": {"reason": exc.message}})
            self._clear_credentials()
            self._enter_unauthenticated()
            return self.state
        if epoch != self._epoch:
            return self.state
        self._enter_authenticated(token, user)
        return self.state

    async def login(self, email: str, password: str) -> User:
        errors = validate_credentials(email, password)
        if errors:
            raise ValidationError("Please fix the highlighted fields", errors=errors)
        self.error = None
        try:
            token, user = await self._api.login(email, password)
        except ApiError as exc:
            self.error = exc.message or "Login failed"
            raise
        self._persist(token, user)
        self._enter_authenticated(token, user)
        logger.info("auth.login", extra={"extra_data": {"user_id": user.id}})
        return user

    async def register(self, email: str, password: str, name: str) -> User:
        errors = validate_credentials(email, password, name)
        if errors:
            raise ValidationError("Please fix the highlighted fields", errors=errors)
        self.error = None
        try:
            token, user = await self._api.register(email, password, name)
        except ApiError as exc:
            self.error = exc.message or "Registration failed"
            raise
        self._persist(token, user)
        self._enter_authenticated(token, user)
        logger.info("auth.register", extra={"extra_data": {"user_id": user.id}})
        return user

    def logout(self) -> None:
        self._clear_credentials()
        self._enter_unauthenticated()
        logger.info("auth.logout")

    def handle_unauthorized(self, epoch: int) -> bool:
        """React to a 401 on a request issued under ``epoch``.

        Returns ``True`` when the credential was cleared. A 401 belonging to an
        epoch that already ended is ignored.
        """
        if epoch != self._epoch:
            logger.info("auth.stale_unauthorized", extra={"extra_data": {"epoch": epoch, "current": self._epoch}})
            return False
        self._clear_credentials()
        self._enter_unauthenticated()
        logger.info("auth.session_expired")
        if self._on_login_required is not None:
            self._on_login_required(LOGIN_PATH)
        return True

    def subscribe(self, listener: Callable[[AuthState], None]) -> None:
        """Call ``listener(state)`` after every epoch change."""
        self._listeners.append(listener)

    def stored_user(self) -> Optional[User]:
        raw = self._store.get(USER_KEY)
        if not isinstance(raw, dict):
            return None
        return user_from_wire(raw)

    def _persist(self, token: str, user: User) -> None:
        self._store.set(TOKEN_KEY, token)
        self._store.set(USER_KEY, user_to_storage(user))

    def _clear_credentials(self) -> None:
        self._store.remove(TOKEN_KEY, USER_KEY)
        self._token = None
        self.user = None

    def _enter_authenticated(self, token: str, user: User) -> None:
        self._token = token
        self.user = user
        self.state = AuthState.AUTHENTICATED
        self._epoch += 1
        logger.info("auth.authenticated", extra={"extra_data": {"user_id": user.id, "epoch": self._epoch}})
        self._notify()

    def _enter_unauthenticated(self) -> None:
        if self.state is AuthState.UNAUTHENTICATED:
            return
        self._epoch += 1
        self.state = AuthState.UNAUTHENTICATED
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self.state)
