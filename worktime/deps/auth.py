from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

from ..core.security import decode_token
from ..middlewares import principal_ctx_var


class AuthContext:
    def __init__(self, *, user_id: str, email: str) -> None:
        self.user_id = user_id
        self.email = email


def _unauthorized(detail: str) -> None:
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


async def require_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> AuthContext:
    """Resolve the bearer token into the caller's identity or answer 401."""

    scheme, credentials = get_authorization_scheme_param(authorization)
    if not authorization or scheme.lower() != "bearer" or not credentials:
        _unauthorized("No token provided")
    try:
        payload = decode_token(credentials)
    except ValueError:
        _unauthorized("Invalid or expired token")
    _set_principal(request, f"user:{payload.userId}")
    return AuthContext(user_id=payload.userId, email=payload.email)


def current_user_id(auth: AuthContext = Depends(require_user)) -> str:
    return auth.user_id


__all__ = ["AuthContext", "require_user", "current_user_id"]
