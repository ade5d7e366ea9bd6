from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.security import issue_token
from ..crud.users import EmailAlreadyRegistered, authenticate, create_user, get_user
from ..db.session import get_db
from ..deps.auth import AuthContext, require_user
from ..schemas.auth import AuthResponse, LoginRequest, MeResponse, RegisterRequest, UserOut

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _user_to_schema(user, *, with_last_login: bool = False) -> UserOut:
    payload = UserOut.model_validate(user, from_attributes=True)
    if not with_last_login:
        payload.last_login = None
    return payload


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Create an account")
def api_register(payload: RegisterRequest, db: Session = Depends(get_db)):
    try:
        user = create_user(db, payload.model_dump())
    except EmailAlreadyRegistered as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("auth.registered", extra={"extra_data": {"user_id": user.id}})
    return AuthResponse(
        message="User registered successfully",
        user=_user_to_schema(user),
        token=issue_token(user.id, user.email),
    )


@router.post("/login", response_model=AuthResponse, summary="Exchange credentials for a token")
def api_login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    if user is None:
        logger.info("auth.login_failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return AuthResponse(
        message="Login successful",
        user=_user_to_schema(user),
        token=issue_token(user.id, user.email),
    )


@router.get("/me", response_model=MeResponse, summary="Current user profile")
def api_me(auth: AuthContext = Depends(require_user), db: Session = Depends(get_db)):
    user = get_user(db, auth.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return MeResponse(user=_user_to_schema(user, with_last_login=True))
