"""CRUD helpers for user accounts."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.security import hash_password, verify_password
from ..models.user import User
from ..services.timecalc import utcnow_iso


class EmailAlreadyRegistered(ValueError):
    pass


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalars().first()


def create_user(db: Session, payload: dict) -> User:
    email = (payload.get("email") or "").strip().lower()
    if not email:
        raise ValueError("email is required")
    if get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegistered("Email already registered")
    user = User(
        email=email,
        password_hash=hash_password(payload["password"]),
        name=(payload.get("name") or "").strip(),
        created_at=utcnow_iso(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User | None:
    """Return the user for a correct email/password pair and stamp ``last_login``."""
    user = get_user_by_email(db, email.strip().lower())
    if user is None or not verify_password(password, user.password_hash):
        return None
    user.last_login = utcnow_iso()
    db.commit()
    db.refresh(user)
    return user
